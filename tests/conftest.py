# tests/conftest.py
"""
Pytest configuration and fixtures.
Adds src/ to sys.path so `import reportdeck` works without installing.
"""

import io
import json
import sys
from pathlib import Path

import pytest

project_root = Path(__file__).parent.parent
src_root = project_root / "src"
if str(src_root) not in sys.path:
    sys.path.insert(0, str(src_root))

from PIL import Image  # noqa: E402

from reportdeck.core.preview import canvas as canvas_mod  # noqa: E402
from reportdeck.core.preview import charts as charts_mod  # noqa: E402
from reportdeck.core.template import DEFAULT_TEMPLATE_PATH, TemplateConfigStore, set_default_store  # noqa: E402


def tiny_png(color=(255, 0, 0)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (4, 4), color).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture(autouse=True)
def no_network(monkeypatch):
    """Chart and image fetches never leave the process."""
    calls = {"charts": [], "images": []}

    def fake_post_chart(body):
        calls["charts"].append(body)
        return tiny_png((0, 159, 177))

    def fake_fetch_bytes(url):
        calls["images"].append(url)
        return tiny_png()

    monkeypatch.setattr(charts_mod, "_post_chart", fake_post_chart)
    monkeypatch.setattr(canvas_mod, "_fetch_bytes", fake_fetch_bytes)
    return calls


@pytest.fixture(autouse=True)
def template_store():
    """Fresh default template store per test."""
    store = TemplateConfigStore(DEFAULT_TEMPLATE_PATH)
    previous = set_default_store(store)
    yield store
    set_default_store(previous)


@pytest.fixture
def partial_palette_store(tmp_path):
    """Default layouts, but only the core colours and the body font."""
    config = json.loads(DEFAULT_TEMPLATE_PATH.read_text(encoding="utf-8"))
    config["colors"] = {k: config["colors"][k] for k in ("primary", "text", "white")}
    config["fonts"] = {"body": config["fonts"]["body"]}
    path = tmp_path / "partial_template.json"
    path.write_text(json.dumps(config), encoding="utf-8")
    store = TemplateConfigStore(path)
    set_default_store(store)
    return store


def _block(text):
    return {"_type": "block", "children": [{"_type": "span", "text": text}]}


@pytest.fixture
def chart_section():
    return {
        "_type": "contentSection",
        "title": "Equities",
        "subtitle": "Still constructive",
        "sectionTheme": "blue",
        "content": [_block("Earnings beat"), _block("Valuations stretched")],
        "hasChart": True,
        "chartConfig": {
            "chartType": "line",
            "chartTitle": "MSCI World",
            "chartData": "date,us,eu\n2024-01,100,90\n2024-02,110,95\n2024-03,n/a,97",
            "chartSeries": [
                {"label": "US", "dataColumn": "us", "colour": "copper"},
                {"label": "EU", "dataColumn": "eu"},
            ],
        },
        "chartSource": "Bloomberg",
    }


@pytest.fixture
def sample_report(chart_section):
    return {
        "_id": "report-1",
        "title": "Global Market Outlook",
        "author": "Investment Team",
        "publicationDate": "2026-01-15",
        "sections": [
            {"_type": "titleSection", "heading": "Global Market Outlook", "subheading": "Q1 2026"},
            chart_section,
            dict(chart_section, title="Bonds", sectionTheme="mint"),
            {"_type": "navigationSection", "title": "In This Report", "cardImages": [{"title": "Equities"}, {"title": "Bonds"}]},
        ],
    }


@pytest.fixture
def full_report(sample_report):
    sections = list(sample_report["sections"]) + [
        {"_type": "headerSection", "title": "Macro", "image": {"asset": {"url": "https://cdn.example.com/macro.png"}}},
        {
            "_type": "chartInsightsSection",
            "title": "Rates",
            "insights": ["Cuts priced in", {"text": "Curve steepening"}],
            "insightsColor": "#abc",
        },
        {
            "_type": "timelineSection",
            "title": "Key dates",
            "items": [
                {"number": "1", "header": "Fed", "body": "March meeting"},
                {"header": "ECB", "body": "April meeting"},
            ],
        },
    ]
    return dict(sample_report, sections=sections)
