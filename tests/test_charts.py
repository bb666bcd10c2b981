import base64
import logging

import pytest
import requests

from reportdeck.core.preview import charts
from reportdeck.core.preview.charts import (
    CHART_COLORS,
    build_chart_js_config,
    chart_payload,
    parse_chart_csv,
    render_chart_png,
)

_REAL_POST_CHART = charts._post_chart


def test_chart_payload_requires_data(chart_section):
    assert chart_payload({"_type": "contentSection"}) is None
    assert chart_payload({"chartConfig": {"chartType": "bar"}}) is None

    payload = chart_payload(chart_section)
    assert payload["chartType"] == "line"
    assert len(payload["chartSeries"]) == 2


def test_parse_chart_csv_pads_short_rows():
    headers, rows = parse_chart_csv(" date, a ,b\n2024,1\n\n2025,2,3\n")
    assert headers == ["date", "a", "b"]
    assert rows == [{"date": "2024", "a": "1", "b": ""}, {"date": "2025", "a": "2", "b": "3"}]


def test_parse_chart_csv_caps_rows():
    text = "x,y\n" + "\n".join(f"{i},{i}" for i in range(charts.MAX_DATA_POINTS + 20))
    _, rows = parse_chart_csv(text)
    assert len(rows) == charts.MAX_DATA_POINTS


def test_config_uses_series_colours_and_palette(chart_section):
    config = build_chart_js_config(chart_payload(chart_section))

    assert config["type"] == "line"
    assert config["data"]["labels"] == ["2024-01", "2024-02", "2024-03"]
    us, eu = config["data"]["datasets"]
    assert us["label"] == "US"
    assert us["borderColor"] == "#AC5359"
    assert us["data"] == [100.0, 110.0, None]
    assert eu["borderColor"] == "#" + CHART_COLORS[1]


def test_config_defaults_series_to_all_value_columns():
    config = build_chart_js_config({"chartData": "q,a,b\nQ1,1,2", "chartType": "stackedArea"})
    datasets = config["data"]["datasets"]
    assert [d["label"] for d in datasets] == ["a", "b"]
    assert config["type"] == "line"
    assert datasets[0]["fill"] is True
    assert datasets[0]["backgroundColor"].endswith("40")
    assert config["options"]["scales"]["y"]["stacked"] is True


def test_config_drops_bad_series_with_warning(caplog):
    payload = {
        "chartData": "q,a\nQ1,1",
        "chartSeries": [{"label": "Ghost", "dataColumn": "zz"}, {"label": "Blank"}, {"label": "A", "dataColumn": "a"}],
    }
    with caplog.at_level(logging.WARNING, logger="reportdeck.core.preview.charts"):
        config = build_chart_js_config(payload)
    assert [d["label"] for d in config["data"]["datasets"]] == ["A"]
    assert "missing column" in caplog.text
    assert "no dataColumn" in caplog.text


def test_config_dark_mode_text_color():
    config = build_chart_js_config({"chartData": "q,a\nQ1,1", "xAxisLabel": "Quarter"}, dark_mode=True)
    x_axis = config["options"]["scales"]["x"]
    assert x_axis["title"] == {"display": True, "text": "Quarter", "color": "#FFFFFF"}


def test_config_none_without_rows():
    assert build_chart_js_config({"chartData": "only,header"}) is None


@pytest.mark.asyncio
async def test_render_chart_png_posts_body(no_network, chart_section):
    data = await render_chart_png(chart_payload(chart_section), width=640, height=400)
    assert base64.b64decode(data).startswith(b"\x89PNG")
    body = no_network["charts"][-1]
    assert (body["width"], body["height"], body["format"]) == (640, 400, "png")


@pytest.mark.asyncio
async def test_render_chart_png_failure_is_none(monkeypatch, caplog, chart_section):
    def boom(body):
        raise requests.ConnectionError("offline")

    monkeypatch.setattr(charts, "_post_chart", boom)
    with caplog.at_level(logging.ERROR, logger="reportdeck.core.preview.charts"):
        assert await render_chart_png(chart_payload(chart_section)) is None
    assert "Chart rendering failed" in caplog.text


@pytest.mark.asyncio
async def test_render_chart_png_non_image_response(monkeypatch, chart_section):
    class FakeResponse:
        status_code = 500
        headers = {"content-type": "application/json"}
        content = b"{}"

    monkeypatch.setattr(charts, "_post_chart", _REAL_POST_CHART)
    monkeypatch.setattr(charts.requests, "post", lambda *a, **kw: FakeResponse())
    assert await render_chart_png(chart_payload(chart_section)) is None


@pytest.mark.parametrize(
    "chart_type, series",
    [(5, []), ({"kind": "bar"}, None), ("", 7), (None, {"label": "A"}), ("column", ["a", None])],
)
def test_config_tolerates_malformed_type_and_series(chart_type, series):
    config = build_chart_js_config({"chartData": "q,a,b\nQ1,1,2", "chartType": chart_type, "chartSeries": series})
    expected = "bar" if chart_type == "column" else "line"
    assert config["type"] == expected
    assert [d["label"] for d in config["data"]["datasets"]] == ["a", "b"]


@pytest.mark.asyncio
async def test_render_chart_png_malformed_type_does_not_raise(no_network):
    data = await render_chart_png({"chartData": "a,b\n1,2", "chartSeries": [], "chartType": 5})
    assert data is not None
    assert no_network["charts"][-1]["chart"]["type"] == "line"


@pytest.mark.asyncio
async def test_render_chart_png_config_error_is_none(monkeypatch, caplog, no_network):
    def broken(payload, *, dark_mode=False):
        raise TypeError("bad chart data")

    monkeypatch.setattr(charts, "build_chart_js_config", broken)
    with caplog.at_level(logging.ERROR, logger="reportdeck.core.preview.charts"):
        assert await render_chart_png({"chartData": "a,b\n1,2"}) is None
    assert "Chart config could not be built" in caplog.text
    assert no_network["charts"] == []
