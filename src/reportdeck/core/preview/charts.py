"""Chart images for preview slides.

Builds a Chart.js config from a section's ``chartConfig`` and renders it to
PNG through a QuickChart-compatible endpoint. Rendering failures are logged
and reported as ``None`` so a slide can still be drawn without its chart.
"""

from __future__ import annotations

import asyncio
import base64
import csv
import io
import logging
from typing import Any, Mapping

import requests

from reportdeck.core.colors import normalize_color
from reportdeck.core.settings import http_timeout, quickchart_url

logger = logging.getLogger(__name__)

MAX_DATA_POINTS = 500

# Palette used for static (PDF/preview) renders
CHART_COLORS = ["E86E58", "3E7274", "C9A227", "3D748F", "3A7862", "CCCCCC"]

_CHART_TYPES = {
    "line": "line",
    "column": "bar",
    "bar": "bar",
    "area": "line",
    "stackedColumn": "bar",
    "stackedArea": "line",
}


def chart_payload(section: Mapping[str, Any]) -> dict[str, Any] | None:
    """Pull the chart fields out of a section; ``None`` when it has no data."""
    cfg = section.get("chartConfig")
    if not isinstance(cfg, Mapping) or not cfg.get("chartData"):
        return None
    return {
        "chartData": cfg.get("chartData"),
        "chartSeries": cfg.get("chartSeries") or [],
        "chartType": cfg.get("chartType") or "line",
        "xAxisLabel": cfg.get("xAxisLabel"),
        "yAxisLabel": cfg.get("yAxisLabel"),
        "yAxisFormat": cfg.get("yAxisFormat"),
    }


def _to_number(value: str | None) -> float | None:
    if value is None:
        return None
    try:
        return float(value.strip())
    except ValueError:
        return None


def parse_chart_csv(text: str) -> tuple[list[str], list[dict[str, str]]]:
    """Return (headers, rows). First row is the header, first column the x axis."""
    reader = csv.reader(io.StringIO(str(text).strip()))
    rows = [r for r in reader if r]
    if not rows:
        return [], []
    headers = [h.strip() for h in rows[0]]
    records = [
        {h: (r[i].strip() if i < len(r) else "") for i, h in enumerate(headers)}
        for r in rows[1 : MAX_DATA_POINTS + 1]
    ]
    return headers, records


def _series_for(payload: Mapping[str, Any], headers: list[str]) -> list[dict[str, Any]]:
    series = payload.get("chartSeries")
    configured = [s for s in series if isinstance(s, Mapping)] if isinstance(series, list) else []
    if not configured:
        return [{"label": h, "dataColumn": h} for h in headers[1:]]
    valid: list[dict[str, Any]] = []
    for s in configured:
        column = s.get("dataColumn")
        if not column:
            logger.warning('Chart series "%s" has no dataColumn specified', s.get("label"))
            continue
        if column not in headers:
            logger.warning(
                'Chart series "%s" references missing column "%s". Available columns: %s',
                s.get("label"),
                column,
                ", ".join(headers),
            )
            continue
        valid.append(dict(s))
    return valid


def build_chart_js_config(payload: Mapping[str, Any], *, dark_mode: bool = False) -> dict[str, Any] | None:
    headers, records = parse_chart_csv(payload.get("chartData") or "")
    if not records:
        return None

    chart_type = payload.get("chartType")
    if not isinstance(chart_type, str) or not chart_type:
        chart_type = "line"
    is_stacked = "stacked" in chart_type
    is_area = "area" in chart_type.lower()
    text_color = "#FFFFFF" if dark_mode else "#5F5F5F"

    x_key = headers[0]
    labels = [row[x_key] for row in records]
    datasets = []
    for i, s in enumerate(_series_for(payload, headers)):
        color = "#" + normalize_color(s.get("colour"), CHART_COLORS[i % len(CHART_COLORS)])
        datasets.append(
            {
                "label": s.get("label") or s["dataColumn"],
                "data": [_to_number(row.get(s["dataColumn"])) for row in records],
                "backgroundColor": color + "40" if is_area else color,
                "borderColor": color,
                "borderWidth": 2,
                "fill": is_area,
                "tension": 0.4,
            }
        )

    def _axis(label: Any) -> dict[str, Any]:
        return {
            "stacked": is_stacked,
            "title": {"display": bool(label), "text": label or "", "color": text_color},
            "ticks": {"color": text_color, "font": {"size": 11}},
            "grid": {"color": "#E8E8E8"},
        }

    return {
        "type": _CHART_TYPES.get(chart_type, "line"),
        "data": {"labels": labels, "datasets": datasets},
        "options": {
            "responsive": False,
            "maintainAspectRatio": False,
            "animation": False,
            "indexAxis": "y" if chart_type == "bar" else "x",
            "plugins": {
                "legend": {"position": "top", "align": "start", "labels": {"color": text_color}},
                "title": {"display": False},
            },
            "scales": {"x": _axis(payload.get("xAxisLabel")), "y": _axis(payload.get("yAxisLabel"))},
        },
    }


def _post_chart(body: dict[str, Any]) -> bytes:
    resp = requests.post(quickchart_url(), json=body, timeout=http_timeout())
    content_type = resp.headers.get("content-type", "")
    if "image/png" not in content_type:
        raise RuntimeError(f"QuickChart error: {resp.status_code}")
    return resp.content


async def render_chart_png(
    payload: Mapping[str, Any],
    *,
    width: int = 800,
    height: int = 500,
    dark_mode: bool = False,
) -> str | None:
    """Render a chart payload to base64 PNG, or ``None`` if it cannot be drawn."""
    try:
        config = build_chart_js_config(payload, dark_mode=dark_mode)
    except (TypeError, ValueError) as e:
        logger.error("[Preview] Chart config could not be built: %s", e)
        return None
    if config is None:
        return None
    body = {
        "chart": config,
        "width": width,
        "height": height,
        "backgroundColor": "transparent",
        "format": "png",
        "devicePixelRatio": 2,
    }
    try:
        png = await asyncio.to_thread(_post_chart, body)
    except (requests.RequestException, RuntimeError) as e:
        logger.error("[Preview] Chart rendering failed: %s", e)
        return None
    return base64.b64encode(png).decode("ascii")
