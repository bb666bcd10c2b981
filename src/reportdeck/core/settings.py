"""Environment-driven settings.

REPORTDECK_TEMPLATE_CONFIG  template JSON path (see core.template)
REPORTDECK_QUICKCHART_URL   chart image endpoint
REPORTDECK_HTTP_TIMEOUT     seconds for outbound HTTP calls
"""

from __future__ import annotations

import os

DEFAULT_QUICKCHART_URL = "https://quickchart.io/chart"
DEFAULT_HTTP_TIMEOUT = 20.0


def quickchart_url() -> str:
    return os.environ.get("REPORTDECK_QUICKCHART_URL") or DEFAULT_QUICKCHART_URL


def http_timeout() -> float:
    raw = os.environ.get("REPORTDECK_HTTP_TIMEOUT")
    if not raw:
        return DEFAULT_HTTP_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        return DEFAULT_HTTP_TIMEOUT
    return value if value > 0 else DEFAULT_HTTP_TIMEOUT
