"""reportdeck: slide previews and deck export for content-store reports.

Keep this module a thin re-export layer:

    from reportdeck import generate_all_previews, load_template_config
"""

from __future__ import annotations

from reportdeck.core.colors import get_theme_color, normalize_color
from reportdeck.core.errors import ConfigLoadError, ReportDeckError
from reportdeck.core.preview import (
    PreviewBatch,
    PreviewRecord,
    SlideRenderDispatcher,
    generate_all_previews,
    generate_slide_preview,
)
from reportdeck.core.template import (
    TemplateConfigStore,
    clear_config_cache,
    get_color,
    get_font_config,
    get_slide_layout,
    load_template_config,
)

__version__ = "0.1.0"

__all__ = [
    "ConfigLoadError",
    "PreviewBatch",
    "PreviewRecord",
    "ReportDeckError",
    "SlideRenderDispatcher",
    "TemplateConfigStore",
    "clear_config_cache",
    "generate_all_previews",
    "generate_slide_preview",
    "get_color",
    "get_font_config",
    "get_slide_layout",
    "get_theme_color",
    "load_template_config",
    "normalize_color",
]
