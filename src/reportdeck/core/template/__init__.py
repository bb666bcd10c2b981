"""Template configuration store.

Module-level helpers act on a process-wide default store:

    from reportdeck.core.template import load_template_config, get_slide_layout
"""

from __future__ import annotations

from .template_loader import (
    DEFAULT_TEMPLATE_PATH,
    ENV_TEMPLATE_CONFIG,
    REQUIRED_SLIDE_TYPES,
    TemplateConfigStore,
    clear_config_cache,
    default_store,
    get_color,
    get_font_config,
    get_slide_layout,
    load_template_config,
    resolve_template_path,
    set_default_store,
)

__all__ = [
    "DEFAULT_TEMPLATE_PATH",
    "ENV_TEMPLATE_CONFIG",
    "REQUIRED_SLIDE_TYPES",
    "TemplateConfigStore",
    "clear_config_cache",
    "default_store",
    "get_color",
    "get_font_config",
    "get_slide_layout",
    "load_template_config",
    "resolve_template_path",
    "set_default_store",
]
