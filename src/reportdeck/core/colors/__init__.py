"""Color resolution.

    from reportdeck.core.colors import normalize_color, get_theme_color
"""

from __future__ import annotations

from .color_utils import (
    DEFAULT_COLOR,
    NAMED_COLORS,
    get_theme_color,
    hex_to_rgb,
    is_dark_background,
    normalize_color,
)

__all__ = [
    "DEFAULT_COLOR",
    "NAMED_COLORS",
    "get_theme_color",
    "hex_to_rgb",
    "is_dark_background",
    "normalize_color",
]
