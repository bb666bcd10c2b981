"""Color normalization helpers shared by the preview and export renderers.

All hex values are 6-digit uppercase strings without the ``#`` marker,
e.g. ``"009FB1"``.
"""

from __future__ import annotations

import re
from typing import Any, Mapping

DEFAULT_COLOR = "009FB1"

NAMED_COLORS: dict[str, str] = {
    # theme
    "blue": "009FB1",
    "green": "51BBB4",
    "teal": "61C3D7",
    "cyan": "61C3D7",
    "orange": "F49F7B",
    "brown": "A37767",
    "mint": "76BCA3",
    # standard
    "white": "FFFFFF",
    "black": "000000",
    "red": "FF0000",
    "yellow": "FFFF00",
    "gray": "808080",
    "grey": "808080",
    # brand
    "primaryGreen": "3E7274",
    "coastBlue": "3D748F",
    "copper": "AC5359",
    "lightGreen": "76BCA3",
    "darkBlue": "132728",
}

_NAMED_LOWER: dict[str, str] = {k.lower(): v for k, v in NAMED_COLORS.items()}

_HEX6_RE = re.compile(r"#?([0-9A-Fa-f]{6})")
_HEX3_RE = re.compile(r"#?([0-9A-Fa-f]{3})")

MINT_THEME_COLOR = "76BCA3"


def normalize_color(color: Any, default_color: str = DEFAULT_COLOR) -> str:
    """Normalize a color token to 6-digit uppercase hex.

    Accepts ``#RRGGBB`` / ``RRGGBB``, the 3-digit shorthand, or a name from
    ``NAMED_COLORS`` (case-insensitive). Anything else yields ``default_color``.
    Never raises.
    """
    if not color or not isinstance(color, str):
        return default_color
    token = color.strip()

    m = _HEX6_RE.fullmatch(token)
    if m:
        return m.group(1).upper()

    m = _HEX3_RE.fullmatch(token)
    if m:
        r, g, b = m.group(1)
        return f"{r}{r}{g}{g}{b}{b}".upper()

    named = _NAMED_LOWER.get(token.lower())
    if named:
        return named

    return default_color


def get_theme_color(theme_name: Any, config: Mapping[str, Any]) -> str:
    """Resolve a section theme name against the template config palette."""
    colors = config["colors"]
    theme_map = {
        "blue": colors.get("primary"),
        "green": colors.get("teal"),
        "teal": colors.get("cyan"),
        "orange": colors.get("orange"),
        "brown": colors.get("brown"),
        "mint": MINT_THEME_COLOR,
        "none": colors.get("white"),
    }
    resolved = theme_map.get(theme_name) if isinstance(theme_name, str) else None
    return resolved or colors["primary"]


def hex_to_rgb(hex_color: str) -> tuple[int, int, int]:
    h = normalize_color(hex_color)
    return (int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16))


def is_dark_background(hex_color: Any) -> bool:
    """True when the color needs light text on top of it.

    Missing or short values count as dark.
    """
    if not isinstance(hex_color, str):
        return True
    h = hex_color.strip().lstrip("#")
    if len(h) < 6:
        return True
    try:
        r, g, b = int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)
    except ValueError:
        return True
    luminance = (0.299 * r + 0.587 * g + 0.114 * b) / 255
    return luminance < 0.5
