"""Pillow drawing surface for slide previews.

Slides are 16:9 widescreen, 13.33in x 7.5in rendered at 96 DPI. Layout
positions in the template config are in inches; convert with
``inches_to_pixels``. Text is drawn at its baseline, so callers pass
``top + font_size`` as the y coordinate.
"""

from __future__ import annotations

import asyncio
import base64
import io
import logging
from contextlib import contextmanager
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterator

import requests
from PIL import Image, ImageDraw, ImageFont

from reportdeck.core.colors import hex_to_rgb
from reportdeck.core.settings import http_timeout

logger = logging.getLogger(__name__)

SLIDE_WIDTH = 1280
SLIDE_HEIGHT = 720
DPI = 96

_FONT_CANDIDATES: dict[tuple[bool, bool], list[str]] = {
    (False, False): [
        "/Library/Fonts/Arial.ttf",
        "C:/Windows/Fonts/arial.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    ],
    (True, False): [
        "/Library/Fonts/Arial Bold.ttf",
        "C:/Windows/Fonts/arialbd.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
        "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    ],
    (False, True): [
        "/Library/Fonts/Arial Italic.ttf",
        "C:/Windows/Fonts/ariali.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Italic.ttf",
        "/usr/share/fonts/truetype/dejavu/DejaVuSans-Oblique.ttf",
    ],
    (True, True): [
        "/Library/Fonts/Arial Bold Italic.ttf",
        "C:/Windows/Fonts/arialbi.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-BoldItalic.ttf",
        "/usr/share/fonts/truetype/dejavu/DejaVuSans-BoldOblique.ttf",
    ],
}


def inches_to_pixels(inches: float) -> int:
    return round(float(inches) * DPI)


@lru_cache(maxsize=64)
def get_font(size: int, bold: bool = False, italic: bool = False) -> Any:
    for candidate in _FONT_CANDIDATES[(bold, italic)]:
        if Path(candidate).exists():
            try:
                return ImageFont.truetype(candidate, size)
            except OSError:
                continue
    return ImageFont.load_default(size=size)


class SlideCanvas:
    """One slide-sized RGB image plus its draw context."""

    def __init__(self, width: int = SLIDE_WIDTH, height: int = SLIDE_HEIGHT, background: str = "FFFFFF"):
        self.width = width
        self.height = height
        self.image = Image.new("RGB", (width, height), hex_to_rgb(background))
        self.draw = ImageDraw.Draw(self.image)
        self.font = get_font(12)
        self.closed = False

    # --- state ---

    def set_font(self, size: float, weight: str = "normal", style: str = "normal") -> None:
        self.font = get_font(int(size), weight == "bold", style == "italic")

    def measure(self, text: str) -> float:
        return self.draw.textlength(text, font=self.font)

    # --- primitives ---

    def fill_rect(self, x: float, y: float, w: float, h: float, color: str) -> None:
        if w <= 0 or h <= 0:
            return
        self.draw.rectangle([x, y, x + w - 1, y + h - 1], fill=hex_to_rgb(color))

    def fill_ellipse(self, x: float, y: float, w: float, h: float, color: str) -> None:
        if w <= 0 or h <= 0:
            return
        self.draw.ellipse([x, y, x + w, y + h], fill=hex_to_rgb(color))

    def text(self, text: str, x: float, y: float, color: str, align: str = "left") -> None:
        anchor = {"left": "ls", "center": "ms", "right": "rs"}.get(align, "ls")
        self.draw.text((x, y), text, font=self.font, fill=hex_to_rgb(color), anchor=anchor)

    def wrapped_text(
        self,
        text: str,
        x: float,
        y: float,
        max_width: float,
        line_height: float,
        color: str,
        *,
        align: str = "left",
        max_lines: int | None = None,
    ) -> float:
        """Word-wrap ``text`` into ``max_width``; returns the y after the last line.

        When ``max_lines`` cuts the text short the last kept line ends in "...".
        """
        if not text:
            return y
        words = str(text).split(" ")
        lines: list[str] = []
        line = ""
        for i, word in enumerate(words):
            candidate = f"{line}{word} "
            if self.measure(candidate) > max_width and i > 0:
                if max_lines is not None and len(lines) >= max_lines - 1:
                    lines.append(line.strip() + "...")
                    line = ""
                    break
                lines.append(line.strip())
                line = f"{word} "
            else:
                line = candidate
        if line.strip() and (max_lines is None or len(lines) < max_lines):
            lines.append(line.strip())

        current_y = y
        for ln in lines:
            if align == "center":
                draw_x = x + (max_width - self.measure(ln)) / 2
            elif align == "right":
                draw_x = x + max_width - self.measure(ln)
            else:
                draw_x = x
            self.text(ln, draw_x, current_y, color)
            current_y += line_height
        return current_y

    def bullet_points(
        self,
        items: list[str],
        x: float,
        y: float,
        max_width: float,
        line_height: float,
        color: str,
        *,
        bullet_char: str = "\u2022",
        bullet_indent: int = 20,
    ) -> float:
        current_y = y
        for item in items:
            if not item:
                continue
            self.text(bullet_char, x, current_y, color)
            current_y = self.wrapped_text(
                item, x + bullet_indent, current_y, max_width - bullet_indent, line_height, color
            )
            current_y += line_height * 0.3
        return current_y

    def paste_image(self, img: Image.Image, x: float, y: float, w: float, h: float) -> None:
        resized = img.convert("RGBA").resize((max(1, int(w)), max(1, int(h))))
        self.image.paste(resized, (int(x), int(y)), resized)

    # --- output ---

    def to_png_bytes(self) -> bytes:
        buf = io.BytesIO()
        self.image.save(buf, format="PNG")
        return buf.getvalue()

    def to_png_base64(self) -> str:
        return base64.b64encode(self.to_png_bytes()).decode("ascii")

    def close(self) -> None:
        if not self.closed:
            self.image.close()
            self.closed = True


@contextmanager
def create_slide_canvas(background: str = "FFFFFF") -> Iterator[SlideCanvas]:
    """Yield a fresh canvas; it is closed on exit whatever happens inside."""
    canvas = SlideCanvas(background=background)
    try:
        yield canvas
    finally:
        canvas.close()


def _fetch_bytes(url: str) -> bytes:
    resp = requests.get(url, timeout=http_timeout())
    resp.raise_for_status()
    return resp.content


async def fetch_image_bytes(src: str | None) -> bytes | None:
    """Raw bytes of a ``data:`` URI or http(s) URL; ``None`` on failure."""
    if not src:
        return None
    try:
        if src.startswith("data:"):
            _, _, payload = src.partition(",")
            return base64.b64decode(payload)
        return await asyncio.to_thread(_fetch_bytes, src)
    except (requests.RequestException, ValueError) as e:
        logger.error("[Canvas] Failed to fetch image: %s", e)
        return None


async def load_image_safe(src: str | None) -> Image.Image | None:
    """Load an image from a ``data:`` URI or http(s) URL; ``None`` on failure."""
    raw = await fetch_image_bytes(src)
    if raw is None:
        return None
    try:
        img = Image.open(io.BytesIO(raw))
        img.load()
        return img
    except OSError as e:
        logger.error("[Canvas] Failed to load image: %s", e)
        return None
