"""Slide preview rendering.

Public API:
- `generate_slide_preview(section, *, section_number=1)` -> PreviewRecord | None
- `generate_all_previews(report, *, one_per_type=True, max_previews=10)` -> PreviewBatch

    from reportdeck.core.preview import generate_all_previews
"""

from __future__ import annotations

from .canvas import SLIDE_HEIGHT, SLIDE_WIDTH, SlideCanvas, create_slide_canvas, inches_to_pixels
from .dispatch import SECTION_RENDERERS, SlideRenderDispatcher, default_dispatcher, generate_slide_preview
from .planner import generate_all_previews
from .records import PreviewBatch, PreviewRecord

__all__ = [
    "SECTION_RENDERERS",
    "SLIDE_HEIGHT",
    "SLIDE_WIDTH",
    "PreviewBatch",
    "PreviewRecord",
    "SlideCanvas",
    "SlideRenderDispatcher",
    "create_slide_canvas",
    "default_dispatcher",
    "generate_all_previews",
    "generate_slide_preview",
    "inches_to_pixels",
]
