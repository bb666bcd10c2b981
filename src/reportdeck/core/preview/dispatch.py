"""Single-slide preview: pick the renderer for a section's type tag and run it.

Failures stay per slide. An unknown type tag or any exception raised while
rendering is logged and reported as ``None``; nothing is raised to the caller.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Awaitable, Callable, ContextManager, Mapping

from reportdeck.core.sections import SectionType, section_type

from .canvas import SLIDE_HEIGHT, SLIDE_WIDTH, SlideCanvas, create_slide_canvas
from .records import PreviewRecord
from .renderers import (
    render_chart_slide,
    render_divider_slide,
    render_insights_slide,
    render_timeline_slide,
    render_title_slide,
    render_toc_slide,
)

logger = logging.getLogger(__name__)

Renderer = Callable[..., Awaitable[None]]

SECTION_RENDERERS: Mapping[str, Renderer] = MappingProxyType(
    {
        SectionType.TITLE.value: render_title_slide,
        SectionType.NAVIGATION.value: render_toc_slide,
        SectionType.HEADER.value: render_divider_slide,
        SectionType.CONTENT.value: render_chart_slide,
        SectionType.CHART_INSIGHTS.value: render_insights_slide,
        SectionType.TIMELINE.value: render_timeline_slide,
    }
)

# Only this type's renderer places a numbered badge.
NUMBER_ARG_TYPE = SectionType.CONTENT.value


class SlideRenderDispatcher:
    def __init__(
        self,
        renderers: Mapping[str, Renderer] | None = None,
        *,
        canvas_factory: Callable[[], ContextManager[SlideCanvas]] = create_slide_canvas,
    ):
        table = SECTION_RENDERERS if renderers is None else renderers
        self._renderers: Mapping[str, Renderer] = MappingProxyType(dict(table))
        self._canvas_factory = canvas_factory

    @property
    def renderers(self) -> Mapping[str, Renderer]:
        return self._renderers

    def supports(self, tag: str | None) -> bool:
        return tag in self._renderers

    async def generate_slide_preview(self, section: Any, *, section_number: int | None = 1) -> PreviewRecord | None:
        if section_number is None:
            section_number = 1
        tag = section_type(section)

        renderer = self._renderers.get(tag) if tag is not None else None
        if renderer is None:
            logger.warning("[Preview] Unknown section type: %s", tag)
            return None

        try:
            with self._canvas_factory() as canvas:
                if tag == NUMBER_ARG_TYPE:
                    await renderer(canvas, section, section_number)
                else:
                    await renderer(canvas, section)
                image_data = canvas.to_png_base64()
        except Exception as e:
            logger.error("[Preview] Failed to render %s: %s", tag, e)
            return None

        return PreviewRecord(
            slide_type=tag,
            image_data=image_data,
            dimensions={"width": SLIDE_WIDTH, "height": SLIDE_HEIGHT},
        )


_default_dispatcher = SlideRenderDispatcher()


def default_dispatcher() -> SlideRenderDispatcher:
    return _default_dispatcher


async def generate_slide_preview(section: Any, *, section_number: int | None = 1) -> PreviewRecord | None:
    """Render one section with the built-in renderer table."""
    return await _default_dispatcher.generate_slide_preview(section, section_number=section_number)
