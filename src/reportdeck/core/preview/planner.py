"""Batch previews for a whole report.

Sections are rendered strictly one after another in report order. The
running section number counts every chart-bearing section the scan reaches,
including ones skipped as duplicates, so a slide's number reflects its
position in the full report. The scan stops as soon as ``max_previews``
records exist; sections past that point are never numbered.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from reportdeck.core.sections import is_numbered, report_sections, section_type

from .dispatch import SlideRenderDispatcher, default_dispatcher
from .records import PreviewBatch, PreviewRecord

logger = logging.getLogger(__name__)

DEFAULT_MAX_PREVIEWS = 10


async def generate_all_previews(
    report: Any,
    *,
    one_per_type: bool = True,
    max_previews: int = DEFAULT_MAX_PREVIEWS,
    dispatcher: SlideRenderDispatcher | None = None,
) -> PreviewBatch:
    dispatcher = dispatcher or default_dispatcher()
    sections = report_sections(report)
    previews: list[PreviewRecord] = []
    seen_types: set[str | None] = set()
    section_number = 0

    for i, section in enumerate(sections):
        if len(previews) >= max_previews:
            break
        tag = section_type(section)
        numbered = is_numbered(tag)

        if numbered:
            section_number += 1

        if one_per_type and tag in seen_types:
            continue

        preview = await dispatcher.generate_slide_preview(section, section_number=section_number)
        if preview is None:
            continue

        previews.append(
            replace(preview, slide_index=i, section_number=section_number if numbered else None)
        )
        seen_types.add(tag)

    logger.info("[Preview] Generated %d of %d slides", len(previews), len(sections))
    return PreviewBatch(
        previews=previews,
        metadata={
            "totalSlides": len(sections),
            "previewedSlides": len(previews),
            "onePerType": one_per_type,
            "generatedAt": datetime.now(timezone.utc).isoformat(),
        },
    )
