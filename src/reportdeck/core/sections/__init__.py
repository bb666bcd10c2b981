"""Report section data helpers.

    from reportdeck.core.sections import SectionType, NUMBERED_TYPES, report_sections
"""

from __future__ import annotations

from .section_types import (
    LAYOUT_KEYS,
    NUMBERED_TYPES,
    SectionType,
    insight_texts,
    is_numbered,
    portable_text_to_lines,
    report_sections,
    section_type,
)

__all__ = [
    "LAYOUT_KEYS",
    "NUMBERED_TYPES",
    "SectionType",
    "insight_texts",
    "is_numbered",
    "portable_text_to_lines",
    "report_sections",
    "section_type",
]
