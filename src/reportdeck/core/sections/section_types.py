"""Section type tags and helpers for reading content-store report data.

Sections arrive as plain dicts discriminated by ``_type``. Nothing here
mutates them.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Mapping


class SectionType(str, Enum):
    TITLE = "titleSection"
    NAVIGATION = "navigationSection"
    HEADER = "headerSection"
    CONTENT = "contentSection"
    CHART_INSIGHTS = "chartInsightsSection"
    TIMELINE = "timelineSection"


# Chart-bearing sections get a running display number.
NUMBERED_TYPES: frozenset[str] = frozenset(
    {SectionType.CONTENT.value, SectionType.CHART_INSIGHTS.value}
)

# type tag -> key under template config "slideTypes"
LAYOUT_KEYS: Mapping[str, str] = {
    SectionType.TITLE.value: "title",
    SectionType.NAVIGATION.value: "tableOfContents",
    SectionType.HEADER.value: "sectionDivider",
    SectionType.CONTENT.value: "chartSection",
    SectionType.CHART_INSIGHTS.value: "insightsSection",
    SectionType.TIMELINE.value: "timelineSection",
}


def section_type(section: Any) -> str | None:
    if not isinstance(section, Mapping):
        return None
    tag = section.get("_type")
    return tag if isinstance(tag, str) else None


def is_numbered(tag: str | None) -> bool:
    return tag in NUMBERED_TYPES


def report_sections(report: Any) -> list[Any]:
    """Return the ordered section list of a report ([] when absent)."""
    if not isinstance(report, Mapping):
        return []
    sections = report.get("sections")
    if not isinstance(sections, list):
        return []
    return sections


def portable_text_to_lines(blocks: Any) -> list[str]:
    """Flatten rich-text blocks into plain lines.

    Only ``_type == "block"`` entries are kept; children ``text`` values are
    joined and empty lines dropped.
    """
    if not isinstance(blocks, list):
        return []
    lines: list[str] = []
    for block in blocks:
        if not isinstance(block, Mapping) or block.get("_type") != "block":
            continue
        children = block.get("children") or []
        text = "".join(str(c.get("text") or "") for c in children if isinstance(c, Mapping))
        if text:
            lines.append(text)
    return lines


def insight_texts(insights: Any) -> list[str]:
    # items are either plain strings or {"text": ...} objects
    if not isinstance(insights, list):
        return []
    out: list[str] = []
    for item in insights:
        if isinstance(item, str):
            out.append(item)
        elif isinstance(item, Mapping):
            out.append(str(item.get("text") or ""))
    return out
