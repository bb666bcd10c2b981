"""Export a report to an editable .pptx deck with python-pptx.

Same section-type dispatch and numbering as the preview pipeline, but every
known section becomes a slide: unknown types are skipped with a warning, and
a builder failure leaves a red error note on its slide instead of aborting
the export.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable, Mapping

from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.enum.shapes import MSO_AUTO_SHAPE_TYPE
from pptx.enum.text import MSO_VERTICAL_ANCHOR, PP_ALIGN
from pptx.util import Inches, Pt

from reportdeck.core.colors import get_theme_color, is_dark_background, normalize_color
from reportdeck.core.preview.canvas import fetch_image_bytes
from reportdeck.core.preview.charts import chart_payload, render_chart_png
from reportdeck.core.sections import (
    LAYOUT_KEYS,
    SectionType,
    insight_texts,
    is_numbered,
    portable_text_to_lines,
    report_sections,
    section_type,
)
from reportdeck.core.template import get_color, get_font_config, load_template_config

logger = logging.getLogger(__name__)

SLIDE_WIDTH_IN = 13.333
SLIDE_HEIGHT_IN = 7.5
BLANK_LAYOUT = 6
DEFAULT_TITLE = "GMO Report"
DEFAULT_AUTHOR = "BNP Paribas Asset Management"

Builder = Callable[[Any, Mapping[str, Any], dict[str, Any]], Awaitable[None]]


def _rgb(hex_color: str) -> RGBColor:
    return RGBColor.from_string(normalize_color(hex_color))


def _face(role: str) -> str:
    font = get_font_config(role) or {}
    return font.get("face") or "Arial"


def _set_background(slide: Any, hex_color: str) -> None:
    fill = slide.background.fill
    fill.solid()
    fill.fore_color.rgb = _rgb(hex_color)


def _box(layout: Mapping[str, Any], key: str, default: Mapping[str, Any]) -> Mapping[str, Any]:
    value = layout.get(key)
    return value if isinstance(value, Mapping) else default


def _add_text(
    slide: Any,
    text: str,
    box: Mapping[str, Any],
    *,
    size: float,
    color: str,
    face: str = "Arial",
    bold: bool = False,
    italic: bool = False,
    align: PP_ALIGN | None = None,
    middle: bool = False,
) -> Any:
    shape = slide.shapes.add_textbox(Inches(box["x"]), Inches(box["y"]), Inches(box["w"]), Inches(box["h"]))
    tf = shape.text_frame
    tf.word_wrap = True
    if middle:
        tf.vertical_anchor = MSO_VERTICAL_ANCHOR.MIDDLE
    p = tf.paragraphs[0]
    if align is not None:
        p.alignment = align
    run = p.add_run()
    run.text = str(text)
    font = run.font
    font.size = Pt(size)
    font.bold = bold
    font.italic = italic
    font.name = face
    font.color.rgb = _rgb(color)
    return shape


def _add_lines(slide: Any, lines: list[str], box: Mapping[str, Any], *, size: float, color: str, face: str = "Arial") -> None:
    shape = slide.shapes.add_textbox(Inches(box["x"]), Inches(box["y"]), Inches(box["w"]), Inches(box["h"]))
    tf = shape.text_frame
    tf.word_wrap = True
    for idx, line in enumerate(lines):
        p = tf.paragraphs[0] if idx == 0 else tf.add_paragraph()
        run = p.add_run()
        run.text = f"• {line}"
        run.font.size = Pt(size)
        run.font.name = face
        run.font.color.rgb = _rgb(color)


def _add_shape(slide: Any, kind: MSO_AUTO_SHAPE_TYPE, box: Mapping[str, Any], color: str) -> Any:
    shp = slide.shapes.add_shape(kind, Inches(box["x"]), Inches(box["y"]), Inches(box["w"]), Inches(box["h"]))
    shp.fill.solid()
    shp.fill.fore_color.rgb = _rgb(color)
    shp.line.fill.background()
    return shp


async def _add_picture(slide: Any, src: str | None, box: Mapping[str, Any]) -> None:
    raw = await fetch_image_bytes(src)
    if raw is None:
        return
    slide.shapes.add_picture(io.BytesIO(raw), Inches(box["x"]), Inches(box["y"]), Inches(box["w"]), Inches(box["h"]))


async def _add_chart(slide: Any, section: Mapping[str, Any], layout: Mapping[str, Any], ctx: dict[str, Any], text_color: str, dark: bool) -> None:
    payload = chart_payload(section)
    if payload is None:
        return
    title_box = _box(layout, "chartTitle", {"x": 3.35, "y": 1.57, "w": 4.44, "h": 0.2})
    _add_text(
        slide, str(section["chartConfig"].get("chartTitle") or "Chart"), title_box,
        size=title_box.get("fontSize", 12), color=text_color, face=_face("title"), bold=True,
    )
    box = _box(layout, "chart", {"x": 3.33, "y": 1.93, "w": 7.61, "h": 3.94})
    png = await render_chart_png(payload, width=round(box["w"] * 96), height=round(box["h"] * 96), dark_mode=dark)
    if png:
        await _add_picture(slide, f"data:image/png;base64,{png}", box)


def _add_source(slide: Any, section: Mapping[str, Any], layout: Mapping[str, Any], ctx: dict[str, Any], color: str) -> None:
    source = section.get("chartSource") or (section.get("chartConfig") or {}).get("chartSource")
    if not source:
        return
    box = _box(layout, "source", {"x": 0.5, "y": 6.14, "w": 12.47, "h": 0.29})
    _add_text(
        slide, f"Source: {source}", box, size=box.get("fontSize", 10), color=color,
        face=_face("source"), italic=True,
    )


async def build_title_slide(slide: Any, section: Mapping[str, Any], ctx: dict[str, Any]) -> None:
    layout = ctx["layout"]
    _set_background(slide, normalize_color(section.get("backgroundColor"), get_color("primary")))

    box = _box(layout, "title", {"x": 0.5, "y": 3.0, "w": 7.6, "h": 1.5})
    _add_text(
        slide, section.get("heading") or section.get("title") or DEFAULT_TITLE, box,
        size=box.get("fontSize", 48), color=get_color("white"), face=_face("title"),
        bold=box.get("bold", True) is not False, middle=True,
    )
    subtitle = section.get("subheading") or section.get("subtitle")
    if subtitle:
        box = _box(layout, "subtitle", {"x": 0.5, "y": 4.67, "w": 4.0, "h": 0.4})
        _add_text(slide, subtitle, box, size=box.get("fontSize", 16), color=get_color("white"), face=_face("subtitle"), middle=True)

    logo = ((section.get("companyLogo") or {}).get("asset") or {}).get("url")
    if logo:
        await _add_picture(slide, logo, {"x": 10.5, "y": 0.5, "w": 2.5, "h": 0.8})


async def build_toc_slide(slide: Any, section: Mapping[str, Any], ctx: dict[str, Any]) -> None:
    layout = ctx["layout"]
    _set_background(slide, get_color("white"))

    box = _box(layout, "title", {"x": 0.5, "y": 0.29, "w": 12.3, "h": 0.39})
    _add_text(
        slide, section.get("title") or "In This Report", box, size=box.get("fontSize", 24),
        color=get_color("text"), face=_face("title"), bold=True,
    )

    cl = _box(layout, "cards", {})
    palette = cl.get("colors") or [get_color("primary")]
    width, spacing = cl.get("cardWidth", 2.25), cl.get("spacing", 0.26)
    for i, card in enumerate((section.get("cardImages") or [])[:5]):
        x = cl.get("startX", 0.5) + i * (width + spacing)
        _add_shape(
            slide, MSO_AUTO_SHAPE_TYPE.RECTANGLE,
            {"x": x, "y": cl.get("startY", 1.7), "w": width, "h": cl.get("cardHeight", 5.0)},
            palette[i % len(palette)],
        )
        _add_text(
            slide, f"{i + 1:02d}", {"x": x, "y": cl.get("numberY", 2.02), "w": width, "h": 0.6},
            size=cl.get("numberSize", 32), color=get_color("white"), face=_face("sectionNumber"),
            bold=True, align=PP_ALIGN.CENTER,
        )
        if card.get("title"):
            _add_text(
                slide, card["title"], {"x": x + 0.1, "y": cl.get("blurbY", 2.95), "w": width - 0.2, "h": cl.get("blurbHeight", 1.58)},
                size=11, color=get_color("white"), face=_face("body"),
            )


async def build_divider_slide(slide: Any, section: Mapping[str, Any], ctx: dict[str, Any]) -> None:
    layout = ctx["layout"]
    fallback = (layout.get("background") or {}).get("fillColor") or get_color("cyan")
    _set_background(slide, normalize_color(section.get("backgroundColor"), fallback))

    box = _box(layout, "sectionName", {"x": 0.46, "y": 2.7, "w": 6.2, "h": 0.65})
    _add_text(
        slide, section.get("title") or "Section Title", box, size=box.get("fontSize", 48),
        color=get_color("white"), face=_face("title"), bold=True, middle=True,
    )
    if section.get("subtitle"):
        sub = {"x": box["x"], "y": box["y"] + box["h"] + 0.2, "w": box["w"], "h": 0.4}
        _add_text(slide, section["subtitle"], sub, size=20, color=get_color("white"), face=_face("subtitle"))

    url = ((section.get("image") or {}).get("asset") or {}).get("url")
    if url:
        await _add_picture(slide, url, _box(layout, "image", {"x": 7.24, "y": 0.88, "w": 5.74, "h": 5.74}))


async def build_chart_slide(slide: Any, section: Mapping[str, Any], ctx: dict[str, Any]) -> None:
    layout, config = ctx["layout"], ctx["config"]
    if section.get("sectionTheme"):
        bg = get_theme_color(section["sectionTheme"], config)
    else:
        bg = normalize_color(section.get("backgroundColor"), get_color("primary"))
    _set_background(slide, bg)
    dark = is_dark_background(bg)
    text_color = get_color("white") if dark else get_color("text")

    _add_shape(slide, MSO_AUTO_SHAPE_TYPE.OVAL, _box(layout, "sectionNumber", {"x": 0.5, "y": 0.36, "w": 0.72, "h": 0.72}), get_color("white"))
    nt = _box(layout, "numberText", {"x": 0.5, "y": 0.42, "w": 0.72, "h": 0.64})
    _add_text(
        slide, f"{ctx['section_number'] or 1:02d}", nt, size=nt.get("fontSize", 32), color=bg,
        face=_face("title"), bold=True, align=PP_ALIGN.CENTER, middle=True,
    )

    box = _box(layout, "title", {"x": 1.21, "y": 0.43, "w": 11.86, "h": 0.36})
    _add_text(slide, section.get("title") or "", box, size=box.get("fontSize", 24), color=text_color, face=_face("title"), bold=True)
    if section.get("subtitle"):
        box = _box(layout, "subtitle", {"x": 1.24, "y": 0.85, "w": 11.86, "h": 0.24})
        _add_text(slide, section["subtitle"], box, size=box.get("fontSize", 16), color=text_color, face=_face("subtitle"))

    body = portable_text_to_lines(section.get("content"))
    if body:
        box = _box(_box(layout, "leftPanel", {}), "content", {"x": 0.5, "y": 3.48, "w": 2.5, "h": 2.69, "fontSize": 10})
        _add_lines(slide, body, box, size=box.get("fontSize", 10), color=text_color, face=_face("body"))

    if section.get("hasChart"):
        await _add_chart(slide, section, layout, ctx, text_color, dark)
    _add_source(slide, section, layout, ctx, text_color)


async def build_insights_slide(slide: Any, section: Mapping[str, Any], ctx: dict[str, Any]) -> None:
    layout = ctx["layout"]
    _set_background(slide, get_color("white"))

    panel = _box(layout, "insightsPanel", {"x": 9.79, "y": 0, "w": 3.54, "h": 7.5, "dividerX": 9.53, "dividerW": 0.26})
    _add_shape(slide, MSO_AUTO_SHAPE_TYPE.RECTANGLE, panel, normalize_color(section.get("insightsColor"), get_color("primary")))
    _add_shape(
        slide, MSO_AUTO_SHAPE_TYPE.RECTANGLE,
        {"x": panel.get("dividerX", 9.53), "y": 0, "w": panel.get("dividerW", 0.26), "h": SLIDE_HEIGHT_IN},
        get_color("white"),
    )

    box = _box(layout, "title", {"x": 0.5, "y": 0.29, "w": 12.33, "h": 0.39})
    _add_text(slide, section.get("title") or "", box, size=box.get("fontSize", 24), color=get_color("text"), face=_face("title"), bold=True)
    if section.get("subtitle"):
        box = _box(layout, "subtitle", {"x": 0.5, "y": 0.81, "w": 5.77, "h": 0.23})
        _add_text(slide, section["subtitle"], box, size=box.get("fontSize", 16), color=get_color("textSecondary"), face=_face("subtitle"))

    box = _box(layout, "insightsTitle", {"x": 10.28, "y": 1.46, "w": 1.14, "h": 0.2})
    _add_text(slide, "Key insights", box, size=box.get("fontSize", 12), color=get_color("white"), face=_face("title"), bold=True)
    texts = insight_texts(section.get("insights"))
    if texts:
        box = _box(layout, "insightsList", {"x": 10.28, "y": 1.78, "w": 3.28, "h": 3.28})
        _add_lines(slide, texts, box, size=11, color=get_color("white"), face=_face("body"))

    await _add_chart(slide, section, layout, ctx, get_color("text"), False)
    _add_source(slide, section, layout, ctx, get_color("textSecondary"))


async def build_timeline_slide(slide: Any, section: Mapping[str, Any], ctx: dict[str, Any]) -> None:
    layout = ctx["layout"]
    _set_background(slide, get_color("white"))

    box = _box(layout, "title", {"x": 0.5, "y": 0.29, "w": 12.33, "h": 0.39})
    _add_text(slide, section.get("title") or "", box, size=box.get("fontSize", 24), color=get_color("text"), face=_face("title"), bold=True)
    if section.get("subtitle"):
        box = _box(layout, "subtitle", {"x": 0.5, "y": 0.81, "w": 5.77, "h": 0.23})
        _add_text(slide, section["subtitle"], box, size=box.get("fontSize", 16), color=get_color("textSecondary"), face=_face("subtitle"))

    item_layouts = layout.get("items") or (layout.get("timeline") or {}).get("items") or []
    item_colors = [get_color("primary"), get_color("teal"), get_color("cyan")]
    for i, item in enumerate((section.get("items") or [])[: min(3, len(item_layouts))]):
        il = item_layouts[i]
        size = il.get("numberSize", 0.94)
        circle = {"x": il["numberX"], "y": il["numberY"], "w": size, "h": size}
        _add_shape(slide, MSO_AUTO_SHAPE_TYPE.OVAL, circle, item_colors[i % len(item_colors)])
        _add_text(
            slide, str(item.get("number") or i + 1), circle, size=32, color=get_color("white"),
            face=_face("sectionNumber"), bold=True, align=PP_ALIGN.CENTER, middle=True,
        )
        content = {"x": il["contentX"], "y": il["contentY"], "w": il.get("contentW", 3.4), "h": 0.35}
        if item.get("header"):
            _add_text(slide, item["header"], content, size=14, color=get_color("text"), face=_face("title"), bold=True)
        if item.get("body"):
            body_box = dict(content, y=il["contentY"] + 0.4, h=il.get("contentH", 1.52))
            _add_text(slide, item["body"], body_box, size=11, color=get_color("textSecondary"), face=_face("body"))


SECTION_BUILDERS: Mapping[str, Builder] = {
    SectionType.TITLE.value: build_title_slide,
    SectionType.NAVIGATION.value: build_toc_slide,
    SectionType.HEADER.value: build_divider_slide,
    SectionType.CONTENT.value: build_chart_slide,
    SectionType.CHART_INSIGHTS.value: build_insights_slide,
    SectionType.TIMELINE.value: build_timeline_slide,
}


def _error_note(slide: Any, message: str) -> None:
    _add_text(slide, f"Error generating slide: {message}", {"x": 0.5, "y": 3, "w": 12, "h": 1}, size=14, color="FF0000")


async def export_presentation(report: Mapping[str, Any], out_path: Path | None = None) -> bytes:
    """Build the deck for ``report``; returns the .pptx bytes (also written to ``out_path``)."""
    if not report:
        raise ValueError("report is required")
    config = load_template_config()

    prs = Presentation()
    prs.slide_width = Inches(SLIDE_WIDTH_IN)
    prs.slide_height = Inches(SLIDE_HEIGHT_IN)
    props = prs.core_properties
    props.title = report.get("title") or DEFAULT_TITLE
    props.author = report.get("author") or DEFAULT_AUTHOR
    props.subject = "Global Market Outlook"

    section_number = 0
    for section in report_sections(report):
        tag = section_type(section)
        builder = SECTION_BUILDERS.get(tag) if tag is not None else None
        if builder is None:
            logger.warning("Unknown section type: %s, skipping", tag)
            continue
        if is_numbered(tag):
            section_number += 1

        layout_key = LAYOUT_KEYS[tag]
        layout = config["slideTypes"].get(layout_key)
        if not layout:
            logger.warning("No layout found for slide type: %s, using defaults", layout_key)

        slide = prs.slides.add_slide(prs.slide_layouts[BLANK_LAYOUT])
        ctx = {"layout": layout or {}, "config": config, "section_number": section_number}
        try:
            await builder(slide, section, ctx)
        except Exception as e:
            logger.error("Error generating %s slide: %s", tag, e)
            _error_note(slide, str(e))

    buf = io.BytesIO()
    prs.save(buf)
    data = buf.getvalue()
    if out_path is not None:
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_bytes(data)
    return data


async def export_section(section: Mapping[str, Any]) -> bytes:
    """Single-section deck, handy for checking one slide type."""
    return await export_presentation({"title": "Section Preview", "sections": [section]})
