"""Per-section-type preview renderers.

Each renderer is ``async (canvas, section) -> None`` and draws in place; the
chart section renderer also takes the running section number. Layout comes
from the template config. Palette entries go through ``get_color`` so a
partial palette falls back to the text colour. Renderers raise on malformed
section data and leave error isolation to the dispatcher.
"""

from __future__ import annotations

from typing import Any, Mapping

from reportdeck.core.colors import get_theme_color, is_dark_background, normalize_color
from reportdeck.core.sections import insight_texts, portable_text_to_lines
from reportdeck.core.template import get_color, load_template_config

from .canvas import SLIDE_HEIGHT, SLIDE_WIDTH, SlideCanvas, inches_to_pixels as px, load_image_safe
from .charts import chart_payload, render_chart_png


def _layout(config: Mapping[str, Any], key: str) -> dict[str, Any]:
    layout = config["slideTypes"].get(key)
    if not layout:
        raise KeyError(f"no layout for slide type {key!r}")
    return layout


def _line(canvas: SlideCanvas, text: str, box: Mapping[str, Any], color: str, *, weight: str = "normal", style: str = "normal") -> None:
    size = box.get("fontSize", 12)
    canvas.set_font(size, weight, style)
    canvas.text(text, px(box["x"]), px(box["y"]) + size, color)


async def _draw_chart(canvas: SlideCanvas, section: Mapping[str, Any], layout: Mapping[str, Any], text_color: str, *, dark_mode: bool) -> None:
    payload = chart_payload(section)
    if payload is None:
        return
    chart_title = str(section["chartConfig"].get("chartTitle") or "Chart")
    _line(canvas, chart_title, layout["chartTitle"], text_color, weight="bold")

    box = layout["chart"]
    w, h = px(box["w"]), px(box["h"])
    png = await render_chart_png(payload, width=w, height=h, dark_mode=dark_mode)
    if png:
        img = await load_image_safe(f"data:image/png;base64,{png}")
        if img is not None:
            canvas.paste_image(img, px(box["x"]), px(box["y"]), w, h)


def _draw_source(canvas: SlideCanvas, section: Mapping[str, Any], layout: Mapping[str, Any], color: str) -> None:
    cfg = section.get("chartConfig") or {}
    source = section.get("chartSource") or cfg.get("chartSource")
    if source:
        _line(canvas, f"Source: {source}", layout["source"], color, style="italic")


async def render_title_slide(canvas: SlideCanvas, section: Mapping[str, Any]) -> None:
    config = load_template_config()
    layout = _layout(config, "title")

    canvas.fill_rect(0, 0, SLIDE_WIDTH, SLIDE_HEIGHT, normalize_color(section.get("backgroundColor"), get_color("primary")))

    if section.get("heading"):
        box = layout["title"]
        canvas.set_font(box["fontSize"], "bold")
        canvas.wrapped_text(
            section["heading"], px(box["x"]), px(box["y"]) + box["fontSize"], px(box["w"]),
            box["fontSize"] * 1.2, get_color("white"),
        )

    if section.get("subheading"):
        box = layout["subtitle"]
        canvas.set_font(box["fontSize"])
        canvas.wrapped_text(
            section["subheading"], px(box["x"]), px(box["y"]) + box["fontSize"], px(box["w"]),
            box["fontSize"] * 1.3, get_color("white"),
        )


async def render_toc_slide(canvas: SlideCanvas, section: Mapping[str, Any]) -> None:
    config = load_template_config()
    layout = _layout(config, "tableOfContents")

    canvas.fill_rect(0, 0, SLIDE_WIDTH, SLIDE_HEIGHT, get_color("white"))
    _line(canvas, section.get("title") or "In This Report", layout["title"], get_color("text"), weight="bold")

    cards = section.get("cardImages") or []
    cl = layout["cards"]
    for i, card in enumerate(cards[:5]):
        x = px(cl["startX"] + i * (cl["cardWidth"] + cl["spacing"]))
        y = px(cl["startY"])
        w = px(cl["cardWidth"])
        h = px(cl["cardHeight"])
        canvas.fill_rect(x, y, w, h, normalize_color(cl["colors"][i % len(cl["colors"])]))

        canvas.set_font(cl["numberSize"], "bold")
        canvas.text(f"{i + 1:02d}", x + w / 2, px(cl["numberY"]) + cl["numberSize"], get_color("white"), align="center")

        if card.get("title"):
            canvas.set_font(11)
            canvas.wrapped_text(card["title"], x + 10, px(cl["blurbY"]) + 11, w - 20, 14, get_color("white"), max_lines=5)


async def render_divider_slide(canvas: SlideCanvas, section: Mapping[str, Any]) -> None:
    config = load_template_config()
    layout = _layout(config, "sectionDivider")

    canvas.fill_rect(0, 0, SLIDE_WIDTH, SLIDE_HEIGHT, normalize_color(section.get("backgroundColor"), get_color("cyan")))

    box = layout["sectionName"]
    canvas.set_font(box["fontSize"], "bold")
    canvas.wrapped_text(
        section.get("title") or "", px(box["x"]), px(box["y"]) + box["fontSize"], px(box["w"]),
        box["fontSize"] * 1.1, get_color("white"),
    )

    url = ((section.get("image") or {}).get("asset") or {}).get("url")
    if url:
        img = await load_image_safe(url)
        if img is not None:
            ib = layout["image"]
            canvas.paste_image(img, px(ib["x"]), px(ib["y"]), px(ib["w"]), px(ib["h"]))


async def render_chart_slide(canvas: SlideCanvas, section: Mapping[str, Any], section_number: int = 1) -> None:
    config = load_template_config()
    layout = _layout(config, "chartSection")

    if section.get("sectionTheme"):
        bg = get_theme_color(section["sectionTheme"], config)
    else:
        bg = normalize_color(section.get("backgroundColor"), get_color("primary"))
    canvas.fill_rect(0, 0, SLIDE_WIDTH, SLIDE_HEIGHT, bg)
    dark = is_dark_background(bg)
    text_color = get_color("white") if dark else get_color("text")

    badge = layout["sectionNumber"]
    canvas.fill_ellipse(px(badge["x"]), px(badge["y"]), px(badge["w"]), px(badge["h"]), get_color("white"))
    nt = layout["numberText"]
    canvas.set_font(nt["fontSize"], "bold")
    canvas.text(f"{section_number:02d}", px(nt["x"]) + px(nt["w"]) / 2, px(nt["y"]) + nt["fontSize"], bg, align="center")

    _line(canvas, section.get("title") or "", layout["title"], text_color, weight="bold")
    if section.get("subtitle"):
        _line(canvas, section["subtitle"], layout["subtitle"], text_color)

    body = portable_text_to_lines(section.get("content"))
    if body:
        box = layout["leftPanel"]["content"]
        canvas.set_font(box["fontSize"])
        canvas.bullet_points(body, px(box["x"]), px(box["y"]) + box["fontSize"], px(box["w"]), box["fontSize"] * 1.5, text_color)

    if section.get("hasChart"):
        await _draw_chart(canvas, section, layout, text_color, dark_mode=dark)

    _draw_source(canvas, section, layout, text_color)


async def render_insights_slide(canvas: SlideCanvas, section: Mapping[str, Any]) -> None:
    config = load_template_config()
    layout = _layout(config, "insightsSection")

    canvas.fill_rect(0, 0, SLIDE_WIDTH, SLIDE_HEIGHT, get_color("white"))

    panel = layout["insightsPanel"]
    canvas.fill_rect(
        px(panel["x"]), px(panel["y"]), px(panel["w"]), px(panel["h"]),
        normalize_color(section.get("insightsColor"), get_color("primary")),
    )
    canvas.fill_rect(px(panel["dividerX"]), 0, px(panel["dividerW"]), SLIDE_HEIGHT, get_color("white"))

    _line(canvas, section.get("title") or "", layout["title"], get_color("text"), weight="bold")
    if section.get("subtitle"):
        _line(canvas, section["subtitle"], layout["subtitle"], get_color("textSecondary"))

    _line(canvas, "Key insights", layout["insightsTitle"], get_color("white"), weight="bold")
    texts = insight_texts(section.get("insights"))
    if texts:
        box = layout["insightsList"]
        canvas.set_font(11)
        canvas.bullet_points(texts, px(box["x"]), px(box["y"]) + 11, px(box["w"]) - 10, 14, get_color("white"))

    await _draw_chart(canvas, section, layout, get_color("text"), dark_mode=False)
    _draw_source(canvas, section, layout, get_color("textSecondary"))


async def render_timeline_slide(canvas: SlideCanvas, section: Mapping[str, Any]) -> None:
    config = load_template_config()
    layout = _layout(config, "timelineSection")

    canvas.fill_rect(0, 0, SLIDE_WIDTH, SLIDE_HEIGHT, get_color("white"))
    _line(canvas, section.get("title") or "", layout["title"], get_color("text"), weight="bold")
    if section.get("subtitle"):
        _line(canvas, section["subtitle"], layout["subtitle"], get_color("textSecondary"))

    item_layouts = layout.get("items") or (layout.get("timeline") or {}).get("items") or []
    item_colors = [get_color("primary"), get_color("teal"), get_color("cyan")]
    items = section.get("items") or []
    for i, item in enumerate(items[: min(3, len(item_layouts))]):
        il = item_layouts[i]
        size = px(il.get("numberSize", 0.94))
        nx, ny = px(il["numberX"]), px(il["numberY"])
        canvas.fill_ellipse(nx, ny, size, size, item_colors[i % len(item_colors)])

        canvas.set_font(32, "bold")
        canvas.text(str(item.get("number") or i + 1), nx + size / 2, ny + 32 + 10, get_color("white"), align="center")

        cx, cy = px(il["contentX"]), px(il["contentY"])
        if item.get("header"):
            canvas.set_font(14, "bold")
            canvas.text(item["header"], cx, cy + 14, get_color("text"))
        if item.get("body"):
            canvas.set_font(11)
            canvas.wrapped_text(item["body"], cx, cy + 30, px(il["contentW"]), 14, get_color("textSecondary"), max_lines=6)
