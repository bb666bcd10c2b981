import base64
import io

import pytest
from PIL import Image

from reportdeck.core.preview import canvas as canvas_mod
from reportdeck.core.preview.canvas import (
    SLIDE_HEIGHT,
    SLIDE_WIDTH,
    SlideCanvas,
    create_slide_canvas,
    inches_to_pixels,
    load_image_safe,
)

from conftest import tiny_png


def test_inches_to_pixels():
    assert inches_to_pixels(1) == 96
    assert inches_to_pixels(13.333) == 1280
    assert inches_to_pixels(0.5) == 48


def test_canvas_is_slide_sized_png():
    with create_slide_canvas("000000") as canvas:
        data = canvas.to_png_bytes()
    img = Image.open(io.BytesIO(data))
    assert img.size == (SLIDE_WIDTH, SLIDE_HEIGHT)
    assert img.getpixel((5, 5)) == (0, 0, 0)


def test_fill_rect_paints_pixels():
    canvas = SlideCanvas()
    canvas.fill_rect(10, 10, 20, 20, "009FB1")
    assert canvas.image.getpixel((15, 15)) == (0, 159, 177)
    assert canvas.image.getpixel((40, 40)) == (255, 255, 255)
    canvas.close()


def test_wrapped_text_respects_max_lines():
    canvas = SlideCanvas()
    canvas.set_font(20)
    text = "one two three four five six"
    assert canvas.wrapped_text(text, 0, 100, 10, 24, "333333") == 100 + 6 * 24
    assert canvas.wrapped_text(text, 0, 100, 10, 24, "333333", max_lines=2) == 100 + 2 * 24
    assert canvas.wrapped_text("", 0, 100, 10, 24, "333333") == 100
    canvas.close()


def test_canvas_closed_when_drawing_raises():
    with pytest.raises(RuntimeError):
        with create_slide_canvas() as canvas:
            raise RuntimeError("renderer blew up")
    assert canvas.closed


@pytest.mark.asyncio
async def test_load_image_from_data_uri(no_network):
    src = "data:image/png;base64," + base64.b64encode(tiny_png()).decode("ascii")
    img = await load_image_safe(src)
    assert img.size == (4, 4)
    assert no_network["images"] == []


@pytest.mark.asyncio
async def test_load_image_from_url(no_network):
    img = await load_image_safe("https://cdn.example.com/a.png")
    assert img is not None
    assert no_network["images"] == ["https://cdn.example.com/a.png"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "src",
    [None, "", "data:image/png;base64,!!!notbase64", "data:text/plain;base64," + base64.b64encode(b"hello").decode()],
)
async def test_load_image_bad_sources_are_none(src):
    assert await load_image_safe(src) is None


@pytest.mark.asyncio
async def test_load_image_http_error_is_none(monkeypatch):
    import requests

    def fail(url):
        raise requests.HTTPError("404")

    monkeypatch.setattr(canvas_mod, "_fetch_bytes", fail)
    assert await load_image_safe("https://cdn.example.com/missing.png") is None
