from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont

from ..geometry import Rect
from ..page import PageText

# Element keys and their default RGBA colours; a None colour skips the element
COLOR_KEYS = [
    "bands",
    "words",
    "white_space",
    "highlights",
    "cursor",
    "selected",
    "labels",
]

DEFAULT_COLORS: Dict[str, Optional[tuple]] = {
    "bands": (0, 0, 255, 160),
    "words": (255, 0, 0, 140),
    "white_space": None,
    "highlights": (255, 230, 0, 90),
    "cursor": (255, 120, 0, 140),
    "selected": (0, 160, 255, 90),
    "labels": (0, 0, 160, 255),
}

_FONT_BASE = 10
_FONT_FLOOR = 8
_LABEL_BG_ALPHA = 200


def _get_color(color_overrides: Optional[Dict[str, Optional[tuple]]], key: str) -> tuple | None:
    """Colour for *key*: the override when given, else the default."""
    if color_overrides and key in color_overrides:
        return color_overrides[key]
    return DEFAULT_COLORS.get(key)


def _scale_rect(rect: Rect, scale: float) -> Tuple[float, float, float, float]:
    return (rect.x * scale, rect.y * scale, rect.x1 * scale, rect.y1 * scale)


def _load_font(scale: float) -> ImageFont.ImageFont:
    font_size = max(_FONT_FLOOR, int(_FONT_BASE * scale))
    try:
        return ImageFont.truetype("arial.ttf", font_size)
    except (OSError, IOError):
        return ImageFont.load_default()


def _draw_label(
    draw: ImageDraw.ImageDraw,
    x: float,
    y: float,
    label: str,
    color: tuple,
    font: ImageFont.ImageFont,
) -> None:
    """Draw *label* just left of ``(x, y)`` on a white backing box."""
    bbox = draw.textbbox((x, y), label, font=font)
    width = bbox[2] - bbox[0]
    pos = (max(0.0, x - width - 3), y)
    bbox = draw.textbbox(pos, label, font=font)
    draw.rectangle(
        (bbox[0] - 1, bbox[1] - 1, bbox[2] + 1, bbox[3] + 1),
        fill=(255, 255, 255, _LABEL_BG_ALPHA),
    )
    draw.text(pos, label, fill=color[:3], font=font)


def draw_text_overlay(
    page: PageText,
    page_width: float,
    page_height: float,
    out_path: Path | str | None = None,
    scale: float = 1.0,
    background: Image.Image | None = None,
    colors: Optional[Dict[str, Optional[tuple]]] = None,
) -> Image.Image:
    """Render a page's reading-order bands as an overlay PNG for visual QA.

    Band outlines carry their reading-order index; words are outlined by
    their hit bounds, so the gap closing between words is visible.
    Highlighted and selected words are filled, the current search hit in
    its own colour.  If *background* is given (a rendered page, see
    :func:`pagetext.ingest.render_page_image`) it is resized to the
    overlay size and used as the base.

    The image is returned and, when *out_path* is given, saved as PNG.
    """
    img_w = max(1, int(page_width * scale))
    img_h = max(1, int(page_height * scale))
    if background is not None:
        img = background.convert("RGBA")
        if img.size != (img_w, img_h):
            img = img.resize((img_w, img_h))
    else:
        img = Image.new("RGBA", (img_w, img_h), (255, 255, 255, 255))

    draw = ImageDraw.Draw(img, "RGBA")
    font = _load_font(scale)

    band_color = _get_color(colors, "bands")
    word_color = _get_color(colors, "words")
    space_color = _get_color(colors, "white_space")
    highlight_color = _get_color(colors, "highlights")
    cursor_color = _get_color(colors, "cursor")
    selected_color = _get_color(colors, "selected")
    label_color = _get_color(colors, "labels")

    for index, band in enumerate(page.page_lines):
        for word in band.words:
            box = _scale_rect(word.hit_bounds, scale)
            if word.has_highlight and highlight_color:
                draw.rectangle(box, fill=highlight_color)
            if word.has_highlight_cursor and cursor_color:
                draw.rectangle(box, fill=cursor_color)
            if word.has_selected and selected_color:
                draw.rectangle(box, fill=selected_color)
            outline = space_color if word.is_white_space else word_color
            if outline:
                draw.rectangle(box, outline=outline, width=1)

        if band_color:
            draw.rectangle(_scale_rect(band.bounds, scale), outline=band_color, width=2)
        if label_color:
            bx, by, _, _ = _scale_rect(band.bounds, scale)
            _draw_label(draw, bx, by, str(index), label_color, font)

    if out_path is not None:
        img.save(out_path, format="PNG")
    return img
