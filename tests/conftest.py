"""Shared test fixtures for pagetext."""

from __future__ import annotations

import pytest

from pagetext.config import TextLayoutConfig
from pagetext.geometry import Rect
from pagetext.models import GlyphText, LineText
from pagetext.page import PageText

# ── Helpers ────────────────────────────────────────────────────────────


def make_rect(x: float, y: float, w: float = 10.0, h: float = 10.0) -> Rect:
    return Rect(x, y, w, h)


def make_glyph(
    x: float,
    y: float,
    w: float = 10.0,
    h: float = 10.0,
    text: str = "a",
    cid: int | None = None,
    rotation: float = 0.0,
) -> GlyphText:
    """Create a GlyphText whose bounds start at its origin."""
    if cid is None:
        cid = ord(text[0]) if text else 0
    return GlyphText(
        x=x,
        y=y,
        advance_x=w,
        advance_y=0.0,
        bounds=Rect(x, y, w, h),
        cid=cid,
        unicode=text,
        page_rotation=rotation,
    )


def add_text(
    page: PageText,
    text: str,
    x: float,
    y: float,
    w: float = 10.0,
    h: float = 10.0,
    layer=None,
) -> None:
    """Paint *text* as touching glyphs of width *w* starting at ``(x, y)``.

    A literal space in *text* is painted as a space glyph, so ``"ab cd"``
    produces three words without relying on gap detection.
    """
    for i, ch in enumerate(text):
        page.add_glyph_text(make_glyph(x + i * w, y, w, h, ch), layer)


def band_texts(page: PageText) -> list[str]:
    return [band.text for band in page.page_lines]


def all_lines(page: PageText) -> list[LineText]:
    return list(page.lines) + list(page.page_lines)


# ── Fixtures ───────────────────────────────────────────────────────────


@pytest.fixture
def default_cfg() -> TextLayoutConfig:
    return TextLayoutConfig()


@pytest.fixture
def page() -> PageText:
    return PageText()


@pytest.fixture
def two_column_page() -> PageText:
    """Left column painted first, then the right column, each three rows."""
    p = PageText()
    for row, text in enumerate(["left one", "left two", "left three"]):
        add_text(p, text, 10, 100 + row * 20)
        p.new_line()
    for row, text in enumerate(["right one", "right two", "right three"]):
        add_text(p, text, 300, 100 + row * 20)
        p.new_line()
    return p
