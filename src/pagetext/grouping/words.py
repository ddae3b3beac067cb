"""Word boundary detection: character classes, gap tests, space synthesis."""

from __future__ import annotations

import logging
from typing import Optional

from ..config import TextLayoutConfig
from ..geometry import Affine, Rect
from ..models import GlyphText, WordText

log = logging.getLogger(__name__)

SPACE_CID = 32

_WHITE_SPACE = frozenset(" \t\r\n\f\u00a0")
_PUNCTUATION = frozenset(".,?!:;\"'/\\`#")


# ── character classes ─────────────────────────────────────────────────


def is_white_space(ch: str) -> bool:
    return bool(ch) and ch[0] in _WHITE_SPACE


def is_punctuation(ch: str) -> bool:
    return bool(ch) and ch[0] in _PUNCTUATION


def is_digit(ch: str) -> bool:
    """ASCII digits only; locale digits are not treated as numeric."""
    return bool(ch) and "0" <= ch[0] <= "9"


def detect_white_space(glyph: GlyphText) -> bool:
    return is_white_space(glyph.first_char)


def detect_punctuation(glyph: GlyphText, current_word: Optional[WordText]) -> bool:
    """True if *glyph* should stand alone as a punctuation token.

    A punctuation mark directly after a digit stays in the word so that
    decimals such as ``3.14`` or ``1,000`` read as one token.
    """
    if not is_punctuation(glyph.first_char):
        return False
    return not (current_word is not None and is_digit(current_word.previous_char))


# ── geometric tests ───────────────────────────────────────────────────


def _tolerance(previous: Rect, cfg: TextLayoutConfig) -> float:
    return previous.height / cfg.space_fraction


def detect_space(word: WordText, glyph: GlyphText, cfg: TextLayoutConfig) -> bool:
    """True if the gap between *word*'s last glyph and *glyph* is a word break."""
    previous = word.last_glyph
    if previous is None or not cfg.auto_space:
        return False
    prev_b = previous.extraction_bounds
    cur_b = glyph.extraction_bounds
    tolerance = _tolerance(prev_b, cfg)
    # abs(): right-to-left runs step backwards
    space = abs(cur_b.x - prev_b.x1)
    y_diff = abs(cur_b.y - prev_b.y)
    return space > tolerance or y_diff > tolerance


def detect_new_line(word: WordText, glyph: GlyphText, cfg: TextLayoutConfig) -> bool:
    """Vertical half of :func:`detect_space`: has the baseline moved?"""
    previous = word.last_glyph
    if previous is None or not cfg.auto_space:
        return False
    prev_b = previous.extraction_bounds
    return abs(glyph.extraction_bounds.y - prev_b.y) > _tolerance(prev_b, cfg)


# ── space synthesis ───────────────────────────────────────────────────


def _space_count(gap: float, half_width: float, cfg: TextLayoutConfig) -> int:
    if half_width <= 0:
        return 1
    spaces = max(1, int(round(gap / half_width)))
    if spaces > cfg.max_space_glyphs:
        log.debug(
            "space synthesis capped: %d glyphs requested, %d emitted",
            spaces,
            cfg.max_space_glyphs,
        )
        spaces = cfg.max_space_glyphs
    return spaces


def _space_glyph(template: GlyphText, bounds: Rect) -> GlyphText:
    return GlyphText(
        x=bounds.x,
        y=template.y,
        advance_x=bounds.width,
        advance_y=0.0,
        bounds=bounds,
        cid=SPACE_CID,
        unicode=" ",
        page_rotation=template.page_rotation,
        font_name=template.font_name,
    )


def build_space_word(
    word: WordText, glyph: GlyphText, cfg: TextLayoutConfig
) -> WordText:
    """Build the white-space word that fills the gap before *glyph*.

    The gap is measured on extraction bounds, the same geometry
    :func:`detect_space` tests, and each space glyph is mapped back into
    painted page space.  Left-to-right gaps are filled with
    ``round(gap / (max_width / 2))`` evenly spaced glyphs (at least one,
    at most ``cfg.max_space_glyphs``).  Right-to-left gaps run leftward
    from the previous glyph and get a single glyph unless
    ``cfg.rtl_single_space`` is off.
    """
    previous = word.last_glyph
    space_word = WordText(is_white_space=True, layer=word.layer)
    if previous is None:
        return space_word

    prev_b = previous.extraction_bounds
    cur_b = glyph.extraction_bounds
    gap = cur_b.x - prev_b.x1
    half_width = max(prev_b.width, cur_b.width) / 2.0
    ltr = gap >= 0
    if not ltr:
        gap = max(0.0, prev_b.x - cur_b.x1)

    if not cfg.auto_space or (not ltr and cfg.rtl_single_space):
        spaces = 1
    else:
        spaces = _space_count(gap, half_width, cfg)

    to_page = None
    if previous.page_rotation:
        to_page = Affine.rotation(previous.page_rotation).inverse()

    space_width = gap / spaces
    for i in range(spaces):
        if ltr:
            x = prev_b.x1 + i * space_width
        else:
            x = prev_b.x - (i + 1) * space_width
        bounds = Rect(x, prev_b.y, space_width, prev_b.height)
        if to_page is not None:
            bounds = to_page.transform_rect(bounds)
        space_word.add_text(_space_glyph(previous, bounds))
    return space_word
