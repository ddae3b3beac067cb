"""Line aggregation: the per-glyph word segmentation automaton.

Glyphs arrive in paint order and are never reordered here.  Each glyph is
matched against the line's current word cursor:

1. white space        → its own white-space word, cursor cleared
2. punctuation        → its own punctuation word, cursor cleared
   (unless it follows a digit, see :func:`detect_punctuation`)
3. no decoded text    → folded into the current word as-is
4. geometric gap      → synthetic space word, then a fresh word for the glyph
5. otherwise          → appended to the current word
"""

from __future__ import annotations

from typing import Optional

from ..config import TextLayoutConfig
from ..models import GlyphText, LineText, WordText
from .words import build_space_word, detect_punctuation, detect_space, detect_white_space


def _flush_single(line: LineText, glyph: GlyphText, **flags) -> WordText:
    word = WordText(layer=line.layer, **flags)
    word.add_text(glyph)
    line.add_word(word)
    line.current_word = None
    return word


def _open_word(line: LineText) -> WordText:
    word = WordText(layer=line.layer)
    line.add_word(word)
    line.current_word = word
    return word


def append_glyph(
    line: LineText, glyph: GlyphText, cfg: Optional[TextLayoutConfig] = None
) -> WordText:
    """Run *glyph* through the segmentation automaton for *line*.

    Returns the word the glyph ended up in.
    """
    if cfg is None:
        cfg = TextLayoutConfig()
    current = line.current_word

    if detect_white_space(glyph):
        return _flush_single(line, glyph, is_white_space=True)

    if detect_punctuation(glyph, current):
        return _flush_single(line, glyph, is_punctuation=True)

    if not glyph.text:
        word = current if current is not None else _open_word(line)
        word.add_text(glyph)
        line.clear_bounds()
        return word

    if current is not None and detect_space(current, glyph, cfg):
        line.add_word(build_space_word(current, glyph, cfg))
        line.current_word = None
        current = None

    word = current if current is not None else _open_word(line)
    word.add_text(glyph)
    line.clear_bounds()
    return word


def clear_current_word(line: LineText) -> None:
    """Force the next glyph on *line* to start a new word."""
    line.current_word = None
