"""Grouping stage — glyphs into words, words into lines, lines into bands.

Public API
----------
- :func:`append_glyph` — run one glyph through a line's word automaton
- :func:`build_space_word` — synthesise the white space filling a gap
- :func:`sort_and_format_text` — rebuild reading order from paint order
"""

from .lines import append_glyph, clear_current_word
from .reading_order import merge_layer, sort_and_format_text
from .words import (
    build_space_word,
    detect_new_line,
    detect_punctuation,
    detect_space,
    detect_white_space,
    is_digit,
    is_punctuation,
    is_white_space,
)

__all__ = [
    "append_glyph",
    "build_space_word",
    "clear_current_word",
    "detect_new_line",
    "detect_punctuation",
    "detect_space",
    "detect_white_space",
    "is_digit",
    "is_punctuation",
    "is_white_space",
    "merge_layer",
    "sort_and_format_text",
]
