"""Text model: glyph → word → line.

All geometry is in page space.  A word owns its glyphs, a line owns its
words; the page root (:mod:`pagetext.page`) owns the lines.  Bounds are
computed lazily as the union of the current children and dropped with
``clear_bounds()`` whenever a child's geometry changes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Hashable, Iterator, List, Optional, Tuple

from .geometry import Affine, Rect, union_all

# (cid, origin x, origin y) of a word's first glyph.
WordKey = Tuple[int, float, float]

_EMPTY_RECT = Rect(0.0, 0.0, 0.0, 0.0)


class TextUnit:
    """Hit-testing helpers shared by words and lines."""

    @property
    def bounds(self) -> Rect:  # pragma: no cover - overridden
        raise NotImplementedError

    def intersects(self, rect: Rect) -> bool:
        """True if *rect* overlaps this unit's bounds."""
        return self.bounds.intersects(rect)

    def contains_point(self, x: float, y: float) -> bool:
        return self.bounds.contains_point(x, y)


@dataclass(eq=False)
class GlyphText:
    """One painted character instance.

    ``bounds`` is the stored extraction bound (it may be widened to close a
    kerning gap); ``selection_bounds`` is the raw bound used for pointer
    hit-testing and, rotated by ``page_rotation``, for gap and band
    detection.
    """

    x: float
    y: float
    advance_x: float
    advance_y: float
    bounds: Rect
    cid: int = 0
    unicode: Optional[str] = ""
    selection_bounds: Optional[Rect] = None
    page_rotation: float = 0.0
    font_name: str = ""
    selected: bool = False
    highlighted: bool = False
    highlight_cursor: bool = False
    redacted: bool = False
    _extraction_bounds: Optional[Rect] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.selection_bounds is None:
            self.selection_bounds = self.bounds

    @property
    def text(self) -> str:
        return self.unicode or ""

    @property
    def first_char(self) -> str:
        """First decoded character, or ``""`` for glyphs without text."""
        return self.unicode[0] if self.unicode else ""

    @property
    def extraction_bounds(self) -> Rect:
        """Selection bounds with the page rotation taken out."""
        if self._extraction_bounds is None:
            if self.page_rotation:
                self._extraction_bounds = Affine.rotation(
                    self.page_rotation
                ).transform_rect(self.selection_bounds)
            else:
                self._extraction_bounds = self.selection_bounds
        return self._extraction_bounds

    def normalize_to_user_space(self, transform: Affine) -> None:
        """Re-project both bounds through *transform*."""
        self.bounds = transform.transform_rect(self.bounds)
        self.selection_bounds = transform.transform_rect(self.selection_bounds)
        self._extraction_bounds = None

    def redact(self) -> None:
        self.redacted = True


@dataclass(eq=False)
class WordText(TextUnit):
    """A run of glyphs read as one token, or the white space between tokens."""

    glyphs: List[GlyphText] = field(default_factory=list)
    is_white_space: bool = False
    is_punctuation: bool = False
    layer: Optional[Hashable] = None
    selected: bool = False
    highlighted: bool = False
    has_selected: bool = False
    has_highlight: bool = False
    # current search hit, drawn apart from the other hits
    highlight_cursor: bool = False
    has_highlight_cursor: bool = False
    _text: List[str] = field(default_factory=list, repr=False)
    _key: Optional[WordKey] = field(default=None, repr=False)
    _bounds: Optional[Rect] = field(default=None, repr=False)
    _extraction_bounds: Optional[Rect] = field(default=None, repr=False)
    _hit_bounds: Optional[Rect] = field(default=None, repr=False)

    # ── construction ──────────────────────────────────────────────────

    def add_text(self, glyph: GlyphText) -> None:
        """Append *glyph*, closing any positive gap to the previous glyph."""
        if self.glyphs:
            previous = self.glyphs[-1]
            gap = glyph.bounds.x - previous.bounds.x1
            if gap > 0:
                previous.bounds = previous.bounds.widened_to(glyph.bounds.x)
        else:
            self._key = (glyph.cid, round(glyph.x, 3), round(glyph.y, 3))
        self.glyphs.append(glyph)
        self._text.append(glyph.text)
        self.clear_bounds()

    # ── derived values ────────────────────────────────────────────────

    @property
    def text(self) -> str:
        return "".join(self._text)

    @property
    def key(self) -> Optional[WordKey]:
        """Stable identity assigned when the first glyph is appended."""
        return self._key

    @property
    def last_glyph(self) -> Optional[GlyphText]:
        return self.glyphs[-1] if self.glyphs else None

    @property
    def previous_char(self) -> str:
        """First character of the most recently appended glyph."""
        last = self.last_glyph
        return last.first_char if last is not None else ""

    @property
    def bounds(self) -> Rect:
        if self._bounds is None:
            self._bounds = union_all(g.bounds for g in self.glyphs) or _EMPTY_RECT
        return self._bounds

    @property
    def extraction_bounds(self) -> Rect:
        if self._extraction_bounds is None:
            self._extraction_bounds = (
                union_all(g.extraction_bounds for g in self.glyphs) or _EMPTY_RECT
            )
        return self._extraction_bounds

    @property
    def hit_bounds(self) -> Rect:
        """Bounds padded out to the next word in reading order, if padded."""
        return self._hit_bounds if self._hit_bounds is not None else self.bounds

    def set_hit_bounds(self, rect: Optional[Rect]) -> None:
        self._hit_bounds = rect

    def clear_bounds(self) -> None:
        self._bounds = None
        self._extraction_bounds = None
        self._hit_bounds = None

    # ── selection cascade ─────────────────────────────────────────────

    def select_all(self) -> None:
        self.selected = True
        self.has_selected = True
        for glyph in self.glyphs:
            glyph.selected = True

    def clear_selected(self) -> None:
        self.selected = False
        self.has_selected = False
        for glyph in self.glyphs:
            glyph.selected = False

    def highlight(self) -> None:
        self.highlighted = True
        self.has_highlight = True
        for glyph in self.glyphs:
            glyph.highlighted = True

    def clear_highlighted(self) -> None:
        self.highlighted = False
        self.has_highlight = False
        for glyph in self.glyphs:
            glyph.highlighted = False

    def set_highlight_cursor(self) -> None:
        self.highlight_cursor = True
        self.has_highlight_cursor = True
        for glyph in self.glyphs:
            glyph.highlight_cursor = True

    def clear_highlighted_cursor(self) -> None:
        self.highlight_cursor = False
        self.has_highlight_cursor = False
        for glyph in self.glyphs:
            glyph.highlight_cursor = False

    def get_selected(self) -> str:
        return "".join(g.text for g in self.glyphs if g.selected)

    def __str__(self) -> str:
        return self.text


@dataclass(eq=False)
class LineText(TextUnit):
    """Words in insertion order: a paint-order line or a reading-order band."""

    words: List[WordText] = field(default_factory=list)
    layer: Optional[Hashable] = None
    selected: bool = False
    highlighted: bool = False
    has_selected: bool = False
    has_highlight: bool = False
    has_highlight_cursor: bool = False
    # Cursor used only while the line is being built.
    current_word: Optional[WordText] = field(default=None, repr=False)
    _bounds: Optional[Rect] = field(default=None, repr=False)
    _extraction_bounds: Optional[Rect] = field(default=None, repr=False)

    def add_word(self, word: WordText) -> None:
        self.words.append(word)
        self.clear_bounds()

    def add_all(self, words) -> None:
        self.words.extend(words)
        self.clear_bounds()

    def set_words(self, words: List[WordText]) -> None:
        self.words = list(words)
        self.clear_bounds()

    def glyphs(self) -> Iterator[GlyphText]:
        for word in self.words:
            yield from word.glyphs

    @property
    def text(self) -> str:
        return "".join(w.text for w in self.words)

    @property
    def bounds(self) -> Rect:
        if self._bounds is None:
            self._bounds = union_all(w.bounds for w in self.words) or _EMPTY_RECT
        return self._bounds

    @property
    def extraction_bounds(self) -> Rect:
        if self._extraction_bounds is None:
            self._extraction_bounds = (
                union_all(w.extraction_bounds for w in self.words) or _EMPTY_RECT
            )
        return self._extraction_bounds

    def clear_bounds(self) -> None:
        self._bounds = None
        self._extraction_bounds = None

    def select_all(self) -> None:
        self.selected = True
        self.has_selected = True
        for word in self.words:
            word.select_all()

    def clear_selected(self) -> None:
        self.selected = False
        self.has_selected = False
        for word in self.words:
            word.clear_selected()

    def clear_highlighted(self) -> None:
        self.highlighted = False
        self.has_highlight = False
        for word in self.words:
            word.clear_highlighted()

    def clear_highlighted_cursor(self) -> None:
        self.has_highlight_cursor = False
        for word in self.words:
            word.clear_highlighted_cursor()

    def get_selected(self) -> str:
        return "".join(w.get_selected() for w in self.words)

    def __str__(self) -> str:
        return self.text
