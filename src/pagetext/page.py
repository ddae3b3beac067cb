"""Page root: owns every line painted on a page and its reading-order view.

A ``PageText`` is fed by one parse thread through :meth:`PageText.add_glyph`
and :meth:`PageText.new_line`.  Readers (selection, search, overlays) work
on :attr:`PageText.page_lines`, an immutable tuple of bands rebuilt by
:func:`~pagetext.grouping.reading_order.sort_and_format_text` whenever the
paint-order lines or layer visibility change.

All lines live in one flat list in paint order.  Lines painted inside an
optional-content layer carry that layer's id in ``LineText.layer``; main
content has ``layer=None``.  Visibility is a predicate over that tag.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, Hashable, Iterable, List, Optional, Sequence, Tuple, Union

from .config import TextLayoutConfig
from .geometry import Affine, NonInvertibleTransformError, Rect
from .grouping.lines import append_glyph, clear_current_word
from .grouping.reading_order import merge_layer, sort_and_format_text
from .models import GlyphText, LineText, WordKey, WordText

log = logging.getLogger(__name__)


class PageText:
    """Glyph → word → line → page aggregation root for a single page."""

    def __init__(self, cfg: Optional[TextLayoutConfig] = None) -> None:
        self.cfg = cfg if cfg is not None else TextLayoutConfig()
        self._lock = threading.RLock()
        self._lines: List[LineText] = []
        # open line per layer; None is main content
        self._current: Dict[Optional[Hashable], LineText] = {}
        self._visibility: Dict[Hashable, bool] = {}
        self._layer_order: List[Hashable] = []
        self._previous_xobject_transform: Optional[Affine] = None
        self._previous_text_transform: Optional[Affine] = None
        self._snapshot: Optional[Tuple[LineText, ...]] = None

    # ── construction (parse thread) ───────────────────────────────────

    def add_glyph(
        self,
        x: float,
        y: float,
        advance_x: float,
        advance_y: float,
        bounds: Union[Rect, Sequence[float]],
        page_rotation: float,
        cid: int,
        unicode: Optional[str],
        layer: Optional[Hashable] = None,
        *,
        selection_bounds: Optional[Rect] = None,
        font_name: str = "",
    ) -> WordText:
        """Build a glyph from raw paint data and route it into the tree.

        *bounds* is ``(x, y, width, height)`` in page space, or in the local
        space of an open form XObject (see :meth:`apply_xobject_transform`).
        Returns the word the glyph was placed in.
        """
        if not isinstance(bounds, Rect):
            bounds = Rect(*bounds)
        glyph = GlyphText(
            x=x,
            y=y,
            advance_x=advance_x,
            advance_y=advance_y,
            bounds=bounds,
            cid=cid,
            unicode=unicode,
            selection_bounds=selection_bounds,
            page_rotation=page_rotation,
            font_name=font_name,
        )
        return self.add_glyph_text(glyph, layer)

    def add_glyph_text(
        self, glyph: GlyphText, layer: Optional[Hashable] = None
    ) -> WordText:
        """Route a prebuilt glyph into the current line of *layer*."""
        with self._lock:
            line = self._current.get(layer)
            if line is None:
                line = self._open_line(layer)
            word = append_glyph(line, glyph, self.cfg)
            self._invalidate()
            return word

    def new_line(self, layer: Optional[Hashable] = None) -> LineText:
        """Start a new paint-order line for *layer*.

        No line is opened while the current one is still empty, so repeated
        line breaks never produce empty lines.
        """
        with self._lock:
            current = self._current.get(layer)
            if current is not None and not current.words:
                return current
            return self._open_line(layer)

    def add_page_lines(self, lines: Optional[Iterable[LineText]]) -> None:
        """Adopt lines built by another page root (a nested form XObject)."""
        if lines is None:
            return
        with self._lock:
            for line in lines:
                if line.layer is not None:
                    self._register_layer(line.layer)
                self._lines.append(line)
            self._invalidate()

    def apply_xobject_transform(self, transform: Affine) -> None:
        """Re-project every glyph built so far through *transform*.

        When a previous XObject transform is still in effect its inverse
        is applied first, so a form reused at several placements does not
        compound.
        """
        with self._lock:
            previous = self._previous_xobject_transform
            if previous is not None:
                try:
                    self._apply_transform(previous.inverse())
                except NonInvertibleTransformError:
                    log.warning(
                        "previous XObject transform %r is not invertible; "
                        "applying %r on top of it",
                        previous,
                        transform,
                    )
            self._previous_xobject_transform = transform
            self._apply_transform(transform)
            self._invalidate()

    def set_text_transform(self, transform: Affine) -> None:
        """Record the current text matrix.

        A shear sign flip against the previous matrix is a 90° change of
        writing direction, so the open main-content word is closed.
        """
        with self._lock:
            previous = self._previous_text_transform
            line = self._current.get(None)
            if previous is not None and line is not None:
                if _shear_flipped(previous, transform):
                    clear_current_word(line)
            self._previous_text_transform = transform

    def _open_line(self, layer: Optional[Hashable]) -> LineText:
        if layer is not None:
            self._register_layer(layer)
        line = LineText(layer=layer)
        self._lines.append(line)
        self._current[layer] = line
        self._invalidate()
        return line

    def _apply_transform(self, transform: Affine) -> None:
        for line in self._lines:
            line.clear_bounds()
            for word in line.words:
                for glyph in word.glyphs:
                    glyph.normalize_to_user_space(transform)
                word.clear_bounds()

    # ── layers ────────────────────────────────────────────────────────

    def _register_layer(self, layer: Hashable) -> None:
        if layer not in self._visibility:
            self._visibility[layer] = self.cfg.layers_visible_by_default
            self._layer_order.append(layer)

    @property
    def layers(self) -> Tuple[Hashable, ...]:
        """Layer ids in the order they were first seen."""
        with self._lock:
            return tuple(self._layer_order)

    def is_layer_visible(self, layer: Optional[Hashable]) -> bool:
        if layer is None:
            return True
        with self._lock:
            return self._visibility.get(layer, self.cfg.layers_visible_by_default)

    def set_layer_visible(self, layer: Hashable, visible: bool) -> None:
        with self._lock:
            self._register_layer(layer)
            if self._visibility[layer] != visible:
                self._visibility[layer] = visible
                self._invalidate()

    # ── reading order ─────────────────────────────────────────────────

    @property
    def lines(self) -> Tuple[LineText, ...]:
        """All paint-order lines, every layer included."""
        with self._lock:
            return tuple(self._lines)

    def _visible_lines(self) -> List[LineText]:
        return [
            line
            for line in self._lines
            if line.layer is None or self._visibility.get(line.layer, True)
        ]

    def _invalidate(self) -> None:
        self._snapshot = None

    def sort_and_format_text(self) -> Tuple[LineText, ...]:
        """Rebuild the reading-order bands and publish them."""
        with self._lock:
            main_lines = [line for line in self._lines if line.layer is None]
            layer_lines = []
            for layer in self._layer_order:
                if not self._visibility[layer]:
                    continue
                merged = merge_layer(
                    line for line in self._lines if line.layer == layer
                )
                if merged.words:
                    layer_lines.append(merged)
            bands = sort_and_format_text(main_lines, layer_lines, self.cfg)
            self._snapshot = bands
            log.debug(
                "page sorted: %d lines (%d layers) -> %d bands",
                len(self._lines),
                len(self._layer_order),
                len(bands),
            )
            return bands

    @property
    def page_lines(self) -> Tuple[LineText, ...]:
        """Reading-order bands, built on first access after a change."""
        snapshot = self._snapshot
        if snapshot is not None:
            return snapshot
        with self._lock:
            if self._snapshot is None:
                return self.sort_and_format_text()
            return self._snapshot

    # ── selection ─────────────────────────────────────────────────────

    def select_all(self) -> None:
        with self._lock:
            for band in self.page_lines:
                band.select_all()

    def clear_selected(self) -> None:
        with self._lock:
            for line in self._lines:
                line.clear_selected()
            for band in self._snapshot or ():
                band.clear_selected()

    def clear_highlighted(self) -> None:
        with self._lock:
            for line in self._lines:
                line.clear_highlighted()
            for band in self._snapshot or ():
                band.clear_highlighted()

    def clear_highlighted_cursor(self) -> None:
        with self._lock:
            for line in self._lines:
                line.clear_highlighted_cursor()
            for band in self._snapshot or ():
                band.clear_highlighted_cursor()

    def select_in_rect(self, rect: Rect) -> int:
        """Select glyphs whose selection bounds meet *rect*.

        Returns the number of glyphs newly selected.
        """
        count = 0
        with self._lock:
            for band in self.page_lines:
                for word in band.words:
                    hit = False
                    for glyph in word.glyphs:
                        if glyph.selection_bounds.intersects(rect):
                            if not glyph.selected:
                                count += 1
                            glyph.selected = True
                            hit = True
                    if hit:
                        word.has_selected = True
                        word.selected = all(g.selected for g in word.glyphs)
                        band.has_selected = True
        return count

    def get_selected(self) -> str:
        """Selected text in reading order, one line per contributing band."""
        parts = []
        for band in self.page_lines:
            text = band.get_selected()
            if text:
                parts.append(text)
                parts.append("\n")
        return "".join(parts)

    def get_selected_word_text(self) -> List[WordText]:
        """Fully selected words in reading order."""
        return [w for band in self.page_lines for w in band.words if w.selected]

    def redact_selected(self) -> int:
        """Mark every selected glyph redacted; returns how many were marked."""
        count = 0
        with self._lock:
            for band in self.page_lines:
                for glyph in band.glyphs():
                    if glyph.selected and not glyph.redacted:
                        glyph.redact()
                        count += 1
        if count:
            log.debug("redacted %d glyphs", count)
        return count

    def find(self, word: Union[WordText, WordKey]) -> Optional[WordText]:
        """Locate the live word matching *word* in this tree.

        *word* may be a word from an earlier build of the page (matched on
        its stable key and text) or a bare key.  Only main content and
        visible layers are searched.
        """
        if isinstance(word, WordText):
            key, text = word.key, word.text
        else:
            key, text = word, None
        if key is None:
            return None
        with self._lock:
            for line in self._visible_lines():
                for candidate in line.words:
                    if candidate.key == key and (text is None or candidate.text == text):
                        return candidate
        return None

    # ── text ──────────────────────────────────────────────────────────

    def to_text(self) -> str:
        return "".join(band.text + "\n" for band in self.page_lines)

    def __str__(self) -> str:
        return self.to_text()


def _shear_flipped(previous: Affine, current: Affine) -> bool:
    # int() truncation: only a full writing-direction change counts
    cur_x, cur_y = int(current.shear_x), int(current.shear_y)
    return (
        (previous.shear_x < 0 and cur_x > 0)
        or (previous.shear_x > 0 and cur_x < 0)
        or (previous.shear_y < 0 and cur_y > 0)
        or (previous.shear_y > 0 and cur_y < 0)
    )
