"""Reading-order reconstruction: paint-order lines → sorted text bands.

Paint order often has little to do with reading order (multi-column
layouts, optional-content layers painted last, form XObjects).  The
pipeline re-clusters words into horizontal bands by y, folds visible
layer text into the nearest band, sorts each band by x and pads word hit
bounds so selection is continuous across a band.

Column order is kept by default: bands stay in the order the
re-clustering walk produced them, so a left column painted before a right
column reads left-then-right instead of interleaving row by row.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Sequence, Tuple

from ..config import TextLayoutConfig
from ..models import LineText, WordText

log = logging.getLogger(__name__)


# =============================================================================
# Band building
# =============================================================================


def split_into_bands(
    lines: Iterable[LineText], cfg: TextLayoutConfig
) -> List[LineText]:
    """Re-cluster the words of *lines* into bands on every change of y.

    Words are walked in their current order across line boundaries; a new
    band starts when a word's y moves away from the previous word's y by
    more than ``height * cfg.band_tolerance_ratio``.  The tolerance absorbs
    sub/superscript jitter.
    """
    bands: List[LineText] = []
    current: List[WordText] = []
    last_y = None

    for line in lines:
        for word in line.words:
            eb = word.extraction_bounds
            if last_y is not None and current:
                diff = abs(eb.y - last_y)
                if diff > eb.height * cfg.band_tolerance_ratio:
                    bands.append(LineText(words=current))
                    current = []
            current.append(word)
            last_y = eb.y

    if current:
        bands.append(LineText(words=current))
    return bands


def merge_layer_lines(
    bands: List[LineText], layer_lines: Sequence[LineText]
) -> List[LineText]:
    """Fold each layer line into the nearest band within that band's height.

    Lines with no band close enough are appended as bands of their own.
    *bands* is modified in place and returned.
    """
    for layer_line in layer_lines:
        if not layer_line.words:
            continue
        y = layer_line.extraction_bounds.y
        best = None
        best_diff = None
        for band in bands:
            bb = band.extraction_bounds
            diff = abs(y - bb.y)
            if diff < bb.height and (best_diff is None or diff < best_diff):
                best, best_diff = band, diff
        if best is not None:
            best.add_all(layer_line.words)
        else:
            bands.append(LineText(words=list(layer_line.words)))
    return bands


# =============================================================================
# Per-band passes
# =============================================================================


def drop_duplicate_words(band: LineText, digits: int = 0) -> int:
    """Remove words whose (text, rounded bounds) already appeared in *band*.

    Some report generators paint every string twice.  Returns the number
    of words removed.
    """
    seen = set()
    kept: List[WordText] = []
    for word in band.words:
        key = (word.text, word.bounds.rounded(digits))
        if key in seen:
            continue
        seen.add(key)
        kept.append(word)
    removed = len(band.words) - len(kept)
    if removed:
        band.set_words(kept)
    return removed


def sort_band_words(band: LineText) -> None:
    """Stable sort of *band*'s words by ascending x."""
    band.words.sort(key=lambda w: w.extraction_bounds.x)
    band.clear_bounds()


def close_word_gaps(band: LineText) -> None:
    """Pad each word's hit bounds out to the next word in the band."""
    words = band.words
    for word in words:
        word.set_hit_bounds(None)
    for current, nxt in zip(words, words[1:]):
        cur_b = current.bounds
        next_x = nxt.bounds.x
        if next_x - cur_b.x1 > 0:
            current.set_hit_bounds(cur_b.widened_to(next_x))


# =============================================================================
# Pipeline
# =============================================================================


def merge_layer(layer_lines: Iterable[LineText]) -> LineText:
    """Concatenate all words of one layer's lines into a single line."""
    merged = LineText()
    for line in layer_lines:
        merged.add_all(line.words)
        merged.layer = line.layer
    return merged


def sort_and_format_text(
    main_lines: Sequence[LineText],
    layer_lines: Sequence[LineText],
    cfg: TextLayoutConfig,
) -> Tuple[LineText, ...]:
    """Build the reading-order bands for a page.

    *main_lines* are the main-content lines in paint order, *layer_lines*
    one merged line per visible layer (see :func:`merge_layer`).  The input
    lines are not modified; the returned bands are new ``LineText``
    objects sharing the words.  Calling this twice on unchanged input
    gives identical bands in identical order.
    """
    bands = split_into_bands(main_lines, cfg)
    merge_layer_lines(bands, layer_lines)
    bands = split_into_bands(bands, cfg)

    removed = 0
    if cfg.check_duplicates:
        for band in bands:
            removed += drop_duplicate_words(band, cfg.duplicate_round_digits)

    for band in bands:
        sort_band_words(band)
        # materialise so readers never race on the lazy caches
        band.bounds
        band.extraction_bounds

    if not cfg.preserve_columns:
        bands.sort(key=lambda b: b.extraction_bounds.y)

    for band in bands:
        close_word_gaps(band)

    log.debug(
        "reading order: %d main lines, %d layer lines -> %d bands (%d duplicates dropped)",
        len(main_lines),
        len(layer_lines),
        len(bands),
        removed,
    )
    return tuple(bands)
