"""Serialization of a page's reading-order view.

``serialize_page`` turns :attr:`PageText.page_lines` into a JSON-friendly
dict that can be written to ``page_N_text.json``.

JSON layout
-----------
::

    {
      "version": 1,
      "page": 0,
      "page_width": 612.0,
      "page_height": 792.0,
      "text": "...",
      "bands": [
        {
          "bbox": [x0, y0, x1, y1],
          "text": "...",
          "words": [ {word dict}, ... ]
        },
        ...
      ]
    }
"""

from __future__ import annotations

from typing import Any

from .geometry import Rect
from .models import LineText, WordText
from .page import PageText

SCHEMA_VERSION = 1


def _bbox(rect: Rect) -> list[float]:
    return [round(v, 3) for v in rect.bbox()]


def word_to_dict(word: WordText) -> dict[str, Any]:
    """Serialize one word."""
    key = word.key
    d: dict[str, Any] = {
        "text": word.text,
        "bbox": _bbox(word.bounds),
        "key": [key[0], key[1], key[2]] if key is not None else None,
        "white_space": word.is_white_space,
        "punctuation": word.is_punctuation,
    }
    if word.layer is not None:
        d["layer"] = str(word.layer)
    if word.has_selected:
        d["selected"] = word.get_selected()
    if word.has_highlight:
        d["highlighted"] = True
    if word.has_highlight_cursor:
        d["cursor"] = True
    if any(g.redacted for g in word.glyphs):
        d["redacted"] = True
    return d


def band_to_dict(band: LineText) -> dict[str, Any]:
    return {
        "bbox": _bbox(band.bounds),
        "text": band.text,
        "words": [word_to_dict(w) for w in band.words],
    }


def serialize_page(
    page: PageText,
    page_index: int,
    page_width: float,
    page_height: float,
) -> dict[str, Any]:
    """Serialize a page's reading-order bands to a JSON-friendly dict."""
    bands = page.page_lines
    return {
        "version": SCHEMA_VERSION,
        "page": page_index,
        "page_width": round(page_width, 3),
        "page_height": round(page_height, 3),
        "text": "".join(b.text + "\n" for b in bands),
        "bands": [band_to_dict(b) for b in bands],
    }
