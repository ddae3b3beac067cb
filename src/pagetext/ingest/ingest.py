"""Ingest stage — PDF validation and pdfplumber char replay.

pdfplumber already runs the content-stream interpreter; its ``page.chars``
list is the glyph-paint event stream in content order.  This module
replays that stream into a :class:`~pagetext.page.PageText` so nothing
downstream ever calls ``pdfplumber.open()`` directly.

Public API
----------
- :func:`ingest_pdf` — open + validate a PDF, return a :class:`PdfMeta`
- :func:`build_page_text` — replay one pdfplumber page into a ``PageText``
- :func:`extract_page_text` — open, replay and close in one call
- :func:`render_page_image` — render one page to a PIL Image at a given DPI
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Mapping, Optional, Tuple

import pdfplumber
from PIL import Image

from ..config import TextLayoutConfig
from ..geometry import Affine, Rect
from ..grouping.words import detect_new_line
from ..models import GlyphText, WordText
from ..page import PageText

log = logging.getLogger(__name__)

SPACE_CID = 32


# ---------------------------------------------------------------------------
# Data containers
# ---------------------------------------------------------------------------


@dataclass
class PageInfo:
    """Dimension metadata for a single PDF page."""

    index: int  # zero-based page number
    width: float  # points
    height: float  # points
    rotation: int = 0  # /Rotate, degrees

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "width": round(self.width, 3),
            "height": round(self.height, 3),
            "rotation": self.rotation,
        }


@dataclass
class PdfMeta:
    """PDF-level metadata returned by :func:`ingest_pdf`.

    Does not hold the ``pdfplumber.PDF`` handle open.
    """

    path: Path
    num_pages: int
    pages: List[PageInfo] = field(default_factory=list)

    def page(self, index: int) -> PageInfo:
        return self.pages[index]


@dataclass
class ExtractedPage:
    """A page's text model together with its dimensions."""

    text: PageText
    info: PageInfo


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


class IngestError(Exception):
    """Raised when a PDF or one of its pages cannot be ingested."""


def _validate_pdf_path(pdf_path: Path) -> None:
    """Raise :class:`IngestError` for missing / empty / wrong-extension files."""
    if not pdf_path.exists():
        raise IngestError(f"File not found: {pdf_path}")
    if not pdf_path.is_file():
        raise IngestError(f"Not a file: {pdf_path}")
    if pdf_path.stat().st_size == 0:
        raise IngestError(f"Empty file: {pdf_path}")
    if pdf_path.suffix.lower() != ".pdf":
        raise IngestError(f"Not a PDF (suffix={pdf_path.suffix!r}): {pdf_path}")


def _check_extractable(pdf: Any, pdf_path: Path) -> None:
    # pdfminer sets is_extractable = False on documents that forbid it
    doc = getattr(pdf, "doc", None)
    if doc is not None and getattr(doc, "is_extractable", True) is False:
        raise IngestError(
            f"PDF is password-protected or encrypted "
            f"(text extraction not permitted): {pdf_path}"
        )


def _page_info(index: int, page: Any) -> PageInfo:
    return PageInfo(
        index=index,
        width=float(page.width),
        height=float(page.height),
        rotation=int(getattr(page, "rotation", 0) or 0),
    )


# ---------------------------------------------------------------------------
# Char replay
# ---------------------------------------------------------------------------


def _line_key(char: Mapping[str, Any]) -> Tuple[Optional[float], bool]:
    """Baseline and orientation; a change of either starts a new line."""
    matrix = char.get("matrix")
    baseline = round(float(matrix[5]), 3) if matrix else None
    return baseline, bool(char.get("upright", True))


def _char_glyph(char: Mapping[str, Any]) -> GlyphText:
    x0, x1 = float(char["x0"]), float(char["x1"])
    top, bottom = float(char["top"]), float(char["bottom"])
    text = char.get("text") or ""
    adv = char.get("adv")
    return GlyphText(
        x=x0,
        y=bottom,
        advance_x=float(adv) if adv is not None else x1 - x0,
        advance_y=0.0,
        bounds=Rect(x0, top, x1 - x0, bottom - top),
        cid=ord(text[0]) if text else SPACE_CID,
        unicode=text,
        font_name=char.get("fontname", "") or "",
    )


def build_page_text(page: Any, cfg: Optional[TextLayoutConfig] = None) -> PageText:
    """Replay a pdfplumber page's chars into a :class:`PageText`.

    Char coordinates from pdfplumber are already top-left-origin display
    space with the page's ``/Rotate`` applied, so glyphs are added with
    a page rotation of 0.  Lines break where the text-matrix baseline or
    the orientation changes; chars without a matrix fall back to the
    glyph geometry (:func:`~pagetext.grouping.words.detect_new_line`).
    """
    page_text = PageText(cfg)
    previous_key = None
    word: Optional[WordText] = None
    count = 0
    for char in page.chars:
        glyph = _char_glyph(char)
        key = _line_key(char)
        if previous_key is not None:
            if key[0] is None or previous_key[0] is None:
                moved = key[1] != previous_key[1] or (
                    word is not None and detect_new_line(word, glyph, page_text.cfg)
                )
            else:
                moved = key != previous_key
            if moved:
                page_text.new_line()
        previous_key = key

        matrix = char.get("matrix")
        if matrix:
            page_text.set_text_transform(Affine.from_sequence(matrix))

        word = page_text.add_glyph_text(glyph)
        count += 1

    log.debug("replayed %d chars into %d lines", count, len(page_text.lines))
    return page_text


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def ingest_pdf(pdf_path: Path | str) -> PdfMeta:
    """Open and validate a PDF, returning a :class:`PdfMeta` descriptor.

    Raises
    ------
    IngestError
        When the file is missing, empty, encrypted or cannot be opened.
    """
    pdf_path = Path(pdf_path)
    _validate_pdf_path(pdf_path)
    try:
        with pdfplumber.open(pdf_path) as pdf:
            _check_extractable(pdf, pdf_path)
            pages = [_page_info(i, pg) for i, pg in enumerate(pdf.pages)]
    except IngestError:
        raise
    except Exception as exc:
        raise IngestError(f"Cannot open PDF: {exc}") from exc

    log.info("Ingested %s: %d pages", pdf_path.name, len(pages))
    return PdfMeta(path=pdf_path.resolve(), num_pages=len(pages), pages=pages)


def extract_page_text(
    pdf_path: Path | str,
    page_num: int,
    cfg: Optional[TextLayoutConfig] = None,
) -> ExtractedPage:
    """Build the text model of page *page_num* (zero-based) of a PDF.

    Raises
    ------
    IngestError
        For invalid files and out-of-range page numbers.
    """
    pdf_path = Path(pdf_path)
    _validate_pdf_path(pdf_path)
    try:
        with pdfplumber.open(pdf_path) as pdf:
            _check_extractable(pdf, pdf_path)
            num_pages = len(pdf.pages)
            if not 0 <= page_num < num_pages:
                raise IngestError(
                    f"Page {page_num} out of range (document has {num_pages} pages)"
                )
            page = pdf.pages[page_num]
            info = _page_info(page_num, page)
            page_text = build_page_text(page, cfg)
    except IngestError:
        raise
    except Exception as exc:
        raise IngestError(f"Cannot read page {page_num} of {pdf_path}: {exc}") from exc

    log.info(
        "Extracted %s page %d: %d lines",
        pdf_path.name,
        page_num,
        len(page_text.lines),
    )
    return ExtractedPage(text=page_text, info=info)


def render_page_image(
    pdf_path: Path | str,
    page_num: int,
    resolution: int = 200,
) -> Image.Image:
    """Render a single PDF page to an RGB PIL Image at *resolution* DPI."""
    with pdfplumber.open(pdf_path) as pdf:
        page = pdf.pages[page_num]
        img = page.to_image(resolution=resolution).original.copy()
    if img.mode != "RGB":
        img = img.convert("RGB")
    return img
