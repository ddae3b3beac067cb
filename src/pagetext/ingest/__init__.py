"""Ingest stage — PDF validation and pdfplumber char replay.

Public API
----------
- :func:`ingest_pdf` — open + validate a PDF, return :class:`PdfMeta`
- :func:`build_page_text` — replay a pdfplumber page into a ``PageText``
- :func:`extract_page_text` — validate, open and replay one page
- :func:`render_page_image` — render one page to PIL Image at a given DPI
- :class:`IngestError` — raised on validation failures
"""

from .ingest import (
    ExtractedPage,
    IngestError,
    PageInfo,
    PdfMeta,
    build_page_text,
    extract_page_text,
    ingest_pdf,
    render_page_image,
)

__all__ = [
    "ExtractedPage",
    "IngestError",
    "PageInfo",
    "PdfMeta",
    "build_page_text",
    "extract_page_text",
    "ingest_pdf",
    "render_page_image",
]
