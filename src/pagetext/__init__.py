"""Reading-order text model for PDF pages.

Glyph-paint events go in, a glyph → word → line → page tree comes out,
with the page's lines re-sorted into human reading order for search,
selection, highlighting and redaction.

Frequently-used symbols are re-exported here for convenience.  For the
word and line automata import from :mod:`pagetext.grouping`.
"""

# ── Core models & config ──────────────────────────────────────────────

from .config import ConfigValidationError, TextLayoutConfig
from .export.overlay import draw_text_overlay
from .geometry import Affine, NonInvertibleTransformError, Rect
from .ingest import (
    ExtractedPage,
    IngestError,
    build_page_text,
    extract_page_text,
    ingest_pdf,
    render_page_image,
)
from .models import GlyphText, LineText, WordText
from .page import PageText
from .page_data import serialize_page
from .search import SearchCursor, SearchHit, mark_cursor, search_page

__all__ = [
    # Models & config
    "TextLayoutConfig",
    "ConfigValidationError",
    "Rect",
    "Affine",
    "NonInvertibleTransformError",
    "GlyphText",
    "WordText",
    "LineText",
    # Page root
    "PageText",
    # Search & serialization
    "SearchCursor",
    "SearchHit",
    "mark_cursor",
    "search_page",
    "serialize_page",
    # Ingest
    "ExtractedPage",
    "IngestError",
    "build_page_text",
    "extract_page_text",
    "ingest_pdf",
    "render_page_image",
    # Overlay
    "draw_text_overlay",
]
