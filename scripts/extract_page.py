"""Extract the reading-order text of a single PDF page.

Usage:
    python scripts/extract_page.py <pdf> --page <N> [--json <path>] [--overlay <png>]

Page is zero-based.  The reading-order text is printed to stdout, one band
per line.  ``--json`` writes the serialized bands (see ``pagetext.page_data``),
``--overlay`` draws the bands and word hit bounds over the rendered page.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

import argparse
import json
import logging

from pagetext import (
    IngestError,
    SearchCursor,
    TextLayoutConfig,
    draw_text_overlay,
    extract_page_text,
    render_page_image,
    search_page,
    serialize_page,
)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Print a PDF page's text in reading order",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("pdf", type=Path)
    parser.add_argument("--page", type=int, default=0, help="Zero-based page index")
    parser.add_argument("--json", type=Path, default=None, help="Write bands as JSON")
    parser.add_argument("--overlay", type=Path, default=None, help="Write a PNG overlay")
    parser.add_argument("--resolution", type=int, default=144, help="Overlay DPI")
    parser.add_argument("--search", default=None, help="Highlight a term before export")
    parser.add_argument(
        "--no-preserve-columns",
        action="store_true",
        help="Sort bands strictly top to bottom",
    )
    parser.add_argument(
        "--dedup", action="store_true", help="Drop words painted twice in place"
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    overrides = {}
    if args.no_preserve_columns:
        overrides["preserve_columns"] = False
    if args.dedup:
        overrides["check_duplicates"] = True
    cfg = TextLayoutConfig.from_env(**overrides)

    try:
        extracted = extract_page_text(args.pdf, args.page, cfg)
    except IngestError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    page_text, info = extracted.text, extracted.info

    if args.search:
        hits = search_page(page_text, args.search)
        print(f"{len(hits)} hit(s) for {args.search!r}", file=sys.stderr)
        # the first hit is marked as current in the overlay and JSON
        SearchCursor(page_text, hits).next()

    sys.stdout.write(page_text.to_text())

    # ── Serialize ─────────────────────────────────────────────────────────
    if args.json is not None:
        data = serialize_page(page_text, args.page, info.width, info.height)
        args.json.parent.mkdir(parents=True, exist_ok=True)
        args.json.write_text(json.dumps(data, indent=2), encoding="utf-8")
        print(f"JSON saved: {args.json}", file=sys.stderr)

    # ── Overlay ──────────────────────────────────────────────────────────
    if args.overlay is not None:
        scale = args.resolution / 72.0
        background = render_page_image(args.pdf, args.page, resolution=args.resolution)
        args.overlay.parent.mkdir(parents=True, exist_ok=True)
        draw_text_overlay(
            page_text,
            info.width,
            info.height,
            args.overlay,
            scale=scale,
            background=background,
        )
        print(f"Overlay saved: {args.overlay}", file=sys.stderr)

    return 0


if __name__ == "__main__":
    sys.exit(main())
