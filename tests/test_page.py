"""Tests for pagetext.page — PageText construction, reading order and selection."""

import logging
import threading

import pytest

from conftest import add_text, all_lines, band_texts

from pagetext.config import TextLayoutConfig
from pagetext.geometry import Affine, Rect
from pagetext.page import PageText


# ── Construction ──────────────────────────────────────────────────────


class TestConstruction:
    def test_add_glyph_builds_words(self, page):
        page.add_glyph(0, 10, 10, 0, Rect(0, 0, 10, 10), 0, 65, "A")
        page.add_glyph(40, 10, 10, 0, (40, 0, 10, 10), 0, 66, "B")
        (line,) = page.lines
        assert [w.text for w in line.words] == ["A", " " * 6, "B"]
        assert line.words[1].is_white_space

    def test_add_glyph_keeps_selection_bounds_and_font(self, page):
        word = page.add_glyph(
            0, 0, 10, 0, Rect(0, 0, 10, 10), 0, 65, "A",
            selection_bounds=Rect(0, -2, 10, 14), font_name="Helvetica",
        )
        glyph = word.glyphs[0]
        assert glyph.selection_bounds == Rect(0, -2, 10, 14)
        assert glyph.font_name == "Helvetica"

    def test_first_glyph_opens_line(self, page):
        assert page.lines == ()
        add_text(page, "a", 0, 0)
        assert len(page.lines) == 1

    def test_new_line_skips_empty_lines(self, page):
        page.new_line()
        page.new_line()
        add_text(page, "a", 0, 0)
        page.new_line()
        page.new_line()
        add_text(page, "b", 0, 20)
        assert [l.text for l in page.lines] == ["a", "b"]

    def test_glyph_after_new_line_starts_new_word(self, page):
        add_text(page, "ab", 0, 0)
        page.new_line()
        add_text(page, "cd", 20, 0)
        assert [w.text for l in page.lines for w in l.words] == ["ab", "cd"]

    def test_add_page_lines(self, page):
        form = PageText()
        add_text(form, "form", 0, 50)
        add_text(page, "body", 0, 0)
        page.add_page_lines(form.lines)
        page.add_page_lines(None)
        assert band_texts(page) == ["body", "form"]


class TestXObjectTransform:
    def test_transform_reprojects_bounds(self, page):
        add_text(page, "ab", 0, 0)
        page.apply_xobject_transform(Affine(e=100, f=200))
        word = page.lines[0].words[0]
        assert word.bounds == Rect(100, 200, 20, 10)
        assert page.page_lines[0].bounds == Rect(100, 200, 20, 10)

    def test_reuse_does_not_compound(self, page):
        add_text(page, "ab", 0, 0)
        page.apply_xobject_transform(Affine(e=100, f=0))
        page.apply_xobject_transform(Affine(e=300, f=0))
        bounds = page.lines[0].words[0].bounds
        assert bounds.x == pytest.approx(300)
        assert bounds.width == pytest.approx(20)

    def test_singular_previous_transform_logged(self, page, caplog):
        add_text(page, "a", 0, 0)
        page.apply_xobject_transform(Affine(0, 0, 0, 0))
        with caplog.at_level(logging.WARNING, logger="pagetext.page"):
            page.apply_xobject_transform(Affine(e=5, f=5))
        assert "not invertible" in caplog.text

    def test_snapshot_invalidated(self, page):
        add_text(page, "a", 0, 0)
        before = page.page_lines
        page.apply_xobject_transform(Affine(e=10, f=0))
        assert page.page_lines is not before


class TestTextTransform:
    def test_shear_flip_closes_word(self, page):
        page.set_text_transform(Affine(0, 1, -1, 0, 0, 0))
        add_text(page, "ab", 0, 0)
        page.set_text_transform(Affine(0, -1, 1, 0, 0, 0))
        add_text(page, "c", 20, 0)
        assert [w.text for w in page.lines[0].words] == ["ab", "c"]

    def test_same_direction_keeps_word(self, page):
        page.set_text_transform(Affine(12, 0, 0, 12, 0, 0))
        add_text(page, "ab", 0, 0)
        page.set_text_transform(Affine(12, 0, 0, 12, 20, 0))
        add_text(page, "c", 20, 0)
        assert [w.text for w in page.lines[0].words] == ["abc"]

    def test_fractional_shear_ignored(self, page):
        page.set_text_transform(Affine(1, 0, -0.2, 1, 0, 0))
        add_text(page, "ab", 0, 0)
        page.set_text_transform(Affine(1, 0, 0.2, 1, 0, 0))
        add_text(page, "c", 20, 0)
        assert [w.text for w in page.lines[0].words] == ["abc"]


# ── Layers ────────────────────────────────────────────────────────────


class TestLayers:
    def test_layers_listed_in_first_seen_order(self, page):
        add_text(page, "a", 0, 0, layer="B")
        add_text(page, "b", 0, 20, layer="A")
        add_text(page, "c", 0, 40, layer="B")
        assert page.layers == ("B", "A")

    def test_layer_lines_are_separate(self, page):
        add_text(page, "main", 0, 0)
        add_text(page, "ocg", 200, 0, layer="L")
        add_text(page, "more", 40, 0)
        texts = sorted((l.layer or "", l.text) for l in page.lines)
        assert texts == [("", "mainmore"), ("L", "ocg")]

    def test_visible_layer_merged_into_band(self, page):
        add_text(page, "aa", 0, 100)
        add_text(page, "cc", 80, 100)
        add_text(page, "bb", 40, 101, layer="L")
        words = [w.text for w in page.page_lines[0].words if not w.is_white_space]
        assert words == ["aa", "bb", "cc"]

    def test_hidden_layer_excluded(self, page):
        add_text(page, "main", 0, 0)
        add_text(page, "secret", 0, 100, layer="L")
        page.set_layer_visible("L", False)
        assert not page.is_layer_visible("L")
        assert band_texts(page) == ["main"]
        page.set_layer_visible("L", True)
        assert band_texts(page) == ["main", "secret"]

    def test_unknown_layer_uses_default(self):
        assert PageText().is_layer_visible("nope")
        hidden = PageText(TextLayoutConfig(layers_visible_by_default=False))
        assert not hidden.is_layer_visible("nope")
        add_text(hidden, "x", 0, 0, layer="nope")
        assert hidden.page_lines == ()

    def test_main_content_always_visible(self, page):
        assert page.is_layer_visible(None)

    def test_find_skips_hidden_layers(self, page):
        add_text(page, "x", 0, 0, layer="L")
        word = page.lines[0].words[0]
        assert page.find(word) is word
        page.set_layer_visible("L", False)
        assert page.find(word) is None


# ── Reading order ─────────────────────────────────────────────────────


class TestReadingOrder:
    def test_empty_page(self, page):
        assert page.page_lines == ()
        assert page.to_text() == ""

    def test_snapshot_cached_until_change(self, page):
        add_text(page, "a", 0, 0)
        first = page.page_lines
        assert page.page_lines is first
        add_text(page, "b", 0, 20)
        assert page.page_lines is not first

    def test_sort_is_idempotent(self, two_column_page):
        first = two_column_page.sort_and_format_text()
        second = two_column_page.sort_and_format_text()
        assert [b.text for b in first] == [b.text for b in second]
        assert [[w for w in b.words] for b in first] == [[w for w in b.words] for b in second]

    def test_columns_preserved(self, two_column_page):
        assert band_texts(two_column_page) == [
            "left one",
            "left two",
            "left three",
            "right one",
            "right two",
            "right three",
        ]

    def test_global_sort_when_columns_off(self):
        p = PageText(TextLayoutConfig(preserve_columns=False))
        for row, text in enumerate(["left one", "left two"]):
            add_text(p, text, 10, 100 + row * 20)
            p.new_line()
        for row, text in enumerate(["right one", "right two"]):
            add_text(p, text, 300, 100 + row * 20)
            p.new_line()
        assert band_texts(p) == ["left one", "right one", "left two", "right two"]

    def test_paint_order_right_to_left_row(self, page):
        add_text(page, "world", 100, 0)
        page.new_line()
        add_text(page, "hello", 0, 0)
        assert band_texts(page) == ["helloworld"]

    def test_superscript_stays_in_row(self, page):
        add_text(page, "x", 0, 100)
        add_text(page, "2", 10, 97, h=8)
        add_text(page, "y", 40, 100)
        page.new_line()
        assert len(page.page_lines) == 1

    def test_to_text(self, two_column_page):
        text = str(two_column_page)
        assert text.startswith("left one\nleft two\n")
        assert text.endswith("right three\n")
        assert text == two_column_page.to_text()

    def test_duplicate_suppression(self):
        p = PageText(TextLayoutConfig(check_duplicates=True))
        add_text(p, "bold", 0, 0)
        p.new_line()
        add_text(p, "bold", 0, 0)
        assert band_texts(p) == ["bold"]


# ── Selection ─────────────────────────────────────────────────────────


class TestSelection:
    def test_select_all_then_clear(self, two_column_page):
        p = two_column_page
        p.select_all()
        assert all(g.selected for band in p.page_lines for g in band.glyphs())
        p.clear_selected()
        for line in all_lines(p):
            assert not line.selected and not line.has_selected
            for word in line.words:
                assert not word.selected and not word.has_selected
                assert not any(g.selected for g in word.glyphs)

    def _paint(self, p, items):
        for text, x, y in items:
            add_text(p, text, x, y)
            p.new_line()
        p.select_all()
        return p.get_selected()

    def test_get_selected_sorts_row_by_x(self, page):
        # each row painted right cell first
        items = [("R1", 300, 100), ("L1", 10, 100), ("R2", 300, 120), ("L2", 10, 120)]
        assert self._paint(page, items) == "L1R1\nL2R2\n"

    def test_get_selected_keeps_columns(self, page):
        items = [("L1", 10, 100), ("L2", 10, 120), ("R1", 300, 100), ("R2", 300, 120)]
        assert self._paint(page, items) == "L1\nL2\nR1\nR2\n"

    def test_get_selected_top_down_without_columns(self):
        p = PageText(TextLayoutConfig(preserve_columns=False))
        items = [("L1", 10, 100), ("L2", 10, 120), ("R1", 300, 100), ("R2", 300, 120)]
        assert self._paint(p, items) == "L1\nR1\nL2\nR2\n"

    def test_get_selected_skips_unselected_bands(self, two_column_page):
        p = two_column_page
        p.select_in_rect(Rect(10, 120, 5, 5))
        assert p.get_selected() == "l\n"

    def test_nothing_selected(self, two_column_page):
        assert two_column_page.get_selected() == ""

    def test_select_in_rect_raises_hints(self, page):
        add_text(page, "abc", 0, 0)
        page.new_line()
        add_text(page, "xyz", 0, 50)
        count = page.select_in_rect(Rect(12, 2, 2, 2))
        assert count == 1
        band = page.page_lines[0]
        word = band.words[0]
        assert band.has_selected and word.has_selected
        assert not word.selected
        assert not page.page_lines[1].has_selected

    def test_select_in_rect_whole_word(self, page):
        add_text(page, "ab cd", 0, 0)
        page.select_in_rect(Rect(0, 0, 19, 10))
        assert [w.text for w in page.get_selected_word_text()] == ["ab"]

    def test_selected_words_in_reading_order(self, page):
        add_text(page, "zz", 100, 0)
        page.new_line()
        add_text(page, "aa", 0, 0)
        page.select_all()
        assert [w.text for w in page.get_selected_word_text()] == ["aa", "zz"]

    def test_redact_selected(self, page):
        add_text(page, "secret", 0, 0)
        page.new_line()
        add_text(page, "public", 0, 40)
        page.select_in_rect(Rect(0, 0, 100, 10))
        assert page.redact_selected() == 6
        assert page.redact_selected() == 0
        redacted = [g.text for band in page.page_lines for g in band.glyphs() if g.redacted]
        assert "".join(redacted) == "secret"

    def test_clear_highlighted(self, page):
        add_text(page, "ab", 0, 0)
        for band in page.page_lines:
            for w in band.words:
                w.highlight()
        page.clear_highlighted()
        assert not any(g.highlighted for band in page.page_lines for g in band.glyphs())


# ── find ──────────────────────────────────────────────────────────────


class TestFind:
    def _build(self):
        p = PageText()
        add_text(p, "alpha beta", 0, 0)
        return p

    def test_find_word_from_rebuilt_page(self):
        old = self._build()
        new = self._build()
        stale = old.page_lines[0].words[2]
        live = new.find(stale)
        assert live is not None and live is not stale
        assert live.text == "beta"
        assert live.key == stale.key

    def test_find_by_key(self):
        p = self._build()
        word = p.page_lines[0].words[0]
        assert p.find(word.key) is word

    def test_find_missing(self):
        p = self._build()
        assert p.find((1, 2.0, 3.0)) is None
        other = PageText()
        add_text(other, "alpha", 0, 0)
        assert p.find(other.page_lines[0].words[0]).text == "alpha"
        add_text(other, "gamma", 0, 50)
        assert p.find(other.page_lines[1].words[0]) is None


# ── Concurrency ───────────────────────────────────────────────────────


class TestConcurrency:
    def test_readers_during_construction(self):
        p = PageText()
        errors = []
        done = threading.Event()

        def reader():
            try:
                while not done.is_set():
                    bands = p.page_lines
                    assert isinstance(bands, tuple)
                    for band in bands:
                        band.text
            except Exception as exc:  # pragma: no cover - surfaced below
                errors.append(exc)

        t = threading.Thread(target=reader)
        t.start()
        try:
            for row in range(200):
                add_text(p, "row text", 0, row * 12)
                p.new_line()
        finally:
            done.set()
            t.join()
        assert errors == []
        assert len(p.page_lines) == 200
