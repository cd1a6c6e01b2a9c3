"""Tests for pageflow.ingest.extract — pdfplumber page to Page."""

from __future__ import annotations

import logging
from unittest.mock import MagicMock, patch

import pytest

from pageflow.config import LayoutConfig
from pageflow.ingest import IngestError, extract_page, extract_page_from_plumber
from pageflow.ingest.extract import (
    _Word,
    build_lines,
    font_style,
    median_space_gap,
    normalize_color,
    split_line_spans,
)
from pageflow.models import ElementKind

# ── Helpers ────────────────────────────────────────────────────────────


def _w(x0, top, x1, text, bottom=None, fontname="Helvetica", size=10.0) -> dict:
    return {
        "x0": x0,
        "x1": x1,
        "top": top,
        "bottom": top + 10 if bottom is None else bottom,
        "text": text,
        "fontname": fontname,
        "size": size,
    }


def _word(x0, top, x1, text="w") -> _Word:
    return _Word(x0=x0, top=top, x1=x1, bottom=top + 10, text=text)


def _fake_page(words, width=612.0, height=792.0, lines=(), rects=(), images=(), tables=()):
    page = MagicMock()
    page.width = width
    page.height = height
    page.extract_words.return_value = list(words)
    page.chars = []
    page.lines = list(lines)
    page.rects = list(rects)
    page.images = list(images)
    page.find_tables.return_value = list(tables)
    return page


def _fake_table(bbox, rows):
    table = MagicMock()
    table.bbox = bbox
    table.rows = [MagicMock(cells=cells) for cells in rows]
    return table


# ── Word-level helpers ─────────────────────────────────────────────────


class TestFontStyle:
    @pytest.mark.parametrize(
        "fontname, expected",
        [
            ("ABCDEF+Arial-BoldMT", (True, False)),
            ("Times-Italic", (False, True)),
            ("Helvetica-BoldOblique", (True, True)),
            ("Helvetica", (False, False)),
            ("", (False, False)),
        ],
    )
    def test_style(self, fontname, expected):
        assert font_style(fontname) == expected


class TestNormalizeColor:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ((0,), (0, 0, 0)),
            (1, (255, 255, 255)),
            ((1, 0, 0), (255, 0, 0)),
            ((0, 0, 0, 1), (0, 0, 0)),
            ((0, 1, 1, 0), (255, 0, 0)),
            (None, None),
            ("P0", None),
            ((1, 2), None),
        ],
    )
    def test_normalize(self, raw, expected):
        assert normalize_color(raw) == expected


class TestLines:
    def test_build_lines_sorted(self):
        words = [_word(200, 100, 230, "b"), _word(72, 101, 100, "a"), _word(72, 120, 100, "c")]
        lines = build_lines(words, LayoutConfig())
        assert [[w.text for w in line] for line in lines] == [["a", "b"], ["c"]]

    def test_build_lines_empty(self):
        assert build_lines([], LayoutConfig()) == []

    def test_median_space_gap(self):
        lines = [[_word(0, 0, 10), _word(13, 0, 20), _word(24, 0, 30)]]
        assert median_space_gap(lines) == 3.5
        assert median_space_gap([[_word(0, 0, 10)]]) == 3.0

    def test_split_line_spans(self):
        line = [_word(0, 0, 10, "a"), _word(13, 0, 20, "b"), _word(100, 0, 120, "c")]
        spans = split_line_spans(line, 7.5)
        assert [[w.text for w in s] for s in spans] == [["a", "b"], ["c"]]
        assert split_line_spans([], 7.5) == []


# ── extract_page_from_plumber ──────────────────────────────────────────


class TestExtractPageFromPlumber:
    def _words(self):
        return [
            _w(72, 100, 100, "Hello", fontname="ABC+Arial-BoldMT"),
            _w(103, 100, 130, "world"),
            _w(400, 100, 430, "Right"),
            _w(72, 112, 110, "second"),
            _w(113, 112, 130, "line"),
        ]

    def test_spans_become_elements(self):
        page = extract_page_from_plumber(_fake_page(self._words()), index=2)
        assert page.index == 2
        assert page.width == 612.0
        texts = [el.text for el in page.elements if el.kind == ElementKind.text]
        assert texts == ["Hello world", "Right", "second line"]
        hello = page.elements[0]
        assert hello.left == 72
        assert hello.width == 58
        assert hello.bold is True
        assert hello.font_size == 10.0

    def test_vertical_group_chains_left_aligned_lines(self):
        page = extract_page_from_plumber(_fake_page(self._words()))
        assert len(page.vertical_groups) == 1
        assert [el.text for el in page.vertical_groups[0].elements] == ["Hello world", "second line"]

    def test_words_clipped_and_degenerate_skipped(self):
        words = [
            _w(600, 100, 650, "edge"),
            _w(100, 100, 100, "zero"),
            _w(72, 200, 90, "   "),
        ]
        page = extract_page_from_plumber(_fake_page(words))
        assert [el.text for el in page.elements] == ["edge"]
        assert page.elements[0].width == 12

    def test_rules_and_images(self):
        page = extract_page_from_plumber(
            _fake_page(
                [_w(72, 100, 100, "text")],
                lines=[{"x0": 72, "x1": 540, "top": 90, "bottom": 90}],
                rects=[
                    {"x0": 300, "x1": 301, "top": 100, "bottom": 400},
                    {"x0": 0, "x1": 100, "top": 0, "bottom": 100},
                ],
                images=[{"x0": 10, "x1": 60, "top": 20, "bottom": 70}],
            )
        )
        rules = [el for el in page.elements if el.kind == ElementKind.rule]
        assert len(rules) == 2
        horizontal, vertical = rules
        assert horizontal.stretch == 468 and not horizontal.vertical
        assert vertical.stretch == 300 and vertical.vertical
        images = [el for el in page.elements if el.kind == ElementKind.image]
        assert [(im.width, im.height) for im in images] == [(50, 50)]

    def test_ruled_table(self):
        table = _fake_table(
            (72, 300, 272, 340),
            [
                [(72, 300, 172, 320), (172, 300, 272, 320)],
                [(72, 320, 172, 340), None],
            ],
        )
        words = [
            _w(80, 305, 90, "A"),
            _w(180, 305, 190, "B"),
            _w(80, 325, 90, "C"),
            _w(72, 400, 100, "Note"),
        ]
        page = extract_page_from_plumber(_fake_page(words, tables=[table]))
        assert len(page.tables) == 1
        grid = page.tables[0]
        assert grid.n_rows() == 2 and grid.n_cols() == 2
        assert grid.cells[1][1] is grid.cells[1][0]
        assert grid.bordered_fraction() == 1.0
        assert [c.text() for c in grid.unique_cells()] == ["A", "B", "C"]
        free = [el.text for el in page.elements if page.context_of(el) is None]
        assert free == ["Note"]

    def test_empty_table_skipped(self, caplog):
        table = _fake_table((300, 500, 400, 520), [[(300, 500, 400, 520)]])
        with caplog.at_level(logging.WARNING):
            page = extract_page_from_plumber(_fake_page([_w(72, 100, 100, "text")], tables=[table]))
        assert page.tables == []
        assert "skipping empty table" in caplog.text

    def test_table_detection_disabled(self):
        fake = _fake_page([_w(72, 100, 100, "text")])
        extract_page_from_plumber(fake, cfg=LayoutConfig(ingest_find_tables=False))
        fake.find_tables.assert_not_called()

    def test_blank_page_warns(self, caplog):
        with caplog.at_level(logging.WARNING):
            page = extract_page_from_plumber(_fake_page([]), index=5)
        assert page.elements == []
        assert "page 5: no text extracted" in caplog.text


# ── extract_page ───────────────────────────────────────────────────────


class TestExtractPage:
    def _pdf(self, pages):
        mock_pdf = MagicMock()
        mock_pdf.pages = pages
        mock_pdf.__enter__ = MagicMock(return_value=mock_pdf)
        mock_pdf.__exit__ = MagicMock(return_value=False)
        return mock_pdf

    def test_reads_requested_page(self, tmp_path):
        f = tmp_path / "doc.pdf"
        f.write_bytes(b"%PDF-1.4\n%%EOF")
        pages = [_fake_page([_w(72, 100, 100, "zero")]), _fake_page([_w(72, 100, 100, "one")])]
        with patch("pageflow.ingest.extract.pdfplumber.open", return_value=self._pdf(pages)):
            page = extract_page(f, 1)
        assert page.index == 1
        assert [el.text for el in page.elements] == ["one"]

    def test_out_of_range(self, tmp_path):
        f = tmp_path / "doc.pdf"
        f.write_bytes(b"%PDF-1.4\n%%EOF")
        with patch("pageflow.ingest.extract.pdfplumber.open", return_value=self._pdf([])):
            with pytest.raises(IngestError, match="out of range"):
                extract_page(f, 0)

    def test_missing_file(self, tmp_path):
        with pytest.raises(IngestError, match="not found"):
            extract_page(tmp_path / "missing.pdf", 0)
