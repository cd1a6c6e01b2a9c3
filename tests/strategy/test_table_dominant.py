"""Tests for pageflow.strategy.table_dominant."""

from conftest import make_entity, make_page, make_table, make_text, texts_of

from pageflow.analyzer import analyze_page
from pageflow.page_type import PageType
from pageflow.strategy import SingleColumnStrategy, TableDominantStrategy


class TestReadingArea:
    def test_header_band(self):
        assert TableDominantStrategy().reading_area(make_entity(72, 50, 100, "Report")) == -1

    def test_short_footer(self):
        assert TableDominantStrategy().reading_area(make_entity(72, 750, 100, "Page 4")) == 2

    def test_tall_block_near_bottom_is_body(self):
        e = make_entity(72, 700, 300, "notes", height=60)
        assert TableDominantStrategy().reading_area(e) == 0

    def test_body(self):
        assert TableDominantStrategy().reading_area(make_entity(72, 300, 468, "body")) == 0


class TestExtraction:
    def test_tall_grid_kept_as_table(self):
        page = make_page(tables=[make_table(3, 3, cell_h=200)])
        entities = TableDominantStrategy().extract_entities(page)
        assert len(entities) == 1
        assert entities[0].is_table

        flattened = SingleColumnStrategy().extract_entities(page)
        assert len(flattened) == 3


class TestShouldMerge:
    def test_caption_kept_apart(self):
        a = make_entity(72, 100, 300, "Table 1 Revenue by region")
        b = make_entity(72, 111, 300, "continued caption text")
        page = make_page()

        td = TableDominantStrategy()
        assert not td.should_merge(a, b, td.merge_context([a, b], page))

        single = SingleColumnStrategy()
        assert single.should_merge(a, b, single.merge_context([a, b], page))

    def test_looser_fallback_gap(self):
        a = make_entity(72, 300, 480, "a long line of text that runs close to the margin")
        b = make_entity(72, 317, 300, "and continues below")
        page = make_page()

        td = TableDominantStrategy()
        assert td.should_merge(a, b, td.merge_context([a, b], page))

        single = SingleColumnStrategy()
        assert not single.should_merge(a, b, single.merge_context([a, b], page))

    def test_no_hanging_indent_continuation(self):
        a = make_entity(72, 300, 468, "• Bullet item text that runs the full width of the column")
        b = make_entity(84, 312, 456, "and continues on the next line")
        page = make_page()

        td = TableDominantStrategy()
        assert not td.should_merge(a, b, td.merge_context([a, b], page))


class TestAnalyzePage:
    def test_caption_table_source(self):
        table = make_table(20, 5, x0=40, y0=120, cell_w=110, cell_h=28)
        page = make_page(
            [
                make_text(72, 100, 300, "Table 1 Revenue by region"),
                make_text(72, 680, 300, "Source: annual filings"),
            ],
            tables=[table],
        )
        layout = analyze_page(page)
        assert layout.page_type == PageType.table_dominant
        assert texts_of(layout.entities) == [
            "Table 1 Revenue by region",
            "[TABLE]",
            "Source: annual filings",
        ]
        assert len(layout.tables()) == 1
