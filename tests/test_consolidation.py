"""Tests for pageflow.consolidation — merging fragments and reading order."""

import itertools

from conftest import PAGE_H, PAGE_W, make_entity, make_page, make_table, make_text, texts_of

from pageflow.consolidation import (
    consolidate,
    merge_entities,
    order_by_lines,
    sort_by_reading_order,
)
from pageflow.models import LayoutEntity
from pageflow.strategy import SingleColumnStrategy


def _body_page():
    """A heading, two wrapped paragraphs and a table."""
    elements = [
        make_text(72, 100, 150, "Introduction", font_size=14, bold=True),
        make_text(72, 124, 468, "this report describes the layout engine and how it rebuilds"),
        make_text(72, 136, 300, "reading order from runs."),
        make_text(72, 166, 468, "a second paragraph starts after a blank line and carries on"),
        make_text(72, 178, 200, "to its end here."),
    ]
    return make_page(elements, tables=[make_table(3, 3, y0=300)])


class TestOrderByLines:
    def test_same_line_sorted_by_left(self):
        a = make_text(200, 100, 50, "b")
        b = make_text(72, 102, 50, "a")
        c = make_text(72, 120, 50, "c")
        assert order_by_lines([c, a, b]) == [b, a, c]

    def test_line_bucket_anchored_on_first_top(self):
        a = make_text(300, 100, 50, "a")
        b = make_text(200, 104, 50, "b")
        c = make_text(72, 108, 50, "c")
        assert order_by_lines([a, b, c]) == [b, a, c]


class TestMergeEntities:
    def test_elements_in_line_order(self):
        a = make_entity(72, 112, 300, "second")
        b = make_entity(72, 100, 300, "first")
        merged = merge_entities(a, b)
        assert [el.text for el in merged.elements] == ["first", "second"]
        assert merged.top == 100
        assert merged.bottom == 122

    def test_first_line_left_from_upper_entity(self):
        upper = make_entity(72, 100, 300, "first", first_line_indent=18.0)
        lower = make_entity(72, 112, 300, "second")
        assert merge_entities(lower, upper).first_line_left == 90
        assert merge_entities(upper, lower).first_line_left == 90


class TestConsolidate:
    def test_always_merge_collapses_paragraphs(self):
        entities = [make_entity(72, 100 + 12 * i, 300, f"line {i}") for i in range(4)]
        result = consolidate(entities, lambda a, b: True)
        assert len(result) == 1
        assert len(result[0].elements) == 4

    def test_never_merge_is_identity(self):
        entities = [make_entity(72, 100 + 12 * i, 300, f"line {i}") for i in range(4)]
        result = consolidate(entities, lambda a, b: False)
        assert result == entities

    def test_tables_pass_through(self):
        table = LayoutEntity.from_group(make_table(3, 3, y0=300), PAGE_W, PAGE_H)
        para = make_entity(72, 100, 300, "para")
        other = make_entity(72, 112, 300, "more")
        result = consolidate([para, table, other], lambda a, b: True)
        assert len(result) == 2
        assert result[1] is table

    def test_first_pair_wins_and_scan_restarts(self):
        seen = []

        def pred(a, b):
            seen.append((a.text(), b.text()))
            return a.text() == "a" and b.text() == "c"

        entities = [make_entity(72, 100 + 20 * i, 300, t) for i, t in enumerate("abc")]
        result = consolidate(entities, pred)
        assert [e.text() for e in result][1] == "b"
        assert seen[:3] == [("a", "b"), ("a", "c"), ("a\n\nc", "b")]

    def test_short_input(self):
        assert consolidate([], lambda a, b: True) == []
        one = [make_entity(72, 100, 300, "x")]
        assert consolidate(one, lambda a, b: True) == one

    def test_idempotent_with_strategy_predicate(self):
        page = _body_page()
        strategy = SingleColumnStrategy()
        candidates = sorted(strategy.extract_entities(page), key=lambda e: e.top)
        ctx = strategy.merge_context(candidates, page)

        def pred(a, b):
            return strategy.should_merge(a, b, ctx)

        once = consolidate(candidates, pred)
        again = consolidate(once, pred)
        assert again == once
        assert texts_of(once) == [
            "Introduction",
            "this report describes the layout engine and how it rebuilds "
            "reading order from runs.",
            "a second paragraph starts after a blank line and carries on "
            "to its end here.",
            "[TABLE]",
        ]


class TestSortByReadingOrder:
    def test_area_then_top(self):
        header = make_entity(72, 20, 100, "header")
        body = make_entity(72, 300, 100, "body")
        footer = make_entity(72, 760, 100, "footer")
        areas = {id(header): -1, id(body): 0, id(footer): 2}
        ordered = sort_by_reading_order([footer, body, header], lambda e: areas[id(e)])
        assert texts_of(ordered) == ["header", "body", "footer"]

    def test_lower_area_before_higher_top(self):
        right_top = make_entity(330, 100, 200, "right column")
        left_low = make_entity(72, 400, 200, "left column")
        ordered = sort_by_reading_order(
            [right_top, left_low], lambda e: 0 if e.left < 300 else 1
        )
        assert texts_of(ordered) == ["left column", "right column"]

    def test_same_row_read_left_to_right(self):
        right = make_entity(300, 100, 100, "right")
        left = make_entity(72, 101.5, 100, "left")
        below = make_entity(72, 130, 100, "below")
        ordered = sort_by_reading_order([below, right, left], lambda e: 0)
        assert texts_of(ordered) == ["left", "right", "below"]

    def test_order_independent_of_input_permutation(self):
        entities = [
            make_entity(72, 100, 100, "a"),
            make_entity(300, 101, 100, "b"),
            make_entity(72, 200, 100, "c"),
            make_entity(72, 200, 100, "d"),
            make_entity(330, 50, 100, "e"),
        ]

        def area(e):
            return 1 if e.left > 320 else 0

        expected = texts_of(sort_by_reading_order(entities, area))
        for perm in itertools.permutations(entities):
            assert texts_of(sort_by_reading_order(list(perm), area)) == expected
        assert expected == ["a", "b", "c", "d", "e"]
