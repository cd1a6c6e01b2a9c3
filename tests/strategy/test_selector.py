"""Tests for strategy selection by page type."""

import pytest
from conftest import make_page, make_text

from pageflow.config import LayoutConfig
from pageflow.page_type import PageType
from pageflow.strategy import (
    MultiColumnStrategy,
    SingleColumnStrategy,
    TableDominantStrategy,
    get_strategy,
    select_strategy,
)


class TestGetStrategy:
    @pytest.mark.parametrize(
        "page_type, expected",
        [
            (PageType.single_column, SingleColumnStrategy),
            (PageType.multi_column, MultiColumnStrategy),
            (PageType.table_dominant, TableDominantStrategy),
            (PageType.mixed, SingleColumnStrategy),
            (None, SingleColumnStrategy),
        ],
    )
    def test_mapping(self, page_type, expected):
        assert type(get_strategy(page_type)) is expected

    def test_config_passed_through(self):
        cfg = LayoutConfig(fallback_max_gap=3.0)
        assert get_strategy(PageType.multi_column, cfg).cfg is cfg

    def test_strategy_reports_page_type(self):
        assert get_strategy(PageType.table_dominant).page_type == PageType.table_dominant


class TestSelectStrategy:
    def test_two_column_page(self):
        page = make_page([make_text(72, 300, 200, "left"), make_text(330, 302, 200, "right")])
        assert isinstance(select_strategy(page), MultiColumnStrategy)

    def test_empty_page(self):
        assert isinstance(select_strategy(make_page()), SingleColumnStrategy)
