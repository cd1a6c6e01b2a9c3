"""Layout strategies and the selector that maps a page type to one."""

from __future__ import annotations

import logging
from typing import Optional

from ..config import LayoutConfig
from ..models import Page
from ..page_type import PageType, detect_page_type
from .base import LayoutStrategy
from .multi_column import MultiColumnStrategy
from .single_column import SingleColumnStrategy
from .table_dominant import TableDominantStrategy

log = logging.getLogger(__name__)

__all__ = [
    "LayoutStrategy",
    "MultiColumnStrategy",
    "SingleColumnStrategy",
    "TableDominantStrategy",
    "get_strategy",
    "select_strategy",
]


def get_strategy(
    page_type: Optional[PageType],
    cfg: Optional[LayoutConfig] = None,
) -> LayoutStrategy:
    """Strategy for *page_type*; mixed or unknown types read as single-column."""
    if cfg is None:
        cfg = LayoutConfig()
    if page_type == PageType.multi_column:
        return MultiColumnStrategy(cfg)
    if page_type == PageType.table_dominant:
        return TableDominantStrategy(cfg)
    if page_type != PageType.single_column:
        log.debug("no dedicated strategy for %r, using single-column", page_type)
    return SingleColumnStrategy(cfg)


def select_strategy(page: Page, cfg: Optional[LayoutConfig] = None) -> LayoutStrategy:
    """Classify *page* and return the matching strategy."""
    return get_strategy(detect_page_type(page, cfg), cfg)
