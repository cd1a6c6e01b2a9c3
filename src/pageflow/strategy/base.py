"""Capability interface every layout strategy provides."""

from __future__ import annotations

from typing import List, Protocol

from ..models import LayoutEntity, MergeContext, Page
from ..page_type import PageType


class LayoutStrategy(Protocol):
    """Extraction, merge and reading-area rules for one page type.

    Implementations hold only configuration and are safe to share
    between threads.
    """

    page_type: PageType

    def extract_entities(self, page: Page) -> List[LayoutEntity]:
        ...

    def merge_context(self, entities: List[LayoutEntity], page: Page) -> MergeContext:
        ...

    def should_merge(self, a: LayoutEntity, b: LayoutEntity, ctx: MergeContext) -> bool:
        ...

    def reading_area(self, entity: LayoutEntity) -> int:
        ...
