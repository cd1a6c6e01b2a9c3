"""Strategy for pages mostly covered by tables.

Tables are preferred over flattening, captions stay on their own and
everything that is not a page header or footer shares one flow.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, List

from ..config import LayoutConfig
from ..models import LayoutEntity, MergeContext, Page, TextGroup
from ..page_type import PageType
from ..splitting import split_group_by_list_items
from ..tables import is_strict_real_table
from . import common


@dataclass(frozen=True)
class TableDominantStrategy:
    cfg: LayoutConfig = field(default_factory=LayoutConfig)
    page_type: ClassVar[PageType] = PageType.table_dominant

    def _split(self, group: TextGroup) -> List[TextGroup]:
        return split_group_by_list_items(group, self.cfg)

    def extract_entities(self, page: Page) -> List[LayoutEntity]:
        return common.extract_entities(page, self.cfg, is_strict_real_table, self._split)

    def merge_context(self, entities: List[LayoutEntity], page: Page) -> MergeContext:
        return common.build_merge_context(entities, page, self.cfg)

    def should_merge(self, a: LayoutEntity, b: LayoutEntity, ctx: MergeContext) -> bool:
        rules = common.MergeRules(
            fallback_gap=self.cfg.table_fallback_max_gap,
            caption_guard=True,
            hanging_indent=False,
        )
        return common.should_merge(a, b, ctx, self.cfg, rules, self.reading_area)

    def reading_area(self, entity: LayoutEntity) -> int:
        cfg = self.cfg
        if entity.top < entity.page_height * cfg.table_header_frac:
            return -1
        if (
            entity.bottom > entity.page_height * cfg.table_footer_frac
            and entity.height < cfg.table_footer_max_height
        ):
            return 2
        return 0
