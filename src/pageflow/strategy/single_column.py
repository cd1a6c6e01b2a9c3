"""Strategy for ordinary one-column pages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, List

from ..config import LayoutConfig
from ..models import LayoutEntity, MergeContext, Page, TextGroup
from ..page_type import PageType
from ..splitting import split_group_by_list_items
from ..tables import is_real_table
from . import common


@dataclass(frozen=True)
class SingleColumnStrategy:
    cfg: LayoutConfig = field(default_factory=LayoutConfig)
    page_type: ClassVar[PageType] = PageType.single_column

    def _split(self, group: TextGroup) -> List[TextGroup]:
        return split_group_by_list_items(group, self.cfg)

    def extract_entities(self, page: Page) -> List[LayoutEntity]:
        return common.extract_entities(page, self.cfg, is_real_table, self._split)

    def merge_context(self, entities: List[LayoutEntity], page: Page) -> MergeContext:
        return common.build_merge_context(entities, page, self.cfg)

    def should_merge(self, a: LayoutEntity, b: LayoutEntity, ctx: MergeContext) -> bool:
        rules = common.MergeRules(fallback_gap=self.cfg.fallback_max_gap)
        return common.should_merge(a, b, ctx, self.cfg, rules, self.reading_area)

    def reading_area(self, entity: LayoutEntity) -> int:
        """-1 for page headers, 2 for footers, 0 for the body."""
        banner = common.banner_area(entity, self.cfg)
        if banner is not None:
            return banner
        if (
            entity.top < entity.page_height * self.cfg.header_band_frac
            and entity.width < entity.page_width * self.cfg.header_max_width_frac
        ):
            return -1
        return 0
