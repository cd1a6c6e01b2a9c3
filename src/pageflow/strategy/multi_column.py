"""Strategy for two-column pages.

Merges never cross the gutter unless one side is a wide, full-flow
block, and a block's reading area is the column its center falls in.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import ClassVar, List

from ..config import LayoutConfig
from ..models import LayoutEntity, MergeContext, Page, TextGroup
from ..page_type import PageType
from ..splitting import split_group_by_columns, split_group_by_list_items
from ..tables import is_real_table
from . import common

log = logging.getLogger(__name__)


def crosses_gutter(
    a: LayoutEntity,
    b: LayoutEntity,
    ctx: MergeContext,
    cfg: LayoutConfig,
) -> bool:
    """True when merging *a* and *b* would join text from both columns."""
    pw = ctx.page_width
    mid = pw * cfg.gutter_frac
    wide = pw * cfg.wide_block_frac

    for e in (a, b):
        if e.width <= wide and e.left < mid < e.right:
            return True

    if a.width > wide or b.width > wide:
        return False

    a_left = a.center_x < pw * cfg.gutter_left_frac
    b_left = b.center_x < pw * cfg.gutter_left_frac
    a_right = a.center_x > pw * cfg.gutter_right_frac
    b_right = b.center_x > pw * cfg.gutter_right_frac
    if (a_left and b_right) or (a_right and b_left):
        return True

    # A same-line neighbour reaching past the gutter belongs to the other column.
    if (a.right > mid and b_left) or (b.right > mid and a_left):
        return abs(a.top - b.top) < cfg.gutter_top_tol
    return False


def same_column_fragment(
    a: LayoutEntity,
    b: LayoutEntity,
    ctx: MergeContext,
    cfg: LayoutConfig,
) -> bool:
    """Same-line pieces must also be close together and on one side."""
    h_gap = common.horizontal_gap(a, b)
    if h_gap > cfg.fragment_max_hgap or h_gap > ctx.page_width * cfg.fragment_max_hgap_frac:
        return False
    mid = ctx.page_width * cfg.gutter_frac
    return (a.center_x < mid) == (b.center_x < mid)


def column_right_edge(a: LayoutEntity, ctx: MergeContext, cfg: LayoutConfig) -> float:
    """Left-column blocks wrap at the column's own right edge."""
    if ctx.left_column_right is not None and a.right <= ctx.page_width * cfg.gutter_frac:
        return ctx.left_column_right
    return ctx.content_right


@dataclass(frozen=True)
class MultiColumnStrategy:
    cfg: LayoutConfig = field(default_factory=LayoutConfig)
    page_type: ClassVar[PageType] = PageType.multi_column

    def extract_entities(self, page: Page) -> List[LayoutEntity]:
        def split(group: TextGroup) -> List[TextGroup]:
            out: List[TextGroup] = []
            for column in split_group_by_columns(group, page.width, self.cfg):
                out.extend(split_group_by_list_items(column, self.cfg))
            return out

        return common.extract_entities(page, self.cfg, is_real_table, split)

    def merge_context(self, entities: List[LayoutEntity], page: Page) -> MergeContext:
        ctx = common.build_merge_context(entities, page, self.cfg, multi_column=True)
        log.debug("left column right edge: %s", ctx.left_column_right)
        return ctx

    def should_merge(self, a: LayoutEntity, b: LayoutEntity, ctx: MergeContext) -> bool:
        rules = common.MergeRules(
            fallback_gap=self.cfg.fallback_max_gap,
            guard=crosses_gutter,
            fragment_filter=same_column_fragment,
            hanging_indent=False,
            wrap_edge=column_right_edge,
        )
        return common.should_merge(a, b, ctx, self.cfg, rules, self.reading_area)

    def reading_area(self, entity: LayoutEntity) -> int:
        """0 for the left column and full-width flow, 1 for the right column.

        Wide header/footer banners read -1 / 2 as on single-column pages.
        """
        cfg = self.cfg
        banner = common.banner_area(entity, cfg)
        if banner is not None:
            return banner

        pw = entity.page_width
        if entity.width > pw * cfg.full_flow_width_frac:
            return 0
        if entity.left <= pw * cfg.gutter_span_left_frac and entity.right >= pw * cfg.gutter_span_right_frac:
            return 0
        if entity.left < pw * cfg.left_margin_flow_frac:
            return 0
        if (
            abs(entity.center_x - pw / 2.0) < cfg.center_flow_tol
            and entity.width < pw * cfg.center_flow_max_width_frac
        ):
            return 0
        return 0 if entity.center_x < pw * cfg.column_center_split_frac else 1
