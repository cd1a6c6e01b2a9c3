"""Page-type classifier: single-column, multi-column or table-dominant.

Works on raw element geometry only.  Elements in the top and bottom
margin bands are ignored so running headers and footers cannot fake a
second column.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from .config import LayoutConfig
from .models import BBox, Page, TabularGroup

log = logging.getLogger(__name__)


class PageType(str, Enum):
    """Layout verdict for a page."""

    single_column = "single_column"
    multi_column = "multi_column"
    table_dominant = "table_dominant"
    mixed = "mixed"


@dataclass
class LayoutFeatures:
    """Geometry counts gathered by :func:`analyze_layout_features`."""

    total_elements: int = 0
    left_column_elements: int = 0
    right_column_elements: int = 0
    parallel_block_pairs: int = 0
    table_count: int = 0
    table_coverage_ratio: float = 0.0

    def to_dict(self) -> dict:
        return {
            "total_elements": self.total_elements,
            "left_column_elements": self.left_column_elements,
            "right_column_elements": self.right_column_elements,
            "parallel_block_pairs": self.parallel_block_pairs,
            "table_count": self.table_count,
            "table_coverage_ratio": round(self.table_coverage_ratio, 4),
        }


def _count_parallel_pairs(
    blocks: List[Tuple[BBox, float]],
    page_width: float,
    cfg: LayoutConfig,
) -> int:
    """Pairs that overlap vertically while sitting far apart horizontally."""
    pairs = 0
    min_sep = page_width * cfg.parallel_center_sep_frac
    for i in range(len(blocks)):
        a, a_cx = blocks[i]
        for j in range(i + 1, len(blocks)):
            b, b_cx = blocks[j]
            v_overlap = min(a.y1, b.y1) - max(a.y0, b.y0)
            if v_overlap > cfg.parallel_min_v_overlap and abs(a_cx - b_cx) > min_sep:
                pairs += 1
    return pairs


def _table_area(table: TabularGroup) -> float:
    bb = table.bbox()
    return bb.area() if bb is not None else 0.0


def analyze_layout_features(
    page: Page,
    cfg: Optional[LayoutConfig] = None,
) -> LayoutFeatures:
    """Collect column, parallel-block and table-coverage counts for *page*."""
    if cfg is None:
        cfg = LayoutConfig()

    pw, ph = page.width, page.height
    features = LayoutFeatures(total_elements=len(page.elements))
    blocks: List[Tuple[BBox, float]] = []
    seen_tables: set = set()
    table_area = 0.0

    for el in page.elements:
        if not el.has_position():
            continue
        top = el.y0()
        if top < ph * cfg.page_margin_band or top > ph * (1.0 - cfg.page_margin_band):
            continue

        left = el.x0()
        width = el.width if el.width is not None else 0.0
        height = el.height if el.height is not None else cfg.default_element_height
        center_x = left + width / 2.0

        if center_x < pw * cfg.left_column_center_frac:
            features.left_column_elements += 1
        elif center_x > pw * cfg.right_column_center_frac:
            features.right_column_elements += 1

        if 0 < width < pw * cfg.parallel_block_max_frac:
            blocks.append((BBox(left, top, left + width, top + height), center_x))

        ctx = page.context_of(el)
        if isinstance(ctx, TabularGroup) and id(ctx) not in seen_tables:
            seen_tables.add(id(ctx))
            features.table_count += 1
            table_area += _table_area(ctx)

    page_area = page.area()
    features.table_coverage_ratio = table_area / page_area if page_area > 0 else 0.0
    features.parallel_block_pairs = _count_parallel_pairs(blocks, pw, cfg)
    return features


def classify_features(
    features: LayoutFeatures,
    cfg: Optional[LayoutConfig] = None,
) -> PageType:
    """Map gathered features to a :class:`PageType`."""
    if cfg is None:
        cfg = LayoutConfig()

    if features.table_count >= 1 and features.table_coverage_ratio > cfg.table_dominant_coverage:
        return PageType.table_dominant
    if (
        features.left_column_elements >= cfg.min_column_elements
        and features.right_column_elements >= cfg.min_column_elements
    ) or features.parallel_block_pairs >= 1:
        return PageType.multi_column
    return PageType.single_column


def detect_page_type(
    page: Page,
    cfg: Optional[LayoutConfig] = None,
) -> PageType:
    """Classify *page* from its element geometry."""
    features = analyze_layout_features(page, cfg)
    page_type = classify_features(features, cfg)
    log.debug(
        "page %d: %s (left=%d right=%d pairs=%d tables=%d coverage=%.2f)",
        page.index,
        page_type.value,
        features.left_column_elements,
        features.right_column_elements,
        features.parallel_block_pairs,
        features.table_count,
        features.table_coverage_ratio,
    )
    return page_type
