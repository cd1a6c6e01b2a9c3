"""Page analyzer: classify, extract, consolidate and order one page.

This is the engine entry point.  It holds no state between calls, so
pages may be analyzed from several threads at once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .config import LayoutConfig
from .consolidation import consolidate, sort_by_reading_order
from .models import LayoutEntity, Page
from .page_type import LayoutFeatures, PageType, analyze_layout_features, classify_features
from .strategy import LayoutStrategy, get_strategy

log = logging.getLogger(__name__)


@dataclass
class PageLayout:
    """Reading-order entities of a page plus the facts that produced them."""

    page_index: int
    page_width: float
    page_height: float
    page_type: PageType
    features: LayoutFeatures
    entities: List[LayoutEntity] = field(default_factory=list)
    # Entity count before consolidation.
    candidates: int = 0

    def paragraphs(self) -> List[LayoutEntity]:
        return [e for e in self.entities if not e.is_table]

    def tables(self) -> List[LayoutEntity]:
        return [e for e in self.entities if e.is_table]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        return {
            "page": self.page_index,
            "page_width": self.page_width,
            "page_height": self.page_height,
            "page_type": self.page_type.value,
            "features": self.features.to_dict(),
            "candidates": self.candidates,
            "entities": [
                dict(e.to_dict(), order=i) for i, e in enumerate(self.entities)
            ],
        }


def extract_candidates(page: Page, strategy: LayoutStrategy) -> List[LayoutEntity]:
    """Strategy extraction followed by a stable sort on top edge."""
    entities = strategy.extract_entities(page)
    return sorted(entities, key=lambda e: e.top)


def analyze_page(
    page: Page,
    cfg: Optional[LayoutConfig] = None,
    strategy: Optional[LayoutStrategy] = None,
) -> PageLayout:
    """Reconstruct the reading structure of *page*.

    Parameters
    ----------
    page : Page
        Positioned elements plus upstream grouping hints.
    cfg : LayoutConfig, optional
        Heuristic thresholds.  Defaults to ``LayoutConfig()``.
    strategy : LayoutStrategy, optional
        Force a strategy instead of selecting one from the page type.

    Returns
    -------
    PageLayout
        Entities in reading order with the page type and features.
    """
    if cfg is None:
        cfg = LayoutConfig()

    features = analyze_layout_features(page, cfg)
    page_type = classify_features(features, cfg)
    if strategy is None:
        strategy = get_strategy(page_type, cfg)

    candidates = extract_candidates(page, strategy)
    ctx = strategy.merge_context(candidates, page)
    merged = consolidate(
        candidates,
        lambda a, b: strategy.should_merge(a, b, ctx),
        line_tol=cfg.merge_line_tol,
    )
    ordered = sort_by_reading_order(
        merged, strategy.reading_area, same_row_tol=cfg.same_row_tol
    )

    log.info(
        "page %d: %s via %s, %d candidates -> %d entities (%d tables)",
        page.index,
        page_type.value,
        type(strategy).__name__,
        len(candidates),
        len(ordered),
        sum(1 for e in ordered if e.is_table),
    )
    return PageLayout(
        page_index=page.index,
        page_width=page.width,
        page_height=page.height,
        page_type=page_type,
        features=features,
        entities=ordered,
        candidates=len(candidates),
    )
