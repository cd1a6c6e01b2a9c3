"""Page layout reconstruction: paragraphs and tables in reading order.

Frequently-used symbols are re-exported here for convenience.  For the
individual heuristics import from the submodules, e.g.::

    from pageflow.tables import is_real_table
    from pageflow.strategy.common import check_line_wrap
"""

# ── Core models & config ──────────────────────────────────────────────

from .analyzer import PageLayout, analyze_page
from .config import ConfigValidationError, LayoutConfig
from .consolidation import consolidate, sort_by_reading_order
from .models import (
    BBox,
    Cell,
    Element,
    ElementKind,
    EntityKind,
    LayoutEntity,
    LayoutInputError,
    MergeContext,
    Page,
    TabularGroup,
    TextGroup,
)
from .page_type import LayoutFeatures, PageType, detect_page_type

# ── Strategies ────────────────────────────────────────────────────────

from .strategy import (
    LayoutStrategy,
    MultiColumnStrategy,
    SingleColumnStrategy,
    TableDominantStrategy,
    get_strategy,
    select_strategy,
)

# ── Pipeline, ingest & export ─────────────────────────────────────────

from .export import draw_layout_overlay, page_from_dict, page_to_dict, serialize_layout
from .ingest import IngestError, PdfMeta, extract_page, ingest_pdf, render_page_image
from .pipeline import DocumentResult, PageResult, StageResult, run_document, run_page

__all__ = [
    # Models & config
    "BBox",
    "Cell",
    "ConfigValidationError",
    "Element",
    "ElementKind",
    "EntityKind",
    "LayoutConfig",
    "LayoutEntity",
    "LayoutInputError",
    "MergeContext",
    "Page",
    "TabularGroup",
    "TextGroup",
    # Engine
    "LayoutFeatures",
    "PageLayout",
    "PageType",
    "analyze_page",
    "consolidate",
    "detect_page_type",
    "sort_by_reading_order",
    # Strategies
    "LayoutStrategy",
    "MultiColumnStrategy",
    "SingleColumnStrategy",
    "TableDominantStrategy",
    "get_strategy",
    "select_strategy",
    # Pipeline
    "DocumentResult",
    "PageResult",
    "StageResult",
    "run_document",
    "run_page",
    # Ingest & export
    "IngestError",
    "PdfMeta",
    "draw_layout_overlay",
    "extract_page",
    "ingest_pdf",
    "page_from_dict",
    "page_to_dict",
    "render_page_image",
    "serialize_layout",
]
