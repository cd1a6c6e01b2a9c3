"""Table reality classifier: data table or layout container.

A genuine data table is kept as a grid entity.  Anything else is a
layout container and gets flattened into one paragraph entity per row.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from .config import LayoutConfig
from .models import LayoutEntity, TabularGroup, TextGroup
from .text_shapes import is_list_marker

log = logging.getLogger(__name__)


def _is_list_style_table(table: TabularGroup, cfg: LayoutConfig) -> bool:
    """First column is a narrow bullet/number column over most rows."""
    rows = table.n_rows()
    widths: List[float] = []
    for cell in table.first_column():
        if cell is None or cell.is_empty():
            continue
        bb = cell.bbox()
        widths.append(bb.width() if bb is not None else 0.0)
    if not widths:
        return False
    avg_width = sum(widths) / len(widths)
    return (
        len(widths) > rows * cfg.table_list_column_row_frac
        and avg_width < cfg.table_list_column_max_width
    )


def _is_list_marker_table(table: TabularGroup, cfg: LayoutConfig) -> bool:
    """Most first-column cells hold nothing but a list marker."""
    markers = sum(
        1
        for cell in table.first_column()
        if cell is not None and not cell.is_empty() and is_list_marker(cell.text())
    )
    return markers > 0 and markers >= table.n_rows() * cfg.table_list_marker_frac


def is_real_table(
    table: TabularGroup,
    page_height: float,
    cfg: Optional[LayoutConfig] = None,
) -> bool:
    """Decide whether *table* is a genuine data table.

    Rules are applied in order and the first match wins:

    1. Content taller than 40% of the page is a container, unless it has
       more than two columns and over 25% of its non-empty cells are
       bordered.
    2. More than 8 rows or 4 columns is a table, unless it is a
       two-column grid whose first column is a narrow marker column.
    3. Over half of the non-empty cells bordered: table.
    4. No borders at all and at most 2x2: container.
    5. Two columns with a first column of list markers: container.
    6. Otherwise a table iff it has at least 2 rows and 2 columns.
    """
    if cfg is None:
        cfg = LayoutConfig()

    rows = table.n_rows()
    cols = table.n_cols()
    bbox = table.bbox()
    content_height = bbox.height() if bbox is not None else 0.0
    border_frac = table.bordered_fraction()

    if content_height > page_height * cfg.table_container_height_frac:
        if cols <= 2 or border_frac <= cfg.table_container_border_frac:
            log.debug("table %dx%d: tall container", rows, cols)
            return False

    if rows > cfg.table_large_rows or cols > cfg.table_large_cols:
        if cols == 2 and _is_list_style_table(table, cfg):
            log.debug("table %dx%d: list-style marker column", rows, cols)
            return False
        return True

    if border_frac > cfg.table_border_frac:
        return True

    if table.bordered_count() == 0 and rows <= 2 and cols <= 2:
        return False

    if cols == 2 and _is_list_marker_table(table, cfg):
        log.debug("table %dx%d: list-marker first column", rows, cols)
        return False

    return rows >= 2 and cols >= 2


def is_strict_real_table(
    table: TabularGroup,
    page_height: float,
    cfg: Optional[LayoutConfig] = None,
) -> bool:
    """Table-preferring variant used on table-dominant pages."""
    if cfg is None:
        cfg = LayoutConfig()

    rows = table.n_rows()
    cols = table.n_cols()
    if rows >= 3 and cols >= 3:
        return True
    if table.bordered_fraction() > cfg.strict_table_border_frac:
        return True
    if rows <= 2 and cols <= 1:
        return False
    return is_real_table(table, page_height, cfg)


def flatten_layout_table(
    table: TabularGroup,
    page_width: float,
    page_height: float,
) -> List[LayoutEntity]:
    """One paragraph entity per non-empty row, elements ordered by left edge."""
    entities: List[LayoutEntity] = []
    for row in table.unique_rows():
        row_elements = [e for cell in row for e in cell.elements]
        if not row_elements:
            continue
        row_elements.sort(key=lambda e: e.x0())
        entities.append(
            LayoutEntity.from_group(TextGroup(row_elements), page_width, page_height)
        )
    return entities
