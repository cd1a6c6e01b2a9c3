"""Shared test fixtures for pageflow."""

from typing import List, Optional, Sequence, Tuple

import pytest

from pageflow.config import LayoutConfig
from pageflow.models import (
    Cell,
    Element,
    ElementKind,
    LayoutEntity,
    Page,
    TabularGroup,
    TextGroup,
)

PAGE_W = 612.0
PAGE_H = 792.0

# ── Helpers ────────────────────────────────────────────────────────────


def make_text(
    left: float,
    top: float,
    width: float,
    text: str = "text",
    height: float = 10.0,
    font_size: Optional[float] = 10.0,
    **kwargs,
) -> Element:
    """Create a TEXT element with sane defaults."""
    return Element(
        kind=ElementKind.text,
        left=left,
        top=top,
        width=width,
        height=height,
        text=text,
        font_size=font_size,
        **kwargs,
    )


def make_entity(
    left: float,
    top: float,
    width: float,
    text: str = "text",
    height: float = 10.0,
    page_width: float = PAGE_W,
    page_height: float = PAGE_H,
    **kwargs,
) -> LayoutEntity:
    """Single-element paragraph entity."""
    el = make_text(left, top, width, text, height=height, **kwargs)
    return LayoutEntity.from_group(TextGroup([el]), page_width, page_height)


def make_lines_entity(
    lines: Sequence[Tuple[float, float, float, str]],
    page_width: float = PAGE_W,
    page_height: float = PAGE_H,
    height: float = 10.0,
) -> LayoutEntity:
    """Paragraph entity from ``(left, top, width, text)`` lines."""
    els = [make_text(x, t, w, s, height=height) for x, t, w, s in lines]
    return LayoutEntity.from_group(TextGroup(els), page_width, page_height)


def make_table(
    rows: int,
    cols: int,
    x0: float = 72.0,
    y0: float = 100.0,
    cell_w: float = 80.0,
    cell_h: float = 14.0,
    bordered: bool = False,
    texts: Optional[List[List[str]]] = None,
    col_widths: Optional[List[float]] = None,
) -> TabularGroup:
    """Grid of single-element cells laid out left-to-right, top-down.

    *texts* overrides cell text; an empty string leaves the cell empty.
    *col_widths* overrides the text width per column.
    """
    grid: List[List[Cell]] = []
    for r in range(rows):
        row: List[Cell] = []
        for c in range(cols):
            text = texts[r][c] if texts is not None else f"r{r}c{c}"
            width = col_widths[c] if col_widths is not None else cell_w - 10
            elements = []
            if text:
                elements = [
                    make_text(x0 + c * cell_w, y0 + r * cell_h, width, text, height=10.0)
                ]
            row.append(
                Cell(
                    elements=elements,
                    border_top=bordered,
                    border_bottom=bordered,
                    border_left=bordered,
                    border_right=bordered,
                )
            )
        grid.append(row)
    return TabularGroup(grid)


def make_page(
    elements: Sequence[Element] = (),
    vertical_groups: Sequence[TextGroup] = (),
    tables: Sequence[TabularGroup] = (),
    width: float = PAGE_W,
    height: float = PAGE_H,
    index: int = 0,
) -> Page:
    return Page(
        width=width,
        height=height,
        elements=list(elements),
        vertical_groups=list(vertical_groups),
        tables=list(tables),
        index=index,
    )


def texts_of(entities: Sequence[LayoutEntity]) -> List[str]:
    return [e.text() for e in entities]


# ── Fixtures ───────────────────────────────────────────────────────────


@pytest.fixture
def default_cfg() -> LayoutConfig:
    """Return a default LayoutConfig."""
    return LayoutConfig()
