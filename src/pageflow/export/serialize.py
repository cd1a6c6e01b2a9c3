"""JSON-friendly serialization of pages and analyzed layouts.

``page_to_dict`` / ``page_from_dict`` round-trip a :class:`Page`
including its grouping hints, so an extracted page can be saved once and
re-analyzed without the PDF.  Groups and cells refer to elements by
their index in ``elements``; a merged cell is stored once and referenced
from every grid position it covers.

JSON layout
-----------
::

    {
      "version": 1,
      "page": 0,
      "page_width": 612.0,
      "page_height": 792.0,
      "elements": [ {Element.to_dict()}, ... ],
      "vertical_groups": [ [0, 1, 2], ... ],
      "tables": [
        {"cells": [ {"elements": [5], "borders": [1, 1, 1, 1]}, ... ],
         "grid": [ [0, 1], [2, 2] ]},
        ...
      ]
    }
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Union

from ..models import Cell, Element, LayoutInputError, Page, TabularGroup, TextGroup

if TYPE_CHECKING:
    from ..analyzer import PageLayout

FORMAT_VERSION = 1


def _table_to_dict(table: TabularGroup, index_of: Dict[int, int]) -> Dict[str, Any]:
    cell_ids: Dict[int, int] = {}
    cells: List[Dict[str, Any]] = []
    grid: List[List[int]] = []
    for row in table.cells:
        grid_row: List[int] = []
        for cell in row:
            if id(cell) not in cell_ids:
                cell_ids[id(cell)] = len(cells)
                cells.append(
                    {
                        "elements": [index_of[id(e)] for e in cell.elements],
                        "borders": [
                            int(cell.border_top),
                            int(cell.border_bottom),
                            int(cell.border_left),
                            int(cell.border_right),
                        ],
                    }
                )
            grid_row.append(cell_ids[id(cell)])
        grid.append(grid_row)
    return {"cells": cells, "grid": grid}


def page_to_dict(page: Page) -> Dict[str, Any]:
    """Serialize *page* and its grouping hints to a JSON-friendly dict."""
    index_of = {id(e): i for i, e in enumerate(page.elements)}
    return {
        "version": FORMAT_VERSION,
        "page": page.index,
        "page_width": page.width,
        "page_height": page.height,
        "elements": [e.to_dict() for e in page.elements],
        "vertical_groups": [
            [index_of[id(e)] for e in group.elements] for group in page.vertical_groups
        ],
        "tables": [_table_to_dict(t, index_of) for t in page.tables],
    }


def _table_from_dict(data: Dict[str, Any], elements: List[Element]) -> TabularGroup:
    cells = [
        Cell(
            elements=[elements[i] for i in c.get("elements", [])],
            border_top=bool(c["borders"][0]),
            border_bottom=bool(c["borders"][1]),
            border_left=bool(c["borders"][2]),
            border_right=bool(c["borders"][3]),
        )
        for c in data.get("cells", [])
    ]
    return TabularGroup([[cells[i] for i in row] for row in data.get("grid", [])])


def page_from_dict(data: Dict[str, Any]) -> Page:
    """Reconstruct a :class:`Page` from :func:`page_to_dict` output.

    Raises
    ------
    LayoutInputError
        On an unsupported format version or a dangling element index.
    """
    version = data.get("version")
    if version != FORMAT_VERSION:
        raise LayoutInputError(f"unsupported page format version: {version!r}")

    elements = [Element.from_dict(d) for d in data.get("elements", [])]
    try:
        groups = [TextGroup([elements[i] for i in idx]) for idx in data.get("vertical_groups", [])]
        tables = [_table_from_dict(t, elements) for t in data.get("tables", [])]
    except (IndexError, KeyError) as exc:
        raise LayoutInputError(f"malformed page data: {exc}") from exc

    return Page(
        width=float(data["page_width"]),
        height=float(data["page_height"]),
        elements=elements,
        vertical_groups=groups,
        tables=tables,
        index=int(data.get("page", 0)),
    )


def serialize_layout(layout: "PageLayout") -> Dict[str, Any]:
    """Versioned dict of an analyzed page, entities in reading order."""
    d = {"version": FORMAT_VERSION}
    d.update(layout.to_dict())
    return d


def write_json(data: Dict[str, Any], out_path: Union[Path, str]) -> Path:
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    return out_path


def load_page(path: Union[Path, str]) -> Page:
    """Read a page written by ``write_json(page_to_dict(page), path)``."""
    return page_from_dict(json.loads(Path(path).read_text(encoding="utf-8")))
