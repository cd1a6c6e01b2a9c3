"""Data model for positioned page content and the layout entities built from it.

Elements are immutable leaves owned by a :class:`Page`; every attribute
is optional and read through accessor methods that return documented
defaults (zero position/extent, empty text, unknown font size ``0``,
non-bold, non-italic).  Groups and entities compare by identity.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union


class LayoutInputError(ValueError):
    """Raised when layout input is structurally malformed (e.g. a ragged grid)."""


class ElementKind(str, Enum):
    """What an :class:`Element` represents on the page."""

    text = "text"
    image = "image"
    rule = "rule"


class EntityKind(str, Enum):
    """Tag of a :class:`LayoutEntity`."""

    paragraph = "paragraph"
    table = "table"


# ── Bounding boxes ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class BBox:
    """Axis-aligned box in page units, ``y`` growing downward."""

    x0: float
    y0: float
    x1: float
    y1: float

    def width(self) -> float:
        return self.x1 - self.x0

    def height(self) -> float:
        return self.y1 - self.y0

    def area(self) -> float:
        return max(0.0, self.width()) * max(0.0, self.height())

    def center_x(self) -> float:
        return (self.x0 + self.x1) / 2.0

    def union(self, other: Optional["BBox"]) -> "BBox":
        if other is None:
            return self
        return BBox(
            min(self.x0, other.x0),
            min(self.y0, other.y0),
            max(self.x1, other.x1),
            max(self.y1, other.y1),
        )

    def to_dict(self) -> dict:
        return {
            "x0": round(self.x0, 3),
            "y0": round(self.y0, 3),
            "x1": round(self.x1, 3),
            "y1": round(self.y1, 3),
        }


def union_bboxes(boxes: Iterable[Optional[BBox]]) -> Optional[BBox]:
    """Union of the given boxes; ``None`` entries are skipped.

    Returns ``None`` when nothing was supplied, never an inverted box.
    """
    result: Optional[BBox] = None
    for bb in boxes:
        if bb is None:
            continue
        result = bb if result is None else result.union(bb)
    return result


# ── Elements ───────────────────────────────────────────────────────────


@dataclass(frozen=True, eq=False)
class Element:
    """An atomic positioned content unit: text run, image or rule line."""

    kind: ElementKind = ElementKind.text
    left: Optional[float] = None
    top: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    stretch: Optional[float] = None  # rule length along its orientation
    vertical: bool = False  # rule orientation
    text: Optional[str] = None
    font_size: Optional[float] = None
    bold: Optional[bool] = None
    italic: Optional[bool] = None
    color: Optional[Tuple[int, int, int]] = None
    first_line_indent: Optional[float] = None
    alignment: Optional[str] = None  # "left" | "right" | "center" | "justify"

    def x0(self) -> float:
        return self.left if self.left is not None else 0.0

    def y0(self) -> float:
        return self.top if self.top is not None else 0.0

    def extent_width(self) -> float:
        if self.width is not None:
            return self.width
        if self.kind == ElementKind.rule and not self.vertical and self.stretch:
            return self.stretch
        return 0.0

    def extent_height(self) -> float:
        if self.height is not None:
            return self.height
        if self.kind == ElementKind.rule and self.vertical and self.stretch:
            return self.stretch
        return 0.0

    def x1(self) -> float:
        return self.x0() + self.extent_width()

    def y1(self) -> float:
        return self.y0() + self.extent_height()

    def bbox(self) -> BBox:
        return BBox(self.x0(), self.y0(), self.x1(), self.y1())

    def has_position(self) -> bool:
        return self.left is not None and self.top is not None

    def content(self) -> str:
        return self.text if self.text is not None else ""

    def effective_font_size(self) -> float:
        """Font size, or ``0.0`` when unknown."""
        return self.font_size if self.font_size is not None else 0.0

    def is_bold(self) -> bool:
        return bool(self.bold)

    def is_italic(self) -> bool:
        return bool(self.italic)

    def is_textual(self) -> bool:
        return self.kind == ElementKind.text or self.text is not None

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict, omitting absent attributes."""
        d: Dict[str, Any] = {"kind": self.kind.value}
        for name in (
            "left",
            "top",
            "width",
            "height",
            "stretch",
            "text",
            "font_size",
            "bold",
            "italic",
            "first_line_indent",
            "alignment",
        ):
            value = getattr(self, name)
            if value is not None:
                d[name] = value
        if self.vertical:
            d["vertical"] = True
        if self.color is not None:
            d["color"] = list(self.color)
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "Element":
        """Reconstruct from :meth:`to_dict` output."""
        color = d.get("color")
        return cls(
            kind=ElementKind(d.get("kind", "text")),
            left=d.get("left"),
            top=d.get("top"),
            width=d.get("width"),
            height=d.get("height"),
            stretch=d.get("stretch"),
            vertical=bool(d.get("vertical", False)),
            text=d.get("text"),
            font_size=d.get("font_size"),
            bold=d.get("bold"),
            italic=d.get("italic"),
            color=tuple(color) if color is not None else None,
            first_line_indent=d.get("first_line_indent"),
            alignment=d.get("alignment"),
        )


# ── Groups ─────────────────────────────────────────────────────────────


@dataclass(eq=False)
class TextGroup:
    """An ordered run of elements; the order defines text flow."""

    elements: List[Element] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.elements)

    def __iter__(self) -> Iterator[Element]:
        return iter(self.elements)

    def first(self) -> Optional[Element]:
        return self.elements[0] if self.elements else None

    def bbox(self) -> Optional[BBox]:
        return union_bboxes(e.bbox() for e in self.elements)

    def text(self) -> str:
        return " ".join(
            e.content().strip() for e in self.elements if e.content().strip()
        )


@dataclass(eq=False)
class Cell:
    """One logical table cell: its content plus per-edge border flags."""

    elements: List[Element] = field(default_factory=list)
    border_top: bool = False
    border_bottom: bool = False
    border_left: bool = False
    border_right: bool = False

    def is_empty(self) -> bool:
        return not self.elements

    def has_border(self) -> bool:
        return (
            self.border_top or self.border_bottom or self.border_left or self.border_right
        )

    def bbox(self) -> Optional[BBox]:
        return union_bboxes(e.bbox() for e in self.elements)

    def text(self) -> str:
        return "".join(e.content() for e in self.elements).strip()


@dataclass(eq=False)
class TabularGroup:
    """A rectangular grid of cells.

    A merged cell is the same :class:`Cell` object referenced from several
    grid coordinates.  Statistics and flattening count each logical cell
    once, at its first row-major occurrence.
    """

    cells: List[List[Cell]] = field(default_factory=list)

    def __post_init__(self) -> None:
        widths = {len(row) for row in self.cells}
        if len(widths) > 1:
            raise LayoutInputError(
                f"ragged table grid: row lengths {sorted(widths)}"
            )

    def n_rows(self) -> int:
        return len(self.cells)

    def n_cols(self) -> int:
        return len(self.cells[0]) if self.cells else 0

    def unique_rows(self) -> List[List[Cell]]:
        """Each row's cells, keeping only first occurrences of merged cells."""
        seen: set = set()
        rows: List[List[Cell]] = []
        for row in self.cells:
            kept: List[Cell] = []
            for cell in row:
                if id(cell) in seen:
                    continue
                seen.add(id(cell))
                kept.append(cell)
            rows.append(kept)
        return rows

    def unique_cells(self) -> List[Cell]:
        return [cell for row in self.unique_rows() for cell in row]

    def first_column(self) -> List[Optional[Cell]]:
        """Column-0 cell per row, or ``None`` where it repeats a merged cell."""
        seen: set = set()
        out: List[Optional[Cell]] = []
        for row in self.cells:
            if not row:
                out.append(None)
                continue
            out.append(None if id(row[0]) in seen else row[0])
            seen.update(id(cell) for cell in row)
        return out

    def elements(self) -> List[Element]:
        return [e for cell in self.unique_cells() for e in cell.elements]

    def non_empty_cells(self) -> List[Cell]:
        return [cell for cell in self.unique_cells() if not cell.is_empty()]

    def bbox(self) -> Optional[BBox]:
        """Union of non-empty cell boxes; ``None`` when every cell is empty."""
        return union_bboxes(cell.bbox() for cell in self.non_empty_cells())

    def bordered_count(self) -> int:
        return sum(1 for cell in self.non_empty_cells() if cell.has_border())

    def bordered_fraction(self) -> float:
        """Fraction of non-empty cells with at least one visible border."""
        non_empty = self.non_empty_cells()
        if not non_empty:
            return 0.0
        return self.bordered_count() / len(non_empty)


Group = Union[TextGroup, TabularGroup]


# ── Page ───────────────────────────────────────────────────────────────


@dataclass
class Page:
    """A page of positioned elements plus upstream grouping hints.

    Group members missing from *elements* are appended so that every
    grouped element is reachable from the flat collection.  When an
    element belongs to both a vertical group and a table, the table wins.
    """

    width: float
    height: float
    elements: List[Element] = field(default_factory=list)
    vertical_groups: List[TextGroup] = field(default_factory=list)
    tables: List[TabularGroup] = field(default_factory=list)
    index: int = 0
    _context: Dict[Element, Group] = field(
        default_factory=dict, init=False, repr=False
    )

    def __post_init__(self) -> None:
        self.elements = list(self.elements)
        known = set(self.elements)
        for group in self.vertical_groups:
            for el in group.elements:
                self._context[el] = group
                if el not in known:
                    known.add(el)
                    self.elements.append(el)
        for table in self.tables:
            for el in table.elements():
                self._context[el] = table
                if el not in known:
                    known.add(el)
                    self.elements.append(el)

    def context_of(self, element: Element) -> Optional[Group]:
        """Enclosing vertical group or table of *element*, if any."""
        return self._context.get(element)

    def area(self) -> float:
        return self.width * self.height


@dataclass(frozen=True)
class MergeContext:
    """Page-level facts shared, read-only, by every merge decision."""

    page_width: float
    page_height: float
    multi_column: bool = False
    # Right text edge assumed for lines that fill the page width.
    content_right: float = 0.0
    # Measured right edge of the left column, when one exists.
    left_column_right: Optional[float] = None


# ── Layout entities ────────────────────────────────────────────────────

_CENTER_MARGIN_TOL = 15.0
_CENTER_MIN_MARGIN = 100.0
_CENTER_NARROW_FRAC = 0.4
_CENTER_SYMMETRIC_TOL = 5.0
_CENTER_SYMMETRIC_MIN_MARGIN = 60.0
_PARAGRAPH_BREAK_GAP = 5.0
_LAST_LINE_TOL = 3.0


def _last_line_right(elements: List[Element], default: float) -> float:
    """Right edge of the lowest visual line among *elements*."""
    tops = [e.top for e in elements if e.top is not None]
    if not tops:
        return default
    max_top = max(tops)
    rights = [
        e.left + e.width
        for e in elements
        if e.top is not None
        and abs(e.top - max_top) < _LAST_LINE_TOL
        and e.left is not None
        and e.width is not None
    ]
    return max(rights) if rights else default


@dataclass(eq=False)
class LayoutEntity:
    """A classified, bounded unit of page content: a paragraph or a table.

    Built via :meth:`from_group`; consolidation replaces entities rather
    than mutating them.  ``bbox`` is ``None`` for an entity without
    content, in which case the float accessors read ``0``.
    """

    kind: EntityKind
    group: Group
    page_width: float
    page_height: float
    bbox: Optional[BBox] = None
    first_line_left: float = 0.0
    last_line_right: float = 0.0
    _text: Optional[str] = field(default=None, init=False, repr=False)

    @classmethod
    def from_group(
        cls,
        group: Group,
        page_width: float,
        page_height: float,
        first_line_left: Optional[float] = None,
    ) -> "LayoutEntity":
        bbox = group.bbox()
        left = bbox.x0 if bbox is not None else 0.0
        right = bbox.x1 if bbox is not None else 0.0

        if isinstance(group, TabularGroup):
            return cls(
                kind=EntityKind.table,
                group=group,
                page_width=page_width,
                page_height=page_height,
                bbox=bbox,
                first_line_left=left,
                last_line_right=right,
            )

        if first_line_left is None:
            first = group.first()
            if first is None:
                first_line_left = left
            elif first.first_line_indent is not None:
                first_line_left = first.x0() + first.first_line_indent
            elif first.left is not None:
                first_line_left = first.left
            else:
                first_line_left = left

        return cls(
            kind=EntityKind.paragraph,
            group=group,
            page_width=page_width,
            page_height=page_height,
            bbox=bbox,
            first_line_left=first_line_left,
            last_line_right=_last_line_right(group.elements, right),
        )

    # -- geometry ---------------------------------------------------------

    @property
    def is_table(self) -> bool:
        return self.kind == EntityKind.table

    @property
    def top(self) -> float:
        return self.bbox.y0 if self.bbox is not None else 0.0

    @property
    def bottom(self) -> float:
        return self.bbox.y1 if self.bbox is not None else 0.0

    @property
    def left(self) -> float:
        return self.bbox.x0 if self.bbox is not None else 0.0

    @property
    def right(self) -> float:
        return self.bbox.x1 if self.bbox is not None else 0.0

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    @property
    def center_x(self) -> float:
        return (self.left + self.right) / 2.0

    @property
    def elements(self) -> List[Element]:
        if isinstance(self.group, TabularGroup):
            return self.group.elements()
        return self.group.elements

    def first_element(self) -> Optional[Element]:
        """First element in flow order; ``None`` for tables and empty groups."""
        if isinstance(self.group, TabularGroup):
            return None
        return self.group.first()

    def first_line_indent(self) -> float:
        """Offset of the first visual line from the entity's left edge."""
        return self.first_line_left - self.left

    def has_first_line_indent(self, threshold: float = 2.0) -> bool:
        return self.kind == EntityKind.paragraph and self.first_line_indent() > threshold

    def is_centered(
        self,
        margin_tol: float = _CENTER_MARGIN_TOL,
        min_margin: float = _CENTER_MIN_MARGIN,
        narrow_frac: float = _CENTER_NARROW_FRAC,
        symmetric_tol: float = _CENTER_SYMMETRIC_TOL,
        symmetric_min_margin: float = _CENTER_SYMMETRIC_MIN_MARGIN,
    ) -> bool:
        """Symmetric-margin test for centered titles and captions."""
        left_margin = self.left
        right_margin = self.page_width - self.right
        diff = abs(left_margin - right_margin)
        very_symmetric = (
            diff < symmetric_tol
            and left_margin > symmetric_min_margin
            and right_margin > symmetric_min_margin
        )
        return diff < margin_tol and (
            left_margin > min_margin
            or self.width < self.page_width * narrow_frac
            or very_symmetric
        )

    # -- text ---------------------------------------------------------------

    def text(self) -> str:
        """Flow text, memoized on first use.

        Centered entities join their lines with single spaces; otherwise
        a blank line separates elements more than a few units apart
        vertically.  Tables read ``"[TABLE]"``.
        """
        if self._text is not None:
            return self._text
        if self.kind == EntityKind.table:
            self._text = "[TABLE]"
            return self._text

        centered = self.is_centered()
        parts: List[str] = []
        prev: Optional[Element] = None
        for el in self.elements:
            content = el.content()
            if not content:
                continue
            if prev is not None:
                v_gap = el.y0() - prev.y1()
                if centered:
                    parts.append(" ")
                else:
                    parts.append("\n\n" if v_gap > _PARAGRAPH_BREAK_GAP else " ")
            parts.append(content)
            prev = el
        self._text = "".join(parts).strip()
        return self._text

    def table_rows_text(self) -> List[List[str]]:
        """Per-cell text of a table grid; merged cells read once."""
        if not isinstance(self.group, TabularGroup):
            return []
        seen: set = set()
        rows: List[List[str]] = []
        for row in self.group.cells:
            texts: List[str] = []
            for cell in row:
                if id(cell) in seen:
                    texts.append("")
                    continue
                seen.add(id(cell))
                texts.append(cell.text())
            rows.append(texts)
        return rows

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        d: Dict[str, Any] = {
            "kind": self.kind.value,
            "bbox": self.bbox.to_dict() if self.bbox is not None else None,
            "text": self.text(),
        }
        if self.kind == EntityKind.paragraph:
            d["first_line_left"] = round(self.first_line_left, 3)
            d["first_line_indent"] = round(self.first_line_indent(), 3)
            d["element_count"] = len(self.elements)
        else:
            d["rows"] = self.table_rows_text()
        return d
