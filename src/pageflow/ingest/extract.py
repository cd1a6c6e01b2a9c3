"""Build a :class:`~pageflow.models.Page` from a pdfplumber page.

Words are clustered into visual lines by vertical center, lines are
split into spans at wide horizontal gaps, and each span becomes one
TEXT element.  Ruling lines and thin rectangles become RULE elements,
embedded images become IMAGE elements.  Tables found by pdfplumber's
ruling-line detector become bordered tabular groups, and the remaining
spans are chained into vertical groups by left alignment and line
spacing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from statistics import median
from typing import Any, List, Optional, Sequence, Tuple, Union

import pdfplumber

from ..config import LayoutConfig
from ..models import Cell, Element, ElementKind, Page, TabularGroup, TextGroup
from .ingest import IngestError, validate_pdf_path

log = logging.getLogger(__name__)

_BOLD_MARKERS = ("bold", "black", "heavy", "semibold", "demi")
_ITALIC_MARKERS = ("italic", "oblique")
_SPACE_GAP_FALLBACK = 3.0


@dataclass
class _Word:
    x0: float
    top: float
    x1: float
    bottom: float
    text: str
    fontname: str = ""
    size: float = 0.0
    color: Optional[Tuple[int, int, int]] = None

    @property
    def y_center(self) -> float:
        return (self.top + self.bottom) / 2.0

    @property
    def height(self) -> float:
        return self.bottom - self.top


# ── Word-level helpers ─────────────────────────────────────────────────


def font_style(fontname: str) -> Tuple[bool, bool]:
    """``(bold, italic)`` guessed from a PDF font name like ``ABCDEF+Arial-BoldMT``."""
    name = fontname.split("+", 1)[-1].lower()
    bold = any(m in name for m in _BOLD_MARKERS)
    italic = any(m in name for m in _ITALIC_MARKERS)
    return bold, italic


def normalize_color(raw: Any) -> Optional[Tuple[int, int, int]]:
    """Convert a pdfplumber gray/RGB/CMYK color to an 8-bit RGB tuple."""
    if raw is None or isinstance(raw, str):
        return None
    if isinstance(raw, (int, float)):
        raw = (raw,)
    try:
        values = [float(v) for v in raw]
    except (TypeError, ValueError):
        return None

    if len(values) == 1:
        rgb = (values[0],) * 3
    elif len(values) == 3:
        rgb = tuple(values)
    elif len(values) == 4:
        c, m, y, k = values
        rgb = ((1 - c) * (1 - k), (1 - m) * (1 - k), (1 - y) * (1 - k))
    else:
        return None
    return tuple(int(round(max(0.0, min(1.0, v)) * 255)) for v in rgb)  # type: ignore[return-value]


def _read_words(page: Any, cfg: LayoutConfig) -> List[_Word]:
    pw = float(page.width)
    ph = float(page.height)
    raw_words = page.extract_words(
        x_tolerance=cfg.ingest_x_tolerance,
        y_tolerance=cfg.ingest_y_tolerance,
        extra_attrs=["fontname", "size"],
    )
    words: List[_Word] = []
    for w in raw_words:
        x0 = max(0.0, min(pw, float(w.get("x0", 0))))
        x1 = max(0.0, min(pw, float(w.get("x1", 0))))
        top = max(0.0, min(ph, float(w.get("top", 0))))
        bottom = max(0.0, min(ph, float(w.get("bottom", 0))))
        text = w.get("text", "")
        if x1 <= x0 or bottom <= top or not text.strip():
            continue
        words.append(
            _Word(
                x0=x0,
                top=top,
                x1=x1,
                bottom=bottom,
                text=text,
                fontname=w.get("fontname", "") or "",
                size=float(w["size"]) if w.get("size") is not None else 0.0,
                color=normalize_color(w.get("non_stroking_color")),
            )
        )
    return words


def _attach_colors(page: Any, words: List[_Word]) -> None:
    """Give each word the fill color of the first char it starts with."""
    chars = getattr(page, "chars", None) or []
    if not chars:
        return
    by_origin = {}
    for ch in chars:
        key = (round(float(ch.get("x0", 0)), 1), round(float(ch.get("top", 0)), 1))
        by_origin.setdefault(key, ch.get("non_stroking_color"))
    for w in words:
        if w.color is None:
            w.color = normalize_color(by_origin.get((round(w.x0, 1), round(w.top, 1))))


# ── Lines and spans ────────────────────────────────────────────────────


def build_lines(words: Sequence[_Word], cfg: LayoutConfig) -> List[List[_Word]]:
    """Cluster words into visual lines by vertical center.

    A word joins the current line when its center is within
    ``ingest_line_tol_mult`` x median word height of the line's center.
    Lines come back top-down, each sorted by left edge.
    """
    if not words:
        return []
    tol = median(w.height for w in words) * cfg.ingest_line_tol_mult

    lines: List[List[_Word]] = []
    current: List[_Word] = []
    center = 0.0
    for w in sorted(words, key=lambda w: (w.y_center, w.x0)):
        if current and abs(w.y_center - center) > tol:
            lines.append(current)
            current = []
        current.append(w)
        center = sum(x.y_center for x in current) / len(current)
    if current:
        lines.append(current)
    for line in lines:
        line.sort(key=lambda w: w.x0)
    return lines


def median_space_gap(lines: Sequence[Sequence[_Word]]) -> float:
    """Median positive gap between neighbouring words on a line."""
    gaps = [
        line[i + 1].x0 - line[i].x1
        for line in lines
        for i in range(len(line) - 1)
        if line[i + 1].x0 - line[i].x1 > 0
    ]
    return median(gaps) if gaps else _SPACE_GAP_FALLBACK


def split_line_spans(line: Sequence[_Word], gap_thresh: float) -> List[List[_Word]]:
    """Split a line wherever the gap between words exceeds *gap_thresh*."""
    if not line:
        return []
    spans: List[List[_Word]] = [[line[0]]]
    for prev, curr in zip(line, line[1:]):
        if curr.x0 - prev.x1 > gap_thresh:
            spans.append([curr])
        else:
            spans[-1].append(curr)
    return spans


def span_to_element(span: Sequence[_Word]) -> Element:
    first = span[0]
    x0 = min(w.x0 for w in span)
    x1 = max(w.x1 for w in span)
    top = min(w.top for w in span)
    bottom = max(w.bottom for w in span)
    bold, italic = font_style(first.fontname)
    return Element(
        kind=ElementKind.text,
        left=x0,
        top=top,
        width=x1 - x0,
        height=bottom - top,
        text=" ".join(w.text for w in span),
        font_size=first.size if first.size > 0 else None,
        bold=bold,
        italic=italic,
        color=first.color,
    )


def words_to_elements(words: Sequence[_Word], cfg: LayoutConfig, space_gap: float) -> List[Element]:
    gap_thresh = space_gap * cfg.ingest_span_gap_mult
    out: List[Element] = []
    for line in build_lines(words, cfg):
        for span in split_line_spans(line, gap_thresh):
            out.append(span_to_element(span))
    return out


# ── Graphics ───────────────────────────────────────────────────────────


def _rule_elements(page: Any, cfg: LayoutConfig) -> List[Element]:
    rules: List[Element] = []
    max_t = cfg.ingest_rule_max_thickness
    candidates = list(getattr(page, "lines", None) or [])
    candidates += [
        r
        for r in (getattr(page, "rects", None) or [])
        if min(float(r["x1"]) - float(r["x0"]), float(r["bottom"]) - float(r["top"])) <= max_t
    ]
    for obj in candidates:
        x0, x1 = sorted((float(obj["x0"]), float(obj["x1"])))
        top, bottom = sorted((float(obj["top"]), float(obj["bottom"])))
        vertical = (bottom - top) > (x1 - x0)
        if vertical:
            rules.append(
                Element(
                    kind=ElementKind.rule,
                    left=x0,
                    top=top,
                    width=x1 - x0,
                    stretch=bottom - top,
                    vertical=True,
                )
            )
        else:
            rules.append(
                Element(
                    kind=ElementKind.rule,
                    left=x0,
                    top=top,
                    height=bottom - top,
                    stretch=x1 - x0,
                )
            )
    return rules


def _image_elements(page: Any) -> List[Element]:
    images: List[Element] = []
    for img in getattr(page, "images", None) or []:
        x0 = float(img["x0"])
        top = float(img["top"])
        images.append(
            Element(
                kind=ElementKind.image,
                left=x0,
                top=top,
                width=float(img["x1"]) - x0,
                height=float(img["bottom"]) - top,
            )
        )
    return images


# ── Tables ─────────────────────────────────────────────────────────────


def _inside(w: _Word, bbox: Sequence[float]) -> bool:
    x0, top, x1, bottom = bbox
    cx = (w.x0 + w.x1) / 2.0
    return x0 <= cx <= x1 and top <= w.y_center <= bottom


def _table_grid(table: Any, words: List[_Word], cfg: LayoutConfig, space_gap: float) -> TabularGroup:
    """Grid of bordered cells; spanned positions reuse the cell they extend."""
    rows = [list(row.cells) for row in table.rows]
    n_cols = max((len(r) for r in rows), default=0)
    grid: List[List[Cell]] = []
    for r, row in enumerate(rows):
        cells: List[Cell] = []
        for c in range(n_cols):
            bbox = row[c] if c < len(row) else None
            if bbox is not None:
                cell_words = [w for w in words if _inside(w, bbox)]
                cells.append(
                    Cell(
                        elements=words_to_elements(cell_words, cfg, space_gap),
                        border_top=True,
                        border_bottom=True,
                        border_left=True,
                        border_right=True,
                    )
                )
            elif c > 0:
                cells.append(cells[-1])
            elif r > 0:
                cells.append(grid[-1][c])
            else:
                cells.append(Cell())
        grid.append(cells)
    return TabularGroup(grid)


# ── Vertical groups ────────────────────────────────────────────────────


def group_vertical_runs(elements: Sequence[Element], cfg: LayoutConfig) -> List[TextGroup]:
    """Chain left-aligned, closely spaced text elements into vertical groups.

    Only runs of two or more elements are returned; everything else
    stays ungrouped.
    """
    runs: List[List[Element]] = []
    for el in sorted(elements, key=lambda e: (e.y0(), e.x0())):
        target = None
        for run in runs:
            last = run[-1]
            gap = el.y0() - last.y1()
            if (
                abs(el.x0() - last.x0()) <= cfg.ingest_group_left_tol
                and -1.0 < gap <= last.extent_height() * cfg.ingest_group_gap_mult
            ):
                target = run
                break
        if target is None:
            runs.append([el])
        else:
            target.append(el)
    return [TextGroup(run) for run in runs if len(run) > 1]


# ── Public API ─────────────────────────────────────────────────────────


def extract_page_from_plumber(
    page: Any,
    index: int = 0,
    cfg: Optional[LayoutConfig] = None,
) -> Page:
    """Build a :class:`Page` from an open ``pdfplumber.page.Page``."""
    if cfg is None:
        cfg = LayoutConfig()

    pw = float(page.width)
    ph = float(page.height)
    words = _read_words(page, cfg)
    _attach_colors(page, words)
    if not words:
        log.warning("page %d: no text extracted (blank or image-only page)", index)

    space_gap = median_space_gap(build_lines(words, cfg))

    tables: List[TabularGroup] = []
    free_words = words
    if cfg.ingest_find_tables and words:
        for found in page.find_tables():
            grid = _table_grid(found, words, cfg, space_gap)
            if grid.n_rows() == 0 or not grid.non_empty_cells():
                log.warning("page %d: skipping empty table at %s", index, found.bbox)
                continue
            tables.append(grid)
            free_words = [w for w in free_words if not _inside(w, found.bbox)]

    text_elements = words_to_elements(free_words, cfg, space_gap)
    groups = group_vertical_runs(text_elements, cfg)
    elements = text_elements + _rule_elements(page, cfg) + _image_elements(page)

    log.debug(
        "page %d: %d words -> %d text elements, %d groups, %d tables",
        index,
        len(words),
        len(text_elements),
        len(groups),
        len(tables),
    )
    return Page(
        width=pw,
        height=ph,
        elements=elements,
        vertical_groups=groups,
        tables=tables,
        index=index,
    )


def extract_page(
    pdf_path: Union[Path, str],
    page_num: int,
    cfg: Optional[LayoutConfig] = None,
) -> Page:
    """Open *pdf_path* and build the :class:`Page` for *page_num* (zero-based)."""
    pdf_path = Path(pdf_path)
    validate_pdf_path(pdf_path)
    with pdfplumber.open(pdf_path) as pdf:
        if not 0 <= page_num < len(pdf.pages):
            raise IngestError(
                f"page {page_num} out of range (document has {len(pdf.pages)} pages)"
            )
        return extract_page_from_plumber(pdf.pages[page_num], page_num, cfg)
