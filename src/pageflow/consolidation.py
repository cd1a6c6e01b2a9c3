"""Consolidation engine and reading-order assignment.

Consolidation repeatedly merges the first mergeable pair of paragraph
entities until a full scan finds none.  Every merge rebuilds the list
and restarts the scan from the beginning, so the outcome depends only
on the input order and the merge predicate.  Each merge shrinks the
list by one, which bounds the loop at ``n - 1`` merges.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .models import Element, LayoutEntity, TextGroup

log = logging.getLogger(__name__)

MergePredicate = Callable[[LayoutEntity, LayoutEntity], bool]
AreaFunction = Callable[[LayoutEntity], int]


def order_by_lines(elements: Sequence[Element], line_tol: float = 5.0) -> List[Element]:
    """Order elements top-down, left-to-right within each visual line.

    Elements are bucketed into lines whose tops lie within *line_tol* of
    the line's first (topmost) element.
    """
    by_top = sorted(elements, key=lambda e: e.y0())
    lines: List[List[Element]] = []
    current: List[Element] = []
    line_top = 0.0
    for el in by_top:
        if current and el.y0() - line_top >= line_tol:
            lines.append(current)
            current = []
        if not current:
            line_top = el.y0()
        current.append(el)
    if current:
        lines.append(current)
    return [el for line in lines for el in sorted(line, key=lambda e: e.x0())]


def merge_entities(
    a: LayoutEntity,
    b: LayoutEntity,
    line_tol: float = 5.0,
) -> LayoutEntity:
    """Build the paragraph entity holding the elements of both *a* and *b*.

    The first-line-left is inherited from whichever input starts higher.
    """
    elements = order_by_lines(list(a.elements) + list(b.elements), line_tol)
    upper = a if a.top <= b.top else b
    return LayoutEntity.from_group(
        TextGroup(elements),
        a.page_width,
        a.page_height,
        first_line_left=upper.first_line_left,
    )


def _first_mergeable_pair(
    entities: Sequence[LayoutEntity],
    should_merge: MergePredicate,
) -> Optional[Tuple[int, int]]:
    n = len(entities)
    for i in range(n):
        a = entities[i]
        if a.is_table:
            continue
        for j in range(i + 1, n):
            b = entities[j]
            if b.is_table:
                continue
            if should_merge(a, b):
                return i, j
    return None


def consolidate(
    entities: Sequence[LayoutEntity],
    should_merge: MergePredicate,
    line_tol: float = 5.0,
) -> List[LayoutEntity]:
    """Merge line-wrapped fragments back into paragraphs.

    Parameters
    ----------
    entities : sequence of LayoutEntity
        Candidate entities in scan order (callers sort by top first).
        Tables pass through untouched.
    should_merge : callable
        Ordered-pair predicate ``(a, b) -> bool`` with ``a`` earlier in
        the list than ``b``.
    line_tol : float
        Line-bucketing tolerance used when ordering merged elements.

    Returns
    -------
    list[LayoutEntity]
        A fixed point: no pair of the result satisfies *should_merge*.
    """
    current = list(entities)
    if len(current) < 2:
        return current

    merges = 0
    while True:
        pair = _first_mergeable_pair(current, should_merge)
        if pair is None:
            break
        i, j = pair
        merged = merge_entities(current[i], current[j], line_tol)
        log.debug(
            "merge #%d: [%.1f,%.1f] + [%.1f,%.1f] -> %r",
            merges,
            current[i].left,
            current[i].top,
            current[j].left,
            current[j].top,
            merged.text()[:60],
        )
        current = current[:i] + [merged] + current[i + 1 : j] + current[j + 1 :]
        merges += 1

    log.debug("consolidated %d entities into %d", len(entities), len(current))
    return current


def _tiebreak(e: LayoutEntity) -> Tuple[float, float, float, float, str]:
    return (e.left, e.top, e.bottom, e.right, e.text())


def sort_by_reading_order(
    entities: Sequence[LayoutEntity],
    area_of: AreaFunction,
    same_row_tol: float = 3.0,
) -> List[LayoutEntity]:
    """Order entities by reading area, then top, then left within a row.

    Inside an area, entities whose tops lie within *same_row_tol* of the
    first entity of a visual row form that row and are read left to
    right.  The result does not depend on the input permutation.
    """
    areas: Dict[int, int] = {id(e): area_of(e) for e in entities}
    keyed = sorted(
        entities,
        key=lambda e: (areas[id(e)], e.top, e.left, e.bottom, e.right, e.text()),
    )

    ordered: List[LayoutEntity] = []
    i = 0
    while i < len(keyed):
        area = areas[id(keyed[i])]
        row_top = keyed[i].top
        j = i + 1
        while (
            j < len(keyed)
            and areas[id(keyed[j])] == area
            and keyed[j].top - row_top < same_row_tol
        ):
            j += 1
        ordered.extend(sorted(keyed[i:j], key=_tiebreak))
        i = j
    return ordered
