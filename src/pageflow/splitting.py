"""Block splitter: cut a pre-grouped vertical run at typographic breaks."""

from __future__ import annotations

import logging
from typing import List, Optional

from .config import LayoutConfig
from .models import Element, TextGroup
from .text_shapes import is_definition_entry, is_glossary_entry_start, is_list_item_start

log = logging.getLogger(__name__)


def _breaks_between(prev: Element, curr: Element, cfg: LayoutConfig) -> bool:
    text = curr.content().strip()
    if (
        is_list_item_start(text)
        or is_glossary_entry_start(text)
        or is_definition_entry(text)
    ):
        return True

    prev_size = prev.effective_font_size()
    curr_size = curr.effective_font_size()
    if prev_size > 0 and curr_size > 0 and abs(prev_size - curr_size) > cfg.split_font_jump:
        return True

    if prev.is_bold() != curr.is_bold() or prev.is_italic() != curr.is_italic():
        return True

    return abs(prev.x0() - curr.x0()) > cfg.split_left_jump


def split_group_by_list_items(
    group: TextGroup,
    cfg: Optional[LayoutConfig] = None,
) -> List[TextGroup]:
    """Split *group* wherever a new list item or a style break begins.

    Elements are walked in top order.  A split is considered only when
    the current element starts more than ``split_min_gap`` below the
    running bottom of the elements seen so far; it happens when the text
    starts a list item, glossary entry or definition, or when font size,
    bold/italic or the left edge jump.  Never returns an empty group.
    """
    if cfg is None:
        cfg = LayoutConfig()
    if len(group.elements) <= 1:
        return [group]

    ordered = sorted(group.elements, key=lambda e: e.y0())

    result: List[TextGroup] = []
    current: List[Element] = []
    last: Optional[Element] = None
    last_bottom = -1.0

    for el in ordered:
        if current and last is not None and el.y0() > last_bottom + cfg.split_min_gap:
            if _breaks_between(last, el, cfg):
                result.append(TextGroup(current))
                current = []

        current.append(el)
        last = el

        if el.top is not None and el.height is not None:
            last_bottom = max(last_bottom, el.top + el.height)
        elif el.top is not None and el.top > last_bottom:
            last_bottom = el.top + cfg.split_missing_height

    if current:
        result.append(TextGroup(current))

    if len(result) > 1:
        log.debug("split group of %d elements into %d", len(ordered), len(result))
    return result


def split_group_by_columns(
    group: TextGroup,
    page_width: float,
    cfg: Optional[LayoutConfig] = None,
) -> List[TextGroup]:
    """Divide a vertical group straddling the gutter into left/right halves.

    Elements go left or right of ``column_split_frac`` by their left edge
    (elements without one stay left).  When both halves are populated
    each is re-sorted by top; otherwise the group is returned unchanged.
    """
    if cfg is None:
        cfg = LayoutConfig()
    if len(group.elements) <= 1:
        return [group]

    boundary = page_width * cfg.column_split_frac
    left_side: List[Element] = []
    right_side: List[Element] = []
    for el in group.elements:
        if el.left is None or el.left < boundary:
            left_side.append(el)
        else:
            right_side.append(el)

    if not left_side or not right_side:
        return [group]

    left_side.sort(key=lambda e: e.y0())
    right_side.sort(key=lambda e: e.y0())
    return [TextGroup(left_side), TextGroup(right_side)]
