"""Heuristics shared by every layout strategy.

Strategies do not subclass anything; they call into this module and
plug their differences in through :class:`MergeRules`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from ..config import LayoutConfig
from ..models import LayoutEntity, MergeContext, Page, TabularGroup, TextGroup
from ..tables import flatten_layout_table
from ..text_shapes import (
    first_word_length,
    has_leader_dots,
    is_definition_entry,
    is_glossary_entry,
    is_new_section_title,
    is_reference_entry,
    is_table_caption,
    is_toc_entry_start,
    starts_with_bullet,
    starts_with_section_number,
)

log = logging.getLogger(__name__)

TableTest = Callable[[TabularGroup, float, LayoutConfig], bool]
GroupSplitter = Callable[[TextGroup], List[TextGroup]]
PairHook = Callable[[LayoutEntity, LayoutEntity, MergeContext, LayoutConfig], bool]
EdgeHook = Callable[[LayoutEntity, MergeContext, LayoutConfig], float]
AreaFunction = Callable[[LayoutEntity], int]


# ── Extraction ─────────────────────────────────────────────────────────


def extract_entities(
    page: Page,
    cfg: LayoutConfig,
    table_test: TableTest,
    split_group: GroupSplitter,
) -> List[LayoutEntity]:
    """Turn the page's grouping hints into candidate entities.

    Each table and vertical group is visited once, at its first element.
    Tables that pass *table_test* stay whole, others are flattened by
    row; vertical groups go through *split_group*.  An ungrouped text
    element becomes a singleton paragraph; other ungrouped elements are
    dropped.
    """
    pw, ph = page.width, page.height
    entities: List[LayoutEntity] = []
    visited: set = set()

    for el in page.elements:
        ctx = page.context_of(el)
        if ctx is None:
            if el.is_textual():
                entities.append(LayoutEntity.from_group(TextGroup([el]), pw, ph))
            continue
        if id(ctx) in visited:
            continue
        visited.add(id(ctx))

        if isinstance(ctx, TabularGroup):
            if table_test(ctx, ph, cfg):
                entities.append(LayoutEntity.from_group(ctx, pw, ph))
            else:
                entities.extend(flatten_layout_table(ctx, pw, ph))
        else:
            for group in split_group(ctx):
                entities.append(LayoutEntity.from_group(group, pw, ph))

    return entities


def build_merge_context(
    entities: List[LayoutEntity],
    page: Page,
    cfg: LayoutConfig,
    multi_column: bool = False,
) -> MergeContext:
    """Merge context with the right text edges used by unused-space checks."""
    left_column_right: Optional[float] = None
    if multi_column:
        gutter = page.width * cfg.gutter_frac
        rights = [
            e.right
            for e in entities
            if not e.is_table and e.bbox is not None and e.right <= gutter
        ]
        if rights:
            left_column_right = max(rights)
    return MergeContext(
        page_width=page.width,
        page_height=page.height,
        multi_column=multi_column,
        content_right=page.width - cfg.right_margin_inset,
        left_column_right=left_column_right,
    )


# ── Pair geometry and entity shapes ────────────────────────────────────


@dataclass(frozen=True)
class PairGeometry:
    """Distances between two entity boxes."""

    v_gap: float  # 0 when the boxes overlap vertically
    h_overlap: float  # negative when the boxes are apart horizontally
    min_width: float
    d_top: float

    @classmethod
    def between(cls, a: LayoutEntity, b: LayoutEntity) -> "PairGeometry":
        return cls(
            v_gap=max(0.0, b.top - a.bottom, a.top - b.bottom),
            h_overlap=min(a.right, b.right) - max(a.left, b.left),
            min_width=min(a.width, b.width),
            d_top=abs(a.top - b.top),
        )


def horizontal_gap(a: LayoutEntity, b: LayoutEntity) -> float:
    if a.right < b.left:
        return b.left - a.right
    if b.right < a.left:
        return a.left - b.right
    return 0.0


def is_standalone_bullet(e: LayoutEntity, cfg: LayoutConfig) -> bool:
    return e.width < cfg.bullet_max_width and starts_with_bullet(e.text().strip())


def is_to_right_of(target: LayoutEntity, bullet: LayoutEntity, cfg: LayoutConfig) -> bool:
    return (
        bullet.right - cfg.bullet_reach_back
        <= target.left
        < bullet.right + cfg.bullet_reach_forward
    )


def joins_bullet(bullet: LayoutEntity, target: LayoutEntity, cfg: LayoutConfig) -> bool:
    """*bullet* is a lone marker and *target* is the content right after it."""
    return (
        is_standalone_bullet(bullet, cfg)
        and is_to_right_of(target, bullet, cfg)
        and not starts_with_bullet(target.text().strip())
    )


def is_centered(e: LayoutEntity, cfg: LayoutConfig) -> bool:
    return e.is_centered(
        margin_tol=cfg.centered_margin_tol,
        min_margin=cfg.centered_min_margin,
        narrow_frac=cfg.centered_narrow_frac,
        symmetric_tol=cfg.centered_symmetric_tol,
        symmetric_min_margin=cfg.centered_symmetric_min_margin,
    )


def is_right_anchored(e: LayoutEntity, cfg: LayoutConfig) -> bool:
    """Narrow block sitting in the right half, e.g. a date or page header."""
    return (
        e.left > e.page_width * cfg.right_anchor_left_frac
        and e.width < e.page_width * cfg.right_anchor_width_frac
    )


def style_mismatch(a: LayoutEntity, b: LayoutEntity, cfg: LayoutConfig) -> bool:
    """First elements differ in font size, weight or color."""
    first_a = a.first_element()
    first_b = b.first_element()
    if first_a is None or first_b is None:
        return False
    size_a = first_a.effective_font_size()
    size_b = first_b.effective_font_size()
    if size_a > 0 and size_b > 0 and abs(size_a - size_b) > cfg.font_size_tolerance:
        return True
    if first_a.is_bold() != first_b.is_bold():
        return True
    if first_a.color is not None and first_b.color is not None:
        return tuple(first_a.color) != tuple(first_b.color)
    return False


def estimate_font_size(e: LayoutEntity, cfg: LayoutConfig) -> float:
    """Font size of the first element that declares one, else the default."""
    for el in e.elements:
        size = el.effective_font_size()
        if size > 0:
            return size
    return cfg.default_font_size


def is_toc_continuation(
    a: LayoutEntity,
    text_a: str,
    text_b: str,
    v_gap: float,
    cfg: LayoutConfig,
) -> bool:
    """*b* carries the leader dots and page number of *a*'s TOC entry."""
    return (
        is_toc_entry_start(text_a)
        and not a.right > a.page_width * cfg.toc_right_margin_frac
        and has_leader_dots(text_b)
        and not starts_with_section_number(text_b)
        and v_gap < cfg.toc_max_gap
    )


def are_independent_entries(text_a: str, text_b: str) -> bool:
    """Both texts are self-contained entries of the same list kind."""
    if has_leader_dots(text_a) and has_leader_dots(text_b):
        return True
    if is_glossary_entry(text_a) and is_glossary_entry(text_b):
        return True
    if is_definition_entry(text_a) and is_definition_entry(text_b):
        return True
    return is_reference_entry(text_a) and is_reference_entry(text_b)


# ── Natural line wrap ──────────────────────────────────────────────────


class WrapDecision(str, Enum):
    merge = "merge"
    prevent = "prevent"
    undecided = "undecided"


def check_line_wrap(
    a: LayoutEntity,
    b: LayoutEntity,
    text_b: str,
    v_gap: float,
    right_edge: float,
    cfg: LayoutConfig,
) -> WrapDecision:
    """Decide whether *b* is the wrapped continuation of *a*'s last line.

    If the first word of *b* would have fit in the space left on *a*'s
    last line and both share an indent, *b* starts a new paragraph.  A
    full line followed by a tight gap at the same or a slightly smaller
    indent continues it.
    """
    pw = a.page_width
    font_size = estimate_font_size(a, cfg)
    line_height = font_size * cfg.line_height_mult

    a_line_full = a.right > pw * cfg.line_full_frac
    a_right_aligned = (
        a.right > pw * cfg.right_aligned_right_frac
        and a.left > pw * cfg.right_aligned_left_frac
    )
    same_indent = abs(a.left - b.left) <= cfg.indent_tolerance
    b_less_indented = b.left < a.left - cfg.indent_tolerance
    large_left_shift = a.left - b.left > cfg.large_left_shift

    first_word = first_word_length(text_b, cfg.first_word_max_chars)
    first_word_width = first_word * font_size * cfg.char_width_mult
    remaining = right_edge - a.last_line_right
    has_unused_space = remaining > first_word_width + cfg.first_word_slack

    tight_gap = v_gap < line_height * cfg.tight_gap_mult
    separated = v_gap > line_height * cfg.paragraph_gap_mult
    new_paragraph = has_unused_space and same_indent

    if new_paragraph and v_gap > cfg.new_paragraph_min_gap:
        return WrapDecision.prevent

    if a_line_full and not a_right_aligned and tight_gap and not separated and not new_paragraph:
        if same_indent or (b_less_indented and not large_left_shift):
            return WrapDecision.merge

    if (
        v_gap < cfg.very_tight_gap
        and b_less_indented
        and not large_left_shift
        and not separated
    ):
        return WrapDecision.merge

    return WrapDecision.undecided


def page_right_edge(a: LayoutEntity, ctx: MergeContext, cfg: LayoutConfig) -> float:
    return ctx.content_right


# ── Merge predicate skeleton ───────────────────────────────────────────


@dataclass(frozen=True)
class MergeRules:
    """Strategy-specific parts of :func:`should_merge`."""

    # Vertical gap above which the conservative fallback refuses to merge.
    fallback_gap: float
    # Evaluated first; returning True vetoes the pair.
    guard: Optional[PairHook] = None
    # Extra condition a same-line fragment pair must also satisfy.
    fragment_filter: Optional[PairHook] = None
    # Keep caption-shaped text (Table 1, Figure 2, Source:) on its own.
    caption_guard: bool = False
    # Let an indented line continue a bullet item above it.
    hanging_indent: bool = True
    # Right text edge against which unused space on a's last line is measured.
    wrap_edge: EdgeHook = page_right_edge


def should_merge(
    a: LayoutEntity,
    b: LayoutEntity,
    ctx: MergeContext,
    cfg: LayoutConfig,
    rules: MergeRules,
    area_of: AreaFunction,
) -> bool:
    """Ordered-pair merge decision; the first applicable rule wins."""
    if a.is_table or b.is_table:
        return False
    if rules.guard is not None and rules.guard(a, b, ctx, cfg):
        return False

    geo = PairGeometry.between(a, b)
    text_a = a.text().strip()
    text_b = b.text().strip()

    # Lone bullet on the same line as its content.
    if geo.v_gap < cfg.bullet_max_gap and geo.d_top < cfg.bullet_top_tol:
        if joins_bullet(a, b, cfg) or joins_bullet(b, a, cfg):
            return True

    if starts_with_bullet(text_b):
        return False

    if rules.caption_guard and (is_table_caption(text_a) or is_table_caption(text_b)):
        return False

    if area_of(a) != area_of(b):
        return False

    if (
        geo.v_gap < cfg.fragment_max_gap
        and geo.h_overlap > cfg.fragment_min_overlap
        and geo.d_top < cfg.fragment_top_tol
    ):
        if rules.fragment_filter is None or rules.fragment_filter(a, b, ctx, cfg):
            return True

    if is_toc_continuation(a, text_a, text_b, geo.v_gap, cfg):
        return True

    if are_independent_entries(text_a, text_b):
        return False
    if is_new_section_title(text_b):
        return False
    if (
        b.left < cfg.reference_max_left
        and not b.left > a.left + cfg.reference_indent_tol
        and is_reference_entry(text_b)
    ):
        return False

    if (
        is_right_anchored(a, cfg)
        and is_right_anchored(b, cfg)
        and geo.v_gap > cfg.right_anchor_min_gap
    ):
        return False

    if style_mismatch(a, b, cfg):
        return False

    if is_centered(a, cfg) and is_centered(b, cfg) and geo.v_gap < cfg.centered_max_gap:
        return True

    decision = check_line_wrap(a, b, text_b, geo.v_gap, rules.wrap_edge(a, ctx, cfg), cfg)
    if decision == WrapDecision.merge:
        return True
    if decision == WrapDecision.prevent:
        return False

    if geo.v_gap > rules.fallback_gap:
        return False

    if b.left > a.left + cfg.indent_tolerance:
        # Hanging indent: the body of a bullet item sits right of its marker.
        return (
            rules.hanging_indent
            and starts_with_bullet(text_a)
            and b.left - a.left < cfg.hanging_indent_max
            and geo.v_gap < cfg.hanging_indent_max_gap
        )

    return (
        abs(a.left - b.left) <= cfg.indent_tolerance
        and geo.h_overlap > geo.min_width * cfg.fallback_overlap_frac
    )


# ── Reading areas ──────────────────────────────────────────────────────


def banner_area(e: LayoutEntity, cfg: LayoutConfig) -> Optional[int]:
    """-1 / 2 for wide, short blocks hugging the top / bottom of the page."""
    if e.width > e.page_width * cfg.banner_min_width_frac and e.height < cfg.banner_max_height:
        if e.top < e.page_height * cfg.banner_header_frac:
            return -1
        if e.bottom > e.page_height * cfg.banner_footer_frac:
            return 2
    return None
