from __future__ import annotations

from dataclasses import dataclass


class ConfigValidationError(ValueError):
    """Raised when a LayoutConfig field has an invalid value."""


def _check_range(
    name: str, value: float, lo: float, hi: float, *, inclusive: bool = True
) -> None:
    if inclusive:
        if not (lo <= value <= hi):
            raise ConfigValidationError(f"{name}={value} out of range [{lo}, {hi}]")
    else:
        if not (lo < value < hi):
            raise ConfigValidationError(f"{name}={value} out of range ({lo}, {hi})")


def _check_positive(name: str, value: float) -> None:
    if value <= 0:
        raise ConfigValidationError(f"{name}={value} must be > 0")


def _check_non_negative(name: str, value: float) -> None:
    if value < 0:
        raise ConfigValidationError(f"{name}={value} must be >= 0")


@dataclass
class LayoutConfig:
    """Tunables for page-type detection, consolidation and reading order.

    Distances are in page units (points for PDF input); ``*_frac`` values
    are fractions of page width or height.
    """

    # ── Page-type detection ────────────────────────────────────────────
    # Elements whose top lies in the top/bottom band are ignored.
    page_margin_band: float = 0.08
    # Horizontal center left of this fraction counts toward the left column.
    left_column_center_frac: float = 0.45
    # Horizontal center right of this fraction counts toward the right column.
    right_column_center_frac: float = 0.55
    # Minimum per-side element count for a two-column verdict.
    min_column_elements: int = 3
    # Blocks narrower than this fraction are candidates for parallel pairs.
    parallel_block_max_frac: float = 0.55
    # Vertical overlap (units) required between parallel blocks.
    parallel_min_v_overlap: float = 5.0
    # Horizontal center distance (fraction of width) between parallel blocks.
    parallel_center_sep_frac: float = 0.30
    # Table coverage ratio above which a page with tables is table-dominant.
    table_dominant_coverage: float = 0.4
    # Height assumed for elements that carry none.
    default_element_height: float = 12.0

    # ── Table reality classifier ───────────────────────────────────────
    # Content taller than this fraction of page height looks like a container.
    table_container_height_frac: float = 0.4
    # Bordered-cell fraction that rescues a tall grid with > 2 columns.
    table_container_border_frac: float = 0.25
    # Grids larger than this are data tables (unless list-style).
    table_large_rows: int = 8
    table_large_cols: int = 4
    # A first column narrower than this (average) is a marker column.
    table_list_column_max_width: float = 60.0
    # Fraction of rows that must have content in the marker column.
    table_list_column_row_frac: float = 0.5
    # Bordered-cell fraction above which a grid is a data table.
    table_border_frac: float = 0.5
    # Fraction of first-column cells that must be list markers.
    table_list_marker_frac: float = 0.5
    # Bordered-cell fraction for the stricter table-dominant variant.
    strict_table_border_frac: float = 0.3

    # ── Block splitting ────────────────────────────────────────────────
    # Minimum vertical gap before a discontinuity can split a group.
    split_min_gap: float = 2.0
    # Font-size jump that starts a new block.
    split_font_jump: float = 1.5
    # Horizontal jump of the left edge that starts a new block.
    split_left_jump: float = 100.0
    # Height assumed when tracking the running bottom of height-less elements.
    split_missing_height: float = 10.0
    # Column boundary for the multi-column pre-split (fraction of width).
    column_split_frac: float = 0.5

    # ── Merge predicate ────────────────────────────────────────────────
    # Same-line bullet + content.
    bullet_max_width: float = 30.0
    bullet_max_gap: float = 4.0
    bullet_top_tol: float = 5.0
    bullet_reach_back: float = 15.0
    bullet_reach_forward: float = 50.0
    # Same-line fragments.
    fragment_max_gap: float = 4.0
    fragment_min_overlap: float = -5.0
    fragment_top_tol: float = 3.0
    # Table-of-contents continuation.
    toc_right_margin_frac: float = 0.85
    toc_max_gap: float = 8.0
    # Reference entries starting left of this are new entries.
    reference_max_left: float = 80.0
    reference_indent_tol: float = 10.0
    # Narrow right-anchored fragments.
    right_anchor_left_frac: float = 0.5
    right_anchor_width_frac: float = 0.4
    right_anchor_min_gap: float = 2.0
    # First-element font sizes further apart than this never merge.
    font_size_tolerance: float = 1.2
    # Symmetric-centering test.
    centered_margin_tol: float = 15.0
    centered_min_margin: float = 100.0
    centered_narrow_frac: float = 0.4
    centered_symmetric_tol: float = 5.0
    centered_symmetric_min_margin: float = 60.0
    centered_max_gap: float = 15.0
    # Natural line-wrap detection.
    line_full_frac: float = 0.80
    right_aligned_right_frac: float = 0.85
    right_aligned_left_frac: float = 0.35
    indent_tolerance: float = 5.0
    large_left_shift: float = 100.0
    default_font_size: float = 10.0
    line_height_mult: float = 1.4
    tight_gap_mult: float = 0.5
    paragraph_gap_mult: float = 0.8
    very_tight_gap: float = 5.0
    # Unused-space estimate: average glyph width as a multiple of font size.
    char_width_mult: float = 0.6
    first_word_max_chars: int = 20
    first_word_slack: float = 10.0
    # Right text edge assumed for full-width lines (page width minus this).
    right_margin_inset: float = 54.0
    new_paragraph_min_gap: float = 2.0
    # Hanging-indent list continuation.
    hanging_indent_max: float = 50.0
    hanging_indent_max_gap: float = 8.0
    # Conservative vertical fallback.
    fallback_max_gap: float = 6.0
    table_fallback_max_gap: float = 8.0
    fallback_overlap_frac: float = 0.5

    # ── Multi-column guards ────────────────────────────────────────────
    gutter_frac: float = 0.5
    wide_block_frac: float = 0.55
    gutter_left_frac: float = 0.48
    gutter_right_frac: float = 0.52
    gutter_top_tol: float = 5.0
    fragment_max_hgap: float = 15.0
    fragment_max_hgap_frac: float = 0.03

    # ── Reading areas ──────────────────────────────────────────────────
    # Wide, short blocks at the extremes become header/footer.
    banner_min_width_frac: float = 0.4
    banner_max_height: float = 100.0
    banner_header_frac: float = 0.12
    banner_footer_frac: float = 0.88
    # Narrow blocks above this band are headers on single-column pages.
    header_band_frac: float = 0.08
    header_max_width_frac: float = 0.4
    # Multi-column full-flow tests.
    full_flow_width_frac: float = 0.65
    gutter_span_left_frac: float = 0.45
    gutter_span_right_frac: float = 0.55
    left_margin_flow_frac: float = 0.25
    center_flow_tol: float = 15.0
    center_flow_max_width_frac: float = 0.5
    column_center_split_frac: float = 0.52
    # Table-dominant header/footer bands.
    table_header_frac: float = 0.10
    table_footer_frac: float = 0.90
    table_footer_max_height: float = 50.0
    # Entities whose tops differ by less than this share a visual row.
    same_row_tol: float = 3.0
    # Elements whose tops differ by less than this share a line when merging.
    merge_line_tol: float = 5.0

    # ── Ingest (pdfplumber adapter) ────────────────────────────────────
    ingest_x_tolerance: float = 3.0
    ingest_y_tolerance: float = 3.0
    # Words whose y-centers differ by less than this multiple of the
    # median word height share a visual line.
    ingest_line_tol_mult: float = 0.5
    # Split a line into spans when a gap exceeds this multiple of the
    # median inter-word gap.
    ingest_span_gap_mult: float = 2.5
    # Lines within this multiple of line height stack into one vertical group.
    ingest_group_gap_mult: float = 1.2
    # Left edges within this distance are considered aligned.
    ingest_group_left_tol: float = 12.0
    # Rects thinner than this are treated as rule lines.
    ingest_rule_max_thickness: float = 2.0
    # Detect bordered tables with pdfplumber's table finder.
    ingest_find_tables: bool = True

    # ── Pipeline ───────────────────────────────────────────────────────
    # Write layout JSON and overlays when an output directory is given.
    enable_export: bool = True

    # ── Overlay ────────────────────────────────────────────────────────
    overlay_outline_width: int = 2
    overlay_label_font_base: int = 10
    overlay_label_font_floor: int = 8
    overlay_label_bg_alpha: int = 200
    overlay_indent_marker_len: float = 8.0

    def __post_init__(self) -> None:
        """Validate field ranges to catch misconfiguration early."""
        # -- Fractions that must be in [0, 1] --
        _unit = [
            "page_margin_band",
            "left_column_center_frac",
            "right_column_center_frac",
            "parallel_block_max_frac",
            "parallel_center_sep_frac",
            "table_dominant_coverage",
            "table_container_height_frac",
            "table_container_border_frac",
            "table_list_column_row_frac",
            "table_border_frac",
            "table_list_marker_frac",
            "strict_table_border_frac",
            "column_split_frac",
            "toc_right_margin_frac",
            "right_anchor_left_frac",
            "right_anchor_width_frac",
            "centered_narrow_frac",
            "line_full_frac",
            "right_aligned_right_frac",
            "right_aligned_left_frac",
            "fallback_overlap_frac",
            "gutter_frac",
            "wide_block_frac",
            "gutter_left_frac",
            "gutter_right_frac",
            "fragment_max_hgap_frac",
            "banner_min_width_frac",
            "banner_header_frac",
            "banner_footer_frac",
            "header_band_frac",
            "header_max_width_frac",
            "full_flow_width_frac",
            "gutter_span_left_frac",
            "gutter_span_right_frac",
            "left_margin_flow_frac",
            "center_flow_max_width_frac",
            "column_center_split_frac",
            "table_header_frac",
            "table_footer_frac",
        ]
        for name in _unit:
            _check_range(name, getattr(self, name), 0.0, 1.0)

        # -- Strictly positive floats --
        _pos = [
            "default_element_height",
            "table_list_column_max_width",
            "split_missing_height",
            "bullet_max_width",
            "default_font_size",
            "line_height_mult",
            "tight_gap_mult",
            "paragraph_gap_mult",
            "char_width_mult",
            "banner_max_height",
            "table_footer_max_height",
            "ingest_line_tol_mult",
            "ingest_span_gap_mult",
            "ingest_group_gap_mult",
        ]
        for name in _pos:
            _check_positive(name, getattr(self, name))

        # -- Non-negative floats --
        _nn = [
            "parallel_min_v_overlap",
            "split_min_gap",
            "split_font_jump",
            "split_left_jump",
            "bullet_max_gap",
            "bullet_top_tol",
            "bullet_reach_back",
            "bullet_reach_forward",
            "fragment_max_gap",
            "fragment_top_tol",
            "toc_max_gap",
            "reference_max_left",
            "reference_indent_tol",
            "right_anchor_min_gap",
            "font_size_tolerance",
            "centered_margin_tol",
            "centered_min_margin",
            "centered_symmetric_tol",
            "centered_symmetric_min_margin",
            "centered_max_gap",
            "indent_tolerance",
            "large_left_shift",
            "very_tight_gap",
            "first_word_slack",
            "right_margin_inset",
            "new_paragraph_min_gap",
            "hanging_indent_max",
            "hanging_indent_max_gap",
            "fallback_max_gap",
            "table_fallback_max_gap",
            "gutter_top_tol",
            "fragment_max_hgap",
            "center_flow_tol",
            "same_row_tol",
            "merge_line_tol",
            "ingest_x_tolerance",
            "ingest_y_tolerance",
            "ingest_group_left_tol",
            "ingest_rule_max_thickness",
            "overlay_indent_marker_len",
        ]
        for name in _nn:
            _check_non_negative(name, getattr(self, name))

        # -- Positive ints --
        _pos_ints = [
            "min_column_elements",
            "table_large_rows",
            "table_large_cols",
            "first_word_max_chars",
            "overlay_outline_width",
            "overlay_label_font_base",
            "overlay_label_font_floor",
        ]
        for name in _pos_ints:
            val = getattr(self, name)
            if val < 1:
                raise ConfigValidationError(f"{name}={val} must be >= 1")

        if not (0 <= self.overlay_label_bg_alpha <= 255):
            raise ConfigValidationError(
                f"overlay_label_bg_alpha={self.overlay_label_bg_alpha} "
                "out of range [0, 255]"
            )

        # -- Band ordering --
        if self.left_column_center_frac > self.right_column_center_frac:
            raise ConfigValidationError(
                f"left_column_center_frac ({self.left_column_center_frac}) must be "
                f"<= right_column_center_frac ({self.right_column_center_frac})"
            )
        if self.gutter_left_frac > self.gutter_right_frac:
            raise ConfigValidationError(
                f"gutter_left_frac ({self.gutter_left_frac}) must be "
                f"<= gutter_right_frac ({self.gutter_right_frac})"
            )
        if self.banner_header_frac >= self.banner_footer_frac:
            raise ConfigValidationError(
                f"banner_header_frac ({self.banner_header_frac}) must be < "
                f"banner_footer_frac ({self.banner_footer_frac})"
            )
        if self.table_header_frac >= self.table_footer_frac:
            raise ConfigValidationError(
                f"table_header_frac ({self.table_header_frac}) must be < "
                f"table_footer_frac ({self.table_footer_frac})"
            )
