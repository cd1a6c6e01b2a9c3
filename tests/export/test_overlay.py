"""Tests for pageflow.export.overlay — debug overlay rendering.

Covers:
  • _color / _scale_box helpers
  • draw_layout_overlay size, scale and background handling
  • colour overrides and table fill
  • entities without a bounding box
"""

from __future__ import annotations

import pytest
from conftest import PAGE_H, PAGE_W, make_entity, make_lines_entity, make_table
from PIL import Image

from pageflow.analyzer import PageLayout
from pageflow.config import LayoutConfig
from pageflow.export.overlay import (
    DEFAULT_COLORS,
    LABEL_PREFIXES,
    _color,
    _scale_box,
    draw_layout_overlay,
)
from pageflow.models import LayoutEntity, TextGroup
from pageflow.page_type import LayoutFeatures, PageType

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _layout(entities) -> PageLayout:
    return PageLayout(
        page_index=0,
        page_width=PAGE_W,
        page_height=PAGE_H,
        page_type=PageType.single_column,
        features=LayoutFeatures(),
        entities=list(entities),
    )


def _paragraph() -> LayoutEntity:
    return make_entity(100, 200, 200, "a paragraph", height=40)


def _table_entity() -> LayoutEntity:
    return LayoutEntity.from_group(make_table(2, 2, x0=72, y0=400), PAGE_W, PAGE_H)


# ---------------------------------------------------------------------------
# Helpers under test
# ---------------------------------------------------------------------------


class TestHelpers:
    def test_color_default(self):
        assert _color(None, "paragraph") == DEFAULT_COLORS["paragraph"]

    def test_color_override(self):
        assert _color({"table": (1, 2, 3, 4)}, "table") == (1, 2, 3, 4)
        assert _color({"table": (1, 2, 3, 4)}, "paragraph") == DEFAULT_COLORS["paragraph"]

    def test_scale_box(self):
        assert _scale_box(_paragraph(), 2.0) == (200.0, 400.0, 600.0, 480.0)

    def test_label_prefixes_cover_kinds(self):
        assert set(LABEL_PREFIXES) == {"paragraph", "table"}


# ---------------------------------------------------------------------------
# draw_layout_overlay
# ---------------------------------------------------------------------------


class TestDrawLayoutOverlay:
    def test_writes_png(self, tmp_path):
        out = tmp_path / "sub" / "overlay.png"
        img = draw_layout_overlay(_layout([_paragraph(), _table_entity()]), out)
        assert out.exists()
        with Image.open(out) as saved:
            assert saved.mode == "RGB"
            assert saved.size == (612, 792)
        assert img.size == (612, 792)

    def test_scale(self, tmp_path):
        img = draw_layout_overlay(_layout([_paragraph()]), tmp_path / "o.png", scale=0.5)
        assert img.size == (306, 396)

    def test_paragraph_outline_color(self, tmp_path):
        img = draw_layout_overlay(_layout([_paragraph()]), tmp_path / "o.png")
        r, g, b, _ = img.getpixel((299, 220))
        assert b > r and b > g

    def test_table_filled(self, tmp_path):
        img = draw_layout_overlay(_layout([_table_entity()]), tmp_path / "o.png")
        r, g, b, _ = img.getpixel((150, 412))
        assert g > r and g > b

    def test_color_override(self, tmp_path):
        img = draw_layout_overlay(
            _layout([_paragraph()]),
            tmp_path / "o.png",
            color_overrides={"paragraph": (255, 0, 0, 255)},
        )
        assert img.getpixel((299, 220))[:3] == (255, 0, 0)

    def test_background_resized(self, tmp_path):
        bg = Image.new("RGB", (100, 100), (0, 0, 0))
        img = draw_layout_overlay(_layout([]), tmp_path / "o.png", scale=0.5, background=bg)
        assert img.size == (306, 396)
        assert img.getpixel((5, 5))[:3] == (0, 0, 0)

    def test_empty_entity_skipped(self, tmp_path):
        empty = LayoutEntity.from_group(TextGroup([]), PAGE_W, PAGE_H)
        assert empty.bbox is None
        img = draw_layout_overlay(_layout([empty]), tmp_path / "o.png")
        assert img.getpixel((0, 0))[:3] == (255, 255, 255)

    def test_indent_marker(self, tmp_path):
        entity = make_lines_entity(
            [
                (120, 300, 300, "indented opening line"),
                (100, 312, 320, "continuation line"),
            ]
        )
        assert entity.has_first_line_indent()
        img = draw_layout_overlay(_layout([entity]), tmp_path / "o.png")
        tick = [img.getpixel((x, 304)) for x in range(118, 123)]
        assert any(px[0] > px[2] + 50 for px in tick)

    @pytest.mark.parametrize("width", [1, 4])
    def test_outline_width_from_config(self, tmp_path, width):
        cfg = LayoutConfig(overlay_outline_width=width)
        img = draw_layout_overlay(_layout([_paragraph()]), tmp_path / "o.png", cfg=cfg)
        inner = img.getpixel((297, 220))[:3]
        if width == 1:
            assert inner == (255, 255, 255)
        else:
            assert inner != (255, 255, 255)
