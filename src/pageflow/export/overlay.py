"""Debug overlay: entity boxes, reading-order labels and indent markers."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Dict, Optional, Tuple, Union

from PIL import Image, ImageDraw, ImageFont

from ..config import LayoutConfig
from ..models import LayoutEntity

if TYPE_CHECKING:
    from ..analyzer import PageLayout

DEFAULT_COLORS: Dict[str, Tuple[int, int, int, int]] = {
    "paragraph": (0, 0, 255, 180),
    "table": (0, 160, 0, 180),
    "first_line_indent": (255, 0, 0, 220),
}

LABEL_PREFIXES = {
    "paragraph": "P",
    "table": "T",
}

_TABLE_FILL_ALPHA = 40


def _color(color_overrides: Optional[Dict[str, tuple]], key: str) -> tuple:
    if color_overrides and key in color_overrides:
        return color_overrides[key]
    return DEFAULT_COLORS[key]


def _scale_box(entity: LayoutEntity, scale: float) -> Tuple[float, float, float, float]:
    return (
        entity.left * scale,
        entity.top * scale,
        entity.right * scale,
        entity.bottom * scale,
    )


def _load_font(size: int) -> ImageFont.ImageFont:
    try:
        return ImageFont.truetype("arial.ttf", size)
    except (OSError, IOError):
        return ImageFont.load_default()


def _draw_label(
    draw: ImageDraw.ImageDraw,
    x: float,
    y: float,
    label: str,
    color: tuple,
    scale: float,
    cfg: LayoutConfig,
) -> None:
    """Small label on a white background just above (x, y)."""
    font_size = max(cfg.overlay_label_font_floor, int(cfg.overlay_label_font_base * scale))
    font = _load_font(font_size)
    y_text = max(0.0, y - font_size - 2)
    bbox = draw.textbbox((x, y_text), label, font=font)
    draw.rectangle(
        (bbox[0] - 1, bbox[1] - 1, bbox[2] + 1, bbox[3] + 1),
        fill=(255, 255, 255, cfg.overlay_label_bg_alpha),
    )
    draw.text((x, y_text), label, fill=tuple(color[:3]), font=font)


def _draw_indent_marker(
    draw: ImageDraw.ImageDraw,
    entity: LayoutEntity,
    color: tuple,
    scale: float,
    cfg: LayoutConfig,
) -> None:
    """Short vertical tick at the first line's left edge."""
    x = entity.first_line_left * scale
    y0 = entity.top * scale
    y1 = y0 + cfg.overlay_indent_marker_len * scale
    draw.line([(x, y0), (x, y1)], fill=color, width=cfg.overlay_outline_width)


def draw_layout_overlay(
    layout: "PageLayout",
    out_path: Union[Path, str],
    scale: float = 1.0,
    background: Optional[Image.Image] = None,
    color_overrides: Optional[Dict[str, tuple]] = None,
    cfg: Optional[LayoutConfig] = None,
) -> Image.Image:
    """Render *layout* as a PNG at *out_path* and return the image.

    Each entity is outlined in its kind's color and labelled with its
    reading-order position (``P0``, ``T3`` ...).  Paragraphs with a
    first-line indent get a tick at the indented start.  *background*,
    when given, is resized to the page size times *scale*.
    """
    if cfg is None:
        cfg = LayoutConfig()

    img_w = max(1, int(layout.page_width * scale))
    img_h = max(1, int(layout.page_height * scale))
    if background is not None:
        img = background.convert("RGBA")
        if img.size != (img_w, img_h):
            img = img.resize((img_w, img_h))
    else:
        img = Image.new("RGBA", (img_w, img_h), (255, 255, 255, 255))

    draw = ImageDraw.Draw(img, "RGBA")
    indent_color = _color(color_overrides, "first_line_indent")

    for order, entity in enumerate(layout.entities):
        if entity.bbox is None:
            continue
        key = entity.kind.value
        color = _color(color_overrides, key)
        box = _scale_box(entity, scale)
        fill = (color[0], color[1], color[2], _TABLE_FILL_ALPHA) if entity.is_table else None
        draw.rectangle(box, outline=color, width=cfg.overlay_outline_width, fill=fill)
        _draw_label(draw, box[0], box[1], f"{LABEL_PREFIXES[key]}{order}", color, scale, cfg)
        if entity.has_first_line_indent():
            _draw_indent_marker(draw, entity, indent_color, scale, cfg)

    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    img.convert("RGB").save(out_path, format="PNG")
    return img
