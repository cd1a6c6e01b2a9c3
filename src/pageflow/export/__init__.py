"""Export helpers: JSON serialization and debug overlays."""

from .overlay import draw_layout_overlay
from .serialize import load_page, page_from_dict, page_to_dict, serialize_layout, write_json

__all__ = [
    "draw_layout_overlay",
    "load_page",
    "page_from_dict",
    "page_to_dict",
    "serialize_layout",
    "write_json",
]
