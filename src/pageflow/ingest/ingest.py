"""PDF file validation, page metadata and page rendering.

Runner scripts and the pipeline go through this module rather than
calling ``pdfplumber.open()`` or ``.to_image()`` themselves.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

import pdfplumber
from PIL import Image

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data containers
# ---------------------------------------------------------------------------


@dataclass
class PageInfo:
    """Dimensions of a single PDF page."""

    index: int  # zero-based page number
    width: float  # points
    height: float  # points

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "width": round(self.width, 3),
            "height": round(self.height, 3),
        }


@dataclass
class PdfMeta:
    """PDF-level descriptor returned by :func:`ingest_pdf`.

    Does not keep the ``pdfplumber.PDF`` handle open.
    """

    path: Path
    num_pages: int
    pages: List[PageInfo] = field(default_factory=list)
    file_size_bytes: int = 0
    pdf_metadata: dict = field(default_factory=dict)
    error: Optional[str] = None

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        d: dict = {
            "path": str(self.path),
            "num_pages": self.num_pages,
            "file_size_bytes": self.file_size_bytes,
        }
        if self.pdf_metadata:
            d["pdf_metadata"] = self.pdf_metadata
        if self.error:
            d["error"] = self.error
        d["pages"] = [p.to_dict() for p in self.pages]
        return d


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


class IngestError(Exception):
    """Raised when a PDF cannot be ingested."""


def validate_pdf_path(pdf_path: Path) -> None:
    """Raise :class:`IngestError` for missing, empty or non-PDF files."""
    if not pdf_path.exists():
        raise IngestError(f"File not found: {pdf_path}")
    if not pdf_path.is_file():
        raise IngestError(f"Not a file: {pdf_path}")
    if pdf_path.stat().st_size == 0:
        raise IngestError(f"Empty file: {pdf_path}")
    if pdf_path.suffix.lower() != ".pdf":
        raise IngestError(f"Not a PDF (suffix={pdf_path.suffix!r}): {pdf_path}")


def _clean_metadata(raw: dict) -> dict:
    out = {}
    for k, v in raw.items():
        if isinstance(v, bytes):
            v = v.decode("utf-8", errors="replace")
        out[str(k)] = str(v) if v is not None else ""
    return out


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def ingest_pdf(pdf_path: Union[Path, str]) -> PdfMeta:
    """Open and validate a PDF, returning a :class:`PdfMeta` descriptor.

    Raises
    ------
    IngestError
        When the file is missing, empty, encrypted or cannot be opened.
    """
    pdf_path = Path(pdf_path)
    validate_pdf_path(pdf_path)

    try:
        with pdfplumber.open(pdf_path) as pdf:
            # pdfminer clears is_extractable on password-protected files.
            doc = getattr(pdf, "doc", None)
            if doc is not None and getattr(doc, "is_extractable", True) is False:
                raise IngestError(
                    f"PDF is encrypted (text extraction not permitted): {pdf_path}"
                )
            pages = [
                PageInfo(index=i, width=float(pg.width), height=float(pg.height))
                for i, pg in enumerate(pdf.pages)
            ]
            pdf_metadata = _clean_metadata(pdf.metadata or {})
    except IngestError:
        raise
    except Exception as exc:
        raise IngestError(f"Cannot open PDF: {exc}") from exc

    file_size = pdf_path.stat().st_size
    log.info("Ingested %s: %d pages, %.1f KB", pdf_path.name, len(pages), file_size / 1024)
    return PdfMeta(
        path=pdf_path.resolve(),
        num_pages=len(pages),
        pages=pages,
        file_size_bytes=file_size,
        pdf_metadata=pdf_metadata,
    )


def render_page_image(
    pdf_path: Union[Path, str],
    page_num: int,
    resolution: int = 150,
) -> Image.Image:
    """Render one PDF page to an RGB PIL image at *resolution* DPI."""
    with pdfplumber.open(pdf_path) as pdf:
        page = pdf.pages[page_num]
        img = page.to_image(resolution=resolution).original.copy()
    if img.mode != "RGB":
        img = img.convert("RGB")
    return img
