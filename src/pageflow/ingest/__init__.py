"""PDF ingest: validation, metadata, rendering and page extraction.

Public API
----------
- :func:`ingest_pdf` — open + validate a PDF, return :class:`PdfMeta`
- :func:`extract_page` — build a :class:`~pageflow.models.Page` for one PDF page
- :func:`extract_page_from_plumber` — same, from an already open pdfplumber page
- :func:`render_page_image` — render one page to a PIL Image
- :class:`IngestError` — raised on validation failures
"""

from .extract import extract_page, extract_page_from_plumber
from .ingest import IngestError, PageInfo, PdfMeta, ingest_pdf, render_page_image

__all__ = [
    "IngestError",
    "PageInfo",
    "PdfMeta",
    "extract_page",
    "extract_page_from_plumber",
    "ingest_pdf",
    "render_page_image",
]
