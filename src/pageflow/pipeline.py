"""Pipeline stage infrastructure: gating, timing and stage-result recording.

Stage flow for one page::

    ingest → layout → export

Every stage produces a :class:`StageResult`.  Gating lives in
:func:`gate` so scripts and tests see the same skip decisions.
:func:`run_page` and :func:`run_pdf_page` return structured results and
only touch the filesystem when an output directory is given.
"""

from __future__ import annotations

import logging
import time
import traceback
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Generator, List, Optional, Tuple, Union

from .analyzer import PageLayout, analyze_page
from .config import LayoutConfig
from .models import Page

if TYPE_CHECKING:
    from PIL import Image

logger = logging.getLogger(__name__)

# ── Skip reasons ───────────────────────────────────────────────────────


class SkipReason(str, Enum):
    """Why a pipeline stage was skipped."""

    disabled_by_config = "disabled_by_config"
    missing_inputs = "missing_inputs"
    no_elements = "no_elements"
    no_output_dir = "no_output_dir"
    upstream_failed = "upstream_failed"
    not_applicable = "not_applicable"


# ── Stage result ───────────────────────────────────────────────────────


@dataclass
class StageResult:
    """Outcome record for a single pipeline stage."""

    stage: str
    ran: bool = False
    status: str = "skipped"  # "success" | "skipped" | "failed"
    skip_reason: Optional[str] = None
    duration_ms: int = 0
    counts: Dict[str, Any] = field(default_factory=dict)
    inputs: Dict[str, Any] = field(default_factory=dict)
    outputs: Dict[str, Any] = field(default_factory=dict)
    error: Optional[Dict[str, str]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize stage result to a JSON-compatible dict."""
        d: Dict[str, Any] = {
            "stage": self.stage,
            "ran": self.ran,
            "status": self.status,
        }
        if self.skip_reason is not None:
            d["skip_reason"] = self.skip_reason
        d["duration_ms"] = self.duration_ms
        if self.counts:
            d["counts"] = self.counts
        if self.inputs:
            d["inputs"] = self.inputs
        if self.outputs:
            d["outputs"] = self.outputs
        if self.error is not None:
            d["error"] = self.error
        return d


# ── Gating ─────────────────────────────────────────────────────────────

STAGE_ORDER: List[str] = ["ingest", "layout", "export"]


def gate(
    stage: str,
    cfg: LayoutConfig,
    inputs: Optional[Dict[str, Any]] = None,
) -> Tuple[bool, Optional[str]]:
    """Decide whether *stage* should run.

    Parameters
    ----------
    stage : str
        One of :data:`STAGE_ORDER`.
    cfg : LayoutConfig
        Effective configuration for the run.
    inputs : dict, optional
        Lightweight facts about upstream outputs, e.g.
        ``{"has_pdf": True}``, ``{"elements": 0}`` or ``{"out_dir": "out"}``.

    Returns
    -------
    (should_run, skip_reason)
    """
    if inputs is None:
        inputs = {}

    if stage == "ingest":
        if not inputs.get("has_pdf", True):
            return False, SkipReason.missing_inputs.value
        return True, None

    if stage == "layout":
        if inputs.get("upstream_failed"):
            return False, SkipReason.upstream_failed.value
        if inputs.get("elements", 1) == 0:
            return False, SkipReason.no_elements.value
        return True, None

    if stage == "export":
        if not cfg.enable_export:
            return False, SkipReason.disabled_by_config.value
        if not inputs.get("out_dir"):
            return False, SkipReason.no_output_dir.value
        if not inputs.get("has_layout", True):
            return False, SkipReason.upstream_failed.value
        return True, None

    return False, SkipReason.not_applicable.value


@contextmanager
def run_stage(
    stage: str,
    cfg: LayoutConfig,
    inputs: Optional[Dict[str, Any]] = None,
) -> Generator[StageResult, None, None]:
    """Wrap a pipeline stage with gating and timing.

    Usage::

        with run_stage("layout", cfg) as sr:
            if sr.ran:
                ...
                sr.counts["entities"] = 12

    ``sr.ran`` is ``True`` only when :func:`gate` approves the stage.
    An exception inside the block marks the stage failed, records the
    error and is re-raised.
    """
    should_run, skip_reason = gate(stage, cfg, inputs)

    sr = StageResult(stage=stage)
    if inputs:
        sr.inputs = dict(inputs)

    if not should_run:
        sr.skip_reason = skip_reason
        yield sr
        return

    sr.ran = True
    t0 = time.perf_counter()
    try:
        yield sr
        if sr.status not in ("success", "failed"):
            sr.status = "success"
    except Exception as exc:
        sr.status = "failed"
        sr.error = {
            "type": type(exc).__name__,
            "message": str(exc),
            "stack": traceback.format_exc(),
        }
        raise
    finally:
        sr.duration_ms = int((time.perf_counter() - t0) * 1000)


# ── Page-level result ──────────────────────────────────────────────────


@dataclass
class PageResult:
    """Everything produced for one page."""

    page: int = 0
    page_width: float = 0.0
    page_height: float = 0.0
    stages: Dict[str, StageResult] = field(default_factory=dict)
    source: Optional[Page] = None
    layout: Optional[PageLayout] = None
    outputs: Dict[str, str] = field(default_factory=dict)

    @property
    def failed(self) -> bool:
        return any(sr.status == "failed" for sr in self.stages.values())

    def to_summary_dict(self) -> Dict[str, Any]:
        """Return a lightweight summary suitable for JSON serialisation."""
        layout = self.layout
        return {
            "page": self.page,
            "page_width": self.page_width,
            "page_height": self.page_height,
            "page_type": layout.page_type.value if layout is not None else None,
            "stages": {n: sr.to_dict() for n, sr in self.stages.items()},
            "counts": {
                "elements": len(self.source.elements) if self.source is not None else 0,
                "candidates": layout.candidates if layout is not None else 0,
                "paragraphs": len(layout.paragraphs()) if layout is not None else 0,
                "tables": len(layout.tables()) if layout is not None else 0,
            },
            "outputs": dict(self.outputs),
        }


# ── Stage helpers ──────────────────────────────────────────────────────


def _run_layout_stage(pr: PageResult, page: Page, cfg: LayoutConfig) -> None:
    with run_stage("layout", cfg, {"elements": len(page.elements)}) as sr:
        if sr.ran:
            pr.layout = analyze_page(page, cfg)
            sr.counts = {
                "candidates": pr.layout.candidates,
                "entities": len(pr.layout.entities),
                "tables": len(pr.layout.tables()),
            }
            sr.outputs = {"page_type": pr.layout.page_type.value}
    pr.stages["layout"] = sr


def _run_export_stage(
    pr: PageResult,
    cfg: LayoutConfig,
    out_dir: Optional[Path],
    overlay: bool,
    background: Optional["Image.Image"],
    scale: float,
) -> None:
    from .export import draw_layout_overlay, serialize_layout, write_json

    inputs = {"out_dir": str(out_dir) if out_dir else None, "has_layout": pr.layout is not None}
    with run_stage("export", cfg, inputs) as sr:
        if sr.ran and pr.layout is not None and out_dir is not None:
            json_path = write_json(
                serialize_layout(pr.layout), out_dir / f"page_{pr.page}_layout.json"
            )
            pr.outputs["layout_json"] = str(json_path)
            if overlay:
                png_path = out_dir / f"page_{pr.page}_overlay.png"
                draw_layout_overlay(
                    pr.layout, png_path, scale=scale, background=background, cfg=cfg
                )
                pr.outputs["overlay_png"] = str(png_path)
            sr.outputs = dict(pr.outputs)
    pr.stages["export"] = sr


def run_page(
    page: Page,
    cfg: Optional[LayoutConfig] = None,
    out_dir: Optional[Union[Path, str]] = None,
    overlay: bool = False,
    background: Optional["Image.Image"] = None,
    scale: float = 1.0,
) -> PageResult:
    """Analyze an in-memory *page*; write outputs only when *out_dir* is set.

    The page is already extracted, so the result has no ``ingest`` stage.
    """
    if cfg is None:
        cfg = LayoutConfig()

    pr = PageResult(page=page.index, page_width=page.width, page_height=page.height, source=page)
    _run_layout_stage(pr, page, cfg)
    _run_export_stage(
        pr, cfg, Path(out_dir) if out_dir else None, overlay, background, scale
    )
    return pr


def run_pdf_page(
    pdf_path: Union[Path, str],
    page_num: int,
    cfg: Optional[LayoutConfig] = None,
    out_dir: Optional[Union[Path, str]] = None,
    overlay: bool = False,
    resolution: int = 150,
) -> PageResult:
    """Extract page *page_num* of *pdf_path* and analyze it.

    Parameters
    ----------
    pdf_path : Path or str
        Source PDF.
    page_num : int
        0-based page index.
    cfg : LayoutConfig, optional
        Defaults to ``LayoutConfig()``.
    out_dir : Path or str, optional
        When set, the layout JSON (and the overlay PNG when *overlay*)
        are written there.
    resolution : int
        Render DPI of the overlay background.
    """
    from .ingest import extract_page, render_page_image

    if cfg is None:
        cfg = LayoutConfig()
    pdf_path = Path(pdf_path)

    pr = PageResult(page=page_num)
    background = None
    with run_stage("ingest", cfg, {"has_pdf": True}) as sr:
        page = extract_page(pdf_path, page_num, cfg)
        if overlay and out_dir and cfg.enable_export:
            background = render_page_image(pdf_path, page_num, resolution=resolution)
        sr.counts = {
            "elements": len(page.elements),
            "vertical_groups": len(page.vertical_groups),
            "tables": len(page.tables),
        }
    pr.stages["ingest"] = sr
    pr.source = page
    pr.page_width = page.width
    pr.page_height = page.height

    _run_layout_stage(pr, page, cfg)
    _run_export_stage(
        pr,
        cfg,
        Path(out_dir) if out_dir else None,
        overlay,
        background,
        resolution / 72.0,
    )
    logger.info("run_pdf_page %s page %d: %s", pdf_path.name, page_num, pr.stages["layout"].status)
    return pr


# ── Document-level result ──────────────────────────────────────────────


@dataclass
class DocumentResult:
    """Aggregated result for a multi-page run."""

    pdf_path: Optional[Path] = None
    pages: List[PageResult] = field(default_factory=list)
    config: Optional[LayoutConfig] = None

    def failed_pages(self) -> List[int]:
        return [pr.page for pr in self.pages if pr.failed]

    def to_summary_dict(self) -> Dict[str, Any]:
        """Serialize document result to a summary dict."""
        return {
            "pdf": str(self.pdf_path) if self.pdf_path else None,
            "pages_processed": len(self.pages),
            "failed_pages": self.failed_pages(),
            "pages": [pr.to_summary_dict() for pr in self.pages],
        }


def _failed_page(page_num: int, exc: Exception) -> PageResult:
    failed = PageResult(page=page_num)
    failed.stages["error"] = StageResult(
        stage="pipeline",
        status="failed",
        error={"type": type(exc).__name__, "message": str(exc)},
    )
    return failed


def run_document(
    pdf_path: Union[Path, str],
    pages: Optional[List[int]] = None,
    cfg: Optional[LayoutConfig] = None,
    out_dir: Optional[Union[Path, str]] = None,
    overlay: bool = False,
    max_workers: int = 1,
) -> DocumentResult:
    """Analyze several pages of a PDF.

    Pages are independent, so with ``max_workers > 1`` they run on a
    thread pool; results keep the order of *pages* either way.  A page
    that raises is recorded as a failed :class:`PageResult` and the run
    continues.
    """
    from .ingest import ingest_pdf

    if cfg is None:
        cfg = LayoutConfig()
    if max_workers < 1:
        raise ValueError(f"max_workers must be >= 1, got {max_workers}")

    meta = ingest_pdf(pdf_path)
    if pages is None:
        pages = list(range(meta.num_pages))

    def _one(pg: int) -> PageResult:
        try:
            return run_pdf_page(meta.path, pg, cfg=cfg, out_dir=out_dir, overlay=overlay)
        except Exception as exc:
            logger.error("run_document page %d failed: %s", pg, exc)
            return _failed_page(pg, exc)

    dr = DocumentResult(pdf_path=meta.path, config=cfg)
    if max_workers == 1:
        dr.pages = [_one(pg) for pg in pages]
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            dr.pages = list(pool.map(_one, pages))

    logger.info(
        "run_document: %d pages, %d failed", len(dr.pages), len(dr.failed_pages())
    )
    return dr
