import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from pageflow import IngestError, LayoutConfig, LayoutInputError, run_document, run_page
from pageflow.export import load_page


def make_run_dir(name: Optional[str] = None) -> Path:
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    run_name = f"run_{stamp}" if not name else f"run_{stamp}_{name}"
    run_dir = Path("runs") / run_name
    run_dir.mkdir(parents=True, exist_ok=True)
    return run_dir


def parse_pages(spec: Optional[str]) -> Optional[List[int]]:
    """``"0,2-4"`` -> ``[0, 2, 3, 4]``; ``None`` means every page."""
    if not spec:
        return None
    pages: List[int] = []
    for part in spec.split(","):
        part = part.strip()
        if "-" in part:
            lo, hi = part.split("-", 1)
            pages.extend(range(int(lo), int(hi) + 1))
        elif part:
            pages.append(int(part))
    return pages


def summarize(summary: dict) -> None:
    for page in summary["pages"]:
        counts = page["counts"]
        print(
            f"Page {page['page']}: {page['page_type']} "
            f"paragraphs={counts['paragraphs']} tables={counts['tables']} "
            f"(from {counts['candidates']} candidates)"
        )


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Reconstruct reading-order paragraphs and tables for PDF pages"
    )
    parser.add_argument("pdf", type=Path, nargs="?", help="Path to PDF")
    parser.add_argument(
        "--page-json",
        type=Path,
        default=None,
        help="Analyze a saved page JSON instead of a PDF",
    )
    parser.add_argument(
        "--pages", type=str, default=None, help="Zero-based pages, e.g. '0,2-4'"
    )
    parser.add_argument("--out", type=Path, default=None, help="Output directory")
    parser.add_argument(
        "--run-name", type=str, default=None, help="Optional suffix for the run folder"
    )
    parser.add_argument("--overlay", action="store_true", help="Also write overlay PNGs")
    parser.add_argument("--workers", type=int, default=1, help="Pages analyzed in parallel")
    parser.add_argument("-v", "--verbose", action="count", default=0)
    args = parser.parse_args(argv)

    level = logging.WARNING - 10 * min(args.verbose, 2)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    if args.pdf is None and args.page_json is None:
        parser.error("either a PDF or --page-json is required")

    out_dir = args.out or make_run_dir(args.run_name)
    cfg = LayoutConfig()

    try:
        if args.page_json is not None:
            pr = run_page(load_page(args.page_json), cfg, out_dir=out_dir, overlay=args.overlay)
            summary = {"pdf": None, "pages": [pr.to_summary_dict()]}
        else:
            dr = run_document(
                args.pdf,
                pages=parse_pages(args.pages),
                cfg=cfg,
                out_dir=out_dir,
                overlay=args.overlay,
                max_workers=args.workers,
            )
            summary = dr.to_summary_dict()
    except (IngestError, LayoutInputError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    manifest = {
        "run_id": out_dir.name,
        "created_at": datetime.now().isoformat(),
        "settings": vars(cfg),
        **summary,
    }
    (out_dir / "manifest.json").write_text(json.dumps(manifest, indent=2))

    print(f"Run folder: {out_dir}")
    summarize(summary)
    return 1 if summary.get("failed_pages") else 0


if __name__ == "__main__":
    sys.exit(main())
