"""
Command-line launcher: build the preview, PDF and diagnostics of one
weekly report.

Usage:
    print-studio report.json --out build/ [--store ~/.print_studio] [--density compact]
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from print_studio.controller import BuildConfig, StudioError, build_report
from print_studio.core.models import Density
from print_studio.layout import Severity
from print_studio.output import ExportCancelled, ExportError
from print_studio.utils import configure_console_logging

logger = logging.getLogger(__name__)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="print-studio",
        description="Paginate a weekly construction report and export it to PDF",
    )
    parser.add_argument("report", type=Path, help="Report record (JSON)")
    parser.add_argument("--out", type=Path, default=Path("print_output"), help="Output directory")
    parser.add_argument("--store", type=Path, help="Print-config store directory")
    parser.add_argument("--assets", type=Path, help="Base directory for relative photo paths")
    parser.add_argument(
        "--density",
        choices=[d.value for d in Density],
        help="Override the stored global density",
    )
    parser.add_argument("--timeout", type=float, default=120.0, help="Export timeout in seconds")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log packing decisions")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = _parser().parse_args(argv)
    configure_console_logging(args.verbose)

    config = BuildConfig(
        report_path=args.report,
        output_dir=args.out,
        store_root=args.store,
        asset_dir=args.assets,
        density=Density(args.density) if args.density else None,
        timeout=args.timeout,
    )

    try:
        result = build_report(config)
    except StudioError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ExportCancelled as e:
        print(f"Export cancelled: {e}", file=sys.stderr)
        return 2
    except ExportError as e:
        print(f"Export failed: {e}", file=sys.stderr)
        return 1

    print(f"Generated {result.page_count} pages: {result.pdf_path}")
    print(f"Preview: {result.preview_path}")
    for warning in result.warnings:
        print(f"  [{warning.severity}] {warning.message}")

    errors = [w for w in result.warnings if w.severity == Severity.ERROR]
    return 3 if errors else 0


if __name__ == "__main__":
    raise SystemExit(main())
