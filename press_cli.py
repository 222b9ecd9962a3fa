#!/usr/bin/env python3
"""
CLI for the press compliance pipeline.

Commands:
  check-tac  - measure total area coverage of one PDF
  limit-tac  - destructively limit TAC (rasterizes every page)
  validate   - marketplace checks on one or more PDFs
  run        - build one HTML project with every backend, remediate, compare
  batch      - run every project under an input directory
  compare    - re-run the comparison over an existing project output
  deps       - report which external tools are installed

Usage:
  python press_cli.py check-tac book.pdf
  python press_cli.py limit-tac book.pdf book_tac240.pdf --max-tac 240
  python press_cli.py run --html input/book.html --output output --skip-vivliostyle
  python press_cli.py batch --input input --output output --strict
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Dict, List, Optional

from cli.args.base import add_backend_args, add_common_args, add_io_args, add_skip_args, skipped_backends
from cli.args.remediation import add_limit_tac_args
from cli.dispatch import dispatch
from pipeline.backends import parse_backends_csv
from pipeline.config import resolve_config
from pipeline.wiring import build_pipeline, configure_logging, load_env


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="press_cli.py",
        description="Print TAC compliance checks, remediation and backend comparison.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("check-tac", help="Measure ink coverage of a PDF")
    add_common_args(p)
    p.add_argument("pdf", help="PDF to measure.")
    p.add_argument("--json", action="store_true", help="Print the report as JSON.")

    p = sub.add_parser("limit-tac", help="Limit TAC by rasterizing every page (destructive)")
    add_common_args(p)
    add_limit_tac_args(p)

    p = sub.add_parser("validate", help="Run marketplace validation checks")
    add_common_args(p)
    p.add_argument("pdfs", nargs="+", help="PDF(s) to validate.")

    p = sub.add_parser("run", help="Build one project with every backend")
    add_common_args(p)
    p.add_argument("--html", default=None, help="HTML entry document (default: discovered in --input).")
    add_io_args(p)
    add_backend_args(p)
    add_skip_args(p)

    p = sub.add_parser("batch", help="Run every project in the input directory")
    add_common_args(p)
    add_io_args(p)
    add_backend_args(p)
    add_skip_args(p)
    p.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="Fail a project that produced no compliant output.",
    )

    p = sub.add_parser("compare", help="Compare existing outputs in a project directory")
    add_common_args(p)
    p.add_argument("project_dir", help="Project output directory (holds <backend>-*.pdf).")

    p = sub.add_parser("deps", help="Check external tool availability")
    add_common_args(p)

    return parser


def _path(raw: Optional[str]) -> Optional[Path]:
    return Path(raw).expanduser() if raw else None


def cli_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Config fields set on the command line; absent flags map to None."""
    raw_backends = getattr(args, "backends", None)
    return {
        "input_dir": _path(getattr(args, "input_dir", None)),
        "output_dir": _path(getattr(args, "output_dir", None)),
        "backends": tuple(parse_backends_csv(raw_backends)) if raw_backends else None,
        "skip": skipped_backends(args),
        "strict": getattr(args, "strict", None),
        "workers": getattr(args, "workers", None),
        "keep_temp": getattr(args, "keep_temp", None),
    }


def main(argv: Optional[List[str]] = None) -> None:
    # Always load .env from repo root so terminal runs behave like IDE runs
    load_env()

    args = build_parser().parse_args(argv)

    try:
        cfg = resolve_config(cli_overrides(args), config_path=args.config_path)
    except (FileNotFoundError, ValueError) as e:
        raise SystemExit(f"❌ Invalid configuration: {e}")

    configure_logging(cfg.log_level, verbose=bool(args.verbose))
    pipeline = build_pipeline(cfg)
    raise SystemExit(dispatch(args, pipeline))


if __name__ == "__main__":
    main()
