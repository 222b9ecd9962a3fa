from __future__ import annotations

import argparse

from pipeline.config import DEFAULT_CEILING

# limit-tac favors fidelity; orchestrated runs use the faster run DPI.
LIMIT_TAC_DPI = 300


def add_limit_tac_args(parser: argparse.ArgumentParser) -> None:
    """Register the ``limit-tac`` positional arguments and knobs."""

    parser.add_argument("input_pdf", help="PDF to remediate.")
    parser.add_argument(
        "output_pdf",
        nargs="?",
        default=None,
        help="Destination PDF (default: <input>-tac<ceiling>.pdf next to the input).",
    )
    parser.add_argument(
        "--max-tac",
        dest="max_tac",
        type=float,
        default=None,
        help=f"TAC ceiling in percent (default: {DEFAULT_CEILING:g}).",
    )
    parser.add_argument(
        "--dpi",
        type=int,
        default=LIMIT_TAC_DPI,
        help=f"Rasterization resolution (default: {LIMIT_TAC_DPI}).",
    )
    parser.add_argument(
        "--no-verify",
        dest="verify",
        action="store_false",
        help="Skip the post-remediation ink measurement.",
    )
    parser.add_argument(
        "--keep-temp",
        action="store_true",
        default=None,
        help="Keep the per-page working directory for inspection.",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Parallel page workers (default: CPU count).",
    )
