from __future__ import annotations

import argparse
from typing import Optional, Tuple

from pipeline.backends import BACKENDS, DEFAULT_BACKENDS_CSV


def add_common_args(parser: argparse.ArgumentParser) -> None:
    """Register flags every subcommand accepts.

    This includes:
    - verbosity
    - the optional YAML run configuration
    """

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log progress at INFO level (default: WARNING, or PRESS_LOG_LEVEL).",
    )
    parser.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help=(
            "Optional YAML run configuration (profile overrides, backends, remediation knobs). "
            "CLI flags win over the file; the file wins over environment variables."
        ),
    )


def add_io_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--input",
        dest="input_dir",
        default=None,
        help="Directory holding HTML project(s) (default: INPUT_DIR, then /input, then ./input).",
    )
    parser.add_argument(
        "--output",
        dest="output_dir",
        default=None,
        help="Directory for build outputs and reports (default: OUTPUT_DIR, then ./output).",
    )


def add_backend_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--backends",
        default=None,
        help=f"Comma-separated backends to run, in order (default: {DEFAULT_BACKENDS_CSV}).",
    )


def add_skip_args(parser: argparse.ArgumentParser) -> None:
    """Register one ``--skip-<backend>`` flag per registered backend plus stage skips."""

    for key, info in BACKENDS.items():
        parser.add_argument(
            f"--skip-{key}",
            dest=f"skip_{key}",
            action="store_true",
            help=f"Do not build with {info.label}.",
        )
    parser.add_argument(
        "--skip-convert",
        action="store_true",
        help="Skip PDF/X conversion; raw backend output is measured and remediated directly.",
    )
    parser.add_argument(
        "--skip-compare",
        action="store_true",
        help="Skip validation, visual diff and the comparison report.",
    )


def skipped_backends(args: argparse.Namespace) -> Optional[Tuple[str, ...]]:
    """Backends skipped on the command line, or None when no skip flag was given."""
    skip = tuple(k for k in BACKENDS if getattr(args, f"skip_{k}", False))
    return skip or None
