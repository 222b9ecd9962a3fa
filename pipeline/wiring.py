"""pipeline.wiring

This module is the **composition root** for the Python runtime.

"Composition root" means: the single place where we *assemble* the running
application from its building blocks:

- load configuration / environment variables
- configure logging
- build the real tool adapters (Ghostscript, lcms2, poppler, ImageMagick)
- build the high-level pipeline facade object

Keeping this wiring in one place prevents configuration and dependency setup
from being duplicated across entrypoints (CLI, scripts, CI). Tests build the
facade directly with fakes instead.
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from pipeline.backends import BACKEND_LABELS
from pipeline.comparison import ComparisonEngine, PdfInspector, VisualComparer
from pipeline.config import RunConfig
from pipeline.core import ENV_PATH
from pipeline.measure import InkCoverageMeasurer
from pipeline.orchestrator import Orchestrator
from pipeline.pipeline import PressCompliancePipeline
from pipeline.remediation import DEFAULT_PROFILE_CACHE, RemediationPipeline, RemediationToolchain
from tools.deps import check_dependencies
from tools.ghostscript import GhostscriptPdfxConverter, InkcovReporter
from tools.imagemagick import MagickDiffer
from tools.poppler import PageRasterizer, PopplerInspector

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def load_env(dotenv_path: Path = ENV_PATH) -> None:
    """Load ``.env`` without overriding variables already set in the shell."""
    if dotenv_path.exists():
        load_dotenv(dotenv_path, override=False)


def configure_logging(level: str = "WARNING", *, verbose: bool = False) -> None:
    name = "INFO" if verbose and level.upper() not in ("DEBUG", "INFO") else level.upper()
    logging.basicConfig(level=getattr(logging, name, logging.WARNING), format=LOG_FORMAT)


def icc_cache_dir() -> Path:
    """Stable per-machine location for device-link profiles, keyed by ceiling."""
    d = Path(tempfile.gettempdir()) / "press-compliance" / "icc"
    d.mkdir(parents=True, exist_ok=True)
    return d


def build_pipeline(cfg: RunConfig, *, work_root: Optional[Path] = None) -> PressCompliancePipeline:
    """Build the facade over real external tools for *cfg*."""

    timeout = cfg.tool_timeout_seconds
    profile = cfg.profile

    measurer = InkCoverageMeasurer(InkcovReporter(timeout_seconds=timeout), profile)
    inspector = PopplerInspector(timeout_seconds=timeout)

    remediation = RemediationPipeline(
        RemediationToolchain.system(
            profile_dir=icc_cache_dir(),
            cmyk_profile=cfg.cmyk_profile,
            timeout_seconds=timeout,
        ),
        measurer,
        profile_cache=DEFAULT_PROFILE_CACHE,
        max_workers=cfg.workers,
        work_root=work_root,
    )

    comparison = ComparisonEngine(
        PdfInspector(inspector, measurer),
        VisualComparer(PageRasterizer(timeout_seconds=timeout), MagickDiffer(timeout_seconds=timeout)),
        profile,
        labels=BACKEND_LABELS,
    )

    orchestrator = Orchestrator(
        profile=profile,
        measurer=measurer,
        remediation=remediation,
        converter=GhostscriptPdfxConverter(timeout_seconds=timeout),
        comparison=comparison,
        tool_timeout_seconds=timeout,
    )

    return PressCompliancePipeline(
        config=cfg,
        measurer=measurer,
        remediation=remediation,
        comparison=comparison,
        orchestrator=orchestrator,
        deps_fn=check_dependencies,
    )
