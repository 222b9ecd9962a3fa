from __future__ import annotations

from pathlib import Path

from pipeline.backends import BACKEND_LABELS
from pipeline.pipeline import PressCompliancePipeline
from pipeline.reporting import verdict_text


def run_compare(args, pipeline: PressCompliancePipeline) -> int:
    project_dir = Path(args.project_dir)
    if not project_dir.is_dir():
        raise FileNotFoundError(f"Project directory not found: {project_dir}")

    result = pipeline.compare(project_dir)
    print(f"\nVerdict: {verdict_text(result.winner, BACKEND_LABELS)}")
    return 0
