from __future__ import annotations

import json
from pathlib import Path

from pipeline.pipeline import PressCompliancePipeline
from pipeline.reporting import render_tac_report


def run_check_tac(args, pipeline: PressCompliancePipeline) -> int:
    """Measure one document; exit 0 only when no page fails."""
    pdf = Path(args.pdf)
    if not pdf.exists():
        raise FileNotFoundError(f"File not found: {pdf}")

    report = pipeline.check_tac(pdf)
    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print(render_tac_report(report, pipeline.config.profile))
    return 0 if report.passed else 1
