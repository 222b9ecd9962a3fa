from __future__ import annotations

from pathlib import Path

from pipeline.pipeline import PressCompliancePipeline


def run_validate(args, pipeline: PressCompliancePipeline) -> int:
    results = pipeline.validate([Path(p) for p in args.pdfs])

    print(f"\n{'=' * 60}")
    print("Validation")
    print(f"{'=' * 60}")
    for r in results:
        icon = "✅" if r.valid else "❌"
        print(f"{icon} {r.filename}: {r.passed_checks}/{len(r.checks)} checks passed")
    return 0 if results and all(r.valid for r in results) else 1
