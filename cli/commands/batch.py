from __future__ import annotations

from pathlib import Path

from pipeline.pipeline import PressCompliancePipeline


def run_batch(args, pipeline: PressCompliancePipeline) -> int:
    result = pipeline.batch(
        Path(pipeline.config.input_dir),
        Path(pipeline.config.output_dir),
        skip_convert=bool(args.skip_convert),
        skip_compare=bool(args.skip_compare),
    )
    if not result.outcomes:
        print(f"\n❌ No HTML projects found in {pipeline.config.input_dir}")
        return 1
    return 0 if result.ok else 1
