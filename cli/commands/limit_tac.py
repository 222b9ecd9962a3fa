from __future__ import annotations

from pathlib import Path

from pipeline.pipeline import PressCompliancePipeline


def run_limit_tac(args, pipeline: PressCompliancePipeline) -> int:
    pdf = Path(args.input_pdf)
    if not pdf.exists():
        raise FileNotFoundError(f"File not found: {pdf}")

    result = pipeline.limit_tac(
        pdf,
        Path(args.output_pdf) if args.output_pdf else None,
        ceiling=args.max_tac,
        dpi=int(args.dpi),
        verify=bool(args.verify),
        keep_temp=bool(args.keep_temp) or pipeline.config.keep_temp,
    )

    if result.fallback_pages:
        pages = ", ".join(str(p) for p in result.fallback_pages)
        print(f"⚠️  Color remap failed on page(s) {pages}; unmodified rasters were used.")

    print(f"\n✅ Written: {result.output_path}")
    print("   Note: pages are rasterized; text is no longer selectable and fonts are not preserved.")
    if result.within_tolerance is False:
        return 1
    return 0
