from __future__ import annotations

from pipeline.pipeline import PressCompliancePipeline


def run_deps(args, pipeline: PressCompliancePipeline) -> int:
    status = pipeline.deps()
    print("\nExternal tools")
    print("─" * 40)
    for label, present in status.items():
        print(f"  {'✅' if present else '❌'} {label}")

    missing = [label for label, present in status.items() if not present]
    if missing:
        print(f"\n⚠️  {len(missing)} tool(s) missing; affected steps will fail or be skipped.")
        return 1
    print("\n✅ All external tools found.")
    return 0
