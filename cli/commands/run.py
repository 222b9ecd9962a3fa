from __future__ import annotations

from pathlib import Path

from press_compliance.domain import NoUsableArtifact
from pipeline.backends import backend_label
from pipeline.batch import entry_document
from pipeline.core import DEFAULT_TEST_PROJECT
from pipeline.pipeline import PressCompliancePipeline


def resolve_source(args, pipeline: PressCompliancePipeline) -> Path:
    """Pick the HTML entry: --html, else the input directory, else the bundled test project."""
    if args.html:
        return Path(args.html).resolve()

    for directory in (pipeline.config.input_dir, DEFAULT_TEST_PROJECT):
        entry = entry_document(directory) if Path(directory).is_dir() else None
        if entry is not None:
            return entry.resolve()
    raise FileNotFoundError(f"No HTML document found in {pipeline.config.input_dir}")


def run_run(args, pipeline: PressCompliancePipeline) -> int:
    source = resolve_source(args, pipeline)
    output_dir = Path(pipeline.config.output_dir)

    print("\n🚀 Running press pipeline")
    print(f"  Source : {source}")
    print(f"  Output : {output_dir}")
    active = [b for b in pipeline.config.backends if b not in pipeline.config.skip]
    print(f"  Backends: {', '.join(backend_label(b) for b in active) or 'none'}")

    try:
        result = pipeline.run(
            source,
            output_dir,
            skip_convert=bool(args.skip_convert),
            skip_compare=bool(args.skip_compare),
            project_label=source.parent.name,
        )
    except NoUsableArtifact as e:
        print(f"\n❌ {e}")
        return 2

    if result.success:
        print("\n✅ Pipeline completed.")
        return 0
    print("\n⚠️ Pipeline finished with failed backends.")
    return 1
