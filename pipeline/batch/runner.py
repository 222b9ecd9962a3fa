"""pipeline.batch.runner

Run the orchestrator once per discovered project and write a batch summary.

Each project is isolated: a failing project is recorded in the summary and
the next one still runs. Output::

    <output>/<project>/...            one orchestrated run each
    <output>/batch-summary.md
    <output>/batch-summary.json
    <output>/batch-summary.csv
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from press_compliance.domain import NoUsableArtifact, PressComplianceError
from press_compliance.io import write_csv_atomic, write_json_atomic, write_text_atomic
from pipeline.execution.model import now_iso
from pipeline.layout import ProjectPaths, safe_name
from pipeline.orchestrator import Orchestrator, RunOptions
from pipeline.reporting.batch_md import render_batch_markdown

from .discovery import discover_projects
from .model import STATUS_FAILED, Project, ProjectOutcome, project_status

logger = logging.getLogger(__name__)

SUMMARY_MD = "batch-summary.md"
SUMMARY_JSON = "batch-summary.json"
SUMMARY_CSV = "batch-summary.csv"

CSV_FIELDS = ["project", "status", "ok", "backends_with_pdfx", "backends_compliant", "winner", "errors"]


@dataclass
class BatchResult:
    outcomes: List[ProjectOutcome] = field(default_factory=list)
    summary_path: Optional[Path] = None

    @property
    def ok(self) -> bool:
        return bool(self.outcomes) and all(o.ok for o in self.outcomes)


def _listed_files(directory: Path) -> List[Tuple[str, int]]:
    if not directory.is_dir():
        return []
    return [
        (p.name, p.stat().st_size)
        for p in sorted(directory.iterdir())
        if p.is_file() and p.suffix in (".pdf", ".md")
    ]


class BatchRunner:
    def __init__(
        self,
        orchestrator: Orchestrator,
        backends: Sequence[str],
        *,
        options: RunOptions = RunOptions(),
        strict: bool = False,
        discover: Callable[[Path], List[Project]] = discover_projects,
    ) -> None:
        self.orchestrator = orchestrator
        self.backends = list(backends)
        self.options = options
        self.strict = strict
        self.discover = discover

    @property
    def enabled_backends(self) -> Tuple[str, ...]:
        return tuple(b for b in self.backends if b not in self.options.skip)

    def run_project(self, project: Project, output_root: Path) -> ProjectOutcome:
        out_dir = Path(output_root) / safe_name(project.name)
        outcome = ProjectOutcome(project=project, output_dir=out_dir, backends_enabled=self.enabled_backends)
        t0 = time.time()

        run = None
        try:
            run = self.orchestrator.run(
                project.entry,
                self.backends,
                out_dir,
                options=replace(self.options, project_label=project.name),
            )
        except NoUsableArtifact as e:
            outcome.errors.append(str(e))
            for key, r in e.results.items():
                if not r.skipped:
                    outcome.errors.append(f"{key}: {r.stopped_at}")
        except (PressComplianceError, FileNotFoundError, ValueError, OSError) as e:
            logger.exception("project %s failed", project.name)
            outcome.errors.append(f"{type(e).__name__}: {e}")

        paths = ProjectPaths(out_dir)
        # With conversion skipped the final artifact stands in for the PDF/X document.
        outcome.backends_with_pdfx = tuple(
            b
            for b in self.enabled_backends
            if paths.pdfx_pdf(b).exists() or paths.final_pdf(b, self.options.ceiling).exists()
        )
        outcome.status = project_status(outcome.backends_enabled, outcome.backends_with_pdfx)
        outcome.files = _listed_files(out_dir)

        if run is not None:
            outcome.backends_compliant = tuple(run.compliant_backends)
            if run.comparison is not None:
                outcome.winner = run.comparison.winner
            for key, r in run.results.items():
                if not r.skipped and not r.reached_verdict:
                    outcome.errors.append(f"{key}: {r.stopped_at}")

        outcome.ok = outcome.status != STATUS_FAILED and run is not None and run.success
        if self.strict and not outcome.backends_compliant:
            outcome.ok = False
            outcome.errors.append("Strict mode: No compliant PDF/X output produced")

        outcome.elapsed_seconds = time.time() - t0
        return outcome

    def run(self, input_dir: Path, output_dir: Path) -> BatchResult:
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        projects = self.discover(Path(input_dir))

        print(f"Found {len(projects)} project(s) in {input_dir}")
        result = BatchResult()
        for project in projects:
            result.outcomes.append(self.run_project(project, output_dir))

        result.summary_path = self.write_summary(result.outcomes, output_dir)
        self._print_summary(result)
        return result

    def write_summary(self, outcomes: Sequence[ProjectOutcome], output_dir: Path) -> Path:
        generated = now_iso()
        md = write_text_atomic(output_dir / SUMMARY_MD, render_batch_markdown(outcomes, generated))
        write_json_atomic(
            output_dir / SUMMARY_JSON,
            {
                "generated_at": generated,
                "strict": self.strict,
                "backends": list(self.enabled_backends),
                "projects": [o.to_dict() for o in outcomes],
            },
        )
        write_csv_atomic(
            output_dir / SUMMARY_CSV,
            [
                {
                    "project": o.name,
                    "status": o.status,
                    "ok": o.ok,
                    "backends_with_pdfx": ";".join(o.backends_with_pdfx),
                    "backends_compliant": ";".join(o.backends_compliant),
                    "winner": o.winner or "",
                    "errors": " | ".join(o.errors),
                }
                for o in outcomes
            ],
            fieldnames=CSV_FIELDS,
        )
        print(f"\n📄 Batch summary written to: {md}")
        return md

    def _print_summary(self, result: BatchResult) -> None:
        print(f"\n{'=' * 60}")
        print("Batch summary")
        print(f"{'=' * 60}")
        for o in result.outcomes:
            icon = "✅" if o.ok else "❌"
            print(f"{icon} {o.name:<24} {o.status:<9} ({o.elapsed_seconds:.1f}s)")
            for e in o.errors:
                print(f"    - {e}")
