"""pipeline.pipeline

This module defines a *single, high-level* object that represents this repo's
primary capabilities.

Why this exists
---------------
The behavior is implemented across several modules:

- :mod:`pipeline.measure` and :mod:`pipeline.remediation` measure and limit
  ink coverage for one document.
- :mod:`pipeline.orchestrator` runs every backend for one project.
- :mod:`pipeline.batch` runs many projects.
- :mod:`pipeline.comparison` validates and ranks final documents.

That separation is good internally, but it's not a great "front door" for
callers (CLI, scripts, CI runners). The :class:`PressCompliancePipeline`
facade gives the repo one obvious entrypoint with a small API:

- ``check_tac(pdf)``: measure ink coverage
- ``limit_tac(pdf, ...)``: destructive TAC remediation
- ``validate(pdfs)``: marketplace checks
- ``run(html, output_dir)``: every backend for one project
- ``batch(input_dir, output_dir)``: every project in a directory
- ``compare(project_dir)``: re-run the comparison over existing outputs
- ``deps()``: which external tools are installed

Collaborators are injected (see :func:`pipeline.wiring.build_pipeline`), so
tests can build the facade around fakes.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from press_compliance.domain import InkCoverageReport, NoUsableArtifact
from press_compliance.io import write_text_atomic
from pipeline.backends import BACKEND_LABELS, BACKENDS
from pipeline.batch import BatchResult, BatchRunner
from pipeline.comparison import ComparisonResult, ValidationResult, validate_document
from pipeline.config import RunConfig
from pipeline.layout import ProjectPaths
from pipeline.orchestrator import OrchestratorResult, RunOptions
from pipeline.remediation import RemediationResult
from pipeline.reporting import render_comparison_markdown


class PressCompliancePipeline:
    """High-level facade over the pipeline.

    Callers should prefer using this object (built via
    :func:`pipeline.wiring.build_pipeline`) rather than importing low-level
    modules directly.
    """

    def __init__(
        self,
        *,
        config: RunConfig,
        measurer,
        remediation,
        comparison,
        orchestrator,
        deps_fn: Callable[[], Dict[str, bool]],
    ) -> None:
        self.config = config
        self.measurer = measurer
        self.remediation = remediation
        self.comparison = comparison
        self.orchestrator = orchestrator
        self._deps_fn = deps_fn

    def _run_options(self, **overrides) -> RunOptions:
        cfg = self.config
        base = dict(
            skip=tuple(cfg.skip),
            ceiling=cfg.ceiling,
            dpi=cfg.dpi,
            verify=cfg.verify,
            keep_temp=cfg.keep_temp,
        )
        base.update({k: v for k, v in overrides.items() if v is not None})
        return RunOptions(**base)

    def check_tac(self, pdf: Path) -> InkCoverageReport:
        return self.measurer.measure(Path(pdf))

    def limit_tac(
        self,
        pdf: Path,
        output: Optional[Path] = None,
        *,
        ceiling: Optional[float] = None,
        dpi: int = 300,
        verify: bool = True,
        keep_temp: bool = False,
    ) -> RemediationResult:
        return self.remediation.remediate(
            Path(pdf),
            Path(output) if output else None,
            ceiling=ceiling if ceiling is not None else self.config.ceiling,
            dpi=dpi,
            verify=verify,
            keep_temp=keep_temp,
        )

    def validate(self, pdfs: Sequence[Path]) -> List[ValidationResult]:
        return [validate_document(self.comparison.pdf_inspector, Path(p), self.config.profile) for p in pdfs]

    def run(
        self,
        html: Path,
        output_dir: Path,
        *,
        skip_convert: bool = False,
        skip_compare: bool = False,
        project_label: Optional[str] = None,
    ) -> OrchestratorResult:
        return self.orchestrator.run(
            Path(html),
            list(self.config.backends),
            Path(output_dir),
            options=self._run_options(
                skip_convert=skip_convert,
                skip_compare=skip_compare,
                project_label=project_label,
            ),
        )

    def batch(
        self,
        input_dir: Path,
        output_dir: Path,
        *,
        skip_convert: bool = False,
        skip_compare: bool = False,
    ) -> BatchResult:
        runner = BatchRunner(
            self.orchestrator,
            list(self.config.backends),
            options=self._run_options(skip_convert=skip_convert, skip_compare=skip_compare),
            strict=self.config.strict,
        )
        return runner.run(Path(input_dir), Path(output_dir))

    def compare(self, project_dir: Path) -> ComparisonResult:
        """Compare whatever final documents already exist in *project_dir*.

        Per backend the TAC-limited artifact is preferred, then the PDF/X
        document.
        """
        paths = ProjectPaths(Path(project_dir).resolve())
        documents: Dict[str, Path] = {}
        raw: Dict[str, Path] = {}
        for key in BACKENDS:
            for candidate in (paths.final_pdf(key, self.config.ceiling), paths.pdfx_pdf(key)):
                if candidate.exists():
                    documents[key] = candidate
                    break
            if paths.raw_pdf(key).exists():
                raw[key] = paths.raw_pdf(key)
        if not documents:
            raise NoUsableArtifact(f"No backend documents found in {paths.root}")

        result = self.comparison.compare_documents(documents, visual_dir=paths.visual_diff_dir, raw_documents=raw)
        text = render_comparison_markdown(result, self.config.profile, labels=BACKEND_LABELS)
        report = write_text_atomic(paths.comparison_report, text)
        print(f"\n📄 Report saved to: {report}")
        return result

    def deps(self) -> Dict[str, bool]:
        return dict(self._deps_fn())
