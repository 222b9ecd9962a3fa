"""pipeline.orchestrator

Run every enabled backend for one project, then compare what survived.

Design principles
-----------------
- Backends run sequentially; one backend's failure never cancels siblings.
- Stage failures, expected or not, are recorded by :func:`run_backend`. A
  builder that cannot even be constructed is recorded *here* as a build
  failure of that backend alone.
- Keep filesystem layout rules centralized (via :mod:`pipeline.layout`).
- Never crash a run because manifest or report writing failed (best-effort).

This module is intentionally "boring": it wires together existing components.
"""

from __future__ import annotations

import logging
import platform
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

from press_compliance.domain import ComplianceProfile, NoUsableArtifact
from press_compliance.io import write_json_atomic, write_text_atomic
from pipeline.backends import BACKENDS, BackendInfo
from pipeline.comparison.model import ComparisonResult
from pipeline.execution import model as m
from pipeline.execution.backend_run import BackendRunContext, run_backend
from pipeline.layout import ProjectPaths, new_run_id
from pipeline.reporting.comparison_md import render_comparison_markdown, verdict_text

logger = logging.getLogger(__name__)


def _runtime_environment() -> Dict[str, Any]:
    """Runtime provenance captured into manifests (safe, no secrets)."""
    return {
        "python_version": platform.python_version(),
        "platform": platform.platform(),
    }


@dataclass(frozen=True)
class RunOptions:
    skip: Sequence[str] = ()
    skip_convert: bool = False
    skip_compare: bool = False
    ceiling: float = 240
    dpi: int = 150
    verify: bool = True
    keep_temp: bool = False
    project_label: str = ""


@dataclass
class OrchestratorResult:
    results: Dict[str, m.BackendRunResult]
    comparison: Optional[ComparisonResult] = None
    success: bool = False
    report_path: Optional[Path] = None
    manifest_path: Optional[Path] = None
    run_id: str = ""
    warnings: List[str] = field(default_factory=list)

    @property
    def compliant_backends(self) -> List[str]:
        return [k for k, r in self.results.items() if r.state == m.COMPLIANT]

    @property
    def artifact_backends(self) -> List[str]:
        return [k for k, r in self.results.items() if r.produced_artifact]


class Orchestrator:
    def __init__(
        self,
        *,
        profile: ComplianceProfile,
        measurer,
        remediation,
        converter,
        comparison,
        builders: Optional[Mapping[str, Any]] = None,
        registry: Mapping[str, BackendInfo] = BACKENDS,
        tool_timeout_seconds: float = 120,
    ) -> None:
        self.profile = profile
        self.measurer = measurer
        self.remediation = remediation
        self.converter = converter
        self.comparison = comparison
        self.builders = dict(builders or {})
        self.registry = registry
        self.labels = {k: info.label for k, info in registry.items()}
        self.tool_timeout_seconds = tool_timeout_seconds

    def _builder(self, info: BackendInfo):
        if info.key in self.builders:
            return self.builders[info.key]
        return info.builder_factory(self.profile, self.tool_timeout_seconds)

    def _run_one(self, info: BackendInfo, source: Path, paths: ProjectPaths, ctx: BackendRunContext) -> m.BackendRunResult:
        print(f"\n{'─' * 40}")
        print(f"▶ {info.label}")
        print(f"{'─' * 40}")
        try:
            builder = self._builder(info)
        except Exception as e:
            logger.exception("could not create the %s builder", info.key)
            failed = m.BackendRunResult(backend=info.key, label=info.label, error=f"{type(e).__name__}: {e}")
            failed.advance(m.BUILDING)
            failed.build = m.StageOutcome(False, error=f"builder unavailable: {failed.error}")
            failed.advance(m.BUILD_FAILED)
            print(f"   ❌ {info.label}: {failed.build.error}")
            return failed
        return run_backend(info, builder, source, paths, ctx)

    def run(
        self,
        source: Path,
        backends: Sequence[str],
        output_dir: Path,
        *,
        options: RunOptions = RunOptions(),
    ) -> OrchestratorResult:
        source = Path(source)
        if not source.exists():
            raise FileNotFoundError(f"Input HTML not found: {source}")
        unknown = [b for b in backends if b not in self.registry]
        if unknown:
            raise ValueError(f"Unknown backend(s): {', '.join(unknown)}")

        paths = ProjectPaths(Path(output_dir).resolve()).ensure()
        run_id = new_run_id()
        ctx = BackendRunContext(
            profile=self.profile,
            measurer=self.measurer,
            remediation=self.remediation,
            converter=self.converter,
            ceiling=options.ceiling,
            dpi=options.dpi,
            skip_convert=options.skip_convert,
            verify=options.verify,
            keep_temp=options.keep_temp,
            project_label=options.project_label or source.parent.name,
        )

        print(f"\n{'=' * 60}")
        print(f"Processing: {ctx.project_label}")
        print(f"HTML: {source}")
        print(f"Output: {paths.root}")
        print(f"{'=' * 60}")

        results: Dict[str, m.BackendRunResult] = {}
        for key in backends:
            info = self.registry[key]
            if key in options.skip:
                r = m.BackendRunResult(backend=key, label=info.label)
                r.advance(m.SKIPPED)
                results[key] = r
                continue
            results[key] = self._run_one(info, source, paths, ctx)

        out = OrchestratorResult(results=results, run_id=run_id)
        active = [r for r in results.values() if not r.skipped]
        out.success = bool(active) and all(r.reached_verdict for r in active)

        if out.artifact_backends and not options.skip_compare:
            out.comparison = self.comparison.compare(results, visual_dir=paths.visual_diff_dir)
            out.report_path = self._write_report(paths, out)

        out.manifest_path = self._write_manifest(paths, source, options, out)
        self._print_summary(out)

        if not out.artifact_backends:
            raise NoUsableArtifact(
                f"No backend produced a usable document for {source}",
                results=results,
            )
        return out

    # -------------------------
    # artifacts (best-effort)
    # -------------------------

    def _write_report(self, paths: ProjectPaths, out: OrchestratorResult) -> Optional[Path]:
        text = render_comparison_markdown(out.comparison, self.profile, labels=self.labels, runs=out.results)
        try:
            path = write_text_atomic(paths.comparison_report, text)
        except OSError as e:
            out.warnings.append(f"could not write comparison report: {e}")
            print(f"⚠️  Could not write comparison report: {e}")
            return None
        print(f"\n📄 Report saved to: {path}")
        return path

    def _write_manifest(
        self, paths: ProjectPaths, source: Path, options: RunOptions, out: OrchestratorResult
    ) -> Optional[Path]:
        data = {
            "run_id": out.run_id,
            "source": str(source),
            "output_dir": str(paths.root),
            "profile": self.profile.to_dict(),
            "options": {
                "skip": list(options.skip),
                "skip_convert": options.skip_convert,
                "skip_compare": options.skip_compare,
                "ceiling": options.ceiling,
                "dpi": options.dpi,
                "verify": options.verify,
            },
            "success": out.success,
            "backends": {k: r.to_dict() for k, r in out.results.items()},
            "comparison": out.comparison.to_dict() if out.comparison else None,
            "report": str(out.report_path) if out.report_path else None,
            "warnings": list(out.warnings),
            "environment": _runtime_environment(),
        }
        try:
            return write_json_atomic(paths.manifest, data)
        except OSError as e:
            print(f"⚠️  Could not write run manifest: {e}")
            return None

    def _print_summary(self, out: OrchestratorResult) -> None:
        print(f"\n{'=' * 60}")
        print("Summary")
        print(f"{'=' * 60}")
        for key, r in out.results.items():
            if r.skipped:
                icon = "⏭️"
            elif r.state == m.COMPLIANT:
                icon = "✅"
            elif r.reached_verdict:
                icon = "⚠️"
            else:
                icon = "❌"
            fonts = "" if r.font_preservation or r.skipped else " (fonts rasterized)"
            print(f"{r.label or key:<14} {icon} {r.stopped_at}{fonts}")
        if out.comparison is not None:
            print(f"\nVerdict: {verdict_text(out.comparison.winner, self.labels)}")
