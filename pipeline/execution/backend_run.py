"""pipeline.execution.backend_run

One vertical slice of the pipeline for one backend:

    build -> convert -> measure -> (policy -> optional remediate) -> verdict

Stage failures are *recorded*, never raised: the function always returns a
:class:`BackendRunResult` whose state says where it stopped. Unexpected
exceptions are recorded too, on the stage that raised them, so a backend whose
print-intent PDF already exists still reaches the comparison.
"""

from __future__ import annotations

import logging
import shutil
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from press_compliance.domain import (
    BuildFailure,
    ComplianceProfile,
    ConvertFailure,
    MeasurementUnavailable,
    PipelineUnavailable,
    RemediationFailed,
)
from pipeline.backends import BackendInfo
from pipeline.layout import ProjectPaths
from pipeline.policy import decide
from tools.core_cmd import ToolFailure

from . import model as m

logger = logging.getLogger(__name__)


@dataclass
class BackendRunContext:
    """Everything a backend run needs besides the backend itself."""

    profile: ComplianceProfile
    measurer: Any
    remediation: Any
    converter: Any
    ceiling: float = 240
    dpi: int = 150
    skip_convert: bool = False
    verify: bool = True
    keep_temp: bool = False
    project_label: str = ""


def _build(result: m.BackendRunResult, builder, source: Path, out: Path) -> Optional[Path]:
    result.advance(m.BUILDING)
    t0 = time.time()
    try:
        path = builder.build(source, out)
    except (ToolFailure, OSError) as e:
        err = str(BuildFailure(result.backend, str(e)))
        result.build = m.StageOutcome(False, error=err, elapsed_seconds=time.time() - t0)
        result.advance(m.BUILD_FAILED)
        print(f"   ❌ {err}")
        return None
    result.build = m.StageOutcome(True, path=Path(path), elapsed_seconds=time.time() - t0)
    result.advance(m.BUILT)
    print(f"   ✅ Built {Path(path).name} ({Path(path).stat().st_size / 1024:.1f} KB)")
    return Path(path)


def _convert(
    result: m.BackendRunResult,
    info: BackendInfo,
    builder,
    source: Path,
    raw_pdf: Path,
    out: Path,
    ctx: BackendRunContext,
) -> Optional[Path]:
    result.advance(m.CONVERTING)
    t0 = time.time()

    if ctx.skip_convert:
        result.convert = m.StageOutcome(True, path=raw_pdf, note="conversion skipped; measuring raw output")
        result.advance(m.CONVERTED)
        return raw_pdf

    if info.native_print_intent and hasattr(builder, "print_intent"):
        try:
            path = builder.print_intent(dpi=ctx.profile.dpi).build(source, out)
            result.convert = m.StageOutcome(
                True, path=Path(path), elapsed_seconds=time.time() - t0, note="native PDF/X output"
            )
            result.advance(m.CONVERTED)
            print(f"   ✅ {result.label} PDF/X created directly (skipping Ghostscript)")
            return Path(path)
        except (ToolFailure, OSError) as e:
            msg = f"native PDF/X build failed ({e}); falling back to Ghostscript conversion"
            result.warnings.append(msg)
            print(f"   ⚠️  {msg}")

    title = f"{result.label} - {ctx.project_label}" if ctx.project_label else result.label
    try:
        path = ctx.converter.convert(raw_pdf, out, title=title)
    except (ToolFailure, OSError) as e:
        err = str(ConvertFailure(result.backend, str(e)))
        result.convert = m.StageOutcome(False, error=err, elapsed_seconds=time.time() - t0)
        result.advance(m.CONVERT_FAILED)
        print(f"   ❌ {err}")
        return None
    result.convert = m.StageOutcome(True, path=Path(path), elapsed_seconds=time.time() - t0)
    result.advance(m.CONVERTED)
    print(f"   ✅ Converted to {Path(path).name}")
    return Path(path)


def _fail_unexpected(result: m.BackendRunResult, err: Exception) -> None:
    """Record an unexpected error on the stage that raised it."""

    logger.exception("unexpected failure in %s run while %s", result.backend, result.state)
    result.error = f"{type(err).__name__}: {err}"
    print(f"   ❌ {result.label}: unexpected error while {result.state}: {err}")
    print_intent = result.convert.path if result.convert is not None and result.convert.ok else None

    if result.state == m.BUILDING:
        result.build = m.StageOutcome(False, error=result.error)
        result.advance(m.BUILD_FAILED)
    elif result.state == m.CONVERTING:
        result.convert = m.StageOutcome(False, error=result.error)
        result.advance(m.CONVERT_FAILED)
    elif result.state == m.MEASURING:
        result.warnings.append(result.error)
        result.final_path = print_intent
        result.advance(m.MEASUREMENT_UNKNOWN)
        result.advance(m.NON_COMPLIANT)
    elif result.state == m.REMEDIATING:
        result.remediation_error = result.error
        result.final_path = print_intent
        result.compliant = False
        result.advance(m.REMEDIATION_FAILED)
        result.advance(m.NON_COMPLIANT)
    elif result.final_path is None:
        result.final_path = print_intent


def run_backend(
    info: BackendInfo,
    builder,
    source: Path,
    paths: ProjectPaths,
    ctx: BackendRunContext,
) -> m.BackendRunResult:
    """Run build -> convert -> measure -> remediate for one backend.

    Always returns the result. An unexpected exception is recorded on the
    stage that was running, keeping the history reached so far.
    """

    result = m.BackendRunResult(backend=info.key, label=info.label)
    try:
        _run_stages(result, info, builder, Path(source), paths, ctx)
    except Exception as e:
        _fail_unexpected(result, e)
    return result


def _run_stages(
    result: m.BackendRunResult,
    info: BackendInfo,
    builder,
    source: Path,
    paths: ProjectPaths,
    ctx: BackendRunContext,
) -> None:
    key = info.key

    raw_pdf = _build(result, builder, source, paths.raw_pdf(key))
    if raw_pdf is None:
        return

    print_intent = _convert(result, info, builder, source, raw_pdf, paths.pdfx_pdf(key), ctx)
    if print_intent is None:
        return

    # Measure
    result.advance(m.MEASURING)
    print(f"   🔍 Checking TAC for {result.label}...")
    try:
        before = ctx.measurer.measure(print_intent)
    except MeasurementUnavailable as e:
        result.warnings.append(str(e))
        result.final_path = print_intent
        result.advance(m.MEASUREMENT_UNKNOWN)
        result.advance(m.NON_COMPLIANT)
        print(f"   ⚠️  TAC validation skipped: {e}")
        return

    result.before = before
    result.advance(m.MEASURED)
    print(f"   {before.summary}")

    decision = decide(before, ctx.profile)
    final_path = paths.final_pdf(key, ctx.ceiling)

    if not decision.remediate:
        result.advance(m.SKIPPED_REMEDIATION)
        print(f"   ✅ {decision.reason}")
        result.final_path = final_path
        if final_path != print_intent:
            try:
                shutil.copyfile(print_intent, final_path)
            except OSError as e:
                result.warnings.append(f"could not copy {print_intent.name} to {final_path.name}: {e}")
                result.final_path = print_intent
        result.compliant = before.max_tac <= ctx.profile.tac_fail
        result.advance(m.COMPLIANT if result.compliant else m.NON_COMPLIANT)
        return

    # Remediate (destructive: fonts are lost on every page)
    result.advance(m.REMEDIATING)
    print(f"   ⚠️  {decision.reason}")
    try:
        rem = ctx.remediation.remediate(
            print_intent,
            final_path,
            ceiling=ctx.ceiling,
            dpi=ctx.dpi,
            verify=ctx.verify,
            keep_temp=ctx.keep_temp,
        )
    except (PipelineUnavailable, RemediationFailed, OSError) as e:
        result.remediation_error = str(e)
        result.final_path = print_intent
        result.compliant = False
        result.advance(m.REMEDIATION_FAILED)
        result.advance(m.NON_COMPLIANT)
        print(f"   ⚠️  TAC limiting failed: {e}")
        return

    result.remediation = rem
    result.font_preservation = rem.font_preservation
    result.final_path = rem.output_path
    result.warnings.extend(rem.warnings)
    result.advance(m.REMEDIATED)

    after = rem.after
    if after is None and not ctx.verify:
        # The verdict needs a measurement of the remediated document.
        try:
            after = ctx.measurer.measure(rem.output_path)
        except MeasurementUnavailable as e:
            result.warnings.append(str(e))
    result.after = after

    if after is None:
        result.compliant = False
    else:
        result.compliant = after.max_tac <= ctx.profile.tac_fail
        print(f"   ✅ TAC limited: {before.max_tac:.1f}% → {after.max_tac:.1f}%")

    result.advance(m.COMPLIANT if result.compliant else m.NON_COMPLIANT)
