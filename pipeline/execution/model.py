"""pipeline.execution.model

Shared data structures for one backend run.

A backend run walks a small state machine::

    pending -> building -> built | build-failed
    built -> converting -> converted | convert-failed
    converted -> measuring -> measured | measurement-unknown
    measured -> remediating -> remediated | remediation-failed
    measured -> skipped-remediation
    remediated | skipped-remediation -> compliant | non-compliant
    remediation-failed | measurement-unknown -> non-compliant

``build-failed``, ``convert-failed``, ``compliant``, ``non-compliant`` and
``skipped`` are terminal. A failed remediation still ends in
``non-compliant``: the untouched print-intent document is a real artifact
with a real (too high) measurement.

:class:`BackendRunResult` is filled in as the run progresses and is returned
no matter how far it got, so it always explains which stage stopped the run
and why.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from press_compliance.domain import InkCoverageReport
from pipeline.remediation.model import RemediationResult

PENDING = "pending"
SKIPPED = "skipped"
BUILDING = "building"
BUILT = "built"
BUILD_FAILED = "build-failed"
CONVERTING = "converting"
CONVERTED = "converted"
CONVERT_FAILED = "convert-failed"
MEASURING = "measuring"
MEASURED = "measured"
MEASUREMENT_UNKNOWN = "measurement-unknown"
REMEDIATING = "remediating"
REMEDIATED = "remediated"
REMEDIATION_FAILED = "remediation-failed"
SKIPPED_REMEDIATION = "skipped-remediation"
COMPLIANT = "compliant"
NON_COMPLIANT = "non-compliant"

TRANSITIONS: Dict[str, frozenset] = {
    PENDING: frozenset({BUILDING, SKIPPED}),
    BUILDING: frozenset({BUILT, BUILD_FAILED}),
    BUILT: frozenset({CONVERTING}),
    CONVERTING: frozenset({CONVERTED, CONVERT_FAILED}),
    CONVERTED: frozenset({MEASURING}),
    MEASURING: frozenset({MEASURED, MEASUREMENT_UNKNOWN}),
    MEASURED: frozenset({REMEDIATING, SKIPPED_REMEDIATION}),
    REMEDIATING: frozenset({REMEDIATED, REMEDIATION_FAILED}),
    REMEDIATED: frozenset({COMPLIANT, NON_COMPLIANT}),
    SKIPPED_REMEDIATION: frozenset({COMPLIANT, NON_COMPLIANT}),
    REMEDIATION_FAILED: frozenset({NON_COMPLIANT}),
    MEASUREMENT_UNKNOWN: frozenset({NON_COMPLIANT}),
}

TERMINAL_STATES = frozenset({SKIPPED, BUILD_FAILED, CONVERT_FAILED, COMPLIANT, NON_COMPLIANT})

# Runs in these states finished normally (a verdict was reached).
VERDICT_STATES = frozenset({COMPLIANT, NON_COMPLIANT})


def now_iso() -> str:
    """Return current UTC time as ISO-8601 string."""

    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class StageOutcome:
    ok: bool
    path: Optional[Path] = None
    error: Optional[str] = None
    elapsed_seconds: float = 0.0
    note: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "path": str(self.path) if self.path else None,
            "error": self.error,
            "elapsed_seconds": round(self.elapsed_seconds, 3),
            "note": self.note,
        }


@dataclass
class BackendRunResult:
    backend: str
    label: str = ""
    state: str = PENDING
    history: List[str] = field(default_factory=lambda: [PENDING])

    build: Optional[StageOutcome] = None
    convert: Optional[StageOutcome] = None
    remediation: Optional[RemediationResult] = None
    remediation_error: Optional[str] = None

    before: Optional[InkCoverageReport] = None
    after: Optional[InkCoverageReport] = None

    final_path: Optional[Path] = None
    compliant: bool = False
    font_preservation: bool = True

    warnings: List[str] = field(default_factory=list)
    error: Optional[str] = None

    started: str = field(default_factory=now_iso)
    finished: Optional[str] = None

    def advance(self, new_state: str) -> None:
        allowed = TRANSITIONS.get(self.state, frozenset())
        if new_state not in allowed:
            raise ValueError(f"{self.backend}: illegal transition {self.state} -> {new_state}")
        self.state = new_state
        self.history.append(new_state)
        if new_state in TERMINAL_STATES:
            self.finished = now_iso()

    @property
    def terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    @property
    def skipped(self) -> bool:
        return self.state == SKIPPED

    @property
    def reached_verdict(self) -> bool:
        return self.state in VERDICT_STATES

    @property
    def produced_artifact(self) -> bool:
        return self.final_path is not None and Path(self.final_path).exists()

    @property
    def final_report(self) -> Optional[InkCoverageReport]:
        """The measurement that describes :attr:`final_path`."""
        if self.remediation is not None:
            return self.after
        return self.before

    @property
    def stopped_at(self) -> str:
        """One line naming the stage that ended the run and why."""
        if self.state == SKIPPED:
            return "skipped by configuration"
        if self.state == BUILD_FAILED:
            return f"build failed: {self.build.error if self.build else self.error}"
        if self.state == CONVERT_FAILED:
            return f"convert failed: {self.convert.error if self.convert else self.error}"
        if REMEDIATION_FAILED in self.history:
            return f"remediation failed: {self.remediation_error}"
        if MEASUREMENT_UNKNOWN in self.history:
            return "ink coverage could not be measured"
        if self.state == COMPLIANT:
            return "compliant"
        if self.state == NON_COMPLIANT:
            report = self.final_report
            if report is not None:
                return f"non-compliant: max TAC {report.max_tac:.1f}%"
            return "non-compliant"
        return f"stopped in state {self.state}" + (f": {self.error}" if self.error else "")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "backend": self.backend,
            "label": self.label,
            "state": self.state,
            "history": list(self.history),
            "stopped_at": self.stopped_at,
            "build": self.build.to_dict() if self.build else None,
            "convert": self.convert.to_dict() if self.convert else None,
            "remediation": self.remediation.to_dict() if self.remediation else None,
            "remediation_error": self.remediation_error,
            "before": self.before.to_dict() if self.before else None,
            "after": self.after.to_dict() if self.after else None,
            "final_path": str(self.final_path) if self.final_path else None,
            "compliant": self.compliant,
            "font_preservation": self.font_preservation,
            "warnings": list(self.warnings),
            "error": self.error,
            "started": self.started,
            "finished": self.finished,
        }
