"""pipeline.batch.model

Per-project outcome of a batch run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

STATUS_COMPLETE = "complete"
STATUS_PARTIAL = "partial"
STATUS_FAILED = "failed"


@dataclass(frozen=True)
class Project:
    name: str
    entry: Path

    @property
    def directory(self) -> Path:
        return self.entry.parent


@dataclass
class ProjectOutcome:
    project: Project
    output_dir: Path
    status: str = STATUS_FAILED
    ok: bool = False
    backends_enabled: Tuple[str, ...] = ()
    backends_with_pdfx: Tuple[str, ...] = ()
    backends_compliant: Tuple[str, ...] = ()
    winner: Optional[str] = None
    files: List[Tuple[str, int]] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    elapsed_seconds: float = 0.0

    @property
    def name(self) -> str:
        return self.project.name

    @property
    def report_path(self) -> Path:
        return self.output_dir / "comparison-report.md"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "entry": str(self.project.entry),
            "output_dir": str(self.output_dir),
            "status": self.status,
            "ok": self.ok,
            "backends_enabled": list(self.backends_enabled),
            "backends_with_pdfx": list(self.backends_with_pdfx),
            "backends_compliant": list(self.backends_compliant),
            "winner": self.winner,
            "files": [{"name": n, "size_bytes": s} for n, s in self.files],
            "errors": list(self.errors),
            "elapsed_seconds": round(self.elapsed_seconds, 3),
        }


def project_status(enabled: Tuple[str, ...], with_pdfx: Tuple[str, ...]) -> str:
    """Complete if every enabled backend produced a print-intent document."""
    if not with_pdfx:
        return STATUS_FAILED
    if set(enabled) <= set(with_pdfx):
        return STATUS_COMPLETE
    return STATUS_PARTIAL
