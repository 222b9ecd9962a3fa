"""pipeline.comparison.model

Data structures produced by the comparison engine.

Everything here is a frozen dataclass with a ``to_dict`` so the run manifest
can serialize it directly. Backends are always referred to by registry key
(``"pagedjs"``, ``"weasyprint"``); labels are a rendering concern.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from press_compliance.domain import InkCoverageReport
from tools.poppler import FontInfo

SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"
SEVERITY_INFO = "info"

VERDICT_SAME = "same"
VERDICT_DIFFERENT = "different"

WINNER_TIE = "tie"
WINNER_INCONCLUSIVE = "inconclusive"


def better_verdict(backend: str) -> str:
    return f"{backend}-better"


@dataclass(frozen=True)
class PdfInfo:
    """Everything the checks and feature rows need about one document."""

    filename: str
    filepath: Path
    file_size: int = 0
    page_count: int = 0
    page_width: float = 0.0
    page_height: float = 0.0
    page_size_unit: str = "unknown"
    producer: str = "unknown"
    creator: str = "unknown"
    pdf_version: str = "unknown"
    encrypted: bool = False
    tagged: bool = False
    fonts: Tuple[FontInfo, ...] = ()
    color_space: str = "Unknown"
    ink: Optional[InkCoverageReport] = None

    @property
    def embedded_fonts(self) -> int:
        return sum(1 for f in self.fonts if f.embedded)

    @property
    def unembedded_fonts(self) -> List[str]:
        return [f.name for f in self.fonts if not f.embedded]

    @property
    def max_tac(self) -> Optional[float]:
        return self.ink.max_tac if self.ink is not None else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filename": self.filename,
            "filepath": str(self.filepath),
            "file_size": self.file_size,
            "page_count": self.page_count,
            "page_size": {"width": self.page_width, "height": self.page_height, "unit": self.page_size_unit},
            "producer": self.producer,
            "creator": self.creator,
            "pdf_version": self.pdf_version,
            "encrypted": self.encrypted,
            "tagged": self.tagged,
            "fonts": [
                {"name": f.name, "type": f.type, "encoding": f.encoding, "embedded": f.embedded, "subset": f.subset}
                for f in self.fonts
            ],
            "color_space": self.color_space,
            "max_tac": self.max_tac,
        }


@dataclass(frozen=True)
class ValidationCheck:
    name: str
    passed: bool
    expected: str
    actual: str
    severity: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "passed": self.passed,
            "expected": self.expected,
            "actual": self.actual,
            "severity": self.severity,
        }


@dataclass(frozen=True)
class ValidationResult:
    filename: str
    filepath: Path
    valid: bool
    info: Optional[PdfInfo]
    checks: Tuple[ValidationCheck, ...] = ()
    errors: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()

    @property
    def passed_checks(self) -> int:
        return sum(1 for c in self.checks if c.passed)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filename": self.filename,
            "filepath": str(self.filepath),
            "valid": self.valid,
            "info": self.info.to_dict() if self.info else None,
            "checks": [c.to_dict() for c in self.checks],
            "errors": list(self.errors),
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class FeatureRow:
    feature: str
    values: Dict[str, str]
    verdict: str
    notes: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"feature": self.feature, "values": dict(self.values), "verdict": self.verdict, "notes": self.notes}


@dataclass(frozen=True)
class PageDiff:
    page: int
    pixels: Optional[int]
    differs: bool
    reason: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"page": self.page, "pixels": self.pixels, "differs": self.differs, "reason": self.reason}


@dataclass(frozen=True)
class VisualDiffSummary:
    pages_compared: int
    pages_differing: int
    per_page: Tuple[PageDiff, ...] = ()
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pages_compared": self.pages_compared,
            "pages_differing": self.pages_differing,
            "per_page": [p.to_dict() for p in self.per_page],
            "error": self.error,
        }


@dataclass(frozen=True)
class PairVisualDiff:
    a: str
    b: str
    summary: VisualDiffSummary

    def to_dict(self) -> Dict[str, Any]:
        return {"a": self.a, "b": self.b, **self.summary.to_dict()}


@dataclass(frozen=True)
class Ranking:
    scores: Dict[str, float]
    order: Tuple[str, ...]
    winner: str

    def to_dict(self) -> Dict[str, Any]:
        return {"scores": dict(self.scores), "order": list(self.order), "winner": self.winner}


@dataclass(frozen=True)
class ComparisonResult:
    backends: Tuple[str, ...]
    rows: Tuple[FeatureRow, ...]
    visual: Tuple[PairVisualDiff, ...]
    ranking: Ranking
    validations: Dict[str, ValidationResult]
    recommendations: Tuple[str, ...]
    generated_at: str
    # Per-backend extras the report shows (raw output facts, durations).
    raw_validations: Dict[str, ValidationResult] = field(default_factory=dict)

    @property
    def winner(self) -> str:
        return self.ranking.winner

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generated_at": self.generated_at,
            "backends": list(self.backends),
            "ranking": self.ranking.to_dict(),
            "rows": [r.to_dict() for r in self.rows],
            "visual": [v.to_dict() for v in self.visual],
            "validations": {k: v.to_dict() for k, v in self.validations.items()},
            "raw_validations": {k: v.to_dict() for k, v in self.raw_validations.items()},
            "recommendations": list(self.recommendations),
        }
