"""press_compliance.domain.ink

Per-page ink samples and the aggregate ink coverage report.

TAC (Total Area Coverage) is the sum of the four print channels expressed in
percent, so it always lies in ``[0, 400]``. A page's status is a pure function
of its TAC and the :class:`~press_compliance.domain.profile.ComplianceProfile`;
there is no hidden state, which is what makes reports safe to cache, compare
and re-render.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .profile import ComplianceProfile

STATUS_PASS = "pass"
STATUS_WARN = "warn"
STATUS_FAIL = "fail"

EXTREME_TAC = 300.0

REC_PURE_BLACK = "Use pure black (0/0/0/100) instead of rich black"
REC_REDUCE_SATURATION = "Reduce color saturation in images"
REC_LOWER_TAC_PROFILE = "Convert to CGATS21_CRPC1.icc profile for lower TAC"


def _clamp_channel(v: float) -> float:
    return min(100.0, max(0.0, float(v)))


@dataclass(frozen=True)
class PageInkSample:
    """Four channel percentages for one page (1-based index)."""

    page: int
    cyan: float
    magenta: float
    yellow: float
    key: float

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError(f"page index is 1-based, got {self.page}")
        # Frozen: normalize through object.__setattr__.
        for name in ("cyan", "magenta", "yellow", "key"):
            object.__setattr__(self, name, _clamp_channel(getattr(self, name)))

    @property
    def tac(self) -> float:
        return self.cyan + self.magenta + self.yellow + self.key

    @staticmethod
    def from_fractions(page: int, c: float, m: float, y: float, k: float) -> "PageInkSample":
        """Build a sample from channel fractions in [0, 1] (Ghostscript inkcov units)."""
        return PageInkSample(page=page, cyan=c * 100, magenta=m * 100, yellow=y * 100, key=k * 100)

    def classify(self, profile: ComplianceProfile) -> "ClassifiedPage":
        return ClassifiedPage(
            sample=self,
            status=classify_tac(self.tac, profile),
            recommendation=page_recommendation(self, profile),
        )


def classify_tac(tac: float, profile: ComplianceProfile) -> str:
    """Step function of TAC against the profile thresholds."""
    if tac <= profile.tac_pass:
        return STATUS_PASS
    if tac <= profile.tac_warn:
        return STATUS_WARN
    return STATUS_FAIL


def page_recommendation(sample: PageInkSample, profile: ComplianceProfile) -> Optional[str]:
    """Every advice that applies to the page, joined with "; ", or None."""
    tac = sample.tac
    if tac <= profile.tac_pass:
        return None

    cmy = (sample.cyan, sample.magenta, sample.yellow)
    advice: List[str] = []
    # Heavy key with other channels layered under it.
    if sample.key > 80 and any(v > 20 for v in cmy):
        advice.append(REC_PURE_BLACK)
    if sum(cmy) > 200:
        advice.append(REC_REDUCE_SATURATION)
    if tac > profile.tac_warn:
        advice.append(REC_LOWER_TAC_PROFILE)
    return "; ".join(advice) or None


@dataclass(frozen=True)
class ClassifiedPage:
    sample: PageInkSample
    status: str
    recommendation: Optional[str] = None

    @property
    def page(self) -> int:
        return self.sample.page

    @property
    def tac(self) -> float:
        return self.sample.tac

    def to_dict(self) -> Dict[str, Any]:
        return {
            "page": self.page,
            "cyan": round(self.sample.cyan, 3),
            "magenta": round(self.sample.magenta, 3),
            "yellow": round(self.sample.yellow, 3),
            "key": round(self.sample.key, 3),
            "tac": round(self.tac, 3),
            "status": self.status,
            "recommendation": self.recommendation,
        }


def _pages_csv(pages: Iterable[int]) -> str:
    return ", ".join(str(p) for p in pages)


@dataclass(frozen=True)
class InkCoverageReport:
    """Immutable per-document ink coverage report.

    Build it with :meth:`build`; the aggregate fields are derived there once
    and never recomputed.
    """

    source: str
    pages: Tuple[ClassifiedPage, ...]
    max_tac: float
    average_tac: float
    fail_pages: Tuple[int, ...]
    warn_pages: Tuple[int, ...]
    recommendations: Tuple[str, ...]
    summary: str

    @property
    def passed(self) -> bool:
        return not self.fail_pages

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def max_tac_page(self) -> Optional[int]:
        if not self.pages:
            return None
        return max(self.pages, key=lambda p: p.tac).page

    @staticmethod
    def build(source: str, samples: Iterable[PageInkSample], profile: ComplianceProfile) -> "InkCoverageReport":
        pages = tuple(s.classify(profile) for s in samples)
        tacs = [p.tac for p in pages]
        max_tac = max(tacs) if tacs else 0.0
        average_tac = (sum(tacs) / len(tacs)) if tacs else 0.0

        fail_pages = tuple(p.page for p in pages if p.status == STATUS_FAIL)
        warn_pages = tuple(p.page for p in pages if p.status == STATUS_WARN)

        recs: List[str] = []
        if fail_pages:
            recs.append(
                f"{len(fail_pages)} page(s) exceed {profile.tac_warn:g}% TAC limit (pages: {_pages_csv(fail_pages)})"
            )
            recs.append("Use CGATS21_CRPC1.icc profile for color conversion")
            recs.append("Convert images to CMYK before placing in document")
        if warn_pages:
            recs.append(
                f"{len(warn_pages)} page(s) are in warning zone {profile.tac_pass:g}-{profile.tac_warn:g}% TAC "
                f"(pages: {_pages_csv(warn_pages)})"
            )
            recs.append("Consider reducing color saturation to improve print reliability")
        if max_tac > EXTREME_TAC:
            recs.append("Extremely high TAC detected - check for overlapping color areas")
            recs.append("Use pure black (0/0/0/100) for text instead of rich black")

        if fail_pages:
            summary = (
                f"Failed: {len(fail_pages)} page(s) exceed {profile.tac_warn:g}% TAC limit (max: {max_tac:.1f}%)"
            )
        elif warn_pages:
            summary = (
                f"Passed (with warnings): Max TAC {max_tac:.1f}% is within limit, "
                f"but {len(warn_pages)} page(s) in warning zone"
            )
        else:
            summary = f"Passed: All pages <={profile.tac_pass:g}% TAC (max: {max_tac:.1f}%)"

        return InkCoverageReport(
            source=str(source),
            pages=pages,
            max_tac=max_tac,
            average_tac=average_tac,
            fail_pages=fail_pages,
            warn_pages=warn_pages,
            recommendations=tuple(recs),
            summary=summary,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "passed": self.passed,
            "page_count": self.page_count,
            "max_tac": round(self.max_tac, 3),
            "average_tac": round(self.average_tac, 3),
            "fail_pages": list(self.fail_pages),
            "warn_pages": list(self.warn_pages),
            "recommendations": list(self.recommendations),
            "summary": self.summary,
            "pages": [p.to_dict() for p in self.pages],
        }
