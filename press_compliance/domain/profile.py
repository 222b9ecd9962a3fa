"""press_compliance.domain.profile

The static print target every measurement and check is evaluated against.

A :class:`ComplianceProfile` is pure data: trim size, bleed, DPI and the
tiered ink-coverage thresholds. It is constructed once per run (defaults or a
YAML override) and passed down explicitly; nothing mutates it afterwards.

Threshold semantics
-------------------
``tac_pass``  - pages at or below this are ``pass`` (200%).
``tac_warn``  - pages above ``tac_pass`` and at or below this are ``warn`` (240%).
``tac_fail``  - remediation ceiling; a document whose max TAC is *strictly*
                above this is remediated (240%).
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Tuple


MAX_TAC = 400.0


@dataclass(frozen=True)
class ComplianceProfile:
    """Print target: geometry plus ink thresholds (inches / percent)."""

    trim_width: float = 6.0
    trim_height: float = 9.0
    bleed: float = 0.125
    dpi: int = 300

    tac_pass: float = 200.0
    tac_warn: float = 240.0
    tac_fail: float = 240.0

    dimension_tolerance_pct: float = 2.0
    pdf_versions: Tuple[str, ...] = ("1.3", "1.4")
    target_label: str = "DriveThruRPG PDF/X-1a:2001"

    def __post_init__(self) -> None:
        for name in ("tac_pass", "tac_warn", "tac_fail"):
            v = float(getattr(self, name))
            if v < 0 or v > MAX_TAC:
                raise ValueError(f"{name} must be within [0, {MAX_TAC:g}], got {v:g}")
        if self.tac_pass > self.tac_warn:
            raise ValueError(
                f"tac_pass ({self.tac_pass:g}) must not exceed tac_warn ({self.tac_warn:g})"
            )
        if self.trim_width <= 0 or self.trim_height <= 0 or self.bleed < 0:
            raise ValueError("trim size must be positive and bleed non-negative")
        if self.dpi <= 0:
            raise ValueError(f"dpi must be positive, got {self.dpi}")

    @property
    def final_width(self) -> float:
        return self.trim_width + 2 * self.bleed

    @property
    def final_height(self) -> float:
        return self.trim_height + 2 * self.bleed

    @property
    def vivliostyle_size(self) -> str:
        """Page size in the ``--size`` syntax the Vivliostyle CLI accepts."""
        return f"{self.final_width:g}in,{self.final_height:g}in"

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["pdf_versions"] = list(self.pdf_versions)
        return d

    @staticmethod
    def from_dict(raw: Mapping[str, Any], *, base: "ComplianceProfile | None" = None) -> "ComplianceProfile":
        """Build a profile from a (possibly partial) mapping.

        Unknown keys are rejected so that a typo in a YAML config does not
        silently fall back to a default threshold.
        """
        base = base or DEFAULT_PROFILE
        known = set(base.to_dict().keys())
        unknown = sorted(set(raw.keys()) - known)
        if unknown:
            raise ValueError(f"Unknown profile keys: {', '.join(unknown)}")

        merged = base.to_dict()
        merged.update(dict(raw))
        merged["pdf_versions"] = tuple(str(v) for v in merged.get("pdf_versions") or ())
        for k in ("trim_width", "trim_height", "bleed", "tac_pass", "tac_warn", "tac_fail", "dimension_tolerance_pct"):
            merged[k] = float(merged[k])
        merged["dpi"] = int(merged["dpi"])
        return ComplianceProfile(**merged)


DEFAULT_PROFILE = ComplianceProfile()
