"""pipeline.remediation.model

Result types for one remediation pass.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from press_compliance.domain import InkCoverageReport


@dataclass(frozen=True)
class PageOutcome:
    page: int
    fragment: Path
    # Set when the color remap failed and the unmodified raster was used.
    fallback_reason: Optional[str] = None

    @property
    def remapped(self) -> bool:
        return self.fallback_reason is None


@dataclass(frozen=True)
class RemediationResult:
    input_path: Path
    output_path: Path
    ceiling: float
    dpi: int
    page_count: int
    before: Optional[InkCoverageReport]
    after: Optional[InkCoverageReport]
    fallback_pages: Tuple[int, ...] = ()
    warnings: Tuple[str, ...] = ()
    elapsed_seconds: float = 0.0

    # Every remediated page is rasterized: embedded fonts and vector
    # precision are gone. Always False; kept as a field so callers see it.
    font_preservation: bool = False

    @property
    def before_tac(self) -> Optional[float]:
        return self.before.max_tac if self.before else None

    @property
    def after_tac(self) -> Optional[float]:
        return self.after.max_tac if self.after else None

    @property
    def within_tolerance(self) -> Optional[bool]:
        if self.after is None:
            return None
        return self.after.max_tac <= self.ceiling + 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "input_path": str(self.input_path),
            "output_path": str(self.output_path),
            "ceiling": self.ceiling,
            "dpi": self.dpi,
            "page_count": self.page_count,
            "before_tac": None if self.before_tac is None else round(self.before_tac, 1),
            "after_tac": None if self.after_tac is None else round(self.after_tac, 1),
            "fallback_pages": list(self.fallback_pages),
            "warnings": list(self.warnings),
            "elapsed_seconds": round(self.elapsed_seconds, 3),
            "font_preservation": self.font_preservation,
        }
