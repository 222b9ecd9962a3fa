"""pipeline.comparison.engine

Cross-backend comparison: validation -> feature rows -> visual diff ->
ranking -> recommendations.

Only backends with a final artifact take part. Two entry points:

- :meth:`ComparisonEngine.compare` takes the per-backend run results of an
  orchestrated run.
- :meth:`ComparisonEngine.compare_documents` takes backend -> document
  paths directly (used to re-run a comparison over an existing output
  directory).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from press_compliance.domain import ComplianceProfile
from pipeline.execution.model import BackendRunResult, now_iso

from .features import compare_features
from .model import ComparisonResult, ValidationResult
from .ranking import rank
from .validate import validate_document

logger = logging.getLogger(__name__)

DIMENSION_ADVICE_IN = 0.1

REC_FIX_ERRORS = "Review and fix validation errors before uploading to the print marketplace."
REC_FONTS = "Ensure all fonts are embedded. Use web fonts or system fonts that allow embedding."
REC_ALL_GOOD = "All outputs appear compliant. Verify visual quality before final upload."


def recommendations(
    validations: Mapping[str, ValidationResult],
    profile: ComplianceProfile,
    labels: Optional[Mapping[str, str]] = None,
) -> List[str]:
    labels = labels or {}
    recs: List[str] = []

    if any(v.errors for v in validations.values()):
        recs.append(REC_FIX_ERRORS)

    over = [
        v for v in validations.values()
        if v.info is not None and v.info.max_tac is not None and v.info.max_tac > profile.tac_fail
    ]
    if over:
        recs.append(
            f"Some pages exceed {profile.tac_fail:g}% TAC. Consider reducing color saturation "
            "or using ICC profiles optimized for lower ink coverage."
        )

    for key, v in validations.items():
        if v.info is None:
            continue
        if (
            abs(v.info.page_width - profile.final_width) > DIMENSION_ADVICE_IN
            or abs(v.info.page_height - profile.final_height) > DIMENSION_ADVICE_IN
        ):
            recs.append(
                f"{labels.get(key, key)} page dimensions differ from expected. "
                "Check @page size rules include bleed."
            )

    if any(v.info is not None and v.info.unembedded_fonts for v in validations.values()):
        recs.append(REC_FONTS)

    if not recs:
        recs.append(REC_ALL_GOOD)
    return recs


class ComparisonEngine:
    def __init__(self, pdf_inspector, visual, profile: ComplianceProfile, labels: Optional[Mapping[str, str]] = None) -> None:
        self.pdf_inspector = pdf_inspector
        self.visual = visual
        self.profile = profile
        self.labels = dict(labels or {})

    def compare(
        self,
        results: Mapping[str, BackendRunResult],
        *,
        visual_dir: Optional[Path] = None,
    ) -> ComparisonResult:
        documents = {k: Path(r.final_path) for k, r in results.items() if r.produced_artifact}
        raw: Dict[str, Path] = {}
        for k, r in results.items():
            if k in documents and r.build is not None and r.build.ok and r.build.path:
                raw[k] = Path(r.build.path)
        return self.compare_documents(documents, visual_dir=visual_dir, raw_documents=raw)

    def compare_documents(
        self,
        documents: Mapping[str, Path],
        *,
        visual_dir: Optional[Path] = None,
        raw_documents: Optional[Mapping[str, Path]] = None,
    ) -> ComparisonResult:
        print("\n📊 Running PDF Comparison...\n")
        print("=" * 60)

        present = {k: Path(p) for k, p in documents.items() if Path(p).exists()}
        for k in documents:
            if k not in present:
                logger.warning("skipping %s: %s does not exist", k, documents[k])

        validations: Dict[str, ValidationResult] = {
            k: validate_document(self.pdf_inspector, p, self.profile) for k, p in present.items()
        }

        raw_validations: Dict[str, ValidationResult] = {}
        for k, p in (raw_documents or {}).items():
            if k in present and Path(p).exists() and Path(p) != present[k]:
                raw_validations[k] = validate_document(self.pdf_inspector, Path(p), self.profile)

        rows = compare_features({k: v.info for k, v in validations.items()}, self.profile)

        visual = []
        if self.visual is not None and visual_dir is not None and len(present) >= 2:
            visual = self.visual.compare(present, visual_dir)

        ranking = rank(validations)
        recs = recommendations(validations, self.profile, self.labels)

        print("\n" + "=" * 60)
        return ComparisonResult(
            backends=tuple(present.keys()),
            rows=tuple(rows),
            visual=tuple(visual),
            ranking=ranking,
            validations=validations,
            recommendations=tuple(recs),
            generated_at=now_iso(),
            raw_validations=raw_validations,
        )
