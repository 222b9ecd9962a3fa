"""pipeline.policy

Remediation policy: when is the destructive pass allowed to run?

Contract
--------
Remediate **only** when ``report.max_tac > profile.tac_fail``.

* The boundary is exclusive: a document whose max TAC equals the ceiling is
  left alone.
* Warn-band pages (between ``tac_pass`` and ``tac_warn``) never trigger
  remediation. Remediation rasterizes every page and discards embedded fonts
  and vector precision, which is strictly worse than a compliant page that
  merely carries a warning. Do not "optimize" this by remediating early.
* An unknown measurement (``None``) never triggers remediation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from press_compliance.domain import ComplianceProfile, InkCoverageReport


@dataclass(frozen=True)
class PolicyDecision:
    remediate: bool
    reason: str


def should_remediate(report: Optional[InkCoverageReport], profile: ComplianceProfile) -> bool:
    if report is None:
        return False
    return report.max_tac > profile.tac_fail


def decide(report: Optional[InkCoverageReport], profile: ComplianceProfile) -> PolicyDecision:
    if report is None:
        return PolicyDecision(False, "ink coverage unknown - not remediating blind")
    if should_remediate(report, profile):
        return PolicyDecision(
            True,
            f"TAC {report.max_tac:.1f}% exceeds {profile.tac_fail:g}% - applying TAC limiting (will rasterize)",
        )
    if report.warn_pages:
        return PolicyDecision(
            False,
            f"TAC {report.max_tac:.1f}% within limit ({len(report.warn_pages)} page(s) in warning zone) "
            "- skipping TAC limiting to preserve fonts",
        )
    return PolicyDecision(
        False, f"TAC already compliant ({report.max_tac:.1f}%) - skipping TAC limiting to preserve fonts"
    )
