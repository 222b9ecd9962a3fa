"""pipeline.reporting.tac_text

Plain-text ink coverage report for the terminal (``check-tac``).

This module contains formatting logic only (no I/O).
"""

from __future__ import annotations

from typing import List

from press_compliance.domain import STATUS_FAIL, STATUS_WARN, ComplianceProfile, InkCoverageReport

HEAVY = "═" * 63
LIGHT = "─" * 65
MAX_LISTED_PAGES = 20


def _page_block(lines: List[str], report: InkCoverageReport, status: str) -> None:
    pages = [p for p in report.pages if p.status == status]
    for p in pages[:MAX_LISTED_PAGES]:
        lines.append(f"  Page {p.page}: {p.tac:.1f}% TAC")
        if p.recommendation:
            lines.append(f"    → {p.recommendation}")
    if len(pages) > MAX_LISTED_PAGES:
        lines.append(f"  ... and {len(pages) - MAX_LISTED_PAGES} more pages")


def render_tac_report(report: InkCoverageReport, profile: ComplianceProfile) -> str:
    lines: List[str] = [
        HEAVY,
        "TAC VALIDATION REPORT",
        HEAVY,
        "",
        f"File: {report.source}",
        f"Pages: {report.page_count}",
        "",
        LIGHT,
        "TAC SUMMARY",
        LIGHT,
        "",
        f"  Maximum TAC:    {report.max_tac:.1f}%",
        f"  Average TAC:    {report.average_tac:.1f}%",
        f"  Threshold:      ≤{profile.tac_fail:g}% ({profile.target_label} requirement)",
        "",
        f"  {report.summary}",
    ]

    if report.warn_pages:
        lines += [
            "",
            LIGHT,
            f"⚠️  PAGES IN WARNING ZONE ({profile.tac_pass:g}-{profile.tac_warn:g}% TAC)",
            LIGHT,
            "",
        ]
        _page_block(lines, report, STATUS_WARN)

    if report.fail_pages:
        lines += ["", LIGHT, f"❌ PAGES OVER {profile.tac_fail:g}% TAC LIMIT", LIGHT, ""]
        _page_block(lines, report, STATUS_FAIL)

    if report.recommendations:
        lines += ["", LIGHT, "RECOMMENDATIONS", LIGHT, ""]
        lines += [f"  • {r}" for r in report.recommendations]

    lines += ["", HEAVY, ""]
    return "\n".join(lines)
