"""pipeline.reporting.comparison_md

Markdown rendering for ``comparison-report.md``.

This module contains formatting logic only (no file I/O). It renders one
column per compared backend, so a single surviving backend still gets a
complete (single-column) report.
"""

from __future__ import annotations

from typing import Dict, List, Mapping, Optional

from press_compliance.domain import ComplianceProfile
from pipeline.comparison.model import (
    SEVERITY_WARNING,
    VERDICT_DIFFERENT,
    VERDICT_SAME,
    WINNER_INCONCLUSIVE,
    WINNER_TIE,
    ComparisonResult,
    ValidationResult,
)
from pipeline.execution.model import BackendRunResult


def _yes_no(flag: bool) -> str:
    return "✅ Yes" if flag else "❌ No"


def _table(lines: List[str], header: List[str], rows: List[List[str]]) -> None:
    lines.append("| " + " | ".join(header) + " |")
    lines.append("|" + "|".join("-" * (len(h) + 2) for h in header) + "|")
    for r in rows:
        lines.append("| " + " | ".join(r) + " |")
    lines.append("")


def verdict_text(winner: str, labels: Mapping[str, str]) -> str:
    if winner == WINNER_TIE:
        return "The top renderers produce **equivalent** results"
    if winner == WINNER_INCONCLUSIVE:
        return "**Inconclusive** - insufficient data for comparison"
    return f"**{labels.get(winner, winner)}** produces better results for this test"


def _verdict_cell(verdict: str, labels: Mapping[str, str]) -> str:
    if verdict == VERDICT_SAME:
        return "✅ Same"
    if verdict == VERDICT_DIFFERENT:
        return "🔄 Different"
    backend = verdict[: -len("-better")] if verdict.endswith("-better") else verdict
    return f"▶️ {labels.get(backend, backend)}"


def _raw_section(lines: List[str], v: ValidationResult) -> None:
    lines.append("### Raw Output (Before PDF/X Conversion)")
    lines.append("")
    lines.append(f"- **File:** `{v.filename}`")
    lines.append(f"- **Valid:** {'✅' if v.valid else '❌'}")
    if v.info:
        lines.append(f"- **Pages:** {v.info.page_count}")
        lines.append(f'- **Dimensions:** {v.info.page_width:.3f}" × {v.info.page_height:.3f}"')
        lines.append(f"- **File Size:** {v.info.file_size / 1024:.1f} KB")
        lines.append(f"- **Producer:** {v.info.producer}")
    lines.append("")


def _final_section(
    lines: List[str],
    v: ValidationResult,
    run: Optional[BackendRunResult],
    profile: ComplianceProfile,
) -> None:
    lines.append(f"### Print Output ({profile.target_label} Ready)")
    lines.append("")
    lines.append(f"- **File:** `{v.filename}`")
    lines.append(f"- **Compliant:** {_yes_no(v.valid)}")
    if run is not None:
        lines.append(f"- **Run state:** `{run.state}` ({run.stopped_at})")
        if run.remediation is not None:
            rem = run.remediation
            before = f"{rem.before_tac:.1f}%" if rem.before_tac is not None else "unknown"
            after = f"{rem.after_tac:.1f}%" if rem.after_tac is not None else "unverified"
            lines.append(f"- **TAC limited:** {before} → {after} (ceiling {rem.ceiling:g}%, {rem.dpi} dpi)")
        elif run.remediation_error:
            lines.append(f"- **TAC limiting failed:** {run.remediation_error}")
        fonts = "✅ Yes" if run.font_preservation else "❌ No (pages rasterized; text is not selectable)"
        lines.append(f"- **Fonts preserved:** {fonts}")
    lines.append("")

    if v.checks:
        lines.append("#### Compliance Checks")
        lines.append("")
        rows = []
        for c in v.checks:
            icon = "✅" if c.passed else ("⚠️" if c.severity == SEVERITY_WARNING else "❌")
            rows.append([c.name, icon, c.expected, c.actual])
        _table(lines, ["Check", "Result", "Expected", "Actual"], rows)

    if v.errors:
        lines.append("#### Errors")
        lines.append("")
        lines += [f"- ❌ {e}" for e in v.errors]
        lines.append("")

    warnings = list(v.warnings) + (list(run.warnings) if run is not None else [])
    if warnings:
        lines.append("#### Warnings")
        lines.append("")
        lines += [f"- ⚠️ {w}" for w in warnings]
        lines.append("")


def render_comparison_markdown(
    result: ComparisonResult,
    profile: ComplianceProfile,
    *,
    labels: Optional[Mapping[str, str]] = None,
    runs: Optional[Mapping[str, BackendRunResult]] = None,
) -> str:
    labels = dict(labels or {})
    runs = dict(runs or {})
    backends = list(result.backends)
    names = [labels.get(b, b) for b in backends]

    lines: List[str] = []
    lines.append("# PDF/X Test Harness Report")
    lines.append("")
    lines.append(f"**Generated:** {result.generated_at}")
    lines.append("")

    # Executive summary
    lines.append("## Executive Summary")
    lines.append("")
    if backends:
        _table(
            lines,
            ["Metric", *names],
            [
                [f"{profile.target_label} Compliant", *[_yes_no(result.validations[b].valid) for b in backends]],
                ["Compliance Score", *[f"{result.ranking.scores.get(b, 0):g}/10" for b in backends]],
            ],
        )
    else:
        lines.append("_No backend produced a final document._")
        lines.append("")
    lines.append(f"**Verdict:** {verdict_text(result.winner, labels)}")
    lines.append("")

    # Backends that never reached a final document
    missing = [k for k in runs if k not in result.validations and not runs[k].skipped]
    if missing:
        lines.append("**Not compared:**")
        lines.append("")
        lines += [f"- {labels.get(k, k)}: {runs[k].stopped_at}" for k in missing]
        lines.append("")

    # Per-backend sections
    for b in backends:
        lines.append("---")
        lines.append("")
        lines.append(f"## {labels.get(b, b)} Output")
        lines.append("")
        raw = result.raw_validations.get(b)
        if raw is not None:
            _raw_section(lines, raw)
        _final_section(lines, result.validations[b], runs.get(b), profile)

    # Cross-backend comparison
    lines.append("---")
    lines.append("")
    lines.append("## A/B Comparison")
    lines.append("")
    lines.append("### Feature Comparison Table")
    lines.append("")
    if result.rows:
        _table(
            lines,
            ["Feature", *names, "Difference"],
            [[r.feature, *[r.values.get(b, "N/A") for b in backends], _verdict_cell(r.verdict, labels)] for r in result.rows],
        )

    if result.visual:
        lines.append("### Visual Comparison")
        lines.append("")
        any_diff = False
        for pair in result.visual:
            a, b = labels.get(pair.a, pair.a), labels.get(pair.b, pair.b)
            s = pair.summary
            if s.error:
                lines.append(f"- **{a} vs {b}:** comparison failed ({s.error})")
                continue
            lines.append(f"- **{a} vs {b}:** {s.pages_compared} pages compared, {s.pages_differing} with differences")
            any_diff = any_diff or s.pages_differing > 0
        lines.append("")
        if any_diff:
            lines.append("Visual difference images saved in `visual-diff/` subdirectory")
        else:
            lines.append("✅ No significant visual differences detected between renderers.")
        lines.append("")

    # Per-page ink coverage
    per_backend: Dict[str, List[float]] = {}
    for b in backends:
        info = result.validations[b].info
        per_backend[b] = [p.tac for p in info.ink.pages] if info and info.ink else []
    max_pages = max((len(v) for v in per_backend.values()), default=0)
    if max_pages > 0:
        lines.append("### Ink Coverage by Page")
        lines.append("")
        rows = []
        for i in range(max_pages):
            cells = [f"{per_backend[b][i]:.1f}%" if i < len(per_backend[b]) else "N/A" for b in backends]
            rows.append([str(i + 1), *cells, f"≤{profile.tac_fail:g}%"])
        _table(lines, ["Page", *[f"{n} TAC" for n in names], "Limit"], rows)

    # Recommendations
    lines.append("---")
    lines.append("")
    lines.append("## Recommendations")
    lines.append("")
    lines += [f"- {r}" for r in result.recommendations]
    lines.append("")

    # Technical details
    lines.append("---")
    lines.append("")
    lines.append("## Technical Details")
    lines.append("")
    lines.append("### Test Configuration")
    lines.append("")
    lines.append(f'- **Trim Size:** {profile.trim_width:g}" × {profile.trim_height:g}"')
    lines.append(f'- **Bleed:** {profile.bleed:g}" all edges')
    lines.append(f'- **Final Page Size:** {profile.final_width:g}" × {profile.final_height:g}"')
    lines.append(f"- **Target:** {profile.target_label}")
    lines.append(f"- **Max Ink Coverage:** {profile.tac_fail:g}% TAC")
    lines.append("- **Color Space:** CMYK")
    lines.append("")
    lines.append("### Tools Used")
    lines.append("")
    lines.append("- **PagedJS CLI:** Chromium-based CSS Paged Media polyfill")
    lines.append("- **Vivliostyle CLI:** Native CSS Paged Media renderer")
    lines.append("- **WeasyPrint:** Python HTML/CSS renderer with native PDF/X-3 output")
    lines.append("- **Ghostscript:** PDF/X conversion, CMYK transformation and ink coverage")
    lines.append("- **LittleCMS (linkicc/tificc):** TAC-limiting device-link profiles")
    lines.append("- **Poppler Utils:** PDF analysis (pdfinfo, pdffonts, pdftoppm, pdfunite)")
    lines.append("- **ImageMagick:** Visual comparison")
    lines.append("")

    return "\n".join(lines)
