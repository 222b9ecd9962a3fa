"""pipeline.reporting.batch_md

Markdown rendering for ``batch-summary.md`` (formatting only, no I/O).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Sequence

if TYPE_CHECKING:
    from pipeline.batch.model import ProjectOutcome

# Keyed by pipeline.batch.model status values.
STATUS_LABELS = {
    "complete": "✅ Complete",
    "partial": "⚠️ Partial",
    "failed": "❌ Failed",
}


def render_batch_markdown(outcomes: Sequence[ProjectOutcome], generated_at: str) -> str:
    lines: List[str] = []
    lines.append("# PDFX Test Harness - Batch Summary")
    lines.append("")
    lines.append(f"**Generated:** {generated_at}")
    lines.append("")
    lines.append("## Projects Processed")
    lines.append("")

    if not outcomes:
        lines.append("_No projects found._")
        lines.append("")

    for o in outcomes:
        lines.append(f"### {o.name}")
        lines.append("")
        lines.append(f"- **Status:** {STATUS_LABELS.get(o.status, o.status)}")
        if o.backends_compliant:
            lines.append(f"- **Compliant:** {', '.join(o.backends_compliant)}")
        if o.winner:
            lines.append(f"- **Verdict:** {o.winner}")
        if o.files:
            lines.append("- **Files:**")
            for name, size in o.files:
                lines.append(f"  - {name} ({size / 1024:.1f} KB)")
        if o.report_path.exists():
            lines.append(f"- **Report:** [comparison-report.md](./{o.output_dir.name}/comparison-report.md)")
        if o.errors:
            lines.append("- **Errors:**")
            lines += [f"  - {e}" for e in o.errors]
        lines.append("")

    lines.append("---")
    lines.append("")
    lines.append("*Generated by the press compliance pipeline*")
    lines.append("")
    return "\n".join(lines)
