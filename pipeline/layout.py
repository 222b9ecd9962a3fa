"""pipeline.layout

Filesystem layout for one project's outputs.

Why this exists
---------------
Backend runs, the comparison stage, the batch summary and the ``compare``
command all need to agree on *where* each artifact lives. File names are
computed here once instead of being re-spelled as string literals.

Layout (per project)::

    <output>/<project>/
      <backend>-output.pdf          raw renderer output
      <backend>-pdfx.pdf            print-intent (CMYK PDF/X) document
      <backend>-pdfx-tac<N>.pdf     final artifact (remediated or copied)
      comparison-report.md
      run.json
      visual-diff/<a>-vs-<b>/...
      .work/                        temporary remediation files
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

_SAFE_NAME = re.compile(r"[^A-Za-z0-9._-]+")


def safe_name(value: str) -> str:
    """Sanitize a string so it can be used as a folder segment.

    Dot-only segments ('.', '..') are rejected so a project name can never
    point outside the output root.
    """
    v = (value or "").strip()
    v = _SAFE_NAME.sub("_", v)
    v = re.sub(r"_+", "_", v).strip("_")
    if v in {".", ".."}:
        return "unknown"
    return v.lstrip(".") or "unknown"


def new_run_id(now: Optional[datetime] = None) -> str:
    """Return a sortable UTC timestamp id like: 20260104T013000Z."""
    dt = now or datetime.now(timezone.utc)
    return dt.strftime("%Y%m%dT%H%M%SZ")


@dataclass(frozen=True)
class ProjectPaths:
    root: Path

    def raw_pdf(self, backend: str) -> Path:
        return self.root / f"{backend}-output.pdf"

    def pdfx_pdf(self, backend: str) -> Path:
        return self.root / f"{backend}-pdfx.pdf"

    def final_pdf(self, backend: str, ceiling: float) -> Path:
        return self.root / f"{backend}-pdfx-tac{ceiling:g}.pdf"

    @property
    def comparison_report(self) -> Path:
        return self.root / "comparison-report.md"

    @property
    def manifest(self) -> Path:
        return self.root / "run.json"

    @property
    def visual_diff_dir(self) -> Path:
        return self.root / "visual-diff"

    @property
    def work_dir(self) -> Path:
        return self.root / ".work"

    def ensure(self) -> "ProjectPaths":
        self.root.mkdir(parents=True, exist_ok=True)
        return self
