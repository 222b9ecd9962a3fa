"""tools/poppler.py

poppler-utils adapters: document facts (``pdfinfo``/``pdffonts``), page
merging (``pdfunite``) and PNG page rendering for visual diffs (``pdftoppm``).

Parsing of the text output lives next to the command that produces it so the
rest of the repo only ever sees dataclasses.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence, Tuple

from tools.core_cmd import DEFAULT_TIMEOUT_SECONDS, ToolFailure, require_ok, run_cmd


PAGE_SIZE_RE = re.compile(r"([\d.]+)\s*x\s*([\d.]+)\s*(\w+)", re.IGNORECASE)
POINTS_PER_INCH = 72.0


@dataclass(frozen=True)
class FontInfo:
    name: str
    type: str
    encoding: str
    embedded: bool
    subset: bool


@dataclass(frozen=True)
class DocumentFacts:
    """What ``pdfinfo`` says about a document. Sizes are in inches."""

    page_count: int = 0
    page_width: float = 0.0
    page_height: float = 0.0
    page_size_unit: str = "unknown"
    producer: str = "unknown"
    creator: str = "unknown"
    pdf_version: str = "unknown"
    encrypted: bool = False
    tagged: bool = False
    raw: Tuple[Tuple[str, str], ...] = field(default=(), repr=False)


def parse_pdfinfo(output: str) -> DocumentFacts:
    values = {}
    pairs: List[Tuple[str, str]] = []
    for line in output.splitlines():
        if ":" not in line:
            continue
        key, val = line.split(":", 1)
        key = key.strip().lower()
        val = val.strip()
        pairs.append((key, val))
        values.setdefault(key, val)

    width = height = 0.0
    unit = "unknown"
    m = PAGE_SIZE_RE.search(values.get("page size", ""))
    if m:
        width, height = float(m.group(1)), float(m.group(2))
        unit = m.group(3).lower()
        if unit in {"pts", "pt"}:
            width /= POINTS_PER_INCH
            height /= POINTS_PER_INCH
            unit = "in (from pts)"

    try:
        pages = int(values.get("pages", "0") or 0)
    except ValueError:
        pages = 0

    return DocumentFacts(
        page_count=pages,
        page_width=width,
        page_height=height,
        page_size_unit=unit,
        producer=values.get("producer") or "unknown",
        creator=values.get("creator") or "unknown",
        pdf_version=values.get("pdf version") or "unknown",
        encrypted=values.get("encrypted", "no").lower().startswith("yes"),
        tagged=values.get("tagged", "no").lower().startswith("yes"),
        raw=tuple(pairs),
    )


def _column_spans(separator: str) -> List[Tuple[int, int]]:
    return [(m.start(), m.end()) for m in re.finditer(r"-+", separator)]


def parse_pdffonts(output: str) -> List[FontInfo]:
    """Parse ``pdffonts`` output using the dashed separator row for column widths.

    Font names and types may contain single spaces ("CID TrueType"), so
    splitting on whitespace is not enough.
    """
    lines = output.splitlines()
    sep_idx = next((i for i, ln in enumerate(lines) if ln.startswith("---")), None)
    if sep_idx is None:
        return []
    spans = _column_spans(lines[sep_idx])
    if len(spans) < 5:
        return []

    fonts: List[FontInfo] = []
    for line in lines[sep_idx + 1:]:
        if not line.strip():
            continue
        cols = []
        for i, (start, end) in enumerate(spans):
            # Last column runs to end of line; others end where the next begins.
            stop = spans[i + 1][0] if i + 1 < len(spans) else len(line)
            cols.append(line[start:stop].strip())
        fonts.append(
            FontInfo(
                name=cols[0] or "unknown",
                type=cols[1] or "unknown",
                encoding=cols[2] or "unknown",
                embedded=cols[3].lower() == "yes",
                subset=cols[4].lower() == "yes",
            )
        )
    return fonts


class PopplerInspector:
    """Document facts via ``pdfinfo`` and ``pdffonts``."""

    def __init__(
        self,
        *,
        pdfinfo_bin: str = "pdfinfo",
        pdffonts_bin: str = "pdffonts",
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.pdfinfo_bin = pdfinfo_bin
        self.pdffonts_bin = pdffonts_bin
        self.timeout_seconds = timeout_seconds

    def facts(self, document: Path) -> DocumentFacts:
        res = run_cmd([self.pdfinfo_bin, str(document)], timeout_seconds=self.timeout_seconds)
        require_ok(res, "pdfinfo")
        return parse_pdfinfo(res.stdout)

    def page_count(self, document: Path) -> int:
        return self.facts(document).page_count

    def fonts(self, document: Path) -> List[FontInfo]:
        res = run_cmd([self.pdffonts_bin, str(document)], timeout_seconds=self.timeout_seconds)
        require_ok(res, "pdffonts")
        return parse_pdffonts(res.stdout)


class PdfUniteMerger:
    """Concatenate single-page fragments, in the order given, with ``pdfunite``."""

    def __init__(self, pdfunite_bin: str = "pdfunite", *, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self.pdfunite_bin = pdfunite_bin
        self.timeout_seconds = timeout_seconds

    def concat(self, fragments: Sequence[Path], output: Path) -> Path:
        if not fragments:
            raise ToolFailure("pdfunite", "no fragments to merge")
        output = Path(output)
        output.parent.mkdir(parents=True, exist_ok=True)
        res = run_cmd(
            [self.pdfunite_bin, *[str(f) for f in fragments], str(output)],
            timeout_seconds=self.timeout_seconds,
        )
        require_ok(res, "pdfunite", expect_file=output)
        return output


class PageRasterizer:
    """Render every page of a document to PNG (``pdftoppm -png``)."""

    def __init__(
        self,
        pdftoppm_bin: str = "pdftoppm",
        *,
        dpi: int = 150,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.pdftoppm_bin = pdftoppm_bin
        self.dpi = dpi
        self.timeout_seconds = timeout_seconds

    def render(self, document: Path, out_dir: Path, *, prefix: str = "page") -> List[Path]:
        out_dir = Path(out_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        res = run_cmd(
            [self.pdftoppm_bin, "-png", "-r", str(self.dpi), str(document), str(out_dir / prefix)],
            timeout_seconds=self.timeout_seconds,
        )
        require_ok(res, "pdftoppm")
        # pdftoppm zero-pads page numbers to the width of the page count.
        return sorted(out_dir.glob(f"{prefix}-*.png"), key=_page_number)


def _page_number(p: Path) -> int:
    m = re.search(r"-(\d+)\.png$", p.name)
    return int(m.group(1)) if m else 0

