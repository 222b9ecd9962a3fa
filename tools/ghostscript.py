"""tools/ghostscript.py

Ghostscript adapters: channel reporting, page rasterization and PDF/X
conversion.

Each adapter is a small class holding the executable and timeout; methods
return plain Python values or paths and raise
:class:`tools.core_cmd.ToolFailure` when Ghostscript does not do its job.
No policy lives here.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import List, Optional, Tuple

from tools.core_cmd import DEFAULT_TIMEOUT_SECONDS, ToolFailure, require_ok, run_cmd

logger = logging.getLogger(__name__)

# "0.12345  0.23456  0.34567  0.45678 CMYK OK"
INKCOV_LINE_RE = re.compile(r"([\d.]+)\s+([\d.]+)\s+([\d.]+)\s+([\d.]+)\s+CMYK")

ChannelFractions = Tuple[float, float, float, float]


def parse_inkcov(output: str) -> List[ChannelFractions]:
    """Parse ``-sDEVICE=inkcov`` output into per-page (c, m, y, k) fractions."""
    pages: List[ChannelFractions] = []
    for line in output.splitlines():
        m = INKCOV_LINE_RE.search(line)
        if not m:
            continue
        c, mg, y, k = (float(v) for v in m.groups())
        pages.append((c, mg, y, k))
    return pages


class InkcovReporter:
    """Per-page CMYK coverage via Ghostscript's ``inkcov`` device."""

    def __init__(self, gs_bin: str = "gs", *, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self.gs_bin = gs_bin
        self.timeout_seconds = timeout_seconds

    def report(self, document: Path) -> List[ChannelFractions]:
        document = Path(document)
        if not document.exists():
            raise ToolFailure("gs inkcov", f"file not found: {document}")

        res = run_cmd(
            [self.gs_bin, "-q", "-o", "-", "-sDEVICE=inkcov", str(document)],
            timeout_seconds=self.timeout_seconds,
        )
        require_ok(res, "gs inkcov")
        pages = parse_inkcov(res.stdout)
        if not pages:
            raise ToolFailure("gs inkcov", "no per-page CMYK values in output (encrypted or malformed input?)")
        return pages


class TiffRasterizer:
    """Render a single page to a 32-bit CMYK TIFF (``tiff32nc``)."""

    def __init__(self, gs_bin: str = "gs", *, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self.gs_bin = gs_bin
        self.timeout_seconds = timeout_seconds

    def to_raster(self, document: Path, page: int, dpi: int, out_path: Path) -> Path:
        out_path = Path(out_path)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        res = run_cmd(
            [
                self.gs_bin,
                "-dNOPAUSE",
                "-dBATCH",
                "-dQUIET",
                "-sDEVICE=tiff32nc",
                f"-r{int(dpi)}",
                f"-dFirstPage={int(page)}",
                f"-dLastPage={int(page)}",
                f"-sOutputFile={out_path}",
                str(document),
            ],
            timeout_seconds=self.timeout_seconds,
        )
        require_ok(res, "gs tiff32nc", expect_file=out_path)
        return out_path


PDFX_DEF_TEMPLATE = """%!PS-Adobe-3.0
%%Title: PDF/X-1a:2001 Definition

[/GTS_PDFXVersion (PDF/X-1a:2001)
 /Title ({title})
 /Trapped /False
 /DOCINFO pdfmark

[/_objdef {{cmsIntent}} /type /dict /OBJ pdfmark
[{{cmsIntent}} <<
  /S /GTS_PDFX
  /OutputCondition (Offset printing, according to ISO 12647-2:2004 / Amd 1, OFCOM, paper type 1 or 2 = coated art, 115 g/m2, screen ruling 60/cm)
  /OutputConditionIdentifier (CGATS TR 001)
  /RegistryName (http://www.color.org)
  /Info (CGATS TR 001 - Characterized printing condition)
>> /PUT pdfmark
[{{Catalog}} <</OutputIntents [ {{cmsIntent}} ]>> /PUT pdfmark
"""


def _ps_escape(s: str) -> str:
    return s.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


class GhostscriptPdfxConverter:
    """Convert an arbitrary (RGB) PDF into a CMYK PDF/X-1a document."""

    def __init__(
        self,
        gs_bin: str = "gs",
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        output_icc_profile: Optional[Path] = None,
    ) -> None:
        self.gs_bin = gs_bin
        self.timeout_seconds = timeout_seconds
        self.output_icc_profile = output_icc_profile

    def convert(self, document: Path, output: Path, *, title: str = "") -> Path:
        document = Path(document)
        output = Path(output)
        if not document.exists():
            raise ToolFailure("gs pdfwrite", f"file not found: {document}")
        output.parent.mkdir(parents=True, exist_ok=True)

        def_path = output.with_name(f"{output.stem}-pdfx-def.ps")
        def_path.write_text(PDFX_DEF_TEMPLATE.format(title=_ps_escape(title or document.stem)), encoding="utf-8")

        cmd = [
            self.gs_bin,
            "-dPDFX",
            "-dBATCH",
            "-dNOPAUSE",
            "-dNOSAFER",
            "-sDEVICE=pdfwrite",
            "-dCompatibilityLevel=1.4",
            "-sColorConversionStrategy=CMYK",
            "-sProcessColorModel=DeviceCMYK",
            "-dEmbedAllFonts=true",
            "-dSubsetFonts=true",
            "-dPDFSETTINGS=/prepress",
        ]
        if self.output_icc_profile:
            cmd.append(f"-sOutputICCProfile={self.output_icc_profile}")
        cmd += [f"-sOutputFile={output}", str(def_path), str(document)]

        try:
            res = run_cmd(cmd, timeout_seconds=self.timeout_seconds)
            require_ok(res, "gs pdfwrite", expect_file=output)
        finally:
            if def_path.exists():
                def_path.unlink()
        logger.info("converted %s -> %s", document.name, output.name)
        return output
