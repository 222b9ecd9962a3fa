"""tools/deps.py

Presence checks for every external executable the pipeline can call.

Checks are ``shutil.which`` lookups only: nothing is executed. The labels
double as install hints, which is what a user needs when something is
missing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Sequence

from tools.core_cmd import tool_available


@dataclass(frozen=True)
class ExternalTool:
    binary: str
    label: str
    purpose: str


GHOSTSCRIPT = ExternalTool("gs", "ghostscript", "ink coverage, rasterizing, PDF/X conversion")
TIFICC = ExternalTool("tificc", "liblcms2-utils (tificc)", "apply TAC device-link to rasters")
LINKICC = ExternalTool("linkicc", "liblcms2-utils (linkicc)", "build TAC device-link profile")
IMG2PDF = ExternalTool("img2pdf", "img2pdf (pip install img2pdf)", "wrap rasters into PDF pages")
PDFUNITE = ExternalTool("pdfunite", "poppler-utils (pdfunite)", "merge remediated pages")
PDFINFO = ExternalTool("pdfinfo", "poppler-utils (pdfinfo)", "page count, size, version")
PDFFONTS = ExternalTool("pdffonts", "poppler-utils (pdffonts)", "font embedding")
PDFTOPPM = ExternalTool("pdftoppm", "poppler-utils (pdftoppm)", "visual diff rendering")
COMPARE = ExternalTool("compare", "imagemagick (compare)", "visual diff pixel counts")
NPX = ExternalTool("npx", "node (npx)", "pagedjs-cli / vivliostyle")
WEASYPRINT = ExternalTool("weasyprint", "weasyprint (pip install weasyprint)", "weasyprint backend")

# Order matters: it is the order missing pieces are reported in.
REMEDIATION_TOOLS: tuple[ExternalTool, ...] = (GHOSTSCRIPT, TIFICC, LINKICC, IMG2PDF, PDFUNITE)

ALL_TOOLS: tuple[ExternalTool, ...] = (
    GHOSTSCRIPT,
    TIFICC,
    LINKICC,
    IMG2PDF,
    PDFUNITE,
    PDFINFO,
    PDFFONTS,
    PDFTOPPM,
    COMPARE,
    NPX,
    WEASYPRINT,
)


def missing_tools(
    tools: Sequence[ExternalTool] = REMEDIATION_TOOLS,
    *,
    available: Callable[[str], bool] = tool_available,
) -> List[str]:
    """Labels of every tool in *tools* that is not on PATH."""
    return [t.label for t in tools if not available(t.binary)]


def check_dependencies(
    tools: Sequence[ExternalTool] = ALL_TOOLS,
    *,
    available: Callable[[str], bool] = tool_available,
) -> Dict[str, bool]:
    return {t.label: available(t.binary) for t in tools}
