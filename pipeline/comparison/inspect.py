"""pipeline.comparison.inspect

Gather a :class:`PdfInfo` for one document.

Each source of facts is optional: a missing ``pdffonts`` or an unmeasurable
document degrades that part of the picture (logged), it does not abort the
comparison. The checks downstream then fail on the missing facts.
"""

from __future__ import annotations

import logging
from pathlib import Path

from press_compliance.domain import MeasurementUnavailable
from tools.core_cmd import ToolFailure
from tools.poppler import DocumentFacts

from .model import PdfInfo

logger = logging.getLogger(__name__)


def detect_color_space(facts: DocumentFacts, measured: bool) -> str:
    """Best-effort process color space.

    A document the CMYK ink coverage device could read is treated as CMYK.
    Otherwise fall back to whatever ``pdfinfo`` mentions.
    """
    if measured:
        return "CMYK"
    blob = " ".join(f"{k} {v}" for k, v in facts.raw).lower()
    if "cmyk" in blob:
        return "CMYK"
    if "rgb" in blob:
        return "RGB"
    return "Unknown"


class PdfInspector:
    """Combine document facts, fonts and ink coverage into a PdfInfo."""

    def __init__(self, inspector, measurer) -> None:
        self.inspector = inspector
        self.measurer = measurer

    def inspect(self, document: Path) -> PdfInfo:
        document = Path(document)

        facts = DocumentFacts()
        try:
            facts = self.inspector.facts(document)
        except (ToolFailure, OSError) as e:
            logger.warning("pdfinfo failed for %s: %s", document, e)

        fonts = ()
        try:
            fonts = tuple(self.inspector.fonts(document))
        except (ToolFailure, OSError) as e:
            logger.warning("pdffonts failed for %s, skipping font analysis: %s", document, e)

        ink = None
        try:
            ink = self.measurer.measure(document)
        except MeasurementUnavailable as e:
            logger.warning("%s", e)

        return PdfInfo(
            filename=document.name,
            filepath=document,
            file_size=_file_size(document),
            page_count=facts.page_count,
            page_width=facts.page_width,
            page_height=facts.page_height,
            page_size_unit=facts.page_size_unit,
            producer=facts.producer,
            creator=facts.creator,
            pdf_version=facts.pdf_version,
            encrypted=facts.encrypted,
            tagged=facts.tagged,
            fonts=fonts,
            color_space=detect_color_space(facts, ink is not None),
            ink=ink,
        )


def _file_size(p: Path) -> int:
    try:
        return p.stat().st_size
    except OSError:
        return 0
