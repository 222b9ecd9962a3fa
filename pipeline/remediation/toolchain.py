"""pipeline.remediation.toolchain

The collaborators a remediation pass needs, bundled so they can be checked
up front and swapped wholesale in tests.

Collaborator shapes (duck-typed):

* ``rasterizer.to_raster(document, page, dpi, out_path) -> Path``
* ``remapper.build(ceiling) -> Path`` and ``remapper.apply(artifact, raster, out_path) -> Path``
* ``wrapper.wrap(raster, out_path) -> Path``
* ``merger.concat(fragments, output) -> Path``
* ``inspector.page_count(document) -> int``
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, List, Optional

from tools.deps import REMEDIATION_TOOLS, missing_tools
from tools.ghostscript import TiffRasterizer
from tools.lcms import LcmsRemapper
from tools.poppler import PdfUniteMerger, PopplerInspector
from tools.raster_pdf import Img2PdfWrapper


def _nothing_missing() -> List[str]:
    return []


@dataclass(frozen=True)
class RemediationToolchain:
    rasterizer: Optional[Any]
    remapper: Optional[Any]
    wrapper: Optional[Any]
    merger: Optional[Any]
    inspector: Optional[Any] = None

    # Reports missing external executables; the default reports none.
    check_fn: Callable[[], List[str]] = _nothing_missing

    def missing(self) -> List[str]:
        """Every missing piece, in a stable order, for one aggregated error."""
        missing = list(self.check_fn())
        for label, obj in (
            ("rasterizer", self.rasterizer),
            ("color remapper", self.remapper),
            ("raster-to-document wrapper", self.wrapper),
            ("document merger", self.merger),
        ):
            if obj is None:
                missing.append(label)
        return missing

    @staticmethod
    def system(
        *,
        profile_dir: Path,
        cmyk_profile: Optional[Path] = None,
        timeout_seconds: float = 120,
    ) -> "RemediationToolchain":
        """Real tools: Ghostscript, lcms2, img2pdf and poppler."""
        return RemediationToolchain(
            rasterizer=TiffRasterizer(timeout_seconds=timeout_seconds),
            remapper=LcmsRemapper(profile_dir, cmyk_profile=cmyk_profile, timeout_seconds=timeout_seconds),
            wrapper=Img2PdfWrapper(timeout_seconds=timeout_seconds),
            merger=PdfUniteMerger(timeout_seconds=timeout_seconds),
            inspector=PopplerInspector(timeout_seconds=timeout_seconds),
            check_fn=lambda: missing_tools(REMEDIATION_TOOLS),
        )
