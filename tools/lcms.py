"""tools/lcms.py

Little CMS (lcms2-utils) adapters: build a TAC-limiting device-link profile
with ``linkicc`` and apply it to a CMYK TIFF with ``tificc``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

from tools.core_cmd import DEFAULT_TIMEOUT_SECONDS, ToolFailure, require_ok, run_cmd

logger = logging.getLogger(__name__)

SYSTEM_CMYK_PROFILES: tuple[str, ...] = (
    "/usr/share/color/icc/ghostscript/default_cmyk.icc",
    "/usr/share/ghostscript/iccprofiles/default_cmyk.icc",
    "/usr/share/color/icc/ghostscript/ps_cmyk.icc",
)


def find_cmyk_profile(candidates: Sequence[str] = SYSTEM_CMYK_PROFILES) -> Path:
    for c in candidates:
        p = Path(c)
        if p.exists():
            return p
    raise ToolFailure("linkicc", "No CMYK ICC profile found on system")


class LcmsRemapper:
    """Device-link build (ceiling keyed) and per-raster application."""

    def __init__(
        self,
        work_dir: Path,
        *,
        linkicc_bin: str = "linkicc",
        tificc_bin: str = "tificc",
        cmyk_profile: Optional[Path] = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.work_dir = Path(work_dir)
        self.linkicc_bin = linkicc_bin
        self.tificc_bin = tificc_bin
        self.cmyk_profile = Path(cmyk_profile) if cmyk_profile else None
        self.timeout_seconds = timeout_seconds

    def build(self, ceiling: float) -> Path:
        profile_path = self.work_dir / f"cmyk-tac{ceiling:g}.icc"
        self.work_dir.mkdir(parents=True, exist_ok=True)

        cmyk = self.cmyk_profile or find_cmyk_profile()
        if not cmyk.exists():
            raise ToolFailure("linkicc", f"CMYK profile not found: {cmyk}")

        res = run_cmd(
            [
                self.linkicc_bin,
                "-o",
                str(profile_path),
                f"-k{ceiling:g}",
                "-d",
                f"CMYK with {ceiling:g}% TAC limit",
                str(cmyk),
                str(cmyk),
            ],
            timeout_seconds=self.timeout_seconds,
        )
        require_ok(res, "linkicc", expect_file=profile_path)
        logger.info("built device-link %s", profile_path)
        return profile_path

    def apply(self, artifact: Path, raster: Path, out_path: Path) -> Path:
        out_path = Path(out_path)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        res = run_cmd(
            [self.tificc_bin, "-l", str(artifact), str(raster), str(out_path)],
            timeout_seconds=self.timeout_seconds,
        )
        require_ok(res, "tificc", expect_file=out_path)
        return out_path
