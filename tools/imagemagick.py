"""tools/imagemagick.py

Pixel difference counts via ImageMagick ``compare -metric AE``.

``compare`` exits 0 when images match, 1 when they differ and 2 on error
(e.g. different dimensions). The absolute-error count is written to stderr,
sometimes followed by a normalized value in parentheses.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Optional

from tools.core_cmd import DEFAULT_TIMEOUT_SECONDS, ToolFailure, run_cmd

AE_RE = re.compile(r"^\s*([\d.]+(?:e[+-]?\d+)?)", re.IGNORECASE)


def parse_ae(stderr: str) -> Optional[int]:
    m = AE_RE.match(stderr or "")
    if not m:
        return None
    return int(float(m.group(1)))


class MagickDiffer:
    def __init__(self, compare_bin: str = "compare", *, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self.compare_bin = compare_bin
        self.timeout_seconds = timeout_seconds

    def diff(self, raster_a: Path, raster_b: Path, diff_out: Optional[Path] = None) -> int:
        """Return the number of differing pixels, or raise ToolFailure."""
        target = str(diff_out) if diff_out else "null:"
        if diff_out:
            Path(diff_out).parent.mkdir(parents=True, exist_ok=True)
        res = run_cmd(
            [self.compare_bin, "-metric", "AE", str(raster_a), str(raster_b), target],
            timeout_seconds=self.timeout_seconds,
        )
        if res.exit_code not in (0, 1):
            detail = res.stderr.strip().splitlines()
            raise ToolFailure("compare", detail[-1] if detail else "compare error", exit_code=res.exit_code)
        pixels = parse_ae(res.stderr)
        if pixels is None:
            raise ToolFailure("compare", f"could not parse pixel count from {res.stderr!r}")
        return pixels
