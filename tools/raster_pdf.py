"""tools/raster_pdf.py

Wrap a single raster page back into a one-page PDF with ``img2pdf``.

The ``img2pdf`` command-line tool is used rather than its Python API so that
the remediation stages all share the same subprocess/timeout behavior.
"""

from __future__ import annotations

from pathlib import Path

from tools.core_cmd import DEFAULT_TIMEOUT_SECONDS, require_ok, run_cmd


class Img2PdfWrapper:
    def __init__(self, img2pdf_bin: str = "img2pdf", *, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self.img2pdf_bin = img2pdf_bin
        self.timeout_seconds = timeout_seconds

    def wrap(self, raster: Path, out_path: Path) -> Path:
        out_path = Path(out_path)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        res = run_cmd(
            [self.img2pdf_bin, str(raster), "-o", str(out_path)],
            timeout_seconds=self.timeout_seconds,
        )
        require_ok(res, "img2pdf", expect_file=out_path)
        return out_path
