"""tools/renderers.py

Command-line adapters for the HTML/CSS -> PDF rendering backends.

The pipeline treats every renderer as a black box: it hands over an HTML
entry document and an output path and only checks that a readable PDF came
back. Anything renderer-specific (flags, sandbox arguments, timeout units)
stays in this module.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from tools.core_cmd import ToolFailure, require_ok, run_cmd

logger = logging.getLogger(__name__)

DEFAULT_BUILD_TIMEOUT_SECONDS = 120

SANDBOX_ARGS = "--no-sandbox,--disable-setuid-sandbox"


class _CliRenderer:
    name = "renderer"

    def __init__(self, *, timeout_seconds: float = DEFAULT_BUILD_TIMEOUT_SECONDS) -> None:
        self.timeout_seconds = timeout_seconds

    def command(self, source: Path, output: Path) -> List[str]:
        raise NotImplementedError

    def build(self, source: Path, output: Path) -> Path:
        source = Path(source)
        output = Path(output)
        if not source.exists():
            raise ToolFailure(self.name, f"Input file not found: {source}")
        output.parent.mkdir(parents=True, exist_ok=True)
        if output.exists():
            output.unlink()

        cmd = self.command(source, output)
        # Renderer gets its own timeout; allow a little slack for process start-up.
        res = run_cmd(cmd, cwd=source.parent, timeout_seconds=self.timeout_seconds + 30)
        require_ok(res, self.name, expect_file=output)
        if output.stat().st_size == 0:
            raise ToolFailure(self.name, f"empty output: {output}")
        logger.info("%s built %s (%.1f KB)", self.name, output.name, output.stat().st_size / 1024)
        return output


class PagedJSBuilder(_CliRenderer):
    name = "pagedjs-cli"

    def command(self, source: Path, output: Path) -> List[str]:
        # Page size comes from the CSS @page rule; pagedjs -w/-h fight it.
        return [
            "npx",
            "pagedjs-cli",
            str(source),
            "-o",
            str(output),
            "--timeout",
            str(int(self.timeout_seconds * 1000)),
            "--browserArgs",
            SANDBOX_ARGS,
        ]


class VivliostyleBuilder(_CliRenderer):
    name = "vivliostyle"

    def __init__(self, *, size: Optional[str] = None, **kw) -> None:
        super().__init__(**kw)
        self.size = size

    def command(self, source: Path, output: Path) -> List[str]:
        cmd = [
            "npx",
            "@vivliostyle/cli",
            "build",
            str(source),
            "-o",
            str(output),
            "--timeout",
            str(int(self.timeout_seconds)),
            "--log-level",
            "info",
        ]
        if self.size:
            cmd += ["--size", self.size]
        cmd += ["--browser-arg=--no-sandbox", "--browser-arg=--disable-setuid-sandbox"]
        return cmd


class WeasyPrintBuilder(_CliRenderer):
    """WeasyPrint, optionally producing a PDF/X variant natively.

    PDF/X-3 keeps embedded fonts; PDF/X-1a would outline them.
    """

    name = "weasyprint"

    def __init__(
        self,
        *,
        media_type: str = "print",
        pdf_variant: Optional[str] = None,
        dpi: Optional[int] = None,
        **kw,
    ) -> None:
        super().__init__(**kw)
        self.media_type = media_type
        self.pdf_variant = pdf_variant
        self.dpi = dpi

    def command(self, source: Path, output: Path) -> List[str]:
        cmd = ["weasyprint", "--media-type", self.media_type, "--base-url", str(source.parent)]
        if self.pdf_variant:
            cmd += ["--pdf-variant", self.pdf_variant, "--optimize-images", "--full-fonts"]
            if self.dpi:
                cmd += ["--dpi", str(int(self.dpi))]
        cmd += [str(source), str(output)]
        return cmd

    def print_intent(self, *, dpi: int = 300) -> "WeasyPrintBuilder":
        """Same renderer configured to emit PDF/X-3 directly."""
        return WeasyPrintBuilder(
            media_type=self.media_type,
            pdf_variant="pdf/x-3",
            dpi=dpi,
            timeout_seconds=self.timeout_seconds,
        )
