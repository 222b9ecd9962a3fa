"""pipeline.reporting

Human-readable renderings (markdown and terminal text). Formatting only:
callers decide where the text goes.
"""

from .batch_md import render_batch_markdown
from .comparison_md import render_comparison_markdown, verdict_text
from .tac_text import render_tac_report

__all__ = [
    "render_batch_markdown",
    "render_comparison_markdown",
    "render_tac_report",
    "verdict_text",
]
