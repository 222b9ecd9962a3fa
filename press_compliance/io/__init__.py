"""press_compliance.io

Filesystem helpers shared by the pipeline (reports, manifests, summaries).
"""

from __future__ import annotations

from .fs import write_csv_atomic, write_json_atomic, write_text_atomic

__all__ = [
    "write_csv_atomic",
    "write_json_atomic",
    "write_text_atomic",
]
