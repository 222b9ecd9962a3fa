"""pipeline.core

Repository-level constants shared by the pipeline layers.
"""

from __future__ import annotations

from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
ENV_PATH = ROOT_DIR / ".env"

# Bundled sample used when the input directory holds no projects.
DEFAULT_TEST_PROJECT = ROOT_DIR / "benchmarks" / "default-test"

HTML_ENTRY_PREFERENCE = ("book.html", "index.html")
