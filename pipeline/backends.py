"""pipeline.backends

Central registry of supported rendering backends.

Why this exists
---------------
Several parts of the pipeline need to agree on the *same* backend facts:
- which backends are supported (validation, CLI choices)
- which backends run by default, and in what order
- human-friendly labels (reports, progress output)
- how to construct the renderer adapter for a given profile
- whether a backend can emit a print-intent (PDF/X) document on its own

This module defines them *once*.

What belongs here
-----------------
Only small, pure construction hooks. Anything that actually runs a renderer
belongs in ``tools/renderers.py``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List

from press_compliance.domain import ComplianceProfile
from tools.renderers import PagedJSBuilder, VivliostyleBuilder, WeasyPrintBuilder


@dataclass(frozen=True)
class BackendInfo:
    """Static metadata describing one rendering backend."""

    key: str
    label: str
    # (profile, timeout_seconds) -> renderer adapter with ``build(source, output)``
    builder_factory: Callable[[ComplianceProfile, float], Any]
    # Backend can write PDF/X itself; Ghostscript conversion is the fallback.
    native_print_intent: bool = False
    default: bool = True


def _pagedjs(profile: ComplianceProfile, timeout: float) -> PagedJSBuilder:
    return PagedJSBuilder(timeout_seconds=timeout)


def _vivliostyle(profile: ComplianceProfile, timeout: float) -> VivliostyleBuilder:
    return VivliostyleBuilder(size=profile.vivliostyle_size, timeout_seconds=timeout)


def _weasyprint(profile: ComplianceProfile, timeout: float) -> WeasyPrintBuilder:
    return WeasyPrintBuilder(media_type="print", timeout_seconds=timeout)


BACKENDS: Dict[str, BackendInfo] = {
    "pagedjs": BackendInfo(key="pagedjs", label="PagedJS", builder_factory=_pagedjs),
    "vivliostyle": BackendInfo(key="vivliostyle", label="Vivliostyle", builder_factory=_vivliostyle),
    "weasyprint": BackendInfo(
        key="weasyprint",
        label="WeasyPrint",
        builder_factory=_weasyprint,
        native_print_intent=True,
    ),
}

SUPPORTED_BACKENDS = frozenset(BACKENDS.keys())
DEFAULT_BACKENDS: List[str] = [k for k, b in BACKENDS.items() if b.default]
DEFAULT_BACKENDS_CSV = ",".join(DEFAULT_BACKENDS)
BACKEND_LABELS: Dict[str, str] = {k: b.label for k, b in BACKENDS.items()}


def backend_label(key: str) -> str:
    return BACKEND_LABELS.get(key, key)


def parse_backends_csv(raw: str | None) -> List[str]:
    """Parse "a,b" into a validated, de-duplicated list (input order kept)."""
    if not raw:
        keys = list(DEFAULT_BACKENDS)
    else:
        keys = [s.strip().lower() for s in raw.split(",") if s.strip()]
    unknown = [k for k in keys if k not in SUPPORTED_BACKENDS]
    if unknown:
        raise ValueError(f"Unknown backend(s): {', '.join(unknown)}. Valid: {sorted(SUPPORTED_BACKENDS)}")
    out: List[str] = []
    for k in keys:
        if k not in out:
            out.append(k)
    return out
