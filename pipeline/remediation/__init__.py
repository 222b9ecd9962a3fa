"""pipeline.remediation

Destructive TAC limiting: rasterize -> remap -> reassemble, page-parallel.

Public surface:

* :class:`RemediationPipeline` - run one remediation pass over a document.
* :class:`RemediationToolchain` - the collaborators it needs.
* :class:`RemediationProfileCache` - process-wide device-link cache.
"""

from __future__ import annotations

from .model import PageOutcome, RemediationResult
from .profile_cache import DEFAULT_PROFILE_CACHE, RemediationProfileCache
from .runner import RemediationPipeline, default_output_path
from .toolchain import RemediationToolchain

__all__ = [
    "DEFAULT_PROFILE_CACHE",
    "PageOutcome",
    "RemediationPipeline",
    "RemediationProfileCache",
    "RemediationResult",
    "RemediationToolchain",
    "default_output_path",
]
