"""press_compliance

Core contracts for the press compliance pipeline.

Why this exists
---------------
The rest of the repository is organized under top-level packages like
``tools`` (external command adapters) and ``pipeline`` (orchestration,
policy and comparison).

This package owns the pieces every other layer agrees on:

* domain types (compliance profile, ink coverage samples and reports)
* the error taxonomy shared by measurement, remediation and backend runs
* atomic filesystem writers for reports and manifests

It must not import ``tools`` or ``pipeline``.
"""

from __future__ import annotations
