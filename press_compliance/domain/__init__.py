"""press_compliance.domain

Domain objects that form the *contract* between pipeline stages.

Key idea
--------
External tools report raw numbers in tool-specific formats (Ghostscript
``inkcov`` lines, ``pdfinfo`` key/value pairs). The pipeline turns those into
tool-agnostic types so that policy, ranking and reporting never need to know
tool quirks.
"""

from __future__ import annotations

from .errors import (
    BuildFailure,
    ConvertFailure,
    MeasurementUnavailable,
    NoUsableArtifact,
    PageTransformFailure,
    PipelineUnavailable,
    PressComplianceError,
    RemediationFailed,
    ToleranceNotMet,
)
from .ink import (
    STATUS_FAIL,
    STATUS_PASS,
    STATUS_WARN,
    ClassifiedPage,
    InkCoverageReport,
    PageInkSample,
    classify_tac,
    page_recommendation,
)
from .profile import DEFAULT_PROFILE, ComplianceProfile

__all__ = [
    "BuildFailure",
    "ClassifiedPage",
    "ComplianceProfile",
    "ConvertFailure",
    "DEFAULT_PROFILE",
    "InkCoverageReport",
    "MeasurementUnavailable",
    "NoUsableArtifact",
    "PageInkSample",
    "PageTransformFailure",
    "PipelineUnavailable",
    "PressComplianceError",
    "RemediationFailed",
    "STATUS_FAIL",
    "STATUS_PASS",
    "STATUS_WARN",
    "ToleranceNotMet",
    "classify_tac",
    "page_recommendation",
]
