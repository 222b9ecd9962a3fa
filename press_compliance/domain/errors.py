"""press_compliance.domain.errors

Error taxonomy shared by measurement, remediation and backend runs.

Which errors are fatal?
-----------------------
Almost none. Failures are recovered as close to their cause as possible:

* ``PageTransformFailure`` - one page; the unmodified raster is used instead.
* ``BuildFailure`` / ``ConvertFailure`` - one backend; siblings keep running.
* ``MeasurementUnavailable`` - "unknown"; never remediate blind.
* ``PipelineUnavailable`` - the remediation step only.
* ``ToleranceNotMet`` - a warning carried on the result, never raised past
  the remediation pipeline.

Only :class:`NoUsableArtifact` (no backend produced anything) ends a run.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

INSTALL_HINT = "sudo apt install ghostscript liblcms2-utils poppler-utils && pip install img2pdf"


class PressComplianceError(Exception):
    """Base class for every domain error raised by this repository."""


class BuildFailure(PressComplianceError):
    """A rendering backend did not produce a readable document."""

    def __init__(self, backend: str, detail: str) -> None:
        self.backend = backend
        self.detail = detail
        super().__init__(f"{backend} build failed: {detail}")


class ConvertFailure(PressComplianceError):
    """Print-intent (PDF/X, CMYK) conversion failed."""

    def __init__(self, backend: str, detail: str) -> None:
        self.backend = backend
        self.detail = detail
        super().__init__(f"{backend} convert failed: {detail}")


class MeasurementUnavailable(PressComplianceError):
    """The channel reporter could not produce per-page ink values."""

    def __init__(self, document: str, detail: str) -> None:
        self.document = document
        self.detail = detail
        super().__init__(f"Could not measure ink coverage for {document}: {detail}")


class PipelineUnavailable(PressComplianceError):
    """Remediation tooling is missing. Names every missing piece at once."""

    def __init__(self, missing: Sequence[str]) -> None:
        self.missing = list(missing)
        super().__init__(
            f"Missing dependencies: {', '.join(self.missing)}. Install with: {INSTALL_HINT}"
        )


class PageTransformFailure(PressComplianceError):
    """Color remapping failed for a single page."""

    def __init__(self, page: int, detail: str) -> None:
        self.page = page
        self.detail = detail
        super().__init__(f"Page {page}: color remap failed, using unmodified raster ({detail})")


class ToleranceNotMet(PressComplianceError):
    """Remediated output still exceeds the ceiling beyond tolerance."""

    def __init__(self, after_tac: float, ceiling: float, tolerance: float = 1.0) -> None:
        self.after_tac = after_tac
        self.ceiling = ceiling
        self.tolerance = tolerance
        super().__init__(
            f"TAC still {after_tac:.1f}% after remediation (ceiling {ceiling:g}% + {tolerance:g}%) - may need manual review"
        )


class RemediationFailed(PressComplianceError):
    """Remediation could not produce a complete output document."""

    def __init__(self, detail: str, *, page: Optional[int] = None) -> None:
        self.detail = detail
        self.page = page
        prefix = f"Page {page}: " if page is not None else ""
        super().__init__(f"{prefix}{detail}")


class NoUsableArtifact(PressComplianceError):
    """No backend produced any document for a project."""

    def __init__(self, detail: str, *, results: Optional[Mapping[str, Any]] = None) -> None:
        self.detail = detail
        # backend -> run result, so callers can still explain each failure
        self.results = dict(results or {})
        super().__init__(detail)
