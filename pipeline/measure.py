"""pipeline.measure

Ink coverage measurement: channel reporter output -> :class:`InkCoverageReport`.

The measurer owns the unit conversion (fractions -> percent) and the
classification against the :class:`ComplianceProfile`. The reporter is any
object with ``report(document) -> [(c, m, y, k), ...]`` in ``[0, 1]``;
production uses Ghostscript's ``inkcov`` device, tests use a scripted fake.

An unavailable measurement is *unknown*, never zero. Callers must not treat
``MeasurementUnavailable`` as "compliant" or as "needs remediation".
"""

from __future__ import annotations

import logging
from pathlib import Path

from press_compliance.domain import (
    ComplianceProfile,
    InkCoverageReport,
    MeasurementUnavailable,
    PageInkSample,
)
from tools.core_cmd import ToolFailure

logger = logging.getLogger(__name__)


class InkCoverageMeasurer:
    def __init__(self, reporter, profile: ComplianceProfile) -> None:
        self.reporter = reporter
        self.profile = profile

    def measure(self, document: Path) -> InkCoverageReport:
        """Measure every page of *document*.

        Raises :class:`MeasurementUnavailable` if the reporter fails or
        reports no pages.
        """
        document = Path(document)
        try:
            channels = list(self.reporter.report(document))
        except (ToolFailure, OSError) as e:
            logger.warning("ink coverage unavailable for %s: %s", document, e)
            raise MeasurementUnavailable(str(document), str(e)) from e

        if not channels:
            raise MeasurementUnavailable(str(document), "reporter returned no pages")

        samples = [
            PageInkSample.from_fractions(i, c, m, y, k)
            for i, (c, m, y, k) in enumerate(channels, start=1)
        ]
        report = InkCoverageReport.build(str(document), samples, self.profile)
        logger.info("%s: max TAC %.1f%% over %d page(s)", document.name, report.max_tac, report.page_count)
        return report
