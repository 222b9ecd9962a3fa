import tempfile
import unittest
from pathlib import Path
from typing import Dict, Optional

from press_compliance.domain import (
    DEFAULT_PROFILE,
    InkCoverageReport,
    MeasurementUnavailable,
    PageInkSample,
    PipelineUnavailable,
)
from pipeline.backends import BackendInfo
from pipeline.execution import model as m
from pipeline.execution.backend_run import BackendRunContext, run_backend
from pipeline.layout import ProjectPaths
from pipeline.remediation import RemediationResult
from tools.core_cmd import ToolFailure


def report(source: Path, tac: float) -> InkCoverageReport:
    q = tac / 4
    return InkCoverageReport.build(str(source), [PageInkSample(1, q, q, q, q)], DEFAULT_PROFILE)


class FakeBuilder:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail

    def build(self, source: Path, output: Path) -> Path:
        if self.fail:
            raise ToolFailure("pagedjs-cli", "chromium crashed", exit_code=1)
        Path(output).write_text("raw", encoding="utf-8")
        return Path(output)


class FakeNativeBuilder(FakeBuilder):
    def __init__(self, native_fails: bool = False) -> None:
        super().__init__()
        self.native_fails = native_fails

    def print_intent(self, *, dpi: int = 300):
        parent = self

        class _Native:
            def build(self, source: Path, output: Path) -> Path:
                if parent.native_fails:
                    raise ToolFailure("weasyprint", "pdf/x variant unsupported")
                Path(output).write_text("native-pdfx", encoding="utf-8")
                return Path(output)

        return _Native()


class FakeConverter:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls = 0

    def convert(self, document: Path, output: Path, *, title: str = "") -> Path:
        self.calls += 1
        if self.fail:
            raise ToolFailure("gs pdfwrite", "bad input")
        Path(output).write_text(f"pdfx:{title}", encoding="utf-8")
        return Path(output)


class FakeMeasurer:
    def __init__(self, tacs: Dict[str, float]) -> None:
        self.tacs = tacs

    def measure(self, document: Path) -> InkCoverageReport:
        tac = self.tacs.get(Path(document).name)
        if tac is None:
            raise MeasurementUnavailable(str(document), "gs inkcov failed")
        return report(Path(document), tac)


class FakeRemediation:
    def __init__(self, after_tac: Optional[float] = 238.0, error: Optional[Exception] = None) -> None:
        self.after_tac = after_tac
        self.error = error
        self.calls = 0

    def remediate(self, document, output, *, ceiling, dpi, verify, keep_temp) -> RemediationResult:
        self.calls += 1
        if self.error is not None:
            raise self.error
        Path(output).write_text("rasterized", encoding="utf-8")
        return RemediationResult(
            input_path=Path(document),
            output_path=Path(output),
            ceiling=ceiling,
            dpi=dpi,
            page_count=1,
            before=report(Path(document), 300.0),
            after=report(Path(output), self.after_tac) if self.after_tac is not None and verify else None,
        )


ALPHA = BackendInfo(key="alpha", label="Alpha", builder_factory=lambda p, t: FakeBuilder())
NATIVE = BackendInfo(key="native", label="Native", builder_factory=lambda p, t: None, native_print_intent=True)


class TestBackendRun(unittest.TestCase):
    def setUp(self) -> None:
        self._td = tempfile.TemporaryDirectory()
        self.root = Path(self._td.name)
        self.source = self.root / "book.html"
        self.source.write_text("<html></html>", encoding="utf-8")
        self.paths = ProjectPaths(self.root / "out").ensure()

    def tearDown(self) -> None:
        self._td.cleanup()

    def ctx(self, measurer, remediation=None, converter=None, **kw) -> BackendRunContext:
        return BackendRunContext(
            profile=DEFAULT_PROFILE,
            measurer=measurer,
            remediation=remediation or FakeRemediation(),
            converter=converter or FakeConverter(),
            project_label="demo",
            **kw,
        )

    def test_over_limit_is_remediated_and_becomes_compliant(self) -> None:
        remediation = FakeRemediation(after_tac=238.0)
        ctx = self.ctx(FakeMeasurer({"alpha-pdfx.pdf": 300.0}), remediation)
        r = run_backend(ALPHA, FakeBuilder(), self.source, self.paths, ctx)

        self.assertEqual(m.COMPLIANT, r.state)
        self.assertEqual(
            [
                m.PENDING, m.BUILDING, m.BUILT, m.CONVERTING, m.CONVERTED, m.MEASURING,
                m.MEASURED, m.REMEDIATING, m.REMEDIATED, m.COMPLIANT,
            ],
            r.history,
        )
        self.assertEqual(1, remediation.calls)
        self.assertEqual(self.paths.final_pdf("alpha", 240), r.final_path)
        self.assertTrue(r.produced_artifact)
        self.assertFalse(r.font_preservation)
        self.assertAlmostEqual(238.0, r.final_report.max_tac)

    def test_warn_band_is_not_remediated(self) -> None:
        remediation = FakeRemediation()
        ctx = self.ctx(FakeMeasurer({"alpha-pdfx.pdf": 230.0}), remediation)
        r = run_backend(ALPHA, FakeBuilder(), self.source, self.paths, ctx)

        self.assertEqual(m.COMPLIANT, r.state)
        self.assertIn(m.SKIPPED_REMEDIATION, r.history)
        self.assertEqual(0, remediation.calls)
        self.assertTrue(r.font_preservation)
        # Final artifact is a copy of the print-intent document.
        self.assertEqual(
            self.paths.pdfx_pdf("alpha").read_text(encoding="utf-8"),
            r.final_path.read_text(encoding="utf-8"),
        )

    def test_unknown_measurement_is_non_compliant_without_remediation(self) -> None:
        remediation = FakeRemediation()
        r = run_backend(ALPHA, FakeBuilder(), self.source, self.paths, self.ctx(FakeMeasurer({}), remediation))

        self.assertEqual(m.NON_COMPLIANT, r.state)
        self.assertIn(m.MEASUREMENT_UNKNOWN, r.history)
        self.assertEqual(0, remediation.calls)
        self.assertEqual(self.paths.pdfx_pdf("alpha"), r.final_path)
        self.assertEqual("ink coverage could not be measured", r.stopped_at)

    def test_build_failure_is_recorded(self) -> None:
        converter = FakeConverter()
        r = run_backend(ALPHA, FakeBuilder(fail=True), self.source, self.paths, self.ctx(FakeMeasurer({}), converter=converter))

        self.assertEqual(m.BUILD_FAILED, r.state)
        self.assertTrue(r.terminal)
        self.assertIn("chromium crashed", r.stopped_at)
        self.assertEqual(0, converter.calls)
        self.assertFalse(r.produced_artifact)

    def test_convert_failure_is_recorded(self) -> None:
        ctx = self.ctx(FakeMeasurer({}), converter=FakeConverter(fail=True))
        r = run_backend(ALPHA, FakeBuilder(), self.source, self.paths, ctx)

        self.assertEqual(m.CONVERT_FAILED, r.state)
        self.assertTrue(r.stopped_at.startswith("convert failed"))
        self.assertTrue(self.paths.raw_pdf("alpha").exists())

    def test_remediation_failure_keeps_print_intent_document(self) -> None:
        remediation = FakeRemediation(error=PipelineUnavailable(["ghostscript"]))
        ctx = self.ctx(FakeMeasurer({"alpha-pdfx.pdf": 300.0}), remediation)
        r = run_backend(ALPHA, FakeBuilder(), self.source, self.paths, ctx)

        self.assertEqual(m.NON_COMPLIANT, r.state)
        self.assertIn(m.REMEDIATION_FAILED, r.history)
        self.assertEqual(self.paths.pdfx_pdf("alpha"), r.final_path)
        self.assertIn("Missing dependencies", r.stopped_at)

    def test_remediated_output_still_over_limit_is_non_compliant(self) -> None:
        ctx = self.ctx(FakeMeasurer({"alpha-pdfx.pdf": 300.0}), FakeRemediation(after_tac=255.0))
        r = run_backend(ALPHA, FakeBuilder(), self.source, self.paths, ctx)
        self.assertEqual(m.NON_COMPLIANT, r.state)
        self.assertEqual("non-compliant: max TAC 255.0%", r.stopped_at)

    def test_unexpected_remediation_error_is_recorded_on_that_stage(self) -> None:
        ctx = self.ctx(FakeMeasurer({"alpha-pdfx.pdf": 300.0}), FakeRemediation(error=RuntimeError("worker crashed")))
        r = run_backend(ALPHA, FakeBuilder(), self.source, self.paths, ctx)

        self.assertEqual(m.NON_COMPLIANT, r.state)
        self.assertEqual([m.REMEDIATING, m.REMEDIATION_FAILED, m.NON_COMPLIANT], r.history[-3:])
        self.assertEqual("RuntimeError: worker crashed", r.error)
        self.assertEqual("remediation failed: RuntimeError: worker crashed", r.stopped_at)
        self.assertEqual(self.paths.pdfx_pdf("alpha"), r.final_path)
        self.assertTrue(r.produced_artifact)
        self.assertIsNotNone(r.before)

    def test_unexpected_measure_error_keeps_converted_document(self) -> None:
        class BrokenMeasurer:
            def measure(self, document):
                raise KeyError("C")

        r = run_backend(ALPHA, FakeBuilder(), self.source, self.paths, self.ctx(BrokenMeasurer()))

        self.assertEqual(m.NON_COMPLIANT, r.state)
        self.assertNotIn(m.BUILD_FAILED, r.history)
        self.assertIn(m.MEASUREMENT_UNKNOWN, r.history)
        self.assertIn("KeyError", r.error)
        self.assertEqual(self.paths.pdfx_pdf("alpha"), r.final_path)

    def test_unverified_remediation_is_still_measured(self) -> None:
        measurer = FakeMeasurer({"alpha-pdfx.pdf": 300.0, "alpha-pdfx-tac240.pdf": 236.0})
        r = run_backend(ALPHA, FakeBuilder(), self.source, self.paths, self.ctx(measurer, verify=False))

        self.assertIsNone(r.remediation.after)
        self.assertIsNotNone(r.after)
        self.assertAlmostEqual(236.0, r.after.max_tac)
        self.assertEqual(m.COMPLIANT, r.state)

    def test_unverified_remediation_that_cannot_be_measured(self) -> None:
        r = run_backend(
            ALPHA, FakeBuilder(), self.source, self.paths, self.ctx(FakeMeasurer({"alpha-pdfx.pdf": 300.0}), verify=False)
        )

        self.assertIsNone(r.after)
        self.assertEqual(m.NON_COMPLIANT, r.state)
        self.assertTrue(any("alpha-pdfx-tac240.pdf" in w for w in r.warnings))

    def test_skip_convert_measures_raw_output(self) -> None:
        converter = FakeConverter()
        ctx = self.ctx(FakeMeasurer({"alpha-output.pdf": 150.0}), converter=converter, skip_convert=True)
        r = run_backend(ALPHA, FakeBuilder(), self.source, self.paths, ctx)

        self.assertEqual(m.COMPLIANT, r.state)
        self.assertEqual(0, converter.calls)
        self.assertEqual(self.paths.final_pdf("alpha", 240), r.final_path)

    def test_native_print_intent_skips_ghostscript(self) -> None:
        converter = FakeConverter()
        ctx = self.ctx(FakeMeasurer({"native-pdfx.pdf": 120.0}), converter=converter)
        r = run_backend(NATIVE, FakeNativeBuilder(), self.source, self.paths, ctx)

        self.assertEqual(m.COMPLIANT, r.state)
        self.assertEqual(0, converter.calls)
        self.assertEqual("native-pdfx", self.paths.pdfx_pdf("native").read_text(encoding="utf-8"))

    def test_native_failure_falls_back_to_ghostscript(self) -> None:
        converter = FakeConverter()
        ctx = self.ctx(FakeMeasurer({"native-pdfx.pdf": 120.0}), converter=converter)
        r = run_backend(NATIVE, FakeNativeBuilder(native_fails=True), self.source, self.paths, ctx)

        self.assertEqual(m.COMPLIANT, r.state)
        self.assertEqual(1, converter.calls)
        self.assertTrue(any("falling back" in w for w in r.warnings))
        self.assertEqual("pdfx:Native - demo", self.paths.pdfx_pdf("native").read_text(encoding="utf-8"))


class TestStateMachine(unittest.TestCase):
    def test_illegal_transition_raises(self) -> None:
        r = m.BackendRunResult(backend="alpha")
        with self.assertRaises(ValueError):
            r.advance(m.MEASURING)

    def test_terminal_states_stamp_finish_time(self) -> None:
        r = m.BackendRunResult(backend="alpha")
        r.advance(m.SKIPPED)
        self.assertTrue(r.skipped)
        self.assertIsNotNone(r.finished)
        with self.assertRaises(ValueError):
            r.advance(m.BUILDING)

    def test_remediation_failure_can_only_end_non_compliant(self) -> None:
        self.assertEqual(frozenset({m.NON_COMPLIANT}), m.TRANSITIONS[m.REMEDIATION_FAILED])
        self.assertEqual(frozenset({m.NON_COMPLIANT}), m.TRANSITIONS[m.MEASUREMENT_UNKNOWN])


if __name__ == "__main__":
    unittest.main()
