import tempfile
import unittest
from pathlib import Path

from press_compliance.domain import DEFAULT_PROFILE, InkCoverageReport, PageInkSample
from pipeline.comparison import (
    PdfInfo,
    ValidationCheck,
    ValidationResult,
    compare_features,
    diff_pages,
    lower_is_better,
    rank,
    recommendations,
    run_checks,
    score,
)
from pipeline.comparison.engine import REC_ALL_GOOD
from pipeline.comparison.features import _size_same, _tac_same
from pipeline.comparison.inspect import detect_color_space
from tools.core_cmd import ToolFailure
from tools.poppler import DocumentFacts, FontInfo


def ink(tac: float) -> InkCoverageReport:
    q = tac / 4
    return InkCoverageReport.build("doc.pdf", [PageInkSample(1, q, q, q, q)], DEFAULT_PROFILE)


def info(name: str = "a.pdf", *, tac: float = 200.0, size: int = 100_000, **kw) -> PdfInfo:
    base = dict(
        filename=name,
        filepath=Path(name),
        file_size=size,
        page_count=10,
        page_width=6.25,
        page_height=9.25,
        pdf_version="1.4",
        fonts=(FontInfo("ABCDEF+Georgia", "TrueType", "WinAnsi", True, True),),
        color_space="CMYK",
        ink=ink(tac),
    )
    base.update(kw)
    return PdfInfo(**base)


def row(rows, feature):
    return next(r for r in rows if r.feature == feature)


class TestLowerIsBetter(unittest.TestCase):
    def test_tac_spread_under_five_points_is_same(self) -> None:
        self.assertEqual("same", lower_is_better({"a": 236.0, "b": 239.9}, _tac_same))

    def test_tac_spread_of_five_points_names_unique_minimum(self) -> None:
        self.assertEqual("a-better", lower_is_better({"a": 230.0, "b": 235.0}, _tac_same))

    def test_shared_minimum_is_different(self) -> None:
        self.assertEqual("different", lower_is_better({"a": 200.0, "b": 200.0, "c": 260.0}, _tac_same))

    def test_unknown_value_is_different(self) -> None:
        self.assertEqual("different", lower_is_better({"a": 200.0, "b": None}, _tac_same))

    def test_size_uses_relative_spread(self) -> None:
        self.assertEqual("same", lower_is_better({"a": 1000.0, "b": 1040.0}, _size_same))
        self.assertEqual("b-better", lower_is_better({"a": 1100.0, "b": 1000.0}, _size_same))


class TestCompareFeatures(unittest.TestCase):
    def test_rows_for_two_backends(self) -> None:
        rows = compare_features(
            {"pagedjs": info(tac=238.0, size=200_000), "weasyprint": info(tac=180.0, size=100_000)},
            DEFAULT_PROFILE,
        )
        self.assertEqual(
            ["Page Dimensions", "Page Count", "Color Space", "Fonts Embedded", "Max Ink (TAC)", "File Size", "PDF Version"],
            [r.feature for r in rows],
        )
        self.assertEqual("same", row(rows, "Page Dimensions").verdict)
        self.assertEqual("weasyprint-better", row(rows, "Max Ink (TAC)").verdict)
        self.assertEqual("weasyprint-better", row(rows, "File Size").verdict)
        self.assertEqual("238.0%", row(rows, "Max Ink (TAC)").values["pagedjs"])

    def test_three_backends_and_missing_info(self) -> None:
        rows = compare_features(
            {"pagedjs": info(), "vivliostyle": None, "weasyprint": info()},
            DEFAULT_PROFILE,
        )
        self.assertEqual("N/A", row(rows, "Page Count").values["vivliostyle"])
        self.assertEqual("different", row(rows, "Page Count").verdict)
        self.assertEqual("different", row(rows, "Page Dimensions").verdict)

    def test_page_count_mismatch(self) -> None:
        rows = compare_features({"a": info(page_count=10), "b": info(page_count=11)}, DEFAULT_PROFILE)
        self.assertEqual("different", row(rows, "Page Count").verdict)


class TestValidationChecks(unittest.TestCase):
    def test_compliant_document_passes_all_seven(self) -> None:
        result = run_checks(info(), DEFAULT_PROFILE)
        self.assertTrue(result.valid)
        self.assertEqual(7, len(result.checks))
        self.assertEqual(7, result.passed_checks)
        self.assertTrue(all(c.severity == "info" for c in result.checks))

    def test_wrong_size_and_unembedded_fonts_are_errors(self) -> None:
        result = run_checks(
            info(
                page_width=8.5,
                page_height=11.0,
                fonts=(FontInfo("Helvetica", "Type 1", "Standard", False, False),),
            ),
            DEFAULT_PROFILE,
        )
        self.assertFalse(result.valid)
        self.assertTrue(any("Page dimensions" in e for e in result.errors))
        self.assertTrue(any("Helvetica" in e for e in result.errors))

    def test_dimensions_within_tolerance(self) -> None:
        # 2% of 6.25" is 0.125".
        self.assertTrue(run_checks(info(page_width=6.3), DEFAULT_PROFILE).valid)

    def test_high_tac_is_a_warning_only(self) -> None:
        result = run_checks(info(tac=280.0), DEFAULT_PROFILE)
        self.assertTrue(result.valid)
        tac = next(c for c in result.checks if c.name == "Max Ink Coverage (TAC)")
        self.assertFalse(tac.passed)
        self.assertEqual("warning", tac.severity)
        self.assertTrue(result.warnings)

    def test_unknown_ink_fails_tac_check(self) -> None:
        result = run_checks(info(ink=None), DEFAULT_PROFILE)
        tac = next(c for c in result.checks if c.name == "Max Ink Coverage (TAC)")
        self.assertFalse(tac.passed)
        self.assertEqual("unknown", tac.actual)

    def test_encrypted_and_empty_documents_are_invalid(self) -> None:
        self.assertFalse(run_checks(info(encrypted=True), DEFAULT_PROFILE).valid)
        self.assertFalse(run_checks(info(page_count=0), DEFAULT_PROFILE).valid)

    def test_rgb_document_is_invalid(self) -> None:
        self.assertFalse(run_checks(info(color_space="RGB"), DEFAULT_PROFILE).valid)


class TestColorSpaceDetection(unittest.TestCase):
    def test_measured_document_is_cmyk(self) -> None:
        self.assertEqual("CMYK", detect_color_space(DocumentFacts(), True))

    def test_falls_back_to_pdfinfo_text(self) -> None:
        facts = DocumentFacts(raw=(("producer", "Skia/PDF RGB"),))
        self.assertEqual("RGB", detect_color_space(facts, False))
        self.assertEqual("Unknown", detect_color_space(DocumentFacts(), False))


def validation(valid: bool, passed: int, total: int = 7) -> ValidationResult:
    checks = tuple(ValidationCheck(f"c{i}", i < passed, "", "", "info") for i in range(total))
    return ValidationResult("x.pdf", Path("x.pdf"), valid, None, checks)


class TestRanking(unittest.TestCase):
    def test_score_is_capped_and_unrounded(self) -> None:
        self.assertEqual(8.5, score(validation(True, 7)))
        self.assertEqual(3.0, score(validation(False, 6)))
        self.assertEqual(10.0, score(validation(True, 12, total=12)))
        self.assertEqual(0.0, score(None))

    def test_unique_highest_score_wins(self) -> None:
        r = rank({"pagedjs": validation(True, 6), "weasyprint": validation(True, 7)})
        self.assertEqual("weasyprint", r.winner)
        self.assertEqual(("weasyprint", "pagedjs"), r.order)

    def test_shared_top_score_is_a_tie(self) -> None:
        r = rank(
            {
                "pagedjs": validation(True, 7),
                "vivliostyle": validation(False, 3),
                "weasyprint": validation(True, 7),
            }
        )
        self.assertEqual("tie", r.winner)

    def test_fewer_than_two_results_is_inconclusive(self) -> None:
        self.assertEqual("inconclusive", rank({"pagedjs": validation(True, 7)}).winner)
        self.assertEqual("inconclusive", rank({}).winner)
        self.assertEqual("inconclusive", rank({"a": validation(True, 7), "b": None}).winner)


class TestRecommendations(unittest.TestCase):
    def test_clean_outputs_get_fallback_text(self) -> None:
        v = run_checks(info(), DEFAULT_PROFILE)
        self.assertEqual([REC_ALL_GOOD], recommendations({"a": v}, DEFAULT_PROFILE))

    def test_problems_are_each_reported(self) -> None:
        bad = run_checks(
            info(
                tac=300.0,
                page_width=8.5,
                fonts=(FontInfo("Helvetica", "Type 1", "Standard", False, False),),
            ),
            DEFAULT_PROFILE,
        )
        recs = recommendations({"pagedjs": bad}, DEFAULT_PROFILE, {"pagedjs": "PagedJS"})
        self.assertEqual(4, len(recs))
        self.assertTrue(any(r.startswith("PagedJS page dimensions") for r in recs))
        self.assertNotIn(REC_ALL_GOOD, recs)


class FakeDiffer:
    def __init__(self, pixels) -> None:
        self.pixels = list(pixels)

    def diff(self, a, b, out=None) -> int:
        v = self.pixels.pop(0)
        if isinstance(v, Exception):
            raise v
        return v


class TestVisualDiff(unittest.TestCase):
    def test_threshold_failure_and_missing_page(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            pages_a = [Path(td) / f"a-{i}.png" for i in range(1, 5)]
            pages_b = [Path(td) / f"b-{i}.png" for i in range(1, 4)]
            differ = FakeDiffer([100, 101, ToolFailure("compare", "image widths differ", exit_code=2)])
            summary = diff_pages(pages_a, pages_b, differ, Path(td) / "diff")

        self.assertEqual(4, summary.pages_compared)
        self.assertEqual([False, True, True, True], [p.differs for p in summary.per_page])
        self.assertEqual(3, summary.pages_differing)
        self.assertIsNone(summary.per_page[2].pixels)
        self.assertIn("only one document", summary.per_page[3].reason)


if __name__ == "__main__":
    unittest.main()
