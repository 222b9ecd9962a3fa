import unittest

from press_compliance.domain import (
    DEFAULT_PROFILE,
    STATUS_FAIL,
    STATUS_PASS,
    STATUS_WARN,
    ComplianceProfile,
    InkCoverageReport,
    PageInkSample,
    classify_tac,
)
from press_compliance.domain.ink import REC_LOWER_TAC_PROFILE, REC_PURE_BLACK, REC_REDUCE_SATURATION


def sample_with_tac(page: int, tac: float) -> PageInkSample:
    # Spread evenly over the four channels.
    q = tac / 4.0
    return PageInkSample(page=page, cyan=q, magenta=q, yellow=q, key=q)


class TestPageInkSample(unittest.TestCase):
    def test_tac_is_sum_of_channels(self) -> None:
        s = PageInkSample(page=1, cyan=10, magenta=20, yellow=30, key=40)
        self.assertAlmostEqual(100.0, s.tac)

    def test_channels_are_clamped_to_percent_range(self) -> None:
        s = PageInkSample(page=1, cyan=120, magenta=-5, yellow=50, key=100)
        self.assertEqual(100.0, s.cyan)
        self.assertEqual(0.0, s.magenta)
        self.assertLessEqual(s.tac, 400.0)

    def test_from_fractions_converts_to_percent(self) -> None:
        s = PageInkSample.from_fractions(3, 0.5, 0.25, 0.0, 1.0)
        self.assertEqual(3, s.page)
        self.assertAlmostEqual(175.0, s.tac)

    def test_page_index_is_one_based(self) -> None:
        with self.assertRaises(ValueError):
            PageInkSample(page=0, cyan=0, magenta=0, yellow=0, key=0)


class TestClassification(unittest.TestCase):
    def test_threshold_boundaries(self) -> None:
        p = DEFAULT_PROFILE
        self.assertEqual(STATUS_PASS, classify_tac(200.0, p))
        self.assertEqual(STATUS_WARN, classify_tac(200.01, p))
        self.assertEqual(STATUS_WARN, classify_tac(240.0, p))
        self.assertEqual(STATUS_FAIL, classify_tac(240.01, p))

    def test_rich_black_recommendation(self) -> None:
        s = PageInkSample(page=1, cyan=40, magenta=35, yellow=35, key=95)
        self.assertEqual(REC_PURE_BLACK, s.classify(DEFAULT_PROFILE).recommendation)

    def test_rich_black_over_fail_limit_gets_every_advice(self) -> None:
        s = PageInkSample(page=1, cyan=60, magenta=50, yellow=50, key=95)
        self.assertEqual(
            f"{REC_PURE_BLACK}; {REC_LOWER_TAC_PROFILE}",
            s.classify(DEFAULT_PROFILE).recommendation,
        )

    def test_saturated_page_over_fail_limit(self) -> None:
        s = PageInkSample(page=1, cyan=95, magenta=90, yellow=85, key=10)
        self.assertEqual(
            f"{REC_REDUCE_SATURATION}; {REC_LOWER_TAC_PROFILE}",
            s.classify(DEFAULT_PROFILE).recommendation,
        )

    def test_saturation_recommendation(self) -> None:
        s = PageInkSample(page=1, cyan=90, magenta=80, yellow=70, key=0)
        self.assertEqual(REC_REDUCE_SATURATION, s.classify(DEFAULT_PROFILE).recommendation)

    def test_light_page_has_no_recommendation(self) -> None:
        s = PageInkSample(page=1, cyan=10, magenta=10, yellow=10, key=10)
        self.assertIsNone(s.classify(DEFAULT_PROFILE).recommendation)


class TestInkCoverageReport(unittest.TestCase):
    def test_mixed_document_aggregates(self) -> None:
        samples = [sample_with_tac(1, 180), sample_with_tac(2, 220), sample_with_tac(3, 260)]
        report = InkCoverageReport.build("book.pdf", samples, DEFAULT_PROFILE)

        self.assertEqual(3, report.page_count)
        self.assertAlmostEqual(260.0, report.max_tac)
        self.assertAlmostEqual(220.0, report.average_tac)
        self.assertEqual((3,), report.fail_pages)
        self.assertEqual((2,), report.warn_pages)
        self.assertFalse(report.passed)
        self.assertEqual(3, report.max_tac_page)
        self.assertTrue(report.summary.startswith("Failed: 1 page(s)"))
        self.assertTrue(any("pages: 3" in r for r in report.recommendations))

    def test_warn_only_document_passes(self) -> None:
        report = InkCoverageReport.build("a.pdf", [sample_with_tac(1, 230)], DEFAULT_PROFILE)
        self.assertTrue(report.passed)
        self.assertEqual((1,), report.warn_pages)
        self.assertTrue(report.summary.startswith("Passed (with warnings)"))

    def test_clean_document_summary(self) -> None:
        report = InkCoverageReport.build("a.pdf", [sample_with_tac(1, 120)], DEFAULT_PROFILE)
        self.assertTrue(report.passed)
        self.assertEqual((), report.recommendations)
        self.assertEqual("Passed: All pages <=200% TAC (max: 120.0%)", report.summary)

    def test_extreme_tac_adds_advice(self) -> None:
        report = InkCoverageReport.build("a.pdf", [sample_with_tac(1, 320)], DEFAULT_PROFILE)
        self.assertTrue(any("Extremely high TAC" in r for r in report.recommendations))

    def test_to_dict_lists_pages(self) -> None:
        report = InkCoverageReport.build("a.pdf", [sample_with_tac(1, 100), sample_with_tac(2, 300)], DEFAULT_PROFILE)
        d = report.to_dict()
        self.assertEqual([2], d["fail_pages"])
        self.assertEqual(["pass", "fail"], [p["status"] for p in d["pages"]])


class TestComplianceProfile(unittest.TestCase):
    def test_final_size_includes_bleed(self) -> None:
        p = ComplianceProfile(trim_width=6, trim_height=9, bleed=0.125)
        self.assertAlmostEqual(6.25, p.final_width)
        self.assertAlmostEqual(9.25, p.final_height)
        self.assertEqual("6.25in,9.25in", p.vivliostyle_size)

    def test_rejects_out_of_range_thresholds(self) -> None:
        with self.assertRaises(ValueError):
            ComplianceProfile(tac_fail=450)
        with self.assertRaises(ValueError):
            ComplianceProfile(tac_pass=250, tac_warn=240)

    def test_from_dict_rejects_unknown_keys(self) -> None:
        with self.assertRaises(ValueError):
            ComplianceProfile.from_dict({"tac_limit": 300})

    def test_from_dict_overrides_and_keeps_defaults(self) -> None:
        p = ComplianceProfile.from_dict({"tac_fail": "260", "pdf_versions": ["1.3"]})
        self.assertEqual(260.0, p.tac_fail)
        self.assertEqual(("1.3",), p.pdf_versions)
        self.assertEqual(DEFAULT_PROFILE.trim_width, p.trim_width)


if __name__ == "__main__":
    unittest.main()
