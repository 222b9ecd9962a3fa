import io
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from types import SimpleNamespace

from cli.args.base import skipped_backends
from cli.dispatch import COMMANDS, dispatch
from press_cli import build_parser, cli_overrides
from press_compliance.domain import PipelineUnavailable, RemediationFailed


class FakePipeline:
    def __init__(self, *, deps=None, error=None) -> None:
        self._deps = deps or {}
        self._error = error
        self.config = SimpleNamespace(keep_temp=False)

    def deps(self):
        return dict(self._deps)

    def limit_tac(self, *a, **kw):
        raise self._error


class TestParser(unittest.TestCase):
    def test_every_command_is_dispatchable(self) -> None:
        parser = build_parser()
        choices = parser._subparsers._group_actions[0].choices
        self.assertEqual(set(COMMANDS), set(choices))

    def test_limit_tac_flags(self) -> None:
        args = build_parser().parse_args(
            ["limit-tac", "book.pdf", "--max-tac", "260", "--no-verify", "--keep-temp", "--workers", "4"]
        )
        self.assertEqual("book.pdf", args.input_pdf)
        self.assertIsNone(args.output_pdf)
        self.assertEqual(260.0, args.max_tac)
        self.assertEqual(300, args.dpi)
        self.assertFalse(args.verify)
        self.assertTrue(args.keep_temp)
        self.assertEqual(4, args.workers)

    def test_skip_flags_map_to_backends(self) -> None:
        args = build_parser().parse_args(["run", "--skip-vivliostyle", "--skip-pagedjs", "--skip-compare"])
        self.assertEqual(("pagedjs", "vivliostyle"), skipped_backends(args))
        self.assertTrue(args.skip_compare)
        self.assertFalse(args.skip_convert)

        args = build_parser().parse_args(["run"])
        self.assertIsNone(skipped_backends(args))

    def test_overrides_leave_absent_flags_unset(self) -> None:
        args = build_parser().parse_args(["batch", "--output", "out"])
        overrides = cli_overrides(args)
        self.assertEqual(Path("out"), overrides["output_dir"])
        self.assertIsNone(overrides["input_dir"])
        self.assertIsNone(overrides["skip"])
        self.assertIsNone(overrides["strict"])
        self.assertIsNone(overrides["keep_temp"])

        args = build_parser().parse_args(["batch", "--strict", "--config", "run.yaml"])
        self.assertTrue(cli_overrides(args)["strict"])
        self.assertIsNone(cli_overrides(args)["backends"])
        self.assertEqual("run.yaml", args.config_path)

    def test_backends_flag(self) -> None:
        args = build_parser().parse_args(["run", "--backends", "weasyprint,pagedjs,weasyprint"])
        self.assertEqual(("weasyprint", "pagedjs"), cli_overrides(args)["backends"])

        args = build_parser().parse_args(["run", "--backends", "prince"])
        with self.assertRaises(ValueError):
            cli_overrides(args)


class TestDispatch(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.pdf = Path(self._tmp.name) / "book.pdf"
        self.pdf.write_bytes(b"%PDF-1.4\n")

    def _dispatch(self, argv, pipeline):
        buf = io.StringIO()
        with redirect_stdout(buf):
            code = dispatch(build_parser().parse_args(argv), pipeline)
        return code, buf.getvalue()

    def test_deps_exit_code(self) -> None:
        code, out = self._dispatch(["deps"], FakePipeline(deps={"ghostscript": True, "img2pdf": False}))
        self.assertEqual(1, code)
        self.assertIn("❌ img2pdf", out)

        code, _ = self._dispatch(["deps"], FakePipeline(deps={"ghostscript": True}))
        self.assertEqual(0, code)

    def test_missing_tools_exit_three(self) -> None:
        pipeline = FakePipeline(error=PipelineUnavailable(["ghostscript"]))
        code, out = self._dispatch(["limit-tac", str(self.pdf)], pipeline)
        self.assertEqual(3, code)
        self.assertIn("Missing dependencies: ghostscript", out)

    def test_domain_failure_exit_one(self) -> None:
        pipeline = FakePipeline(error=RemediationFailed("rasterize failed", page=2))
        code, out = self._dispatch(["limit-tac", str(self.pdf)], pipeline)
        self.assertEqual(1, code)
        self.assertIn("Page 2: rasterize failed", out)

    def test_missing_input_exit_two(self) -> None:
        code, out = self._dispatch(["check-tac", "/no/such/book.pdf"], FakePipeline())
        self.assertEqual(2, code)
        self.assertIn("File not found", out)


if __name__ == "__main__":
    unittest.main()
