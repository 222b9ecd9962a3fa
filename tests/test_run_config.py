import tempfile
import unittest
from pathlib import Path

from pipeline.config import RunConfig, dump_run_config, env_overrides, load_run_config, resolve_config

CONFIG_YAML = """\
profile:
  tac_fail: 260
  trim_width: 6.25
backends: [pagedjs, weasyprint]
skip: [weasyprint]
remediation:
  ceiling: 260
  dpi: 200
  workers: 2
strict: true
tool_timeout_seconds: 30
"""


class TestRunConfig(unittest.TestCase):
    def test_defaults(self) -> None:
        cfg = resolve_config(environ={})
        self.assertEqual(240.0, cfg.ceiling)
        self.assertEqual(("pagedjs", "vivliostyle", "weasyprint"), cfg.backends)
        self.assertEqual((), cfg.skip)
        self.assertEqual("WARNING", cfg.log_level)
        self.assertFalse(cfg.strict)

    def test_env_overrides(self) -> None:
        env = {
            "INPUT_DIR": "/data/in",
            "OUTPUT_DIR": " ",
            "PRESS_LOG_LEVEL": "debug",
            "PRESS_TOOL_TIMEOUT": "45",
            "PRESS_CMYK_PROFILE": "/icc/coated.icc",
        }
        out = env_overrides(env)
        self.assertEqual(Path("/data/in"), out["input_dir"])
        self.assertNotIn("output_dir", out)
        self.assertEqual("DEBUG", out["log_level"])
        self.assertEqual(45.0, out["tool_timeout_seconds"])
        self.assertEqual(Path("/icc/coated.icc"), out["cmyk_profile"])

    def test_bad_env_timeout(self) -> None:
        with self.assertRaises(ValueError):
            env_overrides({"PRESS_TOOL_TIMEOUT": "soon"})

    def test_precedence_cli_over_yaml_over_env(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "run.yaml"
            path.write_text(CONFIG_YAML, encoding="utf-8")

            cfg = resolve_config(
                {"skip": None, "strict": None, "workers": 8, "output_dir": Path(td) / "out"},
                config_path=path,
                environ={"PRESS_TOOL_TIMEOUT": "90", "OUTPUT_DIR": "/env/out"},
            )

            self.assertEqual(30.0, cfg.tool_timeout_seconds)
            self.assertEqual(Path(td) / "out", cfg.output_dir)
            self.assertEqual(8, cfg.workers)
            self.assertEqual(("weasyprint",), cfg.skip)
            self.assertTrue(cfg.strict)
            self.assertEqual(260.0, cfg.profile.tac_fail)
            self.assertEqual(6.25, cfg.profile.trim_width)
            self.assertEqual(200.0, cfg.profile.tac_pass)
            self.assertEqual(200, cfg.dpi)

    def test_unknown_keys_rejected(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "run.yaml"
            path.write_text("backend: [pagedjs]\n", encoding="utf-8")
            with self.assertRaises(ValueError):
                load_run_config(path)

            path.write_text("remediation:\n  dpii: 100\n", encoding="utf-8")
            with self.assertRaises(ValueError):
                load_run_config(path)

            path.write_text("backends: [prince]\n", encoding="utf-8")
            with self.assertRaises(ValueError):
                load_run_config(path)

    def test_missing_config_file(self) -> None:
        with self.assertRaises(FileNotFoundError):
            resolve_config(config_path="/definitely/not/here.yaml", environ={})

    def test_invalid_values(self) -> None:
        with self.assertRaises(ValueError):
            resolve_config({"ceiling": 0.0}, environ={})
        with self.assertRaises(ValueError):
            resolve_config({"workers": -1}, environ={})

    def test_dump_then_load(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            cfg = RunConfig(skip=("vivliostyle",), ceiling=250.0, workers=3, strict=True)
            path = dump_run_config(Path(td) / "nested" / "run.yaml", cfg)

            loaded = load_run_config(path)

            self.assertEqual(("vivliostyle",), loaded["skip"])
            self.assertEqual(250.0, loaded["ceiling"])
            self.assertEqual(3, loaded["workers"])
            self.assertEqual(cfg.profile, loaded["profile"])


if __name__ == "__main__":
    unittest.main()
