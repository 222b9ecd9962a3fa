import csv
import json
import tempfile
import unittest
from pathlib import Path

from press_compliance.io import write_csv_atomic, write_json_atomic, write_text_atomic


class TestSafeIO(unittest.TestCase):
    def test_write_json_is_atomic_and_cleans_temp(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            root = Path(td)
            out_dir = root / "out"
            out_path = out_dir / "run.json"

            payload = {"b": True, "a": 1, "c": None, "nested": {"x": "y"}}
            write_json_atomic(out_path, payload)

            # File written and readable
            self.assertTrue(out_path.exists())
            self.assertEqual(payload, json.loads(out_path.read_text(encoding="utf-8")))

            # Stable key order and trailing newline
            text = out_path.read_text(encoding="utf-8")
            self.assertTrue(text.endswith("\n"))
            self.assertLess(text.index('"a"'), text.index('"b"'))

            # No temp files left behind on success
            self.assertEqual([], list(out_dir.glob("*.tmp")))

    def test_failed_write_keeps_previous_content(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            out_path = Path(td) / "report.md"
            write_text_atomic(out_path, "first")

            with self.assertRaises(TypeError):
                write_json_atomic(out_path, {"bad": object()})

            self.assertEqual("first", out_path.read_text(encoding="utf-8"))
            self.assertEqual([], list(Path(td).glob("*.tmp")))

    def test_write_csv_uses_given_field_order(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            out_path = Path(td) / "summary.csv"
            write_csv_atomic(
                out_path,
                [{"status": "complete", "project": "a"}, {"project": "b"}],
                fieldnames=["project", "status"],
            )
            with out_path.open(newline="", encoding="utf-8") as f:
                rows = list(csv.reader(f))
            self.assertEqual([["project", "status"], ["a", "complete"], ["b", ""]], rows)

    def test_package_exports_only_writers(self) -> None:
        import press_compliance.io as io_pkg

        self.assertEqual(["write_csv_atomic", "write_json_atomic", "write_text_atomic"], sorted(io_pkg.__all__))
        self.assertFalse(hasattr(io_pkg, "read_json"))


if __name__ == "__main__":
    unittest.main()
