import ast
import unittest
from pathlib import Path
from typing import Iterator, List, Tuple

REPO_ROOT = Path(__file__).resolve().parents[1]

# Layering, innermost first:
#   press_compliance/  domain types and safe IO, no tool or runtime knowledge
#   tools/             subprocess adapters around external binaries
#   pipeline/          measurement, remediation, runs, comparison, reporting
#   cli/               argument parsing and command handlers
LAYERS = {
    "press_compliance": ("tools", "pipeline", "cli", "press_cli"),
    "tools": ("pipeline", "cli", "press_cli"),
    "pipeline": ("cli", "press_cli"),
}


def python_files(package_dir: Path) -> Iterator[Path]:
    for p in sorted(package_dir.rglob("*.py")):
        if "__pycache__" in p.parts or any(part.startswith(".") for part in p.relative_to(REPO_ROOT).parts):
            continue
        yield p


def imported_roots(py_file: Path) -> Iterator[Tuple[int, str]]:
    tree = ast.parse(py_file.read_text(encoding="utf-8"), filename=str(py_file))
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                yield node.lineno, alias.name
        elif isinstance(node, ast.ImportFrom) and node.level == 0 and node.module:
            yield node.lineno, node.module


class TestDependencyBoundaries(unittest.TestCase):
    def test_inner_layers_do_not_import_outer_layers(self) -> None:
        problems: List[str] = []
        for pkg, forbidden in LAYERS.items():
            for py_file in python_files(REPO_ROOT / pkg):
                for lineno, module in imported_roots(py_file):
                    if module.split(".", 1)[0] in forbidden:
                        problems.append(f"{py_file.relative_to(REPO_ROOT)}:{lineno} imports {module}")

        self.assertEqual([], problems, "Imports against the layering:\n" + "\n".join(problems))


if __name__ == "__main__":
    unittest.main()
