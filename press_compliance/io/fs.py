"""press_compliance.io.fs

Atomic, stable writers for everything the pipeline persists.

Why this module exists
----------------------
A project directory is read by people (``comparison-report.md``,
``batch-summary.md``) and by later runs (``run.json`` manifests). A process
killed half-way through a write must never leave a truncated report behind,
and two writers of the same artifact must agree on formatting so reruns diff
cleanly. Every writer here goes through a temp file plus ``os.replace()``.
"""

from __future__ import annotations

import csv
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Sequence


def _atomic_write(
    path: Path,
    write_fn,
    *,
    encoding: str = "utf-8",
    newline: Optional[str] = None,
) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f"{p.name}.", suffix=".tmp", dir=str(p.parent))
    tmp_path = Path(tmp_name)

    try:
        with os.fdopen(fd, "w", encoding=encoding, newline=newline) as f:
            write_fn(f)
            f.flush()
            os.fsync(f.fileno())

        os.replace(tmp_path, p)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()


def write_text_atomic(path: Path, text: str, *, encoding: str = "utf-8") -> Path:
    """Write text atomically and return the path."""

    def _write(f) -> None:
        f.write(text)

    _atomic_write(Path(path), _write, encoding=encoding)
    return Path(path)


def write_json_atomic(
    path: Path,
    data: Any,
    *,
    indent: int = 2,
    sort_keys: bool = True,
) -> Path:
    """Write JSON with stable key order and a trailing newline."""

    def _write(f) -> None:
        json.dump(data, f, indent=indent, sort_keys=sort_keys, ensure_ascii=False)
        f.write("\n")

    _atomic_write(Path(path), _write)
    return Path(path)


def write_csv_atomic(
    path: Path,
    rows: Iterable[Mapping[str, Any]],
    *,
    fieldnames: Optional[Sequence[str]] = None,
) -> Path:
    """Write CSV atomically.

    Without *fieldnames* the header follows the first-seen key order across rows.
    """

    rows_list = [dict(r) for r in rows]
    if fieldnames is None:
        fields: list[str] = []
        for r in rows_list:
            for k in r:
                if k not in fields:
                    fields.append(k)
        fieldnames = fields
    fns = list(fieldnames)

    def _write(f) -> None:
        w = csv.DictWriter(f, fieldnames=fns)
        w.writeheader()
        for r in rows_list:
            w.writerow({k: r.get(k, "") for k in fns})

    _atomic_write(Path(path), _write, newline="")
    return Path(path)
