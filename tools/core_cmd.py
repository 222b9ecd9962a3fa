"""tools/core_cmd.py

Command-execution helpers shared across the external tool adapters.

This module deliberately avoids tool-specific knowledge. It provides:

* :func:`run_cmd` - run subprocesses (no shell=True) with a timeout and capture output.
* :class:`ToolFailure` / :func:`require_ok` - turn a failed run into one exception type.

Timeouts
--------
Every adapter passes ``timeout_seconds``. A timeout is reported as exit code
124 (the coreutils ``timeout`` convention) instead of raising, so the caller
treats it exactly like any other failed stage.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Sequence

logger = logging.getLogger(__name__)

TIMEOUT_EXIT_CODE = 124
DEFAULT_TIMEOUT_SECONDS = 120


@dataclass(frozen=True)
class CmdResult:
    exit_code: int
    elapsed_seconds: float
    command_str: str
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    @property
    def timed_out(self) -> bool:
        return self.exit_code == TIMEOUT_EXIT_CODE


class ToolFailure(RuntimeError):
    """An external tool ran but did not do its job."""

    def __init__(self, tool: str, detail: str, *, exit_code: Optional[int] = None) -> None:
        self.tool = tool
        self.detail = detail
        self.exit_code = exit_code
        suffix = f" (exit {exit_code})" if exit_code is not None else ""
        super().__init__(f"{tool} failed{suffix}: {detail}")


def tool_available(bin_name: str) -> bool:
    return shutil.which(bin_name) is not None


def run_cmd(
    cmd: Sequence[str],
    *,
    cwd: Optional[Path] = None,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    env: Optional[Dict[str, str]] = None,
    text: bool = True,
) -> CmdResult:
    """Run a subprocess and capture stdout/stderr (no ``shell=True``).

    Never raises on non-zero exit codes or timeouts; only raises on execution
    errors (e.g. binary not found).
    """
    cmd = [str(c) for c in cmd]
    t0 = time.time()

    env2 = None
    if env is not None:
        env2 = os.environ.copy()
        env2.update(env)

    logger.debug("run: %s", " ".join(cmd))
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd else None,
            text=text,
            errors="replace" if text else None,
            capture_output=True,
            timeout=timeout_seconds if timeout_seconds and timeout_seconds > 0 else None,
            env=env2,
        )
    except subprocess.TimeoutExpired as e:
        elapsed = time.time() - t0
        logger.warning("timeout after %.1fs: %s", elapsed, " ".join(cmd))
        return CmdResult(
            exit_code=TIMEOUT_EXIT_CODE,
            elapsed_seconds=elapsed,
            command_str=" ".join(cmd),
            stdout=_as_text(e.stdout),
            stderr=_as_text(e.stderr) or f"timed out after {timeout_seconds}s",
        )

    return CmdResult(
        exit_code=proc.returncode,
        elapsed_seconds=time.time() - t0,
        command_str=" ".join(cmd),
        stdout=_as_text(proc.stdout),
        stderr=_as_text(proc.stderr),
    )


def _as_text(v) -> str:
    if v is None:
        return ""
    if isinstance(v, bytes):
        return v.decode("utf-8", errors="replace")
    return str(v)


def require_ok(result: CmdResult, tool: str, *, expect_file: Optional[Path] = None) -> CmdResult:
    """Raise :class:`ToolFailure` unless *result* succeeded (and produced *expect_file*)."""
    if not result.ok:
        detail = (result.stderr or result.stdout).strip().splitlines()
        msg = detail[-1] if detail else "no output"
        if result.timed_out:
            msg = f"timed out after {result.elapsed_seconds:.0f}s"
        raise ToolFailure(tool, msg, exit_code=result.exit_code)
    if expect_file is not None and not Path(expect_file).exists():
        raise ToolFailure(tool, f"expected output not created: {expect_file}")
    return result
