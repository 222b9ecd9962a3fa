from __future__ import annotations

import argparse
import logging
from typing import Callable, Dict

from cli.commands.batch import run_batch
from cli.commands.check_tac import run_check_tac
from cli.commands.compare import run_compare
from cli.commands.deps import run_deps
from cli.commands.limit_tac import run_limit_tac
from cli.commands.run import run_run
from cli.commands.validate import run_validate
from press_compliance.domain import PipelineUnavailable, PressComplianceError
from pipeline.pipeline import PressCompliancePipeline

logger = logging.getLogger(__name__)

CommandFn = Callable[[argparse.Namespace, PressCompliancePipeline], int]

COMMANDS: Dict[str, CommandFn] = {
    "check-tac": run_check_tac,
    "limit-tac": run_limit_tac,
    "validate": run_validate,
    "run": run_run,
    "batch": run_batch,
    "compare": run_compare,
    "deps": run_deps,
}


def dispatch(args: argparse.Namespace, pipeline: PressCompliancePipeline) -> int:
    """Run the selected subcommand and map expected failures to exit codes.

    Exit codes: 0 success, 1 command-level failure, 2 usage or input error,
    3 missing external tools.
    """
    fn = COMMANDS.get(args.command)
    if fn is None:
        raise SystemExit(f"Unknown command: {args.command}")

    try:
        return int(fn(args, pipeline))
    except PipelineUnavailable as e:
        print(f"\n❌ {e}")
        print("   Run `python press_cli.py deps` to see what is installed.")
        return 3
    except (FileNotFoundError, ValueError) as e:
        print(f"\n❌ {e}")
        return 2
    except PressComplianceError as e:
        logger.debug("command %s failed", args.command, exc_info=True)
        print(f"\n❌ {e}")
        return 1
