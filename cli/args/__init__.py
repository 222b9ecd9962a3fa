"""CLI argument builder modules.

The top-level :mod:`press_cli` is intentionally kept thin. Each subcommand
registers its flags via small "arg builder" functions housed here:

- :func:`cli.args.base.add_common_args`
- :func:`cli.args.base.add_io_args`
- :func:`cli.args.base.add_skip_args`
- :func:`cli.args.remediation.add_limit_tac_args`

This keeps :func:`press_cli.build_parser` from turning into a god function
as subcommands grow.
"""

from __future__ import annotations

__all__ = [
    "base",
    "remediation",
]
