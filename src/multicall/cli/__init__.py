"""
Process entry point for multicall binaries.

A binary built on multicall needs one line in its console script:

    def main() -> int:
        return run_main(GitOps)

    # installed as "git-ops":
    #   git-ops cm          -> GitOps.CM_Commit
    #   git-ops symlinkops g  creates g.cm, g.status, ... next to the binary
    #   g.cm                -> GitOps.CM_Commit

Exit statuses: whatever the command returns (0 if it returns nothing),
2 when no command matched (after printing help), 1 on a MulticallError.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Callable, Iterable, Sequence
from typing import Any

from multicall.cli.utils import print_error
from multicall.config import Config
from multicall.dispatcher import Dispatcher
from multicall.exceptions import MulticallError
from multicall.logging import enable_verbose
from multicall.registry import CommandRegistry

__all__ = ["run_main", "VERBOSE_ENV"]

VERBOSE_ENV = "MULTICALL_VERBOSE"


def _verbose_from_env() -> bool:
    return os.environ.get(VERBOSE_ENV, "").lower() in ("1", "true", "yes", "on")


def run_main(
    receiver: Any,
    argv: Sequence[str] | None = None,
    operations: Iterable[tuple[str, Callable[[Any], Any]]] | None = None,
    extra: dict[str, Callable[[], Any]] | None = None,
    prefix: bool = False,
) -> int:
    """Build the registry for ``receiver`` and run the invoked command.

    Args:
        receiver: Receiver instance or class
        argv: Full argument vector (default: ``sys.argv``)
        operations: Explicit ``(identifier, fn)`` pairs (see CommandRegistry.build)
        extra: Alias-only commands added after the build
        prefix: Accept unique alias prefixes

    Returns:
        Process exit status.
    """
    try:
        config = Config.load()
    except MulticallError as e:
        print_error(e)
        return 1

    verbose = config.defaults.verbose or _verbose_from_env()
    enable_verbose("DEBUG" if verbose else config.defaults.log_level)

    try:
        registry = CommandRegistry.build(receiver, operations)
        for alias, action in (extra or {}).items():
            registry.add(alias, action)
        result = Dispatcher(registry).run_cmd(sys.argv if argv is None else argv, prefix=prefix)
    except MulticallError as e:
        print_error(e, verbose=verbose)
        return 1
    return result.exit_code
