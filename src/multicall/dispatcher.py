"""
Command dispatch for multicall binaries.

The dispatcher picks the command from the invocation and runs it:

    prog.status ...          alias from the program name suffix (symlink form)
    prog status ...          alias from the first argument

Unknown aliases print the help listing and yield exit status 2. The
dispatcher never exits the process itself; callers translate the returned
:class:`DispatchResult` into an exit status (see :func:`multicall.cli.run_main`).
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

from multicall.registry import HELP_ALIAS, CommandRegistry, Invocation, Operation
from multicall.resolver import AliasResolver, ResolutionStatus

logger = logging.getLogger(__name__)

HELP_EXIT_CODE = 2


class DispatchStatus(Enum):
    """Outcome of a dispatch."""

    DISPATCHED = "dispatched"
    NOT_FOUND = "not_found"
    HELP_SHOWN = "help_shown"


@dataclass
class DispatchResult:
    """Result of running one command.

    Attributes:
        status: Outcome of the dispatch
        alias: Alias that was requested
        exit_code: Process exit status the caller should use
        operation: The operation that ran, if any
        args: Residual arguments handed to the command
    """

    status: DispatchStatus
    alias: str
    exit_code: int = 0
    operation: Operation | None = None
    args: list[str] = field(default_factory=list)


def split_program_name(prog: str) -> tuple[str, str | None]:
    """Split the base name of ``prog`` on its first dot.

    Returns:
        ``(base, alias)``; alias is None when the name has no dot.

    Example::

        split_program_name("/usr/local/bin/git.cm")  # ("git", "cm")
        split_program_name("git")                    # ("git", None)
    """
    name = os.path.basename(prog)
    base, sep, alias = name.partition(".")
    if not sep:
        return base, None
    return base, alias


class Dispatcher:
    """Run commands of a :class:`CommandRegistry` by alias."""

    def __init__(self, registry: CommandRegistry):
        self.registry = registry
        self.resolver = AliasResolver(registry)

    def run(
        self,
        alias: str,
        args: Sequence[str] | None = None,
        prog: str | None = None,
        prefix: bool = False,
    ) -> DispatchResult:
        """Run the command registered under ``alias``.

        Args:
            alias: Alias to run
            args: Arguments for the command, without the alias token
            prog: Program path as invoked; defaults to ``sys.argv[0]``
            prefix: Accept a unique alias prefix as well as an exact alias

        Returns:
            DispatchResult. An unresolved alias shows help and returns
            NOT_FOUND with exit code 2.
        """
        args = list(args or [])
        prog = prog if prog is not None else sys.argv[0]

        resolution = self.resolver.resolve(alias, prefix=prefix)
        if resolution.status is not ResolutionStatus.FOUND:
            if resolution.status is ResolutionStatus.AMBIGUOUS:
                logger.warning(
                    "command not found: %s is ambiguous (%s)",
                    alias,
                    ", ".join(resolution.candidates),
                )
            else:
                logger.warning("command not found: %s", alias)
            self.show_help(prog)
            return DispatchResult(DispatchStatus.NOT_FOUND, alias, HELP_EXIT_CODE, args=args)

        op = resolution.operation
        self.registry.invocation = Invocation(prog, args)
        logger.debug("dispatching %s to %s", alias, op.name or op.alias)
        result = op.action()

        if op.alias == HELP_ALIAS:
            return DispatchResult(DispatchStatus.HELP_SHOWN, alias, HELP_EXIT_CODE, op, args)
        exit_code = result if isinstance(result, int) and not isinstance(result, bool) else 0
        return DispatchResult(DispatchStatus.DISPATCHED, alias, exit_code, op, args)

    def run_cmd(self, argv: Sequence[str] | None = None, prefix: bool = False) -> DispatchResult:
        """Run the command named by the program name or the first argument.

        Args:
            argv: Full argument vector including the program; defaults to a
                copy of ``sys.argv``. It is never modified.
            prefix: Accept a unique alias prefix

        Returns:
            DispatchResult of the chosen command.
        """
        argv = list(sys.argv if argv is None else argv)
        prog = argv[0] if argv else ""

        _, alias = split_program_name(prog)
        if alias is not None:
            return self.run(alias, argv[1:], prog=prog, prefix=prefix)

        if len(argv) < 2:
            logger.warning("no command given")
            self.show_help(prog)
            return DispatchResult(DispatchStatus.HELP_SHOWN, "", HELP_EXIT_CODE)
        return self.run(argv[1], argv[2:], prog=prog, prefix=prefix)

    def show_help(self, prog: str) -> None:
        """Run the help command, user-defined or synthesized."""
        self.registry.invocation = Invocation(prog, [])
        self.registry.lookup(HELP_ALIAS).action()
