"""Subprocess helper for commands that shell out.

``Cmd`` is an immutable description of a process to run. Its modifiers
return a new ``Cmd``:

    Cmd.of("git", "status").trace().run()
    out = Cmd.of("git", "rev-parse", "HEAD").silent().stdout()
    Cmd.of("vim", path).interactive()

By default the child writes to our stdout/stderr and reads from /dev/null.
"""

from __future__ import annotations

import dataclasses
import logging
import subprocess
from dataclasses import dataclass

from multicall.exceptions import CommandError, MulticallError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Cmd:
    """A command line plus output settings.

    Attributes:
        args: Program and its arguments
        quiet: Discard stdout and stderr
        traced: Log the command line before running it
    """

    args: tuple[str, ...]
    quiet: bool = False
    traced: bool = False

    @classmethod
    def of(cls, name: str, *args: str) -> Cmd:
        return cls((name, *args))

    def silent(self, silent: bool = True) -> Cmd:
        return dataclasses.replace(self, quiet=silent)

    def trace(self) -> Cmd:
        return dataclasses.replace(self, traced=True)

    def run(self) -> int:
        """Run to completion and return the exit status."""
        self._show_trace()
        out = subprocess.DEVNULL if self.quiet else None
        return subprocess.run(self.args, stdin=subprocess.DEVNULL, stdout=out, stderr=out).returncode

    def stdout(self) -> bytes:
        """Run and return the captured stdout.

        Raises:
            CommandError: If the process exits non-zero.
        """
        self._show_trace()
        err = subprocess.DEVNULL if self.quiet else None
        proc = subprocess.run(
            self.args, stdin=subprocess.DEVNULL, stdout=subprocess.PIPE, stderr=err
        )
        if proc.returncode != 0:
            raise CommandError(
                "command failed", proc.returncode, context={"args": " ".join(self.args)}
            )
        return proc.stdout

    def interactive(self) -> int:
        """Run attached to our stdin/stdout/stderr and return the exit status."""
        self._show_trace()
        if self.quiet:
            raise MulticallError("cannot be silent", context={"args": " ".join(self.args)})
        return subprocess.run(self.args).returncode

    def _show_trace(self) -> None:
        if self.traced:
            logger.info("run cmd: %s", " ".join(self.args))
