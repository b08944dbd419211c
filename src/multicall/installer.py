"""
Symlink installer for multicall binaries.

Materializes one ``<prefix>.<alias>`` symlink per named operation next to the
binary, so that each command can be invoked directly by file name:

    $ tool symlinkops tool
    $ ls -l
    tool
    tool.cm -> tool
    tool.help -> tool
    tool.status -> tool
    tool.symlinkops -> tool
    $ ./tool.cm        # same as ./tool cm

Installation always cleans first: every symlink matching ``<prefix>.*`` in
the binary's directory is removed before the new set is created, so running
the installer twice yields the same directory contents. Regular files that
happen to match the pattern are left alone.
"""

from __future__ import annotations

import argparse
import glob
import logging
import os
import shutil
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from multicall.exceptions import InstallError
from multicall.fileutil import is_symlink, resolve_final_link

if TYPE_CHECKING:
    from multicall.registry import CommandRegistry, Operation

logger = logging.getLogger(__name__)


@contextmanager
def working_directory(path: str | os.PathLike) -> Iterator[Path]:
    """Change into ``path`` for the duration of the block.

    The previous working directory is restored on every exit path. If that
    fails while the block is already raising, the failure is logged and the
    original exception propagates.

    Raises:
        InstallError: If either directory change fails.
    """
    target = Path(path)
    try:
        prev = os.getcwd()
    except OSError as e:
        raise InstallError("getwd failed", context={"error": e}) from e

    if Path(prev) == target:
        yield target
        return

    try:
        os.chdir(target)
    except OSError as e:
        raise InstallError("chdir failed", context={"dir": str(target), "error": e}) from e
    try:
        yield target
    except BaseException:
        try:
            os.chdir(prev)
        except OSError as e:
            logger.warning("chdir back failed: %s: %s", prev, e)
        raise
    try:
        os.chdir(prev)
    except OSError as e:
        raise InstallError("chdir back failed", context={"dir": prev, "error": e}) from e


def locate_binary(prog: str, resolve_symlink: bool = True) -> Path:
    """Find the absolute path of the running binary.

    Args:
        prog: Program as invoked (``argv[0]``); looked up on PATH when it has
            no directory component.
        resolve_symlink: Follow symlinks to the final target

    Returns:
        Absolute path of the binary.

    Raises:
        InstallError: If ``prog`` cannot be found on PATH.
        SymlinkLoopError: If the symlink chain is too long.
    """
    path = prog
    if os.sep not in prog:
        found = shutil.which(prog)
        if found is None:
            raise InstallError(
                "exec.lookpath failed",
                context={"arg0": prog},
                suggestions=["Invoke the binary with an explicit path"],
            )
        path = found

    path = os.path.abspath(path)
    if resolve_symlink:
        path = os.path.abspath(resolve_final_link(path))
    return Path(path)


class SymlinkInstaller:
    """Keep a directory of ``<prefix>.<alias>`` symlinks in sync with a registry."""

    def __init__(self, registry: CommandRegistry):
        self.registry = registry

    def linked_operations(self) -> list[Operation]:
        """Operations that get a symlink: every named one, sorted by alias."""
        return [op for op in self.registry.all() if op.name]

    def clean(self, prefix: str, binary: Path) -> list[str]:
        """Remove every ``<prefix>.*`` symlink next to ``binary``.

        Returns:
            Sorted names of the removed links.

        Raises:
            InstallError: If a link cannot be removed.
        """
        with working_directory(binary.parent):
            return self._clean(prefix)

    def install(self, prefix: str, binary: Path, clean_only: bool = False) -> list[str]:
        """Recreate the symlink set for ``prefix`` next to ``binary``.

        Args:
            prefix: Link name prefix
            binary: Absolute path of the binary the links point to
            clean_only: Only remove existing links

        Returns:
            Names of the links created, sorted.

        Raises:
            InstallError: If a stale link cannot be removed or a link cannot
                be created (e.g. a regular file has the same name).
        """
        created = []
        with working_directory(binary.parent):
            self._clean(prefix)
            if clean_only:
                return created

            for op in self.linked_operations():
                name = f"{prefix}.{op.alias}"
                logger.info("create %s -> %s (%s)", name, binary.name, op.name)
                try:
                    os.symlink(binary.name, name)
                except OSError as e:
                    raise InstallError(
                        "create symlink failed",
                        context={"name": name, "op": op.name, "error": e},
                        suggestions=[f"Remove or rename the existing file '{name}'"],
                    ) from e
                created.append(name)
        return created

    def _clean(self, prefix: str) -> list[str]:
        removed = []
        for name in sorted(glob.glob(f"{glob.escape(prefix)}.*")):
            if not is_symlink(name):
                continue
            try:
                os.remove(name)
            except FileNotFoundError:
                continue
            except OSError as e:
                raise InstallError("remove symlink failed", context={"name": name, "error": e}) from e
            logger.debug("removed %s", name)
            removed.append(name)
        return removed


def symlinkops_main(registry: CommandRegistry) -> int:
    """Run the ``symlinkops`` command against ``registry``.

    Usage: ``<prog> symlinkops [-c] [--no-resolve-symlink] prefix``

    The prefix and the resolve flag default to ``[install]`` in the config
    file when set there.
    """
    from multicall.config import Config
    from multicall.flags import parse_flag

    config = Config.load()
    invocation = registry.invocation
    prog = invocation.prog if invocation else ""
    args = invocation.args if invocation else []

    parser = argparse.ArgumentParser(
        prog=f"{os.path.basename(prog)} symlinkops",
        description="Create <prefix>.<alias> symlinks for every command",
    )
    parser.add_argument("-c", dest="clean_only", action="store_true", help="clean only")
    parser.add_argument(
        "-l",
        "--resolve-symlink",
        action=argparse.BooleanOptionalAction,
        default=config.install.resolve_symlink,
        help="resolve symlink of program",
    )
    prefix_arg = "[prefix]" if config.install.prefix else "prefix"
    options, positionals = parse_flag(parser, args, prefix_arg)
    prefix = positionals[0] if positionals else config.install.prefix

    binary = locate_binary(prog, resolve_symlink=options.resolve_symlink)
    SymlinkInstaller(registry).install(prefix, binary, clean_only=options.clean_only)
    return 0
