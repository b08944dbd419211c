"""
fileops: file checks as a multi-call binary.

    fileops exists PATH        exit 0 if PATH exists, 1 otherwise
    fileops sz PATH            print the size of PATH in bytes
    fileops ln PATH            print the last element of PATH's symlink chain
    fileops u8 PATH            exit 0 if PATH looks like UTF-8 text

After ``fileops symlinkops fo`` the same commands are available as
``fo.exists``, ``fo.sz``, ``fo.ln`` and ``fo.u8``.
"""

from __future__ import annotations

import argparse
import os

from multicall.cli import run_main
from multicall.fileutil import file_exists, file_size, guess_utf8_file, resolve_final_link
from multicall.flags import parse_flag
from multicall.registry import OpReceiver


class FileOps(OpReceiver):
    """File metadata commands."""

    def _path(self, command: str, description: str) -> str:
        prog = os.path.basename(self.invocation.prog) if self.invocation else "fileops"
        parser = argparse.ArgumentParser(prog=f"{prog} {command}", description=description)
        _, positionals = parse_flag(parser, self.args, "path")
        return positionals[0]

    def Exists(self) -> int:
        path = self._path("exists", "Exit 0 if the path exists")
        return 0 if file_exists(path) else 1

    def SZ_Size(self) -> int:
        path = self._path("sz", "Print the file size in bytes")
        exists, size = file_size(path)
        if not exists:
            print(f"{path}: not found")
            return 1
        print(size)
        return 0

    def LN_Readlink(self) -> int:
        path = self._path("ln", "Print the final target of a symlink chain")
        print(resolve_final_link(path))
        return 0

    def U8_Utf8(self) -> int:
        path = self._path("u8", "Exit 0 if the file looks like UTF-8 text")
        return 0 if guess_utf8_file(path) else 1


def main() -> int:
    """Entry point for the fileops console script."""
    return run_main(FileOps)


if __name__ == "__main__":
    raise SystemExit(main())
