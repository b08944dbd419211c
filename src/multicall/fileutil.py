"""File metadata helpers used by multicall commands."""

from __future__ import annotations

import codecs
import os
from typing import Union

from multicall.exceptions import SymlinkLoopError

PathLike = Union[str, os.PathLike]

MAX_LINK_HOPS = 20
_SNIFF_SIZE = 8192


def file_exists(path: PathLike) -> bool:
    """Return True if ``path`` exists.

    Raises:
        OSError: For stat failures other than a missing file
            (e.g. permission denied).
    """
    return file_size(path)[0]


def file_size(path: PathLike) -> tuple[bool, int]:
    """Return ``(exists, size)`` for ``path``, following symlinks.

    A missing file gives ``(False, 0)``; other stat errors propagate.
    """
    try:
        st = os.stat(path)
    except FileNotFoundError:
        return False, 0
    return True, st.st_size


def is_symlink(path: PathLike) -> bool:
    """Return True if ``path`` itself is a symbolic link."""
    return os.path.islink(path)


def resolve_final_link(path: PathLike, max_hops: int = MAX_LINK_HOPS) -> str:
    """Follow a chain of symlinks to its last element.

    Relative link targets are interpreted against the directory of the link.
    The final element does not need to exist.

    Args:
        path: Starting path
        max_hops: Number of links that may be followed

    Returns:
        Path of the first element in the chain that is not a symlink.

    Raises:
        SymlinkLoopError: If more than ``max_hops`` links are chained
            (including cycles).
    """
    orig = os.fspath(path)
    name = orig
    for _ in range(max_hops + 1):
        try:
            target = os.readlink(name)
        except OSError:
            return name
        name = os.path.join(os.path.dirname(name), target)
    raise SymlinkLoopError(
        "readlastlink too many symlinks",
        context={"origname": orig, "name": name, "max_hops": max_hops},
        suggestions=["Check for a symlink cycle"],
    )


def guess_utf8_file(path: PathLike) -> bool:
    """Guess whether ``path`` is a UTF-8 text file from its first bytes.

    Files containing NUL bytes or invalid UTF-8 in the sampled prefix are
    treated as binary. A multibyte sequence cut by the sample boundary is not
    an error.
    """
    with open(path, "rb") as f:
        head = f.read(_SNIFF_SIZE)
    if b"\x00" in head:
        return False
    decoder = codecs.getincrementaldecoder("utf-8")()
    try:
        decoder.decode(head, final=False)
    except UnicodeDecodeError:
        return False
    return True

