"""Operation naming convention.

An operation identifier is either ``Name`` or ``PREFIX_Name``. The prefix,
when present, becomes the command alias; otherwise the whole identifier is
lowercased into the alias. The part after the prefix is the display name
shown by ``help``.

    >>> decode("CM_Commit")
    ('cm', 'Commit')
    >>> decode("Status")
    ('status', 'Status')
"""

from __future__ import annotations

import re

from multicall.exceptions import InvalidOperationError

NAME_PATTERN = re.compile(r"^([A-Z]+_)?([A-Z].*)$")


def is_exposed(identifier: str) -> bool:
    """Return True if ``identifier`` belongs to the exposed capability set.

    Mirrors the notion of an exported name: only identifiers starting with an
    uppercase ASCII letter are operations. Lowercase helpers and private
    names are skipped without error.
    """
    return bool(identifier) and "A" <= identifier[0] <= "Z"


def decode(identifier: str) -> tuple[str, str]:
    """Decode an operation identifier into ``(alias, display_name)``.

    Args:
        identifier: Method or operation name, e.g. ``"CM_Commit"``.

    Returns:
        Tuple of lowercase alias and display name.

    Raises:
        InvalidOperationError: If the identifier does not follow the convention
            or decodes to an empty display name.
    """
    mo = NAME_PATTERN.match(identifier)
    if mo is None:
        raise InvalidOperationError(
            "invalid op method",
            context={"name": identifier},
            suggestions=["Operation names look like 'Status' or 'CM_Commit'"],
        )

    prefix, name = mo.group(1), mo.group(2)
    if prefix:
        alias = prefix[:-1].lower()
    else:
        alias = name.lower()

    if not name:
        raise InvalidOperationError("empty method name", context={"name": identifier})
    return alias, name
