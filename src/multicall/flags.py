"""Positional-argument declaration for multicall commands.

Commands declare their positional arguments by name; names in brackets are
optional and must come after all required ones:

    parser = argparse.ArgumentParser(prog="tool.cp")
    parser.add_argument("-f", action="store_true", help="overwrite")
    args, positionals = parse_flag(parser, argv, "src", "dst", "[mode]")
"""

from __future__ import annotations

import argparse
from collections.abc import Sequence

from multicall.exceptions import ArgumentSpecError

_POSITIONALS_DEST = "_positionals"


def count_required(positionals: Sequence[str]) -> int:
    """Count required positionals, checking that optional ones come last.

    Raises:
        ArgumentSpecError: If a required argument follows an optional one.
    """
    required = 0
    optional = False
    for arg in positionals:
        if arg.startswith("["):
            optional = True
            continue
        if optional:
            raise ArgumentSpecError(
                "required arg appears after optional args",
                context={"args": list(positionals)},
                suggestions=["Move bracketed [optional] arguments to the end"],
            )
        required += 1
    return required


def parse_flag(
    parser: argparse.ArgumentParser,
    args: Sequence[str],
    *positionals: str,
) -> tuple[argparse.Namespace, list[str]]:
    """Parse ``args`` with ``parser`` and collect the positional arguments.

    Args:
        parser: Parser with the command's options already added
        args: Command arguments (without the program name)
        *positionals: Names of positional arguments, ``"[name]"`` if optional

    Returns:
        Tuple of the parsed namespace and the list of positional values.

    Raises:
        ArgumentSpecError: If the positional declaration is malformed.
        SystemExit: Via ``parser.error`` when required positionals are missing.
    """
    required = count_required(positionals)
    parser.usage = f"{parser.prog} [options] {' '.join(positionals)}".rstrip()
    parser.add_argument(_POSITIONALS_DEST, nargs="*", metavar="arg", help=argparse.SUPPRESS)

    namespace = parser.parse_args(list(args))
    values = list(getattr(namespace, _POSITIONALS_DEST))
    delattr(namespace, _POSITIONALS_DEST)

    if len(values) < required:
        parser.error(f"not enough required args: expected {' '.join(positionals)}")
    return namespace, values
