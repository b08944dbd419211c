"""Command registry for multicall binaries.

Builds the alias table of a multi-call binary from the operations of a
receiver object. Operations are named ``Name`` or ``PREFIX_Name`` (see
:mod:`multicall.naming`) and become commands reachable by alias.

Usage:
    from multicall.registry import CommandRegistry

    class GitOps:
        def CM_Commit(self):
            ...

        def Status(self):
            ...

    registry = CommandRegistry.build(GitOps())
    registry.lookup("cm")       # Operation(alias="cm", name="Commit", ...)
    registry.lookup("status")   # Operation(alias="status", name="Status", ...)

    # Operations composed at runtime are added by alias
    registry.add("log", git_log)

The receiver's operations can also be listed explicitly, which makes the
capability set independent of the class namespace:

    registry = CommandRegistry.build(
        GitOps(),
        [("CM_Commit", GitOps.CM_Commit), ("Status", GitOps.Status)],
    )
"""

from __future__ import annotations

import functools
import inspect
import logging
import operator
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any

from multicall.exceptions import AliasInUseError, InvalidOperationError
from multicall.naming import decode, is_exposed

logger = logging.getLogger(__name__)

HELP_ALIAS = "help"
SYMLINK_ALIAS = "symlinkops"


@dataclass
class Operation:
    """One command of a multi-call binary.

    Attributes:
        alias: Lowercase token used on the command line
        name: Display name shown by help; empty for alias-only entries
        action: Zero-argument callable bound to the receiver
        builtin: True for commands synthesized by the registry
    """

    alias: str
    name: str
    action: Callable[[], Any]
    builtin: bool = False


@dataclass
class Invocation:
    """Arguments handed to the command being dispatched.

    Attributes:
        prog: Program path as invoked (``argv[0]``)
        args: Remaining arguments, without the alias token
    """

    prog: str
    args: list[str] = field(default_factory=list)

    @property
    def argv(self) -> list[str]:
        """Conventional argv as seen by the command."""
        return [self.prog, *self.args]


class OpReceiver:
    """Optional base class for receivers that need their invocation.

    The registry attaches itself to an ``OpReceiver`` on build, so operations
    can read the residual command-line arguments through :attr:`args`.
    """

    registry: CommandRegistry | None = None

    @property
    def invocation(self) -> Invocation | None:
        if self.registry is None:
            return None
        return self.registry.invocation

    @property
    def args(self) -> list[str]:
        inv = self.invocation
        return list(inv.args) if inv else []


def collect_operations(cls: type) -> list[tuple[str, Callable[[Any], Any]]]:
    """List the exposed operations of a receiver class.

    Walks the class and its bases in definition order. Only callables whose
    name is exposed (see :func:`multicall.naming.is_exposed`) are returned;
    subclasses override methods of the same name.

    Args:
        cls: Receiver class

    Returns:
        List of ``(identifier, fn)`` pairs, where ``fn(receiver)`` runs the
        operation.
    """
    names: dict[str, None] = {}
    for klass in reversed(cls.__mro__):
        if klass is object or klass is OpReceiver:
            continue
        for name, value in vars(klass).items():
            if not is_exposed(name):
                continue
            if inspect.isfunction(value) or isinstance(value, (staticmethod, classmethod)):
                names[name] = None
    return [(name, operator.methodcaller(name)) for name in names]


class CommandRegistry:
    """Mapping from alias to :class:`Operation` for one receiver.

    Built once at startup. :meth:`add` may extend the table before the first
    dispatch but never replaces an existing alias.
    """

    def __init__(self, receiver: Any = None):
        self.receiver = receiver
        self.invocation: Invocation | None = None
        self._ops: dict[str, Operation] = {}

    @classmethod
    def build(
        cls,
        receiver: Any,
        operations: Iterable[tuple[str, Callable[[Any], Any]]] | None = None,
    ) -> CommandRegistry:
        """Build a registry from a receiver's operations.

        Args:
            receiver: Receiver instance, or a class to instantiate once.
            operations: Explicit ``(identifier, fn)`` pairs; ``fn`` is called
                with the receiver. Defaults to :func:`collect_operations`.

        Returns:
            Registry with the receiver's operations plus the built-in
            ``help`` and ``symlinkops`` commands.

        Raises:
            InvalidOperationError: An identifier breaks the naming convention.
            AliasInUseError: Two operations decode to the same alias, or the
                receiver defines ``symlinkops`` itself.
        """
        if isinstance(receiver, type):
            receiver = receiver()
        if operations is None:
            operations = collect_operations(type(receiver))

        registry = cls(receiver)
        for identifier, fn in operations:
            alias, name = decode(identifier)
            registry._insert(Operation(alias, name, functools.partial(fn, receiver)))

        if HELP_ALIAS not in registry._ops:
            registry._ops[HELP_ALIAS] = Operation(
                HELP_ALIAS, "Help", registry.print_help, builtin=True
            )
        registry._insert(
            Operation(SYMLINK_ALIAS, "SymlinkOPs", registry._symlinkops, builtin=True)
        )

        if isinstance(receiver, OpReceiver):
            receiver.registry = registry
        logger.debug("built registry with %d operations", len(registry._ops))
        return registry

    def _insert(self, op: Operation) -> None:
        if not op.alias or op.alias != op.alias.lower():
            raise InvalidOperationError(
                "invalid alias",
                context={"alias": op.alias},
                suggestions=["Aliases are non-empty and lowercase"],
            )
        existing = self._ops.get(op.alias)
        if existing is not None:
            raise AliasInUseError(
                op.alias,
                context={"existing": existing.name or existing.alias, "new": op.name or op.alias},
            )
        self._ops[op.alias] = op

    def add(self, alias: str, action: Callable[[], Any]) -> Operation:
        """Add an alias-only operation that introspection cannot discover.

        Raises:
            AliasInUseError: If ``alias`` is already registered.
            InvalidOperationError: If ``alias`` is empty or not lowercase.
        """
        op = Operation(alias, "", action)
        self._insert(op)
        return op

    def lookup(self, alias: str) -> Operation | None:
        """Return the operation registered under ``alias``, or None."""
        return self._ops.get(alias)

    def all(self) -> list[Operation]:
        """Return every operation, sorted by alias."""
        return [self._ops[alias] for alias in sorted(self._ops)]

    def aliases(self) -> list[str]:
        return sorted(self._ops)

    def help_lines(self) -> list[str]:
        """Sorted ``alias`` / ``alias => Name`` lines for non-builtin operations."""
        lines = []
        for op in self._ops.values():
            if op.builtin:
                continue
            if op.name:
                lines.append(f"{op.alias} => {op.name}")
            else:
                lines.append(op.alias)
        return sorted(lines)

    def print_help(self) -> None:
        """Print the command listing to stdout."""
        for line in self.help_lines():
            print(line)

    def _symlinkops(self) -> int:
        from multicall.installer import symlinkops_main

        return symlinkops_main(self)

    def __contains__(self, alias: object) -> bool:
        return alias in self._ops

    def __iter__(self) -> Iterator[Operation]:
        return iter(self.all())

    def __len__(self) -> int:
        return len(self._ops)
