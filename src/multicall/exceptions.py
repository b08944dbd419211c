"""
Custom exception hierarchy for multicall.

Every error raised by the framework carries a message, a context dict and a
list of suggestions, rendered together as one formatted message.

Registration and installer errors are fatal: they describe a misconfigured
command set and are never caught and retried by the framework. An alias that
does not resolve at dispatch time is not an exception at all; it degrades to
the help listing (see :mod:`multicall.dispatcher`).

Example::

    from multicall.exceptions import AliasInUseError

    raise AliasInUseError(
        "cm",
        context={"existing": "Commit", "new": "Checkmate"},
        suggestions=["Give one of the methods a different PREFIX_"],
    )
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class MulticallError(Exception):
    """
    Base exception for all multicall errors.

    Attributes:
        context: Dictionary of contextual information (alias, path, ...)
        suggestions: List of actionable suggestions for fixing the error
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        self.message = message
        self.context = context or {}
        self.suggestions = suggestions or []
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with context and suggestions."""
        parts = [self.message]

        if self.context:
            parts.append("\n\nContext:")
            for key, value in self.context.items():
                parts.append(f"\n  {key}: {value}")

        if self.suggestions:
            parts.append("\n\nSuggestions:")
            for suggestion in self.suggestions:
                parts.append(f"\n  - {suggestion}")

        return "".join(parts)

    def __str__(self) -> str:
        return self._format_message()

    def __rich_console__(self, console, options):
        from rich.text import Text

        yield Text(f"Error: {self.message}", style="bold red")
        for key, value in self.context.items():
            yield Text(f"  {key}: {value}", style="dim")
        for suggestion in self.suggestions:
            yield Text(f"  - {suggestion}", style="yellow")


class RegistrationError(MulticallError):
    """
    The command table could not be built.

    Raised while building or extending a :class:`~multicall.registry.CommandRegistry`.
    """

    pass


class InvalidOperationError(RegistrationError):
    """
    An exposed operation identifier does not follow the naming convention.

    Example::

        raise InvalidOperationError(
            "invalid op method",
            context={"name": "status"},
            suggestions=["Operation names start with an uppercase letter"],
        )
    """

    pass


class AliasInUseError(RegistrationError):
    """Two operations decode to the same alias."""

    def __init__(
        self,
        alias: str,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        self.alias = alias
        ctx = {"alias": alias}
        ctx.update(context or {})
        super().__init__("alias in use", ctx, suggestions)


class SymlinkLoopError(MulticallError):
    """
    A symlink chain is longer than the hop limit.

    Example::

        raise SymlinkLoopError(
            "readlastlink too many symlinks",
            context={"origname": "/usr/local/bin/tool", "name": "/opt/a"},
        )
    """

    pass


class InstallError(MulticallError):
    """
    Creating or cleaning the symlink set failed.

    A partially applied symlink set is worse than a stopped installer, so
    filesystem failures during clean or create are escalated, never skipped.
    """

    pass


class ArgumentSpecError(MulticallError):
    """Positional argument declaration is malformed (required after optional)."""

    pass


class CommandError(MulticallError):
    """
    A subprocess started through :class:`~multicall.proc.Cmd` failed.

    Attributes:
        returncode: Exit status of the process
    """

    def __init__(
        self,
        message: str,
        returncode: int,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        self.returncode = returncode
        ctx = dict(context or {})
        ctx.setdefault("returncode", returncode)
        super().__init__(message, ctx, suggestions)


class RPCError(MulticallError):
    """Unix socket request/response exchange failed."""

    pass


class ConfigurationError(MulticallError):
    """
    Configuration or settings error.

    Example::

        raise ConfigurationError(
            "Invalid TOML",
            context={"file": ".multicall.toml"},
            suggestions=["Compare the file against multicall.config.generate_template()"],
        )
    """

    pass


__all__ = [
    "MulticallError",
    "RegistrationError",
    "InvalidOperationError",
    "AliasInUseError",
    "SymlinkLoopError",
    "InstallError",
    "ArgumentSpecError",
    "CommandError",
    "RPCError",
    "ConfigurationError",
]
