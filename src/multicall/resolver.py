"""Alias resolution.

Maps a user-supplied token to exactly one registered operation: an exact
alias match wins, otherwise the token must be a prefix of exactly one alias.
Ambiguous and unknown tokens are reported, never guessed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from multicall.registry import CommandRegistry, Operation


class ResolutionStatus(Enum):
    """Outcome of resolving a token."""

    FOUND = "found"
    AMBIGUOUS = "ambiguous"
    NOT_FOUND = "not_found"


@dataclass
class Resolution:
    """Result of :meth:`AliasResolver.resolve`.

    Attributes:
        status: Outcome of the lookup
        operation: The matched operation when status is FOUND
        candidates: Sorted aliases the token is a prefix of (AMBIGUOUS only)
    """

    status: ResolutionStatus
    operation: Operation | None = None
    candidates: list[str] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.status is ResolutionStatus.FOUND


class AliasResolver:
    """Exact-then-unique-prefix alias lookup over a registry."""

    def __init__(self, registry: CommandRegistry):
        self.registry = registry

    def resolve(self, token: str, prefix: bool = True) -> Resolution:
        """Resolve ``token`` to an operation.

        Args:
            token: Alias or alias prefix typed by the user
            prefix: Fall back to unique-prefix matching when no alias is exact

        Returns:
            Resolution with status FOUND, AMBIGUOUS or NOT_FOUND.
        """
        if not token:
            return Resolution(ResolutionStatus.NOT_FOUND)

        op = self.registry.lookup(token)
        if op is not None:
            return Resolution(ResolutionStatus.FOUND, op)
        if not prefix:
            return Resolution(ResolutionStatus.NOT_FOUND)

        candidates = [alias for alias in self.registry.aliases() if alias.startswith(token)]
        if len(candidates) == 1:
            return Resolution(ResolutionStatus.FOUND, self.registry.lookup(candidates[0]))
        if candidates:
            return Resolution(ResolutionStatus.AMBIGUOUS, candidates=candidates)
        return Resolution(ResolutionStatus.NOT_FOUND)
