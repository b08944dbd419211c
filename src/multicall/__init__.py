"""
multicall: build one executable that behaves as many commands.

Methods of a receiver become commands reachable by alias, either as an
explicit argument (``tool cm``) or through the name the binary was invoked
under (``tool.cm``, typically a symlink created by ``tool symlinkops tool``).

Modules:
    naming: Operation naming convention (``Name`` / ``PREFIX_Name``)
    registry: Alias table built from a receiver
    resolver: Exact and unique-prefix alias lookup
    dispatcher: Run a command from argv or the program name
    installer: ``<prefix>.<alias>`` symlink management
    unixrpc: One-shot JSON request/response over unix sockets

Quick Start::

    from multicall import run_main

    class GitOps:
        def CM_Commit(self):
            ...

        def Status(self):
            ...

    def main() -> int:
        return run_main(GitOps)
"""

__version__ = "0.1.0"

from multicall.cli import run_main
from multicall.dispatcher import DispatchResult, Dispatcher, DispatchStatus
from multicall.exceptions import (
    AliasInUseError,
    InstallError,
    InvalidOperationError,
    MulticallError,
    SymlinkLoopError,
)
from multicall.installer import SymlinkInstaller
from multicall.naming import decode
from multicall.registry import CommandRegistry, Invocation, Operation, OpReceiver
from multicall.resolver import AliasResolver, Resolution, ResolutionStatus

__all__ = [
    # Version
    "__version__",
    # Registry
    "CommandRegistry",
    "Operation",
    "OpReceiver",
    "Invocation",
    "decode",
    # Resolution and dispatch
    "AliasResolver",
    "Resolution",
    "ResolutionStatus",
    "Dispatcher",
    "DispatchResult",
    "DispatchStatus",
    "run_main",
    # Installer
    "SymlinkInstaller",
    # Errors
    "MulticallError",
    "AliasInUseError",
    "InvalidOperationError",
    "InstallError",
    "SymlinkLoopError",
]
