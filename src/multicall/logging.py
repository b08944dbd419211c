"""
Logging configuration for multicall.

Every module logs through ``logging.getLogger(__name__)`` under the
``multicall`` logger, which stays silent until a binary turns it on.
"""

import logging

_logger = logging.getLogger("multicall")
_logger.addHandler(logging.NullHandler())  # Default: no output

DEFAULT_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def enable_verbose(level: str = "INFO", format: str = None) -> None:
    """Enable logging output on stderr.

    Args:
        level: Logging level - "DEBUG", "INFO", "WARNING", "ERROR"
        format: Optional custom format string

    Example:
        enable_verbose("DEBUG")
        Dispatcher(registry).run_cmd()  # logs resolution and symlink creation
        disable_verbose()
    """
    _logger.setLevel(getattr(logging, level.upper()))

    # Remove existing handlers
    for handler in _logger.handlers[:]:
        if not isinstance(handler, logging.NullHandler):
            _logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setLevel(getattr(logging, level.upper()))
    handler.setFormatter(logging.Formatter(format or DEFAULT_FORMAT))
    _logger.addHandler(handler)


def disable_verbose() -> None:
    """Disable verbose logging."""
    _logger.setLevel(logging.WARNING)
    for handler in _logger.handlers[:]:
        if not isinstance(handler, logging.NullHandler):
            _logger.removeHandler(handler)
