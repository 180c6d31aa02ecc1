"""
exceptions.py — typewriter Error Hierarchy

Typewriter-specific exceptions live here. Sink failures are NOT wrapped:
whatever the output sink raises reaches the caller unchanged through the
execution future.

Import from here, not from individual modules:
    from typewriter.exceptions import OperationCanceledError, ConfigError

Hierarchy:
    TypewriterError
    ├── DelayedError
    │   ├── OperationCanceledError
    │   └── InvalidDurationError  (also a ValueError)
    └── ConfigError
"""

from __future__ import annotations


# ─────────────────────────────────────────────────────────────────────────────
# Root
# ─────────────────────────────────────────────────────────────────────────────

class TypewriterError(Exception):
    """Base class for all typewriter exceptions."""


# ─────────────────────────────────────────────────────────────────────────────
# Delayed layer
# ─────────────────────────────────────────────────────────────────────────────

class DelayedError(TypewriterError):
    """Base for scheduler and operation errors."""


class OperationCanceledError(DelayedError):
    """A pending wait was interrupted by the cancel event.

    Raised by WaitOperation.run() and consumed by Delayed.do(); a canceled
    run resolves its future with None, never with this exception.
    """

    def __init__(self, message: str = "operation canceled") -> None:
        super().__init__(message)


class InvalidDurationError(DelayedError, ValueError):
    """A negative duration was given to wait(), write() or a setter."""

    def __init__(self, name: str, value: object) -> None:
        self.name = name
        self.value = value
        super().__init__(f"{name} must be a non-negative timedelta, got {value!r}")


# ─────────────────────────────────────────────────────────────────────────────
# Config layer
# ─────────────────────────────────────────────────────────────────────────────

class ConfigError(TypewriterError):
    """Raised by Settings.validate_all() when one or more config problems are found."""


__all__ = [
    "TypewriterError",
    # Delayed
    "DelayedError",
    "OperationCanceledError",
    "InvalidDurationError",
    # Config
    "ConfigError",
]
