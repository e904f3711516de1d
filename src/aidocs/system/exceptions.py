# Author: PB
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# src/aidocs/system/exceptions.py

"""
aidocs-specific exception classes.

Unit-level errors (grouping, transformation) are recoverable: the run logs
them and moves on to the next unit. Persistence errors are isolated per
ledger file.
"""


class AidocsError(Exception):
    """Base exception for all aidocs errors."""
    pass


class ConfigError(AidocsError):
    """Raised when there are configuration validation or loading errors."""
    pass


class InvalidGroupingError(AidocsError):
    """Raised when a document has no usable source files or no target."""
    pass


class NotConfiguredError(AidocsError):
    """Raised when a ledger is saved without a backing file."""
    pass


# === PERSISTENCE ERRORS ===

class PersistenceError(AidocsError):
    """Base class for ledger persistence errors."""

    def __init__(self, message: str, path: str = None):
        self.path = path
        super().__init__(message)


class PersistenceCorruptError(PersistenceError):
    """Sidecar ledger file is unreadable or malformed."""
    pass


# === TRANSFORMATION ERRORS ===

class TransformationError(AidocsError):
    """The external transformation failed for one document."""

    def __init__(self, message: str, target: str = None, retry_possible: bool = True):
        self.target = target
        self.retry_possible = retry_possible
        super().__init__(message)
