"""Domain error taxonomy for batch usage queries."""

from __future__ import annotations


class CryptoUsageError(Exception):
    """Base class for errors raised by the query core."""


class InputError(CryptoUsageError, ValueError):
    """Raised when a call is missing mandatory input (fatal to that call)."""


class ParseError(CryptoUsageError, ValueError):
    """Raised when an identifier or requirement cannot be parsed."""

    def __init__(self, message: str, *, raw: str | None = None) -> None:
        super().__init__(message)
        self.raw = raw


class ConstraintError(ParseError):
    """Raised when a version requirement cannot be compiled into a constraint."""


class StorageError(CryptoUsageError):
    """Raised when a catalog or usage read fails downstream."""


class BatchCancelledError(CryptoUsageError):
    """Raised when a batch is cancelled or runs past its deadline."""
