# Path: core/errors.py
# Purpose: Define the error taxonomy shared by the store, repositories, and search.
# Layer: core.
# Details: Every error carries the failing operation and target so callers can choose retry or abort.

from __future__ import annotations

from typing import Any, Optional


class ClipArchiveError(Exception):
    """Base class for archive errors raised by core services."""

    def __init__(self, message: str, operation: Optional[str] = None, target: Any = None) -> None:
        super().__init__(message)
        self.operation = operation
        self.target = target

    def __str__(self) -> str:
        message = super().__str__()
        if self.operation is None:
            return message
        if self.target is None:
            return f"{self.operation}: {message}"
        return f"{self.operation}({self.target}): {message}"


class NotFound(ClipArchiveError, LookupError):
    """Lookup by id matched no rows."""


class ConstraintViolation(ClipArchiveError):
    """The store rejected a write."""


class StoreUnavailable(ClipArchiveError):
    """The store could not be opened or reached."""


class InvalidFilter(ClipArchiveError, ValueError):
    """A filter combination that cannot be compiled."""


class UploadFailed(ClipArchiveError, ValueError):
    """A clip could not be sent to a server, or the server is misconfigured."""


__all__ = [
    "ClipArchiveError",
    "NotFound",
    "ConstraintViolation",
    "StoreUnavailable",
    "InvalidFilter",
    "UploadFailed",
]
