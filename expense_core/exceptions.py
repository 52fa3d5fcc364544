"""Domain-specific exceptions for the expense tracker core."""

from __future__ import annotations

from typing import Dict, Optional


class ValidationError(ValueError):
    """Raised when form data does not meet validation requirements.

    ``errors`` maps each offending field to a user-facing message so the
    caller can display them next to the matching inputs.
    """

    def __init__(self, message: str, errors: Optional[Dict[str, str]] = None) -> None:
        super().__init__(message)
        self.errors: Dict[str, str] = dict(errors or {})


class RecordNotFoundError(LookupError):
    """Raised when an expense record cannot be located."""


class PersistenceError(IOError):
    """Raised when a storage medium encounters unrecoverable issues."""


class StorageUnavailableError(PersistenceError):
    """Raised when the storage medium is inaccessible, corrupt or out of quota."""
