"""
Exceptions raised by the playbook services.

All exceptions inherit from :class:`PlaybookError` so callers can catch
the full family with a single ``except PlaybookError`` clause.
"""
from typing import List, Optional


class PlaybookError(Exception):
    """Base exception for all playbook errors."""


class ValidationError(PlaybookError):
    """Malformed input to a create or update call. Nothing was changed."""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = errors or [message]


class NotFoundError(PlaybookError):
    """An id did not resolve against the loaded collection."""


class TransportError(PlaybookError):
    """The remote API could not be reached or answered with a failure."""
