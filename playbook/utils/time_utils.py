"""
Time and identifier helpers for the Playbook application.

This module contains common utility functions used throughout the application.
"""
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4


def utc_now() -> datetime:
    """
    Get the current time as a timezone-aware UTC datetime.

    Returns:
        Current UTC datetime
    """
    return datetime.now(timezone.utc)


def parse_iso(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp as sent by the remote API.

    Accepts the trailing ``Z`` form JavaScript produces. Naive values are
    assumed to be UTC.

    Example:
        >>> parse_iso("2024-03-01T12:00:00.000Z").isoformat()
        '2024-03-01T12:00:00+00:00'
    """
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_iso(value: Optional[datetime]) -> Optional[str]:
    """Format a datetime for the wire, or ``None``."""
    return value.isoformat() if value else None


def new_id(prefix: str) -> str:
    """
    Mint a fresh opaque identifier.

    Example:
        >>> new_id("view").startswith("view-")
        True
    """
    return f"{prefix}-{uuid4().hex}"
