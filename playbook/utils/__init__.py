"""
Utilities package for the Playbook application.

This package contains utility functions used throughout the application.
"""
from .time_utils import format_iso, new_id, parse_iso, utc_now
from .constants import (
    APP_TITLE, DEFAULT_VERSION_NAME, DEFAULT_VIEW_NAME,
    DEFAULT_USER_ID, DEFAULT_USER_NAME
)

__all__ = [
    "format_iso", "new_id", "parse_iso", "utc_now", "APP_TITLE",
    "DEFAULT_VERSION_NAME", "DEFAULT_VIEW_NAME", "DEFAULT_USER_ID", "DEFAULT_USER_NAME"
]
