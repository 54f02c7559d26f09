"""
Constants for the Playbook application.

This module contains configuration constants used throughout the application.
"""

# Application metadata
APP_TITLE = "Team Playbook"

# Defaults for newly created plays
DEFAULT_VERSION_NAME = "Version 1.0"
DEFAULT_VIEW_NAME = "Initial Setup"
COPY_SUFFIX = " (Copy)"

# Fallback identity when the caller supplies none
DEFAULT_USER_ID = "unknown"
DEFAULT_USER_NAME = "Unknown User"

# Remote collaborator defaults
DEFAULT_API_URL = "http://127.0.0.1:3000/api"
PLAYBOOKS_PATH = "/playbooks"
DEFAULT_API_TIMEOUT = 10.0

# Message shown to the UI when a fetch fails
FETCH_ERROR_MESSAGE = "Failed to load playbooks. Please try again later."

# Web server defaults
DEFAULT_WEB_HOST = "127.0.0.1"
DEFAULT_WEB_PORT = 7122

# Drawing defaults (diagram surface is 0-100 on both axes)
SURFACE_MIN = 0.0
SURFACE_MAX = 100.0
DEFAULT_LINE_COLOR = "#000000"
DEFAULT_LINE_WIDTH = 2.0
DEFAULT_FONT_SIZE = 14.0
DEFAULT_TEXT_COLOR = "#000000"
OPPONENT_ROTATION = 180.0
