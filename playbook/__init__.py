"""
Team Playbook

Tactical plays for a team: versioned diagrams with alternative views,
per-player movement animation, and category/tag retrieval.

This package provides the entity model, the services that branch versions
and edit views, a client for the remote playbook API, and a Flask JSON API.
"""
from .models import Playbook, Play, Version, View, PlayCategory, Identity
from .services import (
    PlaybookService, SyncService, ServiceFactory,
    ValidationError, NotFoundError, TransportError
)

__version__ = "1.0.0"
__author__ = "Playbook Development Team"

__all__ = [
    "Playbook", "Play", "Version", "View", "PlayCategory", "Identity",
    "PlaybookService", "SyncService", "ServiceFactory",
    "ValidationError", "NotFoundError", "TransportError"
]
