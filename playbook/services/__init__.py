"""
Services package for the Playbook application.

This package contains service classes that handle business logic.
"""
from .errors import PlaybookError, ValidationError, NotFoundError, TransportError
from .diagram_validator import DiagramValidator, ValidationResult
from .playbook_service import PlaybookService
from .sync_service import SyncConfig, SyncService
from .service_factory import ServiceFactory

__all__ = [
    "PlaybookError", "ValidationError", "NotFoundError", "TransportError",
    "DiagramValidator", "ValidationResult", "PlaybookService",
    "SyncConfig", "SyncService", "ServiceFactory"
]
