"""
Service factory for wiring a playbook session.

Builds the collection and the services that share it, so every session
(and every test) gets its own tag index and playbooks.
"""
from typing import Optional

import requests

from ..models.collection import PlaybookCollection
from ..models.play import Identity
from .diagram_validator import DiagramValidator
from .playbook_service import PlaybookService
from .sync_service import SyncConfig, SyncService


class ServiceFactory:
    """
    Factory for creating service instances with their dependencies injected.
    """

    def __init__(self, sync_config: Optional[SyncConfig] = None,
                 session: Optional[requests.Session] = None):
        """
        Initialize factory with default configurations.

        Args:
            sync_config: Remote API settings shared by every sync service
            session: Optional HTTP session handed to sync services
        """
        self.sync_config = sync_config or SyncConfig()
        self._session = session
        self._validator: Optional[DiagramValidator] = None

    def create_collection(self) -> PlaybookCollection:
        """Create an empty session collection."""
        return PlaybookCollection()

    def create_playbook_service(
        self,
        collection: PlaybookCollection,
        identity: Optional[Identity] = None
    ) -> PlaybookService:
        """
        Create PlaybookService acting for ``identity``.

        Args:
            collection: Session state to operate on
            identity: Caller-supplied user

        Returns:
            Configured PlaybookService instance
        """
        return PlaybookService(collection, identity=identity, validator=self._get_validator())

    def create_sync_service(self, collection: PlaybookCollection) -> SyncService:
        """Create SyncService populating ``collection``."""
        return SyncService(collection, config=self.sync_config, session=self._session)

    def create_complete_service_suite(self, identity: Optional[Identity] = None) -> dict:
        """
        Create a fresh collection and the services sharing it.

        Returns:
            Dictionary with the collection and all configured services
        """
        collection = self.create_collection()
        return {
            'collection': collection,
            'playbooks': self.create_playbook_service(collection, identity),
            'sync': self.create_sync_service(collection)
        }

    def _get_validator(self) -> DiagramValidator:
        """Get shared diagram validator."""
        if self._validator is None:
            self._validator = DiagramValidator()
        return self._validator

    def configure_custom_validator(self, validator: DiagramValidator) -> None:
        """Use a custom validator for services created from now on."""
        self._validator = validator
