"""
Synchronization with the remote playbook API.

This is the only module that talks to the remote collaborator. It loads the
full playbook collection and tag index and maps the wire shapes onto the
models.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from ..models.collection import PlaybookCollection
from ..models.diagram import View
from ..models.play import Play, PlayCategory, Playbook, Version
from ..utils.constants import (
    DEFAULT_API_TIMEOUT, DEFAULT_API_URL, DEFAULT_USER_ID, DEFAULT_USER_NAME,
    FETCH_ERROR_MESSAGE, PLAYBOOKS_PATH
)
from ..utils.time_utils import parse_iso
from .errors import TransportError

logger = logging.getLogger(__name__)


@dataclass
class SyncConfig:
    """Where and how to reach the remote API."""
    base_url: str = DEFAULT_API_URL
    playbooks_path: str = PLAYBOOKS_PATH
    timeout: float = DEFAULT_API_TIMEOUT

    @classmethod
    def from_env(cls) -> SyncConfig:
        """Build a config from PLAYBOOK_API_URL / PLAYBOOK_API_TIMEOUT."""
        return cls(
            base_url=os.environ.get("PLAYBOOK_API_URL", DEFAULT_API_URL),
            timeout=float(os.environ.get("PLAYBOOK_API_TIMEOUT", DEFAULT_API_TIMEOUT))
        )


# ---------- Wire mapping ---------- #

def version_from_wire(data: Dict[str, Any], author_id: str, author_name: str) -> Version:
    """
    Map a wire version onto a Version.

    The wire carries a version number rather than a name, and notes rather
    than a description. Views are absent until diagram content is stored
    remotely, in which case the version has none.
    """
    number = data.get("versionNumber")
    name = f"Version {number}" if number is not None else data.get("name", "")
    raw_views = data.get("views")
    return Version(
        id=data["id"],
        name=name,
        description=data.get("notes", data.get("description")),
        created_at=parse_iso(data.get("createdAt")),
        created_by=author_id,
        created_by_name=author_name,
        views=[View.from_dict(view) for view in raw_views] if isinstance(raw_views, list) else []
    )


def play_from_wire(data: Dict[str, Any]) -> Play:
    """Map a wire play onto a Play, oldest version first."""
    author_id = data.get("authorId") or DEFAULT_USER_ID
    author_name = data.get("authorName") or DEFAULT_USER_NAME
    versions = [version_from_wire(v, author_id, author_name) for v in data.get("versions") or []]
    versions.sort(key=lambda version: version.created_at)
    return Play(
        id=data["id"],
        name=data["name"],
        description=data.get("description"),
        category=PlayCategory(data["category"]),
        tags=list(data.get("tags") or []),
        is_published=bool(data.get("isPublished", False)),
        created_at=parse_iso(data.get("createdAt")),
        updated_at=parse_iso(data.get("updatedAt")),
        author_id=author_id,
        author_name=author_name,
        versions=versions,
        current_version_id=data.get("currentVersionId")
    )


def playbook_from_wire(data: Dict[str, Any]) -> Playbook:
    """Map a wire playbook onto a Playbook."""
    return Playbook(
        id=data["id"],
        name=data["name"],
        description=data.get("description"),
        team_id=data.get("teamId") or "",
        created_at=parse_iso(data.get("createdAt")),
        updated_at=parse_iso(data.get("updatedAt")),
        plays=[play_from_wire(play) for play in data.get("plays") or []]
    )


# ---------- Service ---------- #

class SyncService:
    """
    Loads the playbook collection from the remote API.

    Failures never propagate to the caller: they are logged, recorded on the
    collection's ``error`` and in ``last_error``, and the collection is
    emptied so nobody acts on stale data. Nothing is retried.
    """

    def __init__(self, collection: PlaybookCollection, config: Optional[SyncConfig] = None,
                 session: Optional[requests.Session] = None):
        """
        Initialize the sync service.

        Args:
            collection: Session state to populate
            config: Remote API settings
            session: Optional pre-built HTTP session (tests mount a stub adapter)
        """
        self.collection = collection
        self.config = config or SyncConfig()
        self._session = session
        self.last_error: Optional[TransportError] = None

    @property
    def error(self) -> Optional[str]:
        return self.collection.error

    def fetch_playbooks(self) -> List[Playbook]:
        """
        Replace the collection with the remote playbooks and tags.

        Returns:
            The loaded playbooks; empty if the fetch failed
        """
        self.collection.is_loading = True
        try:
            data = self._get_json(self.config.playbooks_path)
            playbooks = self._map_payload(data)
        except TransportError as e:
            logger.warning("Failed to fetch playbooks: %s", e)
            self.last_error = e
            self.collection.clear(FETCH_ERROR_MESSAGE)
            return []
        finally:
            self.collection.is_loading = False

        tags = list(data.get("availableTags") or [])
        for playbook in playbooks:
            for play in playbook.plays:
                tags.extend(play.tags)

        self.collection.replace(playbooks, tags)
        self.last_error = None
        logger.info(
            "Loaded %d playbooks (%d plays)",
            len(playbooks), sum(len(pb.plays) for pb in playbooks)
        )
        return playbooks

    def refetch(self) -> List[Playbook]:
        """Alias kept for UI callers that refresh on demand."""
        return self.fetch_playbooks()

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None

    def _get_json(self, path: str) -> Dict[str, Any]:
        url = f"{self.config.base_url.rstrip('/')}{path}"
        try:
            response = self._get_session().get(url, timeout=self.config.timeout)
        except requests.RequestException as e:
            raise TransportError(f"GET {path} failed: {e}") from e

        if not response.ok:
            raise TransportError(f"GET {path} returned status {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise TransportError(f"GET {path} returned invalid JSON") from e
        if not isinstance(data, dict):
            raise TransportError(f"GET {path} returned an unexpected payload")
        return data

    @staticmethod
    def _map_payload(data: Dict[str, Any]) -> List[Playbook]:
        try:
            return [playbook_from_wire(pb) for pb in data.get("playbooks") or []]
        except (KeyError, TypeError, ValueError) as e:
            raise TransportError(f"Malformed playbook payload: {e}") from e

    def _get_session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
        return self._session
