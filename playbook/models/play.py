"""Play, version and playbook models for the Playbook application."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from .diagram import View
from ..utils.constants import DEFAULT_USER_ID, DEFAULT_USER_NAME
from ..utils.time_utils import format_iso, parse_iso, utc_now


class PlayCategory(Enum):
    """Closed set of play categories."""
    DEFENSE = "DEFENSE"
    CORNER_KICKS = "CORNER_KICKS"
    SIDE_OUTS = "SIDE_OUTS"
    GOAL_KICKS = "GOAL_KICKS"
    KICKOFFS = "KICKOFFS"
    INDIRECT = "INDIRECT"
    DIRECT = "DIRECT"

    @property
    def label(self) -> str:
        """Human-readable name for presentation layers."""
        return CATEGORY_LABELS[self]

    @classmethod
    def parse(cls, value) -> Optional[PlayCategory]:
        """Resolve a category from its value, or None if it is not one."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


CATEGORY_LABELS = {
    PlayCategory.DEFENSE: "Defense",
    PlayCategory.CORNER_KICKS: "Corner Kicks",
    PlayCategory.SIDE_OUTS: "Side Outs",
    PlayCategory.GOAL_KICKS: "Goal Kicks",
    PlayCategory.KICKOFFS: "Kickoffs",
    PlayCategory.INDIRECT: "Indirect",
    PlayCategory.DIRECT: "Direct",
}


@dataclass(frozen=True)
class Identity:
    """The user on whose behalf an operation runs, as supplied by the caller."""
    user_id: str = DEFAULT_USER_ID
    user_name: str = DEFAULT_USER_NAME


@dataclass
class Version:
    """
    A snapshot of a play's diagrams.

    Versions are never edited in place once they belong to a play; services
    swap in a rebuilt copy instead.
    """
    id: str
    name: str
    created_by: str
    created_by_name: str
    views: List[View] = field(default_factory=list)
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    def __post_init__(self):
        """Initialize creation timestamp."""
        if self.created_at is None:
            self.created_at = utc_now()

    def get_view(self, view_id: str) -> Optional[View]:
        """Find a view by id."""
        return next((view for view in self.views if view.id == view_id), None)

    def initial_views(self) -> List[View]:
        """Views flagged as the default display state (usually exactly one)."""
        return [view for view in self.views if view.is_initial_view]

    def to_dict(self) -> Dict:
        """Convert version to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "createdAt": format_iso(self.created_at),
            "createdBy": self.created_by,
            "createdByName": self.created_by_name,
            "views": [view.to_dict() for view in self.views]
        }

    @classmethod
    def from_dict(cls, data: Dict) -> Version:
        """Create version from dictionary."""
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            description=data.get("description"),
            created_at=parse_iso(data.get("createdAt")),
            created_by=data.get("createdBy", DEFAULT_USER_ID),
            created_by_name=data.get("createdByName", DEFAULT_USER_NAME),
            views=[View.from_dict(view) for view in data.get("views", [])]
        )


@dataclass
class Play:
    """A named tactic owning an append-only list of versions."""
    id: str
    name: str
    category: PlayCategory
    author_id: str
    author_name: str
    versions: List[Version] = field(default_factory=list)
    current_version_id: Optional[str] = None
    description: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    is_published: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        """Initialize timestamps."""
        if self.created_at is None:
            self.created_at = utc_now()
        if self.updated_at is None:
            self.updated_at = self.created_at

    def get_version(self, version_id: Optional[str]) -> Optional[Version]:
        """Find a version by id."""
        if version_id is None:
            return None
        return next((version for version in self.versions if version.id == version_id), None)

    def version_index(self, version_id: str) -> int:
        """Index of a version in the history, or -1."""
        for index, version in enumerate(self.versions):
            if version.id == version_id:
                return index
        return -1

    def touch(self) -> None:
        """Mark the play as modified now."""
        self.updated_at = utc_now()

    def to_dict(self) -> Dict:
        """Convert play to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category.value,
            "tags": list(self.tags),
            "isPublished": self.is_published,
            "createdAt": format_iso(self.created_at),
            "updatedAt": format_iso(self.updated_at),
            "authorId": self.author_id,
            "authorName": self.author_name,
            "versions": [version.to_dict() for version in self.versions],
            "currentVersionId": self.current_version_id
        }

    @classmethod
    def from_dict(cls, data: Dict) -> Play:
        """Create play from dictionary."""
        return cls(
            id=data["id"],
            name=data["name"],
            description=data.get("description"),
            category=PlayCategory(data["category"]),
            tags=list(data.get("tags") or []),
            is_published=bool(data.get("isPublished", False)),
            created_at=parse_iso(data.get("createdAt")),
            updated_at=parse_iso(data.get("updatedAt")),
            author_id=data.get("authorId", DEFAULT_USER_ID),
            author_name=data.get("authorName", DEFAULT_USER_NAME),
            versions=[Version.from_dict(version) for version in data.get("versions", [])],
            current_version_id=data.get("currentVersionId")
        )


@dataclass
class Playbook:
    """A team-scoped collection of plays."""
    id: str
    name: str
    team_id: str
    plays: List[Play] = field(default_factory=list)
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        """Initialize timestamps."""
        if self.created_at is None:
            self.created_at = utc_now()
        if self.updated_at is None:
            self.updated_at = self.created_at

    def get_play(self, play_id: str) -> Optional[Play]:
        """Find a play in this playbook by id."""
        return next((play for play in self.plays if play.id == play_id), None)

    def touch(self) -> None:
        """Mark the playbook as modified now."""
        self.updated_at = utc_now()

    def to_dict(self) -> Dict:
        """Convert playbook to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "teamId": self.team_id,
            "createdAt": format_iso(self.created_at),
            "updatedAt": format_iso(self.updated_at),
            "plays": [play.to_dict() for play in self.plays]
        }

    @classmethod
    def from_dict(cls, data: Dict) -> Playbook:
        """Create playbook from dictionary."""
        return cls(
            id=data["id"],
            name=data["name"],
            description=data.get("description"),
            team_id=data.get("teamId", ""),
            created_at=parse_iso(data.get("createdAt")),
            updated_at=parse_iso(data.get("updatedAt")),
            plays=[Play.from_dict(play) for play in data.get("plays", [])]
        )
