"""
Playbook service: creation, branching, view edits and lookups.

Every operation runs synchronously against the in-memory collection and
either completes or raises before anything is changed. Writing the result
back to the remote API is left to the caller; changed plays are listed in
``collection.dirty_play_ids`` until the next successful fetch.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..models.collection import PlaybookCollection
from ..models.diagram import AnimationTrack, Line, Position, Text, View
from ..models.play import Identity, Play, PlayCategory, Playbook, Version
from ..models.templates import FormationTemplates
from ..utils.constants import COPY_SUFFIX, DEFAULT_VERSION_NAME, DEFAULT_VIEW_NAME
from ..utils.time_utils import new_id, utc_now
from .diagram_validator import DiagramValidator, PlayDetailsRule, ValidationResult
from .errors import NotFoundError, ValidationError
from .version_branching import branch_version, clone_history, resolve_base_version

logger = logging.getLogger(__name__)

# View fields a caller may replace, with the model used to parse raw dicts
VIEW_FIELDS = {
    "name": None,
    "positions": Position,
    "lines": Line,
    "texts": Text,
    "animations": AnimationTrack,
}


class PlaybookService:
    """
    Manages playbooks, plays and their version history for one session.
    """

    def __init__(self, collection: PlaybookCollection, identity: Optional[Identity] = None,
                 validator: Optional[DiagramValidator] = None):
        """
        Initialize the playbook service.

        Args:
            collection: Session state the service reads and mutates
            identity: User on whose behalf changes are made
            validator: Optional custom diagram validator
        """
        self.collection = collection
        self.identity = identity or Identity()
        self.validator = validator or DiagramValidator()
        self._details_rule = PlayDetailsRule()

    # ---------- Lookups ---------- #

    def get_playbook_by_id(self, playbook_id: str) -> Optional[Playbook]:
        """Get a playbook by id."""
        return next((pb for pb in self.collection.playbooks if pb.id == playbook_id), None)

    def get_play_by_id(self, play_id: str) -> Optional[Play]:
        """Get a play by id from any playbook."""
        return next((play for play in self.collection.iter_plays() if play.id == play_id), None)

    def get_plays_by_category(self, category) -> List[Play]:
        """All plays across every playbook filed under ``category``."""
        wanted = PlayCategory.parse(category)
        if wanted is None:
            return []
        return [play for play in self.collection.iter_plays() if play.category == wanted]

    def get_plays_by_tag(self, tag: str) -> List[Play]:
        """All plays across every playbook carrying exactly ``tag``."""
        return [play for play in self.collection.iter_plays() if tag in play.tags]

    @staticmethod
    def get_current_version(play: Play) -> Optional[Version]:
        """Resolve the play's current pointer; None if it is stale."""
        return play.get_version(play.current_version_id)

    @property
    def available_tags(self) -> List[str]:
        return self.collection.tags.to_list()

    # ---------- Playbook Management ---------- #

    def create_playbook(self, name: str, team_id: str, description: Optional[str] = None) -> Playbook:
        """
        Create a new, empty playbook.

        Raises:
            ValidationError: If the name is empty
        """
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Playbook name is required")

        playbook = Playbook(
            id=new_id("playbook"),
            name=name.strip(),
            description=description,
            team_id=team_id
        )
        self.collection.playbooks.append(playbook)
        logger.info("Created playbook %s (%s)", playbook.id, playbook.name)
        return playbook

    # ---------- Play Management ---------- #

    def create_play(self, playbook_id: str, name: str, category,
                    tags: Optional[Iterable[str]] = None,
                    description: Optional[str] = None) -> Play:
        """
        Create a play with one version holding one empty initial view.

        Args:
            playbook_id: Playbook the play is filed in
            name: Play name
            category: A PlayCategory or its value
            tags: Free-form tags
            description: Optional description

        Returns:
            Created play

        Raises:
            ValidationError: If the name is empty or the category is unknown
            NotFoundError: If the playbook does not exist
        """
        tags = _as_tag_list(tags or [])
        self._details_rule.validate(name=name, category=category, tags=tags) \
            .raise_if_invalid("Invalid play")

        playbook = self.get_playbook_by_id(playbook_id)
        if playbook is None:
            raise NotFoundError(f"Playbook with ID {playbook_id} not found")

        now = utc_now()
        initial_view = View(id=new_id("view"), name=DEFAULT_VIEW_NAME, is_initial_view=True)
        version = Version(
            id=new_id("version"),
            name=DEFAULT_VERSION_NAME,
            created_at=now,
            created_by=self.identity.user_id,
            created_by_name=self.identity.user_name,
            views=[initial_view]
        )
        play = Play(
            id=new_id("play"),
            name=name.strip(),
            description=description,
            category=PlayCategory.parse(category),
            tags=_dedupe(tags),
            is_published=False,
            created_at=now,
            updated_at=now,
            author_id=self.identity.user_id,
            author_name=self.identity.user_name,
            versions=[version],
            current_version_id=version.id
        )

        playbook.plays.append(play)
        playbook.touch()
        self._remember_tags(play.tags)
        self._mark_dirty(play)
        logger.info("Created play %s (%s) in playbook %s", play.id, play.name, playbook.id)
        return play

    def update_play(self, play_id: str, name: Optional[str] = None,
                    description: Optional[str] = None, category=None,
                    tags: Optional[Iterable[str]] = None,
                    is_published: Optional[bool] = None) -> Play:
        """
        Update a play's metadata. Versions are not touched.

        Only arguments that are not None are applied.

        Raises:
            ValidationError: If a supplied value is invalid
            NotFoundError: If the play does not exist
        """
        tags = _as_tag_list(tags) if tags is not None else None
        self._details_rule.validate(
            name=name, category=category, tags=tags,
            require_name=False, require_category=False
        ).raise_if_invalid("Invalid play update")

        playbook, play = self._locate_play(play_id)

        if name is not None:
            play.name = name.strip()
        if description is not None:
            play.description = description
        if category is not None:
            play.category = PlayCategory.parse(category)
        if tags is not None:
            play.tags = _dedupe(tags)
            self._remember_tags(play.tags)
        if is_published is not None:
            play.is_published = bool(is_published)

        play.touch()
        playbook.touch()
        self._mark_dirty(play)
        return play

    def duplicate_play(self, play_id: str, new_name: Optional[str] = None) -> Play:
        """
        Copy a play, with its whole version history, into the same playbook.

        The copy is unpublished, authored by the current user and shares no
        ids with the original.
        """
        playbook, original = self._locate_play(play_id)
        if new_name is not None and (not isinstance(new_name, str) or not new_name.strip()):
            raise ValidationError("Play name cannot be empty")

        versions, current_id = clone_history(original)
        now = utc_now()
        copy = Play(
            id=new_id("play"),
            name=new_name.strip() if new_name else f"{original.name}{COPY_SUFFIX}",
            description=original.description,
            category=original.category,
            tags=list(original.tags),
            is_published=False,
            created_at=now,
            updated_at=now,
            author_id=self.identity.user_id,
            author_name=self.identity.user_name,
            versions=versions,
            current_version_id=current_id
        )
        playbook.plays.append(copy)
        playbook.touch()
        self._mark_dirty(copy)
        logger.info("Duplicated play %s as %s", original.id, copy.id)
        return copy

    # ---------- Version Management ---------- #

    def create_play_version(self, play_id: str, name: str, description: Optional[str] = None,
                            based_on_version_id: Optional[str] = None) -> Version:
        """
        Branch a new version from an existing one.

        The base is ``based_on_version_id`` when given, otherwise the current
        version. The new version is appended to the history and becomes
        current; the base is left exactly as it was.

        Raises:
            ValidationError: If the name is empty or a base animation points at a
                missing marker
            NotFoundError: If the play or base version does not exist
        """
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Version name cannot be empty")

        _, play = self._locate_play(play_id)
        base = resolve_base_version(play, based_on_version_id)
        version = branch_version(base, name.strip(), self.identity, description)

        play.versions.append(version)
        play.current_version_id = version.id
        play.touch()
        self._mark_dirty(play)
        logger.info(
            "Branched version %s of play %s from %s",
            version.id, play.id, base.id if base else None
        )
        return version

    # ---------- View Editing ---------- #

    def update_play_view(self, play_id: str, version_id: str, view_id: str,
                         updates: Dict[str, Any]) -> View:
        """
        Replace fields of one view.

        Each supplied field replaces the whole field (supplying ``positions``
        replaces every position). The view is swapped out for a rebuilt one,
        so sibling views and other versions keep their identity.

        Args:
            play_id: Play owning the version
            version_id: Version owning the view
            view_id: View to update
            updates: Any of name, positions, lines, texts, animations; list
                items may be model instances or their dict form

        Returns:
            The updated view

        Raises:
            ValidationError: If the result would be invalid; nothing is changed
            NotFoundError: If the play, version or view does not exist
        """
        _, play, version_index, view_index = self._locate_view(play_id, version_id, view_id)
        version = play.versions[version_index]
        view = version.views[view_index]

        updated_view = replace(view, **self._parse_view_updates(updates))
        self.validator.check_view(updated_view)

        views = list(version.views)
        views[view_index] = updated_view
        play.versions[version_index] = replace(version, views=views)
        play.touch()
        self._mark_dirty(play)
        logger.debug(
            "Updated view %s of version %s (%s)", view_id, version_id, sorted(updates or {})
        )
        return updated_view

    def apply_template(self, play_id: str, version_id: str, view_id: str,
                       template_id: str) -> View:
        """
        Reset a view's markers to a formation template.

        Existing animations are dropped since they would point at the
        replaced markers; lines and texts are kept.
        """
        template = FormationTemplates.get_template_by_id(template_id)
        if template is None:
            raise NotFoundError(f"Template with ID {template_id} not found")
        return self.update_play_view(play_id, version_id, view_id, {
            "positions": template.build_positions(),
            "animations": [],
        })

    # ---------- Helpers ---------- #

    def _locate_play(self, play_id: str) -> Tuple[Playbook, Play]:
        for playbook in self.collection.playbooks:
            play = playbook.get_play(play_id)
            if play is not None:
                return playbook, play
        raise NotFoundError(f"Play with ID {play_id} not found")

    def _locate_view(self, play_id: str, version_id: str,
                     view_id: str) -> Tuple[Playbook, Play, int, int]:
        playbook, play = self._locate_play(play_id)
        version_index = play.version_index(version_id)
        if version_index == -1:
            raise NotFoundError(f"Version with ID {version_id} not found in play {play_id}")
        views = play.versions[version_index].views
        for view_index, view in enumerate(views):
            if view.id == view_id:
                return playbook, play, version_index, view_index
        raise NotFoundError(f"View with ID {view_id} not found in version {version_id}")

    @staticmethod
    def _parse_view_updates(updates: Dict[str, Any]) -> Dict[str, Any]:
        result = ValidationResult()
        changes: Dict[str, Any] = {}
        for key, value in (updates or {}).items():
            if key not in VIEW_FIELDS:
                result.add_error(f"Field '{key}' cannot be updated on a view")
                continue
            model = VIEW_FIELDS[key]
            if model is None:
                changes[key] = value
                continue
            if value is None or isinstance(value, (str, dict)):
                result.add_error(f"Field '{key}' must be a list")
                continue
            try:
                changes[key] = [item if isinstance(item, model) else model.from_dict(item)
                                for item in value]
            except (KeyError, TypeError, ValueError) as e:
                result.add_error(f"Malformed {key}: {e}")
        result.raise_if_invalid("Invalid view update")
        return changes

    def _remember_tags(self, tags: Iterable[str]) -> None:
        added = self.collection.tags.add(tags)
        if added:
            logger.debug("New tags: %s", ", ".join(added))

    def _mark_dirty(self, play: Play) -> None:
        self.collection.dirty_play_ids.add(play.id)


def _dedupe(tags: Iterable[str]) -> List[str]:
    seen = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


def _as_tag_list(tags):
    # Anything but a list or tuple is passed through for validation to reject
    return list(tags) if isinstance(tags, (list, tuple)) else tags
