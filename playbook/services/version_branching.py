"""
Version branching for plays.

A new version is a structural clone of a base version: every view and every
primitive under it is copied by value and given a fresh id, and animation
tracks are re-pointed at the cloned markers. Nothing is shared with the base,
so editing the branch can never reach back into history.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, List, Optional, Tuple

from ..models.diagram import AnimationTrack, Line, View
from ..models.play import Identity, Play, Version
from ..utils.time_utils import new_id, utc_now
from .errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def clone_view(view: View) -> Tuple[View, Dict[str, str]]:
    """
    Deep-copy a view with freshly minted ids.

    Args:
        view: View to copy; left untouched

    Returns:
        The cloned view and the old-to-new position id mapping used to
        rewrite its animation tracks
    """
    id_map: Dict[str, str] = {}
    positions = []
    for pos in view.positions:
        cloned = replace(pos, id=new_id("position"))
        id_map[pos.id] = cloned.id
        positions.append(cloned)

    lines = [
        Line(
            id=new_id("line"),
            points=[replace(point) for point in line.points],
            color=line.color,
            width=line.width,
            dashed=line.dashed,
            arrow_end=line.arrow_end
        )
        for line in view.lines
    ]
    texts = [replace(text, id=new_id("text")) for text in view.texts]

    animations = []
    for track in view.animations:
        if track.position_id not in id_map:
            raise ValidationError(
                f"Animation in view {view.id} references unknown position '{track.position_id}'"
            )
        animations.append(AnimationTrack(
            position_id=id_map[track.position_id],
            keyframes=[replace(kf) for kf in track.keyframes]
        ))

    cloned_view = View(
        id=new_id("view"),
        name=view.name,
        positions=positions,
        lines=lines,
        texts=texts,
        animations=animations,
        is_initial_view=view.is_initial_view
    )
    return cloned_view, id_map


def clone_views(views: List[View]) -> List[View]:
    """Clone every view of a version, preserving order."""
    return [clone_view(view)[0] for view in views]


def resolve_base_version(play: Play, based_on_version_id: Optional[str] = None) -> Optional[Version]:
    """
    Pick the version a branch starts from.

    The explicitly requested version when given, otherwise the play's current
    version.

    Raises:
        NotFoundError: If ``based_on_version_id`` is not in the play's history
    """
    if based_on_version_id is not None:
        base = play.get_version(based_on_version_id)
        if base is None:
            raise NotFoundError(
                f"Version with ID {based_on_version_id} not found in play {play.id}"
            )
        return base
    return play.get_version(play.current_version_id)


def branch_version(base: Optional[Version], name: str, identity: Identity,
                   description: Optional[str] = None) -> Version:
    """
    Build a new version from ``base`` without touching it.

    A missing base (a play whose current pointer is stale) yields a version
    with no views.
    """
    views = clone_views(base.views) if base else []
    logger.debug("Cloned %d views from version %s", len(views), base.id if base else None)
    return Version(
        id=new_id("version"),
        name=name,
        description=description,
        created_at=utc_now(),
        created_by=identity.user_id,
        created_by_name=identity.user_name,
        views=views
    )


def clone_history(play: Play) -> Tuple[List[Version], Optional[str]]:
    """
    Clone a play's whole version history for duplication.

    Returns:
        The cloned versions in the original order, and the id of the clone of
        the play's current version (None if the pointer was stale)
    """
    versions = []
    current_id = None
    for version in play.versions:
        cloned = replace(version, id=new_id("version"), views=clone_views(version.views))
        if version.id == play.current_version_id:
            current_id = cloned.id
        versions.append(cloned)
    return versions, current_id
