"""In-memory session state: the loaded playbooks and the available-tags index."""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional, Set

from .play import Play, Playbook


class TagIndex:
    """
    Ordered, grow-only set of tags seen in the session.

    Removing a tag from a play never removes it here, so typeahead
    suggestions stay stable while a coach edits.
    """

    def __init__(self, tags: Optional[Iterable[str]] = None):
        self._tags: List[str] = []
        self._seen: Set[str] = set()
        if tags:
            self.add(tags)

    def add(self, tags: Iterable[str]) -> List[str]:
        """
        Add tags not seen before.

        Args:
            tags: Tags supplied by a create or update call

        Returns:
            The tags that were new to the index, in input order
        """
        added = []
        for tag in tags:
            if tag and tag not in self._seen:
                self._seen.add(tag)
                self._tags.append(tag)
                added.append(tag)
        return added

    def to_list(self) -> List[str]:
        return list(self._tags)

    def __contains__(self, tag: object) -> bool:
        return tag in self._seen

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._tags))

    def __len__(self) -> int:
        return len(self._tags)


class PlaybookCollection:
    """
    Everything loaded for one session.

    Created on load and discarded on teardown; independent sessions never
    share tags or playbooks.
    """

    def __init__(self, playbooks: Optional[List[Playbook]] = None,
                 available_tags: Optional[Iterable[str]] = None):
        self.playbooks: List[Playbook] = list(playbooks or [])
        self.tags = TagIndex(available_tags)
        self.error: Optional[str] = None
        self.is_loading = False
        # Plays changed locally since the last successful fetch
        self.dirty_play_ids: Set[str] = set()

    def replace(self, playbooks: List[Playbook], available_tags: Iterable[str]) -> None:
        """Swap in freshly fetched content and clear local bookkeeping."""
        self.playbooks = list(playbooks)
        self.tags = TagIndex(available_tags)
        self.error = None
        self.dirty_play_ids.clear()

    def clear(self, error: Optional[str] = None) -> None:
        """Drop all content, optionally recording why."""
        self.playbooks = []
        self.tags = TagIndex()
        self.error = error
        self.dirty_play_ids.clear()

    def iter_plays(self) -> Iterator[Play]:
        for playbook in self.playbooks:
            yield from playbook.plays

    def to_dict(self) -> Dict:
        """Convert collection to dictionary in the remote API's shape."""
        return {
            "playbooks": [playbook.to_dict() for playbook in self.playbooks],
            "availableTags": self.tags.to_list()
        }
