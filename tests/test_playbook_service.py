"""
Unit tests for PlaybookService play management and lookups.

Tests playbook and play creation, metadata updates, the available-tags
index, duplication and category/tag retrieval.
"""
import unittest

from playbook.models import Identity, PlayCategory, PlaybookCollection, Position
from playbook.services.errors import NotFoundError, ValidationError
from playbook.services.playbook_service import PlaybookService


class TestPlaybookService(unittest.TestCase):
    """Test PlaybookService functionality."""

    def setUp(self) -> None:
        """Set up a session with one playbook."""
        self.collection = PlaybookCollection()
        self.service = PlaybookService(self.collection, Identity("coach-1", "Alex Coach"))
        self.playbook = self.service.create_playbook("Varsity", team_id="team-1")

    # ---------- Playbooks ---------- #

    def test_create_playbook(self) -> None:
        """Test creating an empty playbook."""
        self.assertEqual(self.playbook.name, "Varsity")
        self.assertEqual(self.playbook.team_id, "team-1")
        self.assertEqual(self.playbook.plays, [])
        self.assertIs(self.service.get_playbook_by_id(self.playbook.id), self.playbook)

    def test_create_playbook_requires_name(self) -> None:
        with self.assertRaises(ValidationError):
            self.service.create_playbook("   ", team_id="team-1")

    # ---------- Plays ---------- #

    def test_create_play_has_one_version_and_view(self) -> None:
        """Test a new play starts with Version 1.0 and an empty initial view."""
        play = self.service.create_play(self.playbook.id, "Corner A", "CORNER_KICKS",
                                        tags=["set-piece"], description="Near post run")

        self.assertEqual(play.category, PlayCategory.CORNER_KICKS)
        self.assertEqual(len(play.versions), 1)
        version = play.versions[0]
        self.assertEqual(version.name, "Version 1.0")
        self.assertEqual(play.current_version_id, version.id)
        self.assertEqual(version.created_by, "coach-1")
        self.assertEqual(version.created_by_name, "Alex Coach")
        self.assertEqual(len(version.views), 1)
        view = version.views[0]
        self.assertTrue(view.is_initial_view)
        self.assertEqual((view.positions, view.lines, view.texts, view.animations), ([], [], [], []))
        self.assertFalse(play.is_published)
        self.assertEqual(play.author_id, "coach-1")
        self.assertIn(play, self.playbook.plays)

    def test_create_play_rejects_unknown_category(self) -> None:
        with self.assertRaises(ValidationError):
            self.service.create_play(self.playbook.id, "Corner A", "PENALTIES")
        self.assertEqual(self.playbook.plays, [])

    def test_create_play_rejects_empty_name(self) -> None:
        with self.assertRaises(ValidationError):
            self.service.create_play(self.playbook.id, "", "DIRECT")

    def test_create_play_unknown_playbook(self) -> None:
        with self.assertRaises(NotFoundError):
            self.service.create_play("missing", "Corner A", "CORNER_KICKS")

    def test_default_identity(self) -> None:
        service = PlaybookService(self.collection)

        play = service.create_play(self.playbook.id, "Kickoff", PlayCategory.KICKOFFS)

        self.assertEqual(play.author_id, "unknown")
        self.assertEqual(play.author_name, "Unknown User")

    def test_ids_are_unique(self) -> None:
        first = self.service.create_play(self.playbook.id, "A", "DEFENSE")
        second = self.service.create_play(self.playbook.id, "B", "DEFENSE")

        self.assertNotEqual(first.id, second.id)
        self.assertNotEqual(first.versions[0].id, second.versions[0].id)
        self.assertNotEqual(first.versions[0].views[0].id, second.versions[0].views[0].id)

    def test_update_play(self) -> None:
        """Test updating play metadata."""
        play = self.service.create_play(self.playbook.id, "Wall", "DEFENSE")
        versions_before = list(play.versions)

        updated = self.service.update_play(play.id, name="Wall v2", category="DIRECT",
                                           is_published=True, description="Four-man wall")

        self.assertIs(updated, play)
        self.assertEqual(play.name, "Wall v2")
        self.assertEqual(play.category, PlayCategory.DIRECT)
        self.assertTrue(play.is_published)
        self.assertEqual(play.description, "Four-man wall")
        self.assertEqual(play.versions, versions_before)
        self.assertGreaterEqual(play.updated_at, play.created_at)

    def test_update_play_invalid_leaves_play_unchanged(self) -> None:
        play = self.service.create_play(self.playbook.id, "Wall", "DEFENSE")

        with self.assertRaises(ValidationError):
            self.service.update_play(play.id, name="New name", category="NOPE")

        self.assertEqual(play.name, "Wall")
        self.assertEqual(play.category, PlayCategory.DEFENSE)

    def test_update_unknown_play(self) -> None:
        with self.assertRaises(NotFoundError):
            self.service.update_play("missing", name="x")

    def test_mutations_mark_play_dirty(self) -> None:
        play = self.service.create_play(self.playbook.id, "Wall", "DEFENSE")

        self.assertIn(play.id, self.collection.dirty_play_ids)

    # ---------- Tags ---------- #

    def test_tag_index_only_grows(self) -> None:
        """Test tags removed from a play stay available."""
        play = self.service.create_play(self.playbook.id, "A", "DEFENSE", tags=["press", "zonal"])
        self.service.update_play(play.id, tags=["low-block"])
        self.service.update_play(play.id, tags=[])

        self.assertEqual(play.tags, [])
        for tag in ("press", "zonal", "low-block"):
            self.assertIn(tag, self.service.available_tags)

    def test_tags_are_deduplicated(self) -> None:
        play = self.service.create_play(self.playbook.id, "A", "DEFENSE", tags=["x", "x", " y "])

        self.assertEqual(play.tags, ["x", "y"])
        self.assertEqual(self.service.available_tags, ["x", "y"])

    def test_tag_string_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            self.service.create_play(self.playbook.id, "A", "DEFENSE", tags="set-piece")

    def test_non_list_tags_rejected(self) -> None:
        """Test tags that are not a list fail validation instead of crashing."""
        play = self.service.create_play(self.playbook.id, "A", "DEFENSE", tags=["press"])

        for bad in (5, {"press": True}, 3.5):
            with self.subTest(tags=bad):
                with self.assertRaises(ValidationError):
                    self.service.create_play(self.playbook.id, "B", "DEFENSE", tags=bad)
                with self.assertRaises(ValidationError):
                    self.service.update_play(play.id, tags=bad)

        self.assertEqual(play.tags, ["press"])
        self.assertEqual(len(self.playbook.plays), 1)

    def test_non_string_tag_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            self.service.create_play(self.playbook.id, "A", "DEFENSE", tags=["ok", 7])

    # ---------- Lookups ---------- #

    def test_lookups_span_playbooks(self) -> None:
        other = self.service.create_playbook("JV", team_id="team-1")
        a = self.service.create_play(self.playbook.id, "A", "CORNER_KICKS", tags=["set-piece"])
        b = self.service.create_play(other.id, "B", "CORNER_KICKS")
        c = self.service.create_play(other.id, "C", "GOAL_KICKS", tags=["set-piece"])

        self.assertEqual(self.service.get_plays_by_category("CORNER_KICKS"), [a, b])
        self.assertEqual(self.service.get_plays_by_category(PlayCategory.GOAL_KICKS), [c])
        self.assertEqual(self.service.get_plays_by_tag("set-piece"), [a, c])
        self.assertIs(self.service.get_play_by_id(b.id), b)

    def test_lookups_with_no_match(self) -> None:
        self.assertEqual(self.service.get_plays_by_category("SIDE_OUTS"), [])
        self.assertEqual(self.service.get_plays_by_category("NOT_A_CATEGORY"), [])
        self.assertEqual(self.service.get_plays_by_tag("nothing"), [])
        self.assertIsNone(self.service.get_play_by_id("missing"))
        self.assertIsNone(self.service.get_playbook_by_id("missing"))

    def test_get_current_version_with_stale_pointer(self) -> None:
        play = self.service.create_play(self.playbook.id, "A", "DEFENSE")
        play.current_version_id = "gone"

        self.assertIsNone(self.service.get_current_version(play))

    # ---------- Duplication ---------- #

    def test_duplicate_play(self) -> None:
        """Test duplicating a play copies its history with fresh ids."""
        play = self.service.create_play(self.playbook.id, "Corner A", "CORNER_KICKS", tags=["sp"])
        view = play.versions[0].views[0]
        self.service.update_play_view(play.id, play.versions[0].id, view.id, {
            "positions": [Position("p1", 10, 10)]
        })
        self.service.create_play_version(play.id, "Corner A v2")
        self.service.update_play(play.id, is_published=True)

        copy = self.service.duplicate_play(play.id)

        self.assertEqual(copy.name, "Corner A (Copy)")
        self.assertFalse(copy.is_published)
        self.assertEqual(copy.tags, ["sp"])
        self.assertEqual(len(copy.versions), 2)
        self.assertEqual(copy.current_version_id, copy.versions[1].id)
        original_ids = {v.id for v in play.versions}
        self.assertFalse(original_ids & {v.id for v in copy.versions})
        self.assertNotEqual(copy.versions[0].views[0].positions[0].id, "p1")
        self.assertEqual(copy.versions[0].views[0].positions[0].x, 10)
        self.assertEqual(len(self.playbook.plays), 2)

    def test_duplicate_play_with_name(self) -> None:
        play = self.service.create_play(self.playbook.id, "Corner A", "CORNER_KICKS")

        copy = self.service.duplicate_play(play.id, new_name="Corner B")

        self.assertEqual(copy.name, "Corner B")

    def test_duplicate_unknown_play(self) -> None:
        with self.assertRaises(NotFoundError):
            self.service.duplicate_play("missing")


if __name__ == "__main__":
    unittest.main()
