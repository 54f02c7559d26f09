"""
Unit tests for version branching.

Tests that new versions are deep, id-fresh clones of their base, that
animation tracks follow their cloned markers, and that history only grows.
"""
import copy
import unittest

from playbook.models import (
    AnimationTrack, Identity, Keyframe, Line, PlaybookCollection, Point, Position, Text, View
)
from playbook.services.errors import NotFoundError, ValidationError
from playbook.services.playbook_service import PlaybookService
from playbook.services.version_branching import clone_view


def _populated_view() -> View:
    return View(
        id="view-a",
        name="Start",
        positions=[
            Position("p1", 10, 20, player_number=9, player_name="Sam"),
            Position("p2", 60, 40, is_opponent=True, rotation=180),
        ],
        lines=[Line("l1", [Point(10, 20), Point(30, 20)], arrow_end=True)],
        texts=[Text("t1", 50, 5, "Near post")],
        animations=[
            AnimationTrack("p1", [Keyframe(0, 10, 20), Keyframe(2, 30, 20, 45)]),
            AnimationTrack("p2", [Keyframe(0, 60, 40)]),
        ],
        is_initial_view=True
    )


class TestCloneView(unittest.TestCase):
    """Test cloning a single view."""

    def setUp(self) -> None:
        self.view = _populated_view()
        self.snapshot = copy.deepcopy(self.view)
        self.clone, self.id_map = clone_view(self.view)

    def test_every_id_is_fresh(self) -> None:
        old_ids = {"view-a", "p1", "p2", "l1", "t1"}
        new_ids = {self.clone.id}
        new_ids |= {p.id for p in self.clone.positions}
        new_ids |= {line.id for line in self.clone.lines}
        new_ids |= {t.id for t in self.clone.texts}

        self.assertEqual(len(new_ids), 5)
        self.assertFalse(old_ids & new_ids)

    def test_values_are_copied(self) -> None:
        self.assertEqual(self.clone.name, "Start")
        self.assertTrue(self.clone.is_initial_view)
        self.assertEqual(self.clone.positions[0].player_name, "Sam")
        self.assertEqual(self.clone.positions[1].rotation, 180)
        self.assertEqual(self.clone.lines[0].points, [Point(10, 20), Point(30, 20)])
        self.assertEqual(self.clone.texts[0].content, "Near post")
        self.assertEqual(self.clone.animations[0].keyframes[1].rotation, 45)

    def test_animation_references_are_rewritten(self) -> None:
        clone_position_ids = {p.id for p in self.clone.positions}
        for track in self.clone.animations:
            self.assertIn(track.position_id, clone_position_ids)
        self.assertEqual(self.clone.animations[0].position_id, self.id_map["p1"])
        self.assertEqual(self.clone.animations[1].position_id, self.id_map["p2"])

    def test_nothing_is_shared_with_source(self) -> None:
        self.clone.positions[0].x = 99
        self.clone.lines[0].points[0].x = 99
        self.clone.animations[0].keyframes[0].x = 99
        self.clone.texts[0].content = "changed"

        self.assertEqual(self.view, self.snapshot)

    def test_dangling_reference_in_source_is_rejected(self) -> None:
        view = View(id="v", name="Bad", animations=[AnimationTrack("ghost")])

        with self.assertRaises(ValidationError):
            clone_view(view)


class TestCreatePlayVersion(unittest.TestCase):
    """Test branching through the service."""

    def setUp(self) -> None:
        self.collection = PlaybookCollection()
        self.service = PlaybookService(self.collection, Identity("coach-2", "Jo Coach"))
        playbook = self.service.create_playbook("Varsity", team_id="team-1")
        self.play = self.service.create_play(playbook.id, "Corner A", "CORNER_KICKS")
        self.v1 = self.play.versions[0]
        view = _populated_view()
        self.service.update_play_view(self.play.id, self.v1.id, self.v1.views[0].id, {
            "positions": view.positions,
            "lines": view.lines,
            "texts": view.texts,
            "animations": view.animations,
        })
        self.v1 = self.play.versions[0]

    def test_branch_from_current(self) -> None:
        """Test the new version is appended and becomes current."""
        v2 = self.service.create_play_version(self.play.id, "Corner A v2", description="Swap runners")

        self.assertEqual(len(self.play.versions), 2)
        self.assertIs(self.play.versions[-1], v2)
        self.assertEqual(self.play.current_version_id, v2.id)
        self.assertEqual(v2.name, "Corner A v2")
        self.assertEqual(v2.description, "Swap runners")
        self.assertEqual(v2.created_by, "coach-2")
        self.assertEqual(len(v2.views), 1)
        self.assertNotEqual(v2.views[0].id, self.v1.views[0].id)

    def test_branch_isolation(self) -> None:
        """Test changing the branch's marker leaves the base untouched."""
        base_snapshot = copy.deepcopy(self.v1)
        v2 = self.service.create_play_version(self.play.id, "v2")

        v2.views[0].positions[0].x = 88
        v2.views[0].animations[0].keyframes.append(Keyframe(5, 88, 88))

        self.assertEqual(self.play.versions[0], base_snapshot)
        self.assertEqual(self.v1.views[0].positions[0].x, 10)

    def test_reference_rewrite(self) -> None:
        """Test every track in the branch points at a marker of the same cloned view."""
        v2 = self.service.create_play_version(self.play.id, "v2")
        old_position_ids = {p.id for view in self.v1.views for p in view.positions}

        for view in v2.views:
            ids = {p.id for p in view.positions}
            for track in view.animations:
                self.assertIn(track.position_id, ids)
                self.assertNotIn(track.position_id, old_position_ids)

    def test_branch_from_older_version(self) -> None:
        """Test basedOnVersionId picks the base even when it is not current."""
        v2 = self.service.create_play_version(self.play.id, "v2")
        self.service.update_play_view(self.play.id, v2.id, v2.views[0].id, {"positions": [], "animations": []})

        v3 = self.service.create_play_version(self.play.id, "v3", based_on_version_id=self.v1.id)

        self.assertEqual(len(v3.views[0].positions), 2)
        self.assertEqual(self.play.current_version_id, v3.id)

    def test_append_only_history(self) -> None:
        """Test N branches grow history by exactly N without changing earlier entries."""
        before = copy.deepcopy(self.play.versions)

        for n in range(4):
            self.service.create_play_version(self.play.id, f"Branch {n}")

        self.assertEqual(len(self.play.versions), len(before) + 4)
        self.assertEqual(self.play.versions[:len(before)], before)
        self.assertEqual(len({v.id for v in self.play.versions}), 5)

    def test_unknown_play(self) -> None:
        with self.assertRaises(NotFoundError):
            self.service.create_play_version("missing", "v2")

    def test_unknown_base_version(self) -> None:
        with self.assertRaises(NotFoundError):
            self.service.create_play_version(self.play.id, "v2", based_on_version_id="missing")
        self.assertEqual(len(self.play.versions), 1)

    def test_empty_name(self) -> None:
        with self.assertRaises(ValidationError):
            self.service.create_play_version(self.play.id, " ")

    def test_branch_copies_views_as_they_are(self) -> None:
        """Test a base view that would fail edit checks still branches."""
        base = self.play.versions[0]
        base.views.append(View(id="unnamed", name=""))

        v2 = self.service.create_play_version(self.play.id, "v2", based_on_version_id=base.id)

        self.assertEqual([view.name for view in v2.views], ["Initial Setup", ""])
        self.assertEqual(self.play.current_version_id, v2.id)

    def test_stale_current_pointer_branches_empty(self) -> None:
        self.play.current_version_id = "gone"

        v2 = self.service.create_play_version(self.play.id, "Fresh start")

        self.assertEqual(v2.views, [])
        self.assertEqual(self.play.current_version_id, v2.id)


if __name__ == "__main__":
    unittest.main()
