"""Starting formation templates for new diagrams."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .diagram import Position
from ..utils.constants import OPPONENT_ROTATION
from ..utils.time_utils import new_id


class TemplateGroup(Enum):
    """How a template is grouped in the picker."""
    OFFENSIVE = "OFFENSIVE"
    DEFENSIVE = "DEFENSIVE"
    SET_PIECE = "SET_PIECE"


@dataclass(frozen=True)
class TemplateMarker:
    """A marker placement inside a template (no identity until applied)."""
    x: float
    y: float
    player_number: int
    is_opponent: bool = False
    rotation: float = 0.0


@dataclass(frozen=True)
class FormationTemplate:
    """A named starting formation."""
    id: str
    name: str
    description: str
    group: TemplateGroup
    markers: tuple

    def build_positions(self) -> List[Position]:
        """Create positions with freshly minted ids from the template."""
        return [
            Position(
                id=new_id("position"),
                x=marker.x,
                y=marker.y,
                player_number=marker.player_number,
                is_opponent=marker.is_opponent,
                rotation=marker.rotation
            )
            for marker in self.markers
        ]

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "group": self.group.value,
            "markers": [
                {
                    "x": marker.x,
                    "y": marker.y,
                    "playerNumber": marker.player_number,
                    "isOpponent": marker.is_opponent,
                    "rotation": marker.rotation
                }
                for marker in self.markers
            ]
        }


def _team(x: float, y: float, number: int, rotation: float = 0.0) -> TemplateMarker:
    return TemplateMarker(x, y, number, False, rotation)


def _opponent(x: float, y: float, number: int) -> TemplateMarker:
    return TemplateMarker(x, y, number, True, OPPONENT_ROTATION)


class FormationTemplates:
    """Pre-defined templates for common four-a-side setups."""

    @staticmethod
    def create_2_1_1() -> FormationTemplate:
        """Two defenders, one midfielder, one striker."""
        return FormationTemplate(
            id="2-1-1-offense",
            name="2-1-1 Formation",
            description="Two defenders, one midfielder, one striker",
            group=TemplateGroup.OFFENSIVE,
            markers=(
                _team(13.3, 36.0, 1),  # Goalkeeper
                _team(27.8, 30.0, 2),
                _team(27.8, 62.0, 3),
                _team(50.0, 46.0, 4),  # Striker
            )
        )

    @staticmethod
    def create_diamond() -> FormationTemplate:
        """Diamond with midfield control."""
        return FormationTemplate(
            id="1-2-1-offense",
            name="1-2-1 Diamond",
            description="Diamond formation with midfield control",
            group=TemplateGroup.OFFENSIVE,
            markers=(
                _team(13.3, 46.0, 1),
                _team(33.3, 28.0, 2, 30.0),
                _team(33.3, 64.0, 3, -30.0),
                _team(53.3, 46.0, 4),
            )
        )

    @staticmethod
    def create_3_1_attack() -> FormationTemplate:
        """Three forward, keeper stays back."""
        return FormationTemplate(
            id="3-1-attack",
            name="3-1 Attack",
            description="Three players forward, keeper stays back",
            group=TemplateGroup.OFFENSIVE,
            markers=(
                _team(13.3, 46.0, 1),
                _team(44.4, 24.0, 2, 30.0),
                _team(44.4, 68.0, 3, -30.0),
                _team(61.1, 46.0, 4),  # Center forward
            )
        )

    @staticmethod
    def create_box() -> FormationTemplate:
        """Square shape for keeping the ball."""
        return FormationTemplate(
            id="box-formation",
            name="Box Formation",
            description="Square formation for ball control",
            group=TemplateGroup.OFFENSIVE,
            markers=(
                _team(20.0, 30.0, 1),
                _team(20.0, 62.0, 2),
                _team(42.2, 30.0, 3),
                _team(42.2, 62.0, 4),
            )
        )

    @staticmethod
    def create_overload_left() -> FormationTemplate:
        return FormationTemplate(
            id="overload-left",
            name="Overload Left",
            description="Stack players on the left side to create space",
            group=TemplateGroup.OFFENSIVE,
            markers=(
                _team(13.3, 46.0, 1),
                _team(38.9, 20.0, 2, 45.0),  # Left wing
                _team(38.9, 40.0, 3, 30.0),
                _team(55.6, 30.0, 4),
            )
        )

    @staticmethod
    def create_zone_defense() -> FormationTemplate:
        """Protect the goal area with zone coverage."""
        return FormationTemplate(
            id="zone-defense",
            name="Zone Defense",
            description="Protect the goal area with zone coverage",
            group=TemplateGroup.DEFENSIVE,
            markers=(
                _team(83.3, 46.0, 1, 180.0),  # Goalkeeper in goal
                _team(68.9, 28.0, 2, 180.0),
                _team(68.9, 64.0, 3, 180.0),
                _team(55.6, 46.0, 4, 180.0),  # Sweeper
            )
        )

    @staticmethod
    def create_man_marking() -> FormationTemplate:
        """Each outfield player marks an opponent."""
        return FormationTemplate(
            id="man-marking",
            name="Man-to-Man Marking",
            description="Each outfield player marks an opponent",
            group=TemplateGroup.DEFENSIVE,
            markers=(
                _team(86.7, 46.0, 1, 180.0),
                _team(50.0, 28.0, 2, 180.0),
                _team(50.0, 64.0, 3, 180.0),
                _team(61.1, 46.0, 4, 180.0),
                _opponent(44.4, 28.0, 1),
                _opponent(44.4, 64.0, 2),
                _opponent(55.6, 46.0, 3),
                _opponent(33.3, 46.0, 4),
            )
        )

    @staticmethod
    def create_high_press() -> FormationTemplate:
        """Aggressive pressing high up the field."""
        return FormationTemplate(
            id="high-press",
            name="High Press",
            description="Aggressive pressing high up the field",
            group=TemplateGroup.DEFENSIVE,
            markers=(
                _team(77.8, 46.0, 1, 180.0),
                _team(38.9, 30.0, 2, 180.0),
                _team(38.9, 62.0, 3, 180.0),
                _team(50.0, 46.0, 4, 180.0),  # Central presser
            )
        )

    @staticmethod
    def create_low_block() -> FormationTemplate:
        """Compact shape near our own goal."""
        return FormationTemplate(
            id="low-block",
            name="Low Block",
            description="Compact defensive shape near own goal",
            group=TemplateGroup.DEFENSIVE,
            markers=(
                _team(88.9, 46.0, 1, 180.0),  # Goalkeeper on line
                _team(75.6, 28.0, 2, 180.0),
                _team(75.6, 64.0, 3, 180.0),
                _team(75.6, 46.0, 4, 180.0),
            )
        )

    @staticmethod
    def create_kickoff() -> FormationTemplate:
        """Standard attacking kickoff."""
        return FormationTemplate(
            id="kickoff-offense",
            name="Kickoff (Attacking)",
            description="Standard kickoff formation",
            group=TemplateGroup.SET_PIECE,
            markers=(
                _team(13.3, 46.0, 1),
                _team(42.2, 36.0, 2),
                _team(42.2, 56.0, 3),
                _team(47.8, 46.0, 4),  # Kicker
            )
        )

    @staticmethod
    def create_goal_kick() -> FormationTemplate:
        """Restart from a goal kick."""
        return FormationTemplate(
            id="goal-kick",
            name="Goal Kick",
            description="Restart from goal kick",
            group=TemplateGroup.SET_PIECE,
            markers=(
                _team(11.1, 46.0, 1),
                _team(27.8, 30.0, 2),
                _team(27.8, 62.0, 3),
                _team(44.4, 46.0, 4),  # Long option
            )
        )

    @staticmethod
    def create_corner_attack() -> FormationTemplate:
        """Attacking corner kick setup."""
        return FormationTemplate(
            id="corner-attack",
            name="Corner Kick Attack",
            description="Attacking corner kick setup",
            group=TemplateGroup.SET_PIECE,
            markers=(
                _team(22.2, 46.0, 1),  # Goalkeeper stays back
                _team(77.8, 36.0, 2),  # Near post
                _team(77.8, 56.0, 3),  # Far post
                _team(94.4, 10.0, 4, -45.0),  # Corner taker
            )
        )

    @staticmethod
    def create_penalty_kick() -> FormationTemplate:
        return FormationTemplate(
            id="penalty-kick",
            name="Penalty Kick",
            description="Penalty kick setup",
            group=TemplateGroup.SET_PIECE,
            markers=(
                _team(22.2, 46.0, 1),
                _team(66.7, 30.0, 2),  # Rebound
                _team(66.7, 62.0, 3),  # Rebound
                _team(80.0, 46.0, 4),  # Taker
            )
        )

    @staticmethod
    def get_all_templates() -> List[FormationTemplate]:
        """Get all pre-defined templates."""
        return [
            FormationTemplates.create_2_1_1(),
            FormationTemplates.create_diamond(),
            FormationTemplates.create_3_1_attack(),
            FormationTemplates.create_box(),
            FormationTemplates.create_overload_left(),
            FormationTemplates.create_zone_defense(),
            FormationTemplates.create_man_marking(),
            FormationTemplates.create_high_press(),
            FormationTemplates.create_low_block(),
            FormationTemplates.create_kickoff(),
            FormationTemplates.create_goal_kick(),
            FormationTemplates.create_corner_attack(),
            FormationTemplates.create_penalty_kick(),
        ]

    @staticmethod
    def get_templates_by_group(group: TemplateGroup) -> List[FormationTemplate]:
        return [t for t in FormationTemplates.get_all_templates() if t.group == group]

    @staticmethod
    def get_template_by_id(template_id: str) -> Optional[FormationTemplate]:
        """Get template by id."""
        return next(
            (t for t in FormationTemplates.get_all_templates() if t.id == template_id),
            None
        )
