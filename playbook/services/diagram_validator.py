"""
Validation for play details and diagram views.

Each rule returns a ValidationResult; the validation service combines them
and turns a failed result into a ValidationError before any state changes.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Set

from ..models.diagram import View
from ..models.play import PlayCategory
from .errors import ValidationError


class ValidationResult:
    """Result of a validation operation with success status and error messages."""

    def __init__(self, is_valid: bool = True, errors: Optional[List[str]] = None):
        self.is_valid = is_valid
        self.errors = errors or []

    def add_error(self, error: str) -> None:
        """Add an error message and mark as invalid."""
        self.errors.append(error)
        self.is_valid = False

    def combine(self, other: ValidationResult) -> ValidationResult:
        """Combine with another validation result."""
        return ValidationResult(
            is_valid=self.is_valid and other.is_valid,
            errors=self.errors + other.errors
        )

    def raise_if_invalid(self, context: str) -> None:
        """Raise ValidationError carrying every collected message."""
        if not self.is_valid:
            raise ValidationError(f"{context}: {'; '.join(self.errors)}", list(self.errors))


class ValidationRule(ABC):
    """Abstract base class for validation rules."""

    @abstractmethod
    def validate(self, *args, **kwargs) -> ValidationResult:
        """Perform validation and return result."""


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


class NumericFieldRule(ValidationRule):
    """Coordinates, sizes, rotations and times must be finite numbers."""

    def validate(self, view: View) -> ValidationResult:
        result = ValidationResult()

        def check(owner: str, name: str, value, optional: bool = False) -> None:
            if optional and value is None:
                return
            if not _is_number(value):
                result.add_error(f"{owner} has invalid {name} {value!r}")

        for pos in view.positions:
            owner = f"Position '{pos.id}'"
            check(owner, "x", pos.x)
            check(owner, "y", pos.y)
            check(owner, "rotation", pos.rotation)
            if pos.player_number is not None and (
                    not isinstance(pos.player_number, int) or isinstance(pos.player_number, bool)):
                result.add_error(f"{owner} has invalid playerNumber {pos.player_number!r}")

        for line in view.lines:
            owner = f"Line '{line.id}'"
            check(owner, "width", line.width)
            for point in line.points:
                check(owner, "point x", point.x)
                check(owner, "point y", point.y)

        for text in view.texts:
            owner = f"Text '{text.id}'"
            check(owner, "x", text.x)
            check(owner, "y", text.y)
            check(owner, "fontSize", text.font_size)
            check(owner, "width", text.width, optional=True)
            check(owner, "height", text.height, optional=True)

        for track in view.animations:
            owner = f"Keyframe for '{track.position_id}'"
            for keyframe in track.keyframes:
                check(owner, "time", keyframe.time)
                check(owner, "x", keyframe.x)
                check(owner, "y", keyframe.y)
                check(owner, "rotation", keyframe.rotation, optional=True)
        return result


class UniqueIdRule(ValidationRule):
    """Primitive ids must be unique within their view."""

    def validate(self, view: View) -> ValidationResult:
        result = ValidationResult()
        groups = (
            ("position", [pos.id for pos in view.positions]),
            ("line", [line.id for line in view.lines]),
            ("text", [text.id for text in view.texts]),
        )
        seen: Set[str] = set()
        for kind, ids in groups:
            for primitive_id in ids:
                if not primitive_id:
                    result.add_error(f"A {kind} is missing its id")
                elif primitive_id in seen:
                    result.add_error(f"Duplicate id '{primitive_id}' in view '{view.id}'")
                seen.add(primitive_id)

        tracked = [track.position_id for track in view.animations]
        for position_id in {pid for pid in tracked if tracked.count(pid) > 1}:
            result.add_error(f"Position '{position_id}' has more than one animation track")
        return result


class AnimationReferenceRule(ValidationRule):
    """Every animation track must drive a position that exists in the same view."""

    def validate(self, view: View) -> ValidationResult:
        result = ValidationResult()
        position_ids = {pos.id for pos in view.positions}
        for track in view.animations:
            if track.position_id not in position_ids:
                result.add_error(
                    f"Animation references unknown position '{track.position_id}'"
                )
        return result


class KeyframeOrderRule(ValidationRule):
    """Keyframe times start at or after 0 and never go backwards."""

    def validate(self, view: View) -> ValidationResult:
        result = ValidationResult()
        for track in view.animations:
            previous = None
            for keyframe in track.keyframes:
                if keyframe.time < 0:
                    result.add_error(
                        f"Keyframe time {keyframe.time} for '{track.position_id}' is negative"
                    )
                if previous is not None and keyframe.time < previous:
                    result.add_error(
                        f"Keyframes for '{track.position_id}' are not sorted by time"
                    )
                    break
                previous = keyframe.time
        return result


class LineShapeRule(ValidationRule):
    """Lines are polylines with at least two points and a positive width."""

    def validate(self, view: View) -> ValidationResult:
        result = ValidationResult()
        for line in view.lines:
            if len(line.points) < 2:
                result.add_error(f"Line '{line.id}' needs at least 2 points, found {len(line.points)}")
            if line.width <= 0:
                result.add_error(f"Line '{line.id}' has invalid width {line.width}")
        return result


class PlayDetailsRule(ValidationRule):
    """Checks the editable metadata of a play."""

    def validate(self, name: Optional[str] = None, category=None,
                 tags: Optional[Iterable[str]] = None,
                 require_name: bool = True, require_category: bool = True) -> ValidationResult:
        result = ValidationResult()

        if name is not None or require_name:
            if not isinstance(name, str) or not name.strip():
                result.add_error("Play name cannot be empty")

        if category is not None or require_category:
            if PlayCategory.parse(category) is None:
                allowed = ", ".join(c.value for c in PlayCategory)
                result.add_error(f"Invalid category '{category}' (must be one of {allowed})")

        if tags is not None:
            if not isinstance(tags, (list, tuple)):
                result.add_error("Tags must be a list of strings")
            else:
                for tag in tags:
                    if not isinstance(tag, str) or not tag.strip():
                        result.add_error(f"Invalid tag {tag!r}")
        return result


class DiagramValidator:
    """Runs every view rule and raises on the first failed view."""

    def __init__(self, rules: Optional[List[ValidationRule]] = None):
        self.rules = rules or [
            UniqueIdRule(),
            AnimationReferenceRule(),
            KeyframeOrderRule(),
            LineShapeRule(),
        ]
        self._field_types = NumericFieldRule()

    def validate_view(self, view: View) -> ValidationResult:
        """Collect every rule's findings for one view."""
        # Rules compare numbers, so badly typed fields are reported alone
        result = self._field_types.validate(view)
        if result.is_valid:
            for rule in self.rules:
                result = result.combine(rule.validate(view))
        if not isinstance(view.name, str) or not view.name.strip():
            result.add_error("View name cannot be empty")
        return result

    def check_view(self, view: View) -> None:
        """Raise ValidationError if the view breaks any rule."""
        self.validate_view(view).raise_if_invalid(f"Invalid view '{view.id}'")
