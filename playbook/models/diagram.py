"""Diagram primitives and views for the Playbook application."""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..utils.constants import (
    DEFAULT_FONT_SIZE, DEFAULT_LINE_COLOR, DEFAULT_LINE_WIDTH, DEFAULT_TEXT_COLOR,
    DEFAULT_VIEW_NAME
)


@dataclass
class Position:
    """A player or opponent marker placed on the diagram surface."""
    id: str
    x: float  # 0-100, left to right
    y: float  # 0-100, top to bottom
    player_number: Optional[int] = None
    player_name: Optional[str] = None
    is_opponent: bool = False
    rotation: float = 0.0  # degrees

    def to_dict(self) -> Dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "playerNumber": self.player_number,
            "playerName": self.player_name,
            "isOpponent": self.is_opponent,
            "rotation": self.rotation
        }

    @classmethod
    def from_dict(cls, data: Dict) -> Position:
        """Create from dictionary."""
        return cls(
            id=data["id"],
            x=data["x"],
            y=data["y"],
            player_number=data.get("playerNumber"),
            player_name=data.get("playerName"),
            is_opponent=bool(data.get("isOpponent", False)),
            rotation=data.get("rotation", 0.0)
        )


@dataclass
class Point:
    """A single vertex of a drawn line."""
    x: float
    y: float

    def to_dict(self) -> Dict:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: Dict) -> Point:
        return cls(x=data["x"], y=data["y"])


@dataclass
class Line:
    """A drawn polyline (run, pass or movement path)."""
    id: str
    points: List[Point]
    color: str = DEFAULT_LINE_COLOR
    width: float = DEFAULT_LINE_WIDTH
    dashed: bool = False
    arrow_end: Optional[bool] = None

    def to_dict(self) -> Dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "points": [point.to_dict() for point in self.points],
            "color": self.color,
            "width": self.width,
            "dashed": self.dashed,
            "arrowEnd": self.arrow_end
        }

    @classmethod
    def from_dict(cls, data: Dict) -> Line:
        """Create from dictionary."""
        return cls(
            id=data["id"],
            points=[Point.from_dict(point) for point in data.get("points", [])],
            color=data.get("color", DEFAULT_LINE_COLOR),
            width=data.get("width", DEFAULT_LINE_WIDTH),
            dashed=bool(data.get("dashed", False)),
            arrow_end=data.get("arrowEnd")
        )


@dataclass
class Text:
    """A free-floating label, optionally boxed for wrapping."""
    id: str
    x: float
    y: float
    content: str
    font_size: float = DEFAULT_FONT_SIZE
    color: str = DEFAULT_TEXT_COLOR
    bold: Optional[bool] = None
    italic: Optional[bool] = None
    width: Optional[float] = None
    height: Optional[float] = None

    def to_dict(self) -> Dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "content": self.content,
            "fontSize": self.font_size,
            "color": self.color,
            "bold": self.bold,
            "italic": self.italic,
            "width": self.width,
            "height": self.height
        }

    @classmethod
    def from_dict(cls, data: Dict) -> Text:
        """Create from dictionary."""
        return cls(
            id=data["id"],
            x=data["x"],
            y=data["y"],
            content=data.get("content", ""),
            font_size=data.get("fontSize", DEFAULT_FONT_SIZE),
            color=data.get("color", DEFAULT_TEXT_COLOR),
            bold=data.get("bold"),
            italic=data.get("italic"),
            width=data.get("width"),
            height=data.get("height")
        )


@dataclass
class Keyframe:
    """Where a marker is at a given offset (seconds from view start)."""
    time: float
    x: float
    y: float
    rotation: Optional[float] = None

    def to_dict(self) -> Dict:
        return {"time": self.time, "x": self.x, "y": self.y, "rotation": self.rotation}

    @classmethod
    def from_dict(cls, data: Dict) -> Keyframe:
        return cls(time=data["time"], x=data["x"], y=data["y"], rotation=data.get("rotation"))


@dataclass
class AnimationTrack:
    """
    Movement timeline for one Position.

    Keyframes are kept in ascending ``time`` order; positions between two
    keyframes are derived by straight-line interpolation.
    """
    position_id: str
    keyframes: List[Keyframe] = field(default_factory=list)

    @property
    def duration(self) -> float:
        """Offset of the last keyframe, 0 for an empty track."""
        return self.keyframes[-1].time if self.keyframes else 0.0

    def sample(self, time: float) -> Optional[Keyframe]:
        """
        Get the interpolated marker placement at ``time``.

        Times before the first keyframe clamp to it, times after the last
        clamp to the last one.

        Args:
            time: Offset from the start of the view

        Returns:
            Keyframe describing the placement, or None for an empty track
        """
        if not self.keyframes:
            return None

        first, last = self.keyframes[0], self.keyframes[-1]
        if time <= first.time:
            return Keyframe(time, first.x, first.y, first.rotation)
        if time >= last.time:
            return Keyframe(time, last.x, last.y, last.rotation)

        times = [kf.time for kf in self.keyframes]
        index = bisect_right(times, time)
        before, after = self.keyframes[index - 1], self.keyframes[index]
        span = after.time - before.time
        ratio = (time - before.time) / span if span > 0 else 1.0

        rotation = before.rotation if before.rotation is not None else after.rotation
        if before.rotation is not None and after.rotation is not None:
            rotation = _lerp(before.rotation, after.rotation, ratio)

        return Keyframe(
            time=time,
            x=_lerp(before.x, after.x, ratio),
            y=_lerp(before.y, after.y, ratio),
            rotation=rotation
        )

    def to_dict(self) -> Dict:
        """Convert to dictionary for serialization."""
        return {
            "positionId": self.position_id,
            "keyframes": [kf.to_dict() for kf in self.keyframes]
        }

    @classmethod
    def from_dict(cls, data: Dict) -> AnimationTrack:
        """Create from dictionary."""
        return cls(
            position_id=data["positionId"],
            keyframes=[Keyframe.from_dict(kf) for kf in data.get("keyframes", [])]
        )


def _lerp(start: float, end: float, ratio: float) -> float:
    return start + (end - start) * ratio


@dataclass
class View:
    """One named diagram state inside a Version (e.g. starting formation)."""
    id: str
    name: str
    positions: List[Position] = field(default_factory=list)
    lines: List[Line] = field(default_factory=list)
    texts: List[Text] = field(default_factory=list)
    animations: List[AnimationTrack] = field(default_factory=list)
    is_initial_view: bool = False

    def get_position(self, position_id: str) -> Optional[Position]:
        """Find a marker by id."""
        return next((pos for pos in self.positions if pos.id == position_id), None)

    def get_animation(self, position_id: str) -> Optional[AnimationTrack]:
        """Find the track driving a marker, if any."""
        return next((track for track in self.animations if track.position_id == position_id), None)

    @property
    def duration(self) -> float:
        """Length of the view's animation in seconds."""
        return max((track.duration for track in self.animations), default=0.0)

    def frame_at(self, time: float) -> Dict[str, Tuple[float, float, float]]:
        """
        Get every marker's placement at ``time``.

        Markers without a track stay where they were placed.

        Returns:
            Mapping of position id to (x, y, rotation)
        """
        frame = {}
        for pos in self.positions:
            track = self.get_animation(pos.id)
            sample = track.sample(time) if track else None
            if sample is None:
                frame[pos.id] = (pos.x, pos.y, pos.rotation)
            else:
                rotation = sample.rotation if sample.rotation is not None else pos.rotation
                frame[pos.id] = (sample.x, sample.y, rotation)
        return frame

    def to_dict(self) -> Dict:
        """Convert view to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "positions": [pos.to_dict() for pos in self.positions],
            "lines": [line.to_dict() for line in self.lines],
            "texts": [text.to_dict() for text in self.texts],
            "animations": [track.to_dict() for track in self.animations],
            "isInitialView": self.is_initial_view
        }

    @classmethod
    def from_dict(cls, data: Dict) -> View:
        """Create view from dictionary."""
        return cls(
            id=data["id"],
            name=data.get("name") or DEFAULT_VIEW_NAME,
            positions=[Position.from_dict(pos) for pos in data.get("positions", [])],
            lines=[Line.from_dict(line) for line in data.get("lines", [])],
            texts=[Text.from_dict(text) for text in data.get("texts", [])],
            animations=[AnimationTrack.from_dict(track) for track in data.get("animations", [])],
            is_initial_view=bool(data.get("isInitialView", False))
        )
