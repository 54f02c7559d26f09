"""
Models package for the Playbook application.

This package contains the core data models used throughout the application.
"""
from .diagram import Position, Point, Line, Text, Keyframe, AnimationTrack, View
from .play import PlayCategory, CATEGORY_LABELS, Identity, Version, Play, Playbook
from .collection import TagIndex, PlaybookCollection
from .templates import FormationTemplate, FormationTemplates, TemplateGroup

__all__ = [
    "Position", "Point", "Line", "Text", "Keyframe", "AnimationTrack", "View",
    "PlayCategory", "CATEGORY_LABELS", "Identity", "Version", "Play", "Playbook",
    "TagIndex", "PlaybookCollection",
    "FormationTemplate", "FormationTemplates", "TemplateGroup"
]
