"""Partition a page's strokes into prose and math."""

from dataclasses import dataclass
from typing import Iterable

from notes_export.models import Color, Stroke, StrokeIntent

# Strokes drawn with the green marker are maths.
MATH_MARKER_COLOR: Color = (0, 255, 0)


@dataclass(frozen=True)
class ClassifiedStrokes:
    prose: tuple[Stroke, ...]
    math: tuple[Stroke, ...]


def intent_of(stroke: Stroke, math_color: Color = MATH_MARKER_COLOR) -> StrokeIntent:
    if stroke.intent is not None:
        return stroke.intent
    if stroke.color is not None and tuple(stroke.color) == tuple(math_color):
        return StrokeIntent.MATH
    return StrokeIntent.PROSE


def classify(strokes: Iterable[Stroke], math_color: Color = MATH_MARKER_COLOR) -> ClassifiedStrokes:
    """Split *strokes* into two disjoint sequences, preserving drawing order."""
    prose: list[Stroke] = []
    math: list[Stroke] = []
    for stroke in strokes:
        if intent_of(stroke, math_color) is StrokeIntent.MATH:
            math.append(stroke)
        else:
            prose.append(stroke)
    return ClassifiedStrokes(prose=tuple(prose), math=tuple(math))
