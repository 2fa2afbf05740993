"""Abstract base for handwriting (digital ink) recognition backends."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class InkPoint:
    x: float
    y: float
    t: int  # milliseconds since the start of the stroke


@dataclass(frozen=True)
class InkStroke:
    points: tuple[InkPoint, ...]


@dataclass(frozen=True)
class Ink:
    strokes: tuple[InkStroke, ...]


class InkRecognizer(ABC):
    @abstractmethod
    def provision(self, language: str) -> None:
        """Make the recognition model for *language* ready. Raise if it cannot be."""
        ...

    @abstractmethod
    def recognize(self, ink: Ink) -> list[str]:
        """Return candidate transcriptions of *ink*, best first."""
        ...
