"""Data model shared by the capture boundary and the export pipeline."""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

Color = tuple[int, int, int]
Rect = tuple[float, float, float, float]  # x0, y0, x1, y1 in canvas pixels

_HEX_COLOR = re.compile(r"^#?([0-9a-fA-F]{6})$")


class StrokeIntent(str, Enum):
    PROSE = "prose"
    MATH = "math"


def parse_color(value: Any) -> Optional[Color]:
    """Accept ``None``, ``"#rrggbb"`` or an ``[r, g, b]`` sequence."""
    if value is None:
        return None
    if isinstance(value, str):
        m = _HEX_COLOR.match(value.strip())
        if not m:
            raise ValueError(f"Invalid colour: {value!r}")
        h = m.group(1)
        return (int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16))
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"Invalid colour: {value!r}")
    try:
        channels = tuple(int(c) for c in value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid colour: {value!r}") from e
    if len(channels) != 3 or not all(0 <= c <= 255 for c in channels):
        raise ValueError(f"Invalid colour: {value!r}")
    return channels  # type: ignore[return-value]


def _require(value: Any, kind: type, what: str) -> Any:
    if not isinstance(value, kind):
        raise ValueError(f"{what} must be a {kind.__name__}, got {value!r}")
    return value


@dataclass(frozen=True)
class StrokePoint:
    x: float
    y: float
    t: float = 0.0  # seconds since the start of the stroke

    @classmethod
    def from_list(cls, raw: Any) -> "StrokePoint":
        """Build a point from ``[x, y]`` or ``[x, y, t]``."""
        if not isinstance(raw, (list, tuple)) or len(raw) not in (2, 3):
            raise ValueError(f"Invalid stroke point: {raw!r}")
        if not all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in raw):
            raise ValueError(f"Invalid stroke point: {raw!r}")
        return cls(*(float(v) for v in raw))


@dataclass(frozen=True)
class Stroke:
    """One continuous pen gesture.

    ``color`` is the inking tool's colour, or ``None`` for tools that carry
    no colour.  ``intent`` is an optional explicit classification tag that
    takes precedence over the colour.
    """

    points: tuple[StrokePoint, ...]
    color: Optional[Color] = (0, 0, 0)
    width: float = 3.0
    intent: Optional[StrokeIntent] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", tuple(self.points))
        for prev, cur in zip(self.points, self.points[1:]):
            if cur.t < prev.t:
                raise ValueError("Stroke point timestamps must be non-decreasing")

    @classmethod
    def from_dict(cls, data: Any) -> "Stroke":
        _require(data, dict, "Stroke")
        points = tuple(
            StrokePoint.from_list(raw) for raw in _require(data.get("points", []), list, "Stroke points")
        )
        width = data.get("width", 3.0)
        if not isinstance(width, (int, float)) or isinstance(width, bool):
            raise ValueError(f"Invalid stroke width: {width!r}")
        intent = data.get("intent")
        return cls(
            points=points,
            color=parse_color(data.get("color", "#000000")),
            width=float(width),
            intent=StrokeIntent(intent) if intent else None,
        )


@dataclass(frozen=True)
class Page:
    strokes: tuple[Stroke, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "strokes", tuple(self.strokes))

    @classmethod
    def from_dict(cls, data: Any) -> "Page":
        _require(data, dict, "Page")
        strokes = _require(data.get("strokes", []), list, "Page strokes")
        return cls(strokes=tuple(Stroke.from_dict(s) for s in strokes))


@dataclass(frozen=True)
class DocumentSnapshot:
    """An immutable, ordered view of the notebook taken when export starts."""

    pages: tuple[Page, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "pages", tuple(self.pages))

    def __len__(self) -> int:
        return len(self.pages)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DocumentSnapshot":
        if not isinstance(data, dict) or not isinstance(data.get("pages"), list):
            raise ValueError('Document must be an object with a "pages" list')
        return cls(pages=tuple(Page.from_dict(p) for p in data["pages"]))


@dataclass(frozen=True)
class RecognitionResult:
    """Terminal outcome of a recognition call: some text, or absence."""

    text: Optional[str] = None

    @property
    def is_absent(self) -> bool:
        return self.text is None


ABSENT = RecognitionResult()


@dataclass(frozen=True)
class OverlayText:
    text: str
    page_index: int
    rect: Rect
    color: Color = (0, 0, 0)


@dataclass
class ComposedPage:
    index: int
    image: Any  # PIL.Image.Image
    overlays: list[OverlayText] = field(default_factory=list)


@dataclass(frozen=True)
class DocumentMetadata:
    creator: str = "Notes App"
    author: str = ""
