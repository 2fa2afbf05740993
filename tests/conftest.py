"""Shared fixtures for the test suite.

Images are real Pillow images and documents are real PDFs so tests exercise
actual code paths.  Only the recognition backends (LLM SDKs, the maths HTTP
service) are replaced by fakes.
"""

import asyncio
import json
from pathlib import Path
from typing import Optional

import pytest
from click.testing import CliRunner

from notes_export.classifier import MATH_MARKER_COLOR
from notes_export.models import RecognitionResult, Stroke, StrokePoint
from notes_export.providers.base import Ink, InkRecognizer
from notes_export.renderer import PageRenderer


def make_stroke(x: float = 100, y: float = 100, length: float = 60, color=(0, 0, 0), width: float = 3.0) -> Stroke:
    """A horizontal stroke of a few timestamped points."""
    points = tuple(StrokePoint(x + length * i / 4, y, t=i * 0.01) for i in range(5))
    return Stroke(points=points, color=color, width=width)


def math_stroke(x: float = 100, y: float = 300) -> Stroke:
    return make_stroke(x, y, color=MATH_MARKER_COLOR)


# ── Fakes ──────────────────────────────────────────────────────────────────


class FakeInkRecognizer(InkRecognizer):
    def __init__(self, candidates=("hello world",), fail_provision: bool = False, error: Optional[Exception] = None):
        self.candidates = list(candidates)
        self.fail_provision = fail_provision
        self.error = error
        self.provision_calls: list[str] = []
        self.recognized: list[Ink] = []

    def provision(self, language: str) -> None:
        self.provision_calls.append(language)
        if self.fail_provision:
            raise RuntimeError("model download failed")

    def recognize(self, ink: Ink) -> list[str]:
        self.recognized.append(ink)
        if self.error is not None:
            raise self.error
        return list(self.candidates)


class FakeMathClient:
    """Stands in for MathRecognitionClient; optionally blocks until released."""

    def __init__(self, text: Optional[str] = "\\(x^2\\)", gate: Optional[asyncio.Event] = None):
        self.text = text
        self.gate = gate
        self.calls = 0

    async def recognize(self, image) -> RecognitionResult:
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        return RecognitionResult(self.text)


# ── Fixtures ───────────────────────────────────────────────────────────────


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def renderer() -> PageRenderer:
    return PageRenderer()


@pytest.fixture
def ink_recognizer() -> FakeInkRecognizer:
    return FakeInkRecognizer()


@pytest.fixture
def document_data() -> dict:
    """Two pages: prose plus maths, then an empty trailing page."""
    return {
        "pages": [
            {"strokes": [
                {"color": "#000000", "width": 3, "points": [[50, 50, 0], [120, 60, 0.05], [180, 55, 0.1]]},
                {"color": "#00ff00", "width": 3, "points": [[60, 300, 0], [140, 320, 0.04]]},
            ]},
            {"strokes": []},
        ]
    }


@pytest.fixture
def document_file(tmp_path: Path, document_data: dict) -> Path:
    path = tmp_path / "notes.json"
    path.write_text(json.dumps(document_data))
    return path
