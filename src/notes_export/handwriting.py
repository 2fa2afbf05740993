"""Handwriting recognition client: prose strokes in, plain text out."""

import asyncio
import logging
from typing import Optional, Sequence

from notes_export.models import ABSENT, RecognitionResult, Stroke
from notes_export.postprocessing import clean_prose_text
from notes_export.providers.base import Ink, InkPoint, InkRecognizer, InkStroke

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "en-US"


def strokes_to_ink(strokes: Sequence[Stroke]) -> Ink:
    """Convert strokes to the recognizer's ink form (float coords, integer ms)."""
    return Ink(strokes=tuple(
        InkStroke(points=tuple(
            InkPoint(x=float(p.x), y=float(p.y), t=int(p.t * 1000)) for p in stroke.points
        ))
        for stroke in strokes
    ))


class HandwritingRecognitionClient:
    """Recognize prose strokes with an :class:`InkRecognizer` backend.

    The backend is provisioned once, lazily, before the first real call.
    Provisioning is best effort: if it fails every call resolves absent.
    Blocking backend work runs in a worker thread so the event loop stays
    free for the other pages.
    """

    def __init__(self, backend: InkRecognizer, language: str = DEFAULT_LANGUAGE) -> None:
        self.backend = backend
        self.language = language
        self._ready: Optional[bool] = None
        self._lock = asyncio.Lock()

    async def _ensure_ready(self) -> bool:
        async with self._lock:
            if self._ready is None:
                try:
                    await asyncio.to_thread(self.backend.provision, self.language)
                    self._ready = True
                except Exception as e:
                    logger.warning("Handwriting model for %s unavailable: %s", self.language, e)
                    self._ready = False
            return self._ready

    async def recognize(self, strokes: Sequence[Stroke]) -> RecognitionResult:
        if not strokes:
            return ABSENT
        try:
            ink = strokes_to_ink(strokes)
        except (TypeError, ValueError) as e:
            logger.warning("Malformed stroke data: %s", e)
            return ABSENT

        if not await self._ensure_ready():
            return ABSENT

        try:
            candidates = await asyncio.to_thread(self.backend.recognize, ink)
        except Exception as e:
            logger.warning("Handwriting recognition failed: %s", e)
            return ABSENT

        if not candidates:
            logger.debug("Handwriting recognizer returned no candidates")
            return ABSENT
        text = clean_prose_text(candidates[0])
        return RecognitionResult(text) if text else ABSENT
