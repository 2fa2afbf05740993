"""Export coordinator: drive every page of a snapshot to a finished PDF.

Each page runs as its own task:

1. classify its strokes into prose and maths,
2. render the full-page base image,
3. recognize prose and maths concurrently,
4. composite the resulting overlays onto the base image.

Page tasks signal a :class:`PageBarrier` exactly once each, whether they
finished or faulted.  The document is assembled only after the barrier opens,
so a single slow recognition call holds back the whole document and never
produces a partial one.  Setting the cancel event stops the wait at once
and cancels every outstanding page task.
"""

import asyncio
import logging
from typing import Optional

from notes_export.classifier import classify
from notes_export.errors import ExportCancelled, ExportError, ExportTimeout
from notes_export.handwriting import HandwritingRecognitionClient
from notes_export.math_ocr import MathRecognitionClient
from notes_export.models import (
    ABSENT,
    ComposedPage,
    DocumentMetadata,
    DocumentSnapshot,
    OverlayText,
    Page,
    RecognitionResult,
    Rect,
)
from notes_export.pdf import build_pdf
from notes_export.renderer import PageRenderer

logger = logging.getLogger(__name__)


class PageBarrier:
    """Opens once every one of ``count`` pages has arrived."""

    def __init__(self, count: int) -> None:
        self.count = count
        self._arrived: set[int] = set()
        self._opened = asyncio.Event()
        if count == 0:
            self._opened.set()

    @property
    def pending(self) -> int:
        return self.count - len(self._arrived)

    @property
    def is_open(self) -> bool:
        return self._opened.is_set()

    def arrive(self, index: int) -> None:
        if not 0 <= index < self.count:
            raise RuntimeError(f"Page {index} is not part of this export")
        if index in self._arrived:
            raise RuntimeError(f"Page {index} signalled completion twice")
        self._arrived.add(index)
        if self.pending == 0:
            self._opened.set()

    async def wait(self) -> None:
        await self._opened.wait()


def build_overlays(
    page_index: int,
    prose: RecognitionResult,
    math: RecognitionResult,
    rect: Rect,
) -> list[OverlayText]:
    """Prose first, maths second, both in the page's annotation frame."""
    return [
        OverlayText(text=result.text, page_index=page_index, rect=rect)
        for result in (prose, math)
        if not result.is_absent
    ]


class ExportCoordinator:
    def __init__(
        self,
        handwriting: HandwritingRecognitionClient,
        math: MathRecognitionClient,
        renderer: Optional[PageRenderer] = None,
        metadata: Optional[DocumentMetadata] = None,
        text_layer: bool = True,
    ) -> None:
        self.handwriting = handwriting
        self.math = math
        self.renderer = renderer or PageRenderer()
        self.metadata = metadata or DocumentMetadata()
        self.text_layer = text_layer

    @staticmethod
    def _check_cancel(cancel: Optional[asyncio.Event]) -> None:
        if cancel is not None and cancel.is_set():
            raise ExportCancelled("Export cancelled")

    async def _recognize_prose(self, strokes, cancel) -> RecognitionResult:
        if not strokes:
            return ABSENT
        self._check_cancel(cancel)
        result = await self.handwriting.recognize(strokes)
        self._check_cancel(cancel)
        return result

    async def _recognize_math(self, strokes, cancel) -> RecognitionResult:
        if not strokes:
            return ABSENT
        self._check_cancel(cancel)
        image = self.renderer.render_subset(strokes)
        result = await self.math.recognize(image)
        self._check_cancel(cancel)
        return result

    async def export_page(
        self, index: int, page: Page, cancel: Optional[asyncio.Event] = None
    ) -> ComposedPage:
        classified = classify(page.strokes)
        base = self.renderer.render(page)
        recognitions = [
            asyncio.create_task(self._recognize_prose(classified.prose, cancel)),
            asyncio.create_task(self._recognize_math(classified.math, cancel)),
        ]
        try:
            prose, math = await asyncio.gather(*recognitions)
        finally:
            # Neither recognition call outlives its page.
            for task in recognitions:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*recognitions, return_exceptions=True)
        overlays = build_overlays(index, prose, math, self.renderer.annotation_rect())
        image = self.renderer.composite(base, overlays)
        logger.debug("Page %d composed with %d overlay(s)", index + 1, len(overlays))
        return ComposedPage(index=index, image=image, overlays=overlays)

    async def _run_page(self, index, page, barrier, results, faults, cancel) -> None:
        try:
            results[index] = await self.export_page(index, page, cancel)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            faults[index] = e
        finally:
            barrier.arrive(index)

    async def _export(self, snapshot: DocumentSnapshot, cancel: Optional[asyncio.Event]) -> bytes:
        pages = snapshot.pages
        if not pages:
            raise ExportError("Nothing to export: the document has no pages")
        self._check_cancel(cancel)

        barrier = PageBarrier(len(pages))
        results: dict[int, ComposedPage] = {}
        faults: dict[int, BaseException] = {}
        tasks = [
            asyncio.create_task(self._run_page(i, page, barrier, results, faults, cancel))
            for i, page in enumerate(pages)
        ]
        waiters = [asyncio.create_task(barrier.wait())]
        if cancel is not None:
            waiters.append(asyncio.create_task(cancel.wait()))
        try:
            await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (*waiters, *tasks):
                if not task.done():
                    task.cancel()
            await asyncio.gather(*waiters, *tasks, return_exceptions=True)

        self._check_cancel(cancel)
        if faults:
            index = min(faults)
            cause = faults[index]
            if isinstance(cause, ExportError):
                raise cause
            raise ExportError(f"Page {index + 1} could not be exported: {cause}") from cause

        composed = sorted(results.values(), key=lambda p: p.index)
        logger.info("All %d page(s) composed; building document", len(composed))
        return build_pdf(composed, self.metadata, text_layer=self.text_layer)

    async def export(
        self,
        snapshot: DocumentSnapshot,
        cancel: Optional[asyncio.Event] = None,
        timeout: Optional[float] = None,
    ) -> bytes:
        """Export *snapshot* to PDF bytes.

        Raises :class:`ExportError` if any page cannot be rendered,
        :class:`ExportCancelled` when *cancel* is set, and
        :class:`ExportTimeout` when *timeout* seconds elapse first.
        """
        try:
            return await asyncio.wait_for(self._export(snapshot, cancel), timeout)
        except asyncio.TimeoutError as e:
            raise ExportTimeout(f"Export did not finish within {timeout}s") from e
