"""Rasterize pages and composite recognized text onto them with Pillow."""

import logging
from typing import Iterable, Optional, Sequence

from PIL import Image, ImageDraw, ImageFont

from notes_export.errors import RenderError
from notes_export.models import Color, OverlayText, Page, Rect, Stroke
from notes_export.providers.base import Ink

logger = logging.getLogger(__name__)

CANVAS_DPI = 96
# US Letter at 96 DPI, the size of the drawing canvas.
CANVAS_SIZE = (int(8.5 * CANVAS_DPI), int(11 * CANVAS_DPI))

PAPER: Color = (255, 255, 255)
DEFAULT_INK: Color = (0, 0, 0)


def _fill(color: Color, mode: str):
    return (*color, 255) if mode == "RGBA" else color


class PageRenderer:
    def __init__(
        self,
        size: tuple[int, int] = CANVAS_SIZE,
        font_size: int = 16,
        margin: int = 24,
    ) -> None:
        self.size = size
        self.font_size = font_size
        self.margin = margin
        self._font: Optional[ImageFont.FreeTypeFont] = None

    @property
    def font(self):
        if self._font is None:
            self._font = ImageFont.load_default(size=self.font_size)
        return self._font

    def annotation_rect(self) -> Rect:
        """The fixed frame every overlay on a page is placed in."""
        w, h = self.size
        return (self.margin, self.margin, w - self.margin, h - self.margin)

    # ── Rasterization ──────────────────────────────────────────────────────

    def _canvas(self, mode: str) -> Image.Image:
        w, h = self.size
        if w <= 0 or h <= 0:
            raise RenderError(f"Invalid canvas size {w}x{h}")
        if mode == "RGBA":
            return Image.new("RGBA", (w, h), (0, 0, 0, 0))
        return Image.new("RGB", (w, h), PAPER)

    def _draw_strokes(self, image: Image.Image, strokes: Iterable[Stroke]) -> Image.Image:
        draw = ImageDraw.Draw(image)
        try:
            for stroke in strokes:
                if not stroke.points:
                    continue
                fill = _fill(stroke.color or DEFAULT_INK, image.mode)
                width = max(1, round(stroke.width))
                xy = [(p.x, p.y) for p in stroke.points]
                if len(xy) == 1:
                    r = width / 2
                    x, y = xy[0]
                    draw.ellipse((x - r, y - r, x + r, y + r), fill=fill)
                else:
                    draw.line(xy, fill=fill, width=width, joint="curve")
        except (TypeError, ValueError) as e:
            raise RenderError(f"Could not draw stroke: {e}") from e
        return image

    def render(self, page: Page) -> Image.Image:
        """Render every stroke of *page* onto a white page-sized canvas."""
        return self._draw_strokes(self._canvas("RGB"), page.strokes)

    def render_subset(self, strokes: Sequence[Stroke]) -> Image.Image:
        """Render only *strokes* onto a transparent canvas of the page size."""
        return self._draw_strokes(self._canvas("RGBA"), strokes)

    def render_ink(self, ink: Ink, width: int = 3) -> Image.Image:
        image = self._canvas("RGB")
        draw = ImageDraw.Draw(image)
        for stroke in ink.strokes:
            xy = [(p.x, p.y) for p in stroke.points]
            if len(xy) > 1:
                draw.line(xy, fill=DEFAULT_INK, width=width, joint="curve")
            elif xy:
                draw.point(xy, fill=DEFAULT_INK)
        return image

    # ── Compositing ────────────────────────────────────────────────────────

    def _split_word(self, draw: ImageDraw.ImageDraw, word: str, max_width: float) -> list[str]:
        """Break a word wider than *max_width* into pieces that fit."""
        pieces: list[str] = []
        piece = ""
        for char in word:
            if piece and draw.textlength(piece + char, font=self.font) > max_width:
                pieces.append(piece)
                piece = char
            else:
                piece += char
        pieces.append(piece)
        return pieces

    def _wrap(self, draw: ImageDraw.ImageDraw, text: str, max_width: float) -> list[str]:
        lines: list[str] = []
        for paragraph in text.split("\n"):
            words: list[str] = []
            for word in paragraph.split():
                if draw.textlength(word, font=self.font) > max_width:
                    words.extend(self._split_word(draw, word, max_width))
                else:
                    words.append(word)
            if not words:
                lines.append("")
                continue
            line = words[0]
            for word in words[1:]:
                candidate = f"{line} {word}"
                if draw.textlength(candidate, font=self.font) <= max_width:
                    line = candidate
                else:
                    lines.append(line)
                    line = word
            lines.append(line)
        return lines

    def composite(self, base: Image.Image, overlays: Sequence[OverlayText]) -> Image.Image:
        """Draw *overlays* onto a copy of *base*, later overlays on top."""
        image = base.copy()
        if not overlays:
            return image
        draw = ImageDraw.Draw(image)
        # Offsets are measured from the top of the line, so bottom bounds a line.
        bottom = self.font.getbbox("Ag")[3]
        line_height = bottom + 4
        for overlay in overlays:
            x0, y0, x1, y1 = overlay.rect
            fill = _fill(overlay.color, image.mode)
            y = y0
            for line in self._wrap(draw, overlay.text, x1 - x0):
                if y + bottom > y1:
                    logger.debug("Overlay on page %d truncated to its frame", overlay.page_index + 1)
                    break
                draw.text((x0, y), line, font=self.font, fill=fill)
                y += line_height
        return image
