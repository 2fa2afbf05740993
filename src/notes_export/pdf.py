"""Assemble composed pages into a PDF using PyMuPDF."""

from typing import Sequence

import fitz  # PyMuPDF

from notes_export.errors import ExportError
from notes_export.models import ComposedPage, DocumentMetadata
from notes_export.preprocessing import encode_png
from notes_export.renderer import CANVAS_DPI

# US Letter in PDF points (72 per inch).
PAGE_WIDTH = 8.5 * 72
PAGE_HEIGHT = 11 * 72

# Text render mode 3 draws nothing but keeps the text selectable.
INVISIBLE_TEXT = 3


def build_pdf(
    pages: Sequence[ComposedPage],
    metadata: DocumentMetadata,
    text_layer: bool = True,
) -> bytes:
    """Write one US-Letter page per composed page, in the order given.

    Each page image fills its page.  With *text_layer* on, every overlay is
    also placed as invisible text inside its frame so the recognized text can
    be selected and searched.
    """
    if not pages:
        raise ExportError("Cannot build a PDF with no pages")

    doc = fitz.open()
    page_rect = fitz.Rect(0, 0, PAGE_WIDTH, PAGE_HEIGHT)

    for composed in pages:
        pdf_page = doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
        pdf_page.insert_image(page_rect, stream=encode_png(composed.image))

        if not text_layer:
            continue
        sx = PAGE_WIDTH / composed.image.width
        sy = PAGE_HEIGHT / composed.image.height
        for overlay in composed.overlays:
            x0, y0, x1, y1 = overlay.rect
            pdf_page.insert_textbox(
                fitz.Rect(x0 * sx, y0 * sy, x1 * sx, y1 * sy),
                overlay.text,
                fontsize=12 * 72 / CANVAS_DPI,
                render_mode=INVISIBLE_TEXT,
            )

    doc.set_metadata({"creator": metadata.creator, "author": metadata.author})
    data = doc.tobytes()
    doc.close()
    return data
