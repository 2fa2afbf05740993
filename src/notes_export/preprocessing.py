"""Image preparation before an image leaves the process.

Rendered ink is clean, so unlike scanned pages it needs no contrast work.
What it does need:

1. Flattening  — subset renders are transparent and JPEG has no alpha, so
                 ink is composed onto white first.
2. Cropping    — the recognizer only sees the inked region plus a margin;
                 a mostly empty US-Letter canvas wastes payload and hurts
                 recognition of small formulas.
"""

import io
from typing import Optional

from PIL import Image

WHITE = (255, 255, 255)

# Greyscale values at or above this count as paper, not ink.
INK_THRESHOLD = 250


def flatten(image: Image.Image, background: tuple[int, int, int] = WHITE) -> Image.Image:
    """Compose *image* onto an opaque background and return it as RGB."""
    if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
        rgba = image.convert("RGBA")
        canvas = Image.new("RGB", rgba.size, background)
        canvas.paste(rgba, mask=rgba.getchannel("A"))
        return canvas
    return image.convert("RGB")


def ink_bbox(image: Image.Image) -> Optional[tuple[int, int, int, int]]:
    """Bounding box of the inked pixels, or ``None`` for a blank image."""
    if image.mode == "RGBA":
        return image.getchannel("A").getbbox()
    mask = image.convert("L").point(lambda v: 255 if v < INK_THRESHOLD else 0)
    return mask.getbbox()


def has_ink(image: Image.Image) -> bool:
    return ink_bbox(image) is not None


def crop_to_ink(image: Image.Image, pad: int = 8) -> Image.Image:
    bbox = ink_bbox(image)
    if bbox is None:
        return image
    x0, y0, x1, y1 = bbox
    w, h = image.size
    return image.crop((max(0, x0 - pad), max(0, y0 - pad), min(w, x1 + pad), min(h, y1 + pad)))


def encode_jpeg(image: Image.Image, quality: int = 80) -> bytes:
    buf = io.BytesIO()
    flatten(image).save(buf, format="JPEG", quality=quality)
    return buf.getvalue()


def encode_png(image: Image.Image) -> bytes:
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


def prepare_math_image(image: Image.Image) -> bytes:
    """Flatten, crop to the formula and return JPEG bytes for upload."""
    return encode_jpeg(crop_to_ink(flatten(image)))
