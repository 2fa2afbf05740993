"""Tests for notes_export.preprocessing."""

import io

from PIL import Image

from notes_export.preprocessing import (
    crop_to_ink,
    encode_jpeg,
    flatten,
    has_ink,
    ink_bbox,
    prepare_math_image,
)

JPEG_MAGIC = b"\xff\xd8\xff"


def _transparent_with_square(size=(200, 100), box=(50, 40, 60, 50)) -> Image.Image:
    img = Image.new("RGBA", size, (0, 0, 0, 0))
    img.paste((0, 255, 0, 255), box)
    return img


class TestFlatten:
    def test_transparent_becomes_white(self):
        flat = flatten(Image.new("RGBA", (10, 10), (0, 0, 0, 0)))
        assert flat.mode == "RGB"
        assert flat.getpixel((5, 5)) == (255, 255, 255)

    def test_opaque_ink_kept(self):
        flat = flatten(_transparent_with_square())
        assert flat.getpixel((55, 45)) == (0, 255, 0)

    def test_rgb_passes_through(self):
        img = Image.new("RGB", (4, 4), (10, 20, 30))
        assert flatten(img).getpixel((0, 0)) == (10, 20, 30)


class TestInkDetection:
    def test_blank_rgba_has_no_ink(self):
        assert not has_ink(Image.new("RGBA", (20, 20), (0, 0, 0, 0)))

    def test_blank_white_rgb_has_no_ink(self):
        assert not has_ink(Image.new("RGB", (20, 20), (255, 255, 255)))

    def test_ink_bbox_of_rgba(self):
        assert ink_bbox(_transparent_with_square()) == (50, 40, 60, 50)

    def test_ink_bbox_of_rgb(self):
        assert ink_bbox(flatten(_transparent_with_square())) == (50, 40, 60, 50)


class TestCropToInk:
    def test_crops_with_padding(self):
        cropped = crop_to_ink(_transparent_with_square(), pad=8)
        assert cropped.size == (26, 26)

    def test_padding_clamped_to_image(self):
        img = _transparent_with_square(size=(100, 100), box=(0, 0, 5, 5))
        assert crop_to_ink(img, pad=8).size == (13, 13)

    def test_blank_image_unchanged(self):
        img = Image.new("RGB", (30, 20), (255, 255, 255))
        assert crop_to_ink(img).size == (30, 20)


class TestEncoding:
    def test_encode_jpeg_handles_alpha(self):
        data = encode_jpeg(_transparent_with_square())
        assert data[:3] == JPEG_MAGIC

    def test_prepare_math_image_is_cropped_jpeg(self):
        data = prepare_math_image(_transparent_with_square(size=(816, 1056)))
        assert data[:3] == JPEG_MAGIC
        assert Image.open(io.BytesIO(data)).size == (26, 26)
