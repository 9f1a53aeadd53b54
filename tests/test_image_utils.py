from io import BytesIO

import numpy as np
import pytest
from PIL import Image

from blend_api.services.errors import ImageDecodeError
from blend_api.services.image_utils import (
	decode_image,
	encode_png,
	from_pixel_buffer,
	load_image,
	save_png,
	to_pixel_buffer,
)
from tests.helpers import png16_bytes, png_bytes, solid


def _jpeg_with_orientation(w, h, orientation):
	exif = Image.Exif()
	exif[0x0112] = orientation
	out = BytesIO()
	Image.new("RGB", (w, h), (120, 60, 30)).save(out, format="JPEG", exif=exif)
	return out.getvalue()


def test_decode_converts_to_rgba():
	img = decode_image(png_bytes(4, 3, (1, 2, 3)))
	assert img.mode == "RGBA"
	assert img.size == (4, 3)


@pytest.mark.parametrize("orientation, size", [(1, (6, 4)), (3, (6, 4)), (6, (4, 6)), (8, (4, 6))])
def test_decode_applies_exif_orientation(orientation, size):
	img = decode_image(_jpeg_with_orientation(6, 4, orientation))
	assert img.size == size


def test_decode_scales_16bit_images_to_8bit():
	img = decode_image(png16_bytes(4, 3, 30000))
	assert img.mode == "RGBA"
	# 30000 >> 8
	assert img.getpixel((0, 0)) == (117, 117, 117, 255)
	assert to_pixel_buffer(img).shape == (3, 4, 4)


def test_decode_reports_oversized_images(monkeypatch, tmp_path):
	monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 2)
	data = png_bytes(4, 3, (1, 2, 3))
	with pytest.raises(ImageDecodeError, match="under"):
		decode_image(data, name="under")
	path = tmp_path / "big.png"
	path.write_bytes(data)
	with pytest.raises(ImageDecodeError, match="big.png"):
		load_image(path)


def test_decode_rejects_garbage():
	with pytest.raises(ImageDecodeError, match="balanced"):
		decode_image(b"not an image", name="balanced")


def test_load_image_missing_file(tmp_path):
	with pytest.raises(ImageDecodeError):
		load_image(tmp_path / "missing.png")


def test_pixel_buffer_png_round_trip(tmp_path):
	buf = solid(3, 4, (10, 200, 30))
	img = Image.open(BytesIO(encode_png(buf)))
	assert img.mode == "RGBA"
	np.testing.assert_array_equal(to_pixel_buffer(img), buf)

	path = save_png(buf, tmp_path / "out" / "x.png")
	np.testing.assert_array_equal(to_pixel_buffer(load_image(path)), buf)


def test_from_pixel_buffer_requires_rgba():
	with pytest.raises(ValueError):
		from_pixel_buffer(np.zeros((2, 2, 3), dtype=np.uint8))
