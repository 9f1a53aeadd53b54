from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from blend_api.services.errors import ImageDecodeError


# Pillow modes holding more than 8 bits per sample; scaled down before RGBA conversion
WIDE_MODES = ("I", "I;16", "I;16B", "I;16L", "I;16N")

DECODE_ERRORS = (UnidentifiedImageError, OSError, Image.DecompressionBombError)


def _to_8bit(img: Image.Image) -> Image.Image:
	arr = np.asarray(img).astype(np.int64) >> 8
	return Image.fromarray(np.clip(arr, 0, 255).astype(np.uint8))


def _prepare(img: Image.Image) -> Image.Image:
	img = ImageOps.exif_transpose(img)
	if img.mode in WIDE_MODES:
		img = _to_8bit(img)
	if img.mode != "RGBA":
		img = img.convert("RGBA")
	return img


def decode_image(data: bytes, name: str = "image") -> Image.Image:
	"""
	Decode raw file bytes into an upright 8-bit RGBA image.
	"""
	try:
		img = Image.open(BytesIO(data))
		img.load()
	except DECODE_ERRORS as e:
		raise ImageDecodeError(f"{name}: not a readable image ({e})") from e
	return _prepare(img)


def load_image(path: Union[str, Path]) -> Image.Image:
	p = Path(path)
	try:
		img = Image.open(p)
		img.load()
	except DECODE_ERRORS as e:
		raise ImageDecodeError(f"{p.name}: not a readable image ({e})") from e
	return _prepare(img)


def to_pixel_buffer(img: Image.Image) -> np.ndarray:
	if img.mode != "RGBA":
		img = img.convert("RGBA")
	return np.asarray(img, dtype=np.uint8).copy()


def from_pixel_buffer(buf: np.ndarray) -> Image.Image:
	arr = np.ascontiguousarray(buf, dtype=np.uint8)
	if arr.ndim != 3 or arr.shape[2] != 4:
		raise ValueError(f"expected an HxWx4 RGBA array, got shape {arr.shape}")
	return Image.fromarray(arr)


def encode_png(buf: np.ndarray) -> bytes:
	out = BytesIO()
	from_pixel_buffer(buf).save(out, format="PNG", optimize=True)
	return out.getvalue()


def save_png(buf: np.ndarray, out_path: Path) -> str:
	out_path.parent.mkdir(parents=True, exist_ok=True)
	from_pixel_buffer(buf).save(str(out_path), format="PNG", optimize=True)
	return str(out_path)
