from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import numpy as np
from PIL import Image

from blend_api.services.image_utils import to_pixel_buffer


RESAMPLE_FILTERS = {
	"nearest": Image.Resampling.NEAREST,
	"bilinear": Image.Resampling.BILINEAR,
	"bicubic": Image.Resampling.BICUBIC,
	"lanczos": Image.Resampling.LANCZOS,
}

# under, balanced, over
REFERENCE_INDEX = 1


def choose_target_size(sizes: Sequence[Tuple[int, int]], strategy: str = "reference", reference_index: int = REFERENCE_INDEX) -> Tuple[int, int]:
	"""
	Pick the common (width, height) for a bracket.
	"reference" keeps the balanced exposure's size, "min" the smallest width and height in the set.
	"""
	if not sizes:
		raise ValueError("no image sizes given")
	if strategy == "min":
		min_w = min(w for (w, h) in sizes)
		min_h = min(h for (w, h) in sizes)
		return (min_w, min_h)
	if strategy != "reference":
		raise ValueError(f"unknown size strategy: {strategy}")
	return tuple(sizes[reference_index])  # type: ignore[return-value]


def resample_to(img: Image.Image, size: Tuple[int, int], resample: str = "bilinear") -> Image.Image:
	if img.size == tuple(size):
		return img
	try:
		flt = RESAMPLE_FILTERS[resample]
	except KeyError:
		raise ValueError(f"unknown resample filter: {resample}") from None
	return img.resize(tuple(size), flt)


def resample_set(
	images: Sequence[Image.Image],
	target: Optional[Tuple[int, int]] = None,
	resample: str = "bilinear",
) -> List[np.ndarray]:
	"""
	Resize every image of the set to one size and return them as RGBA pixel buffers.
	Defaults to the balanced image's size.
	"""
	if target is None:
		target = choose_target_size([img.size for img in images])
	return [to_pixel_buffer(resample_to(img, target, resample=resample)) for img in images]
