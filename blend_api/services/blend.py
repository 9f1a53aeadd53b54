from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from blend_api.services.errors import PreconditionError


logger = logging.getLogger(__name__)

# [H,W,4] uint8 RGBA, row-major. [H,W,3] inputs are accepted; alpha is never read.
PixelBuffer = np.ndarray


@dataclass(frozen=True)
class WeightSet:
	under: float = 1.0
	balanced: float = 1.0
	over: float = 1.0

	@property
	def total(self) -> float:
		return self.under + self.balanced + self.over


@dataclass(frozen=True)
class ToneParams:
	gamma: float = 1.0
	contrast: float = 1.0
	saturation: float = 1.0


def _buffer_size(name: str, buf: np.ndarray) -> Tuple[int, int]:
	shape = getattr(buf, "shape", None)
	if not isinstance(buf, np.ndarray) or buf.ndim != 3 or buf.shape[2] not in (3, 4):
		raise PreconditionError(f"{name}: expected an HxWx4 RGBA array, got shape {shape}")
	h, w = buf.shape[:2]
	if h <= 0 or w <= 0:
		raise PreconditionError(f"{name}: width and height must be positive, got {w}x{h}")
	return h, w


def check_preconditions(
	under: PixelBuffer,
	balanced: PixelBuffer,
	over: PixelBuffer,
	weights: WeightSet,
	gamma: float,
) -> Tuple[int, int]:
	"""
	Validate the blend contract before any pixel is read.
	Returns the common (height, width). Raises PreconditionError on violation.
	"""
	sizes = {
		"under": _buffer_size("under", under),
		"balanced": _buffer_size("balanced", balanced),
		"over": _buffer_size("over", over),
	}
	if len(set(sizes.values())) != 1:
		desc = ", ".join("{}={}x{}".format(k, w, h) for k, (h, w) in sizes.items())
		raise PreconditionError(f"input images must share one size, got {desc}")
	if min(weights.under, weights.balanced, weights.over) < 0:
		raise PreconditionError(f"weights must be non-negative, got {weights}")
	if not weights.total > 0:
		raise PreconditionError("total weight must be greater than zero")
	if not gamma > 0:
		raise PreconditionError(f"gamma must be greater than zero, got {gamma}")
	return sizes["balanced"]


def _tone_curve(rgb: np.ndarray, gamma: float, contrast: float, saturation: float) -> np.ndarray:
	# gamma -> contrast -> saturation; the saturation gray needs all three adjusted channels
	if gamma != 1.0:
		rgb = np.power(rgb / 255, 1 / gamma) * 255
	if contrast != 1.0:
		rgb = ((rgb / 255 - 0.5) * contrast + 0.5) * 255
	if saturation != 1.0:
		gray = ((rgb[..., 0] + rgb[..., 1] + rgb[..., 2]) / 3)[..., np.newaxis]
		rgb = gray + (rgb - gray) * saturation
	return rgb


def blend_rows(
	under: PixelBuffer,
	balanced: PixelBuffer,
	over: PixelBuffer,
	weights: WeightSet,
	tone: ToneParams,
	out: PixelBuffer,
	start: int,
	stop: int,
) -> None:
	"""
	Blend rows [start, stop) of the inputs into the same rows of out.
	Assumes check_preconditions already passed.
	"""
	rows = slice(start, stop)
	u = under[rows, :, :3].astype(np.float64)
	b = balanced[rows, :, :3].astype(np.float64)
	o = over[rows, :, :3].astype(np.float64)
	mixed = (u * weights.under + b * weights.balanced + o * weights.over) / weights.total
	rgb = _tone_curve(mixed, tone.gamma, tone.contrast, tone.saturation)
	# round half up, then clamp
	out[rows, :, :3] = np.clip(np.floor(rgb + 0.5), 0, 255).astype(np.uint8)
	out[rows, :, 3] = 255


def _row_bands(height: int, parts: int) -> List[Tuple[int, int]]:
	edges = np.linspace(0, height, num=parts + 1).astype(int)
	return [(int(a), int(b)) for a, b in zip(edges[:-1], edges[1:]) if b > a]


def blend(
	under: PixelBuffer,
	balanced: PixelBuffer,
	over: PixelBuffer,
	weights: WeightSet,
	gamma: float = 1.0,
	contrast: float = 1.0,
	saturation: float = 1.0,
	workers: int = 1,
) -> PixelBuffer:
	"""
	Blend three equally sized exposures into one RGBA uint8 buffer.

	Each channel is the weighted mean of the three inputs, followed by gamma,
	contrast and saturation (each skipped when exactly 1.0), rounding and a
	clamp to [0, 255]. Output alpha is always 255.

	workers > 1 splits the rows into bands blended on a thread pool; the
	result is identical to the single threaded one.
	"""
	h, w = check_preconditions(under, balanced, over, weights, gamma)
	tone = ToneParams(gamma=gamma, contrast=contrast, saturation=saturation)
	logger.debug("blend %dx%d weights=%s tone=%s workers=%d", w, h, weights, tone, workers)

	out = np.empty((h, w, 4), dtype=np.uint8)
	bands = _row_bands(h, max(1, min(int(workers), h)))
	if len(bands) == 1:
		blend_rows(under, balanced, over, weights, tone, out, 0, h)
		return out

	with ThreadPoolExecutor(max_workers=len(bands)) as executor:
		futures = [
			executor.submit(blend_rows, under, balanced, over, weights, tone, out, start, stop)
			for (start, stop) in bands
		]
		for f in futures:
			f.result()
	return out
