from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
from PIL import Image

from blend_api import config
from blend_api.services.blend import blend
from blend_api.services.image_utils import load_image, save_png
from blend_api.services.params import BlendParams
from blend_api.services.previews import generate_previews
from blend_api.services.resample import resample_set
from blend_api.services.status_store import write_status


logger = logging.getLogger(__name__)

ROLES = ("underexposed", "balanced", "overexposed")


def blend_decoded(
	images: Sequence[Image.Image],
	params: BlendParams,
	resample: Optional[str] = None,
	workers: Optional[int] = None,
) -> np.ndarray:
	"""
	Resample decoded (under, balanced, over) images to the balanced image's size and blend them.
	"""
	under, balanced, over = resample_set(images, resample=resample or config.RESAMPLE)
	tone = params.tone()
	return blend(
		under,
		balanced,
		over,
		params.weights(),
		gamma=tone.gamma,
		contrast=tone.contrast,
		saturation=tone.saturation,
		workers=workers if workers is not None else config.WORKERS,
	)


def run_pipeline(job_id: str, files_meta: Dict[str, Dict[str, Any]], params: BlendParams) -> None:
	try:
		# 1) Save originals to <data>/input/<job_id>/
		write_status(job_id, {"job_id": job_id, "status": "saving", "step": "Save Images"})
		in_dir = config.input_dir(job_id)
		in_dir.mkdir(parents=True, exist_ok=True)
		saved: List[Path] = []
		for role in ROLES:
			fm = files_meta[role]
			suffix = Path(fm["filename"]).suffix.lower() or ".img"
			p = in_dir / f"{role}{suffix}"
			with p.open("wb") as f:
				f.write(fm["data"])
			saved.append(p)
		logger.info("job %s: saved %d inputs to %s", job_id, len(saved), in_dir)

		# 2) Decode and write preview thumbnails
		write_status(job_id, {"job_id": job_id, "status": "decoding", "step": "Decode Images"})
		images = [load_image(p) for p in saved]
		previews = generate_previews(saved, config.preview_dir(job_id), max_w=config.PREVIEW_WIDTH)
		sizes = ["{}x{}".format(*img.size) for img in images]

		# 3) Resample to the balanced image's size and blend
		write_status(job_id, {
			"job_id": job_id,
			"status": "blending",
			"step": "Blend Exposures",
			"previews": previews,
			"input_sizes": sizes,
			"params": params.model_dump(),
		})
		logger.info("job %s: blending %s with %s", job_id, sizes, params.model_dump())
		result = blend_decoded(images, params)
		out_path = save_png(result, config.output_path(job_id))

		# 4) Complete
		write_status(job_id, {
			"job_id": job_id,
			"status": "completed",
			"step": "Done",
			"previews": previews,
			"input_sizes": sizes,
			"params": params.model_dump(),
			"output_size": "{}x{}".format(result.shape[1], result.shape[0]),
			"result": out_path,
		})
		logger.info("job %s: wrote %s", job_id, out_path)
	except Exception as e:
		logger.exception("job %s failed", job_id)
		write_status(job_id, {"job_id": job_id, "status": "error", "error": str(e)})
