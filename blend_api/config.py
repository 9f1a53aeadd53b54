from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List


DATA_DIR = Path(os.environ.get("BLEND_DATA_DIR", "blend_api/data"))
JOBS_DIR = Path(os.environ.get("BLEND_JOBS_DIR", "jobs"))

# Preview thumbnails are scaled down to this width
PREVIEW_WIDTH = int(os.environ.get("BLEND_PREVIEW_WIDTH", "512"))
RESAMPLE = os.environ.get("BLEND_RESAMPLE", "bilinear")
WORKERS = int(os.environ.get("BLEND_WORKERS", "1"))
LOG_LEVEL = os.environ.get("BLEND_LOG_LEVEL", "INFO")
CORS_ORIGINS: List[str] = [o.strip() for o in os.environ.get("BLEND_CORS_ORIGINS", "*").split(",") if o.strip()]

RESULT_FILENAME = "hdr-blend.png"


def input_dir(job_id: str) -> Path:
	return DATA_DIR / "input" / job_id


def preview_dir(job_id: str) -> Path:
	return DATA_DIR / "previews" / job_id


def output_path(job_id: str) -> Path:
	return DATA_DIR / "output" / job_id / RESULT_FILENAME


def configure_logging(level: str = LOG_LEVEL) -> None:
	root = logging.getLogger()
	if root.handlers:
		root.setLevel(level.upper())
		return
	handler = logging.StreamHandler()
	handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
	root.addHandler(handler)
	root.setLevel(level.upper())
