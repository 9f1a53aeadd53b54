from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Any

from blend_api import config


def _status_path(job_id: str) -> Path:
	return config.JOBS_DIR / f"{job_id}.json"


def write_status(job_id: str, data: Dict[str, Any]) -> None:
	status_path = _status_path(job_id)
	status_path.parent.mkdir(parents=True, exist_ok=True)
	with status_path.open("w", encoding="utf-8") as f:
		json.dump(data, f, indent=2)


def read_status(job_id: str) -> Dict[str, Any]:
	status_path = _status_path(job_id)
	if not status_path.exists():
		return {"job_id": job_id, "status": "unknown"}
	with status_path.open("r", encoding="utf-8") as f:
		return json.load(f)
