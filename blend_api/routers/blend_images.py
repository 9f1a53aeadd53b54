from __future__ import annotations

from datetime import datetime
from pathlib import Path
import uuid
from typing import Any, Dict

from fastapi import APIRouter, BackgroundTasks, File, Form, HTTPException, UploadFile
from fastapi.responses import FileResponse, Response
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from blend_api import config
from blend_api.services.blend_pipeline import ROLES, blend_decoded, run_pipeline
from blend_api.services.errors import ImageDecodeError, JobNotFoundError, PreconditionError
from blend_api.services.image_utils import decode_image, encode_png
from blend_api.services.params import BlendParams
from blend_api.services.status_store import read_status, write_status


router = APIRouter(prefix="/blend", tags=["blend"])


def _slugify(text: str) -> str:
	return "".join(ch if (ch.isalnum() or ch in ("-", "_")) else "-" for ch in text).strip("-_").lower()


def _params(**values: float) -> BlendParams:
	try:
		return BlendParams(**values)
	except ValidationError as e:
		raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))


async def _read_uploads(underexposed: UploadFile, balanced: UploadFile, overexposed: UploadFile) -> Dict[str, Dict[str, Any]]:
	files_meta = {}
	for role, f in zip(ROLES, (underexposed, balanced, overexposed)):
		data = await f.read()
		if not data:
			raise HTTPException(status_code=400, detail=f"{role}: empty upload")
		files_meta[role] = {"filename": f.filename or f"{role}.jpg", "data": data}
	return files_meta


def _blend_to_png(files_meta: Dict[str, Dict[str, Any]], params: BlendParams) -> bytes:
	images = [decode_image(files_meta[role]["data"], name=role) for role in ROLES]
	return encode_png(blend_decoded(images, params))


def _completed_status(job_id: str) -> Dict[str, Any]:
	data = read_status(job_id)
	if data.get("status") != "completed" or not data.get("result"):
		raise JobNotFoundError(f"no finished result for job {job_id} (status: {data.get('status')})")
	return data


@router.post("/upload", summary="Upload an exposure bracket and blend it in the background")
async def upload(
	background_tasks: BackgroundTasks,
	underexposed: UploadFile = File(...),
	balanced: UploadFile = File(...),
	overexposed: UploadFile = File(...),
	under_weight: float = Form(1.0),
	balanced_weight: float = Form(1.0),
	over_weight: float = Form(1.0),
	gamma: float = Form(1.0),
	contrast: float = Form(1.0),
	saturation: float = Form(1.0),
):
	params = _params(
		under_weight=under_weight,
		balanced_weight=balanced_weight,
		over_weight=over_weight,
		gamma=gamma,
		contrast=contrast,
		saturation=saturation,
	)
	files_meta = await _read_uploads(underexposed, balanced, overexposed)
	# Human-readable job_id: "<balanced_stem>_<ddmmyyyy>_<suffix>"
	stem = _slugify(Path(files_meta["balanced"]["filename"]).stem) or "job"
	date_str = datetime.now().strftime("%d%m%Y")
	job_id = f"{stem}_{date_str}_{uuid.uuid4().hex[:6]}"
	write_status(job_id, {"job_id": job_id, "status": "queued", "step": "Queued"})
	background_tasks.add_task(run_pipeline, job_id, files_meta, params)
	return {
		"job_id": job_id,
		"status": "queued",
		"filenames": {role: m["filename"] for role, m in files_meta.items()},
		"params": params.model_dump(),
		"status_endpoint": f"/blend/status/{job_id}",
		"result_endpoint": f"/blend/result/{job_id}",
		"download_endpoint": f"/blend/download/{job_id}",
	}


@router.post("", summary="Blend an exposure bracket and return the PNG")
async def blend_now(
	underexposed: UploadFile = File(...),
	balanced: UploadFile = File(...),
	overexposed: UploadFile = File(...),
	under_weight: float = Form(1.0),
	balanced_weight: float = Form(1.0),
	over_weight: float = Form(1.0),
	gamma: float = Form(1.0),
	contrast: float = Form(1.0),
	saturation: float = Form(1.0),
):
	params = _params(
		under_weight=under_weight,
		balanced_weight=balanced_weight,
		over_weight=over_weight,
		gamma=gamma,
		contrast=contrast,
		saturation=saturation,
	)
	files_meta = await _read_uploads(underexposed, balanced, overexposed)
	try:
		png = await run_in_threadpool(_blend_to_png, files_meta, params)
	except ImageDecodeError as e:
		raise HTTPException(status_code=400, detail=str(e))
	except PreconditionError as e:
		raise HTTPException(status_code=422, detail=str(e))
	return Response(
		content=png,
		media_type="image/png",
		headers={"Content-Disposition": f'attachment; filename="{config.RESULT_FILENAME}"'},
	)


@router.get("/status/{job_id}", summary="Get blend job status")
def status(job_id: str):
	return read_status(job_id)


@router.get("/result/{job_id}", summary="Get blend job results")
def result(job_id: str):
	data = read_status(job_id)
	if data.get("status") != "completed":
		return {"job_id": job_id, "status": data.get("status"), "error": data.get("error"), "message": "not completed yet"}
	return {
		"job_id": job_id,
		"status": "completed",
		"params": data.get("params", {}),
		"input_sizes": data.get("input_sizes", []),
		"output_size": data.get("output_size"),
		"previews": data.get("previews", []),
		"download_endpoint": f"/blend/download/{job_id}",
	}


@router.get("/download/{job_id}", summary="Download the blended PNG")
def download(job_id: str):
	try:
		data = _completed_status(job_id)
	except JobNotFoundError as e:
		raise HTTPException(status_code=404, detail=str(e))
	return FileResponse(data["result"], media_type="image/png", filename=config.RESULT_FILENAME)
