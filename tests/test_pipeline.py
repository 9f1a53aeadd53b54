import numpy as np
from PIL import Image

from blend_api import config
from blend_api.services.blend_pipeline import blend_decoded, run_pipeline
from blend_api.services.image_utils import decode_image
from blend_api.services.params import BlendParams
from blend_api.services.status_store import read_status, write_status
from tests.helpers import png_bytes


def _files(sizes=((4, 3), (4, 3), (4, 3))):
	colors = ((10, 10, 10), (100, 100, 100), (200, 200, 200))
	return {
		role: {"filename": f"{role}.png", "data": png_bytes(w, h, c)}
		for role, (w, h), c in zip(("underexposed", "balanced", "overexposed"), sizes, colors)
	}


def test_status_store_round_trip(data_dirs):
	assert read_status("nope") == {"job_id": "nope", "status": "unknown"}
	write_status("job1", {"job_id": "job1", "status": "queued"})
	assert read_status("job1")["status"] == "queued"
	assert (config.JOBS_DIR / "job1.json").exists()


def test_blend_decoded_uses_balanced_size():
	images = [decode_image(png_bytes(8, 6, (0, 0, 0))), decode_image(png_bytes(4, 3, (0, 0, 0))), decode_image(png_bytes(2, 9, (0, 0, 0)))]
	out = blend_decoded(images, BlendParams(), workers=2)
	assert out.shape == (3, 4, 4)


def test_run_pipeline_completes(data_dirs):
	run_pipeline("job-ok", _files(), BlendParams())
	status = read_status("job-ok")
	assert status["status"] == "completed"
	assert status["output_size"] == "4x3"
	assert len(status["previews"]) == 3
	assert status["result"] == str(config.output_path("job-ok"))

	out = np.asarray(Image.open(status["result"]))
	assert out.shape == (3, 4, 4)
	assert (out[..., :3] == 103).all()
	assert (out[..., 3] == 255).all()


def test_run_pipeline_records_errors(data_dirs):
	files = _files()
	files["overexposed"]["data"] = b"garbage"
	run_pipeline("job-bad", files, BlendParams())
	status = read_status("job-bad")
	assert status["status"] == "error"
	assert "overexposed" in status["error"]
