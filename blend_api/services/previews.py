from __future__ import annotations

from pathlib import Path
from typing import List

from PIL import Image

from blend_api.services.image_utils import load_image


def make_preview(img: Image.Image, max_w: int = 512) -> Image.Image:
	if img.mode != "RGB":
		img = img.convert("RGB")
	if img.width > max_w:
		r = max_w / float(img.width)
		img = img.resize((max(1, int(img.width * r)), max(1, int(img.height * r))), Image.Resampling.LANCZOS)
	return img


def generate_previews(saved_paths: List[Path], preview_dir: Path, max_w: int = 512) -> List[str]:
	preview_dir.mkdir(parents=True, exist_ok=True)
	out = []
	for p in saved_paths:
		img = make_preview(load_image(p), max_w=max_w)
		out_path = preview_dir / (p.stem + ".jpg")
		img.save(out_path, format="JPEG", quality=85, optimize=True)
		out.append(str(out_path))
	return out
