from io import BytesIO

import numpy as np
from PIL import Image


def solid(h, w, rgb, alpha=255):
	buf = np.empty((h, w, 4), dtype=np.uint8)
	buf[..., :3] = rgb
	buf[..., 3] = alpha
	return buf


def png_bytes(w, h, rgb):
	out = BytesIO()
	Image.new("RGB", (w, h), tuple(rgb)).save(out, format="PNG")
	return out.getvalue()


def png16_bytes(w, h, value):
	out = BytesIO()
	Image.fromarray(np.full((h, w), value, dtype=np.uint16)).save(out, format="PNG")
	return out.getvalue()
