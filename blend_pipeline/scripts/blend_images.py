"""
Blend Images - Exposure bracket blending from the command line

Decodes the underexposed, balanced and overexposed images, resamples them to
the balanced image's size, blends them with the given weights and tone
controls, and writes a PNG.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from blend_api import config
from blend_api.services.blend_pipeline import blend_decoded
from blend_api.services.errors import BlendError
from blend_api.services.image_utils import load_image, save_png
from blend_api.services.params import BlendParams
from blend_api.services.resample import RESAMPLE_FILTERS


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Blend an exposure bracket (under, balanced, over) into one image")
    parser.add_argument("--under", required=True, help="Underexposed image")
    parser.add_argument("--balanced", required=True, help="Balanced exposure; its size is the output size")
    parser.add_argument("--over", required=True, help="Overexposed image")
    parser.add_argument("--output", required=True, help="Output PNG path")
    parser.add_argument("--weights", nargs=3, type=float, default=[1.0, 1.0, 1.0], metavar=("UNDER", "BALANCED", "OVER"),
                        help="Per-exposure weights (default: 1 1 1)")
    parser.add_argument("--gamma", type=float, default=1.0, help="Gamma, values > 1 brighten (default: 1.0)")
    parser.add_argument("--contrast", type=float, default=1.0, help="Contrast around mid-gray (default: 1.0)")
    parser.add_argument("--saturation", type=float, default=1.0, help="Saturation (default: 1.0)")
    parser.add_argument("--resample", choices=sorted(RESAMPLE_FILTERS), default=config.RESAMPLE,
                        help="Filter used to bring all images to a common size")
    parser.add_argument("--workers", type=int, default=config.WORKERS, help="Threads used for blending")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config.configure_logging()

    try:
        params = BlendParams(
            under_weight=args.weights[0],
            balanced_weight=args.weights[1],
            over_weight=args.weights[2],
            gamma=args.gamma,
            contrast=args.contrast,
            saturation=args.saturation,
        )
    except ValidationError as e:
        print(f"Invalid parameters: {e}", file=sys.stderr)
        return 2

    try:
        images = [load_image(p) for p in (args.under, args.balanced, args.over)]
        result = blend_decoded(images, params, resample=args.resample, workers=args.workers)
    except BlendError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    out_path = save_png(result, Path(args.output))
    print(f"Saved: {out_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
