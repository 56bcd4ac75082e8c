"""
Image compositor for the race widget.
Joins the last-race and next-race captures side by side.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from PIL import Image

logger = logging.getLogger(__name__)


def combine_side_by_side(left_path: Union[str, Path], right_path: Union[str, Path],
                         out_path: Union[str, Path]) -> Optional[Path]:
    """
    Combine two images horizontally at a common height.

    Both images are scaled to the smaller of the two heights so neither is
    upscaled.

    Args:
        left_path: Image placed on the left (last race)
        right_path: Image placed on the right (next race)
        out_path: Output PNG path

    Returns:
        Output path, or None when an input is missing or unreadable
    """
    left_path, right_path, out_path = Path(left_path), Path(right_path), Path(out_path)
    missing = [str(p) for p in (left_path, right_path) if not p.exists()]
    if missing:
        logger.warning("Skipping composite %s, missing: %s", out_path.name, ", ".join(missing))
        return None

    try:
        with Image.open(left_path) as left_src, Image.open(right_path) as right_src:
            left = left_src.convert("RGBA")
            right = right_src.convert("RGBA")
    except OSError as e:
        logger.error("Could not read captures for %s: %s", out_path.name, e)
        return None

    target_height = min(left.height, right.height) or max(left.height, right.height)
    left = _scale_to_height(left, target_height)
    right = _scale_to_height(right, target_height)

    canvas = Image.new("RGBA", (left.width + right.width, target_height), (0, 0, 0, 0))
    canvas.paste(left, (0, 0))
    canvas.paste(right, (left.width, 0))

    out_path.parent.mkdir(parents=True, exist_ok=True)
    canvas.save(out_path, format="PNG")
    logger.info("Combined image created: %s", out_path)
    return out_path


def _scale_to_height(image: Image.Image, height: int) -> Image.Image:
    if image.height == height:
        return image
    width = max(1, round(image.width * height / image.height))
    return image.resize((width, height), Image.Resampling.LANCZOS)
