"""
Image analysis used to pick conversion settings.

Detects the source format and estimates the quality a JPEG was saved with,
so that "auto" quality does not spend bytes the source never had.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal

import numpy as np
from PIL import Image, UnidentifiedImageError

from .errors import UnsupportedSource

logger = logging.getLogger(__name__)

ImageType = Literal["jpeg", "png"]

# Luminance table from Annex K of the JPEG standard (quality 50)
STD_LUMINANCE_TABLE = np.array(
    [
        16, 11, 10, 16, 24, 40, 51, 61,
        12, 12, 14, 19, 26, 58, 60, 55,
        14, 13, 16, 24, 40, 57, 69, 56,
        14, 17, 22, 29, 51, 87, 80, 62,
        18, 22, 37, 56, 68, 109, 103, 77,
        24, 35, 55, 64, 81, 104, 113, 92,
        49, 64, 78, 87, 103, 121, 120, 101,
        72, 92, 95, 98, 112, 100, 103, 99,
    ],
    dtype=np.float64,
)


def detect_image_type(path: Path) -> ImageType:
    """Sniff the source format. Only JPEG and PNG can be converted."""
    try:
        with Image.open(path) as img:
            fmt = img.format
    except (UnidentifiedImageError, OSError) as e:
        raise UnsupportedSource(f"Not an image: {path.name}") from e

    if fmt == "JPEG":
        return "jpeg"
    if fmt == "PNG":
        return "png"
    raise UnsupportedSource(f"Unsupported mime type: {fmt}")


def estimate_jpeg_quality(path: Path) -> int | None:
    """
    Estimate the quality setting a JPEG was encoded with.

    Inverts the libjpeg scaling of the standard luminance table.
    Returns None when the file carries no usable quantization table.
    """
    try:
        with Image.open(path) as img:
            tables = getattr(img, "quantization", None)
    except (UnidentifiedImageError, OSError) as e:
        logger.debug("Cannot read quantization tables of %s: %s", path, e)
        return None

    if not tables or 0 not in tables:
        return None

    table = np.asarray(tables[0], dtype=np.float64)
    if table.size != STD_LUMINANCE_TABLE.size:
        return None

    # Ratio of sums, so the table order (zigzag or natural) does not matter
    scale = float(table.sum() / STD_LUMINANCE_TABLE.sum() * 100.0)
    if scale <= 0:
        return None
    if scale <= 100:
        quality = (200.0 - scale) / 2.0
    else:
        quality = 5000.0 / scale

    return int(np.clip(round(quality), 1, 100))
