# Copyright (c) 2026 Swatchmatch
# SPDX-License-Identifier: MIT

"""
Pixel buffer handling.

Camera acquisition hands over row-major buffers in whatever form the host
has at hand: a NumPy array, raw RGB24 bytes, or a flat list of channel
values. Everything is normalized here to a float64 (H, W, 3) array with
channels in [0, 1].
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Union

import numpy as np
from numpy.typing import NDArray

from swatchmatch.errors import InvalidCoordinate

logger = logging.getLogger(__name__)

PixelBuffer = Union[NDArray, bytes, bytearray, memoryview, list, tuple]


def is_empty(buffer: PixelBuffer | None) -> bool:
    """True for a missing buffer or one without any samples."""
    if buffer is None:
        return True
    if isinstance(buffer, np.ndarray):
        return buffer.size == 0
    return len(buffer) == 0


def as_pixel_array(
    buffer: PixelBuffer,
    width: int,
    height: int,
) -> NDArray[np.float64]:
    """
    Normalize a row-major pixel buffer to a float (H, W, 3) array.

    Integer samples are treated as 8-bit and divided by 255; float samples
    are taken as already normalized. A fourth (alpha) channel is dropped.

    Args:
        buffer: (H, W, 3|4) array, or a flat sequence of H*W*3 or H*W*4
            channel values (bytes are read as uint8)
        width: Buffer width in pixels
        height: Buffer height in pixels

    Returns:
        Array of shape (height, width, 3), values clipped to [0, 1]

    Raises:
        InvalidCoordinate: If the dimensions are degenerate or do not
            match the buffer size
    """
    if width <= 0 or height <= 0:
        raise InvalidCoordinate(f"Degenerate buffer dimensions {width}x{height}")

    if isinstance(buffer, (bytes, bytearray, memoryview)):
        arr = np.frombuffer(buffer, dtype=np.uint8)
    else:
        arr = np.asarray(buffer)

    n_pixels = width * height
    if arr.size == n_pixels * 3:
        channels = 3
    elif arr.size == n_pixels * 4:
        channels = 4
    else:
        raise InvalidCoordinate(
            f"Buffer of {arr.size} samples does not match {width}x{height} "
            f"RGB or RGBA pixels"
        )

    pixels = arr.reshape(height, width, channels)[..., :3]

    if np.issubdtype(pixels.dtype, np.integer):
        pixels = pixels.astype(np.float64) / 255.0
    else:
        pixels = pixels.astype(np.float64)

    return np.clip(np.nan_to_num(pixels, nan=0.0), 0.0, 1.0)


def load_frame(path: Union[str, Path]) -> NDArray[np.uint8]:
    """
    Load a reference image as a uint8 (H, W, 3) sRGB array.

    Applies ICC profile conversion to sRGB if the image has an embedded
    color profile, so that picked colors match what color pickers show.

    Requires Pillow (``pip install swatchmatch[image]``).
    """
    try:
        from PIL import Image, ImageCms
    except ImportError as e:
        raise ImportError(
            "Pillow is required for image loading. "
            "Install with: pip install swatchmatch[image]"
        ) from e

    img = Image.open(path)

    if "icc_profile" in img.info:
        if img.mode != "RGB":
            img = img.convert("RGB")
        try:
            embedded_profile = ImageCms.ImageCmsProfile(
                io.BytesIO(img.info["icc_profile"])
            )
            srgb_profile = ImageCms.createProfile("sRGB")
            img = ImageCms.profileToProfile(img, embedded_profile, srgb_profile)
        except (OSError, ImageCms.PyCMSError) as e:
            logger.warning("ICC conversion failed for %s, using raw RGB: %s", path, e)
    elif img.mode != "RGB":
        img = img.convert("RGB")

    pixels = np.array(img, dtype=np.uint8)
    logger.debug("Loaded frame %s (%dx%d)", path, pixels.shape[1], pixels.shape[0])
    return pixels
