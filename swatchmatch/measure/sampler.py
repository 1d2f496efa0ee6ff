# Copyright (c) 2026 Swatchmatch
# SPDX-License-Identifier: MIT

"""
Windowed color sampling from camera frames.

A single pixel read is dominated by sensor and compression noise. Paint
swatches are large relative to a pixel, so the sampler averages a square
window around the target point instead.

Sampling is best-effort: a missing or degenerate frame yields white
rather than an exception, so continuous capture never halts on one bad
frame.
"""

from __future__ import annotations

import logging
import math

import numpy as np
from numpy.typing import NDArray

from swatchmatch.errors import InvalidCoordinate
from swatchmatch.measure.frames import PixelBuffer, as_pixel_array, is_empty
from swatchmatch.schema import WHITE, Color

logger = logging.getLogger(__name__)

MIN_RADIUS = 1
MAX_RADIUS = 10
DEFAULT_RADIUS = 2  # 5x5 window


def clamp_radius(radius: int) -> int:
    """Clamp a sampling radius to [MIN_RADIUS, MAX_RADIUS]."""
    return int(min(max(radius, MIN_RADIUS), MAX_RADIUS))


def sample_window(
    pixels: NDArray[np.float64],
    center_x: float,
    center_y: float,
    radius: int = DEFAULT_RADIUS,
) -> Color:
    """
    Mean color of the (2r+1) x (2r+1) window centered on a pixel.

    Coordinates outside the frame are clamped to the nearest edge pixel,
    so windows that overhang an edge repeat edge pixels instead of
    shrinking. Every window therefore has the same sample count.

    Args:
        pixels: Normalized (H, W, 3) float array
        center_x: Column of the window center (rounded to nearest)
        center_y: Row of the window center (rounded to nearest)
        radius: Window half-width, clamped to [1, 10]

    Returns:
        Opaque mean color

    Raises:
        InvalidCoordinate: If the center is not a finite number or the
            frame has no pixels
    """
    if not (math.isfinite(center_x) and math.isfinite(center_y)):
        raise InvalidCoordinate(f"Non-finite sample point ({center_x}, {center_y})")

    height, width = pixels.shape[:2]
    if height == 0 or width == 0:
        raise InvalidCoordinate(f"Cannot sample an empty {width}x{height} frame")

    radius = clamp_radius(radius)
    # Clamp in Python ints first; a far-off center would overflow int64.
    # A center past the overhang samples the edge pixel only.
    cx = min(max(int(round(center_x)), -radius), width - 1 + radius)
    cy = min(max(int(round(center_y)), -radius), height - 1 + radius)

    offsets = np.arange(-radius, radius + 1)
    xs = np.clip(cx + offsets, 0, width - 1)
    ys = np.clip(cy + offsets, 0, height - 1)

    window = pixels[np.ix_(ys, xs)]
    mean = window.reshape(-1, 3).mean(axis=0)
    return Color.from_array(mean)


def sample_color(
    buffer: PixelBuffer | None,
    width: int,
    height: int,
    center_x: float,
    center_y: float,
    radius: int = DEFAULT_RADIUS,
) -> Color:
    """
    Average color around a pixel of a row-major camera buffer.

    Args:
        buffer: Pixel data (see ``as_pixel_array`` for accepted forms)
        width: Buffer width in pixels
        height: Buffer height in pixels
        center_x: Target column
        center_y: Target row
        radius: Window half-width, clamped to [1, 10] (default 2 = 5x5)

    Returns:
        Mean color of the window, or white if the buffer is absent,
        empty or degenerate
    """
    if is_empty(buffer):
        logger.warning("No frame data to sample, returning white")
        return WHITE

    try:
        pixels = as_pixel_array(buffer, width, height)
        color = sample_window(pixels, center_x, center_y, radius)
    except InvalidCoordinate as e:
        logger.warning("Sampling failed, returning white: %s", e)
        return WHITE

    logger.debug(
        "Sampled (%s, %s) r=%d -> RGB(%.3f, %.3f, %.3f)",
        center_x, center_y, clamp_radius(radius), color.r, color.g, color.b,
    )
    return color


def pick_color(
    buffer: PixelBuffer | None,
    width: int,
    height: int,
    u: float,
    v: float,
) -> Color:
    """
    Read a single pixel of a reference image at a normalized coordinate.

    Unlike camera sampling there is no averaging: the reference image is
    the ground truth the user points at.

    Args:
        buffer: Reference image pixels
        width: Image width in pixels
        height: Image height in pixels
        u: Horizontal position (0.0 = left edge, 1.0 = right edge)
        v: Vertical position (0.0 = first row, 1.0 = last row)

    Returns:
        The pixel color, or white if the image is absent or degenerate
    """
    if is_empty(buffer):
        logger.warning("No reference image to pick from, returning white")
        return WHITE

    try:
        if not (math.isfinite(u) and math.isfinite(v)):
            raise InvalidCoordinate(f"Non-finite pick coordinate ({u}, {v})")
        pixels = as_pixel_array(buffer, width, height)
    except InvalidCoordinate as e:
        logger.warning("Pick failed, returning white: %s", e)
        return WHITE

    u, v = min(max(u, 0.0), 1.0), min(max(v, 0.0), 1.0)
    x = min(int(round(u * width)), width - 1)
    y = min(int(round(v * height)), height - 1)
    return Color.from_array(pixels[y, x])
