# Copyright (c) 2026 Swatchmatch
# SPDX-License-Identifier: MIT

"""
Color space utilities.

Conversions:
- RGB ↔ HSV (all components normalized to [0, 1])
- sRGB → Linear RGB → CIE XYZ (D65) → CIELAB
- sRGB → Linear RGB → OKLab

References:
- OKLab: https://bottosson.github.io/posts/oklab/
- sRGB / CIELAB: IEC 61966-2-1, CIE 15

All functions accept arrays of shape (..., 3) and are pure NumPy.
"""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import ArrayLike, NDArray

# Length of the RGB unit cube diagonal (black to white)
RGB_MAX_DISTANCE = math.sqrt(3.0)


# =============================================================================
# Scalar Helpers
# =============================================================================


def clamp01(values: ArrayLike) -> NDArray[np.float64]:
    """Clamp values to [0, 1]. NaN is mapped to 0."""
    arr = np.asarray(values, dtype=np.float64)
    return np.clip(np.nan_to_num(arr, nan=0.0), 0.0, 1.0)


def lerp(a: float, b: float, t: float) -> float:
    """Linear interpolation with t clamped to [0, 1]."""
    t = min(max(t, 0.0), 1.0)
    return a + (b - a) * t


def rgb_distance(rgb1: ArrayLike, rgb2: ArrayLike) -> NDArray[np.float64] | float:
    """Euclidean distance between RGB colors along the last axis."""
    delta = np.asarray(rgb1, dtype=np.float64) - np.asarray(rgb2, dtype=np.float64)
    dist = np.sqrt(np.sum(delta ** 2, axis=-1))
    return float(dist) if np.ndim(dist) == 0 else dist


def rgb_match_quality(rgb1: ArrayLike, rgb2: ArrayLike) -> float:
    """
    Linear closeness score in [0, 1].

    1.0 for identical colors, 0.0 at the full black-to-white diagonal.
    """
    return float(clamp01(1.0 - rgb_distance(rgb1, rgb2) / RGB_MAX_DISTANCE))


def brightness(rgb: ArrayLike) -> NDArray[np.float64]:
    """Unweighted channel mean."""
    return np.mean(np.asarray(rgb, dtype=np.float64), axis=-1)


# =============================================================================
# RGB ↔ HSV
# =============================================================================


def rgb_to_hsv(rgb: ArrayLike) -> NDArray[np.float64]:
    """
    Convert RGB [0,1] to HSV [0,1].

    Hue is a fraction of the full circle (0 = red, 1/3 = green,
    2/3 = blue). Achromatic colors get hue 0 and saturation 0.

    Args:
        rgb: Array of shape (..., 3)

    Returns:
        Array of shape (..., 3) with (H, S, V)
    """
    rgb = np.asarray(rgb, dtype=np.float64)
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]

    maxc = np.max(rgb, axis=-1)
    minc = np.min(rgb, axis=-1)
    delta = maxc - minc

    v = maxc
    s = np.where(maxc > 0.0, delta / np.where(maxc > 0.0, maxc, 1.0), 0.0)

    # Avoid division by zero for grays; their hue is overwritten below
    safe = np.where(delta > 0.0, delta, 1.0)
    rc = (maxc - r) / safe
    gc = (maxc - g) / safe
    bc = (maxc - b) / safe

    h = np.where(
        r == maxc,
        bc - gc,
        np.where(g == maxc, 2.0 + rc - bc, 4.0 + gc - rc),
    )
    h = (h / 6.0) % 1.0
    h = np.where(delta > 0.0, h, 0.0)

    return np.stack([h, s, v], axis=-1)


def hsv_to_rgb(hsv: ArrayLike) -> NDArray[np.float64]:
    """
    Convert HSV [0,1] to RGB [0,1].

    Inverse of rgb_to_hsv. A hue of exactly 1.0 wraps to red.
    """
    hsv = np.asarray(hsv, dtype=np.float64)
    h, s, v = hsv[..., 0], hsv[..., 1], hsv[..., 2]

    i = np.floor(h * 6.0)
    f = h * 6.0 - i
    p = v * (1.0 - s)
    q = v * (1.0 - s * f)
    t = v * (1.0 - s * (1.0 - f))
    sector = i.astype(np.int64) % 6

    conditions = [sector == k for k in range(6)]
    r = np.select(conditions, [v, q, p, p, t, v])
    g = np.select(conditions, [t, v, v, q, p, p])
    b = np.select(conditions, [p, p, t, v, v, q])

    return np.stack([r, g, b], axis=-1)


def hue_difference(h1: ArrayLike, h2: ArrayLike, wrap: bool = False) -> NDArray[np.float64]:
    """
    Absolute hue difference on the [0, 1] hue fraction.

    With wrap=False the raw difference is returned, so 0.01 and 0.99 are
    0.98 apart. With wrap=True the shorter arc is used (at most 0.5).
    """
    diff = np.abs(np.asarray(h1, dtype=np.float64) - np.asarray(h2, dtype=np.float64))
    if wrap:
        diff = np.where(diff > 0.5, 1.0 - diff, diff)
    return diff


# =============================================================================
# Hex / 8-bit
# =============================================================================


def rgb_to_hex(rgb: ArrayLike) -> str:
    """Format an RGB [0,1] triplet as "#RRGGBB"."""
    r, g, b = (clamp01(rgb) * 255).round().astype(int)
    return f"#{r:02X}{g:02X}{b:02X}"


def hex_to_rgb(hex_color: str) -> NDArray[np.float64]:
    """Parse "#RRGGBB" or "RRGGBB" into an RGB [0,1] array."""
    hex_color = hex_color.lstrip("#")
    if len(hex_color) != 6:
        raise ValueError(f"Expected 6 hex digits, got {hex_color!r}")
    channels = [int(hex_color[i:i + 2], 16) for i in (0, 2, 4)]
    return np.array(channels, dtype=np.float64) / 255.0


# =============================================================================
# sRGB ↔ Linear RGB
# =============================================================================


def srgb_to_linear(srgb: ArrayLike) -> NDArray[np.float64]:
    """
    Convert sRGB values [0,1] to linear RGB.

    sRGB uses a piecewise gamma curve:
    - For values <= 0.04045: linear/12.92
    - For values > 0.04045: ((value + 0.055) / 1.055) ^ 2.4
    """
    srgb = np.asarray(srgb, dtype=np.float64)
    return np.where(
        srgb <= 0.04045,
        srgb / 12.92,
        np.power((np.maximum(srgb, 0.0) + 0.055) / 1.055, 2.4),
    )


# =============================================================================
# CIELAB
# =============================================================================

# Linear sRGB to XYZ, D65 white point
_SRGB_TO_XYZ = np.array([
    [0.4124, 0.3576, 0.1805],
    [0.2126, 0.7152, 0.0722],
    [0.0193, 0.1192, 0.9505],
], dtype=np.float64)

_D65_WHITE = np.array([0.95047, 1.00000, 1.08883], dtype=np.float64)


def _lab_f(t: NDArray[np.float64]) -> NDArray[np.float64]:
    return np.where(t > 0.008856, np.cbrt(t), 7.787 * t + 16.0 / 116.0)


def srgb_to_lab(srgb: ArrayLike) -> NDArray[np.float64]:
    """
    Convert sRGB [0,1] to CIELAB (D65).

    Returns:
        Array of shape (..., 3) with (L*, a*, b*); L* is 0-100
    """
    linear = srgb_to_linear(srgb)
    xyz = np.einsum('...j,ij->...i', linear, _SRGB_TO_XYZ) / _D65_WHITE
    fx, fy, fz = _lab_f(xyz[..., 0]), _lab_f(xyz[..., 1]), _lab_f(xyz[..., 2])
    L = 116.0 * fy - 16.0
    a = 500.0 * (fx - fy)
    b = 200.0 * (fy - fz)
    return np.stack([L, a, b], axis=-1)


def delta_e_cie76(srgb1: ArrayLike, srgb2: ArrayLike) -> NDArray[np.float64] | float:
    """CIE76 color difference: Euclidean distance in CIELAB."""
    delta = srgb_to_lab(srgb1) - srgb_to_lab(srgb2)
    dist = np.sqrt(np.sum(delta ** 2, axis=-1))
    return float(dist) if np.ndim(dist) == 0 else dist


# =============================================================================
# OKLab
# =============================================================================

# Matrices from https://bottosson.github.io/posts/oklab/

# Linear sRGB to LMS (cone responses)
_M1 = np.array([
    [0.4122214708, 0.5363325363, 0.0514459929],
    [0.2119034982, 0.6806995451, 0.1073969566],
    [0.0883024619, 0.2817188376, 0.6299787005],
], dtype=np.float64)

# LMS to OKLab
_M2 = np.array([
    [0.2104542553, 0.7936177850, -0.0040720468],
    [1.9779984951, -2.4285922050, 0.4505937099],
    [0.0259040371, 0.7827717662, -0.8086757660],
], dtype=np.float64)


def srgb_to_oklab(srgb: ArrayLike) -> NDArray[np.float64]:
    """
    Convert sRGB [0,1] to OKLab.

    Returns:
        Array of shape (..., 3) with (L, a, b); L is 0-1
    """
    linear = srgb_to_linear(srgb)
    lms = np.einsum('...j,ij->...i', linear, _M1)
    lms_cbrt = np.cbrt(lms)
    return np.einsum('...j,ij->...i', lms_cbrt, _M2)


def delta_e_oklab(srgb1: ArrayLike, srgb2: ArrayLike) -> NDArray[np.float64] | float:
    """
    Euclidean distance in OKLab (0-1 scale).

    Reference thresholds:
    - ΔE ≈ 0.02: barely perceptible
    - ΔE ≈ 0.04: noticeable difference
    - ΔE ≈ 0.08+: clearly different colors
    """
    delta = srgb_to_oklab(srgb1) - srgb_to_oklab(srgb2)
    dist = np.sqrt(np.sum(delta ** 2, axis=-1))
    return float(dist) if np.ndim(dist) == 0 else dist
