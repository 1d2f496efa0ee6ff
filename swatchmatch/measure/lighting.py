# Copyright (c) 2026 Swatchmatch
# SPDX-License-Identifier: MIT

"""
Lighting compensation for captured colors.

Compensation chain (order is fixed):

    white balance → exposure → calibration transform → low-light desaturation

White balance and exposure are linear channel gains and run first. The
calibration transform expects colors that already carry those gains.
Desaturation is a perceptual step in HSV and runs last.

Intermediate values are kept as arrays; only exposure and calibration
clamp, so a white-balance overshoot is still scaled down by exposure
before it is cut off.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

import numpy as np
from numpy.typing import NDArray

from swatchmatch.config import AmbientConfig, CompensationConfig
from swatchmatch.measure.calibration import transform_rgb
from swatchmatch.measure.colorspace import brightness, clamp01, hsv_to_rgb, lerp, rgb_to_hsv
from swatchmatch.schema import CalibrationData, Color, LightingCondition, LightingSnapshot

logger = logging.getLogger(__name__)

# Per-channel gains that counteract the color cast of each environment
WHITE_BALANCE_FACTORS: dict[LightingCondition, tuple[float, float, float]] = {
    LightingCondition.INDOOR: (1.10, 1.00, 0.90),   # warm tungsten bias
    LightingCondition.OUTDOOR: (0.95, 1.00, 1.05),  # cool daylight bias
    LightingCondition.MIXED: (1.00, 1.00, 1.00),
}


# =============================================================================
# Compensation Steps
# =============================================================================


def white_balance_factors(lighting: LightingCondition) -> tuple[float, float, float]:
    return WHITE_BALANCE_FACTORS.get(lighting, (1.0, 1.0, 1.0))


def exposure_factor(
    ambient_level: float,
    config: Optional[CompensationConfig] = None,
) -> float:
    """Exposure gain, linear from exposure_dark (ambient 0) to exposure_bright (ambient 1)."""
    cfg = config or CompensationConfig()
    return lerp(cfg.exposure_dark, cfg.exposure_bright, ambient_level)


def low_light_saturation_scale(
    ambient_level: float,
    config: Optional[CompensationConfig] = None,
) -> float:
    """
    Saturation multiplier for dim scenes.

    1.0 at or above the low-light threshold; below it, linear from
    low_light_saturation (ambient 0) up to 1.0 (at the threshold).
    """
    cfg = config or CompensationConfig()
    if ambient_level >= cfg.low_light_threshold:
        return 1.0
    return lerp(cfg.low_light_saturation, 1.0, ambient_level / cfg.low_light_threshold)


def _apply_white_balance(rgb: NDArray[np.float64], lighting: LightingCondition) -> NDArray[np.float64]:
    return rgb * np.array(white_balance_factors(lighting), dtype=np.float64)


def _apply_exposure(
    rgb: NDArray[np.float64],
    ambient_level: float,
    config: CompensationConfig,
) -> NDArray[np.float64]:
    return clamp01(rgb * exposure_factor(ambient_level, config))


def _apply_low_light(
    rgb: NDArray[np.float64],
    ambient_level: float,
    config: CompensationConfig,
) -> NDArray[np.float64]:
    scale = low_light_saturation_scale(ambient_level, config)
    if scale >= 1.0:
        return rgb
    hsv = rgb_to_hsv(rgb)
    hsv[..., 1] *= scale
    return hsv_to_rgb(hsv)


def compensate(
    raw: Color,
    lighting: LightingCondition,
    ambient_level: float,
    calibration: Optional[CalibrationData] = None,
    config: Optional[CompensationConfig] = None,
) -> Color:
    """
    Correct a raw sampled color for lighting and sensor bias.

    Args:
        raw: Color straight from the frame sampler
        lighting: Current lighting classification
        ambient_level: Scene brightness (0.0-1.0); clamped
        calibration: Correction transform; ignored unless is_calibrated
        config: Step toggles and constants (defaults if None)

    Returns:
        Compensated color with channels in [0, 1]; alpha is preserved
    """
    cfg = config or CompensationConfig()
    ambient = float(clamp01(ambient_level))
    rgb = raw.to_array()

    if cfg.enable_white_balance:
        rgb = _apply_white_balance(rgb, lighting)

    if cfg.enable_exposure:
        rgb = _apply_exposure(rgb, ambient, cfg)

    if cfg.use_calibration and calibration is not None and calibration.is_calibrated:
        rgb = transform_rgb(rgb, calibration)

    rgb = _apply_low_light(rgb, ambient, cfg)

    result = Color.from_array(rgb, a=raw.a)
    logger.debug(
        "Compensated %s -> %s (%s, ambient %.2f)",
        raw.hex, result.hex, lighting.value, ambient,
    )
    return result


# =============================================================================
# Ambient Estimation
# =============================================================================


def estimate_ambient_level(
    pixels: Optional[NDArray[np.float64]],
    config: Optional[AmbientConfig] = None,
) -> float:
    """
    Average brightness of the frame center.

    Samples every ``stride``-th pixel inside a centered square whose side
    is the shorter frame dimension divided by ``region_divisor``.

    Args:
        pixels: Normalized (H, W, 3) frame, or None
        config: Sampling parameters

    Returns:
        Brightness in [0, 1]; ``default_level`` if nothing was sampled
    """
    cfg = config or AmbientConfig()
    if pixels is None or pixels.size == 0:
        return cfg.default_level

    height, width = pixels.shape[:2]
    half = (min(width, height) // cfg.region_divisor) // 2
    cx, cy = width // 2, height // 2

    xs = np.arange(cx - half, cx + half, cfg.stride)
    ys = np.arange(cy - half, cy + half, cfg.stride)
    xs = xs[(xs >= 0) & (xs < width)]
    ys = ys[(ys >= 0) & (ys < height)]

    if xs.size == 0 or ys.size == 0:
        return cfg.default_level

    region = pixels[np.ix_(ys, xs)]
    return float(np.mean(brightness(region)))


def classify_lighting(
    ambient_level: float,
    config: Optional[AmbientConfig] = None,
) -> LightingCondition:
    """Indoor below indoor_below, Outdoor above outdoor_above, else Mixed."""
    cfg = config or AmbientConfig()
    if ambient_level < cfg.indoor_below:
        return LightingCondition.INDOOR
    if ambient_level > cfg.outdoor_above:
        return LightingCondition.OUTDOOR
    return LightingCondition.MIXED


LightingListener = Callable[[LightingCondition], None]


class LightingMonitor:
    """
    Tracks the lighting condition across frames.

    ``update`` is meant to run once per frame. Listeners are notified only
    when the discrete condition changes, not on every frame.
    """

    def __init__(
        self,
        config: Optional[AmbientConfig] = None,
        condition: LightingCondition = LightingCondition.INDOOR,
        ambient_level: Optional[float] = None,
    ) -> None:
        self.config = config or AmbientConfig()
        self._condition = condition
        self._ambient_level = (
            self.config.default_level if ambient_level is None else ambient_level
        )
        self._listeners: list[LightingListener] = []

    @property
    def condition(self) -> LightingCondition:
        return self._condition

    @property
    def ambient_level(self) -> float:
        return self._ambient_level

    def add_listener(self, listener: LightingListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: LightingListener) -> None:
        self._listeners.remove(listener)

    def update(self, pixels: Optional[NDArray[np.float64]]) -> Optional[LightingCondition]:
        """
        Re-estimate lighting from a frame.

        A listener that raises is logged and skipped; the remaining
        listeners are still notified.

        Returns:
            The new condition if it changed, otherwise None
        """
        self._ambient_level = estimate_ambient_level(pixels, self.config)
        new_condition = classify_lighting(self._ambient_level, self.config)

        if new_condition == self._condition:
            return None

        self._condition = new_condition
        logger.info(
            "Lighting condition changed to %s (ambient %.2f)",
            new_condition.value, self._ambient_level,
        )
        for listener in list(self._listeners):
            try:
                listener(new_condition)
            except Exception:
                logger.warning("Lighting listener %r failed", listener, exc_info=True)
        return new_condition

    def snapshot(self) -> LightingSnapshot:
        return LightingSnapshot(
            ambient_level=float(clamp01(self._ambient_level)),
            environment=self._condition,
        )
