# Copyright (c) 2026 Swatchmatch
# SPDX-License-Identifier: MIT

"""
Measurement core for Swatchmatch.

Sampling, lighting compensation, calibration and matching. All operations
are synchronous, pixel-based computations on immutable values.
"""

from swatchmatch.measure.calibration import (
    CalibrationSession,
    apply_calibration,
    calibrate,
)
from swatchmatch.measure.lighting import (
    LightingMonitor,
    classify_lighting,
    compensate,
    estimate_ambient_level,
)
from swatchmatch.measure.matching import (
    ColorMatchEngine,
    score_colors,
    suggest_adjustments,
)
from swatchmatch.measure.sampler import pick_color, sample_color

__all__ = [
    # Sampling
    "sample_color",
    "pick_color",
    # Lighting
    "compensate",
    "estimate_ambient_level",
    "classify_lighting",
    "LightingMonitor",
    # Calibration
    "calibrate",
    "apply_calibration",
    "CalibrationSession",
    # Matching
    "ColorMatchEngine",
    "score_colors",
    "suggest_adjustments",
]
