# Copyright (c) 2026 Swatchmatch
# SPDX-License-Identifier: MIT

"""
Swatchmatch -- Paint color capture and matching.

Samples paint colors from camera frames, corrects them for lighting and
sensor bias, and scores them against reference colors with mixing
advice.

Quick start::

    from swatchmatch import ColorAnalyzer

    analyzer = ColorAnalyzer()
    reference = analyzer.pick_reference(image, 640, 480, 0.25, 0.5)
    paint = analyzer.capture_paint(frame, 1280, 720, 640, 360)
    result = analyzer.compare(reference, paint)
    result.quality_label   # "Excellent" / "Good" / "Fair" / "Poor"
    result.suggestions     # ("Add more blue", ...)
"""

from __future__ import annotations

__version__ = "1.0.0"

from swatchmatch.config import EngineConfig
from swatchmatch.errors import (
    ArityMismatch,
    EmptyInput,
    InvalidCoordinate,
    SwatchMatchError,
)
from swatchmatch.measure import ColorMatchEngine, calibrate, sample_color
from swatchmatch.runtime import ColorAnalyzer, MatchHistoryStore
from swatchmatch.schema import (
    CalibrationData,
    Color,
    ColorMatchData,
    ColorMatchResult,
    LightingCondition,
    MatchFilter,
    QualityTier,
)

__all__ = [
    # Core API
    "ColorAnalyzer",
    "ColorMatchEngine",
    "MatchHistoryStore",
    "sample_color",
    "calibrate",
    "EngineConfig",
    # Types (commonly needed)
    "Color",
    "CalibrationData",
    "ColorMatchResult",
    "ColorMatchData",
    "MatchFilter",
    "LightingCondition",
    "QualityTier",
    # Errors
    "SwatchMatchError",
    "ArityMismatch",
    "EmptyInput",
    "InvalidCoordinate",
    # Version
    "__version__",
]
