# Copyright (c) 2026 Swatchmatch
# SPDX-License-Identifier: MIT

"""
Schema definitions for color capture and matching.

All types in this module are immutable (frozen dataclasses).
The match history store is the only mutable state in the library.
"""

from swatchmatch.schema.color_match import (
    BLACK,
    WHITE,
    CalibrationData,
    Color,
    ColorMatchData,
    ColorMatchResult,
    LightingCondition,
    LightingSnapshot,
    MatchFilter,
    MatchingMethod,
    MatchStatistics,
    QualityTier,
)

__all__ = [
    # Core color type
    "Color",
    "WHITE",
    "BLACK",
    # Lighting
    "LightingCondition",
    "LightingSnapshot",
    # Calibration
    "CalibrationData",
    # Matching
    "QualityTier",
    "MatchingMethod",
    "ColorMatchResult",
    # History
    "ColorMatchData",
    "MatchFilter",
    "MatchStatistics",
]
