# Copyright (c) 2026 Swatchmatch
# SPDX-License-Identifier: MIT

"""
Color matching: difference scores, quality tiers and mixing advice.

Default scoring (MatchingMethod.RGB):

    difference_score = |reference - candidate| * 100     (Euclidean, RGB)
    match_quality    = clamp01(1 - |reference - candidate| / sqrt(3))

The x100 scale puts the score in the numeric neighborhood of a ΔE value,
but it is RGB distance, not a colorimetric formula. The CIE76 and OKLAB
methods are available when a perceptual distance is wanted.

Every method pairs a distance with the distance at which quality reaches
zero, so quality falls linearly and monotonically as the score grows.
Quality tiers depend only on quality, never on the method.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np
from numpy.typing import NDArray

from swatchmatch.config import EngineConfig, QualityThresholds, SuggestionConfig
from swatchmatch.measure.colorspace import (
    RGB_MAX_DISTANCE,
    clamp01,
    delta_e_cie76,
    delta_e_oklab,
    hue_difference,
    rgb_distance,
    rgb_to_hsv,
)
from swatchmatch.schema import Color, ColorMatchResult, MatchingMethod, QualityTier

logger = logging.getLogger(__name__)

IDENTICAL_MESSAGE = "Excellent match! Colors are very close."
GENERIC_MESSAGE = "Make a small overall adjustment to fine-tune the mix"

_CHANNEL_NAMES = ("red", "green", "blue")


# =============================================================================
# Scoring Methods
# =============================================================================


def _hsv_distance(rgb1: NDArray[np.float64], rgb2: NDArray[np.float64]) -> float:
    """HSV distance with hue on the short arc and weighted x2."""
    h1, s1, v1 = rgb_to_hsv(rgb1)
    h2, s2, v2 = rgb_to_hsv(rgb2)
    dh = float(hue_difference(h1, h2, wrap=True))
    return math.sqrt((2.0 * dh) ** 2 + (s1 - s2) ** 2 + (v1 - v2) ** 2)


@dataclass(frozen=True)
class _Scoring:
    distance: Callable[[NDArray[np.float64], NDArray[np.float64]], float]
    # Multiplier from raw distance to reported difference score
    scale: float
    # Raw distance at which quality reaches 0
    full_scale: float


_SCORING: dict[MatchingMethod, _Scoring] = {
    MatchingMethod.RGB: _Scoring(rgb_distance, 100.0, RGB_MAX_DISTANCE),
    MatchingMethod.HSV: _Scoring(_hsv_distance, 100.0, math.sqrt(3.0)),
    MatchingMethod.CIE76: _Scoring(delta_e_cie76, 1.0, 100.0),
    MatchingMethod.OKLAB: _Scoring(delta_e_oklab, 100.0, 1.0),
}


def score_colors(
    reference: Color,
    candidate: Color,
    method: MatchingMethod = MatchingMethod.RGB,
) -> tuple[float, float]:
    """
    Difference score and match quality under one method.

    Returns:
        (difference_score, match_quality)
    """
    scoring = _SCORING[method]
    distance = float(scoring.distance(reference.to_array(), candidate.to_array()))
    quality = float(clamp01(1.0 - distance / scoring.full_scale))
    return distance * scoring.scale, quality


# =============================================================================
# Suggestions
# =============================================================================


def suggest_adjustments(
    reference: Color,
    candidate: Color,
    config: Optional[SuggestionConfig] = None,
) -> tuple[str, ...]:
    """
    Mixing advice for moving the candidate towards the reference.

    HSV advice comes first, largest component difference first, followed
    by per-channel RGB advice. If nothing crosses a threshold a generic
    fine-tuning hint is returned. Identical colors get a single
    affirmative message.
    """
    cfg = config or SuggestionConfig()
    ref_rgb = reference.to_array()
    cand_rgb = candidate.to_array()

    if rgb_distance(ref_rgb, cand_rgb) * 100.0 <= cfg.identical_score:
        return (IDENTICAL_MESSAGE,)

    ref_h, ref_s, ref_v = rgb_to_hsv(ref_rgb)
    cand_h, cand_s, cand_v = rgb_to_hsv(cand_rgb)

    hsv_advice: list[tuple[float, str]] = []

    dh = float(hue_difference(ref_h, cand_h, wrap=cfg.wrap_hue))
    if dh > cfg.hue:
        hsv_advice.append((
            dh,
            "Shift hue towards warmer tones" if ref_h > cand_h
            else "Shift hue towards cooler tones",
        ))

    ds = abs(float(ref_s - cand_s))
    if ds > cfg.saturation:
        hsv_advice.append((
            ds,
            "Increase color saturation" if ref_s > cand_s
            else "Decrease color saturation",
        ))

    dv = abs(float(ref_v - cand_v))
    if dv > cfg.value:
        hsv_advice.append((
            dv,
            "Make color brighter" if ref_v > cand_v else "Make color darker",
        ))

    hsv_advice.sort(key=lambda item: item[0], reverse=True)
    suggestions = [text for _, text in hsv_advice]

    for name, ref_c, cand_c in zip(_CHANNEL_NAMES, ref_rgb, cand_rgb):
        if abs(ref_c - cand_c) > cfg.channel:
            suggestions.append(
                f"Add more {name}" if ref_c > cand_c else f"Reduce {name} intensity"
            )

    if not suggestions:
        suggestions.append(GENERIC_MESSAGE)

    return tuple(suggestions)


# =============================================================================
# Engine
# =============================================================================


class ColorMatchEngine:
    """
    Compares reference and candidate colors.

    The engine holds only configuration (tier thresholds, scoring method,
    suggestion thresholds). ``compare`` is a pure function of its inputs
    and that configuration.
    """

    def __init__(
        self,
        thresholds: Optional[QualityThresholds] = None,
        method: MatchingMethod = MatchingMethod.RGB,
        suggestions: Optional[SuggestionConfig] = None,
    ) -> None:
        self._thresholds = thresholds or QualityThresholds()
        self._method = method
        self._suggestions = suggestions or SuggestionConfig()

    @classmethod
    def from_config(cls, config: EngineConfig) -> ColorMatchEngine:
        return cls(
            thresholds=config.thresholds,
            method=config.matching_method,
            suggestions=config.suggestions,
        )

    @property
    def thresholds(self) -> QualityThresholds:
        return self._thresholds

    @property
    def method(self) -> MatchingMethod:
        return self._method

    def set_quality_thresholds(self, excellent: float, good: float, fair: float) -> None:
        """
        Replace the tier cut points.

        Raises:
            ValueError: If a cut point is outside [0, 1] or they are not
                ordered excellent >= good >= fair
        """
        self._thresholds = QualityThresholds(excellent=excellent, good=good, fair=fair)
        logger.debug(
            "Quality thresholds set to %.3f / %.3f / %.3f", excellent, good, fair
        )

    def set_matching_method(self, method: MatchingMethod) -> None:
        self._method = method
        logger.debug("Matching method set to %s", method.value)

    def classify(self, quality: float) -> QualityTier:
        """Tier for a precomputed quality under the current thresholds."""
        return self._thresholds.classify(quality)

    def compare(self, reference: Color, candidate: Color) -> ColorMatchResult:
        """
        Score a candidate color against a reference color.

        Args:
            reference: Target color
            candidate: Captured paint color

        Returns:
            ColorMatchResult snapshot
        """
        ref_rgb = reference.to_array()
        cand_rgb = candidate.to_array()

        rgb_diff = np.abs(ref_rgb - cand_rgb)

        ref_hsv = rgb_to_hsv(ref_rgb)
        cand_hsv = rgb_to_hsv(cand_rgb)
        hsv_diff = np.abs(ref_hsv - cand_hsv)
        hsv_diff[0] = hue_difference(
            ref_hsv[0], cand_hsv[0], wrap=self._suggestions.wrap_hue
        )

        score, quality = score_colors(reference, candidate, self._method)

        result = ColorMatchResult(
            reference=reference,
            candidate=candidate,
            match_quality=quality,
            difference_score=score,
            rgb_difference=tuple(float(d) for d in rgb_diff),
            hsv_difference=tuple(float(d) for d in hsv_diff),
            quality=self.classify(quality),
            suggestions=suggest_adjustments(reference, candidate, self._suggestions),
            method=self._method,
        )

        logger.debug(
            "Compared %s vs %s: score %.2f, quality %.3f (%s)",
            reference.hex, candidate.hex, score, quality, result.quality_label,
        )
        return result
