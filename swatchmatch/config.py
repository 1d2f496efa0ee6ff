# Copyright (c) 2026 Swatchmatch
# SPDX-License-Identifier: MIT

"""
Engine configuration.

Every tunable lives in a frozen dataclass with its default documented
inline. ``EngineConfig`` aggregates them and can be built from a partial
nested dict (e.g. parsed from a host application's settings file).
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field, fields
from typing import Any

from swatchmatch.schema import MatchingMethod, QualityTier


@dataclass(frozen=True)
class SamplerConfig:
    """Frame sampling window."""

    # Half-width of the square averaging window; clamped to [1, 10].
    # 2 = 5x5 neighborhood
    radius: int = 2

    def __post_init__(self) -> None:
        if self.radius < 1:
            raise ValueError(f"Sampler radius must be >= 1, got {self.radius}")


@dataclass(frozen=True)
class CompensationConfig:
    """Lighting compensation steps and their constants."""

    enable_white_balance: bool = True
    enable_exposure: bool = True
    use_calibration: bool = True

    # Exposure multiplier at ambient 0.0 (dark) and 1.0 (bright)
    exposure_dark: float = 1.2
    exposure_bright: float = 0.8

    # Below this ambient level saturation is rolled off, starting from
    # low_light_saturation at ambient 0.0 up to 1.0 at the threshold
    low_light_threshold: float = 0.3
    low_light_saturation: float = 0.7

    def __post_init__(self) -> None:
        for name in ("exposure_dark", "exposure_bright"):
            value = getattr(self, name)
            if not value > 0.0:
                raise ValueError(f"Exposure factor {name} must be > 0, got {value}")
        if not 0.0 < self.low_light_threshold <= 1.0:
            raise ValueError(
                f"Low light threshold must be in (0, 1], got {self.low_light_threshold}"
            )
        if not 0.0 <= self.low_light_saturation <= 1.0:
            raise ValueError(
                f"Low light saturation must be 0-1, got {self.low_light_saturation}"
            )


@dataclass(frozen=True)
class AmbientConfig:
    """Ambient brightness estimation and lighting classification."""

    # Sample every Nth pixel on both axes
    stride: int = 4

    # Central box side = min(width, height) // region_divisor
    region_divisor: int = 4

    # Brightness < indoor_below -> Indoor, > outdoor_above -> Outdoor
    indoor_below: float = 0.3
    outdoor_above: float = 0.7

    # Reported when the frame yields no samples
    default_level: float = 0.5

    def __post_init__(self) -> None:
        for name in ("stride", "region_divisor"):
            value = getattr(self, name)
            if value < 1:
                raise ValueError(f"Ambient {name} must be >= 1, got {value}")
        if not 0.0 <= self.indoor_below <= self.outdoor_above <= 1.0:
            raise ValueError(
                f"Lighting bounds must satisfy 0 <= indoor_below <= outdoor_above <= 1, "
                f"got {self.indoor_below}, {self.outdoor_above}"
            )
        if not 0.0 <= self.default_level <= 1.0:
            raise ValueError(f"Default ambient level must be 0-1, got {self.default_level}")


@dataclass(frozen=True)
class QualityThresholds:
    """
    Inclusive lower bounds of the quality tiers.

    Evaluated high to low; the first bound met wins.
    """

    excellent: float = 0.95
    good: float = 0.85
    fair: float = 0.70

    def __post_init__(self) -> None:
        for name in ("excellent", "good", "fair"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"Threshold {name} must be 0-1, got {value}")
        if not self.excellent >= self.good >= self.fair:
            raise ValueError(
                f"Thresholds must be ordered excellent >= good >= fair, got "
                f"{self.excellent}, {self.good}, {self.fair}"
            )

    def classify(self, quality: float) -> QualityTier:
        """Map a match quality in [0, 1] to its tier."""
        if quality >= self.excellent:
            return QualityTier.EXCELLENT
        if quality >= self.good:
            return QualityTier.GOOD
        if quality >= self.fair:
            return QualityTier.FAIR
        return QualityTier.POOR


@dataclass(frozen=True)
class SuggestionConfig:
    """Per-component difference thresholds for adjustment suggestions."""

    hue: float = 0.05
    saturation: float = 0.1
    value: float = 0.1

    # Per-channel RGB difference that triggers "add more / reduce" advice
    channel: float = 0.1

    # Difference scores at or below this count as identical colors
    identical_score: float = 1e-6

    # Hue difference uses the raw [0, 1] fraction unless this is set,
    # in which case the shorter arc around the hue circle is used
    wrap_hue: bool = False

    def __post_init__(self) -> None:
        for name in ("hue", "saturation", "value", "channel", "identical_score"):
            value = getattr(self, name)
            if value < 0.0:
                raise ValueError(f"Suggestion threshold {name} must be >= 0, got {value}")


@dataclass(frozen=True)
class EngineConfig:
    """Aggregate configuration for the capture and matching pipeline."""

    sampler: SamplerConfig = field(default_factory=SamplerConfig)
    compensation: CompensationConfig = field(default_factory=CompensationConfig)
    ambient: AmbientConfig = field(default_factory=AmbientConfig)
    thresholds: QualityThresholds = field(default_factory=QualityThresholds)
    suggestions: SuggestionConfig = field(default_factory=SuggestionConfig)
    matching_method: MatchingMethod = MatchingMethod.RGB
    history_capacity: int = 100

    def __post_init__(self) -> None:
        if self.history_capacity < 1:
            raise ValueError(
                f"History capacity must be >= 1, got {self.history_capacity}"
            )

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        d = asdict(self)
        d["matching_method"] = self.matching_method.value
        return d

    @classmethod
    def from_dict(cls, data: dict) -> EngineConfig:
        """
        Build a config from a partial nested dict.

        Missing keys keep their defaults. Unknown keys raise ValueError so
        that typos in host settings do not pass silently.
        """
        unknown = _unknown_keys(cls, data)
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(unknown)}")

        sections: dict[str, Any] = {}
        for f in fields(cls):
            if f.name not in data:
                continue
            value = data[f.name]
            section_type = _SECTION_TYPES.get(f.name)
            if section_type is not None:
                sections[f.name] = section_type(**value)
            elif f.name == "matching_method":
                sections[f.name] = MatchingMethod(value)
            else:
                sections[f.name] = value
        return cls(**sections)

    @classmethod
    def from_json(cls, json_str: str) -> EngineConfig:
        return cls.from_dict(json.loads(json_str))


_SECTION_TYPES: dict[str, type] = {
    "sampler": SamplerConfig,
    "compensation": CompensationConfig,
    "ambient": AmbientConfig,
    "thresholds": QualityThresholds,
    "suggestions": SuggestionConfig,
}


def _unknown_keys(config_type: type, data: dict, prefix: str = "") -> list[str]:
    known = {f.name for f in fields(config_type)}
    unknown: list[str] = []
    for key, value in data.items():
        path = f"{prefix}{key}"
        if key not in known:
            unknown.append(path)
            continue
        section_type = _SECTION_TYPES.get(key) if config_type is EngineConfig else None
        if section_type is not None and isinstance(value, dict):
            unknown.extend(_unknown_keys(section_type, value, prefix=f"{path}."))
    return unknown
