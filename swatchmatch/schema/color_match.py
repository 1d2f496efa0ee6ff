# Copyright (c) 2026 Swatchmatch
# SPDX-License-Identifier: MIT

"""
Value types for paint color capture and matching.

Design principles:
- Immutable: All types are frozen dataclasses
- Derived, never edited: a new comparison means a new ColorMatchResult
- Serializable: every persistable record has to_dict/from_dict

Color channels are normalized intensities in [0, 1]. Constructors reject
out-of-range values; computation paths go through Color.from_array, which
clamps.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    import numpy as np
    from numpy.typing import NDArray

    from swatchmatch.config import QualityThresholds


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_session_id() -> str:
    return str(uuid.uuid4())


def _as_utc(moment: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


# =============================================================================
# Color
# =============================================================================


@dataclass(frozen=True, slots=True)
class Color:
    """
    An RGB color with normalized channels and optional alpha.

    Attributes:
        r: Red intensity (0.0-1.0)
        g: Green intensity (0.0-1.0)
        b: Blue intensity (0.0-1.0)
        a: Alpha (0.0-1.0), fully opaque by default
    """
    r: float
    g: float
    b: float
    a: float = 1.0

    def __post_init__(self) -> None:
        """Validate channel values are within [0, 1]."""
        for name in ("r", "g", "b", "a"):
            value = float(getattr(self, name))
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"Channel {name} must be 0-1, got {value}")
            object.__setattr__(self, name, value)

    @property
    def rgb(self) -> tuple[float, float, float]:
        return (self.r, self.g, self.b)

    @property
    def hsv(self) -> tuple[float, float, float]:
        """Hue, saturation and value, each in [0, 1]."""
        from swatchmatch.measure.colorspace import rgb_to_hsv
        h, s, v = rgb_to_hsv(self.to_array())
        return (float(h), float(s), float(v))

    @property
    def hex(self) -> str:
        """Hex string like "#3941C8" (alpha ignored)."""
        from swatchmatch.measure.colorspace import rgb_to_hex
        return rgb_to_hex(self.to_array())

    def to_array(self) -> NDArray[np.float64]:
        """RGB channels as a float64 array of shape (3,)."""
        import numpy as np
        return np.array(self.rgb, dtype=np.float64)

    @classmethod
    def from_array(cls, rgb, a: float = 1.0) -> Color:
        """Build a color from any 3-element sequence, clamping to [0, 1]."""
        from swatchmatch.measure.colorspace import clamp01
        r, g, b = (float(c) for c in clamp01(rgb))
        return cls(r, g, b, float(clamp01(a)))

    @classmethod
    def from_hsv(cls, h: float, s: float, v: float, a: float = 1.0) -> Color:
        from swatchmatch.measure.colorspace import hsv_to_rgb
        return cls.from_array(hsv_to_rgb((h, s, v)), a=a)

    @classmethod
    def from_uint8(cls, r: int, g: int, b: int, a: int = 255) -> Color:
        """Build a color from 8-bit channel values."""
        return cls(r / 255.0, g / 255.0, b / 255.0, a / 255.0)

    @classmethod
    def from_hex(cls, hex_color: str) -> Color:
        """Parse "#RRGGBB" or "RRGGBB"."""
        from swatchmatch.measure.colorspace import hex_to_rgb
        return cls.from_array(hex_to_rgb(hex_color))

    def with_alpha(self, a: float) -> Color:
        return replace(self, a=a)

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {"r": self.r, "g": self.g, "b": self.b, "a": self.a}

    @classmethod
    def from_dict(cls, data: dict) -> Color:
        """Deserialize from dictionary."""
        return cls(r=data["r"], g=data["g"], b=data["b"], a=data.get("a", 1.0))


WHITE = Color(1.0, 1.0, 1.0)
BLACK = Color(0.0, 0.0, 0.0)


# =============================================================================
# Lighting
# =============================================================================


class LightingCondition(Enum):
    """Ambient lighting state derived from scene brightness."""
    INDOOR = "Indoor"    # dim, warm tungsten bias
    OUTDOOR = "Outdoor"  # bright, cool daylight bias
    MIXED = "Mixed"


@dataclass(frozen=True, slots=True)
class LightingSnapshot:
    """
    Lighting state at the moment a match was committed.

    Attributes:
        ambient_level: Scene brightness (0.0-1.0)
        environment: Discrete lighting condition
    """
    ambient_level: float
    environment: LightingCondition

    def __post_init__(self) -> None:
        if not 0.0 <= self.ambient_level <= 1.0:
            raise ValueError(f"Ambient level must be 0-1, got {self.ambient_level}")

    def to_dict(self) -> dict:
        return {
            "ambient_level": self.ambient_level,
            "environment": self.environment.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> LightingSnapshot:
        return cls(
            ambient_level=data["ambient_level"],
            environment=LightingCondition(data["environment"]),
        )


# =============================================================================
# Calibration
# =============================================================================

_IDENTITY_4X4 = (
    (1.0, 0.0, 0.0, 0.0),
    (0.0, 1.0, 0.0, 0.0),
    (0.0, 0.0, 1.0, 0.0),
    (0.0, 0.0, 0.0, 1.0),
)


@dataclass(frozen=True, slots=True)
class CalibrationData:
    """
    A color correction transform and whether it came from a real run.

    The transform is a 4x4 matrix applied to the homogeneous color vector
    (r, g, b, 1). It is stored as nested tuples so the record stays
    hashable and comparable; use ``as_array`` for arithmetic.

    Attributes:
        matrix: 4x4 correction transform, row-major
        is_calibrated: True only after a completed calibration run
        timestamp: When the transform was produced
    """
    matrix: tuple[tuple[float, ...], ...] = _IDENTITY_4X4
    is_calibrated: bool = False
    timestamp: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        """Validate and normalize the matrix to 4x4 float tuples."""
        rows = tuple(tuple(float(v) for v in row) for row in self.matrix)
        if len(rows) != 4 or any(len(row) != 4 for row in rows):
            raise ValueError(
                f"Calibration matrix must be 4x4, got "
                f"{len(rows)}x{len(rows[0]) if rows else 0}"
            )
        object.__setattr__(self, "matrix", rows)

    @classmethod
    def identity(cls) -> CalibrationData:
        """Uncalibrated identity transform."""
        return cls()

    @property
    def diagonal(self) -> tuple[float, float, float]:
        """Per-channel scale terms (m00, m11, m22)."""
        return (self.matrix[0][0], self.matrix[1][1], self.matrix[2][2])

    def as_array(self) -> NDArray[np.float64]:
        import numpy as np
        return np.array(self.matrix, dtype=np.float64)

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {
            "matrix": [list(row) for row in self.matrix],
            "is_calibrated": self.is_calibrated,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> CalibrationData:
        """Deserialize from dictionary."""
        return cls(
            matrix=tuple(tuple(row) for row in data["matrix"]),
            is_calibrated=data.get("is_calibrated", False),
            timestamp=datetime.fromisoformat(data["timestamp"]),
        )

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, json_str: str) -> CalibrationData:
        return cls.from_dict(json.loads(json_str))


# =============================================================================
# Matching
# =============================================================================


class QualityTier(Enum):
    """Match quality tiers, best first."""
    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"


class MatchingMethod(Enum):
    """
    Scoring functions available to the match engine.

    This is a closed set; each variant maps to one fixed distance function.
    """
    RGB = "rgb"        # Euclidean RGB distance x100 (default)
    HSV = "hsv"        # Hue-weighted HSV distance x100
    CIE76 = "cie76"    # CIELAB delta E*ab
    OKLAB = "oklab"    # OKLab Euclidean distance x100


@dataclass(frozen=True, slots=True)
class ColorMatchResult:
    """
    Snapshot comparison of a reference color and a candidate color.

    Attributes:
        reference: Target color (picked from the reference image)
        candidate: Captured paint color
        match_quality: 1.0 for identical colors, falling linearly to 0.0
        difference_score: Distance under the selected matching method
        rgb_difference: Absolute per-channel RGB difference
        hsv_difference: Absolute per-component HSV difference
        quality: Quality tier derived from match_quality
        suggestions: Human-readable mixing adjustments
        method: Matching method that produced difference_score
    """
    reference: Color
    candidate: Color
    match_quality: float
    difference_score: float
    rgb_difference: tuple[float, float, float]
    hsv_difference: tuple[float, float, float]
    quality: QualityTier
    suggestions: tuple[str, ...] = ()
    method: MatchingMethod = MatchingMethod.RGB

    def __post_init__(self) -> None:
        if not 0.0 <= self.match_quality <= 1.0:
            raise ValueError(f"Match quality must be 0-1, got {self.match_quality}")
        if self.difference_score < 0.0:
            raise ValueError(
                f"Difference score must be >= 0, got {self.difference_score}"
            )

    @property
    def quality_label(self) -> str:
        return self.quality.value

    def reclassified(self, thresholds: QualityThresholds) -> ColorMatchResult:
        """Return a copy whose tier is re-derived from the stored quality."""
        return replace(self, quality=thresholds.classify(self.match_quality))

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {
            "reference": self.reference.to_dict(),
            "candidate": self.candidate.to_dict(),
            "match_quality": self.match_quality,
            "difference_score": self.difference_score,
            "rgb_difference": list(self.rgb_difference),
            "hsv_difference": list(self.hsv_difference),
            "quality": self.quality.value,
            "suggestions": list(self.suggestions),
            "method": self.method.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> ColorMatchResult:
        """Deserialize from dictionary."""
        return cls(
            reference=Color.from_dict(data["reference"]),
            candidate=Color.from_dict(data["candidate"]),
            match_quality=data["match_quality"],
            difference_score=data["difference_score"],
            rgb_difference=tuple(data["rgb_difference"]),
            hsv_difference=tuple(data["hsv_difference"]),
            quality=QualityTier(data["quality"]),
            suggestions=tuple(data.get("suggestions", ())),
            method=MatchingMethod(data.get("method", MatchingMethod.RGB.value)),
        )

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)


# =============================================================================
# History Records
# =============================================================================


@dataclass(frozen=True, slots=True)
class ColorMatchData:
    """
    A committed match, as stored in the match history.

    Records are immutable. ``with_note`` returns a new record with text
    appended to ``notes``; the original is left untouched.

    Attributes:
        reference_color: Target color
        captured_color: Paint color as captured
        match_accuracy: Match quality (0.0-1.0) at commit time
        capture_position: 3D point the paint was captured at
        image_coordinate: Normalized 2D coordinate in the reference image
        timestamp: Commit time (naive values are taken as UTC)
        session_id: Identifier of the work session
        notes: Free text
        lighting: Ambient lighting at commit time, if known
    """
    reference_color: Color
    captured_color: Color
    match_accuracy: float
    capture_position: tuple[float, float, float] = (0.0, 0.0, 0.0)
    image_coordinate: tuple[float, float] = (0.0, 0.0)
    timestamp: datetime = field(default_factory=_utcnow)
    session_id: str = field(default_factory=_new_session_id)
    notes: str = ""
    lighting: Optional[LightingSnapshot] = None

    def __post_init__(self) -> None:
        if not 0.0 <= self.match_accuracy <= 1.0:
            raise ValueError(f"Match accuracy must be 0-1, got {self.match_accuracy}")
        if len(self.capture_position) != 3:
            raise ValueError(
                f"Capture position must have 3 components, got {len(self.capture_position)}"
            )
        if len(self.image_coordinate) != 2:
            raise ValueError(
                f"Image coordinate must have 2 components, got {len(self.image_coordinate)}"
            )
        object.__setattr__(
            self, "capture_position", tuple(float(v) for v in self.capture_position)
        )
        object.__setattr__(
            self, "image_coordinate", tuple(float(v) for v in self.image_coordinate)
        )
        object.__setattr__(self, "timestamp", _as_utc(self.timestamp))

    @classmethod
    def create(
        cls,
        reference: Color,
        captured: Color,
        capture_position: tuple[float, float, float] = (0.0, 0.0, 0.0),
        **kwargs,
    ) -> ColorMatchData:
        """Build a record, deriving match_accuracy from RGB distance."""
        from swatchmatch.measure.colorspace import rgb_match_quality
        accuracy = rgb_match_quality(reference.to_array(), captured.to_array())
        return cls(
            reference_color=reference,
            captured_color=captured,
            match_accuracy=accuracy,
            capture_position=capture_position,
            **kwargs,
        )

    def with_note(self, note: str) -> ColorMatchData:
        """Return a copy with ``note`` appended on a new line."""
        notes = f"{self.notes}\n{note}" if self.notes else note
        return replace(self, notes=notes)

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        d = {
            "reference_color": self.reference_color.to_dict(),
            "captured_color": self.captured_color.to_dict(),
            "match_accuracy": self.match_accuracy,
            "capture_position": list(self.capture_position),
            "image_coordinate": list(self.image_coordinate),
            "timestamp": self.timestamp.isoformat(),
            "session_id": self.session_id,
            "notes": self.notes,
        }
        if self.lighting is not None:
            d["lighting"] = self.lighting.to_dict()
        return d

    @classmethod
    def from_dict(cls, data: dict) -> ColorMatchData:
        """Deserialize from dictionary."""
        return cls(
            reference_color=Color.from_dict(data["reference_color"]),
            captured_color=Color.from_dict(data["captured_color"]),
            match_accuracy=data["match_accuracy"],
            capture_position=tuple(data.get("capture_position", (0.0, 0.0, 0.0))),
            image_coordinate=tuple(data.get("image_coordinate", (0.0, 0.0))),
            timestamp=datetime.fromisoformat(data["timestamp"]),
            session_id=data["session_id"],
            notes=data.get("notes", ""),
            lighting=(
                LightingSnapshot.from_dict(data["lighting"])
                if data.get("lighting") else None
            ),
        )


@dataclass(frozen=True, slots=True)
class MatchFilter:
    """
    Criteria for querying the match history.

    Every criterion left as None is ignored; an entry must satisfy all
    of the others. Bounds are inclusive.

    Attributes:
        start: Earliest timestamp (naive values are taken as UTC)
        end: Latest timestamp
        min_accuracy: Lowest match_accuracy
        max_accuracy: Highest match_accuracy
        session_id: Exact session identifier
        reference_color: Keep entries whose reference color lies within
            ``color_tolerance`` (Euclidean RGB distance) of this color
        color_tolerance: Radius of the reference color neighborhood
    """
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    min_accuracy: Optional[float] = None
    max_accuracy: Optional[float] = None
    session_id: Optional[str] = None
    reference_color: Optional[Color] = None
    color_tolerance: float = 0.1

    def __post_init__(self) -> None:
        for name in ("min_accuracy", "max_accuracy"):
            value = getattr(self, name)
            if value is not None and not 0.0 <= value <= 1.0:
                raise ValueError(f"Filter {name} must be 0-1, got {value}")
        if (self.min_accuracy is not None and self.max_accuracy is not None
                and self.min_accuracy > self.max_accuracy):
            raise ValueError(
                f"Filter min_accuracy {self.min_accuracy} exceeds "
                f"max_accuracy {self.max_accuracy}"
            )
        if self.color_tolerance < 0.0:
            raise ValueError(f"Color tolerance must be >= 0, got {self.color_tolerance}")
        for name in ("start", "end"):
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, _as_utc(value))
        if self.start is not None and self.end is not None and self.start > self.end:
            raise ValueError(f"Filter start {self.start} is after end {self.end}")

    def matches(self, entry: ColorMatchData) -> bool:
        """True if ``entry`` satisfies every criterion set on this filter."""
        if self.start is not None and entry.timestamp < self.start:
            return False
        if self.end is not None and entry.timestamp > self.end:
            return False
        if self.min_accuracy is not None and entry.match_accuracy < self.min_accuracy:
            return False
        if self.max_accuracy is not None and entry.match_accuracy > self.max_accuracy:
            return False
        if self.session_id is not None and entry.session_id != self.session_id:
            return False
        if self.reference_color is not None:
            from swatchmatch.measure.colorspace import rgb_distance
            distance = rgb_distance(
                entry.reference_color.to_array(), self.reference_color.to_array()
            )
            if distance > self.color_tolerance:
                return False
        return True


@dataclass(frozen=True, slots=True)
class MatchStatistics:
    """
    Aggregate view over the match history.

    Attributes:
        count: Number of entries
        mean_accuracy: Arithmetic mean of match_accuracy (0.0 when empty)
        excellent, good, fair, poor: Entries per quality tier
        sessions: Number of distinct session identifiers
        best: Highest-accuracy entry (oldest wins ties), None when empty
        worst: Lowest-accuracy entry (oldest wins ties), None when empty
    """
    count: int = 0
    mean_accuracy: float = 0.0
    excellent: int = 0
    good: int = 0
    fair: int = 0
    poor: int = 0
    sessions: int = 0
    best: Optional[ColorMatchData] = None
    worst: Optional[ColorMatchData] = None

    def tier_count(self, tier: QualityTier) -> int:
        return {
            QualityTier.EXCELLENT: self.excellent,
            QualityTier.GOOD: self.good,
            QualityTier.FAIR: self.fair,
            QualityTier.POOR: self.poor,
        }[tier]

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {
            "count": self.count,
            "mean_accuracy": self.mean_accuracy,
            "tiers": {
                QualityTier.EXCELLENT.value: self.excellent,
                QualityTier.GOOD.value: self.good,
                QualityTier.FAIR.value: self.fair,
                QualityTier.POOR.value: self.poor,
            },
            "sessions": self.sessions,
            "best": self.best.to_dict() if self.best is not None else None,
            "worst": self.worst.to_dict() if self.worst is not None else None,
        }
