# Copyright (c) 2026 Swatchmatch
# SPDX-License-Identifier: MIT

"""Tests for schema types and serialization."""

from datetime import datetime, timezone

import pytest

from swatchmatch.config import QualityThresholds
from swatchmatch.schema import (
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


def _result(quality=0.9, score=17.3, tier=QualityTier.GOOD):
    return ColorMatchResult(
        reference=Color(1.0, 0.0, 0.0),
        candidate=Color(0.9, 0.1, 0.1),
        match_quality=quality,
        difference_score=score,
        rgb_difference=(0.1, 0.1, 0.1),
        hsv_difference=(0.0, 0.11, 0.1),
        quality=tier,
        suggestions=("Increase color saturation",),
    )


class TestColor:

    def test_valid_color(self):
        c = Color(0.2, 0.4, 0.6)
        assert c.rgb == (0.2, 0.4, 0.6)
        assert c.a == 1.0

    def test_ints_are_coerced(self):
        c = Color(1, 0, 0)
        assert isinstance(c.r, float)

    def test_out_of_range_channel(self):
        with pytest.raises(ValueError, match="Channel g"):
            Color(0.5, 1.5, 0.5)

    def test_nan_channel(self):
        with pytest.raises(ValueError):
            Color(float("nan"), 0.0, 0.0)

    def test_from_array_clamps(self):
        c = Color.from_array([1.2, -0.1, 0.5])
        assert c.rgb == (1.0, 0.0, 0.5)

    def test_from_uint8(self):
        c = Color.from_uint8(255, 0, 51)
        assert c.r == 1.0
        assert c.b == pytest.approx(0.2)

    def test_hex(self):
        assert Color(1.0, 0.0, 0.0).hex == "#FF0000"
        assert Color.from_hex("#0000FF") == Color(0.0, 0.0, 1.0)

    def test_hsv(self):
        assert Color(0.0, 1.0, 0.0).hsv == pytest.approx((1 / 3, 1.0, 1.0))

    def test_from_hsv(self):
        c = Color.from_hsv(0.0, 1.0, 1.0)
        assert c.rgb == pytest.approx((1.0, 0.0, 0.0))

    def test_with_alpha(self):
        c = Color(0.1, 0.2, 0.3).with_alpha(0.5)
        assert c.a == 0.5
        assert c.rgb == (0.1, 0.2, 0.3)

    def test_constants(self):
        assert WHITE.rgb == (1.0, 1.0, 1.0)
        assert BLACK.rgb == (0.0, 0.0, 0.0)

    def test_dict_roundtrip(self):
        c = Color(0.1, 0.2, 0.3, 0.4)
        assert Color.from_dict(c.to_dict()) == c

    def test_immutable(self):
        c = Color(0.1, 0.2, 0.3)
        with pytest.raises(AttributeError):
            c.r = 0.5


class TestLightingSnapshot:

    def test_valid(self):
        snap = LightingSnapshot(0.4, LightingCondition.MIXED)
        assert snap.to_dict() == {"ambient_level": 0.4, "environment": "Mixed"}

    def test_invalid_level(self):
        with pytest.raises(ValueError, match="Ambient level"):
            LightingSnapshot(1.5, LightingCondition.OUTDOOR)


class TestCalibrationData:

    def test_identity_is_uncalibrated(self):
        cal = CalibrationData.identity()
        assert not cal.is_calibrated
        assert cal.diagonal == (1.0, 1.0, 1.0)
        assert cal.matrix[3] == (0.0, 0.0, 0.0, 1.0)

    def test_timestamp_is_utc(self):
        assert CalibrationData().timestamp.tzinfo is not None

    def test_matrix_must_be_4x4(self):
        with pytest.raises(ValueError, match="4x4"):
            CalibrationData(matrix=((1, 0, 0), (0, 1, 0), (0, 0, 1)))

    def test_matrix_is_normalized_to_floats(self):
        cal = CalibrationData(
            matrix=[[2, 0, 0, 0], [0, 1, 0, 0], [0, 0, 1, 0], [0, 0, 0, 1]],
        )
        assert cal.matrix[0] == (2.0, 0.0, 0.0, 0.0)
        assert cal.as_array().shape == (4, 4)

    def test_json_roundtrip(self):
        cal = CalibrationData(
            matrix=(
                (1.2, 0.0, 0.0, 0.0),
                (0.0, 1.0, 0.0, 0.0),
                (0.0, 0.0, 0.9, 0.0),
                (0.0, 0.0, 0.0, 1.0),
            ),
            is_calibrated=True,
            timestamp=datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc),
        )
        assert CalibrationData.from_json(cal.to_json()) == cal


class TestColorMatchResult:

    def test_quality_label(self):
        assert _result().quality_label == "Good"

    def test_invalid_quality(self):
        with pytest.raises(ValueError, match="Match quality"):
            _result(quality=1.2)

    def test_negative_score(self):
        with pytest.raises(ValueError, match="Difference score"):
            _result(score=-1.0)

    def test_reclassified(self):
        strict = QualityThresholds(excellent=0.99, good=0.95, fair=0.9)
        result = _result().reclassified(strict)
        assert result.quality == QualityTier.FAIR
        assert result.match_quality == 0.9

    def test_dict_roundtrip(self):
        result = _result()
        assert ColorMatchResult.from_dict(result.to_dict()) == result

    def test_to_dict_uses_labels(self):
        d = _result().to_dict()
        assert d["quality"] == "Good"
        assert d["method"] == MatchingMethod.RGB.value


class TestColorMatchData:

    def test_create_derives_accuracy(self):
        entry = ColorMatchData.create(Color(1, 0, 0), Color(1, 0, 0))
        assert entry.match_accuracy == 1.0
        assert entry.session_id

    def test_create_opposite_corners(self):
        entry = ColorMatchData.create(WHITE, BLACK)
        assert entry.match_accuracy == pytest.approx(0.0, abs=1e-12)

    def test_invalid_accuracy(self):
        with pytest.raises(ValueError, match="Match accuracy"):
            ColorMatchData(WHITE, WHITE, match_accuracy=-0.1)

    def test_invalid_position(self):
        with pytest.raises(ValueError, match="Capture position"):
            ColorMatchData(WHITE, WHITE, 1.0, capture_position=(0.0, 0.0))

    def test_with_note_returns_new_record(self):
        entry = ColorMatchData(WHITE, WHITE, 1.0, notes="first")
        updated = entry.with_note("second")
        assert entry.notes == "first"
        assert updated.notes == "first\nsecond"
        assert updated.session_id == entry.session_id

    def test_with_note_on_empty(self):
        entry = ColorMatchData(WHITE, WHITE, 1.0)
        assert entry.with_note("hello").notes == "hello"

    def test_dict_roundtrip(self):
        entry = ColorMatchData(
            reference_color=Color(0.2, 0.3, 0.4),
            captured_color=Color(0.25, 0.3, 0.35),
            match_accuracy=0.96,
            capture_position=(1.0, 2.0, 3.0),
            image_coordinate=(0.25, 0.75),
            notes="north wall",
            lighting=LightingSnapshot(0.6, LightingCondition.MIXED),
        )
        assert ColorMatchData.from_dict(entry.to_dict()) == entry

    def test_dict_without_lighting(self):
        entry = ColorMatchData(WHITE, BLACK, 0.0)
        d = entry.to_dict()
        assert "lighting" not in d
        assert ColorMatchData.from_dict(d).lighting is None

    def test_naive_timestamp_is_utc(self):
        entry = ColorMatchData(WHITE, WHITE, 1.0, timestamp=datetime(2026, 3, 1, 12, 0))
        assert entry.timestamp == datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class TestMatchFilter:

    def test_defaults_match_anything(self):
        assert MatchFilter().matches(ColorMatchData(WHITE, BLACK, 0.0))

    def test_accuracy_out_of_range(self):
        with pytest.raises(ValueError, match="min_accuracy"):
            MatchFilter(min_accuracy=1.5)

    def test_accuracy_bounds_ordered(self):
        with pytest.raises(ValueError, match="exceeds"):
            MatchFilter(min_accuracy=0.9, max_accuracy=0.5)

    def test_negative_tolerance(self):
        with pytest.raises(ValueError, match="tolerance"):
            MatchFilter(reference_color=WHITE, color_tolerance=-0.1)

    def test_time_bounds_ordered(self):
        with pytest.raises(ValueError, match="after end"):
            MatchFilter(
                start=datetime(2026, 3, 2, tzinfo=timezone.utc),
                end=datetime(2026, 3, 1, tzinfo=timezone.utc),
            )

    def test_naive_bounds_become_utc(self):
        f = MatchFilter(start=datetime(2026, 3, 1))
        assert f.start.tzinfo is timezone.utc


class TestMatchStatistics:

    def test_defaults_are_zero(self):
        stats = MatchStatistics()
        assert stats.count == 0
        assert stats.mean_accuracy == 0.0

    def test_tier_count(self):
        stats = MatchStatistics(count=3, mean_accuracy=0.8, good=2, poor=1)
        assert stats.tier_count(QualityTier.GOOD) == 2
        assert stats.tier_count(QualityTier.EXCELLENT) == 0

    def test_to_dict(self):
        d = MatchStatistics(count=1, mean_accuracy=1.0, excellent=1).to_dict()
        assert d["tiers"] == {"Excellent": 1, "Good": 0, "Fair": 0, "Poor": 0}

    def test_to_dict_best_and_worst(self):
        best = ColorMatchData(WHITE, WHITE, 1.0, notes="best")
        worst = ColorMatchData(WHITE, BLACK, 0.0, notes="worst")
        d = MatchStatistics(count=2, mean_accuracy=0.5, excellent=1, poor=1,
                            sessions=2, best=best, worst=worst).to_dict()
        assert d["sessions"] == 2
        assert d["best"]["notes"] == "best"
        assert d["worst"]["match_accuracy"] == 0.0

    def test_to_dict_empty(self):
        d = MatchStatistics().to_dict()
        assert d["best"] is None
        assert d["worst"] is None
