# Copyright (c) 2026 Swatchmatch
# SPDX-License-Identifier: MIT

"""Tests for the ColorAnalyzer session facade."""

import numpy as np
import pytest

from swatchmatch import ColorAnalyzer
from swatchmatch.config import CompensationConfig, EngineConfig
from swatchmatch.errors import ArityMismatch, EmptyInput
from swatchmatch.schema import WHITE, Color, LightingCondition, MatchingMethod, QualityTier

# Mid-gray surround keeps the lighting estimate at Mixed with ambient 0.5,
# where compensation leaves colors unchanged.
_NEUTRAL = 0.5


def _frame(paint_rgb, height=40, width=40):
    """Mid-gray frame with a paint patch at the center."""
    frame = np.full((height, width, 3), _NEUTRAL, dtype=np.float64)
    cy, cx = height // 2, width // 2
    frame[cy - 3:cy + 4, cx - 3:cx + 4] = paint_rgb
    return frame


def _image(rgb, height=10, width=10):
    return np.full((height, width, 3), rgb, dtype=np.float64)


class TestCapture:

    def test_pick_reference(self):
        analyzer = ColorAnalyzer()
        image = _image((0.2, 0.4, 0.6))
        assert analyzer.pick_reference(image, 10, 10, 0.5, 0.5).rgb == pytest.approx((0.2, 0.4, 0.6))

    def test_capture_neutral_lighting(self):
        analyzer = ColorAnalyzer()
        frame = np.full((40, 40, 3), _NEUTRAL)
        color = analyzer.capture_paint(frame, 40, 40, 20, 20)
        assert color.rgb == pytest.approx((0.5, 0.5, 0.5))
        assert analyzer.monitor.condition == LightingCondition.MIXED

    def test_capture_updates_lighting(self):
        analyzer = ColorAnalyzer()
        bright = np.full((40, 40, 3), 0.9)
        analyzer.capture_paint(bright, 40, 40, 20, 20)
        assert analyzer.monitor.condition == LightingCondition.OUTDOOR
        assert analyzer.monitor.ambient_level == pytest.approx(0.9)

    def test_capture_applies_compensation(self):
        analyzer = ColorAnalyzer()
        bright = np.full((40, 40, 3), 0.9)
        # Outdoor white balance (0.95, 1, 1.05) and exposure lerp(1.2, 0.8, 0.9) = 0.84
        color = analyzer.capture_paint(bright, 40, 40, 20, 20)
        assert color.rgb == pytest.approx((0.9 * 0.95 * 0.84, 0.9 * 0.84, 0.9 * 1.05 * 0.84))

    def test_capture_missing_frame_is_white(self):
        analyzer = ColorAnalyzer()
        assert analyzer.capture_paint(None, 40, 40, 20, 20) == WHITE

    def test_capture_bad_dimensions_is_white(self):
        analyzer = ColorAnalyzer()
        assert analyzer.capture_paint(np.zeros((4, 4, 3)), 5, 5, 2, 2) == WHITE
        assert analyzer.monitor.condition == LightingCondition.INDOOR

    def test_capture_far_outside_frame_uses_edge(self):
        analyzer = ColorAnalyzer()
        frame = np.full((10, 10, 3), _NEUTRAL)
        color = analyzer.capture_paint(frame, 10, 10, 2**70, 5)
        assert color.rgb == pytest.approx((0.5, 0.5, 0.5))

    def test_capture_survives_failing_listener(self):
        analyzer = ColorAnalyzer()

        def broken(condition):
            raise RuntimeError("display detached")

        analyzer.monitor.add_listener(broken)
        color = analyzer.capture_paint(np.full((40, 40, 3), _NEUTRAL), 40, 40, 20, 20)
        assert color.rgb == pytest.approx((0.5, 0.5, 0.5))
        assert analyzer.monitor.condition == LightingCondition.MIXED

    def test_capture_uses_configured_radius(self):
        config = EngineConfig.from_dict({
            "sampler": {"radius": 1},
            "compensation": {"enable_white_balance": False, "enable_exposure": False},
        })
        analyzer = ColorAnalyzer(config)
        frame = np.zeros((9, 9, 3))
        frame[3:6, 3:6] = 0.6
        assert analyzer.capture_paint(frame, 9, 9, 4, 4).rgb == pytest.approx((0.6, 0.6, 0.6))


class TestCalibration:

    def test_starts_uncalibrated(self):
        assert not ColorAnalyzer().calibration.is_calibrated

    def test_calibrate_replaces_transform(self):
        analyzer = ColorAnalyzer()
        cal = analyzer.calibrate([Color(1.0, 0.0, 0.0)], [Color(0.8, 0.0, 0.0)])
        assert analyzer.calibration is cal
        assert cal.diagonal == pytest.approx((1.2, 1.0, 1.0))

    def test_failed_calibration_keeps_previous(self):
        analyzer = ColorAnalyzer()
        cal = analyzer.calibrate([Color(1.0, 0.0, 0.0)], [Color(0.8, 0.0, 0.0)])
        with pytest.raises(ArityMismatch):
            analyzer.calibrate([Color(1.0, 0.0, 0.0), WHITE], [Color(0.8, 0.0, 0.0)])
        with pytest.raises(EmptyInput):
            analyzer.calibrate([], [])
        assert analyzer.calibration is cal

    def test_calibration_feeds_capture(self):
        analyzer = ColorAnalyzer()
        analyzer.calibrate([Color(0.6, 0.6, 0.6)], [Color(0.5, 0.5, 0.5)])
        frame = np.full((40, 40, 3), _NEUTRAL)
        color = analyzer.capture_paint(frame, 40, 40, 20, 20)
        assert color.rgb == pytest.approx((0.55, 0.55, 0.55))

    def test_reset_calibration(self):
        analyzer = ColorAnalyzer()
        analyzer.calibrate([WHITE], [Color(0.9, 0.9, 0.9)])
        analyzer.reset_calibration()
        assert not analyzer.calibration.is_calibrated


class TestMatching:

    def test_compare(self):
        analyzer = ColorAnalyzer()
        result = analyzer.compare(Color(1.0, 0.0, 0.0), Color(1.0, 0.0, 0.0))
        assert result.quality == QualityTier.EXCELLENT

    def test_save_match(self):
        analyzer = ColorAnalyzer(session_id="wall-1")
        entry = analyzer.save_match(
            Color(1.0, 0.0, 0.0),
            Color(0.9, 0.1, 0.1),
            capture_position=(1.0, 2.0, 3.0),
            image_coordinate=(0.25, 0.5),
        )
        assert entry.match_accuracy == pytest.approx(0.9)
        assert entry.session_id == "wall-1"
        assert entry.capture_position == (1.0, 2.0, 3.0)
        assert entry.lighting.environment == LightingCondition.INDOOR
        assert analyzer.history() == [entry]

    def test_save_match_uses_engine_method(self):
        config = EngineConfig(matching_method=MatchingMethod.CIE76)
        analyzer = ColorAnalyzer(config)
        entry = analyzer.save_match(WHITE, Color(0.0, 0.0, 0.0))
        assert entry.match_accuracy == pytest.approx(0.0, abs=1e-3)

    def test_quick_match(self):
        analyzer = ColorAnalyzer()
        image = _image((0.5, 0.5, 0.5))
        frame = np.full((40, 40, 3), _NEUTRAL)

        result = analyzer.quick_match(
            image, 10, 10, 0.3, 0.7,
            frame, 40, 40, 20, 20,
            capture_position=(0.0, 1.0, 0.0),
        )
        assert result.quality == QualityTier.EXCELLENT

        (entry,) = analyzer.history()
        assert entry.notes == "Quick match - Quality: Excellent"
        assert entry.image_coordinate == (0.3, 0.7)
        assert entry.capture_position == (0.0, 1.0, 0.0)
        assert entry.lighting.environment == LightingCondition.MIXED

    def test_quick_match_paint_patch(self):
        config = EngineConfig(
            compensation=CompensationConfig(enable_white_balance=False, enable_exposure=False),
        )
        analyzer = ColorAnalyzer(config)
        image = _image((0.2, 0.6, 0.3))
        frame = _frame((0.2, 0.6, 0.3))
        result = analyzer.quick_match(image, 10, 10, 0.5, 0.5, frame, 40, 40, 20, 20)
        assert result.match_quality == pytest.approx(1.0)

    def test_statistics_and_clear(self):
        analyzer = ColorAnalyzer()
        analyzer.save_match(WHITE, WHITE)
        analyzer.save_match(WHITE, Color(0.0, 0.0, 0.0))
        stats = analyzer.statistics()
        assert stats.count == 2
        assert stats.mean_accuracy == pytest.approx(0.5)
        assert stats.excellent == 1
        assert stats.poor == 1

        analyzer.clear()
        assert analyzer.statistics().count == 0

    def test_history_capacity_from_config(self):
        analyzer = ColorAnalyzer(EngineConfig(history_capacity=2))
        for _ in range(3):
            analyzer.save_match(WHITE, WHITE)
        assert len(analyzer.history()) == 2

    def test_session_history_shares_store(self):
        first = ColorAnalyzer(session_id="wall-1")
        second = ColorAnalyzer(session_id="wall-2", store=first.store)
        first.save_match(WHITE, WHITE)
        second.save_match(WHITE, Color(0.0, 0.0, 0.0))

        assert [e.session_id for e in first.session_history()] == ["wall-1"]
        assert [e.session_id for e in second.session_history()] == ["wall-2"]
        assert first.store.sessions() == ["wall-1", "wall-2"]
        assert first.statistics().worst.session_id == "wall-2"
