# Copyright (c) 2026 Swatchmatch
# SPDX-License-Identifier: MIT

"""
Single entry point wiring the capture pipeline together.

    frame ─► sampler ─► lighting compensation ─► (calibration) ─► engine ─► history

The analyzer owns the mutable session state: the current lighting
estimate, the active calibration and the match history. Everything it
hands out is an immutable value.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional, Sequence

from swatchmatch.config import EngineConfig
from swatchmatch.errors import InvalidCoordinate
from swatchmatch.measure.calibration import calibrate
from swatchmatch.measure.frames import PixelBuffer, as_pixel_array, is_empty
from swatchmatch.measure.lighting import LightingMonitor, compensate
from swatchmatch.measure.matching import ColorMatchEngine, score_colors
from swatchmatch.measure.sampler import pick_color, sample_window
from swatchmatch.runtime.history import MatchHistoryStore
from swatchmatch.schema import (
    WHITE,
    CalibrationData,
    Color,
    ColorMatchData,
    ColorMatchResult,
    MatchFilter,
    MatchStatistics,
)

logger = logging.getLogger(__name__)


class ColorAnalyzer:
    """
    Capture, compare and record paint colors for one work session.

    Example:
        >>> analyzer = ColorAnalyzer()
        >>> reference = analyzer.pick_reference(image, 640, 480, 0.5, 0.5)
        >>> paint = analyzer.capture_paint(frame, 1280, 720, 640, 360)
        >>> result = analyzer.compare(reference, paint)
        >>> result.quality_label
        'Good'
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        *,
        session_id: Optional[str] = None,
        store: Optional[MatchHistoryStore] = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.session_id = session_id or str(uuid.uuid4())
        self.monitor = LightingMonitor(self.config.ambient)
        self.engine = ColorMatchEngine.from_config(self.config)
        self.store = store or MatchHistoryStore(self.config.history_capacity)
        self._calibration = CalibrationData.identity()

    @property
    def calibration(self) -> CalibrationData:
        return self._calibration

    # =========================================================================
    # Capture
    # =========================================================================

    def pick_reference(
        self,
        image: Optional[PixelBuffer],
        width: int,
        height: int,
        u: float,
        v: float,
    ) -> Color:
        """Reference color at normalized (u, v) of the reference image."""
        return pick_color(image, width, height, u, v)

    def capture_paint(
        self,
        frame: Optional[PixelBuffer],
        width: int,
        height: int,
        x: float,
        y: float,
    ) -> Color:
        """
        Sample a camera frame and correct the result for lighting.

        The frame also updates the lighting estimate before the color is
        compensated. Degenerate frames or coordinates yield white.
        """
        if is_empty(frame):
            logger.warning("No camera frame to capture from, returning white")
            return WHITE

        try:
            pixels = as_pixel_array(frame, width, height)
            self.monitor.update(pixels)
            raw = sample_window(pixels, x, y, self.config.sampler.radius)
        except InvalidCoordinate as e:
            logger.warning("Capture failed, returning white: %s", e)
            return WHITE

        return compensate(
            raw,
            self.monitor.condition,
            self.monitor.ambient_level,
            self._calibration,
            self.config.compensation,
        )

    # =========================================================================
    # Matching
    # =========================================================================

    def compare(self, reference: Color, candidate: Color) -> ColorMatchResult:
        return self.engine.compare(reference, candidate)

    def save_match(
        self,
        reference: Color,
        captured: Color,
        capture_position: tuple[float, float, float] = (0.0, 0.0, 0.0),
        image_coordinate: tuple[float, float] = (0.0, 0.0),
        notes: str = "",
    ) -> ColorMatchData:
        """
        Commit a match to the history.

        Accuracy is scored with the engine's current matching method and
        the record carries the current lighting snapshot.
        """
        _, accuracy = score_colors(reference, captured, self.engine.method)
        entry = ColorMatchData(
            reference_color=reference,
            captured_color=captured,
            match_accuracy=accuracy,
            capture_position=capture_position,
            image_coordinate=image_coordinate,
            session_id=self.session_id,
            notes=notes,
            lighting=self.monitor.snapshot(),
        )
        self.store.record(entry)
        logger.info(
            "Saved match %s vs %s (accuracy %.3f)",
            reference.hex, captured.hex, accuracy,
        )
        return entry

    def quick_match(
        self,
        image: Optional[PixelBuffer],
        image_width: int,
        image_height: int,
        u: float,
        v: float,
        frame: Optional[PixelBuffer],
        frame_width: int,
        frame_height: int,
        x: float,
        y: float,
        capture_position: tuple[float, float, float] = (0.0, 0.0, 0.0),
    ) -> ColorMatchResult:
        """Pick, capture, compare and record in one step."""
        reference = self.pick_reference(image, image_width, image_height, u, v)
        paint = self.capture_paint(frame, frame_width, frame_height, x, y)
        result = self.compare(reference, paint)
        self.save_match(
            reference,
            paint,
            capture_position=capture_position,
            image_coordinate=(u, v),
            notes=f"Quick match - Quality: {result.quality_label}",
        )
        return result

    # =========================================================================
    # Calibration
    # =========================================================================

    def calibrate(
        self,
        known_colors: Sequence[Color],
        captured_colors: Sequence[Color],
    ) -> CalibrationData:
        """
        Replace the active calibration with one fitted to swatch pairs.

        On error the previous calibration stays active.

        Raises:
            EmptyInput: If either sequence is empty
            ArityMismatch: If the sequences differ in length
        """
        self._calibration = calibrate(known_colors, captured_colors)
        return self._calibration

    def reset_calibration(self) -> None:
        self._calibration = CalibrationData.identity()
        logger.info("Calibration reset to identity")

    # =========================================================================
    # History
    # =========================================================================

    def history(self) -> list[ColorMatchData]:
        return self.store.history()

    def session_history(self) -> list[ColorMatchData]:
        """Stored matches committed under this analyzer's session id."""
        return self.store.filtered(MatchFilter(session_id=self.session_id))

    def statistics(self) -> MatchStatistics:
        return self.store.statistics(self.engine.thresholds)

    def clear(self) -> None:
        self.store.clear()
