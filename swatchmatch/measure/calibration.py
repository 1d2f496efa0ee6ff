# Copyright (c) 2026 Swatchmatch
# SPDX-License-Identifier: MIT

"""
Swatch-based color calibration.

The user points the camera at physical swatches of known color. Each
(known, captured) pair contributes to a per-channel bias estimate:

    Δ = mean(known[i] - captured[i])

and the correction is the diagonal transform diag(1 + Δr, 1 + Δg, 1 + Δb).
This is a single-pass bias corrector, not a least-squares fit; it cannot
undo cross-channel contamination.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional, Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray

from swatchmatch.errors import ArityMismatch, EmptyInput, SwatchMatchError
from swatchmatch.measure.colorspace import clamp01
from swatchmatch.schema import CalibrationData, Color

logger = logging.getLogger(__name__)

# Pause the capturing side should leave between swatches, in seconds.
# Consecutive captures without it pick up correlated motion blur.
DEFAULT_SETTLE_DELAY = 0.1


def calibrate(
    known_colors: Sequence[Color],
    captured_colors: Sequence[Color],
    *,
    timestamp: Optional[datetime] = None,
) -> CalibrationData:
    """
    Derive a correction transform from swatch pairs.

    Args:
        known_colors: Reference colors of the physical swatches
        captured_colors: Colors the camera reported for the same swatches,
            in the same order
        timestamp: Calibration time (default: now, UTC)

    Returns:
        CalibrationData with is_calibrated=True

    Raises:
        EmptyInput: If either sequence is empty
        ArityMismatch: If the sequences differ in length
    """
    known = list(known_colors)
    captured = list(captured_colors)

    if not known or not captured:
        raise EmptyInput(
            f"Calibration needs at least one swatch pair, got "
            f"{len(known)} known and {len(captured)} captured"
        )
    if len(known) != len(captured):
        raise ArityMismatch(len(known), len(captured))

    known_rgb = np.array([c.rgb for c in known], dtype=np.float64)
    captured_rgb = np.array([c.rgb for c in captured], dtype=np.float64)
    bias = np.mean(known_rgb - captured_rgb, axis=0)

    matrix = np.identity(4, dtype=np.float64)
    for channel in range(3):
        matrix[channel, channel] = 1.0 + bias[channel]

    logger.info(
        "Calibrated from %d swatches: bias (%.4f, %.4f, %.4f)",
        len(known), bias[0], bias[1], bias[2],
    )

    return CalibrationData(
        matrix=tuple(tuple(row) for row in matrix.tolist()),
        is_calibrated=True,
        timestamp=timestamp or datetime.now(timezone.utc),
    )


def transform_rgb(
    rgb: ArrayLike,
    calibration: CalibrationData,
) -> NDArray[np.float64]:
    """
    Apply a calibration transform to an RGB triplet.

    The transform multiplies the homogeneous vector (r, g, b, 1); the
    result is clamped to [0, 1].
    """
    vector = np.append(np.asarray(rgb, dtype=np.float64), 1.0)
    return clamp01((calibration.as_array() @ vector)[:3])


def apply_calibration(color: Color, calibration: CalibrationData) -> Color:
    """Apply a calibration transform to a color. Alpha passes through."""
    return Color.from_array(transform_rgb(color.to_array(), calibration), a=color.a)


class CalibrationSession:
    """
    Collects captures for a set of known swatches, one at a time.

    The session never waits itself. ``settle_delay`` is the pause the
    driving code should leave between consecutive captures.

    Example:
        >>> session = CalibrationSession([Color(1, 0, 0), Color(0, 0, 1)])
        >>> while not session.complete:
        ...     target = session.target  # prompt the user for this swatch
        ...     session.record_capture(capture_somehow())
        >>> calibration = session.finish()
    """

    def __init__(
        self,
        known_colors: Sequence[Color],
        settle_delay: float = DEFAULT_SETTLE_DELAY,
    ) -> None:
        self.known_colors: tuple[Color, ...] = tuple(known_colors)
        if not self.known_colors:
            raise EmptyInput("Calibration session needs at least one known swatch")
        if settle_delay < 0:
            raise ValueError(f"Settle delay must be >= 0, got {settle_delay}")
        self.settle_delay = settle_delay
        self._captured: list[Color] = []
        self._aborted = False

    @property
    def captured_colors(self) -> tuple[Color, ...]:
        return tuple(self._captured)

    @property
    def next_index(self) -> Optional[int]:
        """Index of the swatch to capture next, or None when complete."""
        if self.complete:
            return None
        return len(self._captured)

    @property
    def target(self) -> Optional[Color]:
        """Known color of the swatch to capture next."""
        index = self.next_index
        return None if index is None else self.known_colors[index]

    @property
    def complete(self) -> bool:
        return len(self._captured) == len(self.known_colors)

    @property
    def aborted(self) -> bool:
        return self._aborted

    def record_capture(self, color: Color) -> None:
        """Record the captured color for the current target swatch."""
        if self._aborted:
            raise SwatchMatchError("Calibration session was aborted")
        if self.complete:
            raise SwatchMatchError(
                f"All {len(self.known_colors)} swatches are already captured"
            )
        self._captured.append(color)
        logger.debug(
            "Swatch %d/%d captured: %s",
            len(self._captured), len(self.known_colors), color.hex,
        )

    def abort(self) -> None:
        """Discard all captures; the session can no longer finish."""
        self._captured.clear()
        self._aborted = True
        logger.info("Calibration session aborted")

    def finish(self) -> CalibrationData:
        """
        Compute the calibration from the recorded captures.

        Raises:
            SwatchMatchError: If the session was aborted
            EmptyInput: If no swatch has been captured yet
            ArityMismatch: If some, but not all, swatches have been captured
        """
        if self._aborted:
            raise SwatchMatchError("Calibration session was aborted")
        return calibrate(self.known_colors, self._captured)
