# Copyright (c) 2026 Swatchmatch
# SPDX-License-Identifier: MIT

"""
Error taxonomy.

Only calibration input errors reach the caller. Sampling faults are
recovered to a neutral color inside the sampler, and a poor match is a
result, not an error.
"""

from __future__ import annotations


class SwatchMatchError(Exception):
    """Base class for all errors raised by swatchmatch."""


class ArityMismatch(SwatchMatchError, ValueError):
    """Known and captured swatch sequences differ in length."""

    def __init__(self, known: int, captured: int) -> None:
        super().__init__(
            f"Known and captured colors must have the same length, "
            f"got {known} known and {captured} captured"
        )
        self.known = known
        self.captured = captured


class EmptyInput(SwatchMatchError, ValueError):
    """Calibration was requested with no swatches."""


class InvalidCoordinate(SwatchMatchError, ValueError):
    """A sample point cannot be resolved against the pixel buffer."""
