# Copyright (c) 2026 Swatchmatch
# SPDX-License-Identifier: MIT

"""
Session runtime for Swatchmatch.

Owns the mutable pieces of a work session (match history, active
calibration, lighting estimate) and renders results for display.
"""

from swatchmatch.runtime.analyzer import ColorAnalyzer
from swatchmatch.runtime.display import (
    DisplayFormat,
    format_result,
    format_statistics,
)
from swatchmatch.runtime.history import MatchHistoryStore

__all__ = [
    "ColorAnalyzer",
    "MatchHistoryStore",
    "format_result",
    "format_statistics",
    "DisplayFormat",
]
