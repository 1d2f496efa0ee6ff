# Copyright (c) 2026 Swatchmatch
# SPDX-License-Identifier: MIT

"""
Text rendering of match results and history statistics.

NATURAL output is Markdown for an on-screen panel; JSON output is the
record's ``to_dict`` form.
"""

from __future__ import annotations

import json
from enum import Enum

from swatchmatch.schema import Color, ColorMatchResult, MatchStatistics, QualityTier


class DisplayFormat(Enum):
    """Output format for display rendering."""

    NATURAL = "natural"
    JSON = "json"


def format_result(
    result: ColorMatchResult,
    *,
    format: DisplayFormat = DisplayFormat.NATURAL,
    preamble: bool = True,
) -> str:
    """Render a comparison for display.

    Args:
        result: The comparison to render.
        format: NATURAL (Markdown) or JSON.
        preamble: Include the heading line (NATURAL only).

    Example (NATURAL)::

        ## Color Match

        **Reference:** #FF0000 (R=1.000, G=0.000, B=0.000)
        **Paint:** #E61A1A (R=0.900, G=0.100, B=0.100)
        **Quality:** Good (90.0%)
        **Difference:** 17.32 (rgb)
        **RGB difference:** R=0.100, G=0.100, B=0.100
        **HSV difference:** H=0.000, S=0.111, V=0.100

        **Suggestions:**
        - Increase color saturation
    """
    if format == DisplayFormat.JSON:
        return result.to_json()

    lines: list[str] = []
    if preamble:
        lines.extend(["## Color Match", ""])

    dr, dg, db = result.rgb_difference
    dh, ds, dv = result.hsv_difference
    lines.append(f"**Reference:** {_describe_color(result.reference)}")
    lines.append(f"**Paint:** {_describe_color(result.candidate)}")
    lines.append(
        f"**Quality:** {result.quality_label} ({result.match_quality * 100:.1f}%)"
    )
    lines.append(
        f"**Difference:** {result.difference_score:.2f} ({result.method.value})"
    )
    lines.append(f"**RGB difference:** R={dr:.3f}, G={dg:.3f}, B={db:.3f}")
    lines.append(f"**HSV difference:** H={dh:.3f}, S={ds:.3f}, V={dv:.3f}")

    if result.suggestions:
        lines.append("")
        lines.append("**Suggestions:**")
        for suggestion in result.suggestions:
            lines.append(f"- {suggestion}")

    return "\n".join(lines)


def format_statistics(
    stats: MatchStatistics,
    *,
    format: DisplayFormat = DisplayFormat.NATURAL,
) -> str:
    """Render history statistics for display."""
    if format == DisplayFormat.JSON:
        return json.dumps(stats.to_dict(), indent=2)

    if stats.count == 0:
        return "No matches recorded yet."

    tiers = ", ".join(
        f"{tier.value} {stats.tier_count(tier)}" for tier in QualityTier
    )
    return "\n".join([
        f"**Matches:** {stats.count}",
        f"**Mean accuracy:** {stats.mean_accuracy * 100:.1f}%",
        f"**Tiers:** {tiers}",
    ])


def _describe_color(color: Color) -> str:
    return f"{color.hex} (R={color.r:.3f}, G={color.g:.3f}, B={color.b:.3f})"
