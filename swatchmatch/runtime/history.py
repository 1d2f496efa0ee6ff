# Copyright (c) 2026 Swatchmatch
# SPDX-License-Identifier: MIT

"""
Bounded, ordered match history.

Entries are kept oldest first. Recording past capacity evicts the oldest
entries, so the store always holds the most recent ``capacity`` matches.
"""

from __future__ import annotations

import json
import logging
import threading
from collections import deque
from typing import Iterable, Optional

from swatchmatch.config import QualityThresholds
from swatchmatch.measure.colorspace import rgb_distance
from swatchmatch.schema import ColorMatchData, MatchFilter, MatchStatistics, QualityTier

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 100

# Imported entries closer than this (RGB distance) to an existing entry
# with the same timestamp are treated as duplicates
DUPLICATE_TOLERANCE = 0.01


def _is_duplicate(a: ColorMatchData, b: ColorMatchData) -> bool:
    if a.timestamp != b.timestamp:
        return False
    distance = rgb_distance(a.reference_color.to_array(), b.reference_color.to_array())
    return distance < DUPLICATE_TOLERANCE


class MatchHistoryStore:
    """
    FIFO store of committed matches.

    Recording and clearing are serialized with a lock so a capture thread
    and a UI thread can share one store.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"History capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._entries: deque[ColorMatchData] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def record(self, entry: ColorMatchData) -> None:
        """Append a match, evicting the oldest entry beyond capacity."""
        with self._lock:
            full = len(self._entries) == self.capacity
            self._entries.append(entry)
        if full:
            logger.debug("History full, evicted oldest entry")

    def history(self) -> list[ColorMatchData]:
        """Snapshot of the stored matches, oldest first."""
        with self._lock:
            return list(self._entries)

    def filtered(self, match_filter: MatchFilter) -> list[ColorMatchData]:
        """Stored matches satisfying ``match_filter``, oldest first."""
        return [e for e in self.history() if match_filter.matches(e)]

    def sessions(self) -> list[str]:
        """Distinct non-empty session identifiers, in order of first appearance."""
        seen: dict[str, None] = {}
        for entry in self.history():
            if entry.session_id:
                seen.setdefault(entry.session_id, None)
        return list(seen)

    def clear(self) -> None:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.info("Cleared %d history entries", count)

    def statistics(
        self,
        thresholds: Optional[QualityThresholds] = None,
    ) -> MatchStatistics:
        """
        Aggregate the stored matches.

        Tiers are derived from each entry's stored accuracy under
        ``thresholds`` (defaults if None). Best and worst are the highest
        and lowest accuracy entries; on ties the oldest one is reported.
        An empty store yields all zeros.
        """
        entries = self.history()
        if not entries:
            return MatchStatistics()

        thresholds = thresholds or QualityThresholds()
        counts = {tier: 0 for tier in QualityTier}
        for entry in entries:
            counts[thresholds.classify(entry.match_accuracy)] += 1

        return MatchStatistics(
            count=len(entries),
            mean_accuracy=sum(e.match_accuracy for e in entries) / len(entries),
            excellent=counts[QualityTier.EXCELLENT],
            good=counts[QualityTier.GOOD],
            fair=counts[QualityTier.FAIR],
            poor=counts[QualityTier.POOR],
            sessions=len(self.sessions()),
            best=max(entries, key=lambda e: e.match_accuracy),
            worst=min(entries, key=lambda e: e.match_accuracy),
        )

    def import_entries(
        self,
        entries: Iterable[ColorMatchData],
        *,
        merge: bool = True,
    ) -> int:
        """
        Bulk-load matches from another history.

        With ``merge`` the imported entries join the stored ones, otherwise
        they replace them. Entries with the same timestamp and a reference
        color within ``DUPLICATE_TOLERANCE`` of one already present are
        skipped. The result is ordered by timestamp and trimmed to the
        ``capacity`` most recent matches.

        Returns:
            Number of entries added
        """
        with self._lock:
            combined = list(self._entries) if merge else []
            added = 0
            for entry in entries:
                if any(_is_duplicate(entry, kept) for kept in combined):
                    continue
                combined.append(entry)
                added += 1
            combined.sort(key=lambda e: e.timestamp)
            self._entries = deque(combined, maxlen=self.capacity)
            kept = len(self._entries)

        logger.info("Imported %d matches (%s), %d stored",
                    added, "merged" if merge else "replaced", kept)
        return added

    def import_json(self, json_str: str, *, merge: bool = True) -> int:
        """Bulk-load the entries of a ``to_json`` export; see ``import_entries``."""
        data = json.loads(json_str)
        return self.import_entries(
            (ColorMatchData.from_dict(e) for e in data.get("entries", ())),
            merge=merge,
        )

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {
            "capacity": self.capacity,
            "entries": [e.to_dict() for e in self.history()],
        }

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: dict) -> MatchHistoryStore:
        """
        Rebuild a store from a dictionary.

        Entries beyond capacity are evicted oldest first, as if they had
        been recorded in order.
        """
        store = cls(capacity=data.get("capacity", DEFAULT_CAPACITY))
        for entry in data.get("entries", ()):
            store.record(ColorMatchData.from_dict(entry))
        return store

    @classmethod
    def from_json(cls, json_str: str) -> MatchHistoryStore:
        return cls.from_dict(json.loads(json_str))
