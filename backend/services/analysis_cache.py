"""
Result cache for analyses, keyed by a fingerprint of the effective
selections.

The cache is bounded: when it is full, the entry inserted first is evicted.
Entries are private deep copies and every hit returns a fresh copy, so a
caller mutating the lists inside its result never changes later hits.
It is not thread-safe on its own; the orchestrator serializes access with
its lock.
"""

import hashlib
import json
import logging
from collections import OrderedDict
from typing import Any, Dict, Optional

from domain.models import Analysis, WorkoutSelections

logger = logging.getLogger(__name__)

CACHE_MAX_SIZE = 1000


def _canonical(value: Any) -> Any:
    """Recursively drop None values and sort lists so order does not matter."""
    if isinstance(value, dict):
        return {k: _canonical(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple, set)):
        items = [_canonical(v) for v in value]
        return sorted(items, key=lambda v: json.dumps(v, sort_keys=True, default=str))
    return value


class AnalysisCache:
    """
    Capacity-bounded cache of Analysis objects.

    Args:
        max_size: Maximum number of cached analyses (default: 1000)
    """

    def __init__(self, max_size: int = CACHE_MAX_SIZE):
        self._entries: "OrderedDict[str, Analysis]" = OrderedDict()
        self._max_size = max_size
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    @staticmethod
    def fingerprint(selections: WorkoutSelections) -> str:
        """
        Deterministic, order-independent key for a selection set.

        Slot order, list order and unset slots do not change the key.
        """
        data = _canonical(selections.model_dump(mode="json", by_alias=False))
        payload = json.dumps(data, sort_keys=True, separators=(",", ":"), default=str)
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()

    def get(self, fingerprint: str) -> Optional[Analysis]:
        analysis = self._entries.get(fingerprint)
        if analysis is None:
            self.misses += 1
            return None
        self.hits += 1
        logger.debug(f"Cache hit for {fingerprint[:12]}")
        return analysis.model_copy(deep=True)

    def set(self, fingerprint: str, analysis: Analysis) -> None:
        """Store an analysis, evicting the oldest entries when full."""
        analysis = analysis.model_copy(deep=True)
        if fingerprint in self._entries:
            # One entry per fingerprint; replacing keeps insertion position
            self._entries[fingerprint] = analysis
            return
        while len(self._entries) >= self._max_size:
            evicted, _ = self._entries.popitem(last=False)
            self.evictions += 1
            logger.debug(f"Evicted cached analysis {evicted[:12]}")
        self._entries[fingerprint] = analysis

    def clear(self) -> None:
        """Drop every entry. Hit and miss counters are kept."""
        self._entries.clear()

    def reset_stats(self) -> None:
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def heal(self) -> int:
        """
        Remove entries that are not analyses or were stored under a
        fingerprint other than their own, and trim to capacity.

        Returns:
            Number of entries removed.
        """
        broken = [
            key for key, value in self._entries.items()
            if not isinstance(value, Analysis) or (value.fingerprint and value.fingerprint != key)
        ]
        for key in broken:
            del self._entries[key]
        removed = len(broken)
        while len(self._entries) > self._max_size:
            self._entries.popitem(last=False)
            removed += 1
        if removed:
            logger.info(f"Cache self-heal removed {removed} entries")
        return removed

    def __contains__(self, fingerprint: str) -> bool:
        return fingerprint in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def size(self) -> int:
        return len(self._entries)

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def hit_rate(self) -> float:
        lookups = self.hits + self.misses
        return self.hits / lookups if lookups else 0.0

    def estimated_bytes(self) -> int:
        """Rough memory use of the cached analyses, by JSON size."""
        return sum(len(a.model_dump_json()) for a in self._entries.values() if isinstance(a, Analysis))

    def get_stats(self) -> Dict[str, Any]:
        """
        Get cache statistics for monitoring.

        Returns:
            Dictionary with cache stats
        """
        return {
            "size": len(self._entries),
            "max_size": self._max_size,
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "hit_rate": round(self.hit_rate, 4),
        }
