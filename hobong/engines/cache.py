# hobong/engines/cache.py
"""
Per-batch memo of computed step figures.

Keyed on ``(employee_id, target_date)``. The cache is an ordinary object
handed to :class:`hobong.engines.service.RankService`; callers decide its
lifetime and clear it whenever the underlying records change.
"""
import datetime as dt
import logging
from typing import Dict, Optional, Tuple

from hobong.result import CalcResult

logger = logging.getLogger(__name__)

CacheKey = Tuple[str, str]


class RankCache:
    def __init__(self):
        self._entries: Dict[CacheKey, CalcResult] = {}
        self.hits = 0
        self.misses = 0

    @staticmethod
    def key(employee_id: str, target: dt.date) -> CacheKey:
        return (str(employee_id), target.isoformat())

    def get(self, employee_id: str, target: dt.date) -> Optional[CalcResult]:
        entry = self._entries.get(self.key(employee_id, target))
        if entry is None:
            self.misses += 1
        else:
            self.hits += 1
        return entry

    def put(self, employee_id: str, target: dt.date, result: CalcResult) -> None:
        # Failures are not memoised; a corrected record must be recomputed
        if result.ok:
            self._entries[self.key(employee_id, target)] = result

    def invalidate(self, employee_id: str) -> int:
        """Drop every entry of one employee; returns how many were dropped."""
        stale = [k for k in self._entries if k[0] == str(employee_id)]
        for k in stale:
            del self._entries[k]
        return len(stale)

    def clear(self) -> None:
        logger.debug(f"Clearing rank cache ({len(self._entries)} entries)")
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: CacheKey) -> bool:
        return key in self._entries


__all__ = ["RankCache"]
