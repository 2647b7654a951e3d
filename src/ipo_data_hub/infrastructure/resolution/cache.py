"""
Time-bounded in-memory cache of resolved company identifiers.

One ResolutionCache is owned per registrar that needs name resolution. Both
positive (code found) and negative (``None``) outcomes are cached so that a
name missing from a listing is not re-scraped on every request.
"""

import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from ipo_data_hub.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TTL_SECONDS = 24 * 60 * 60
DEFAULT_MAX_ENTRIES = 1000


@dataclass(frozen=True)
class CacheEntry:
    key: str
    value: Optional[str]
    resolved_at: float


class ResolutionCache:
    """
    Dict-backed cache with lazy TTL expiry and oldest-first capacity eviction.

    Not thread-safe; concurrent misses for the same key may both resolve,
    which is harmless because resolution is idempotent.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.time,
    ):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def _is_expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.resolved_at >= self.ttl_seconds

    def get(self, key: str) -> Optional[CacheEntry]:
        """Return the live entry for ``key``; an expired entry is dropped."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._is_expired(entry, self._clock()):
            del self._entries[key]
            return None
        return entry

    def put(self, key: str, value: Optional[str]) -> CacheEntry:
        """Store a positive or negative result, then sweep and enforce capacity."""
        # Re-inserting moves the key to the end so ties keep insertion order
        self._entries.pop(key, None)
        entry = CacheEntry(key=key, value=value, resolved_at=self._clock())
        self._entries[key] = entry
        self.evict_expired()
        self.evict_over_capacity()
        return entry

    def evict_expired(self) -> int:
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if self._is_expired(entry, now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def evict_over_capacity(self) -> int:
        overflow = len(self._entries) - self.max_entries
        if overflow <= 0:
            return 0
        # sorted() is stable, so equal timestamps stay in insertion order
        oldest = sorted(self._entries.values(), key=lambda entry: entry.resolved_at)[:overflow]
        for entry in oldest:
            del self._entries[entry.key]
        logger.debug("resolution_cache.evicted", count=overflow, max_entries=self.max_entries)
        return overflow

    def clear(self) -> None:
        self._entries.clear()

    def entries(self) -> List[CacheEntry]:
        return list(self._entries.values())

    def stats(self) -> Dict[str, object]:
        now = self._clock()
        return {
            "size": len(self._entries),
            "entries": [
                {
                    "ipo_name": entry.key,
                    "company_id": entry.value,
                    "age_seconds": now - entry.resolved_at,
                }
                for entry in self._entries.values()
            ],
        }
