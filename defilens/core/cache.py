"""
Result Cache - TTL-keyed store of rendered query results.

There is no background eviction: a stale entry stays in memory until the same
key is computed again.
"""

import json
import time
from typing import Callable, Dict, Optional

from .models import CacheEntry, QueryKind, QueryOptions, QueryResult


DEFAULT_TTL_MS = 300000


def make_key(pool_address: str, feed_key: str, query_kind: QueryKind, options: QueryOptions) -> str:
    """
    Build the cache key for a query.

    Args:
        pool_address: Pool address queried
        feed_key: Logical price feed key (e.g. 'aptUsd')
        query_kind: Liquidity or APR query
        options: Optional sections requested

    Returns:
        Deterministic key string
    """
    option_part = json.dumps(
        {
            "includeAI": options.include_ai,
            "includePrediction": options.include_prediction,
            "includeRisk": options.include_risk,
        },
        sort_keys=True,
        separators=(",", ":"),
    )
    return f"{pool_address}-{feed_key}-{QueryKind(query_kind).value}-{option_part}"


class ResultCache:
    """
    In-memory map of key -> CacheEntry with a fixed TTL.

    Args:
        ttl_ms: Time-to-live in milliseconds, fixed for the cache lifetime
        clock: Returns the current time in seconds (monotonic by default)
    """

    def __init__(self, ttl_ms: int = DEFAULT_TTL_MS, clock: Callable[[], float] = time.monotonic):
        if ttl_ms <= 0:
            raise ValueError(f"Cache TTL must be positive, got {ttl_ms}")
        self._ttl_ms = int(ttl_ms)
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    @property
    def ttl_ms(self) -> int:
        return self._ttl_ms

    def get(self, key: str) -> Optional[CacheEntry]:
        return self._entries.get(key)

    def put(self, key: str, payload: QueryResult) -> CacheEntry:
        entry = CacheEntry(key=key, payload=payload, computed_at=self._clock())
        self._entries[key] = entry
        return entry

    def is_valid(self, key: str) -> bool:
        """True if an entry exists and is younger than the TTL."""
        entry = self._entries.get(key)
        if entry is None:
            return False
        age_ms = (self._clock() - entry.computed_at) * 1000
        return age_ms < self._ttl_ms

    def __len__(self) -> int:
        return len(self._entries)
