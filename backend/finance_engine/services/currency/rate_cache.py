# backend/finance_engine/services/currency/rate_cache.py
"""
Process-wide exchange rate cache.

The cache is the only shared mutable state in the engine. It is keyed by
(from_currency, to_currency) and holds the last rate fetched for each pair
together with when it was stored.

Freshness:
    An entry is fresh for `ttl_seconds` after it was stored. Fresh entries are
    served with `get`; `get_stale` returns an entry regardless of age and is
    what ExchangeRateService falls back to when the provider fails.

Concurrency:
    One lock guards both the entries map and the in-flight map. Fetches run
    outside the lock. Concurrent misses on the same key share a single
    concurrent.futures.Future, so the provider is called at most once per key
    at a time. Callers for other keys never wait on it.

    When a stale entry exists and a refresh is already in flight, followers
    get the stale entry immediately instead of waiting.
"""

import logging
import threading
import time
from concurrent.futures import Future
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum
from typing import Callable, Protocol

logger = logging.getLogger(__name__)

RateKey = tuple[str, str]


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass(frozen=True)
class CachedRate:
    """
    A cached rate.

    Attributes:
        rate: 1 from_currency = rate to_currency
        timestamp: When the provider observed the rate
        source: Label of the provider that produced it ("api", "static")
    """

    rate: Decimal
    timestamp: datetime
    source: str


class LookupStatus(str, Enum):
    """How get_or_fetch satisfied a lookup."""
    HIT = "hit"            # fresh entry already cached
    FETCHED = "fetched"    # this caller ran the fetch
    JOINED = "joined"      # waited on another caller's fetch
    STALE = "stale"        # stale entry served while a refresh is in flight


@dataclass(frozen=True)
class CacheLookup:
    entry: CachedRate
    status: LookupStatus


@dataclass(frozen=True)
class CacheStatus:
    """
    Snapshot of cache state for the cache-status endpoint.

    Attributes:
        last_updated: Wall-clock time of the most recent put (None if empty)
        next_update: When that entry stops being fresh
        cached_pairs: Number of cached pairs
    """

    last_updated: datetime | None
    next_update: datetime | None
    cached_pairs: int


@dataclass
class _Entry:
    value: CachedRate
    stored_at: float
    stored_wall: datetime


# =============================================================================
# PROTOCOL
# =============================================================================

class RateCache(Protocol):
    """Interface ExchangeRateService needs from a cache."""

    def get(self, key: RateKey) -> CachedRate | None:
        ...

    def get_stale(self, key: RateKey) -> CachedRate | None:
        ...

    def put(self, key: RateKey, value: CachedRate) -> None:
        ...

    def get_or_fetch(self, key: RateKey, fetch: Callable[[], CachedRate]) -> CacheLookup:
        ...

    def clear(self) -> None:
        ...

    def keys(self) -> list[RateKey]:
        ...

    def status(self) -> CacheStatus:
        ...


# =============================================================================
# IN-MEMORY IMPLEMENTATION
# =============================================================================

class InMemoryRateCache:
    """
    Thread-safe TTL cache with per-key fetch coalescing.

    Args:
        ttl_seconds: Freshness window
        clock: Monotonic clock used for TTL checks (injectable for tests)
        wall_clock: Wall clock used for reported timestamps

    Example:
        cache = InMemoryRateCache(ttl_seconds=900)
        lookup = cache.get_or_fetch(("EUR", "USD"), fetch_eur_usd)
        print(lookup.entry.rate, lookup.status)
    """

    def __init__(
            self,
            ttl_seconds: float = 900,
            clock: Callable[[], float] = time.monotonic,
            wall_clock: Callable[[], datetime] | None = None,
    ) -> None:
        if ttl_seconds < 0:
            raise ValueError(f"ttl_seconds must be >= 0, got {ttl_seconds}")
        self._ttl = ttl_seconds
        self._clock = clock
        self._wall_clock = wall_clock or (lambda: datetime.now(timezone.utc))
        self._entries: dict[RateKey, _Entry] = {}
        self._in_flight: dict[RateKey, Future] = {}
        self._lock = threading.Lock()

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def _is_fresh(self, entry: _Entry) -> bool:
        return self._clock() - entry.stored_at < self._ttl

    # =========================================================================
    # BASIC OPERATIONS
    # =========================================================================

    def get(self, key: RateKey) -> CachedRate | None:
        """Fresh entry for key, or None."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and self._is_fresh(entry):
                return entry.value
            return None

    def get_stale(self, key: RateKey) -> CachedRate | None:
        """Entry for key regardless of age, or None."""
        with self._lock:
            entry = self._entries.get(key)
            return entry.value if entry is not None else None

    def put(self, key: RateKey, value: CachedRate) -> None:
        with self._lock:
            self._store(key, value)

    def _store(self, key: RateKey, value: CachedRate) -> None:
        # Caller holds the lock
        self._entries[key] = _Entry(
            value=value,
            stored_at=self._clock(),
            stored_wall=self._wall_clock(),
        )

    def clear(self) -> None:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.info(f"Rate cache cleared ({count} entries)")

    def keys(self) -> list[RateKey]:
        with self._lock:
            return sorted(self._entries)

    def status(self) -> CacheStatus:
        with self._lock:
            if not self._entries:
                return CacheStatus(last_updated=None, next_update=None, cached_pairs=0)
            last = max(e.stored_wall for e in self._entries.values())
            return CacheStatus(
                last_updated=last,
                next_update=last + timedelta(seconds=self._ttl),
                cached_pairs=len(self._entries),
            )

    # =========================================================================
    # COALESCED FETCH
    # =========================================================================

    def get_or_fetch(self, key: RateKey, fetch: Callable[[], CachedRate]) -> CacheLookup:
        """
        Return a fresh entry, fetching it at most once across threads.

        Exactly one caller (the leader) runs `fetch` for a missing key. Other
        callers for that key either receive the stale entry (if one exists)
        or wait for the leader's result. A fetch failure is re-raised to the
        leader and every waiting follower; nothing is cached.

        Raises:
            Whatever `fetch` raises
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and self._is_fresh(entry):
                return CacheLookup(entry.value, LookupStatus.HIT)

            future = self._in_flight.get(key)
            if future is not None:
                if entry is not None:
                    return CacheLookup(entry.value, LookupStatus.STALE)
                leader = False
            else:
                future = Future()
                self._in_flight[key] = future
                leader = True

        if not leader:
            logger.debug(f"Joining in-flight fetch for {key[0]}/{key[1]}")
            return CacheLookup(future.result(), LookupStatus.JOINED)

        try:
            value = fetch()
        except BaseException as e:
            with self._lock:
                self._in_flight.pop(key, None)
            future.set_exception(e)
            raise

        with self._lock:
            self._store(key, value)
            self._in_flight.pop(key, None)
        future.set_result(value)
        return CacheLookup(value, LookupStatus.FETCHED)
