# tests/services/currency/test_rate_cache.py
"""
Tests for the in-memory exchange rate cache.

Covers TTL freshness, stale reads, status reporting and fetch coalescing
across threads.
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from finance_engine.services.currency.rate_cache import (
    CachedRate,
    InMemoryRateCache,
    LookupStatus,
)
from finance_engine.services.exceptions import RateProviderError
from tests.conftest import ManualClock

KEY = ("EUR", "USD")
OBSERVED = datetime(2024, 6, 3, 12, 0, tzinfo=timezone.utc)


def cached(rate: str = "1.10") -> CachedRate:
    return CachedRate(rate=Decimal(rate), timestamp=OBSERVED, source="api")


class TestFreshness:
    """Tests for TTL behavior."""

    def test_fresh_within_ttl(self):
        clock = ManualClock()
        cache = InMemoryRateCache(ttl_seconds=900, clock=clock)
        cache.put(KEY, cached())

        clock.advance(899)

        assert cache.get(KEY) == cached()

    def test_expires_at_ttl(self):
        clock = ManualClock()
        cache = InMemoryRateCache(ttl_seconds=900, clock=clock)
        cache.put(KEY, cached())

        clock.advance(900)

        assert cache.get(KEY) is None
        assert cache.get_stale(KEY) == cached()

    def test_missing_key(self):
        cache = InMemoryRateCache()

        assert cache.get(KEY) is None
        assert cache.get_stale(KEY) is None

    def test_rejects_negative_ttl(self):
        with pytest.raises(ValueError):
            InMemoryRateCache(ttl_seconds=-1)


class TestStatus:
    """Tests for cache status and clearing."""

    def test_empty_status(self):
        status = InMemoryRateCache().status()

        assert status.cached_pairs == 0
        assert status.last_updated is None
        assert status.next_update is None

    def test_status_tracks_latest_put(self):
        stored_at = datetime(2024, 6, 3, 12, 0, tzinfo=timezone.utc)
        cache = InMemoryRateCache(ttl_seconds=600, wall_clock=lambda: stored_at)
        cache.put(("EUR", "USD"), cached())
        cache.put(("GBP", "USD"), cached("1.25"))

        status = cache.status()

        assert status.cached_pairs == 2
        assert status.last_updated == stored_at
        assert (status.next_update - status.last_updated).total_seconds() == 600

    def test_clear(self):
        cache = InMemoryRateCache()
        cache.put(KEY, cached())

        cache.clear()

        assert cache.keys() == []
        assert cache.get_stale(KEY) is None


class TestGetOrFetch:
    """Tests for single-threaded get_or_fetch."""

    def test_fetches_on_miss_then_hits(self):
        cache = InMemoryRateCache()
        calls = []

        def fetch():
            calls.append(1)
            return cached()

        first = cache.get_or_fetch(KEY, fetch)
        second = cache.get_or_fetch(KEY, fetch)

        assert first.status == LookupStatus.FETCHED
        assert second.status == LookupStatus.HIT
        assert len(calls) == 1

    def test_refetches_after_expiry(self):
        clock = ManualClock()
        cache = InMemoryRateCache(ttl_seconds=60, clock=clock)
        cache.get_or_fetch(KEY, lambda: cached("1.10"))

        clock.advance(61)
        lookup = cache.get_or_fetch(KEY, lambda: cached("1.12"))

        assert lookup.status == LookupStatus.FETCHED
        assert lookup.entry.rate == Decimal("1.12")

    def test_failure_caches_nothing(self):
        cache = InMemoryRateCache()

        def fail():
            raise RateProviderError("fake", "timeout")

        with pytest.raises(RateProviderError):
            cache.get_or_fetch(KEY, fail)

        assert cache.get_stale(KEY) is None
        assert cache.get_or_fetch(KEY, cached).status == LookupStatus.FETCHED


class TestCoalescing:
    """Tests for concurrent fetches of the same key."""

    def test_concurrent_misses_fetch_once(self):
        cache = InMemoryRateCache()
        release = threading.Event()
        calls = []

        def slow_fetch():
            calls.append(1)
            release.wait(timeout=5)
            return cached()

        with ThreadPoolExecutor(max_workers=8) as pool:
            futures = [pool.submit(cache.get_or_fetch, KEY, slow_fetch) for _ in range(8)]
            # Let every worker reach the cache before the leader finishes
            while len(calls) == 0:
                time.sleep(0.01)
            time.sleep(0.1)
            release.set()
            results = [f.result(timeout=5) for f in futures]

        assert len(calls) == 1
        assert all(r.entry.rate == Decimal("1.10") for r in results)
        statuses = [r.status for r in results]
        assert statuses.count(LookupStatus.FETCHED) == 1

    def test_followers_share_the_failure(self):
        cache = InMemoryRateCache()
        release = threading.Event()
        started = threading.Event()

        def failing_fetch():
            started.set()
            release.wait(timeout=5)
            raise RateProviderError("fake", "down")

        with ThreadPoolExecutor(max_workers=2) as pool:
            leader = pool.submit(cache.get_or_fetch, KEY, failing_fetch)
            started.wait(timeout=5)
            follower = pool.submit(cache.get_or_fetch, KEY, failing_fetch)
            time.sleep(0.1)
            release.set()

            with pytest.raises(RateProviderError):
                leader.result(timeout=5)
            with pytest.raises(RateProviderError):
                follower.result(timeout=5)

    def test_stale_entry_served_during_refresh(self):
        clock = ManualClock()
        cache = InMemoryRateCache(ttl_seconds=60, clock=clock)
        cache.put(KEY, cached("1.10"))
        clock.advance(61)

        release = threading.Event()
        started = threading.Event()

        def slow_refresh():
            started.set()
            release.wait(timeout=5)
            return cached("1.12")

        with ThreadPoolExecutor(max_workers=1) as pool:
            leader = pool.submit(cache.get_or_fetch, KEY, slow_refresh)
            started.wait(timeout=5)

            follower = cache.get_or_fetch(KEY, slow_refresh)

            release.set()
            assert leader.result(timeout=5).entry.rate == Decimal("1.12")

        assert follower.status == LookupStatus.STALE
        assert follower.entry.rate == Decimal("1.10")

    def test_other_keys_do_not_wait(self):
        cache = InMemoryRateCache()
        release = threading.Event()
        started = threading.Event()

        def slow_fetch():
            started.set()
            release.wait(timeout=5)
            return cached()

        with ThreadPoolExecutor(max_workers=1) as pool:
            blocked = pool.submit(cache.get_or_fetch, KEY, slow_fetch)
            started.wait(timeout=5)

            other = cache.get_or_fetch(("GBP", "USD"), lambda: cached("1.25"))

            release.set()
            blocked.result(timeout=5)

        assert other.status == LookupStatus.FETCHED
        assert other.entry.rate == Decimal("1.25")
