import threading
from datetime import date, datetime, timedelta

import pytest

from punapi.utils.cache_utils import DatasetCache, daily_key, monthly_key
from tests.conftest import FakeClock, make_dataset


@pytest.fixture
def datasets():
    return (make_dataset(date(2024, 3, 15), [10.0, 20.0]),)


class TestKeys:

    def test_same_day_maps_to_same_key(self):
        assert daily_key(datetime(2024, 3, 5, 0, 1)) == daily_key(datetime(2024, 3, 5, 23, 59)) == "2024-3-5"
        assert daily_key(date(2024, 3, 5)) != daily_key(date(2024, 3, 6))

    def test_same_month_maps_to_same_key(self):
        assert monthly_key(date(2024, 3, 1)) == monthly_key(date(2024, 3, 31)) == "2024-3"
        assert monthly_key(date(2024, 3, 31)) != monthly_key(date(2024, 4, 1))


class TestDatasetCache:

    def test_get_missing_key(self):
        assert DatasetCache().get("2024-3-15") == (None, False)

    def test_put_then_get_within_ttl(self, datasets):
        clock = FakeClock(datetime(2024, 3, 15, 10, 0))
        cache = DatasetCache(ttl_seconds=3600, clock=clock)

        cache.put("2024-3-15", datasets)
        clock.now += timedelta(minutes=59)

        assert cache.get("2024-3-15") == (datasets, True)

    def test_get_after_ttl(self, datasets):
        clock = FakeClock(datetime(2024, 3, 15, 10, 0))
        cache = DatasetCache(ttl_seconds=3600, clock=clock)

        cache.put("2024-3-15", datasets)
        clock.now += timedelta(hours=1, seconds=1)

        assert cache.get("2024-3-15") == (None, False)

    def test_force_miss_ignores_fresh_entry(self, datasets):
        cache = DatasetCache()
        cache.put("2024-3-15", datasets)

        assert cache.get("2024-3-15", force_miss=True) == (None, False)
        assert cache.get("2024-3-15") == (datasets, True)

    def test_put_replaces_entry(self, datasets):
        cache = DatasetCache()
        replacement = (make_dataset(date(2024, 3, 15), [99.0]),)

        cache.put("2024-3-15", datasets)
        cache.put("2024-3-15", replacement)

        assert cache.get("2024-3-15") == (replacement, True)

    def test_stats_and_clear(self, datasets):
        cache = DatasetCache(ttl_seconds=60)
        cache.put("a", datasets)
        cache.get("a")
        cache.get("b")

        assert cache.stats() == {"entries": 1, "hits": 1, "misses": 1, "ttl_seconds": 60}
        cache.clear()
        assert cache.get("a") == (None, False)


class TestGetOrCompute:

    def test_computes_once_then_serves_cache(self, datasets):
        cache = DatasetCache()
        calls = []

        def compute():
            calls.append(1)
            return list(datasets)

        assert cache.get_or_compute("k", compute) == datasets
        assert cache.get_or_compute("k", compute) == datasets
        assert len(calls) == 1

    def test_force_miss_recomputes(self, datasets):
        cache = DatasetCache()
        calls = []

        def compute():
            calls.append(1)
            return datasets

        cache.get_or_compute("k", compute)
        cache.get_or_compute("k", compute, force_miss=True)
        assert len(calls) == 2

    def test_failure_is_not_cached(self, datasets):
        cache = DatasetCache()

        def fail():
            raise RuntimeError("portal down")

        with pytest.raises(RuntimeError):
            cache.get_or_compute("k", fail)
        assert cache.get("k") == (None, False)
        assert cache.get_or_compute("k", lambda: datasets) == datasets

    def test_concurrent_misses_share_one_computation(self, datasets):
        cache = DatasetCache()
        started = threading.Event()
        release = threading.Event()
        calls = []
        results = []

        def compute():
            calls.append(1)
            started.set()
            release.wait(5)
            return datasets

        def worker():
            results.append(cache.get_or_compute("k", compute))

        leader = threading.Thread(target=worker)
        leader.start()
        assert started.wait(5)
        followers = [threading.Thread(target=worker) for _ in range(3)]
        for t in followers:
            t.start()
        release.set()
        for t in [leader] + followers:
            t.join(5)

        assert len(calls) == 1
        assert results == [datasets] * 4

    def test_waiting_callers_receive_the_error(self):
        cache = DatasetCache()
        started = threading.Event()
        release = threading.Event()
        errors = []

        def compute():
            started.set()
            release.wait(5)
            raise RuntimeError("timed out")

        def worker():
            try:
                cache.get_or_compute("k", compute)
            except RuntimeError as e:
                errors.append(str(e))

        leader = threading.Thread(target=worker)
        leader.start()
        assert started.wait(5)
        follower = threading.Thread(target=worker)
        follower.start()
        release.set()
        leader.join(5)
        follower.join(5)

        assert errors == ["timed out", "timed out"]
