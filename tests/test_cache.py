from datetime import datetime, timedelta, timezone

from memdecay.cache import EmbeddingCache


class FakeClock:
    def __init__(self):
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now


def test_cache_miss_then_hit():
    cache = EmbeddingCache()
    assert cache.get("query") is None

    cache.set("query", [0.1, 0.2])

    assert cache.get("query") == [0.1, 0.2]
    assert cache.hits == 1
    assert cache.misses == 1


def test_cache_returns_copies():
    cache = EmbeddingCache()
    vector = [0.1, 0.2]
    cache.set("query", vector)
    vector.append(9.9)

    cached = cache.get("query")
    assert cached == [0.1, 0.2]
    cached.append(1.0)
    assert cache.get("query") == [0.1, 0.2]


def test_cache_evicts_least_recently_used():
    cache = EmbeddingCache(max_size=2)
    cache.set("a", [1.0])
    cache.set("b", [2.0])
    cache.get("a")  # "b" is now least recently used
    cache.set("c", [3.0])

    assert len(cache) == 2
    assert cache.get("b") is None
    assert cache.get("a") == [1.0]
    assert cache.get("c") == [3.0]


def test_cache_overwrite_does_not_evict():
    cache = EmbeddingCache(max_size=2)
    cache.set("a", [1.0])
    cache.set("b", [2.0])
    cache.set("a", [1.5])

    assert len(cache) == 2
    assert cache.get("a") == [1.5]
    assert cache.get("b") == [2.0]


def test_cache_entries_expire():
    clock = FakeClock()
    cache = EmbeddingCache(ttl_seconds=60, clock=clock)
    cache.set("query", [1.0])

    clock.now += timedelta(seconds=59)
    assert cache.get("query") == [1.0]

    clock.now += timedelta(seconds=2)
    assert cache.get("query") is None
    assert len(cache) == 0


def test_cache_clear():
    cache = EmbeddingCache()
    cache.set("query", [1.0])
    cache.get("query")
    cache.clear()

    assert len(cache) == 0
    assert cache.hits == 0
