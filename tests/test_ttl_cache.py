from core.ttl_cache import TTLCache
from fakes import FakeClock, utc


def test_value_lives_until_ttl():
    clock = FakeClock(utc(2026, 1, 1))
    cache = TTLCache(ttl_seconds=60, clock=clock.time)
    cache.set("a", 1)

    clock.advance(seconds=59)
    assert cache.get("a") == 1
    assert cache.has("a")

    clock.advance(seconds=1)
    assert cache.get("a") is None
    assert len(cache) == 0


def test_missing_key():
    cache = TTLCache(ttl_seconds=60)
    assert cache.get("nope") is None
    assert not cache.has("nope")


def test_cap_evicts_oldest_inserted():
    clock = FakeClock(utc(2026, 1, 1))
    cache = TTLCache(ttl_seconds=60, max_entries=2, clock=clock.time)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("c", 3)

    assert cache.get("a") is None
    assert cache.get("b") == 2
    assert cache.get("c") == 3
    assert len(cache) == 2


def test_overwrite_refreshes_expiry_without_eviction():
    clock = FakeClock(utc(2026, 1, 1))
    cache = TTLCache(ttl_seconds=60, max_entries=2, clock=clock.time)
    cache.set("a", 1)
    cache.set("b", 2)
    clock.advance(seconds=30)
    cache.set("a", 10)

    clock.advance(seconds=40)
    assert cache.get("a") == 10
    assert cache.get("b") is None


def test_clear():
    cache = TTLCache(ttl_seconds=60)
    cache.set("a", 1)
    cache.clear()
    assert len(cache) == 0
