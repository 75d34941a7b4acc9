# tests/test_core/test_ttl_map.py

from medialytics.core.cache import TTLMap


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_entries_expire():
    clock = FakeClock()
    cache = TTLMap(clock=clock)
    cache.set("k", 1, 10)

    clock.now = 9.9
    assert cache.get("k") == 1
    clock.now = 10
    assert cache.get("k") is None
    assert len(cache) == 0


def test_zero_ttl_is_not_stored():
    cache = TTLMap()
    cache.set("k", 1, 0)
    assert cache.get("k") is None


def test_pop_and_maxsize():
    cache = TTLMap(maxsize=2)
    cache.set("a", 1, 60)
    cache.set("b", 2, 60)
    cache.set("c", 3, 60)

    assert cache.get("a") is None
    assert cache.pop("b") == 2
    assert cache.get("b") is None
    assert cache.get("c") == 3
