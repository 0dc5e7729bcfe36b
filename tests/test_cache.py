from app.core.cache import TokenCache


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_get_before_and_after_expiry():
    clock = FakeClock()
    cache = TokenCache(clock=clock)

    assert cache.set("qr-abc", "pending", 300) is True
    clock.now += 300
    assert cache.get("qr-abc") == "pending"

    clock.now += 1
    assert cache.get("qr-abc") is None
    # expired entry is dropped on access
    assert len(cache) == 0
    assert cache.get("qr-abc") is None


def test_no_ttl_never_expires():
    clock = FakeClock()
    cache = TokenCache(clock=clock)

    cache.set("k", "v")
    cache.set("zero", "v", 0)
    clock.now += 10 ** 9
    assert cache.get("k") == "v"
    assert cache.get("zero") == "v"


def test_set_overwrites_value_and_expiry():
    clock = FakeClock()
    cache = TokenCache(clock=clock)

    cache.set("k", "old", 10)
    cache.set("k", "new", 100)
    clock.now += 50
    assert cache.get("k") == "new"


def test_delete_and_missing_keys():
    cache = TokenCache(clock=FakeClock())
    assert cache.get("missing") is None
    assert cache.delete("missing") is False

    cache.set("k", "v", 60)
    assert cache.delete("k") is True
    assert cache.get("k") is None
