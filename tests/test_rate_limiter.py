import pytest

from docare.infrastructure.rate_limit.memory_rate_limiter import InMemoryRateLimiter


def test_memory_rate_limiter_allows_then_blocks():
    rl = InMemoryRateLimiter()
    key = "k1"
    assert rl.allow(key, max_requests=2, window_seconds=60) is True
    assert rl.allow(key, max_requests=2, window_seconds=60) is True
    assert rl.allow(key, max_requests=2, window_seconds=60) is False
    # Other keys have their own budget
    assert rl.allow("k2", max_requests=2, window_seconds=60) is True


def test_memory_rate_limiter_window_slides(monkeypatch):
    clock = [1000.0]
    monkeypatch.setattr("docare.infrastructure.rate_limit.memory_rate_limiter.time.time", lambda: clock[0])
    rl = InMemoryRateLimiter()
    assert rl.allow("k", max_requests=1, window_seconds=10) is True
    assert rl.allow("k", max_requests=1, window_seconds=10) is False
    clock[0] += 11
    assert rl.allow("k", max_requests=1, window_seconds=10) is True


def test_memory_rate_limiter_reset():
    rl = InMemoryRateLimiter()
    assert rl.allow("k", max_requests=1, window_seconds=60) is True
    rl.reset("k")
    assert rl.allow("k", max_requests=1, window_seconds=60) is True


def test_redis_rate_limiter_with_fake(monkeypatch):
    redis = pytest.importorskip("redis")

    class FakePipe:
        def __init__(self, client):
            self.client = client
            self.ops = []

        def set(self, k, v, ex=None, nx=False):
            self.ops.append(("set", k, v, nx))
            return self

        def incr(self, k, n):
            self.ops.append(("incr", k, n))
            return self

        def execute(self):
            results = []
            for op in self.ops:
                if op[0] == "set":
                    created = op[1] not in self.client.store
                    if created:
                        self.client.store[op[1]] = op[2]
                    results.append(True if created else None)
                else:
                    self.client.store[op[1]] += op[2]
                    results.append(self.client.store[op[1]])
            self.ops = []
            return results

    class FakeRedis:
        def __init__(self):
            self.store = {}

        @classmethod
        def from_url(cls, url):
            return cls()

        def pipeline(self):
            return FakePipe(self)

        def scan_iter(self, pattern):
            prefix = pattern.rstrip("*")
            return [k for k in list(self.store) if k.startswith(prefix)]

        def delete(self, k):
            self.store.pop(k, None)

    monkeypatch.setattr(redis, "Redis", FakeRedis)

    from docare.infrastructure.rate_limit.redis_rate_limiter import RedisRateLimiter

    rl = RedisRateLimiter("redis://localhost:6379/0")
    assert rl.allow("ip", max_requests=2, window_seconds=60) is True
    assert rl.allow("ip", max_requests=2, window_seconds=60) is True
    assert rl.allow("ip", max_requests=2, window_seconds=60) is False
    rl.reset("ip")
    assert rl.allow("ip", max_requests=2, window_seconds=60) is True
