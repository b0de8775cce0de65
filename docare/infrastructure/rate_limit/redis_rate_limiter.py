import redis

from ...application.ports.rate_limiter import RateLimiter


class RedisRateLimiter(RateLimiter):
    """Fixed window limiter shared by every process pointing at the same Redis."""

    def __init__(self, url: str, prefix: str = "docare:rl:") -> None:
        self.client = redis.Redis.from_url(url)
        self.prefix = prefix

    def allow(self, key: str, max_requests: int, window_seconds: int) -> bool:
        rk = f"{self.prefix}{key}:{window_seconds}"
        pipe = self.client.pipeline()
        # Creates the counter with its TTL only once per window
        pipe.set(rk, 0, ex=window_seconds, nx=True)
        pipe.incr(rk, 1)
        _, count = pipe.execute()
        return int(count) <= int(max_requests)

    def reset(self, key: str) -> None:
        for rk in self.client.scan_iter(f"{self.prefix}{key}:*"):
            self.client.delete(rk)
