import logging
from functools import lru_cache

from ...application.ports.rate_limiter import RateLimiter
from ...core.config import settings
from .memory_rate_limiter import InMemoryRateLimiter
from .redis_rate_limiter import RedisRateLimiter

logger = logging.getLogger(__name__)


@lru_cache()
def get_rate_limiter() -> RateLimiter:
    if settings.REDIS_URL:
        logger.info("Using Redis rate limiter")
        return RedisRateLimiter(settings.REDIS_URL)
    return InMemoryRateLimiter()


__all__ = ["InMemoryRateLimiter", "RedisRateLimiter", "get_rate_limiter"]
