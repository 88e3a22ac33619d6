"""Redis connection plus the cache, session and throttling primitives built on it."""

import json
from typing import Any, cast

import redis
import structlog

from clinic_booking.config import settings

logger = structlog.get_logger(__name__)

# Transport failures from redis-py and from the socket layer underneath it
REDIS_ERRORS = (redis.RedisError, OSError)

_redis_client: redis.Redis | None = None


def get_redis_client() -> redis.Redis:
    """Return the process-wide Redis client, creating it on first use."""
    global _redis_client

    if _redis_client is None:
        _redis_client = redis.Redis(
            host=settings.redis_host,
            port=settings.redis_port,
            username=settings.redis_username,
            password=settings.redis_password or None,
            decode_responses=settings.redis_decode_responses,
            socket_connect_timeout=5,
            socket_keepalive=True,
            health_check_interval=30,
        )
        logger.debug("redis_client_created", host=settings.redis_host, port=settings.redis_port)

    return _redis_client


async def check_redis_connection() -> bool:
    """Ping Redis; used by the lifespan hook and the detailed health check."""
    try:
        return bool(get_redis_client().ping())
    except REDIS_ERRORS as e:
        logger.warning("redis_ping_failed", error=str(e))
        return False


def close_redis_connection() -> None:
    global _redis_client

    if _redis_client is not None:
        _redis_client.close()
        _redis_client = None


class RateLimiter:
    """
    Fixed window counter keyed per caller.

    The first hit in a window creates the counter and arms its expiry, so
    the window starts at the first attempt rather than on a wall-clock
    boundary. Redis being unreachable never locks anyone out.
    """

    def __init__(self, redis_client: redis.Redis):
        self.redis = redis_client

    def check_rate_limit(self, key: str, limit: int, window: int = 60) -> bool:
        """
        Count one attempt against ``key``.

        Args:
            key: Counter key, e.g. ``rate_limit:login:<client address>``
            limit: Attempts allowed per window
            window: Window length in seconds

        Returns:
            True while the caller is within the limit
        """
        try:
            attempts = int(cast(int, self.redis.incr(key)))
            if attempts == 1:
                self.redis.expire(key, window)
        except REDIS_ERRORS as e:
            logger.warning("rate_limit_unavailable", key=key, error=str(e))
            return True

        if attempts > limit:
            logger.info("rate_limit_exceeded", key=key, attempts=attempts, limit=limit)
            return False
        return True


class CacheManager:
    """
    JSON values in Redis.

    Every method reports failure through its return value instead of raising,
    leaving callers to decide whether a miss is fatal (sessions) or merely
    slower (catalog lookups).
    """

    def __init__(self, redis_client: redis.Redis):
        self.redis = redis_client

    def get_json(self, key: str) -> Any | None:
        """Return the decoded value at ``key``, or None when absent or unreadable."""
        try:
            raw = cast(str | None, self.redis.get(key))
        except REDIS_ERRORS as e:
            logger.warning("cache_read_failed", key=key, error=str(e))
            return None

        if not raw:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("cache_value_corrupt", key=key)
            return None

    def set_json(self, key: str, value: Any, ttl: int | None = None) -> bool:
        """Store ``value`` as JSON, expiring after ``ttl`` seconds when given."""
        encoded = json.dumps(value, default=str)
        try:
            if ttl:
                self.redis.setex(key, ttl, encoded)
            else:
                self.redis.set(key, encoded)
        except REDIS_ERRORS as e:
            logger.warning("cache_write_failed", key=key, error=str(e))
            return False
        return True

    def touch(self, key: str, ttl: int) -> bool:
        """Restart the expiry of an existing key; False if it is already gone."""
        try:
            return bool(self.redis.expire(key, ttl))
        except REDIS_ERRORS as e:
            logger.warning("cache_touch_failed", key=key, error=str(e))
            return False

    def delete(self, key: str) -> bool:
        try:
            self.redis.delete(key)
        except REDIS_ERRORS as e:
            logger.warning("cache_delete_failed", key=key, error=str(e))
            return False
        return True
