"""Redis-backed cache for dashboard responses."""

import json
import logging
from typing import Any, Optional

import redis

from clipdash.config import settings

logger = logging.getLogger(__name__)

RESPONSE_NAMESPACE = "response"


class ResponseCache:
    """
    JSON values stored in Redis under a common key namespace.

    The connection is opened on first use. An empty URL or an unreachable
    server turns every lookup into a miss and every write into a no-op, so
    callers never need to check for Redis themselves.
    """

    def __init__(self, url: str, namespace: str = "clipdash"):
        self.url = url
        self.namespace = namespace
        self._client: Optional[redis.Redis] = None
        self._connect_attempted = False

    @property
    def client(self) -> Optional[redis.Redis]:
        if self._client is None and not self._connect_attempted:
            self._connect_attempted = True
            self._client = self._connect()
        return self._client

    def _connect(self) -> Optional[redis.Redis]:
        if not self.url:
            logger.info("REDIS_URL not set, response caching disabled")
            return None

        client = redis.from_url(
            self.url,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            health_check_interval=30
        )
        try:
            client.ping()
        except redis.RedisError as e:
            logger.warning(f"Redis unreachable, continuing without cache: {e}")
            return None

        logger.info("Redis connected")
        return client

    def available(self) -> bool:
        client = self.client
        if client is None:
            return False
        try:
            return bool(client.ping())
        except redis.RedisError:
            return False

    def key(self, *parts: str) -> str:
        return ":".join((self.namespace,) + parts)

    def get(self, key: str) -> Optional[Any]:
        client = self.client
        if client is None:
            return None

        try:
            raw = client.get(key)
        except redis.RedisError as e:
            logger.warning(f"Cache read failed for {key}: {e}")
            return None

        return json.loads(raw) if raw else None

    def set(self, key: str, value: Any, ttl: int) -> bool:
        client = self.client
        if client is None:
            return False

        try:
            client.setex(key, ttl, json.dumps(value))
        except redis.RedisError as e:
            logger.warning(f"Cache write failed for {key}: {e}")
            return False
        return True

    def invalidate(self, *parts: str) -> int:
        """Delete every key under the given namespace parts; returns the number removed."""
        client = self.client
        if client is None:
            return 0

        try:
            keys = list(client.scan_iter(match=self.key(*parts) + ":*"))
            return client.delete(*keys) if keys else 0
        except redis.RedisError as e:
            logger.warning(f"Cache invalidation failed: {e}")
            return 0


response_cache = ResponseCache(settings.REDIS_URL)


def get_redis_client() -> Optional[redis.Redis]:
    return response_cache.client


def is_redis_available() -> bool:
    return response_cache.available()


def invalidate_metrics_cache() -> int:
    """Drop cached dashboard responses after account data changed."""
    removed = response_cache.invalidate(RESPONSE_NAMESPACE)
    if removed:
        logger.info(f"Invalidated {removed} cached dashboard responses")
    return removed
