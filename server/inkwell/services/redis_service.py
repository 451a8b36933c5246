# server/inkwell/services/redis_service.py

import json
import logging
import time
from typing import Any, Optional

import redis

logger = logging.getLogger(__name__)

KEY_PREFIX = "inkwell"


class RedisService:
    """
    Best-effort response cache.

    Without REDIS_URL, or while Redis is down, every read misses and every
    write is a no-op, so callers always fall through to the database.
    """

    def __init__(self, redis_url: Optional[str] = None, client: Optional[redis.Redis] = None):
        self.client = client
        if self.client is None and redis_url:
            self._connect(redis_url)

    def _connect(self, redis_url: str) -> None:
        try:
            if "upstash.io" in redis_url and redis_url.startswith("redis://"):
                redis_url = redis_url.replace("redis://", "rediss://", 1)

            self.client = redis.from_url(
                redis_url,
                decode_responses=True,
                socket_timeout=5,
                socket_connect_timeout=5,
                retry_on_timeout=True,
                health_check_interval=30
            )

            self.client.ping()
            logger.info("Redis connected")

        except redis.RedisError as e:
            logger.warning(f"Redis connection failed: {e}")
            self.client = None

    @property
    def configured(self) -> bool:
        return self.client is not None

    def _available(self) -> bool:
        if self.client is None:
            return False
        try:
            self.client.ping()
            return True
        except redis.RedisError:
            return False

    def _key(self, *parts) -> str:
        return f"{KEY_PREFIX}:{':'.join(str(p) for p in parts)}"

    def cache_json(self, key: str, data: Any, ttl: int) -> bool:
        if not self._available():
            return False

        try:
            self.client.setex(self._key(key), ttl, json.dumps(data))
            return True
        except (redis.RedisError, TypeError) as e:
            logger.debug(f"Cache write failed for {key}: {e}")
            return False

    def get_cached_json(self, key: str) -> Optional[Any]:
        if not self._available():
            return None

        try:
            data = self.client.get(self._key(key))
            return json.loads(data) if data else None
        except (redis.RedisError, ValueError) as e:
            logger.debug(f"Cache read failed for {key}: {e}")
            return None

    def invalidate(self, *keys: str) -> bool:
        if not keys or not self._available():
            return False

        try:
            self.client.delete(*(self._key(k) for k in keys))
            return True
        except redis.RedisError as e:
            logger.debug(f"Cache invalidation failed for {keys}: {e}")
            return False

    def health(self) -> dict:
        if self.client is None:
            return {"status": "not_configured"}

        try:
            start = time.time()
            self.client.ping()
            return {
                "status": "healthy",
                "response_time_ms": round((time.time() - start) * 1000, 2)
            }
        except redis.RedisError as e:
            logger.error(f"Redis health check failed: {e}")
            return {"status": "unhealthy", "error": str(e)}
