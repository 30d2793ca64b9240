"""Redis cache for downloaded source files.

Remote sources are fetched once and kept as raw bytes with a TTL, so that
re-reading the same URL with different parser options does not hit the
network again. When Redis is unreachable the cache degrades to a no-op.
"""
import hashlib
from datetime import timedelta
from typing import Optional

import redis

from tabload.core.logging import get_logger
from tabload.core.config import settings

logger = get_logger(__name__)

# Redis connection pool (lazy initialization)
_redis_pool: Optional[redis.ConnectionPool] = None
_redis_client: Optional[redis.Redis] = None


def get_redis_client(
    host: Optional[str] = None,
    port: Optional[int] = None,
    db: Optional[int] = None,
    password: Optional[str] = None,
) -> Optional[redis.Redis]:
    """Get or create a binary-safe Redis client with connection pooling.

    Uses settings from environment variables if not explicitly provided.
    Returns None if Redis is not available.
    """
    global _redis_pool, _redis_client

    host = host or settings.redis_host
    port = port or settings.redis_port
    db = db if db is not None else settings.redis_db
    password = password or settings.redis_password

    if _redis_client is None:
        logger.info(f"Initializing Redis connection pool: {host}:{port}")

        try:
            _redis_pool = redis.ConnectionPool(
                host=host,
                port=port,
                db=db,
                password=password,
                decode_responses=False,
                max_connections=10,
                socket_connect_timeout=5,
                socket_timeout=5,
            )

            _redis_client = redis.Redis(connection_pool=_redis_pool)
            _redis_client.ping()
            logger.info("Redis connection established successfully")

        except redis.ConnectionError as e:
            logger.error(f"Failed to connect to Redis: {e}", exc_info=True)
            _redis_client = None
            return None
        except redis.RedisError as e:
            logger.error(f"Redis initialization error: {e}", exc_info=True)
            _redis_client = None
            return None

    return _redis_client


def url_key(url: str) -> str:
    """Stable cache key for a URL."""
    return hashlib.md5(url.encode("utf-8")).hexdigest()


class CacheManager:
    """Byte cache with TTL on top of Redis.

    Example:
        >>> cache = CacheManager(ttl_hours=24)
        >>> cache.set_bytes(url_key(url), payload)
        >>> cache.get_bytes(url_key(url))
    """

    def __init__(
        self,
        redis_client: Optional[redis.Redis] = None,
        ttl_hours: Optional[int] = None,
        key_prefix: str = "tabload:source:"
    ):
        self.redis = redis_client or get_redis_client()
        self.ttl = timedelta(hours=ttl_hours or settings.cache_ttl_hours)
        self.key_prefix = key_prefix

    @property
    def available(self) -> bool:
        return self.redis is not None

    def _make_key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def get_bytes(self, key: str) -> Optional[bytes]:
        """Return cached bytes, or None on a miss or when Redis fails."""
        if not self.available:
            return None
        try:
            data = self.redis.get(self._make_key(key))
        except redis.RedisError as e:
            logger.error(f"Error retrieving cache {key}: {e}", exc_info=True)
            return None

        if data is None:
            logger.debug(f"Cache miss: {key}")
            return None
        logger.debug(f"Cache hit: {key}")
        return bytes(data)

    def set_bytes(self, key: str, value: bytes, ttl_hours: Optional[int] = None) -> bool:
        """Store bytes with a TTL. Returns True if stored."""
        if not self.available:
            return False
        ttl = timedelta(hours=ttl_hours) if ttl_hours else self.ttl
        try:
            self.redis.setex(self._make_key(key), ttl, value)
        except redis.RedisError as e:
            logger.error(f"Error setting cache {key}: {e}", exc_info=True)
            return False
        logger.debug(f"Cache set: {key} (TTL: {ttl})")
        return True

    def delete(self, key: str) -> bool:
        if not self.available:
            return False
        try:
            return bool(self.redis.delete(self._make_key(key)))
        except redis.RedisError as e:
            logger.error(f"Error deleting cache {key}: {e}", exc_info=True)
            return False

    def clear(self) -> int:
        """Delete every cached source. Returns the number of keys removed."""
        if not self.available:
            return 0
        try:
            keys = self.redis.keys(self._make_key("*"))
            if not keys:
                return 0
            deleted = self.redis.delete(*keys)
        except redis.RedisError as e:
            logger.error(f"Error clearing source cache: {e}", exc_info=True)
            return 0
        logger.info(f"Cleared {deleted} cached sources")
        return deleted
