"""Redis-backed analytics cache.

Values are stored as JSON strings under the ``analytics:`` namespace with a
per-entry TTL. Every Redis failure is logged and treated as a cache miss so
callers fall back to computing the value directly.
"""

from __future__ import annotations

import logging
from typing import Optional

import redis

from src.core.config import Settings

logger = logging.getLogger(__name__)

ANALYTICS_NAMESPACE = "analytics"
DEFAULT_TTL_SECONDS = 300


class AnalyticsCache:
    def __init__(
        self,
        client: redis.Redis,
        default_ttl_seconds: int = DEFAULT_TTL_SECONDS,
        enabled: bool = True,
    ) -> None:
        self.client = client
        self.default_ttl_seconds = default_ttl_seconds
        self.enabled = enabled
        self._closed = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "AnalyticsCache":
        common_options = {
            "socket_timeout": settings.redis_socket_timeout_seconds,
            "socket_connect_timeout": settings.redis_socket_timeout_seconds,
            "decode_responses": True,
        }
        if settings.redis_url:
            client = redis.Redis.from_url(settings.redis_url, **common_options)
        else:
            client = redis.Redis(
                host=settings.redis_host,
                port=settings.redis_port,
                db=settings.redis_db,
                password=settings.redis_password,
                **common_options,
            )
        return cls(
            client=client,
            default_ttl_seconds=settings.analytics_cache_ttl_seconds,
            enabled=settings.analytics_cache_enabled,
        )

    @staticmethod
    def namespaced(key: str) -> str:
        return f"{ANALYTICS_NAMESPACE}:{key}"

    def get(self, key: str) -> Optional[str]:
        if not self._available():
            return None
        full_key = self.namespaced(key)
        try:
            value = self.client.get(full_key)
            if isinstance(value, bytes):
                value = value.decode("utf-8")
        except (redis.RedisError, UnicodeDecodeError) as exc:
            logger.warning("Analytics cache read failed for %s: %s", full_key, exc)
            return None
        if value is None:
            logger.debug("Analytics cache miss for %s", full_key)
            return None
        logger.debug("Analytics cache hit for %s", full_key)
        return value

    def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> bool:
        if not self._available():
            return False
        full_key = self.namespaced(key)
        ttl = ttl_seconds if ttl_seconds is not None else self.default_ttl_seconds
        try:
            self.client.setex(full_key, ttl, value)
        except redis.RedisError as exc:
            logger.warning("Analytics cache write failed for %s: %s", full_key, exc)
            return False
        return True

    def delete_matching(self, pattern: str) -> int:
        """Delete every namespaced key matching ``pattern``; returns the count removed."""
        if not self._available():
            return 0
        full_pattern = self.namespaced(pattern)
        deleted = 0
        try:
            for key in self.client.scan_iter(match=full_pattern):
                deleted += int(self.client.delete(key))
        except redis.RedisError as exc:
            logger.warning("Analytics cache sweep failed for %s: %s", full_pattern, exc)
            return deleted
        logger.info("Analytics cache sweep removed %s key(s) matching %s", deleted, full_pattern)
        return deleted

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self.client.close()
        except redis.RedisError as exc:
            logger.warning("Analytics cache close failed: %s", exc)

    def _available(self) -> bool:
        return self.enabled and not self._closed
