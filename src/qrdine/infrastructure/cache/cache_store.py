from __future__ import annotations

import redis

from qrdine.application.ports.cache import CacheStore
from qrdine.infrastructure.cache.redis_client import get_redis_client

DEFAULT_NAMESPACE = "qrdine"


class RedisCacheStore(CacheStore):
    """String cache on Redis; every key is stored under ``<namespace>:``."""

    def __init__(
        self,
        client: redis.Redis | None = None,
        namespace: str = DEFAULT_NAMESPACE,
    ) -> None:
        self._client = client if client is not None else get_redis_client()
        self._namespace = namespace

    def _key(self, key: str) -> str:
        return f"{self._namespace}:{key}"

    def get(self, key: str) -> str | None:
        value = self._client.get(self._key(key))
        if value is None:
            return None
        return str(value)

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self._client.set(self._key(key), value, ex=ttl_seconds)
