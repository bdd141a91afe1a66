import time
import json
import logging
from typing import Any, Awaitable, Callable, Optional

from redis.asyncio import from_url as redis_from_url
from redis.exceptions import RedisError

from config import Settings

logger = logging.getLogger(__name__)

PAYLOAD_PREFIX = "payload:"


def payload_key(name: str) -> str:
    return f"{PAYLOAD_PREFIX}{name}"


class _BaseCache:
    async def get(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    async def set(self, key: str, value: Any, ttl: int = 60):
        raise NotImplementedError

    async def get_or_load(self, key: str, load: Callable[[], Awaitable[Any]], ttl: int = 60) -> Any:
        """Devolve o valor em cache ou chama `load` e guarda o resultado (None não é guardado)."""
        hit = await self.get(key)
        if hit is not None:
            logger.debug("cache hit %s", key)
            return hit
        value = await load()
        if value is not None:
            await self.set(key, value, ttl=ttl)
        return value


class _MemoryCache(_BaseCache):
    def __init__(self):
        self._store = {}

    async def start(self):  # compat
        return

    async def close(self):
        self._store.clear()

    async def get(self, key: str) -> Optional[Any]:
        entry = self._store.get(key)
        if not entry:
            return None
        expires_at, value = entry
        if expires_at and time.monotonic() > expires_at:
            self._store.pop(key, None)
            return None
        return value

    async def set(self, key: str, value: Any, ttl: int = 60):
        expires_at = time.monotonic() + ttl if ttl else None
        self._store[key] = (expires_at, value)


class _RedisCache(_BaseCache):
    # falhas do redis viram cache miss; o carregamento segue pela rede
    def __init__(self, url: str):
        self._url = url
        self._client = None

    async def start(self):
        self._client = redis_from_url(self._url, encoding="utf-8", decode_responses=True)

    async def close(self):
        if self._client:
            await self._client.aclose()

    async def get(self, key: str) -> Optional[Any]:
        if not self._client:
            return None
        try:
            raw = await self._client.get(key)
        except RedisError as e:
            logger.warning("redis get %s failed: %s", key, e)
            return None
        return json.loads(raw) if raw else None

    async def set(self, key: str, value: Any, ttl: int = 60):
        if not self._client:
            return
        try:
            await self._client.set(key, json.dumps(value, separators=(",", ":"), ensure_ascii=False), ex=ttl)
        except RedisError as e:
            logger.warning("redis set %s failed: %s", key, e)


def get_cache(settings: Settings):
    if settings.enable_redis_cache:
        return _RedisCache(settings.redis_url)
    return _MemoryCache()
