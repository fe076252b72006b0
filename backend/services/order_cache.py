"""
Order listing cache backends.

All backends store lists of Orders under string keys with a TTL and
implement the OrderCache protocol:

    MemoryOrderCache — process-local dict, monotonic-clock expiry
    RedisOrderCache  — shared redis.asyncio client, JSON values with SET EX
    NullOrderCache   — always misses (cache disabled)

Backend failures surface as CacheBackendError; callers decide whether a
failure is fatal.
"""
import json
import logging
import time
from typing import Callable, Optional

from pydantic import ValidationError as PydanticValidationError
from redis.exceptions import RedisError

from domain.order import Order
from exceptions import CacheBackendError
from models import OrderResponse, serialize_orders

logger = logging.getLogger(__name__)


def dump_orders(orders: list[Order]) -> str:
    return json.dumps(serialize_orders(orders))


def load_orders(raw) -> list[Order]:
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    return [OrderResponse.model_validate(item).to_domain() for item in json.loads(raw)]


class MemoryOrderCache:
    """Process-local cache; entries expire ``ttl_seconds`` after being set."""

    def __init__(self, ttl_seconds: float, time_func: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._time = time_func
        self._entries: dict[str, tuple[float, list[Order]]] = {}

    async def get(self, key: str) -> Optional[list[Order]]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, orders = entry
        if self._time() >= expires_at:
            del self._entries[key]
            return None
        return list(orders)

    async def set(self, key: str, orders: list[Order]) -> None:
        now = self._time()
        self._evict_expired(now)
        self._entries[key] = (now + self.ttl_seconds, list(orders))

    def _evict_expired(self, now: float) -> None:
        expired = [key for key, (expires_at, _) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    async def ping(self) -> None:
        return None

    async def close(self) -> None:
        self._entries.clear()


class RedisOrderCache:
    """Cache shared between workers through Redis."""

    def __init__(self, client, ttl_seconds: int):
        self._redis = client
        self.ttl_seconds = ttl_seconds

    @classmethod
    def from_url(cls, url: str, ttl_seconds: int) -> "RedisOrderCache":
        import redis.asyncio as aioredis

        client = aioredis.from_url(
            url,
            socket_timeout=5.0,
            socket_connect_timeout=5.0,
        )
        return cls(client, ttl_seconds)

    async def get(self, key: str) -> Optional[list[Order]]:
        try:
            raw = await self._redis.get(key)
        except RedisError as e:
            raise CacheBackendError(f"cache get {key} failed: {e}") from e
        if raw is None:
            return None
        try:
            return load_orders(raw)
        except (ValueError, TypeError, PydanticValidationError) as e:
            raise CacheBackendError(f"cache entry {key} is corrupt: {e}") from e

    async def set(self, key: str, orders: list[Order]) -> None:
        try:
            await self._redis.set(key, dump_orders(orders), ex=self.ttl_seconds)
        except RedisError as e:
            raise CacheBackendError(f"cache set {key} failed: {e}") from e

    async def delete(self, key: str) -> None:
        try:
            await self._redis.delete(key)
        except RedisError as e:
            raise CacheBackendError(f"cache delete {key} failed: {e}") from e

    async def ping(self) -> None:
        try:
            await self._redis.ping()
        except RedisError as e:
            raise CacheBackendError(f"cache ping failed: {e}") from e

    async def close(self) -> None:
        try:
            await self._redis.aclose()
        except RedisError as e:
            logger.warning(f"Error closing Redis connection: {e}")


class NullOrderCache:
    """Cache that never stores anything."""

    async def get(self, key: str) -> Optional[list[Order]]:
        return None

    async def set(self, key: str, orders: list[Order]) -> None:
        return None

    async def delete(self, key: str) -> None:
        return None

    async def ping(self) -> None:
        return None

    async def close(self) -> None:
        return None


def build_cache(settings):
    """Cache backend selected by ``settings.cache_backend``."""
    backend = settings.cache_backend
    if backend == "redis":
        logger.info("Order cache: redis")
        return RedisOrderCache.from_url(settings.redis_url, settings.cache_ttl_seconds)
    if backend == "memory":
        logger.info("Order cache: in-memory")
        return MemoryOrderCache(settings.cache_ttl_seconds)
    if backend == "none":
        logger.info("Order cache: disabled")
        return NullOrderCache()
    raise ValueError(f"Unknown cache backend: {backend!r}")
