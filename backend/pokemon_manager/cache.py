# backend/pokemon_manager/cache.py

import asyncio
import json
import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

import redis.asyncio as redis
from cachetools import TLRUCache

from .config import Settings

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    value: Any
    ttl: float


def _entry_expiry(_key, entry: CacheEntry, now: float) -> float:
    return now + entry.ttl


class TTLCache:
    """
    Async wrapper around a `cachetools.TLRUCache` with a per-entry TTL.

    Expired entries are never returned. A background sweeper (see
    `start_sweeper`) calls `expire()` so entries nobody reads again do not
    linger. When `max_entries` is reached, expired entries go first, then the
    one closest to expiry. cachetools is not thread-safe, hence the lock.
    """

    backend_name = "memory"

    def __init__(
        self,
        default_ttl: float,
        check_period: float = 600,
        max_entries: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.default_ttl = default_ttl
        self.check_period = check_period
        self.max_entries = max_entries
        self._entries = TLRUCache(
            maxsize=max_entries if max_entries is not None else math.inf,
            ttu=_entry_expiry,
            timer=clock,
        )
        self._lock = threading.Lock()
        self._sweeper: Optional[asyncio.Task] = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    async def get(self, key: str) -> Optional[Any]:
        with self._lock:
            self._entries.expire()
            entry = self._entries.get(key)
        if entry is None:
            logger.debug(f"Cache MISS for key: {key}")
            return None
        logger.debug(f"Cache HIT for key: {key}")
        return entry.value

    async def set(self, key: str, value: Any, ttl: Optional[float] = None) -> bool:
        ttl = self.default_ttl if ttl is None else ttl
        with self._lock:
            self._entries[key] = CacheEntry(value=value, ttl=ttl)
        logger.debug(f"Cache SET for key: {key} with TTL: {ttl}s")
        return True

    async def delete(self, key: str) -> bool:
        with self._lock:
            removed = self._entries.pop(key, None) is not None
        if removed:
            logger.info(f"Cache CLEARED for key: {key}")
        return removed

    def purge_expired(self) -> int:
        """Drops every entry past its deadline and returns how many were removed."""
        with self._lock:
            before = len(self._entries)
            self._entries.expire()
            return before - len(self._entries)

    async def _sweep_forever(self) -> None:
        while True:
            await asyncio.sleep(self.check_period)
            removed = self.purge_expired()
            if removed:
                logger.info(f"Cache sweep removed {removed} expired entries.")

    def start_sweeper(self) -> None:
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.create_task(self._sweep_forever())
            logger.info(f"Cache sweeper started (every {self.check_period}s).")

    async def close(self) -> None:
        if self._sweeper is not None:
            self._sweeper.cancel()
            try:
                await self._sweeper
            except asyncio.CancelledError:
                pass
            self._sweeper = None
            logger.info("Cache sweeper stopped.")
        with self._lock:
            self._entries.clear()



class RedisCache:
    """
    Same contract as `TTLCache`, backed by Redis.

    Values are stored as JSON strings with SETEX, so Redis handles expiry and
    no sweeper is needed. Redis failures are logged and reported as misses.
    """

    backend_name = "redis"

    def __init__(self, redis_url: str, default_ttl: float, max_connections: int = 20):
        self.default_ttl = default_ttl
        logger.info(f"Attempting to connect to Redis at: {redis_url}")
        self._pool = redis.ConnectionPool.from_url(
            redis_url,
            decode_responses=True,
            max_connections=max_connections,
        )
        self._client = redis.Redis(connection_pool=self._pool)
        logger.info("Redis connection pool created successfully.")

    async def get(self, key: str) -> Optional[Any]:
        try:
            cached_data = await self._client.get(key)
        except redis.RedisError as e:
            logger.error(f"Redis GET error for key '{key}': {e}", exc_info=True)
            return None
        if cached_data is None:
            logger.debug(f"Cache MISS for key: {key}")
            return None
        try:
            value = json.loads(cached_data)
        except json.JSONDecodeError:
            logger.warning(f"Failed to decode JSON from cache for key: {key}. Treating as miss.")
            return None
        logger.debug(f"Cache HIT for key: {key}")
        return value

    async def set(self, key: str, value: Any, ttl: Optional[float] = None) -> bool:
        ttl = self.default_ttl if ttl is None else ttl
        try:
            json_value = json.dumps(value)
        except (TypeError, ValueError) as e:
            logger.error(f"Failed to serialize data to JSON for key '{key}': {e}", exc_info=True)
            return False
        try:
            await self._client.setex(key, int(ttl), json_value)
        except redis.RedisError as e:
            logger.error(f"Redis SET error for key '{key}': {e}", exc_info=True)
            return False
        logger.debug(f"Cache SET for key: {key} with TTL: {ttl}s")
        return True

    async def delete(self, key: str) -> bool:
        try:
            result = await self._client.delete(key)
        except redis.RedisError as e:
            logger.error(f"Redis DELETE error for key '{key}': {e}", exc_info=True)
            return False
        if result > 0:
            logger.info(f"Cache CLEARED for key: {key}")
            return True
        logger.info(f"Cache key not found for deletion: {key}")
        return False

    def purge_expired(self) -> int:
        # Redis expires keys on its own
        return 0

    def start_sweeper(self) -> None:
        pass

    async def close(self) -> None:
        try:
            await self._client.aclose()
            await self._pool.disconnect(inuse_connections=True)
            logger.info("Redis connection pool disconnected.")
        except redis.RedisError as e:
            logger.error(f"Error closing Redis pool: {e}", exc_info=True)


def create_cache(settings: Settings):
    """Builds the cache backend selected by `settings.cache_backend`."""
    if settings.cache_backend == "redis":
        return RedisCache(settings.redis_url, default_ttl=settings.cache_ttl_seconds)
    return TTLCache(
        default_ttl=settings.cache_ttl_seconds,
        check_period=settings.cache_check_period_seconds,
        max_entries=settings.cache_max_entries,
    )
