"""
Prediction Cache Module

Time-bounded memoization of computed predictions, keyed by match signature.
Two interchangeable backends share one async interface:

    - InMemoryPredictionCache: per-process store (default)
    - RedisPredictionCache: shared store for multi-worker deployments

Both guarantee at most one in-flight computation per key (singleflight):
concurrent callers racing on the same uncached key wait for the leader's
result instead of repeating the work.

Usage:
    from cricket_predictor.cache import create_prediction_cache

    cache = create_prediction_cache(settings)
    result = await cache.get_or_compute('["fast","IND","AUS","t20"]', compute)

Cache Key Conventions (compact JSON arrays, so ids may contain any character):
    - ["fast", team1, team2, format] - Rating model only
    - ["balanced", team1, team2, format, venue] - Rating model + feature ensemble
"""

import asyncio
import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Awaitable, Callable

from redis.exceptions import RedisError

from cricket_predictor.api.schemas.common import CacheStatsResponse
from cricket_predictor.api.schemas.prediction import PredictionResult
from cricket_predictor.config import CACHE_CAPACITY, CACHE_TTL_SECONDS
from cricket_predictor.exceptions import CacheError, PredictionError

logger = logging.getLogger(__name__)

ComputeFn = Callable[[], Awaitable[PredictionResult]]


@dataclass
class CacheEntry:
    key: str
    result: PredictionResult
    timestamp: float


class PredictionCache:
    """
    Base class: hit/miss accounting, from_cache marking and singleflight.

    Subclasses implement the storage primitives _load, _store, _clear and _size.
    Storage failures must surface as CacheError; lookups and writes degrade to
    miss / no-op, management calls (clear, stats) propagate the error.
    """

    def __init__(
        self,
        ttl_seconds: int = CACHE_TTL_SECONDS,
        capacity: int = CACHE_CAPACITY,
        eviction: str = "fifo",
        clock: Callable[[], float] = time.monotonic,
    ):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.ttl_seconds = ttl_seconds
        self.capacity = capacity
        self.eviction = eviction
        self._clock = clock
        self._hits = 0
        self._misses = 0
        self._inflight: dict[str, asyncio.Future] = {}

    # ------------------------------------------------------------------
    # Storage primitives
    # ------------------------------------------------------------------
    async def _load(self, key: str) -> PredictionResult | None:
        raise NotImplementedError

    async def _store(self, key: str, result: PredictionResult) -> None:
        raise NotImplementedError

    async def _clear(self) -> None:
        raise NotImplementedError

    async def _size(self) -> int:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------
    async def get(self, key: str) -> PredictionResult | None:
        """
        Get a live cached result.

        Args:
            key: Cache key

        Returns:
            Cached result marked from_cache=True, or None if absent/expired
        """
        try:
            result = await self._load(key)
        except CacheError as e:
            logger.warning(f"Cache get error: {key}, {e}")
            result = None

        if result is None:
            self._misses += 1
            logger.debug(f"Cache miss: {key}")
            return None

        self._hits += 1
        logger.debug(f"Cache hit: {key}")
        return result.model_copy(update={"from_cache": True})

    async def put(self, key: str, result: PredictionResult) -> None:
        """
        Store a freshly computed result.

        Args:
            key: Cache key
            result: Result to memoize (the from_cache flag is not stored)
        """
        stored = result.model_copy(update={"from_cache": None})
        try:
            await self._store(key, stored)
            logger.debug(f"Cache set: {key} (TTL: {self.ttl_seconds}s)")
        except CacheError as e:
            logger.warning(f"Cache set error: {key}, {e}")

    async def get_or_compute(self, key: str, compute: ComputeFn) -> PredictionResult:
        """
        Return the cached result for key, computing it at most once concurrently.

        The leader's failure is re-raised to every waiter; failed computations
        are not cached.

        Args:
            key: Cache key
            compute: Coroutine factory producing a fresh result

        Returns:
            Fresh result (leader) or memoized result marked from_cache=True
        """
        cached = await self.get(key)
        if cached is not None:
            return cached

        inflight = self._inflight.get(key)
        if inflight is not None:
            logger.debug(f"Joining in-flight computation: {key}")
            try:
                result = await asyncio.shield(inflight)
            except asyncio.CancelledError:
                if inflight.cancelled():
                    raise PredictionError(f"In-flight computation cancelled: {key}")
                raise
            return result.model_copy(update={"from_cache": True})

        future = asyncio.get_running_loop().create_future()
        self._inflight[key] = future
        try:
            result = await compute()
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as e:
            future.set_exception(e)
            # Mark retrieved so an unobserved failure is not reported by asyncio
            future.exception()
            raise
        else:
            await self.put(key, result)
            future.set_result(result)
            return result
        finally:
            self._inflight.pop(key, None)

    async def clear(self) -> None:
        """Remove every entry and reset hit/miss counters."""
        await self._clear()
        self._hits = 0
        self._misses = 0
        logger.info("Prediction cache cleared")

    async def stats(self) -> CacheStatsResponse:
        """
        Get cache statistics.

        Returns:
            Live entry count and measured hit rate (0.0 before any lookup)
        """
        size = await self._size()
        lookups = self._hits + self._misses
        hit_rate = self._hits / lookups if lookups else 0.0
        return CacheStatsResponse(size=size, hit_rate=hit_rate)


class InMemoryPredictionCache(PredictionCache):
    """Per-process cache; an ordered map guarded by a lock."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()

    def _is_expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.timestamp >= self.ttl_seconds

    def _purge_expired(self, now: float) -> None:
        expired = [k for k, e in self._entries.items() if self._is_expired(e, now)]
        for k in expired:
            del self._entries[k]

    async def _load(self, key: str) -> PredictionResult | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._is_expired(entry, self._clock()):
                del self._entries[key]
                return None
            if self.eviction == "lru":
                self._entries.move_to_end(key)
            return entry.result

    async def _store(self, key: str, result: PredictionResult) -> None:
        with self._lock:
            now = self._clock()
            if self.eviction == "lru" and key in self._entries:
                self._entries.move_to_end(key)
            self._entries[key] = CacheEntry(key=key, result=result, timestamp=now)

            if len(self._entries) > self.capacity:
                self._purge_expired(now)
            while len(self._entries) > self.capacity:
                oldest_key, _ = self._entries.popitem(last=False)
                logger.debug(f"Cache evict: {oldest_key}")

    async def _clear(self) -> None:
        with self._lock:
            self._entries.clear()

    async def _size(self) -> int:
        with self._lock:
            self._purge_expired(self._clock())
            return len(self._entries)


class RedisPredictionCache(PredictionCache):
    """
    Redis-backed cache shared between workers.

    Entries are stored with SETEX. Two sorted sets track them:
    the index (scored by insertion time, or last access for LRU) orders
    eviction, and the written set (scored by write time) mirrors the SETEX
    lifetime so expired members are pruned from both.
    """

    def __init__(self, client, *args, key_prefix: str = "prediction", **kwargs):
        kwargs.setdefault("clock", time.time)
        super().__init__(*args, **kwargs)
        self._client = client
        self._prefix = key_prefix
        self._index_key = f"{key_prefix}:index"
        self._written_key = f"{key_prefix}:written"

    def _entry_key(self, key: str) -> str:
        return f"{self._prefix}:entry:{key}"

    async def _prune(self) -> None:
        cutoff = self._clock() - self.ttl_seconds
        expired = await self._client.zrangebyscore(self._written_key, "-inf", cutoff)
        if expired:
            await self._client.zrem(self._index_key, *expired)
            await self._client.zrem(self._written_key, *expired)

    async def _load(self, key: str) -> PredictionResult | None:
        try:
            data = await self._client.get(self._entry_key(key))
            if data is None:
                await self._client.zrem(self._index_key, key)
                await self._client.zrem(self._written_key, key)
                return None
            if self.eviction == "lru":
                await self._client.zadd(self._index_key, {key: self._clock()}, xx=True)
        except RedisError as e:
            raise CacheError(str(e)) from e
        return PredictionResult.model_validate_json(data)

    async def _store(self, key: str, result: PredictionResult) -> None:
        data = result.model_dump_json(by_alias=True)
        now = self._clock()
        try:
            await self._client.setex(self._entry_key(key), self.ttl_seconds, data)
            await self._client.zadd(self._index_key, {key: now}, nx=self.eviction == "fifo")
            await self._client.zadd(self._written_key, {key: now})
            await self._prune()
            overflow = await self._client.zcard(self._index_key) - self.capacity
            if overflow > 0:
                evicted = await self._client.zpopmin(self._index_key, overflow)
                for member, _score in evicted:
                    await self._client.delete(self._entry_key(member))
                    await self._client.zrem(self._written_key, member)
                    logger.debug(f"Cache evict: {member}")
        except RedisError as e:
            raise CacheError(str(e)) from e

    async def _clear(self) -> None:
        try:
            keys = [k async for k in self._client.scan_iter(match=f"{self._prefix}:entry:*")]
            if keys:
                await self._client.delete(*keys)
            await self._client.delete(self._index_key, self._written_key)
        except RedisError as e:
            raise CacheError(f"Redis clear failed: {e}") from e

    async def _size(self) -> int:
        try:
            await self._prune()
            return int(await self._client.zcard(self._index_key))
        except RedisError as e:
            raise CacheError(f"Redis stats failed: {e}") from e


def create_prediction_cache(settings) -> PredictionCache:
    """
    Build the cache backend selected in settings.

    Args:
        settings: Settings instance

    Returns:
        PredictionCache implementation
    """
    options = {
        "ttl_seconds": settings.cache_ttl_seconds,
        "capacity": settings.cache_capacity,
        "eviction": settings.cache_eviction,
    }

    if settings.uses_redis:
        import redis.asyncio as aioredis

        client = aioredis.from_url(
            settings.redis_url,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        logger.info(f"Prediction cache: redis ({settings.redis_url})")
        return RedisPredictionCache(client, key_prefix=settings.redis_key_prefix, **options)

    logger.info(
        f"Prediction cache: memory (ttl={settings.cache_ttl_seconds}s, "
        f"capacity={settings.cache_capacity}, eviction={settings.cache_eviction})"
    )
    return InMemoryPredictionCache(**options)
