"""
Caching layer for Spotify API responses.

Maps a canonicalized RequestDescriptor to the payload fetched for it. Entries
expire lazily: a lookup older than the TTL is reported as a miss, and the stale
entry is only replaced on the next put for that key.

Two backends share the same contract:
    - InMemoryResponseCache: process-local dict guarded by a lock.
    - RedisResponseCache: Redis ``SETEX`` for deployments running several
      workers.
"""

import copy
import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Protocol

import redis

if TYPE_CHECKING:
    from spotinote.schemas.descriptors import RequestDescriptor

logger = logging.getLogger(__name__)

DEFAULT_TTL = 300  # seconds


class ResponseCache(Protocol):
    """Contract shared by every response cache backend."""

    def get(self, descriptor: "RequestDescriptor") -> Optional[Any]: ...

    def put(self, descriptor: "RequestDescriptor", payload: Any) -> None: ...

    def clear(self) -> None: ...


@dataclass(frozen=True)
class CacheEntry:
    """A payload and when it was fetched."""

    descriptor_key: str
    payload: Any
    fetched_at: float


class InMemoryResponseCache:
    """
    Process-local TTL cache.

    Payloads are deep-copied going in and coming out so a caller mutating
    its result can never alter what the next caller sees.

    Example:
        cache = InMemoryResponseCache(ttl=300)
        cache.put(descriptor, payload)
        cache.get(descriptor)  # payload, until 300s have passed
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the cache.

        Args:
            ttl: Time-to-live in seconds, fixed for the whole deployment.
            clock: Time source, injectable for tests.
        """
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        self._ttl = ttl
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    @property
    def ttl(self) -> float:
        return self._ttl

    def get(self, descriptor: "RequestDescriptor") -> Optional[Any]:
        """
        Return the cached payload, or None when absent or expired.
        """
        key = descriptor.cache_key()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or self._clock() - entry.fetched_at >= self._ttl:
                self._misses += 1
                logger.debug("Cache miss for %s", key)
                return None
            self._hits += 1
        logger.debug("Cache hit for %s", key)
        return copy.deepcopy(entry.payload)

    def put(self, descriptor: "RequestDescriptor", payload: Any) -> None:
        """Store a payload, superseding any previous entry for the key."""
        key = descriptor.cache_key()
        entry = CacheEntry(
            descriptor_key=key,
            payload=copy.deepcopy(payload),
            fetched_at=self._clock(),
        )
        with self._lock:
            self._entries[key] = entry
        logger.debug("Cached %s (TTL: %ss)", key, self._ttl)

    def clear(self) -> None:
        """Drop every entry."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.info("Cleared %d cache entries", count)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def stats(self) -> Dict[str, int]:
        """Hit/miss counters and current entry count."""
        with self._lock:
            return {
                "entries": len(self._entries),
                "hits": self._hits,
                "misses": self._misses,
            }


class RedisResponseCache:
    """
    Redis-backed TTL cache.

    Redis errors are logged and treated as a miss (on get) or a no-op
    (on put), so a cache outage never fails a fetch.
    """

    def __init__(
        self,
        redis_client: redis.Redis,
        key_prefix: str = "spotinote:cache:",
        ttl: int = DEFAULT_TTL,
    ):
        """
        Initialize the cache.

        Args:
            redis_client: Redis client instance.
            key_prefix: Prefix for all cache keys.
            ttl: Time-to-live in seconds.
        """
        self._redis = redis_client
        self._prefix = key_prefix
        self._ttl = int(ttl)

    @property
    def ttl(self) -> int:
        return self._ttl

    def _make_key(self, descriptor: "RequestDescriptor") -> str:
        return f"{self._prefix}{descriptor.cache_key()}"

    def _serialize(self, data: Any) -> bytes:
        """Serialize data to bytes for storage."""
        return json.dumps(data).encode("utf-8")

    def _deserialize(self, data: Optional[bytes]) -> Any:
        """Deserialize bytes to Python object."""
        if data is None:
            return None
        return json.loads(data.decode("utf-8"))

    def get(self, descriptor: "RequestDescriptor") -> Optional[Any]:
        key = self._make_key(descriptor)
        try:
            data = self._redis.get(key)
        except redis.RedisError as e:
            logger.warning("Redis error getting cache entry: %s", e)
            return None
        if data is None:
            logger.debug("Cache miss for %s", key)
            return None
        logger.debug("Cache hit for %s", key)
        return self._deserialize(data)

    def put(self, descriptor: "RequestDescriptor", payload: Any) -> None:
        key = self._make_key(descriptor)
        try:
            self._redis.setex(key, self._ttl, self._serialize(payload))
            logger.debug("Cached %s (TTL: %ss)", key, self._ttl)
        except redis.RedisError as e:
            logger.warning("Redis error setting cache entry: %s", e)

    def clear(self) -> None:
        """Delete every key under the prefix."""
        try:
            pattern = f"{self._prefix}*"
            cursor = 0
            deleted = 0

            while True:
                cursor, keys = self._redis.scan(cursor, match=pattern, count=100)
                if keys:
                    self._redis.delete(*keys)
                    deleted += len(keys)
                if cursor == 0:
                    break

            logger.info("Cleared %d cache entries", deleted)
        except redis.RedisError as e:
            logger.warning("Redis error clearing cache: %s", e)

    def is_connected(self) -> bool:
        """Check if Redis connection is alive."""
        try:
            self._redis.ping()
            return True
        except redis.RedisError:
            return False
