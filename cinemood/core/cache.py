"""
In-memory TTL cache.
Holds catalog lookups that rarely change (movie details, trailers) so the
detail endpoint does not hit the catalog on every page view.
"""
import time
from threading import Lock
from typing import Awaitable, Callable, Dict, Generic, Hashable, Optional, Tuple, TypeVar

T = TypeVar("T")


class InMemoryCache(Generic[T]):
    """
    Thread-safe in-memory cache with TTL support.

    Usage:
        cache: InMemoryCache[MovieDetails] = InMemoryCache(default_ttl_seconds=3600)
        details = await cache.get_or_fetch(movie_id, lambda: client.get_movie(movie_id))
    """

    def __init__(self, default_ttl_seconds: Optional[float] = None) -> None:
        # key -> (value, expires_at); expires_at None means no expiry
        self._store: Dict[Hashable, Tuple[T, Optional[float]]] = {}
        self._default_ttl = default_ttl_seconds
        self._lock = Lock()

    def get(self, key: Hashable) -> Optional[T]:
        """Get value by key, returns None if not found or expired."""
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if expires_at is not None and time.time() > expires_at:
                del self._store[key]
                return None
            return value

    def set(self, key: Hashable, value: T, ttl_seconds: Optional[float] = None) -> None:
        """Set value with optional TTL."""
        ttl = ttl_seconds if ttl_seconds is not None else self._default_ttl
        expires_at = time.time() + ttl if ttl else None
        with self._lock:
            self._store[key] = (value, expires_at)

    def clear(self) -> None:
        """Clear all entries."""
        with self._lock:
            self._store.clear()

    def size(self) -> int:
        """Return number of entries (including possibly expired)."""
        with self._lock:
            return len(self._store)

    async def get_or_fetch(
        self,
        key: Hashable,
        factory: Callable[[], Awaitable[T]],
        ttl_seconds: Optional[float] = None,
    ) -> T:
        """Return the cached value or await factory and cache its result.

        Exceptions raised by factory propagate and nothing is cached.
        """
        value = self.get(key)
        if value is not None:
            return value

        # Fetch outside the lock; concurrent misses may both fetch
        fetched = await factory()
        self.set(key, fetched, ttl_seconds)
        return fetched
