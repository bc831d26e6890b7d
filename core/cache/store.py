"""
Cache Store - get-or-compute caching over a Django cache backend.

``CacheStore`` is the only object the rest of Quill talks to for cached
reads and invalidation. It wraps one Django cache backend (locmem in tests,
django-redis in production) and is handed to the components that need it
rather than looked up globally, so statistics views and the invalidator can
be exercised against any backend.

Consistency model:
    - ``remember`` is at-least-once: two requests missing the same key may
      both compute, the last ``set`` wins. No lock is taken.
    - A failing computation never populates the cache.
    - Backend failures raise ``CacheUnavailable``; nothing is retried here.
"""

import logging
from typing import Any, Callable, Iterable, Optional

from django.conf import settings
from django.core.cache import caches
from django.core.cache.backends.base import BaseCache

from core.cache.exceptions import CacheUnavailable

logger = logging.getLogger(__name__)

# Distinguishes "not cached" from a cached ``None``
_MISSING = object()


class CacheStore:
    """
    Key-value store with per-key TTL.

    Usage:
        store = CacheStore.from_alias('default')

        stats = store.remember(
            'api:stats:posts', 900,
            lambda: StatisticsService().get_post_statistics()
        )
        store.forget('api:stats:posts')
    """

    def __init__(self, backend: BaseCache):
        self.backend = backend

    @classmethod
    def from_alias(cls, alias: Optional[str] = None) -> 'CacheStore':
        """Build a store over a configured Django cache alias."""
        alias = alias or getattr(settings, 'QUILL_CACHE_ALIAS', 'default')
        return cls(caches[alias])

    def remember(self, key: str, ttl: int, compute: Callable[[], Any]) -> Any:
        """
        Return the live value under ``key`` or compute, store and return it.

        Args:
            key: Cache key
            ttl: Time-to-live in seconds applied when the value is stored
            compute: Zero-argument callable producing the value on a miss

        Returns:
            Cached or freshly computed value
        """
        try:
            cached = self.backend.get(key, _MISSING)
        except Exception as e:
            logger.error(f"Cache read failed for {key}: {e}")
            raise CacheUnavailable('get', key) from e

        if cached is not _MISSING:
            logger.debug(f"Cache HIT: {key}")
            return cached

        logger.debug(f"Cache MISS: {key}")
        # Exceptions from compute propagate and leave the key absent
        value = compute()

        try:
            self.backend.set(key, value, ttl)
        except Exception as e:
            logger.error(f"Cache write failed for {key}: {e}")
            raise CacheUnavailable('set', key) from e

        return value

    def forget(self, key: str) -> bool:
        """
        Delete ``key``.

        Returns:
            True if the key was present, False otherwise
        """
        try:
            deleted = bool(self.backend.delete(key))
        except Exception as e:
            logger.error(f"Cache delete failed for {key}: {e}")
            raise CacheUnavailable('delete', key) from e

        if deleted:
            logger.debug(f"Forgot cache key: {key}")
        return deleted

    def forget_many(self, keys: Iterable[str]) -> None:
        """
        Delete every key in ``keys``.

        Each key is attempted even if an earlier one failed. The first
        failure is raised once all keys have been tried.
        """
        first_error = None

        for key in keys:
            try:
                self.forget(key)
            except CacheUnavailable as e:
                if first_error is None:
                    first_error = e

        if first_error is not None:
            raise first_error

    def flush(self) -> bool:
        """
        Delete every key held by the backend, regardless of namespace.

        Reserved for test fixtures and the ``flush_api_cache`` command.
        """
        try:
            self.backend.clear()
        except Exception as e:
            logger.error(f"Cache flush failed: {e}")
            raise CacheUnavailable('clear') from e

        logger.warning("Flushed API cache backend")
        return True


def get_cache_store() -> CacheStore:
    """Build the store configured by ``QUILL_CACHE_ALIAS``."""
    return CacheStore.from_alias()
