"""
Core ViewSets - Cache-aware base classes for Quill API views

USAGE:
    from core.viewsets import CachedReadMixin

    class PostStatsView(CachedReadMixin, APIView):
        def get(self, request):
            data = self.remember(key, STATS_CACHE_TIMEOUT, compute)
            return Response(data)

CLASSES:

1. CachedReadMixin:
   - ``cache_store``: the CacheStore used for get-or-compute reads
   - ``invalidator``: CacheInvalidator sharing that store, for write paths
   - ``remember()``: shorthand for ``cache_store.remember()``

Both collaborators are built lazily per view instance from
``QUILL_CACHE_ALIAS``. Override ``get_cache_store`` to use another store.
"""

from typing import Any, Callable, Optional

from core.cache import CacheInvalidator, CacheStore, get_cache_store


class CachedReadMixin:
    """Gives a view access to the cache store and invalidator."""

    _cache_store: Optional[CacheStore] = None
    _invalidator: Optional[CacheInvalidator] = None

    def get_cache_store(self) -> CacheStore:
        return get_cache_store()

    @property
    def cache_store(self) -> CacheStore:
        if self._cache_store is None:
            self._cache_store = self.get_cache_store()
        return self._cache_store

    @property
    def invalidator(self) -> CacheInvalidator:
        if self._invalidator is None:
            self._invalidator = CacheInvalidator.default(self.cache_store)
        return self._invalidator

    def remember(self, key: str, ttl: int, compute: Callable[[], Any]) -> Any:
        return self.cache_store.remember(key, ttl, compute)
