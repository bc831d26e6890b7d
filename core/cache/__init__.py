"""
Quill Cache Module - cached reads and mutation-triggered invalidation

This module provides:
- CacheStore: get-or-compute over a Django cache backend
- CacheKeyBuilder: the single place cache keys are shaped
- CacheInvalidator: forgets base keys after posts, comments and roles change

Usage:
    from core.cache import (
        CacheStore, CacheKeyBuilder, CacheInvalidator, Change
    )
"""

from core.cache.config import get_redis_cache_config
from core.cache.exceptions import CacheError, CacheUnavailable
from core.cache.invalidation import (
    CacheInvalidator,
    Change,
    Entity,
    InvalidationEvent,
)
from core.cache.keys import (
    CacheKeyBuilder,
    POST_CACHE_TIMEOUT,
    POST_LIST_CACHE_TIMEOUT,
    ROLES_META_CACHE_TIMEOUT,
    STATS_CACHE_TIMEOUT,
)
from core.cache.store import CacheStore, get_cache_store

__all__ = [
    'CacheStore',
    'get_cache_store',
    'CacheKeyBuilder',
    'CacheInvalidator',
    'Change',
    'Entity',
    'InvalidationEvent',
    'CacheError',
    'CacheUnavailable',
    'STATS_CACHE_TIMEOUT',
    'ROLES_META_CACHE_TIMEOUT',
    'POST_CACHE_TIMEOUT',
    'POST_LIST_CACHE_TIMEOUT',
    'get_redis_cache_config',
]
