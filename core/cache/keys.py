"""
Cache key policy for the Quill API.

Every cache key used by the API is built here so the key shape lives in one
place and tests can assert on exact strings.

Key shape:
    api:<category>:<resource>[:<param>:<param>...]

Base keys carry no parameter suffix (``api:stats:posts``). They are the only
keys that mutation hooks invalidate. Parameterized variants
(``api:stats:posts:2024-01-01:null``, paginated post lists) are never
enumerated or pattern-deleted; they are allowed to serve stale data until
their own TTL lapses:

    statistics      STATS_CACHE_TIMEOUT       15 minutes
    role metadata   ROLES_META_CACHE_TIMEOUT  1 hour
    post detail     POST_CACHE_TIMEOUT        5 minutes (base key, invalidated)
    post list pages POST_LIST_CACHE_TIMEOUT   5 minutes (TTL only)
"""

from datetime import date
from typing import Any, Optional


# Cache timeout constants (seconds)
STATS_CACHE_TIMEOUT = 900  # 15 minutes
ROLES_META_CACHE_TIMEOUT = 3600  # 1 hour
POST_CACHE_TIMEOUT = 300  # 5 minutes
POST_LIST_CACHE_TIMEOUT = 300  # 5 minutes

# Statistics resources
STATS_POSTS = 'posts'
STATS_COMMENTS = 'comments'
STATS_USERS = 'users'
STATS_RESOURCES = (STATS_POSTS, STATS_COMMENTS, STATS_USERS)

# Metadata resources
META_ROLES = 'roles'

# Rendered in place of an absent parameter so key shape stays stable
NULL_PLACEHOLDER = 'null'


class CacheKeyBuilder:
    """
    Builds namespaced cache keys for the API.

    Usage:
        CacheKeyBuilder.stats_key('posts')
        # 'api:stats:posts'

        CacheKeyBuilder.stats_key('posts', date(2024, 1, 1), None)
        # 'api:stats:posts:2024-01-01:null'
    """

    # Global prefix for all API cache keys
    PREFIX = 'api'

    @classmethod
    def build(cls, *parts: Any) -> str:
        """Join ``parts`` under the global prefix."""
        components = [cls.PREFIX]
        components.extend(parts)
        return ':'.join(str(c) for c in components)

    @staticmethod
    def format_param(value: Any) -> str:
        """Render a single key parameter; ``None`` becomes ``null``."""
        if value is None:
            return NULL_PLACEHOLDER
        if isinstance(value, date):
            return value.isoformat()
        return str(value)

    @classmethod
    def parameterized(cls, base: str, *params: Any) -> str:
        """
        Append ``params`` to ``base`` when at least one of them is set.

        All-absent parameters collapse to the base key, so an unfiltered
        request shares the entry that mutation hooks invalidate.
        """
        if all(p is None for p in params):
            return base
        suffix = ':'.join(cls.format_param(p) for p in params)
        return f'{base}:{suffix}'

    @classmethod
    def stats_key(
        cls,
        resource: str,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None
    ) -> str:
        """Key for a statistics view, optionally narrowed to a date range."""
        if resource not in STATS_RESOURCES:
            raise ValueError(f"Unknown statistics resource: {resource}")
        return cls.parameterized(cls.build('stats', resource), date_from, date_to)

    @classmethod
    def meta_key(cls, resource: str) -> str:
        """Key for metadata listings such as roles."""
        return cls.build('meta', resource)

    @classmethod
    def post_key(cls, post_id: int) -> str:
        """Key for a single post representation."""
        return cls.build('post', post_id)

    @classmethod
    def post_list_key(
        cls,
        page: int,
        sort: str,
        order: str,
        per_page: int
    ) -> str:
        """Key for one page of the post listing."""
        return cls.build('posts', 'page', page, 'sort', sort, order, 'per_page', per_page)


def stats_base_keys(*resources: str) -> list:
    """Base statistics keys for ``resources``, in the given order."""
    return [CacheKeyBuilder.stats_key(resource) for resource in resources]
