"""
Cache exceptions.

Backend failures are surfaced to the caller as ``CacheUnavailable``; the
cache layer never retries on its own. Retry and reconnect behaviour belongs
to the backend transport (django-redis connection pool settings).
"""


class CacheError(Exception):
    """Base class for cache layer errors."""


class CacheUnavailable(CacheError):
    """The underlying cache backend could not complete an operation."""

    def __init__(self, operation: str, key: str = None):
        self.operation = operation
        self.key = key
        message = f"Cache backend unavailable during {operation}"
        if key is not None:
            message = f"{message} (key={key})"
        super().__init__(message)
