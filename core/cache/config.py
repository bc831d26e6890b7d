"""
Cache backend configuration.

Kept free of model imports so settings modules can import it.
"""

from typing import Any, Dict


def get_redis_cache_config(redis_url: str, key_prefix: str = 'quill') -> Dict[str, Any]:
    """
    Build ``CACHES`` for a django-redis deployment.

    IGNORE_EXCEPTIONS stays off: an unreachable Redis must surface to the
    caller as ``CacheUnavailable`` instead of being read as a cache miss.

    Args:
        redis_url: Base Redis URL without database number
        key_prefix: Prefix django-redis applies to every key

    Returns:
        Cache configuration dict for Django settings
    """
    redis_url = redis_url.rstrip('/')

    return {
        'default': {
            'BACKEND': 'django_redis.cache.RedisCache',
            'LOCATION': f'{redis_url}/0',
            'OPTIONS': {
                'CLIENT_CLASS': 'django_redis.client.DefaultClient',
                'CONNECTION_POOL_CLASS': 'redis.connection.BlockingConnectionPool',
                'CONNECTION_POOL_CLASS_KWARGS': {
                    'max_connections': 50,
                    'timeout': 20,
                },
                'SOCKET_CONNECT_TIMEOUT': 5,
                'SOCKET_TIMEOUT': 5,
                'SERIALIZER': 'django_redis.serializers.json.JSONSerializer',
                'IGNORE_EXCEPTIONS': False,
            },
            'KEY_PREFIX': key_prefix,
            'TIMEOUT': 300,  # 5 minutes default
        },
    }
