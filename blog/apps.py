"""
Blog App Configuration
"""

from django.apps import AppConfig


class BlogConfig(AppConfig):
    """
    Configuration for the blog application.

    No signal receivers are registered: cache invalidation is dispatched
    explicitly by blog.services after each write.
    """
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'blog'
