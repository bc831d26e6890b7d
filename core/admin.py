"""
Core Admin - Base ModelAdmin for models whose writes affect cached API data.

Admin saves do not go through the write services, so admin classes for
posts, comments and roles report their changes to the cache invalidator
themselves. Notifications are queued with ``transaction.on_commit`` and run
only after the admin transaction commits.
"""

from functools import partial

from django.contrib import admin
from django.db import transaction

from core.cache import CacheInvalidator


class CacheInvalidatingAdmin(admin.ModelAdmin):
    """
    ModelAdmin with a lazily built invalidator and an after-commit helper.

    Usage:
        def save_model(self, request, obj, form, change):
            super().save_model(request, obj, form, change)
            self.after_commit(self.invalidator.post_changed, obj.pk, Change.UPDATED)
    """

    _invalidator = None

    @property
    def invalidator(self) -> CacheInvalidator:
        if self._invalidator is None:
            self._invalidator = CacheInvalidator.default()
        return self._invalidator

    def after_commit(self, func, *args) -> None:
        """Run ``func(*args)`` once the current transaction commits."""
        transaction.on_commit(partial(func, *args))
