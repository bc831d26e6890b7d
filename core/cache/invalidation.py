"""
Mutation-triggered cache invalidation.

Write services call the invalidator directly once a mutation has been
persisted; there are no model signal receivers. Each mutation is described
by an ``InvalidationEvent`` and mapped to the base keys whose data changed:

    post created                 api:stats:posts, api:stats:users
    post updated / deleted       api:post:{id} + post created keys
    comment created/upd./del.    api:post:{post_id}, api:stats:comments,
                                 api:stats:posts, api:stats:users
    role created/upd./del.       api:meta:roles
    role assigned / removed      api:stats:users

Parameterized keys (date ranges, list pages) are not touched and expire via
TTL, see ``core.cache.keys``. Forgetting a missing key is a no-op.

Deleting a post also deletes its comments through the foreign key cascade,
but only the post keys above are forgotten. ``api:stats:comments`` keeps
counting the removed comments until its TTL lapses or a later comment write
forgets it.

Usage:
    invalidator = CacheInvalidator.default(store)
    invalidator.post_changed(post.pk, Change.UPDATED)
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from core.cache.keys import (
    CacheKeyBuilder,
    META_ROLES,
    STATS_COMMENTS,
    STATS_POSTS,
    STATS_USERS,
    stats_base_keys,
)
from core.cache.store import CacheStore, get_cache_store

logger = logging.getLogger(__name__)


class Entity(str, Enum):
    """Aggregates whose mutations affect cached data."""

    POST = 'post'
    COMMENT = 'comment'
    ROLE = 'role'
    ROLE_MEMBERSHIP = 'role_membership'


class Change(str, Enum):
    """Kinds of mutation."""

    CREATED = 'created'
    UPDATED = 'updated'
    DELETED = 'deleted'
    ASSIGNED = 'assigned'
    REMOVED = 'removed'


@dataclass(frozen=True)
class InvalidationEvent:
    """A persisted mutation, described for cache invalidation."""

    entity: Entity
    change: Change
    entity_id: Optional[Any] = None
    post_id: Optional[int] = None
    user_id: Optional[int] = None


class CacheInvalidator:
    """
    Maps mutation events to cache keys and forgets them.

    Static base keys are registered per entity; keys that depend on the
    mutated row (single post entries) are derived from the event itself.
    """

    def __init__(self, store: CacheStore):
        self.store = store
        self._registry: Dict[Entity, List[str]] = {}

    @classmethod
    def default(cls, store: Optional[CacheStore] = None) -> 'CacheInvalidator':
        """Invalidator wired with Quill's invalidation rules."""
        invalidator = cls(store or get_cache_store())
        invalidator.register(Entity.POST, stats_base_keys(STATS_POSTS, STATS_USERS))
        invalidator.register(
            Entity.COMMENT,
            stats_base_keys(STATS_COMMENTS, STATS_POSTS, STATS_USERS)
        )
        invalidator.register(Entity.ROLE, [CacheKeyBuilder.meta_key(META_ROLES)])
        # Membership changes alter role distribution, not role definitions
        invalidator.register(Entity.ROLE_MEMBERSHIP, stats_base_keys(STATS_USERS))
        return invalidator

    def register(self, entity: Entity, cache_keys: List[str]) -> None:
        """Register base keys to forget whenever ``entity`` changes."""
        registered = self._registry.setdefault(entity, [])
        for key in cache_keys:
            if key not in registered:
                registered.append(key)

    def keys_for(self, event: InvalidationEvent) -> List[str]:
        """Return the keys an event invalidates, in forget order."""
        keys = []

        if event.entity == Entity.POST and event.change != Change.CREATED:
            keys.append(CacheKeyBuilder.post_key(event.entity_id))
        elif event.entity == Entity.COMMENT and event.post_id is not None:
            # Post detail embeds comments
            keys.append(CacheKeyBuilder.post_key(event.post_id))

        keys.extend(self._registry.get(event.entity, []))
        return keys

    def dispatch(self, event: InvalidationEvent) -> List[str]:
        """
        Forget every key affected by ``event``.

        Runs synchronously; callers invoke it after the mutation is
        persisted and before responding.

        Returns:
            The keys that were targeted
        """
        keys = self.keys_for(event)
        self.store.forget_many(keys)

        logger.info(
            f"CACHE_INVALIDATED: type={event.entity.value} change={event.change.value} "
            f"id={event.entity_id} keys={keys}"
        )
        return keys

    def post_changed(self, post_id: int, change: Change) -> List[str]:
        return self.dispatch(InvalidationEvent(Entity.POST, change, entity_id=post_id))

    def comment_changed(self, comment_id: int, post_id: int, change: Change) -> List[str]:
        return self.dispatch(
            InvalidationEvent(Entity.COMMENT, change, entity_id=comment_id, post_id=post_id)
        )

    def role_changed(self, role_id: int, change: Change) -> List[str]:
        return self.dispatch(InvalidationEvent(Entity.ROLE, change, entity_id=role_id))

    def role_membership_changed(self, role_id: int, user_id: int, change: Change) -> List[str]:
        return self.dispatch(
            InvalidationEvent(
                Entity.ROLE_MEMBERSHIP, change, entity_id=role_id, user_id=user_id
            )
        )
