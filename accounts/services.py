"""
Accounts Services - Role management with cache invalidation

RoleService is the write path for roles and role membership. Every method
persists inside a transaction and then calls the cache invalidator before
returning, so the next read of the base metadata or user statistics keys is
recomputed.
"""

import logging
from typing import Iterable, Optional

from django.db import transaction

from core.cache import CacheInvalidator, Change

from .models import Permission, Role

logger = logging.getLogger(__name__)


class RoleService:
    """
    Create, update and delete roles; assign and remove them from users.

    Usage:
        service = RoleService()
        editor = service.create_role('editor', permissions=['edit_posts'])
        service.assign_role(user, editor)
    """

    def __init__(self, invalidator: Optional[CacheInvalidator] = None):
        self.invalidator = invalidator or CacheInvalidator.default()

    def create_role(
        self,
        name: str,
        description: str = '',
        permissions: Optional[Iterable[str]] = None
    ) -> Role:
        with transaction.atomic():
            role = Role.objects.create(name=name, description=description)
            if permissions is not None:
                role.permissions.set(self._resolve_permissions(permissions))

        self.invalidator.role_changed(role.pk, Change.CREATED)
        logger.info(f"Role created: {role.name}")
        return role

    def update_role(
        self,
        role: Role,
        name: Optional[str] = None,
        description: Optional[str] = None,
        permissions: Optional[Iterable[str]] = None
    ) -> Role:
        with transaction.atomic():
            if name is not None:
                role.name = name
            if description is not None:
                role.description = description
            role.save()
            if permissions is not None:
                role.permissions.set(self._resolve_permissions(permissions))

        self.invalidator.role_changed(role.pk, Change.UPDATED)
        logger.info(f"Role updated: {role.name}")
        return role

    def delete_role(self, role: Role) -> None:
        role_id = role.pk
        name = role.name
        with transaction.atomic():
            role.delete()

        self.invalidator.role_changed(role_id, Change.DELETED)
        logger.info(f"Role deleted: {name}")

    def assign_role(self, user, role: Role) -> None:
        """Add ``user`` to ``role``. Assigning an existing membership is a no-op write."""
        with transaction.atomic():
            role.users.add(user)

        self.invalidator.role_membership_changed(role.pk, user.pk, Change.ASSIGNED)
        logger.info(f"Role assigned: role={role.name} user={user.pk}")

    def remove_role(self, user, role: Role) -> None:
        with transaction.atomic():
            role.users.remove(user)

        self.invalidator.role_membership_changed(role.pk, user.pk, Change.REMOVED)
        logger.info(f"Role removed: role={role.name} user={user.pk}")

    @staticmethod
    def _resolve_permissions(names: Iterable[str]):
        """Return Permission rows for ``names``, creating unknown ones."""
        resolved = []
        for name in names:
            permission, _ = Permission.objects.get_or_create(name=name)
            resolved.append(permission)
        return resolved


def user_has_role(user, *role_names: str) -> bool:
    """Return True if ``user`` holds any of ``role_names``."""
    if not user or not user.is_authenticated:
        return False
    return user.roles.filter(name__in=role_names).exists()


def user_has_permission(user, permission: str) -> bool:
    """Return True if any of the user's roles grants ``permission``."""
    if not user or not user.is_authenticated:
        return False
    return user.roles.filter(permissions__name=permission).exists()


def user_can(user, action: str, resource: str) -> bool:
    """Check the ``<action>_<resource>`` permission, e.g. ``delete_posts``."""
    return user_has_permission(user, f'{action}_{resource}')


def display_name(user) -> str:
    """Full name when set, username otherwise."""
    return user.get_full_name() or user.username
