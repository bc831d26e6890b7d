"""
Core Permissions - Role-aware DRF permission classes for Quill

USAGE:
    from core.permissions import IsQuillAdmin, IsAuthorOrModerator, CanCreatePosts

PERMISSION CLASSES:
   - IsQuillAdmin: staff users or members of the ``admin`` role
   - IsAuthorOrModerator: object authors, admins or editors; reads are open
   - CanCreatePosts: ``create`` requires the ``create_posts`` permission
"""

import logging
from typing import Any

from rest_framework import permissions
from rest_framework.request import Request
from rest_framework.views import APIView

from accounts.services import user_can, user_has_role

logger = logging.getLogger('security.permissions')

ADMIN_ROLE = 'admin'
EDITOR_ROLE = 'editor'


def is_admin(user) -> bool:
    """Return True for staff users and members of the admin role."""
    if not user or not user.is_authenticated:
        return False
    if user.is_staff or user.is_superuser:
        return True
    return user_has_role(user, ADMIN_ROLE)


def is_moderator(user) -> bool:
    """Admins and editors may change content written by anyone."""
    return is_admin(user) or user_has_role(user, EDITOR_ROLE)


def _log_denied(request: Request, view: APIView) -> None:
    logger.warning(
        f"PERMISSION_DENIED: view={view.__class__.__name__} "
        f"user={getattr(request.user, 'pk', None)}"
    )


class IsQuillAdmin(permissions.BasePermission):
    """Allow access only to administrators."""

    message = 'Administrator access required.'

    def has_permission(self, request: Request, view: APIView) -> bool:
        allowed = is_admin(request.user)
        if not allowed:
            _log_denied(request, view)
        return allowed


class IsAuthorOrModerator(permissions.BasePermission):
    """
    Object-level permission for authored content.

    Safe methods are open. Writes require the object's author, an admin
    or a member of the ``editor`` role.
    """

    message = 'You can only modify your own content.'

    def has_object_permission(self, request: Request, view: APIView, obj: Any) -> bool:
        if request.method in permissions.SAFE_METHODS:
            return True
        if getattr(obj, 'author_id', None) == request.user.pk:
            return True
        return is_moderator(request.user)


class CanCreatePosts(permissions.BasePermission):
    """Gate the ``create`` action on the ``create_posts`` role permission."""

    message = 'You do not have permission to create posts.'

    def has_permission(self, request: Request, view: APIView) -> bool:
        if getattr(view, 'action', None) != 'create':
            return True
        allowed = is_admin(request.user) or user_can(request.user, 'create', 'posts')
        if not allowed:
            _log_denied(request, view)
        return allowed
