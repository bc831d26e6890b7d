"""
Accounts Models - Role-Based Access Control

This module implements:
- Permission: a named capability such as ``create_posts``
- Role: a named bundle of permissions assigned to many users

Role membership is the ``Role.users`` many-to-many relation, reachable from
a user as ``user.roles``. Membership changes go through
``accounts.services.RoleService`` so the user statistics cache is
invalidated.
"""

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _


class Permission(models.Model):
    """A named capability granted through roles."""

    name = models.CharField(max_length=100, unique=True)
    description = models.CharField(max_length=255, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Permission')
        verbose_name_plural = _('Permissions')
        ordering = ['name']

    def __str__(self):
        return self.name


class Role(models.Model):
    """
    A named set of permissions.

    Built-in role names: admin, editor, author, viewer.
    """

    ADMIN = 'admin'
    EDITOR = 'editor'
    AUTHOR = 'author'
    VIEWER = 'viewer'

    name = models.CharField(max_length=50, unique=True)
    description = models.CharField(max_length=255, blank=True)
    permissions = models.ManyToManyField(
        Permission,
        blank=True,
        related_name='roles'
    )
    users = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        blank=True,
        related_name='roles'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Role')
        verbose_name_plural = _('Roles')
        ordering = ['name']

    def __str__(self):
        return self.name

    @property
    def permission_names(self):
        return [p.name for p in self.permissions.all()]
