"""
Accounts Admin - Admin configuration for roles and permissions.

Role edits forget the role metadata cache, and changes to a role's
``users`` forget the user statistics, matching RoleService. Permission
rows are not cached on their own and need no invalidation.
"""

from django.contrib import admin

from core.admin import CacheInvalidatingAdmin
from core.cache import Change

from .models import Permission, Role


@admin.register(Permission)
class PermissionAdmin(admin.ModelAdmin):
    list_display = ['name', 'description', 'created_at']
    search_fields = ['name']


@admin.register(Role)
class RoleAdmin(CacheInvalidatingAdmin):
    list_display = ['name', 'description', 'created_at']
    search_fields = ['name']
    filter_horizontal = ['permissions', 'users']

    def save_model(self, request, obj, form, change):
        super().save_model(request, obj, form, change)
        self.after_commit(
            self.invalidator.role_changed,
            obj.pk,
            Change.UPDATED if change else Change.CREATED
        )

    def save_related(self, request, form, formsets, change):
        """Save m2m data, then report each user added to or removed from the role."""
        role = form.instance
        before = set(role.users.values_list('pk', flat=True))
        super().save_related(request, form, formsets, change)
        after = set(role.users.values_list('pk', flat=True))

        for user_id in sorted(after - before):
            self.after_commit(
                self.invalidator.role_membership_changed, role.pk, user_id, Change.ASSIGNED
            )
        for user_id in sorted(before - after):
            self.after_commit(
                self.invalidator.role_membership_changed, role.pk, user_id, Change.REMOVED
            )

    def delete_model(self, request, obj):
        role_id = obj.pk
        super().delete_model(request, obj)
        self.after_commit(self.invalidator.role_changed, role_id, Change.DELETED)

    def delete_queryset(self, request, queryset):
        role_ids = list(queryset.values_list('pk', flat=True))
        super().delete_queryset(request, queryset)
        for role_id in role_ids:
            self.after_commit(self.invalidator.role_changed, role_id, Change.DELETED)
