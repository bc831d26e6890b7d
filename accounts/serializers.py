"""
Accounts Serializers - DRF serializers for roles and role membership.

This module provides serializers for:
- Users in nested representations
- Roles with permission names (read) and role writes
- Role assignment requests
"""

from django.contrib.auth import get_user_model
from rest_framework import serializers

from .models import Role
from .services import display_name

User = get_user_model()


# ==================== USER SERIALIZERS ====================

class BasicUserSerializer(serializers.ModelSerializer):
    """Minimal user information for nested serialization."""

    name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'name', 'email']
        read_only_fields = fields

    def get_name(self, obj):
        return display_name(obj)


class UserRolesSerializer(BasicUserSerializer):
    """User with the names of the roles it holds."""

    roles = serializers.SerializerMethodField()

    class Meta(BasicUserSerializer.Meta):
        fields = ['id', 'name', 'email', 'roles']
        read_only_fields = fields

    def get_roles(self, obj):
        return [role.name for role in obj.roles.all()]


# ==================== ROLE SERIALIZERS ====================

class RoleSerializer(serializers.ModelSerializer):
    """Role with permission names, as served by the roles metadata cache."""

    permissions = serializers.SerializerMethodField()

    class Meta:
        model = Role
        fields = ['id', 'name', 'description', 'permissions']
        read_only_fields = fields

    def get_permissions(self, obj):
        return obj.permission_names


class RoleWriteSerializer(serializers.Serializer):
    """Payload for creating or updating a role."""

    name = serializers.CharField(max_length=50)
    description = serializers.CharField(max_length=255, required=False, allow_blank=True)
    permissions = serializers.ListField(
        child=serializers.CharField(max_length=100),
        required=False
    )

    def validate_name(self, value):
        queryset = Role.objects.filter(name=value)
        if self.instance is not None:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise serializers.ValidationError('A role with this name already exists.')
        return value


class RoleAssignmentSerializer(serializers.Serializer):
    """Role assignment request: ``{"role": "<name>"}``."""

    role = serializers.SlugRelatedField(
        slug_field='name',
        queryset=Role.objects.all()
    )
