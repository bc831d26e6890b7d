"""
Accounts API ViewSets - Roles and role membership.

Caching:
- Role metadata cached for 1 hour under ``api:meta:roles``, shared by the
  public metadata endpoint and the admin role listing
- Role create/update/delete forget ``api:meta:roles``
- Role assignment/removal forget ``api:stats:users`` only
"""

from django.contrib.auth import get_user_model
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from core.cache import CacheKeyBuilder, ROLES_META_CACHE_TIMEOUT
from core.cache.keys import META_ROLES
from core.permissions import IsQuillAdmin
from core.viewsets import CachedReadMixin

from ..models import Role
from ..serializers import (
    RoleAssignmentSerializer,
    RoleSerializer,
    RoleWriteSerializer,
    UserRolesSerializer,
)
from ..services import RoleService

User = get_user_model()


def build_roles_payload():
    """Serialize every role with its permission names."""
    roles = Role.objects.prefetch_related('permissions').order_by('name')
    return {'roles': [dict(item) for item in RoleSerializer(roles, many=True).data]}


class MetaRolesView(CachedReadMixin, APIView):
    """Public role metadata."""

    permission_classes = [AllowAny]

    def get(self, request):
        data = self.remember(
            CacheKeyBuilder.meta_key(META_ROLES),
            ROLES_META_CACHE_TIMEOUT,
            build_roles_payload
        )
        return Response(data)


class RoleViewSet(CachedReadMixin, viewsets.ModelViewSet):
    """
    ViewSet for role management.

    Admin only. Writes go through RoleService so role metadata is
    invalidated.
    """

    permission_classes = [IsQuillAdmin]
    queryset = Role.objects.prefetch_related('permissions')
    serializer_class = RoleSerializer
    pagination_class = None

    def get_role_service(self) -> RoleService:
        return RoleService(invalidator=self.invalidator)

    def list(self, request, *args, **kwargs):
        """List roles from the shared metadata cache."""
        data = self.remember(
            CacheKeyBuilder.meta_key(META_ROLES),
            ROLES_META_CACHE_TIMEOUT,
            build_roles_payload
        )
        return Response(data)

    def create(self, request, *args, **kwargs):
        serializer = RoleWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        role = self.get_role_service().create_role(**serializer.validated_data)
        return Response(RoleSerializer(role).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        role = self.get_object()
        partial = kwargs.pop('partial', False)
        serializer = RoleWriteSerializer(role, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        role = self.get_role_service().update_role(role, **serializer.validated_data)
        return Response(RoleSerializer(role).data)

    def destroy(self, request, *args, **kwargs):
        role = self.get_object()
        self.get_role_service().delete_role(role)
        return Response(status=status.HTTP_204_NO_CONTENT)


class UserRolesViewSet(CachedReadMixin, viewsets.GenericViewSet):
    """
    Role membership for a single user.

    Admin only.
    """

    permission_classes = [IsQuillAdmin]
    queryset = User.objects.prefetch_related('roles')
    serializer_class = UserRolesSerializer

    @action(detail=True, methods=['get'])
    def roles(self, request, pk=None):
        """Get the user's roles with their permissions."""
        user = self.get_object()
        roles = user.roles.prefetch_related('permissions').order_by('name')
        payload = UserRolesSerializer(user).data
        payload['roles'] = RoleSerializer(roles, many=True).data
        return Response({'user': payload})

    @action(detail=True, methods=['post'], url_path='roles/assign')
    def assign_role(self, request, pk=None):
        """Assign a role to the user."""
        user = self.get_object()
        serializer = RoleAssignmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        RoleService(invalidator=self.invalidator).assign_role(
            user, serializer.validated_data['role']
        )
        return Response({
            'message': 'Role assigned successfully',
            'user': UserRolesSerializer(User.objects.get(pk=user.pk)).data,
        })

    @action(detail=True, methods=['post'], url_path='roles/remove')
    def remove_role(self, request, pk=None):
        """Remove a role from the user."""
        user = self.get_object()
        serializer = RoleAssignmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        RoleService(invalidator=self.invalidator).remove_role(
            user, serializer.validated_data['role']
        )
        return Response({
            'message': 'Role removed successfully',
            'user': UserRolesSerializer(User.objects.get(pk=user.pk)).data,
        })
