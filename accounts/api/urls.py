"""
Accounts API URLs.
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .viewsets import MetaRolesView, RoleViewSet, UserRolesViewSet

app_name = 'accounts'

router = DefaultRouter()

# Roles
router.register(r'roles', RoleViewSet, basename='role')

# Role membership
router.register(r'users', UserRolesViewSet, basename='user')

urlpatterns = [
    path('', include(router.urls)),
    path('meta/roles/', MetaRolesView.as_view(), name='meta-roles'),
]
