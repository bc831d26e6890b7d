"""
URL configuration for quill project.

All API routes live under ``/api/``.
"""
from django.contrib import admin
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView


urlpatterns = [
    path('admin/', admin.site.urls),

    # ==================== API ====================
    path('api/', include('blog.api.urls', namespace='blog-api')),
    path('api/', include('accounts.api.urls', namespace='accounts-api')),
    path('api/', include('analytics.api.urls', namespace='analytics-api')),

    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
]
