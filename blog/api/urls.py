"""
Blog API URLs.
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .viewsets import CommentViewSet, PostViewSet

app_name = 'blog'

router = DefaultRouter()

# Blog posts
router.register(r'posts', PostViewSet, basename='post')

# Comments
router.register(r'comments', CommentViewSet, basename='comment')

urlpatterns = [
    path('', include(router.urls)),
]
