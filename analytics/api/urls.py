"""
Analytics API URLs.
"""

from django.urls import path

from .views import CommentStatsView, PostStatsView, UserStatsView

app_name = 'analytics'

urlpatterns = [
    path('stats/posts/', PostStatsView.as_view(), name='stats-posts'),
    path('stats/comments/', CommentStatsView.as_view(), name='stats-comments'),
    path('stats/users/', UserStatsView.as_view(), name='stats-users'),
]
