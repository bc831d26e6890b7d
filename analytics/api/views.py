"""
Analytics API Views - Cached statistics endpoints

Each endpoint is cached for 15 minutes. Requests without a date range use
the base key (``api:stats:posts``), which writes invalidate. Requests with
a range use ``api:stats:posts:{from}:{to}``; those entries are never
invalidated and expire through TTL only.
"""

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.cache import CacheKeyBuilder, STATS_CACHE_TIMEOUT
from core.cache.keys import STATS_COMMENTS, STATS_POSTS, STATS_USERS
from core.viewsets import CachedReadMixin

from ..services import StatisticsService
from .serializers import DateRangeSerializer

DATE_RANGE_PARAMETERS = [
    OpenApiParameter('date_from', OpenApiTypes.DATE, description='Inclusive start date'),
    OpenApiParameter('date_to', OpenApiTypes.DATE, description='Inclusive end date'),
]


class BaseStatsView(CachedReadMixin, APIView):
    """
    Base view for a cached statistics resource.

    Subclasses set ``resource`` and implement ``compute``.
    """

    permission_classes = [IsAuthenticated]
    resource = None

    def get_statistics_service(self) -> StatisticsService:
        return StatisticsService()

    def compute(self, service, date_from, date_to):
        raise NotImplementedError

    def get(self, request):
        params = DateRangeSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        date_from = params.validated_data.get('date_from')
        date_to = params.validated_data.get('date_to')

        cache_key = CacheKeyBuilder.stats_key(self.resource, date_from, date_to)
        service = self.get_statistics_service()

        data = self.remember(
            cache_key,
            STATS_CACHE_TIMEOUT,
            lambda: self.compute(service, date_from, date_to)
        )
        return Response(data)


class PostStatsView(BaseStatsView):
    """Post counts by status, comment averages and most commented posts."""

    resource = STATS_POSTS

    @extend_schema(
        summary="Post statistics",
        tags=['Statistics'],
        parameters=DATE_RANGE_PARAMETERS,
        responses={200: OpenApiTypes.OBJECT},
    )
    def get(self, request):
        return super().get(request)

    def compute(self, service, date_from, date_to):
        return service.get_post_statistics(date_from, date_to)


class CommentStatsView(BaseStatsView):
    """Comment totals and activity histograms."""

    resource = STATS_COMMENTS

    @extend_schema(
        summary="Comment statistics",
        tags=['Statistics'],
        parameters=DATE_RANGE_PARAMETERS,
        responses={200: OpenApiTypes.OBJECT},
    )
    def get(self, request):
        return super().get(request)

    def compute(self, service, date_from, date_to):
        return service.get_comment_statistics(date_from, date_to)


class UserStatsView(BaseStatsView):
    """User totals, role membership and most active users."""

    resource = STATS_USERS

    @extend_schema(
        summary="User statistics",
        tags=['Statistics'],
        parameters=DATE_RANGE_PARAMETERS,
        responses={200: OpenApiTypes.OBJECT},
    )
    def get(self, request):
        return super().get(request)

    def compute(self, service, date_from, date_to):
        return service.get_user_statistics(date_from, date_to)
