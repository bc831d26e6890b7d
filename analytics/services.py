"""
Analytics Services - Statistics over posts, comments and users

This module provides:
- DateRange: optional inclusive calendar-date filter
- StatisticsService: derived read-only views for the statistics endpoints

The service knows nothing about caching; the API layer wraps each call in
``CacheStore.remember``. Every method reflects the current database state.

Conventions:
- Averages over zero rows are 0.0, rounded to 2 decimals otherwise.
- Top-N lists hold at most TOP_N entries. Ties are broken by primary key so
  results are repeatable, but callers must not rely on tie order.
- Hour and weekday buckets use the active time zone (settings.TIME_ZONE).
"""

from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Union

from django.contrib.auth import get_user_model
from django.db.models import Count, QuerySet
from django.db.models.functions import ExtractHour, ExtractWeekDay, TruncDate
from django.utils import timezone
from django.utils.dateparse import parse_date

from accounts.models import Role
from accounts.services import display_name
from blog.models import Comment, Post

User = get_user_model()

TOP_N = 5
ACTIVITY_WINDOW_DAYS = 30
HOURS_PER_DAY = 24

# Index is the weekday number exposed by the API (Sunday=0)
WEEKDAY_NAMES = [
    'Sunday', 'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday'
]

DateLike = Optional[Union[date, str]]


def _coerce_date(value: DateLike) -> Optional[date]:
    """Accept a date or an ISO ``YYYY-MM-DD`` string."""
    if value is None or isinstance(value, date):
        return value
    parsed = parse_date(value)
    if parsed is None:
        raise ValueError(f"Invalid ISO date: {value!r}")
    return parsed


def _ratio(numerator: int, denominator: int) -> float:
    """Average rounded to 2 decimals; 0.0 when there is nothing to average over."""
    if not denominator:
        return 0.0
    return round(numerator / denominator, 2)


def _isoformat(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


class DateRange:
    """
    Helper class for optional date range filtering.

    Both ends are inclusive calendar dates: ``date_to`` covers the whole
    day up to 23:59:59.
    """

    def __init__(self, date_from: DateLike = None, date_to: DateLike = None):
        self.date_from = _coerce_date(date_from)
        self.date_to = _coerce_date(date_to)

    @property
    def is_set(self) -> bool:
        return self.date_from is not None or self.date_to is not None

    def apply(self, queryset: QuerySet, field_name: str = 'created_at') -> QuerySet:
        """Narrow ``queryset`` to rows whose ``field_name`` falls in range."""
        if self.date_from is not None:
            queryset = queryset.filter(**{f'{field_name}__date__gte': self.date_from})
        if self.date_to is not None:
            queryset = queryset.filter(**{f'{field_name}__date__lte': self.date_to})
        return queryset

    def describe(self) -> Dict[str, Optional[str]]:
        return {
            'date_from': _isoformat(self.date_from),
            'date_to': _isoformat(self.date_to),
        }


class StatisticsService:
    """
    Service computing post, comment and user statistics.

    Usage:
        service = StatisticsService()
        stats = service.get_post_statistics(date(2024, 1, 1), None)
    """

    # ==================== POST STATISTICS ====================

    def get_post_statistics(
        self,
        date_from: DateLike = None,
        date_to: DateLike = None
    ) -> Dict[str, Any]:
        """Get post statistics."""
        date_range = DateRange(date_from, date_to)

        return {
            'posts_by_status': self.get_posts_by_status(),
            'posts_by_date_range': self.get_posts_by_date_range(date_range),
            'average_comments_per_post': self.get_average_comments_per_post(),
            'top_commented_posts': self.get_top_commented_posts(),
            'total_posts': Post.objects.count(),
        }

    def get_posts_by_status(self, queryset: Optional[QuerySet] = None) -> Dict[str, int]:
        """Count posts per status; both statuses are always present."""
        if queryset is None:
            queryset = Post.objects.all()

        counts = dict(
            queryset.order_by().values_list('status').annotate(count=Count('id'))
        )
        return {
            status.value: counts.get(status.value, 0)
            for status in (Post.Status.DRAFT, Post.Status.PUBLISHED)
        }

    def get_posts_by_date_range(self, date_range: DateRange) -> Optional[Dict[str, Any]]:
        """Count posts created within the range, or None without a range."""
        if not date_range.is_set:
            return None

        queryset = date_range.apply(Post.objects.all())
        return {
            **date_range.describe(),
            'total': queryset.count(),
            'by_status': self.get_posts_by_status(queryset),
        }

    def get_average_comments_per_post(self) -> float:
        return _ratio(Comment.objects.count(), Post.objects.count())

    def get_top_commented_posts(self) -> List[Dict[str, Any]]:
        posts = Post.objects.select_related('author').annotate(
            comments_count=Count('comments')
        ).order_by('-comments_count', 'id')[:TOP_N]

        return [
            {
                'id': post.id,
                'title': post.title,
                'status': post.status,
                'author': self._author(post.author),
                'comments_count': post.comments_count,
                'created_at': _isoformat(post.created_at),
                'published_at': _isoformat(post.published_at),
            }
            for post in posts
        ]

    # ==================== COMMENT STATISTICS ====================

    def get_comment_statistics(
        self,
        date_from: DateLike = None,
        date_to: DateLike = None
    ) -> Dict[str, Any]:
        """Get comment statistics."""
        date_range = DateRange(date_from, date_to)

        return {
            'total_comments': Comment.objects.count(),
            'comments_by_date_range': self.get_comments_by_date_range(date_range),
            'activity_by_hour': self.get_activity_by_hour(),
            'activity_by_weekday': self.get_activity_by_weekday(),
            'activity_by_date_last_30_days': self.get_activity_by_date(),
            'top_commenters': self.get_top_commenters(),
            'most_commented_posts': self.get_most_commented_posts(),
        }

    def get_comments_by_date_range(self, date_range: DateRange) -> Optional[Dict[str, Any]]:
        if not date_range.is_set:
            return None

        return {
            **date_range.describe(),
            'total': date_range.apply(Comment.objects.all()).count(),
        }

    def get_activity_by_hour(self) -> Dict[int, int]:
        """Comments per hour of day, 24 zero-filled buckets."""
        counts = dict(
            Comment.objects.order_by()
            .annotate(hour=ExtractHour('created_at'))
            .values_list('hour')
            .annotate(count=Count('id'))
        )
        return {hour: counts.get(hour, 0) for hour in range(HOURS_PER_DAY)}

    def get_activity_by_weekday(self) -> List[Dict[str, Any]]:
        """Comments per weekday, Sunday=0 through Saturday=6, zero-filled."""
        # ExtractWeekDay numbers days 1 (Sunday) to 7 (Saturday)
        counts = dict(
            Comment.objects.order_by()
            .annotate(weekday=ExtractWeekDay('created_at'))
            .values_list('weekday')
            .annotate(count=Count('id'))
        )
        return [
            {
                'day': name,
                'day_number': number,
                'count': counts.get(number + 1, 0),
            }
            for number, name in enumerate(WEEKDAY_NAMES)
        ]

    def get_activity_by_date(self) -> List[Dict[str, Any]]:
        """Comments per day over the trailing window; empty days are omitted."""
        since = timezone.now() - timedelta(days=ACTIVITY_WINDOW_DAYS)
        rows = (
            Comment.objects.filter(created_at__gte=since)
            .order_by()
            .annotate(day=TruncDate('created_at'))
            .values('day')
            .annotate(count=Count('id'))
            .order_by('day')
        )
        return [
            {'date': _isoformat(row['day']), 'count': row['count']}
            for row in rows
        ]

    def get_top_commenters(self) -> List[Dict[str, Any]]:
        users = User.objects.annotate(
            comments_count=Count('comments')
        ).filter(comments_count__gt=0).order_by('-comments_count', 'id')[:TOP_N]

        return [
            {'author': self._author(user), 'comments_count': user.comments_count}
            for user in users
        ]

    def get_most_commented_posts(self) -> List[Dict[str, Any]]:
        """Posts with at least one comment, by comment count; no author details."""
        posts = Post.objects.annotate(
            comments_count=Count('comments')
        ).filter(comments_count__gt=0).order_by('-comments_count', 'id')[:TOP_N]

        return [
            {
                'post': {'id': post.id, 'title': post.title, 'status': post.status},
                'comments_count': post.comments_count,
            }
            for post in posts
        ]

    # ==================== USER STATISTICS ====================

    def get_user_statistics(
        self,
        date_from: DateLike = None,
        date_to: DateLike = None
    ) -> Dict[str, Any]:
        """Get user statistics."""
        date_range = DateRange(date_from, date_to)

        return {
            'total_users': User.objects.count(),
            'users_by_date_range': self.get_users_by_date_range(date_range),
            'users_by_role': self.get_users_by_role(),
            'users_without_roles': User.objects.filter(roles__isnull=True).count(),
            'top_authors_by_posts': self.get_top_users('posts'),
            'top_users_by_comments': self.get_top_users('comments'),
            'average_posts_per_user': self.get_average_posts_per_user(),
            'average_comments_per_user': self.get_average_comments_per_user(),
        }

    def get_users_by_date_range(self, date_range: DateRange) -> Optional[Dict[str, Any]]:
        if not date_range.is_set:
            return None

        return {
            **date_range.describe(),
            'total': date_range.apply(User.objects.all(), 'date_joined').count(),
        }

    def get_users_by_role(self) -> Dict[str, int]:
        """Members per role, including roles nobody holds."""
        roles = Role.objects.annotate(members=Count('users')).order_by('name')
        return {role.name: role.members for role in roles}

    def get_top_users(self, relation: str) -> List[Dict[str, Any]]:
        """Top users by number of related ``posts`` or ``comments``."""
        count_field = f'{relation}_count'
        users = User.objects.annotate(
            **{count_field: Count(relation, distinct=True)}
        ).prefetch_related('roles').order_by(f'-{count_field}', 'id')[:TOP_N]

        return [
            {
                **self._author(user),
                'roles': [role.name for role in user.roles.all()],
                count_field: getattr(user, count_field),
            }
            for user in users
        ]

    def get_average_posts_per_user(self) -> float:
        return _ratio(Post.objects.count(), User.objects.count())

    def get_average_comments_per_user(self) -> float:
        return _ratio(Comment.objects.count(), User.objects.count())

    @staticmethod
    def _author(user) -> Dict[str, Any]:
        return {'id': user.id, 'name': display_name(user), 'email': user.email}
