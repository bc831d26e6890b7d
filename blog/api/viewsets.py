"""
Blog API ViewSets - DRF ViewSets for posts and comments.

Caching:
- Post list pages cached for 5 minutes per page/sort/order/per_page key;
  filtered listings are never cached. Pages are not invalidated on writes
  and expire through TTL.
- Single posts cached for 5 minutes under ``api:post:{id}``; forgotten when
  the post, or one of its comments, changes. Lookups accept digits only and
  the key uses the integer id, so ``/posts/05/`` shares ``api:post:5``.
- ``my-posts`` lists the caller's own posts and is never cached.
"""

from django.db.models import Count, Q
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated, IsAuthenticatedOrReadOnly
from rest_framework.response import Response
import django_filters

from core.cache import CacheKeyBuilder, POST_CACHE_TIMEOUT, POST_LIST_CACHE_TIMEOUT
from core.permissions import CanCreatePosts, IsAuthorOrModerator
from core.viewsets import CachedReadMixin

from ..models import Comment, Post
from ..serializers import (
    CommentCreateSerializer,
    CommentSerializer,
    CommentUpdateSerializer,
    PostDetailSerializer,
    PostListQuerySerializer,
    PostListSerializer,
    PostWriteSerializer,
)
from ..services import CommentService, PostService


class PostPagination(PageNumberPagination):
    """Page-number pagination with a client-chosen page size."""
    page_size = 15
    page_size_query_param = 'per_page'
    max_page_size = 100


class PostFilter(django_filters.FilterSet):
    """Filter for blog posts."""
    status = django_filters.ChoiceFilter(choices=Post.Status.choices)
    author = django_filters.NumberFilter(field_name='author_id')
    from_date = django_filters.DateFilter(field_name='created_at__date', lookup_expr='gte')
    to_date = django_filters.DateFilter(field_name='created_at__date', lookup_expr='lte')
    search = django_filters.CharFilter(method='filter_search')

    def filter_search(self, queryset, name, value):
        """Full-text search in title and body."""
        return queryset.filter(
            Q(title__icontains=value) | Q(body__icontains=value)
        )

    class Meta:
        model = Post
        fields = ['status', 'author', 'from_date', 'to_date', 'search']


class PostViewSet(CachedReadMixin, viewsets.ModelViewSet):
    """
    ViewSet for blog posts.

    Anyone can read. Creating requires the ``create_posts`` permission;
    authors edit their own posts and editors or admins edit any post.
    """
    permission_classes = [IsAuthenticatedOrReadOnly, CanCreatePosts, IsAuthorOrModerator]
    lookup_value_regex = r'\d+'
    pagination_class = PostPagination
    filterset_class = PostFilter

    def get_queryset(self):
        """Posts with author and comment count, in the requested order."""
        queryset = Post.objects.select_related('author').annotate(
            comments_count=Count('comments')
        )

        if self.action == 'list':
            params = self.get_sort_params()
            prefix = '-' if params['order'] == 'desc' else ''
            queryset = queryset.order_by(f"{prefix}{params['sort']}", f'{prefix}id')

        return queryset

    def get_serializer_class(self):
        """Return appropriate serializer."""
        if self.action == 'retrieve':
            return PostDetailSerializer
        if self.action in ('create', 'update', 'partial_update'):
            return PostWriteSerializer
        return PostListSerializer

    def get_post_service(self) -> PostService:
        return PostService(invalidator=self.invalidator)

    def get_sort_params(self):
        serializer = PostListQuerySerializer(data=self.request.query_params)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data

    def has_filters(self) -> bool:
        return any(
            self.request.query_params.get(name)
            for name in PostFilter.base_filters
        )

    def list(self, request, *args, **kwargs):
        """List posts, caching unfiltered pages."""
        if self.has_filters():
            return super().list(request, *args, **kwargs)

        params = self.get_sort_params()
        page_number = request.query_params.get(self.paginator.page_query_param, 1)
        per_page = self.paginator.get_page_size(request)
        cache_key = CacheKeyBuilder.post_list_key(
            page_number, params['sort'], params['order'], per_page
        )

        def compute():
            return dict(super(PostViewSet, self).list(request, *args, **kwargs).data)

        return Response(self.remember(cache_key, POST_LIST_CACHE_TIMEOUT, compute))

    def retrieve(self, request, *args, **kwargs):
        """Get a post with its comments, cached per post."""
        post_id = int(kwargs[self.lookup_url_kwarg or self.lookup_field])

        def compute():
            return dict(PostDetailSerializer(self.get_object()).data)

        return Response(self.remember(
            CacheKeyBuilder.post_key(post_id), POST_CACHE_TIMEOUT, compute
        ))

    @action(detail=False, methods=['get'], url_path='my-posts',
            permission_classes=[IsAuthenticated])
    def my_posts(self, request):
        """Posts written by the current user, newest first, drafts included."""
        queryset = self.get_queryset().filter(author=request.user).order_by(
            '-created_at', '-id'
        )
        page = self.paginate_queryset(queryset)
        serializer = PostListSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def create(self, request, *args, **kwargs):
        serializer = PostWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        post = self.get_post_service().create(request.user, serializer.validated_data)
        return Response(
            {
                'message': 'Post created successfully',
                'post': PostListSerializer(post).data,
            },
            status=status.HTTP_201_CREATED
        )

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        post = self.get_object()
        serializer = PostWriteSerializer(post, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        post = self.get_post_service().update(post, serializer.validated_data)
        return Response({
            'message': 'Post updated successfully',
            'post': PostListSerializer(post).data,
        })

    def destroy(self, request, *args, **kwargs):
        post = self.get_object()
        self.get_post_service().delete(post)
        return Response({'message': 'Post deleted successfully'})


class CommentViewSet(CachedReadMixin, viewsets.ModelViewSet):
    """
    ViewSet for blog comments.

    Anyone can read comments and authenticated users can create them.
    Authors edit their own comments; editors and admins edit any comment.
    """
    permission_classes = [IsAuthenticatedOrReadOnly, IsAuthorOrModerator]
    lookup_value_regex = r'\d+'

    def get_serializer_class(self):
        """Return appropriate serializer."""
        if self.action == 'create':
            return CommentCreateSerializer
        if self.action in ('update', 'partial_update'):
            return CommentUpdateSerializer
        return CommentSerializer

    def get_queryset(self):
        """Filter comments by post if specified."""
        queryset = Comment.objects.select_related('author')
        post_id = self.request.query_params.get('post')

        if post_id:
            queryset = queryset.filter(post_id=post_id)

        return queryset.order_by('-created_at', '-id')

    def get_comment_service(self) -> CommentService:
        return CommentService(invalidator=self.invalidator)

    def create(self, request, *args, **kwargs):
        serializer = CommentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        comment = self.get_comment_service().create(
            request.user,
            serializer.validated_data['post'],
            serializer.validated_data['body']
        )
        return Response(CommentSerializer(comment).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        comment = self.get_object()
        serializer = CommentUpdateSerializer(comment, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        body = serializer.validated_data.get('body', comment.body)
        comment = self.get_comment_service().update(comment, body)
        return Response(CommentSerializer(comment).data)

    def destroy(self, request, *args, **kwargs):
        comment = self.get_object()
        self.get_comment_service().delete(comment)
        return Response(status=status.HTTP_204_NO_CONTENT)
