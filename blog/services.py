"""
Blog Services - Write path for posts and comments

Each operation persists inside ``transaction.atomic()`` and, once the block
has exited, dispatches cache invalidation synchronously. A client that
writes and then reads an unparameterized statistics view sees its write.

Publication rules:
- status defaults to draft on creation
- publishing without an explicit ``published_at`` stamps the current time
- moving back to draft clears ``published_at``
"""

import logging
from typing import Any, Dict, Optional

from django.db import transaction
from django.utils import timezone

from core.cache import CacheInvalidator, Change

from .models import Comment, Post

logger = logging.getLogger(__name__)


def prepare_post_data(data: Dict[str, Any], post: Optional[Post] = None) -> Dict[str, Any]:
    """Apply publication rules to incoming post fields."""
    data = dict(data)
    if post is None and data.get('status') is None:
        data['status'] = Post.Status.DRAFT

    status = data.get('status')

    if status == Post.Status.PUBLISHED:
        already_published = post is not None and post.is_published
        if data.get('published_at') is None and not already_published:
            data['published_at'] = timezone.now()
        elif data.get('published_at') is None:
            # Keep the original publication time
            data.pop('published_at', None)
    elif status == Post.Status.DRAFT:
        data['published_at'] = None

    return data


class PostService:
    """
    Create, update, publish and delete posts.

    Usage:
        service = PostService()
        post = service.create(user, {'title': 'Hello', 'body': '...'})
        service.publish(post)
    """

    def __init__(self, invalidator: Optional[CacheInvalidator] = None):
        self.invalidator = invalidator or CacheInvalidator.default()

    def create(self, author, data: Dict[str, Any]) -> Post:
        data = prepare_post_data(data)
        with transaction.atomic():
            post = Post.objects.create(author=author, **data)

        self.invalidator.post_changed(post.pk, Change.CREATED)
        logger.info(f"Post created: id={post.pk} author={author.pk} status={post.status}")
        return post

    def update(self, post: Post, data: Dict[str, Any]) -> Post:
        data = prepare_post_data(data, post)
        with transaction.atomic():
            for field, value in data.items():
                setattr(post, field, value)
            post.save()

        self.invalidator.post_changed(post.pk, Change.UPDATED)
        logger.info(f"Post updated: id={post.pk} status={post.status}")
        return post

    def publish(self, post: Post) -> Post:
        return self.update(post, {'status': Post.Status.PUBLISHED})

    def unpublish(self, post: Post) -> Post:
        return self.update(post, {'status': Post.Status.DRAFT})

    def delete(self, post: Post) -> None:
        post_id = post.pk
        with transaction.atomic():
            post.delete()

        self.invalidator.post_changed(post_id, Change.DELETED)
        logger.info(f"Post deleted: id={post_id}")


class CommentService:
    """Create, update and delete comments."""

    def __init__(self, invalidator: Optional[CacheInvalidator] = None):
        self.invalidator = invalidator or CacheInvalidator.default()

    def create(self, author, post: Post, body: str) -> Comment:
        with transaction.atomic():
            comment = Comment.objects.create(author=author, post=post, body=body)

        self.invalidator.comment_changed(comment.pk, post.pk, Change.CREATED)
        logger.info(f"Comment created: id={comment.pk} post={post.pk} author={author.pk}")
        return comment

    def update(self, comment: Comment, body: str) -> Comment:
        with transaction.atomic():
            comment.body = body
            comment.save()

        self.invalidator.comment_changed(comment.pk, comment.post_id, Change.UPDATED)
        return comment

    def delete(self, comment: Comment) -> None:
        comment_id = comment.pk
        post_id = comment.post_id
        with transaction.atomic():
            comment.delete()

        self.invalidator.comment_changed(comment_id, post_id, Change.DELETED)
        logger.info(f"Comment deleted: id={comment_id} post={post_id}")
