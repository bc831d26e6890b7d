"""
Blog Admin - Admin configuration for posts and comments.

Saves and deletes made here forget the same cache keys as the blog
services, after the admin transaction commits.
"""

from django.contrib import admin

from core.admin import CacheInvalidatingAdmin
from core.cache import Change

from .models import Comment, Post


@admin.register(Post)
class PostAdmin(CacheInvalidatingAdmin):
    list_display = ('title', 'author', 'status', 'published_at', 'created_at')
    list_filter = ('status', 'published_at')
    search_fields = ('title', 'body', 'author__username')
    ordering = ('-created_at',)
    readonly_fields = ('created_at', 'updated_at')
    raw_id_fields = ('author',)

    def save_model(self, request, obj, form, change):
        super().save_model(request, obj, form, change)
        self.after_commit(
            self.invalidator.post_changed,
            obj.pk,
            Change.UPDATED if change else Change.CREATED
        )

    def delete_model(self, request, obj):
        post_id = obj.pk
        super().delete_model(request, obj)
        self.after_commit(self.invalidator.post_changed, post_id, Change.DELETED)

    def delete_queryset(self, request, queryset):
        post_ids = list(queryset.values_list('pk', flat=True))
        super().delete_queryset(request, queryset)
        for post_id in post_ids:
            self.after_commit(self.invalidator.post_changed, post_id, Change.DELETED)


@admin.register(Comment)
class CommentAdmin(CacheInvalidatingAdmin):
    list_display = ('post', 'author', 'created_at')
    search_fields = ('body', 'author__username', 'post__title')
    ordering = ('-created_at',)
    readonly_fields = ('created_at', 'updated_at')
    raw_id_fields = ('post', 'author')

    def save_model(self, request, obj, form, change):
        super().save_model(request, obj, form, change)
        self.after_commit(
            self.invalidator.comment_changed,
            obj.pk,
            obj.post_id,
            Change.UPDATED if change else Change.CREATED
        )

    def delete_model(self, request, obj):
        comment_id, post_id = obj.pk, obj.post_id
        super().delete_model(request, obj)
        self.after_commit(self.invalidator.comment_changed, comment_id, post_id, Change.DELETED)

    def delete_queryset(self, request, queryset):
        rows = list(queryset.values_list('pk', 'post_id'))
        super().delete_queryset(request, queryset)
        for comment_id, post_id in rows:
            self.after_commit(
                self.invalidator.comment_changed, comment_id, post_id, Change.DELETED
            )
