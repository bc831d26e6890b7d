"""
Blog Serializers - DRF serializers for posts and comments.
"""

from rest_framework import serializers

from accounts.serializers import BasicUserSerializer

from .models import Comment, Post


class CommentSerializer(serializers.ModelSerializer):
    """Serializer for blog comments."""
    author = BasicUserSerializer(read_only=True)

    class Meta:
        model = Comment
        fields = ['id', 'post', 'author', 'body', 'created_at', 'updated_at']
        read_only_fields = fields


class CommentCreateSerializer(serializers.ModelSerializer):
    """Serializer for creating comments."""

    class Meta:
        model = Comment
        fields = ['post', 'body']


class CommentUpdateSerializer(serializers.ModelSerializer):
    """Comments can only have their body edited."""

    class Meta:
        model = Comment
        fields = ['body']


class PostListSerializer(serializers.ModelSerializer):
    """List serializer for blog posts."""
    author = BasicUserSerializer(read_only=True)
    comments_count = serializers.SerializerMethodField()

    class Meta:
        model = Post
        fields = [
            'id', 'title', 'status', 'author', 'comments_count',
            'published_at', 'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_comments_count(self, obj):
        """Use the annotated count when the queryset provides it."""
        count = getattr(obj, 'comments_count', None)
        if count is None:
            count = obj.comments.count()
        return count


class PostDetailSerializer(PostListSerializer):
    """Detail serializer for blog posts, with comments."""
    comments = serializers.SerializerMethodField()

    class Meta(PostListSerializer.Meta):
        fields = PostListSerializer.Meta.fields + ['body', 'comments']
        read_only_fields = fields

    def get_comments(self, obj):
        """Get comments, newest first."""
        comments = obj.comments.select_related('author').order_by('-created_at', '-id')
        return CommentSerializer(comments, many=True).data


class PostWriteSerializer(serializers.ModelSerializer):
    """Serializer for creating and updating posts."""
    status = serializers.ChoiceField(choices=Post.Status.choices, required=False)
    published_at = serializers.DateTimeField(required=False, allow_null=True)

    class Meta:
        model = Post
        fields = ['title', 'body', 'status', 'published_at']


class PostListQuerySerializer(serializers.Serializer):
    """Sorting parameters for the post listing."""
    SORT_FIELDS = ('created_at', 'title', 'published_at')

    sort = serializers.ChoiceField(choices=SORT_FIELDS, required=False, default='created_at')
    order = serializers.ChoiceField(choices=('asc', 'desc'), required=False, default='desc')
