"""
Tests for Blog API.

This module tests the blog API endpoints including:
- Post listing with sorting, filtering and cached pages
- Cached post detail and its invalidation
- Post and comment writes through the service layer
- Publication rules
"""

import pytest
from django.urls import reverse
from rest_framework import status

from blog.models import Post
from blog.services import prepare_post_data


def list_key(page=1, sort='created_at', order='desc', per_page=15):
    return f'api:posts:page:{page}:sort:{sort}:{order}:per_page:{per_page}'


@pytest.fixture
def author_client(api_client, user, role_factory, permission_factory):
    """API client for ``user``, who holds the ``author`` role."""
    role_factory(
        name='author',
        permissions=[permission_factory(name='create_posts')],
        users=[user],
    )
    api_client.force_authenticate(user=user)
    return api_client, user


@pytest.fixture
def editor_client(api_client, user_factory, role_factory):
    """API client for a member of the ``editor`` role."""
    editor = user_factory()
    role_factory(name='editor', users=[editor])
    api_client.force_authenticate(user=editor)
    return api_client, editor


class TestPostList:
    """Tests for listing posts."""

    @pytest.mark.django_db
    def test_list_posts_public(self, api_client, post_factory):
        post_factory.create_batch(2)

        response = api_client.get(reverse('blog-api:post-list'))

        assert response.status_code == status.HTTP_200_OK
        assert response.json()['count'] == 2

    @pytest.mark.django_db
    def test_unfiltered_page_is_cached(self, api_client, cache_store, post_factory):
        post_factory()
        url = reverse('blog-api:post-list')

        api_client.get(url)
        post_factory()

        assert cache_store.backend.get(list_key()) is not None
        # Pages expire through TTL only
        assert api_client.get(url).json()['count'] == 1

    @pytest.mark.django_db
    def test_page_key_tracks_query(self, api_client, cache_store):
        api_client.get(
            reverse('blog-api:post-list'),
            {'sort': 'title', 'order': 'asc', 'per_page': 5}
        )

        assert cache_store.backend.get(list_key(sort='title', order='asc', per_page=5)) is not None

    @pytest.mark.django_db
    def test_filtered_listing_not_cached(self, api_client, cache_store, post_factory,
                                         published_post_factory):
        post_factory()
        published_post_factory()

        response = api_client.get(reverse('blog-api:post-list'), {'status': 'published'})

        assert response.json()['count'] == 1
        assert cache_store.backend.get(list_key()) is None

    @pytest.mark.django_db
    def test_sort_by_title(self, api_client, post_factory):
        post_factory(title='Bravo')
        post_factory(title='Alpha')

        response = api_client.get(
            reverse('blog-api:post-list'), {'sort': 'title', 'order': 'asc'}
        )

        assert [p['title'] for p in response.json()['results']] == ['Alpha', 'Bravo']

    @pytest.mark.django_db
    def test_invalid_sort_rejected(self, api_client):
        response = api_client.get(reverse('blog-api:post-list'), {'sort': 'body'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    @pytest.mark.django_db
    def test_search(self, api_client, post_factory):
        post_factory(title='Caching in practice')
        post_factory(title='Gardening')

        response = api_client.get(reverse('blog-api:post-list'), {'search': 'cach'})

        assert [p['title'] for p in response.json()['results']] == ['Caching in practice']


class TestPostDetail:
    """Tests for retrieving posts."""

    @pytest.mark.django_db
    def test_retrieve_caches_post(self, api_client, cache_store, post_factory, comment_factory):
        post = post_factory()
        comment_factory(post=post)

        response = api_client.get(reverse('blog-api:post-detail', args=[post.pk]))

        assert response.status_code == status.HTTP_200_OK
        assert len(response.json()['comments']) == 1
        assert cache_store.backend.get(f'api:post:{post.pk}') is not None

    @pytest.mark.django_db
    def test_missing_post_not_cached(self, api_client, cache_store):
        response = api_client.get(reverse('blog-api:post-detail', args=[999]))

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert cache_store.backend.get('api:post:999') is None

    @pytest.mark.django_db
    def test_update_refreshes_detail(self, author_client, post_factory):
        client, user = author_client
        post = post_factory(author=user, title='Before')
        url = reverse('blog-api:post-detail', args=[post.pk])
        client.get(url)

        response = client.patch(url, {'title': 'After'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.json()['message'] == 'Post updated successfully'
        assert client.get(url).json()['title'] == 'After'

    @pytest.mark.django_db
    def test_comment_refreshes_detail(self, author_client, post_factory):
        client, user = author_client
        post = post_factory()
        url = reverse('blog-api:post-detail', args=[post.pk])
        assert client.get(url).json()['comments'] == []

        client.post(
            reverse('blog-api:comment-list'),
            {'post': post.pk, 'body': 'Great read'},
            format='json'
        )

        assert len(client.get(url).json()['comments']) == 1

    @pytest.mark.django_db
    def test_zero_padded_id_shares_cache_entry(self, author_client, cache_store, post_factory):
        client, user = author_client
        post = post_factory(author=user, title='Original')
        padded_url = f'/api/posts/0{post.pk}/'

        assert client.get(padded_url).json()['title'] == 'Original'
        assert cache_store.backend.get(f'api:post:{post.pk}') is not None
        assert cache_store.backend.get(f'api:post:0{post.pk}') is None

        response = client.patch(
            reverse('blog-api:post-detail', args=[post.pk]), {'title': 'Changed'}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert client.get(padded_url).json()['title'] == 'Changed'

    @pytest.mark.django_db
    def test_non_numeric_id_not_found(self, api_client, cache_store):
        response = api_client.get('/api/posts/abc/')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert cache_store.backend.get('api:post:abc') is None


class TestPostWrites:
    """Tests for creating, updating and deleting posts."""

    @pytest.mark.django_db
    def test_create_requires_authentication(self, api_client):
        response = api_client.post(
            reverse('blog-api:post-list'), {'title': 'T', 'body': 'B'}, format='json'
        )

        assert response.status_code in [status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN]

    @pytest.mark.django_db
    def test_create_defaults_to_draft(self, author_client, cache_store):
        client, user = author_client
        cache_store.remember('api:stats:posts', 900, lambda: {'total_posts': 0})

        response = client.post(
            reverse('blog-api:post-list'), {'title': 'Hello', 'body': 'World'}, format='json'
        )

        assert response.status_code == status.HTTP_201_CREATED
        body = response.json()
        assert body['message'] == 'Post created successfully'
        assert body['post']['status'] == 'draft'
        assert body['post']['published_at'] is None
        assert body['post']['author']['id'] == user.pk
        assert cache_store.backend.get('api:stats:posts') is None

    @pytest.mark.django_db
    def test_create_published_stamps_time(self, author_client):
        client, _ = author_client

        response = client.post(
            reverse('blog-api:post-list'),
            {'title': 'Live', 'body': 'Now', 'status': 'published'},
            format='json'
        )

        assert response.json()['post']['published_at'] is not None

    @pytest.mark.django_db
    def test_duplicate_title_rejected(self, author_client, post_factory):
        client, _ = author_client
        post_factory(title='Taken')

        response = client.post(
            reverse('blog-api:post-list'), {'title': 'Taken', 'body': 'B'}, format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    @pytest.mark.django_db
    def test_non_author_cannot_update(self, author_client, post_factory):
        client, _ = author_client
        post = post_factory()

        response = client.patch(
            reverse('blog-api:post-detail', args=[post.pk]), {'title': 'Mine'}, format='json'
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    @pytest.mark.django_db
    def test_admin_can_delete_any_post(self, admin_api_client, cache_store, post_factory):
        post = post_factory()
        cache_store.remember(f'api:post:{post.pk}', 300, lambda: {'id': post.pk})

        response = admin_api_client.delete(reverse('blog-api:post-detail', args=[post.pk]))

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {'message': 'Post deleted successfully'}
        assert not Post.objects.filter(pk=post.pk).exists()
        assert cache_store.backend.get(f'api:post:{post.pk}') is None

    @pytest.mark.django_db
    def test_create_requires_create_posts_permission(self, authenticated_api_client):
        response = authenticated_api_client.post(
            reverse('blog-api:post-list'), {'title': 'T', 'body': 'B'}, format='json'
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert not Post.objects.filter(title='T').exists()

    @pytest.mark.django_db
    def test_admin_can_create_without_role(self, admin_api_client):
        response = admin_api_client.post(
            reverse('blog-api:post-list'), {'title': 'T', 'body': 'B'}, format='json'
        )

        assert response.status_code == status.HTTP_201_CREATED

    @pytest.mark.django_db
    def test_editor_can_update_any_post(self, editor_client, post_factory):
        client, _ = editor_client
        post = post_factory(title='Before')

        response = client.patch(
            reverse('blog-api:post-detail', args=[post.pk]), {'title': 'Edited'}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        post.refresh_from_db()
        assert post.title == 'Edited'

    @pytest.mark.django_db
    def test_editor_can_delete_any_post(self, editor_client, post_factory):
        client, _ = editor_client
        post = post_factory()

        response = client.delete(reverse('blog-api:post-detail', args=[post.pk]))

        assert response.status_code == status.HTTP_200_OK
        assert not Post.objects.filter(pk=post.pk).exists()


class TestCommentWrites:
    """Tests for comment endpoints."""

    @pytest.mark.django_db
    def test_list_comments_for_post(self, api_client, post_factory, comment_factory):
        post = post_factory()
        comment_factory.create_batch(2, post=post)
        comment_factory()

        response = api_client.get(reverse('blog-api:comment-list'), {'post': post.pk})

        assert response.json()['count'] == 2

    @pytest.mark.django_db
    def test_create_comment(self, author_client, cache_store, post_factory):
        client, user = author_client
        post = post_factory()
        cache_store.remember('api:stats:comments', 900, lambda: {'total_comments': 0})

        response = client.post(
            reverse('blog-api:comment-list'),
            {'post': post.pk, 'body': 'Hello'},
            format='json'
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()['author']['id'] == user.pk
        assert cache_store.backend.get('api:stats:comments') is None

    @pytest.mark.django_db
    def test_non_author_cannot_delete(self, author_client, comment_factory):
        client, _ = author_client
        comment = comment_factory()

        response = client.delete(reverse('blog-api:comment-detail', args=[comment.pk]))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    @pytest.mark.django_db
    def test_author_can_edit(self, author_client, comment_factory):
        client, user = author_client
        comment = comment_factory(author=user)

        response = client.patch(
            reverse('blog-api:comment-detail', args=[comment.pk]),
            {'body': 'Edited'},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()['body'] == 'Edited'

    @pytest.mark.django_db
    def test_admin_can_delete(self, admin_api_client, comment_factory):
        comment = comment_factory()

        response = admin_api_client.delete(reverse('blog-api:comment-detail', args=[comment.pk]))

        assert response.status_code == status.HTTP_204_NO_CONTENT

    @pytest.mark.django_db
    def test_editor_can_edit_any_comment(self, editor_client, comment_factory):
        client, _ = editor_client
        comment = comment_factory()

        response = client.patch(
            reverse('blog-api:comment-detail', args=[comment.pk]),
            {'body': 'Moderated'},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK


class TestMyPosts:
    """Tests for /api/posts/my-posts/."""

    @pytest.mark.django_db
    def test_requires_authentication(self, api_client):
        response = api_client.get(reverse('blog-api:post-my-posts'))

        assert response.status_code in [status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN]

    @pytest.mark.django_db
    def test_lists_only_own_posts(self, author_client, post_factory, published_post_factory):
        client, user = author_client
        draft = post_factory(author=user)
        published = published_post_factory(author=user)
        post_factory()

        response = client.get(reverse('blog-api:post-my-posts'))

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body['count'] == 2
        assert [p['id'] for p in body['results']] == [published.pk, draft.pk]
        assert {p['author']['id'] for p in body['results']} == {user.pk}

    @pytest.mark.django_db
    def test_paginated(self, author_client, post_factory):
        client, user = author_client
        post_factory.create_batch(17, author=user)

        response = client.get(reverse('blog-api:post-my-posts'))

        assert response.json()['count'] == 17
        assert len(response.json()['results']) == 15

    @pytest.mark.django_db
    def test_not_cached(self, author_client, cache_store, post_factory):
        client, user = author_client
        url = reverse('blog-api:post-my-posts')
        client.get(url)

        post_factory(author=user)

        assert client.get(url).json()['count'] == 1
        assert cache_store.backend.get(list_key()) is None


class TestPublicationRules:
    """Tests for prepare_post_data()."""

    def test_new_post_defaults_to_draft(self):
        data = prepare_post_data({'title': 'T'})

        assert data['status'] == Post.Status.DRAFT
        assert data['published_at'] is None

    def test_publishing_stamps_time(self):
        data = prepare_post_data({'status': Post.Status.PUBLISHED})

        assert data['published_at'] is not None

    def test_explicit_published_at_kept(self):
        stamp = object()
        data = prepare_post_data({'status': Post.Status.PUBLISHED, 'published_at': stamp})

        assert data['published_at'] is stamp

    def test_republishing_keeps_original_time(self):
        post = Post(status=Post.Status.PUBLISHED)

        data = prepare_post_data({'status': Post.Status.PUBLISHED}, post)

        assert 'published_at' not in data

    def test_unpublishing_clears_time(self):
        post = Post(status=Post.Status.PUBLISHED)

        data = prepare_post_data({'status': Post.Status.DRAFT}, post)

        assert data['published_at'] is None
