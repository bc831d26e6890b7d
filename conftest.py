"""
Quill Test Configuration - pytest fixtures and factories

This module provides:
- factory_boy factories for users, roles, permissions, posts and comments
- Fixtures exposing the factories and DRF API clients
- An autouse fixture that empties the API cache around every test

RUNNING TESTS:
# Run all tests
pytest tests/ -v

# Run by module
pytest tests/test_cache_invalidation.py -v
pytest tests/test_statistics.py -v
"""

import uuid

import pytest
from django.utils import timezone

import factory
from factory.django import DjangoModelFactory

from core.cache import CacheInvalidator, CacheStore


# ============================================================================
# USER FACTORIES
# ============================================================================

class UserFactory(DjangoModelFactory):
    """Factory for the auth User model."""

    class Meta:
        model = 'auth.User'
        django_get_or_create = ('username',)
        skip_postgeneration_save = True

    username = factory.LazyAttribute(lambda o: f"user_{uuid.uuid4().hex[:8]}")
    email = factory.LazyAttribute(lambda o: f"{o.username}@example.com")
    first_name = factory.Faker('first_name')
    last_name = factory.Faker('last_name')
    is_active = True

    @factory.post_generation
    def password(obj, create, extracted, **kwargs):
        obj.set_password(extracted or 'testpass123')
        if create:
            obj.save(update_fields=['password'])


class SuperUserFactory(UserFactory):
    """Factory for superuser accounts."""

    is_staff = True
    is_superuser = True


# ============================================================================
# ROLE FACTORIES
# ============================================================================

class PermissionFactory(DjangoModelFactory):
    """Factory for role permissions."""

    class Meta:
        model = 'accounts.Permission'
        django_get_or_create = ('name',)

    name = factory.Sequence(lambda n: f"permission_{n}")
    description = factory.Faker('sentence', nb_words=6)


class RoleFactory(DjangoModelFactory):
    """Factory for roles. Pass ``users=[...]`` or ``permissions=[...]`` to attach."""

    class Meta:
        model = 'accounts.Role'
        django_get_or_create = ('name',)
        skip_postgeneration_save = True

    name = factory.Sequence(lambda n: f"role_{n}")
    description = factory.Faker('sentence', nb_words=8)

    @factory.post_generation
    def permissions(obj, create, extracted, **kwargs):
        if create and extracted:
            obj.permissions.set(extracted)

    @factory.post_generation
    def users(obj, create, extracted, **kwargs):
        if create and extracted:
            obj.users.set(extracted)


# ============================================================================
# BLOG FACTORIES
# ============================================================================

class PostFactory(DjangoModelFactory):
    """Factory for draft blog posts."""

    class Meta:
        model = 'blog.Post'

    author = factory.SubFactory(UserFactory)
    title = factory.Sequence(lambda n: f"Post title {n}")
    body = factory.Faker('paragraph', nb_sentences=4)
    status = 'draft'
    published_at = None


class PublishedPostFactory(PostFactory):
    """Factory for published blog posts."""

    status = 'published'
    published_at = factory.LazyFunction(timezone.now)


class CommentFactory(DjangoModelFactory):
    """Factory for blog comments."""

    class Meta:
        model = 'blog.Comment'

    post = factory.SubFactory(PostFactory)
    author = factory.SubFactory(UserFactory)
    body = factory.Faker('sentence', nb_words=12)


# ============================================================================
# FACTORY FIXTURES
# ============================================================================

@pytest.fixture
def user_factory(db):
    """Provide UserFactory for tests."""
    return UserFactory


@pytest.fixture
def superuser_factory(db):
    """Provide SuperUserFactory for tests."""
    return SuperUserFactory


@pytest.fixture
def permission_factory(db):
    """Provide PermissionFactory for tests."""
    return PermissionFactory


@pytest.fixture
def role_factory(db):
    """Provide RoleFactory for tests."""
    return RoleFactory


@pytest.fixture
def post_factory(db):
    """Provide PostFactory for tests."""
    return PostFactory


@pytest.fixture
def published_post_factory(db):
    """Provide PublishedPostFactory for tests."""
    return PublishedPostFactory


@pytest.fixture
def comment_factory(db):
    """Provide CommentFactory for tests."""
    return CommentFactory


# ============================================================================
# COMMON FIXTURES
# ============================================================================

@pytest.fixture
def user(db):
    """Create a standard user."""
    return UserFactory()


@pytest.fixture
def admin_user(db):
    """Create a superuser."""
    return SuperUserFactory()


@pytest.fixture
def api_client(db):
    """Provide a DRF API test client."""
    from rest_framework.test import APIClient
    return APIClient()


@pytest.fixture
def authenticated_api_client(db, api_client, user):
    """Provide an authenticated DRF API test client."""
    api_client.force_authenticate(user=user)
    return api_client


@pytest.fixture
def admin_api_client(db, api_client, admin_user):
    """Provide an API client authenticated as a superuser."""
    api_client.force_authenticate(user=admin_user)
    return api_client


# ============================================================================
# CACHE FIXTURES
# ============================================================================

@pytest.fixture
def cache_store():
    """The CacheStore the API uses, over the test locmem backend."""
    return CacheStore.from_alias()


@pytest.fixture
def invalidator(cache_store):
    """CacheInvalidator wired with the default rules."""
    return CacheInvalidator.default(cache_store)


@pytest.fixture(autouse=True)
def clear_api_cache(cache_store):
    """Start and finish every test with an empty cache."""
    cache_store.flush()
    yield
    cache_store.flush()
