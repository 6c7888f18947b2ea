"""
Being Happy — Root conftest for pytest

Shared fixtures available to all test modules.

@file conftest.py
"""

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from tests.factories import AdminUserFactory, UserFactory


@pytest.fixture(autouse=True)
def _clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def api_client():
    """Unauthenticated DRF test client."""
    return APIClient()


@pytest.fixture
def user(db):
    """Active user with default password TestPass2026!"""
    return UserFactory()


@pytest.fixture
def admin_user(db):
    """ADMIN-role user with default password TestPass2026!"""
    return AdminUserFactory()


@pytest.fixture
def authenticated_client(api_client, user):
    """API client authenticated as a regular user."""
    api_client.force_authenticate(user=user)
    return api_client


@pytest.fixture
def admin_client(api_client, admin_user):
    """API client authenticated as an admin."""
    api_client.force_authenticate(user=admin_user)
    return api_client


@pytest.fixture
def offline(settings):
    """Force the connectivity precondition to fail."""
    settings.OFFLINE_MODE = True
    return settings
