# apps/catalog/tests/conftest.py
import pytest
from rest_framework.test import APIClient

from .factories import UserFactory


@pytest.fixture
def user():
    """Create a regular user."""
    return UserFactory()


@pytest.fixture
def staff_user():
    """Create a staff user allowed to use the back-office API."""
    return UserFactory(is_staff=True)


@pytest.fixture
def api_client():
    """Create API client."""
    return APIClient()


@pytest.fixture
def staff_client(api_client, staff_user):
    """Create API client authenticated as staff."""
    api_client.force_authenticate(user=staff_user)
    return api_client
