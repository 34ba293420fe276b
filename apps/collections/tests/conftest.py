# apps/collections/tests/conftest.py
import pytest
from rest_framework.test import APIClient

from apps.catalog.tests.factories import CategoryFactory, ProductFactory, UserFactory
from apps.collections.models import CollectionRule
from .factories import CollectionFactory, CollectionRuleFactory


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


@pytest.fixture
def category_scenario():
    """
    One collection with rule [category equals cat-1] and three active
    products: P1 in cat-1, P2 in cat-2, P3 without category.
    """
    cat_1 = CategoryFactory(name='cat-1')
    cat_2 = CategoryFactory(name='cat-2')
    collection = CollectionFactory()
    CollectionRuleFactory(
        collection=collection,
        rule_type=CollectionRule.TYPE_CATEGORY,
        operator=CollectionRule.OP_EQUALS,
        value=str(cat_1.pk),
    )
    return {
        'collection': collection,
        'p1': ProductFactory(name='P1', category=cat_1),
        'p2': ProductFactory(name='P2', category=cat_2),
        'p3': ProductFactory(name='P3', category=None),
    }
