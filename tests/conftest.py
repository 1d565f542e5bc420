"""
Shared fixtures for the API and service test suites.
"""

from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from core.models import Product

User = get_user_model()


@pytest.fixture(autouse=True)
def clear_cache(db):
    """Clear Django cache before each test to reset throttle limits."""
    from django.core.cache import cache
    cache.clear()


@pytest.fixture
def api_client():
    """Provide API client for testing."""
    return APIClient()


def bearer(client, user):
    """Authenticate ``client`` as ``user`` with a fresh access token."""
    token = RefreshToken.for_user(user).access_token
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
    return client


@pytest.fixture
def buyer(db):
    """Create a regular user who places orders."""
    return User.objects.create_user(
        username='alice',
        email='alice@example.com',
        password='SecurePass123!',
        full_name='Alice Buyer',
        address='12 High Street'
    )


@pytest.fixture
def other_buyer(db):
    return User.objects.create_user(
        username='bob',
        email='bob@example.com',
        password='SecurePass123!',
        full_name='Bob Buyer'
    )


@pytest.fixture
def admin_user(db):
    """Create a user with the ADMIN role."""
    return User.objects.create_user(
        username='admin',
        email='admin@example.com',
        password='AdminPass123!',
        role=User.ROLE_ADMIN
    )


@pytest.fixture
def provider(db):
    return User.objects.create_user(
        username='coach',
        email='coach@example.com',
        password='CoachPass123!',
        service_type='Cricket Coaching'
    )


@pytest.fixture
def bat(db):
    """A tangible product with 10 units in stock at 9.99."""
    return Product.objects.create(
        name='Pro Cricket Bat',
        description='English willow',
        price=Decimal('9.99'),
        stock=10,
        category='cricket',
        item_type=Product.TYPE_PRODUCT
    )


@pytest.fixture
def coaching(db, provider):
    """A service offered by ``provider``; services carry no stock."""
    return Product.objects.create(
        name='Cricket Coaching',
        description='One hour session',
        price=Decimal('25.00'),
        stock=None,
        category='cricket',
        item_type=Product.TYPE_SERVICE,
        provider=provider
    )


@pytest.fixture
def buyer_client(api_client, buyer):
    return bearer(api_client, buyer)


@pytest.fixture
def admin_client(admin_user):
    return bearer(APIClient(), admin_user)


@pytest.fixture
def authenticate():
    """Return the helper that attaches a bearer token for a user to a client."""
    return bearer
