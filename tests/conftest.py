"""
Pytest configuration and fixtures for the stock ledger tests.
"""
import cloudinary
import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from apps.core.principal import Principal
from apps.inventory.models import MovementKind, Product, StockMovement
from tests.helpers import at

User = get_user_model()

TEST_CLOUD_NAME = 'stock-test'


@pytest.fixture
def api_client():
    """API client for testing."""
    return APIClient()


@pytest.fixture
def stock_user(db):
    """Create a user allowed to manage stock."""
    return User.objects.create_user(
        username='stock_test',
        email='stock@test.com',
        password='test_stock_123'
    )


@pytest.fixture
def principal(stock_user):
    return Principal.from_user(stock_user)


@pytest.fixture
def authenticated_client(api_client, stock_user):
    """API client authenticated as the stock user."""
    api_client.force_authenticate(user=stock_user)
    return api_client


@pytest.fixture
def jwt_client(api_client, stock_user):
    """API client with a JWT bearer token for the stock user."""
    from rest_framework_simplejwt.tokens import RefreshToken

    refresh = RefreshToken.for_user(stock_user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def screwdriver(db):
    return Product.objects.create(name='Destornillador', code='DST-001', photo='')


@pytest.fixture
def hammer(db):
    return Product.objects.create(
        name='Martillo',
        code='MRT-002',
        photo='https://cdn.example.com/martillo.png'
    )


@pytest.fixture
def drill(db):
    return Product.objects.create(name='Taladro', code='TLD-003', photo='productos/taladro')


@pytest.fixture
def make_movement(db):
    """Factory writing ledger rows directly, bypassing the service."""
    def _make(product, current, moved_at, initial=None, minimum=5, maximum=30,
              kind=MovementKind.INITIAL):
        return StockMovement.objects.create(
            product=product,
            initial_quantity=current if initial is None else initial,
            current_quantity=current,
            minimum_stock=minimum,
            maximum_stock=maximum,
            kind=kind,
            moved_at=moved_at,
        )
    return _make


@pytest.fixture
def stocked_hammer(hammer, make_movement):
    """Hammer with an initial movement of 20 units."""
    make_movement(hammer, current=20, moved_at=at(9))
    return hammer


@pytest.fixture(autouse=True)
def cloudinary_test_config():
    """Point the Cloudinary SDK at a fixed test cloud."""
    cloudinary.config(cloud_name=TEST_CLOUD_NAME, secure=True)
    yield
    cloudinary.config(cloud_name=TEST_CLOUD_NAME, secure=True)


@pytest.fixture(autouse=True)
def enable_db_access_for_all_tests(db):
    """
    Enable database access for all tests.
    """
    pass
