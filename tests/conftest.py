"""Pytest configuration and fixtures."""

import os
from collections.abc import Generator
from typing import Any
from unittest.mock import MagicMock, patch
from uuid import UUID

import pytest
from fastapi.testclient import TestClient

# Set test environment variables before importing application modules
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SECRET_KEY", "test-secret-key")
os.environ.setdefault("AUTH_VERIFICATION_MODE", "supabase")

from src.schemas.auth import UserContext  # noqa: E402
from tests.fakes import (  # noqa: E402
    OTHER_TOKEN,
    OTHER_USER_ID,
    TEST_USER_ID,
    VALID_TOKEN,
    FakeIdentityVerifier,
    InMemoryOrderStore,
)


@pytest.fixture
def catalog() -> list[dict[str, Any]]:
    """Catalog rows as PostgREST returns them."""
    return [
        {
            "id": "P1",
            "name": "Wireless Mouse",
            "current_price": 500,
            "stock": 10,
            "image_url": "https://cdn.example.com/p1.jpg",
        },
        {
            "id": "P2",
            "name": "Bluetooth Earbuds",
            "current_price": 5699,
            "stock": 0,
            "image_url": "https://cdn.example.com/p2.jpg",
        },
        {
            "id": "P3",
            "name": "Smart Watch",
            "current_price": "5000.00",
            "stock": 3,
            "image_url": None,
        },
    ]


@pytest.fixture
def test_user() -> UserContext:
    return UserContext(user_id=UUID(TEST_USER_ID), email="test@example.com", role="authenticated")


@pytest.fixture
def other_user() -> UserContext:
    return UserContext(user_id=UUID(OTHER_USER_ID), email="other@example.com", role="authenticated")


@pytest.fixture
def identity_verifier(test_user: UserContext, other_user: UserContext) -> FakeIdentityVerifier:
    return FakeIdentityVerifier({VALID_TOKEN: test_user, OTHER_TOKEN: other_user})


@pytest.fixture
def order_store(catalog: list[dict[str, Any]]) -> InMemoryOrderStore:
    return InMemoryOrderStore(catalog)


@pytest.fixture
def order_service(identity_verifier: FakeIdentityVerifier, order_store: InMemoryOrderStore) -> Any:
    from src.services.order_service import OrderService

    return OrderService(verifier=identity_verifier, store=order_store)


@pytest.fixture
def order_body() -> dict[str, Any]:
    """A cart submission as the storefront sends it."""
    return {
        "items": [
            {
                "product_id": "P1",
                "product_name": "Wireless Mouse",
                "product_image": "https://cdn.example.com/p1.jpg",
                "quantity": 2,
                "price": 500,
            }
        ],
        "shipping_address": {
            "fullName": "Asha Rao",
            "address": "12 MG Road",
            "city": "Bengaluru",
            "state": "Karnataka",
            "zipCode": "560001",
            "phone": "9876543210",
        },
        "payment_method": "cod",
    }


@pytest.fixture
def mock_supabase_client() -> Generator[MagicMock, None, None]:
    """Provide a mocked Supabase client.

    Yields:
        MagicMock: Mocked Supabase client for testing.
    """
    mock_client = MagicMock()

    mock_response = MagicMock()
    mock_response.data = []
    mock_client.table.return_value.select.return_value.limit.return_value.execute.return_value = (
        mock_response
    )

    with patch("src.core.supabase.get_supabase_client", return_value=mock_client):
        yield mock_client


@pytest.fixture
def client(mock_supabase_client: MagicMock) -> Generator[TestClient, None, None]:
    """Provide a test client for the FastAPI application.

    Args:
        mock_supabase_client: Mocked Supabase client fixture.

    Yields:
        TestClient: FastAPI test client.
    """
    from src.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def app_client(
    identity_verifier: FakeIdentityVerifier,
    order_store: InMemoryOrderStore,
    mock_supabase_client: MagicMock,
) -> Generator[TestClient, None, None]:
    """Provide a test client wired to the in-memory verifier and store.

    Yields:
        TestClient: FastAPI test client with dependency overrides.
    """
    from src.api.deps import get_order_store
    from src.main import app
    from src.services.identity_service import get_identity_verifier

    app.dependency_overrides[get_identity_verifier] = lambda: identity_verifier
    app.dependency_overrides[get_order_store] = lambda: order_store

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
