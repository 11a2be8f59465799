"""Shared test configuration.

Points the application at a throwaway SQLite database and upload
directory before anything from ``axgbolt`` is imported.
"""

import asyncio
import os
import tempfile
from typing import Any
from unittest.mock import AsyncMock, MagicMock

_WORK_DIR = tempfile.mkdtemp(prefix="axgbolt-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_WORK_DIR}/test.db"
os.environ["UPLOAD_DIR"] = os.path.join(_WORK_DIR, "uploads")
os.environ["LOG_JSON"] = "false"
os.environ["REGISTER_RATE_LIMIT"] = "1000/hour"
os.environ["CATALOG_RATE_LIMIT"] = "1000/minute"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from axgbolt.api.rate_limit import reset_rate_limits  # noqa: E402
from axgbolt.application.user_service import UserService  # noqa: E402
from axgbolt.client.api_client import APIError, APIResponse, AXGBoltAPIClient  # noqa: E402
from axgbolt.infrastructure.database import (  # noqa: E402
    async_session_factory,
    create_tables,
    drop_tables,
)
from axgbolt.main import app  # noqa: E402

ADMIN_EMAIL = "admin@axgbolt.com"
ADMIN_PASSWORD = "AdminPass123!"
USER_PASSWORD = "UserPass123!"


# ============================================================================
# Database Fixtures
# ============================================================================


async def _reset_database() -> None:
    await drop_tables()
    await create_tables()


@pytest.fixture
def database() -> None:
    """Start each test from empty tables."""
    asyncio.run(_reset_database())


async def _create_admin(email: str, password: str) -> None:
    async with async_session_factory() as session:
        await UserService(session).admin_create_user(
            first_name="Admin",
            last_name="User",
            email=email,
            password=password,
            role="admin",
        )


# ============================================================================
# Client Fixtures
# ============================================================================


@pytest.fixture
def client(database: None) -> TestClient:
    """Create test client without authentication."""
    reset_rate_limits()
    return TestClient(app)


@pytest.fixture
def admin_token(client: TestClient) -> str:
    """Create an admin account and sign it in."""
    asyncio.run(_create_admin(ADMIN_EMAIL, ADMIN_PASSWORD))
    response = client.post(
        "/api/users/login",
        json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 200
    return response.json()["token"]


@pytest.fixture
def admin_headers(admin_token: str) -> dict[str, str]:
    """Get admin authentication headers."""
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def user_token(client: TestClient) -> str:
    """Register a regular shopper and return their token."""
    return register_user(client, "shopper@example.com")["token"]


@pytest.fixture
def user_headers(user_token: str) -> dict[str, str]:
    """Get regular user authentication headers."""
    return {"Authorization": f"Bearer {user_token}"}


def register_user(
    client: TestClient,
    email: str,
    first_name: str = "Jane",
    last_name: str = "Doe",
) -> dict[str, Any]:
    """Register an account through the API and return the auth body."""
    response = client.post(
        "/api/users/register",
        json={
            "first_name": first_name,
            "last_name": last_name,
            "email": email,
            "password": USER_PASSWORD,
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


def create_product(
    client: TestClient,
    headers: dict[str, str],
    **fields: Any,
) -> dict[str, Any]:
    """Create a product through the admin API."""
    payload = {"name": "Test Product", "category": "Batteries", **fields}
    response = client.post("/api/products", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


# ============================================================================
# Storefront Fixtures
# ============================================================================


@pytest.fixture
def mock_api_client() -> MagicMock:
    """Create a mock AXG Bolt API client."""
    client = MagicMock(spec=AXGBoltAPIClient)

    # Make all methods async
    for name in (
        "login",
        "register",
        "logout",
        "get_profile",
        "update_profile",
        "change_password",
        "list_products",
        "get_featured_products",
        "get_product",
        "get_categories",
        "create_category",
        "admin_list_products",
        "create_product",
        "update_product",
        "delete_product",
        "upload_image",
        "list_users",
        "get_user",
        "create_user",
        "update_user",
        "delete_user",
        "get_product_reviews",
        "create_review",
        "get_my_reviews",
        "update_review",
        "delete_review",
        "report_review",
        "mark_review_helpful",
        "admin_list_reviews",
        "moderate_review",
        "admin_delete_review",
        "close",
    ):
        setattr(client, name, AsyncMock())

    return client


def make_success_response(data: Any = None) -> APIResponse:
    """Create a successful API response."""
    return APIResponse(success=True, data=data)


def make_error_response(
    error_code: str,
    message: str,
    status_code: int = 400,
    details: list[dict[str, Any]] | None = None,
) -> APIResponse:
    """Create an error API response."""
    return APIResponse(
        success=False,
        error=APIError(
            error_code=error_code,
            message=message,
            status_code=status_code,
            details=details or [],
        ),
    )


def make_page(
    key: str,
    items: list[dict[str, Any]],
    page: int = 1,
    pages: int = 1,
    total: int | None = None,
) -> APIResponse:
    """Create a successful paginated list response."""
    return make_success_response(
        {
            key: items,
            "pagination": {
                "page": page,
                "limit": 10,
                "total": len(items) if total is None else total,
                "pages": pages,
            },
        }
    )
