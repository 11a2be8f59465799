"""Shared fixtures for storefront tests."""

import pytest

from axgbolt.storefront.session import AuthSession
from axgbolt.storefront.storage import MemoryStorage

SHOPPER = {"id": "user-1", "email": "jane@example.com", "first_name": "Jane", "role": "user"}
ADMIN = {"id": "admin-1", "email": "admin@axgbolt.com", "first_name": "Admin", "role": "admin"}


@pytest.fixture
def storage() -> MemoryStorage:
    """Create empty client storage."""
    return MemoryStorage()


@pytest.fixture
def session(storage: MemoryStorage) -> AuthSession:
    """Create an anonymous session."""
    return AuthSession(storage)


@pytest.fixture
def shopper_session(session: AuthSession) -> AuthSession:
    """Create a session signed in as a regular user."""
    session.begin()
    session.establish("shopper-token", dict(SHOPPER))
    return session


@pytest.fixture
def admin_session(session: AuthSession) -> AuthSession:
    """Create a session signed in as an admin."""
    session.begin()
    session.establish("admin-token", dict(ADMIN))
    return session
