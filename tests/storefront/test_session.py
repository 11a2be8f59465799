"""Tests for the storefront auth session and auth context."""

import asyncio
import json
from unittest.mock import MagicMock

import pytest

from axgbolt.domain.state_machines import SessionStatus
from axgbolt.storefront.session import (
    SIGN_IN_IN_PROGRESS,
    TOKEN_KEY,
    USER_KEY,
    AuthContext,
    AuthSession,
)
from axgbolt.storefront.storage import MemoryStorage
from tests.conftest import make_error_response, make_success_response

USER = {"id": "user-1", "email": "jane@example.com", "role": "user"}


class TestAuthSession:
    """Tests for AuthSession."""

    def test_establish_persists_credentials(
        self, session: AuthSession, storage: MemoryStorage
    ) -> None:
        """Signing in caches the token and the user record."""
        statuses: list[SessionStatus] = []
        session.on_change(statuses.append)

        session.begin()
        session.establish("tok", USER)

        assert session.is_authenticated
        assert session.user_id == "user-1"
        assert storage.get_item(TOKEN_KEY) == "tok"
        assert json.loads(storage.get_item(USER_KEY)) == USER
        assert statuses == [SessionStatus.AUTHENTICATING, SessionStatus.AUTHENTICATED]

    def test_restore(self, storage: MemoryStorage) -> None:
        """A new session picks up cached credentials."""
        storage.set_item(TOKEN_KEY, "tok")
        storage.set_item(USER_KEY, json.dumps(USER))

        session = AuthSession(storage)
        assert session.restore() is True
        assert session.token == "tok"
        assert session.status == SessionStatus.AUTHENTICATED

    def test_restore_corrupted_user_clears_both_keys(self, storage: MemoryStorage) -> None:
        """A corrupted cached user drops the token too."""
        storage.set_item(TOKEN_KEY, "tok")
        storage.set_item(USER_KEY, "{broken")

        session = AuthSession(storage)
        assert session.restore() is False
        assert session.status == SessionStatus.ANONYMOUS
        assert storage.get_item(TOKEN_KEY) is None
        assert storage.get_item(USER_KEY) is None

    def test_restore_without_credentials(self, session: AuthSession) -> None:
        """Nothing cached means staying anonymous."""
        assert session.restore() is False
        assert session.status == SessionStatus.ANONYMOUS

    def test_expire_clears(self, shopper_session: AuthSession, storage: MemoryStorage) -> None:
        """An expired token signs the session out."""
        shopper_session.expire()
        assert not shopper_session.is_authenticated
        assert shopper_session.token is None
        assert storage.get_item(TOKEN_KEY) is None

    def test_clear_when_anonymous(self, session: AuthSession, storage: MemoryStorage) -> None:
        """Clearing an anonymous session still wipes storage."""
        storage.set_item(TOKEN_KEY, "stale")
        session.clear()
        assert storage.get_item(TOKEN_KEY) is None
        assert session.status == SessionStatus.ANONYMOUS

    def test_cache_failure_keeps_session(self) -> None:
        """A full storage does not prevent signing in."""
        session = AuthSession(MemoryStorage(max_bytes=1))
        session.begin()
        session.establish("a-long-token", USER)
        assert session.is_authenticated

    def test_admin_flag(self, admin_session: AuthSession) -> None:
        """Only the admin role counts as admin."""
        assert admin_session.is_admin

        admin_session.begin()
        admin_session.establish("tok", USER)
        assert not admin_session.is_admin


class TestAuthContext:
    """Tests for AuthContext."""

    @pytest.mark.asyncio
    async def test_sign_in_success(
        self, session: AuthSession, mock_api_client: MagicMock
    ) -> None:
        """Successful sign-in establishes the session."""
        mock_api_client.login.return_value = make_success_response({"token": "tok", "user": USER})
        auth = AuthContext(mock_api_client, session)

        outcome = await auth.sign_in("jane@example.com", "UserPass123!")

        assert outcome.success is True
        assert auth.is_authenticated
        assert auth.token == "tok"
        assert auth.user == USER

    @pytest.mark.asyncio
    async def test_sign_in_failure(
        self, session: AuthSession, mock_api_client: MagicMock
    ) -> None:
        """Failed sign-in returns to anonymous with the server message."""
        mock_api_client.login.return_value = make_error_response(
            "UNAUTHORIZED", "Invalid email or password", 401
        )
        auth = AuthContext(mock_api_client, session)

        outcome = await auth.sign_in("jane@example.com", "nope")

        assert outcome.success is False
        assert outcome.error == "Invalid email or password"
        assert session.status == SessionStatus.ANONYMOUS

    @pytest.mark.asyncio
    async def test_failed_sign_in_keeps_current_user(
        self,
        shopper_session: AuthSession,
        storage: MemoryStorage,
        mock_api_client: MagicMock,
    ) -> None:
        """A rejected second sign-in leaves the signed-in user in place."""
        mock_api_client.login.return_value = make_error_response(
            "UNAUTHORIZED", "Invalid email or password", 401
        )
        auth = AuthContext(mock_api_client, shopper_session)

        outcome = await auth.sign_in("other@example.com", "wrong")

        assert outcome.success is False
        assert shopper_session.status == SessionStatus.AUTHENTICATED
        assert auth.token == "shopper-token"
        assert auth.user["id"] == "user-1"
        assert storage.get_item(TOKEN_KEY) == "shopper-token"

    @pytest.mark.asyncio
    async def test_concurrent_sign_in(
        self, session: AuthSession, mock_api_client: MagicMock
    ) -> None:
        """A second sign-in while one is in flight fails without raising."""
        release = asyncio.Event()

        async def slow_login(email: str, password: str):
            await release.wait()
            return make_success_response({"token": "tok", "user": USER})

        mock_api_client.login.side_effect = slow_login
        auth = AuthContext(mock_api_client, session)

        first = asyncio.ensure_future(auth.sign_in("jane@example.com", "UserPass123!"))
        await asyncio.sleep(0)
        second = await auth.sign_in("jane@example.com", "UserPass123!")
        release.set()
        outcomes = await asyncio.gather(first, return_exceptions=True)

        assert second.success is False
        assert second.error == SIGN_IN_IN_PROGRESS
        assert outcomes[0].success is True
        assert session.is_authenticated
        mock_api_client.login.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_sign_out_during_sign_in(
        self, session: AuthSession, mock_api_client: MagicMock
    ) -> None:
        """A sign-in whose session was cleared mid-flight does not sign in."""
        release = asyncio.Event()

        async def slow_login(email: str, password: str):
            await release.wait()
            return make_success_response({"token": "tok", "user": USER})

        mock_api_client.login.side_effect = slow_login
        auth = AuthContext(mock_api_client, session)

        pending = asyncio.ensure_future(auth.sign_in("jane@example.com", "UserPass123!"))
        await asyncio.sleep(0)
        await auth.sign_out()
        release.set()
        outcome = await pending

        assert outcome.success is False
        assert session.status == SessionStatus.ANONYMOUS
        assert session.token is None

    @pytest.mark.asyncio
    async def test_sign_up_validation_error(
        self, session: AuthSession, mock_api_client: MagicMock
    ) -> None:
        """Field errors are joined into one message and no sign-in is tried."""
        mock_api_client.register.return_value = make_error_response(
            "VALIDATION_ERROR",
            "can only contain letters and spaces",
            422,
            details=[
                {"field": "first_name", "message": "can only contain letters and spaces"},
                {"field": "password", "message": "Password must be at least 8 characters long"},
            ],
        )
        auth = AuthContext(mock_api_client, session)

        outcome = await auth.sign_up("J4ne", "Doe", "jane@example.com", "short")

        assert outcome.error == (
            "first_name: can only contain letters and spaces, "
            "password: Password must be at least 8 characters long"
        )
        mock_api_client.login.assert_not_called()

    @pytest.mark.asyncio
    async def test_sign_up_signs_in(
        self, session: AuthSession, mock_api_client: MagicMock
    ) -> None:
        """Registration is followed by a sign-in."""
        mock_api_client.register.return_value = make_success_response({"token": "t0", "user": USER})
        mock_api_client.login.return_value = make_success_response({"token": "tok", "user": USER})
        auth = AuthContext(mock_api_client, session)

        outcome = await auth.sign_up("Jane", "Doe", "jane@example.com", "UserPass123!")

        assert outcome.success is True
        mock_api_client.login.assert_awaited_once_with("jane@example.com", "UserPass123!")

    @pytest.mark.asyncio
    async def test_sign_out_clears_even_on_failure(
        self,
        shopper_session: AuthSession,
        storage: MemoryStorage,
        mock_api_client: MagicMock,
    ) -> None:
        """Local credentials go away whatever the server says."""
        mock_api_client.logout.return_value = make_error_response(
            "REQUEST_ERROR", "Request failed", 500
        )
        auth = AuthContext(mock_api_client, shopper_session)

        await auth.sign_out()

        assert not auth.is_authenticated
        assert storage.get_item(TOKEN_KEY) is None

    @pytest.mark.asyncio
    async def test_refresh_profile(
        self,
        shopper_session: AuthSession,
        storage: MemoryStorage,
        mock_api_client: MagicMock,
    ) -> None:
        """The cached user is replaced by the server's copy."""
        fresh = {**USER, "first_name": "Janet"}
        mock_api_client.get_profile.return_value = make_success_response(fresh)
        auth = AuthContext(mock_api_client, shopper_session)

        outcome = await auth.refresh_profile()

        assert outcome.success is True
        assert auth.user == fresh
        assert json.loads(storage.get_item(USER_KEY)) == fresh
