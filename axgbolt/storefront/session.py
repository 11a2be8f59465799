"""Storefront auth session and auth context.

``AuthSession`` holds the signed-in identity (token and user record) in
memory and mirrors it into client storage. ``AuthContext`` runs the
sign-in, sign-up, sign-out and profile-refresh flows against the API and
is the only writer of the session apart from the API client's 401 hook.
"""

import json
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any
from uuid import uuid4

import structlog

from axgbolt.client.api_client import AXGBoltAPIClient
from axgbolt.domain.state_machines import SessionStatus, validate_session_transition
from axgbolt.storefront.storage import KeyValueStorage, StorageError

logger = structlog.get_logger()

TOKEN_KEY = "axg_bolt_token"
USER_KEY = "axg_bolt_user"

SIGN_IN_IN_PROGRESS = "Sign-in already in progress"


# ============================================================================
# Auth Session
# ============================================================================


class AuthSession:
    """The current identity, shared by the API client and every component.

    Example usage:
        session = AuthSession(MemoryStorage())
        session.restore()
        client = AXGBoltAPIClient(session=session)
    """

    def __init__(self, storage: KeyValueStorage) -> None:
        self.id = str(uuid4())
        self.storage = storage
        self.status = SessionStatus.ANONYMOUS
        self.token: str | None = None
        self.user: dict[str, Any] | None = None
        self._listeners: list[Callable[[SessionStatus], None]] = []

    @property
    def is_authenticated(self) -> bool:
        return self.status == SessionStatus.AUTHENTICATED and self.user is not None

    @property
    def is_admin(self) -> bool:
        return self.is_authenticated and (self.user or {}).get("role") == "admin"

    @property
    def user_id(self) -> str | None:
        if not self.is_authenticated:
            return None
        return (self.user or {}).get("id")

    def on_change(self, listener: Callable[[SessionStatus], None]) -> None:
        """Register a callback invoked with the new status on each transition."""
        self._listeners.append(listener)

    # =========================================================================
    # Transitions
    # =========================================================================

    def begin(self) -> None:
        """Enter AUTHENTICATING."""
        self._move(SessionStatus.AUTHENTICATING)

    def establish(self, token: str, user: dict[str, Any], persist: bool = True) -> None:
        """Hold a token and user and enter AUTHENTICATED.

        Args:
            token: Bearer token.
            user: User record as returned by the API.
            persist: Mirror the credentials into storage.
        """
        self.token = token
        self.user = user
        if persist:
            self._store(TOKEN_KEY, token)
            self._store(USER_KEY, json.dumps(user))
        self._move(SessionStatus.AUTHENTICATED)
        logger.info("Session established", session_id=self.id, user_id=user.get("id"))

    def fail(self) -> None:
        """Abandon an authentication attempt."""
        self.clear()

    def clear(self) -> None:
        """Drop the credentials from memory and storage.

        Always clears, whatever the current state.
        """
        self.token = None
        self.user = None
        for key in (TOKEN_KEY, USER_KEY):
            try:
                self.storage.remove_item(key)
            except StorageError as e:
                logger.warning("Could not remove cached credential", key=key, error=str(e))
        if self.status != SessionStatus.ANONYMOUS:
            self._move(SessionStatus.ANONYMOUS)

    def expire(self) -> None:
        """Handle an unauthorized response to a request that carried our token."""
        if self.token is None:
            return
        logger.info("Session expired", session_id=self.id)
        self.clear()

    def update_user(self, user: dict[str, Any]) -> None:
        """Overwrite the cached user record."""
        self.user = user
        self._store(USER_KEY, json.dumps(user))

    def restore(self) -> bool:
        """Load credentials saved by an earlier run.

        A corrupted cached user clears both keys.

        Returns:
            True if the session is now authenticated.
        """
        token = self.storage.get_item(TOKEN_KEY)
        raw_user = self.storage.get_item(USER_KEY)
        if not token or not raw_user:
            return False

        self.begin()
        try:
            user = json.loads(raw_user)
        except ValueError:
            user = None
        if not isinstance(user, dict):
            logger.warning("Cached user corrupted, clearing credentials", session_id=self.id)
            self.fail()
            return False

        self.establish(token, user, persist=False)
        return True

    # =========================================================================
    # Helpers
    # =========================================================================

    def _move(self, target: SessionStatus) -> None:
        validate_session_transition(self.id, self.status, target)
        self.status = target
        for listener in self._listeners:
            listener(target)

    def _store(self, key: str, value: str) -> None:
        try:
            self.storage.set_item(key, value)
        except StorageError as e:
            logger.warning("Could not cache credential", key=key, error=str(e))


# ============================================================================
# Auth Context
# ============================================================================


@dataclass
class AuthOutcome:
    """Result of an auth flow, with a display message on failure."""

    success: bool
    error: str | None = None


class AuthContext:
    """Sign-in, sign-up, sign-out and profile refresh over one session."""

    def __init__(self, api: AXGBoltAPIClient, session: AuthSession) -> None:
        self.api = api
        self.session = session

    @property
    def user(self) -> dict[str, Any] | None:
        return self.session.user

    @property
    def token(self) -> str | None:
        return self.session.token

    @property
    def is_admin(self) -> bool:
        return self.session.is_admin

    @property
    def is_authenticated(self) -> bool:
        return self.session.is_authenticated

    async def sign_in(self, email: str, password: str) -> AuthOutcome:
        """Exchange credentials for a token and cache the signed-in user.

        A failed attempt leaves an already signed-in user signed in. Only
        one attempt runs at a time; a second one fails immediately.
        """
        if self.session.status == SessionStatus.AUTHENTICATING:
            return AuthOutcome(success=False, error=SIGN_IN_IN_PROGRESS)

        previous = None
        if self.session.is_authenticated:
            previous = (self.session.token, self.session.user)
        self.session.begin()
        response = await self.api.login(email, password)

        # Signed out or expired while the request was in flight
        if self.session.status != SessionStatus.AUTHENTICATING:
            return AuthOutcome(success=False, error="Sign-in was interrupted")

        if response.success and isinstance(response.data, dict) and response.data.get("token"):
            self.session.establish(response.data["token"], response.data["user"])
            return AuthOutcome(success=True)

        if previous is not None:
            token, user = previous
            self.session.establish(token, user, persist=False)
        else:
            self.session.fail()
        message = response.error.user_message if response.error else "Login failed"
        logger.info("Sign-in failed", reason=message)
        return AuthOutcome(success=False, error=message)

    async def sign_up(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
        phone: str | None = None,
    ) -> AuthOutcome:
        """Register, then sign in with the same credentials."""
        response = await self.api.register(first_name, last_name, email, password, phone)
        if not response.success:
            message = response.error.user_message if response.error else "Registration failed"
            logger.info("Sign-up failed", reason=message)
            return AuthOutcome(success=False, error=message)

        return await self.sign_in(email, password)

    async def sign_out(self) -> None:
        """Log out on the server if possible; local credentials are always cleared."""
        try:
            if self.session.token:
                response = await self.api.logout()
                if not response.success and response.error is not None:
                    logger.warning("Server logout failed", error=response.error.message)
        finally:
            self.session.clear()

    async def refresh_profile(self) -> AuthOutcome:
        """Re-fetch the current user and overwrite the cached copy."""
        if not self.session.token:
            return AuthOutcome(success=False, error="Not signed in")

        response = await self.api.get_profile()
        if response.success and isinstance(response.data, dict):
            self.session.update_user(response.data)
            return AuthOutcome(success=True)

        message = response.error.user_message if response.error else "Failed to refresh profile"
        logger.warning("Profile refresh failed", reason=message)
        return AuthOutcome(success=False, error=message)
