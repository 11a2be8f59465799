"""User and authentication application service.

Handles registration, login, profile management, and admin user
management.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from axgbolt.catalog.service import PaginatedResult, PaginationParams
from axgbolt.domain.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationFailedError,
)
from axgbolt.infrastructure.models import USER_ROLES, UserModel
from axgbolt.infrastructure.repositories import ReviewRepository, UserQuery, UserRepository
from axgbolt.infrastructure.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)

logger = structlog.get_logger()

# Password given to accounts an admin creates without one
DEFAULT_ADMIN_CREATED_PASSWORD = "TempPass123!"

_PROFILE_FIELDS = {"first_name", "last_name", "phone", "address"}
_ADMIN_FIELDS = _PROFILE_FIELDS | {"email", "role", "is_active", "is_email_verified"}


# ============================================================================
# Service Result Types
# ============================================================================


@dataclass
class AuthResult:
    """A signed-in user and their access token."""

    user: UserModel
    token: str


# ============================================================================
# User Service
# ============================================================================


class UserService:
    """Service for accounts, credentials, and admin user management."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize service with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session
        self.users = UserRepository(session)
        self.reviews = ReviewRepository(session)

    # =========================================================================
    # Authentication
    # =========================================================================

    async def register(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
        phone: str | None = None,
    ) -> AuthResult:
        """Create a regular user account and sign it in.

        Raises:
            ConflictError: If the email is already registered.
        """
        user = await self._create_user(
            first_name=first_name,
            last_name=last_name,
            email=email,
            password=password,
            phone=phone,
            role="user",
            is_email_verified=False,
        )
        user.last_login = datetime.now(timezone.utc)
        await self.session.commit()

        logger.info("User registered", user_id=user.id)
        return AuthResult(user=user, token=create_access_token(user.id, user.role))

    async def login(self, email: str, password: str) -> AuthResult:
        """Verify credentials and issue a token.

        Raises:
            AuthenticationError: On unknown email, wrong password, or a
                deactivated account.
        """
        user = await self.users.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            logger.warning("Login failed", email=email.strip().lower())
            raise AuthenticationError("Invalid email or password")

        if not user.is_active:
            logger.warning("Login rejected for inactive account", user_id=user.id)
            raise AuthenticationError("Account is deactivated. Please contact support.")

        user.last_login = datetime.now(timezone.utc)
        await self.session.commit()

        logger.info("User logged in", user_id=user.id)
        return AuthResult(user=user, token=create_access_token(user.id, user.role))

    async def authenticate_token(self, token: str) -> UserModel:
        """Resolve a bearer token to an active user.

        Raises:
            AuthenticationError: If the token is invalid or the user is
                missing or deactivated.
        """
        claims = decode_access_token(token)
        user = await self.users.get_by_id(claims["sub"])
        if user is None:
            raise AuthenticationError("User no longer exists")
        if not user.is_active:
            raise AuthenticationError("Account is deactivated")
        return user

    # =========================================================================
    # Profile
    # =========================================================================

    async def update_profile(self, user: UserModel, changes: dict[str, Any]) -> UserModel:
        """Update the signed-in user's own profile fields."""
        self._apply(user, changes, allowed=_PROFILE_FIELDS)
        await self.session.flush()
        await self.session.commit()

        logger.info("Profile updated", user_id=user.id, fields=sorted(changes))
        return user

    async def change_password(
        self,
        user: UserModel,
        current_password: str,
        new_password: str,
    ) -> None:
        """Replace the user's password after checking the current one.

        Raises:
            ValidationFailedError: If the current password is wrong.
        """
        if not verify_password(current_password, user.password_hash):
            raise ValidationFailedError(
                "Current password is incorrect", field="current_password"
            )
        user.password_hash = hash_password(new_password)
        await self.session.commit()

        logger.info("Password changed", user_id=user.id)

    # =========================================================================
    # Admin
    # =========================================================================

    async def get_user(self, user_id: str) -> UserModel:
        """Get a user by ID.

        Raises:
            NotFoundError: If the user does not exist.
        """
        user = await self.users.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    async def list_users(
        self,
        filters: UserQuery,
        pagination: PaginationParams,
    ) -> PaginatedResult[UserModel]:
        """List users with filters and pagination."""
        users = await self.users.find_all(
            filters,
            sort_by=pagination.sort_by,
            sort_order=pagination.sort_order,
            limit=pagination.limit,
            offset=pagination.offset,
        )
        total = await self.users.count(filters)
        return PaginatedResult(
            items=list(users),
            total=total,
            page=pagination.page,
            page_size=pagination.page_size,
        )

    async def admin_create_user(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password: str | None = None,
        role: str = "user",
        phone: str | None = None,
        is_active: bool = True,
    ) -> UserModel:
        """Create an account on a user's behalf.

        The account is pre-verified. Without a password it gets the
        default temporary one.

        Raises:
            ConflictError: If the email is already registered.
        """
        user = await self._create_user(
            first_name=first_name,
            last_name=last_name,
            email=email,
            password=password or DEFAULT_ADMIN_CREATED_PASSWORD,
            phone=phone,
            role=role,
            is_email_verified=True,
            is_active=is_active,
        )
        await self.session.commit()

        logger.info("User created by admin", user_id=user.id, role=role)
        return user

    async def admin_update_user(
        self,
        user_id: str,
        changes: dict[str, Any],
        acting_user: UserModel,
    ) -> UserModel:
        """Update any user's account fields.

        Raises:
            NotFoundError: If the user does not exist.
            PermissionDeniedError: If an admin tries to deactivate or
                demote their own account.
            ConflictError: If the new email is taken.
        """
        user = await self.get_user(user_id)

        if user.id == acting_user.id:
            if changes.get("is_active") is False:
                raise PermissionDeniedError("You cannot deactivate your own account")
            if "role" in changes and changes["role"] != user.role:
                raise PermissionDeniedError("You cannot change your own role")

        if "email" in changes and changes["email"] is not None:
            email = changes["email"].strip().lower()
            existing = await self.users.get_by_email(email)
            if existing is not None and existing.id != user.id:
                raise ConflictError(
                    "Email is already registered",
                    details={"errors": [{"field": "email", "message": "Email is already registered"}]},
                )
            changes = {**changes, "email": email}

        self._apply(user, changes, allowed=_ADMIN_FIELDS)
        await self.session.flush()
        await self.session.commit()

        logger.info("User updated by admin", user_id=user.id, fields=sorted(changes))
        return user

    async def delete_user(self, user_id: str, acting_user: UserModel) -> None:
        """Delete an account, keeping its reviews without an author.

        Raises:
            NotFoundError: If the user does not exist.
            PermissionDeniedError: If an admin tries to delete themselves.
        """
        user = await self.get_user(user_id)
        if user.id == acting_user.id:
            raise PermissionDeniedError("You cannot delete your own account")

        detached = await self.reviews.detach_user(user.id)
        await self.users.delete(user)
        await self.session.commit()

        logger.info("User deleted", user_id=user_id, reviews_detached=detached)

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _create_user(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
        phone: str | None,
        role: str,
        is_email_verified: bool,
        is_active: bool = True,
    ) -> UserModel:
        if role not in USER_ROLES:
            raise ValidationFailedError(f"Invalid role: {role}", field="role")

        email = email.strip().lower()
        if await self.users.get_by_email(email) is not None:
            raise ConflictError(
                "Email is already registered",
                details={"errors": [{"field": "email", "message": "Email is already registered"}]},
            )

        user = UserModel(
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            email=email,
            password_hash=hash_password(password),
            role=role,
            is_active=is_active,
            is_email_verified=is_email_verified,
            phone=phone,
        )
        return await self.users.save(user)

    def _apply(self, user: UserModel, changes: dict[str, Any], allowed: set[str]) -> None:
        for key, value in changes.items():
            if key not in allowed:
                continue
            if key == "role" and value not in USER_ROLES:
                raise ValidationFailedError(f"Invalid role: {value}", field="role")
            if key in {"first_name", "last_name"} and isinstance(value, str):
                value = value.strip()
            setattr(user, key, value)
