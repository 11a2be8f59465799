"""Shared API dependencies.

Provides database-backed services and bearer-token authentication with
role gating.
"""

from collections.abc import Callable, Coroutine
from typing import Annotated, Any

import structlog
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from axgbolt.application.review_service import ReviewService
from axgbolt.application.user_service import UserService
from axgbolt.catalog.service import CatalogService
from axgbolt.domain.exceptions import AuthenticationError, PermissionDeniedError
from axgbolt.infrastructure.database import get_session
from axgbolt.infrastructure.models import UserModel

logger = structlog.get_logger()

bearer_scheme = HTTPBearer(auto_error=False)

SessionDep = Annotated[AsyncSession, Depends(get_session)]


# ============================================================================
# Services
# ============================================================================


def get_catalog_service(session: SessionDep) -> CatalogService:
    """Get catalog service bound to the request session."""
    return CatalogService(session)


def get_user_service(session: SessionDep) -> UserService:
    """Get user service bound to the request session."""
    return UserService(session)


def get_review_service(session: SessionDep) -> ReviewService:
    """Get review service bound to the request session."""
    return ReviewService(session)


CatalogServiceDep = Annotated[CatalogService, Depends(get_catalog_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
ReviewServiceDep = Annotated[ReviewService, Depends(get_review_service)]


# ============================================================================
# Authentication
# ============================================================================


async def get_current_user(
    request: Request,
    service: UserServiceDep,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> UserModel:
    """Resolve the bearer token to the signed-in user.

    Raises:
        AuthenticationError: If the token is missing or invalid.
    """
    if credentials is None or not credentials.credentials:
        logger.warning(
            "Missing authorization header",
            path=request.url.path,
            method=request.method,
        )
        raise AuthenticationError("Access denied. No token provided.")

    user = await service.authenticate_token(credentials.credentials)
    request.state.user_id = user.id
    return user


CurrentUser = Annotated[UserModel, Depends(get_current_user)]


def require_roles(*roles: str) -> Callable[..., Coroutine[Any, Any, UserModel]]:
    """Build a dependency that only admits users with one of ``roles``."""

    async def dependency(user: CurrentUser) -> UserModel:
        if user.role not in roles:
            logger.warning("Role check failed", user_id=user.id, role=user.role, required=roles)
            raise PermissionDeniedError(
                "Access denied. Insufficient permissions.",
                details={"required_roles": list(roles)},
            )
        return user

    return dependency


AdminUser = Annotated[UserModel, Depends(require_roles("admin"))]
