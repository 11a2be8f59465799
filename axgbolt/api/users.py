"""User and authentication API endpoints.

Registration, login, profile management, and admin user management.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status

from axgbolt.api.deps import AdminUser, CurrentUser, UserServiceDep
from axgbolt.api.rate_limit import login_limit, register_limit
from axgbolt.api.schemas import (
    AddressSchema,
    AdminUserCreateRequest,
    AdminUserUpdateRequest,
    AuthResponse,
    ChangePasswordRequest,
    ErrorResponse,
    LoginRequest,
    MessageResponse,
    PaginationSchema,
    ProfileUpdateRequest,
    RegisterRequest,
    UserListResponse,
    UserResponse,
)
from axgbolt.application.user_service import AuthResult
from axgbolt.catalog.service import PaginationParams
from axgbolt.infrastructure.models import UserModel
from axgbolt.infrastructure.repositories import UserQuery

router = APIRouter(prefix="/users", tags=["Users"])


# ============================================================================
# Converters
# ============================================================================


def user_to_response(user: UserModel) -> UserResponse:
    """Convert UserModel to response schema."""
    return UserResponse(
        id=user.id,
        first_name=user.first_name,
        last_name=user.last_name,
        full_name=user.full_name,
        email=user.email,
        role=user.role,
        is_active=user.is_active,
        is_email_verified=user.is_email_verified,
        phone=user.phone,
        address=AddressSchema(**user.address) if user.address else None,
        last_login=user.last_login,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


def auth_to_response(result: AuthResult) -> AuthResponse:
    """Convert a sign-in result to response schema."""
    return AuthResponse(user=user_to_response(result.user), token=result.token)


# ============================================================================
# Authentication
# ============================================================================


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
    },
    dependencies=[Depends(register_limit)],
    summary="Register",
)
async def register(request: RegisterRequest, service: UserServiceDep) -> AuthResponse:
    """Create an account and sign it in."""
    result = await service.register(
        first_name=request.first_name,
        last_name=request.last_name,
        email=request.email,
        password=request.password,
        phone=request.phone,
    )
    return auth_to_response(result)


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={401: {"model": ErrorResponse}, 429: {"model": ErrorResponse}},
    dependencies=[Depends(login_limit)],
    summary="Log in",
)
async def login(request: LoginRequest, service: UserServiceDep) -> AuthResponse:
    """Exchange email and password for a bearer token."""
    result = await service.login(request.email, request.password)
    return auth_to_response(result)


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Log out",
)
async def logout(user: CurrentUser) -> Response:
    """Acknowledge sign-out. Tokens are stateless, the client drops it."""
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============================================================================
# Profile
# ============================================================================


@router.get(
    "/profile",
    response_model=UserResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Get profile",
)
async def get_profile(user: CurrentUser) -> UserResponse:
    return user_to_response(user)


@router.put(
    "/profile",
    response_model=UserResponse,
    responses={401: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    summary="Update profile",
)
async def update_profile(
    request: ProfileUpdateRequest,
    user: CurrentUser,
    service: UserServiceDep,
) -> UserResponse:
    """Update name, phone or address. Omitted fields are left unchanged."""
    changes = {
        key: value
        for key, value in request.model_dump(exclude_unset=True).items()
        if value is not None or key in {"phone", "address"}
    }
    user = await service.update_profile(user, changes)
    return user_to_response(user)


@router.put(
    "/change-password",
    response_model=MessageResponse,
    responses={401: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    summary="Change password",
)
async def change_password(
    request: ChangePasswordRequest,
    user: CurrentUser,
    service: UserServiceDep,
) -> MessageResponse:
    await service.change_password(user, request.current_password, request.new_password)
    return MessageResponse(message="Password changed successfully")


# ============================================================================
# Admin
# ============================================================================


@router.post(
    "/admin/create",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    responses={403: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Create user (admin)",
)
async def admin_create_user(
    request: AdminUserCreateRequest,
    service: UserServiceDep,
    admin: AdminUser,
) -> UserResponse:
    """Create a verified account. Without a password it gets a temporary one."""
    user = await service.admin_create_user(
        first_name=request.first_name,
        last_name=request.last_name,
        email=request.email,
        password=request.password,
        role=request.role,
        phone=request.phone,
        is_active=request.is_active,
    )
    return user_to_response(user)


@router.get(
    "",
    response_model=UserListResponse,
    responses={403: {"model": ErrorResponse}},
    summary="List users (admin)",
)
async def list_users(
    service: UserServiceDep,
    admin: AdminUser,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
    search: str | None = None,
    role: str | None = None,
    is_active: bool | None = None,
    sort_by: str = "created_at",
    sort_order: Annotated[str, Query(pattern="^(asc|desc)$")] = "desc",
) -> UserListResponse:
    """List accounts. Search covers first name, last name and email."""
    result = await service.list_users(
        UserQuery(role=role, is_active=is_active, search=search),
        PaginationParams(page=page, page_size=limit, sort_by=sort_by, sort_order=sort_order),
    )
    return UserListResponse(
        users=[user_to_response(u) for u in result.items],
        pagination=PaginationSchema.from_result(result),
    )


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Get user (admin)",
)
async def get_user(user_id: str, service: UserServiceDep, admin: AdminUser) -> UserResponse:
    user = await service.get_user(user_id)
    return user_to_response(user)


@router.put(
    "/{user_id}",
    response_model=UserResponse,
    responses={
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Update user (admin)",
)
async def admin_update_user(
    user_id: str,
    request: AdminUserUpdateRequest,
    service: UserServiceDep,
    admin: AdminUser,
) -> UserResponse:
    """Update any account. Admins cannot deactivate or demote themselves."""
    changes = {
        key: value
        for key, value in request.model_dump(exclude_unset=True).items()
        if value is not None or key in {"phone", "address"}
    }
    user = await service.admin_update_user(user_id, changes, acting_user=admin)
    return user_to_response(user)


@router.delete(
    "/{user_id}",
    response_model=MessageResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Delete user (admin)",
)
async def delete_user(user_id: str, service: UserServiceDep, admin: AdminUser) -> MessageResponse:
    """Delete an account. Its reviews stay, without an author."""
    await service.delete_user(user_id, acting_user=admin)
    return MessageResponse(message="User deleted successfully")
