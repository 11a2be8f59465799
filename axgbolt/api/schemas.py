"""API schemas for the AXG Bolt API.

Pydantic models for request/response validation and serialization.
"""

import re
from datetime import datetime
from typing import Any

from pydantic import BaseModel, EmailStr, Field, field_validator

from axgbolt.catalog.service import PaginatedResult

_NAME_PATTERN = re.compile(r"^[A-Za-z\s]+$")
_PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{0,15}$")
_ZIP_PATTERN = re.compile(r"^\d{5}(-\d{4})?$")
_PASSWORD_SPECIALS = "@$!%*?&"


def check_person_name(value: str) -> str:
    """Validate a first or last name: 2-50 letters and spaces."""
    value = value.strip()
    if not 2 <= len(value) <= 50:
        raise ValueError("must be between 2 and 50 characters")
    if not _NAME_PATTERN.match(value):
        raise ValueError("can only contain letters and spaces")
    return value


def check_password_strength(value: str) -> str:
    """Validate the password policy.

    At least 8 characters with a lowercase letter, an uppercase letter, a
    digit and one of ``@$!%*?&``.
    """
    if len(value) < 8:
        raise ValueError("Password must be at least 8 characters long")
    if not (
        any(c.islower() for c in value)
        and any(c.isupper() for c in value)
        and any(c.isdigit() for c in value)
        and any(c in _PASSWORD_SPECIALS for c in value)
    ):
        raise ValueError(
            "Password must contain at least one uppercase letter, one lowercase "
            "letter, one number, and one special character"
        )
    return value


def check_phone(value: str | None) -> str | None:
    """Validate an optional phone number."""
    if value is None or not value.strip():
        return None
    value = value.strip()
    if not _PHONE_PATTERN.match(value):
        raise ValueError("Please provide a valid phone number")
    return value


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorDetail(BaseModel):
    """Detailed error information."""

    field: str | None = Field(default=None, description="Field that caused the error")
    message: str = Field(..., description="Error message")


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: list[ErrorDetail] = Field(
        default_factory=list, description="Additional error details"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


class PaginationSchema(BaseModel):
    """Pagination envelope shared by every list endpoint."""

    page: int = Field(..., description="Current page number (1-based)")
    limit: int = Field(..., description="Items per page")
    total: int = Field(..., description="Total number of items")
    pages: int = Field(..., description="Total number of pages")

    @classmethod
    def from_result(cls, result: PaginatedResult[Any]) -> "PaginationSchema":
        """Build the envelope from a service result."""
        return cls(
            page=result.page,
            limit=result.page_size,
            total=result.total,
            pages=result.total_pages,
        )


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str


# ============================================================================
# Category Schemas
# ============================================================================


class SubmenuEntrySchema(BaseModel):
    """Submenu entry under a category."""

    name: str = Field(..., min_length=1, max_length=100)
    category: str | None = Field(default=None, max_length=100)


class CategoryResponse(BaseModel):
    """Category in navigation order."""

    id: str
    name: str
    has_submenu: bool
    submenu: list[SubmenuEntrySchema]
    is_active: bool


class CategoriesResponse(BaseModel):
    """List of categories."""

    categories: list[CategoryResponse]


class CategoryCreateRequest(BaseModel):
    """Request to create a category."""

    name: str = Field(..., min_length=1, max_length=100)
    submenu: list[SubmenuEntrySchema] = Field(default_factory=list)
    is_active: bool = True


# ============================================================================
# Product Schemas
# ============================================================================


class ProductResponse(BaseModel):
    """Product details."""

    id: str
    name: str
    slug: str
    sku: str
    description: str
    features: list[str]
    image_url: str | None
    category: str
    subcategory: str | None
    full_category: str
    price: float | None
    stock: int
    tags: list[str]
    is_active: bool
    is_featured: bool
    view_count: int
    created_at: datetime
    updated_at: datetime


class ProductListResponse(BaseModel):
    """Page of products."""

    products: list[ProductResponse]
    pagination: PaginationSchema


class FeaturedProductsResponse(BaseModel):
    """Featured products for the home page."""

    products: list[ProductResponse]


class ProductCreateRequest(BaseModel):
    """Request to create a product. Only name and category are required."""

    name: str = Field(..., min_length=1, max_length=200)
    category: str = Field(..., min_length=1, max_length=100)
    description: str = Field(default="", max_length=2000)
    features: list[str] = Field(default_factory=list)
    image_url: str | None = Field(default=None, max_length=1000)
    subcategory: str | None = Field(default=None, max_length=100)
    price: float | None = Field(default=None, ge=0)
    stock: int = Field(default=0, ge=0)
    sku: str | None = Field(default=None, max_length=50)
    tags: list[str] = Field(default_factory=list)
    is_active: bool = True
    is_featured: bool = False


class ProductUpdateRequest(BaseModel):
    """Partial product update. Omitted fields are left unchanged."""

    name: str | None = Field(default=None, max_length=200)
    category: str | None = Field(default=None, max_length=100)
    description: str | None = Field(default=None, max_length=2000)
    features: list[str] | None = None
    image_url: str | None = Field(default=None, max_length=1000)
    subcategory: str | None = Field(default=None, max_length=100)
    price: float | None = Field(default=None, ge=0)
    stock: int | None = Field(default=None, ge=0)
    sku: str | None = Field(default=None, max_length=50)
    tags: list[str] | None = None
    is_active: bool | None = None
    is_featured: bool | None = None


class ImageUploadResponse(BaseModel):
    """Stored product image."""

    image_url: str
    filename: str
    original_name: str
    size: int


# ============================================================================
# User Schemas
# ============================================================================


class AddressSchema(BaseModel):
    """Postal address."""

    street: str | None = Field(default=None, max_length=100)
    city: str | None = Field(default=None, max_length=50)
    state: str | None = Field(default=None, max_length=50)
    zip_code: str | None = None
    country: str | None = Field(default=None, max_length=50)

    @field_validator("zip_code")
    @classmethod
    def validate_zip_code(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        if not _ZIP_PATTERN.match(value.strip()):
            raise ValueError("Please provide a valid ZIP code")
        return value.strip()


class UserResponse(BaseModel):
    """User account, never including the password."""

    id: str
    first_name: str
    last_name: str
    full_name: str
    email: str
    role: str
    is_active: bool
    is_email_verified: bool
    phone: str | None
    address: AddressSchema | None
    last_login: datetime | None
    created_at: datetime
    updated_at: datetime


class AuthResponse(BaseModel):
    """Signed-in user and bearer token."""

    user: UserResponse
    token: str


class UserListResponse(BaseModel):
    """Page of users."""

    users: list[UserResponse]
    pagination: PaginationSchema


class RegisterRequest(BaseModel):
    """Self-service sign-up."""

    first_name: str
    last_name: str
    email: EmailStr
    password: str
    phone: str | None = None

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_names(cls, value: str) -> str:
        return check_person_name(value)

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        return check_password_strength(value)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, value: str | None) -> str | None:
        return check_phone(value)


class LoginRequest(BaseModel):
    """Email and password sign-in."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class ProfileUpdateRequest(BaseModel):
    """Fields a user may change on their own profile."""

    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    address: AddressSchema | None = None

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_names(cls, value: str | None) -> str | None:
        return None if value is None else check_person_name(value)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, value: str | None) -> str | None:
        return check_phone(value)


class ChangePasswordRequest(BaseModel):
    """Password change for the signed-in user."""

    current_password: str = Field(..., min_length=1)
    new_password: str

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, value: str) -> str:
        return check_password_strength(value)


class AdminUserCreateRequest(BaseModel):
    """Account created by an admin."""

    first_name: str
    last_name: str
    email: EmailStr
    password: str | None = None
    role: str = Field(default="user", pattern="^(user|admin|moderator)$")
    phone: str | None = None
    is_active: bool = True

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_names(cls, value: str) -> str:
        return check_person_name(value)

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str | None) -> str | None:
        return None if value is None else check_password_strength(value)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, value: str | None) -> str | None:
        return check_phone(value)


class AdminUserUpdateRequest(BaseModel):
    """Partial account update by an admin."""

    first_name: str | None = None
    last_name: str | None = None
    email: EmailStr | None = None
    role: str | None = Field(default=None, pattern="^(user|admin|moderator)$")
    is_active: bool | None = None
    is_email_verified: bool | None = None
    phone: str | None = None
    address: AddressSchema | None = None

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_names(cls, value: str | None) -> str | None:
        return None if value is None else check_person_name(value)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, value: str | None) -> str | None:
        return check_phone(value)


# ============================================================================
# Review Schemas
# ============================================================================


class ReviewAuthorSchema(BaseModel):
    """Public view of a review's author."""

    id: str
    first_name: str
    last_name: str


class ReviewProductSchema(BaseModel):
    """Short product reference on a review."""

    id: str
    name: str
    slug: str
    image_url: str | None


class ReviewResponse(BaseModel):
    """Product review."""

    id: str
    product_id: str
    user_id: str | None
    rating: int
    title: str
    comment: str
    is_approved: bool
    moderation_status: str
    is_reported: bool
    report_reason: str | None
    admin_response: str | None
    helpful_count: int
    created_at: datetime
    updated_at: datetime
    author: ReviewAuthorSchema | None = None
    product: ReviewProductSchema | None = None


class RatingStatsSchema(BaseModel):
    """Aggregate rating over approved reviews."""

    average_rating: float
    total_reviews: int
    rating_distribution: dict[str, int]


class ModerationStatsSchema(BaseModel):
    """Review counts for the moderation dashboard."""

    total: int
    pending: int
    approved: int
    rejected: int
    reported: int


class ProductReviewsResponse(BaseModel):
    """Approved reviews of one product with its rating stats."""

    reviews: list[ReviewResponse]
    pagination: PaginationSchema
    stats: RatingStatsSchema


class ReviewListResponse(BaseModel):
    """Page of reviews."""

    reviews: list[ReviewResponse]
    pagination: PaginationSchema


class AdminReviewsResponse(BaseModel):
    """Page of reviews in any state with moderation counts."""

    reviews: list[ReviewResponse]
    pagination: PaginationSchema
    stats: ModerationStatsSchema


class ReviewCreateRequest(BaseModel):
    """New review."""

    product_id: str = Field(..., min_length=1)
    rating: int = Field(..., ge=1, le=5)
    title: str = Field(..., min_length=1, max_length=100)
    comment: str = Field(..., min_length=1, max_length=1000)


class ReviewUpdateRequest(BaseModel):
    """Edit of the author's own review."""

    rating: int | None = Field(default=None, ge=1, le=5)
    title: str | None = Field(default=None, min_length=1, max_length=100)
    comment: str | None = Field(default=None, min_length=1, max_length=1000)


class ReviewReportRequest(BaseModel):
    """Report of an inappropriate review."""

    reason: str = Field(default="", max_length=200)


class ReviewStatusRequest(BaseModel):
    """Moderation decision."""

    is_approved: bool
    admin_response: str | None = Field(default=None, max_length=500)
