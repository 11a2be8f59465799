"""Application layer module.

Contains application services (use cases) that orchestrate
domain logic and infrastructure.
"""

from axgbolt.application.review_service import ReviewDetails, ReviewService
from axgbolt.application.user_service import (
    DEFAULT_ADMIN_CREATED_PASSWORD,
    AuthResult,
    UserService,
)

__all__ = [
    "DEFAULT_ADMIN_CREATED_PASSWORD",
    "AuthResult",
    "ReviewDetails",
    "ReviewService",
    "UserService",
]
