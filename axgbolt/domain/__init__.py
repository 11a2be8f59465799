"""Domain layer - state machines and domain exceptions.

- **State Machines**: review moderation (ReviewStatus) and the storefront
  session (SessionStatus)
- **Exceptions**: domain errors, each mapped to an HTTP status and code

Example usage:
    from axgbolt.domain import ReviewStatus, validate_review_transition

    validate_review_transition("rev-1", ReviewStatus.PENDING, ReviewStatus.APPROVED)
"""

from axgbolt.domain.exceptions import (
    AuthenticationError,
    ConflictError,
    DomainError,
    InvalidStateTransitionError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitExceededError,
    ValidationFailedError,
)
from axgbolt.domain.state_machines import (
    ReviewStatus,
    SessionStatus,
    validate_review_transition,
    validate_session_transition,
)

__all__ = [
    # Exceptions
    "AuthenticationError",
    "ConflictError",
    "DomainError",
    "InvalidStateTransitionError",
    "NotFoundError",
    "PermissionDeniedError",
    "RateLimitExceededError",
    "ValidationFailedError",
    # State machines
    "ReviewStatus",
    "SessionStatus",
    "validate_review_transition",
    "validate_session_transition",
]
