"""Domain exceptions.

Errors raised by the services when a request breaks a business rule.
Each one carries the HTTP status and machine-readable code the API
layer renders it with.
"""

from typing import Any


class DomainError(Exception):
    """Base class for errors the API renders as an error envelope.

    Subclasses set ``status_code`` and ``error_code``. Field-level errors
    go under ``details["errors"]`` as ``{field, message}`` pairs.
    """

    status_code: int = 400
    error_code: str = "DOMAIN_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    @property
    def field_errors(self) -> list[dict[str, str | None]]:
        """Field-level errors for the response envelope."""
        return list(self.details.get("errors", []))


# ============================================================================
# State Machine Errors
# ============================================================================


class InvalidStateTransitionError(DomainError):
    """Raised when a review or session is moved to a status its current
    status does not lead to.
    """

    status_code = 409
    error_code = "INVALID_STATE_TRANSITION"

    def __init__(
        self,
        entity_type: str,
        entity_id: str,
        current_state: str,
        target_state: str,
        allowed_transitions: list[str] | None = None,
    ) -> None:
        allowed = allowed_transitions or []
        message = (
            f"{entity_type} {entity_id} cannot move from "
            f"'{current_state}' to '{target_state}' "
            f"(allowed: {', '.join(allowed) or 'none'})"
        )
        super().__init__(
            message,
            details={
                "entity_type": entity_type,
                "entity_id": entity_id,
                "current_state": current_state,
                "target_state": target_state,
                "allowed_transitions": allowed,
            },
        )


# ============================================================================
# Request Errors
# ============================================================================


class ValidationFailedError(DomainError):
    """Raised when input fails a business validation rule."""

    status_code = 422
    error_code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize validation error.

        Args:
            message: Human-readable error message.
            field: Name of the offending field, if any.
        """
        super().__init__(
            message,
            details={"errors": [{"field": field, "message": message}]},
        )


class NotFoundError(DomainError):
    """Raised when an entity does not exist."""

    status_code = 404
    error_code = "NOT_FOUND"

    def __init__(self, entity_type: str, entity_id: str) -> None:
        """Initialize not found error.

        Args:
            entity_type: Type of entity (e.g., "Product").
            entity_id: Identifier that was looked up.
        """
        super().__init__(
            f"{entity_type} not found: {entity_id}",
            details={"entity_type": entity_type, "entity_id": entity_id},
        )


class ConflictError(DomainError):
    """Raised when a write would violate a uniqueness rule."""

    status_code = 409
    error_code = "CONFLICT"


# ============================================================================
# Auth Errors
# ============================================================================


class AuthenticationError(DomainError):
    """Raised when credentials or tokens are missing or invalid."""

    status_code = 401
    error_code = "UNAUTHORIZED"


class PermissionDeniedError(DomainError):
    """Raised when an authenticated user lacks the required role."""

    status_code = 403
    error_code = "FORBIDDEN"


class RateLimitExceededError(DomainError):
    """Raised when a client has used up a request limit."""

    status_code = 429
    error_code = "RATE_LIMITED"

    def __init__(self, message: str, retry_after: int) -> None:
        super().__init__(message, details={"retry_after": retry_after})
        self.retry_after = retry_after
