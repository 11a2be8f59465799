"""State machines for domain entities.

Deterministic state machines for review moderation and the storefront
session. State machines enforce which status changes are valid.
"""

from enum import Enum

from axgbolt.domain.exceptions import InvalidStateTransitionError


# ============================================================================
# Review Moderation State Machine
# ============================================================================


class ReviewStatus(str, Enum):
    """Review moderation states.

    State diagram:
        PENDING ──── approve ────► APPROVED
           │                        │   ▲
           │ reject          reject │   │ approve
           │                        ▼   │
           └──────────────────────► REJECTED

    Owner edits send APPROVED or REJECTED reviews back to PENDING.
    Admins only ever target APPROVED or REJECTED.
    """

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    def can_transition_to(self, target: "ReviewStatus") -> bool:
        """Check if transition to target state is valid.

        Args:
            target: Target state to transition to.

        Returns:
            True if transition is valid.
        """
        return target in _REVIEW_TRANSITIONS.get(self, set())

    def allowed_transitions(self) -> list["ReviewStatus"]:
        """Get list of valid target states.

        Returns:
            List of states that can be transitioned to.
        """
        return sorted(_REVIEW_TRANSITIONS.get(self, set()), key=lambda s: s.value)

    def is_visible(self) -> bool:
        """Check if reviews in this state are shown publicly."""
        return self == ReviewStatus.APPROVED

    @classmethod
    def from_approval(cls, is_approved: bool) -> "ReviewStatus":
        """Map an admin approval flag onto a moderation state."""
        return cls.APPROVED if is_approved else cls.REJECTED


_REVIEW_TRANSITIONS: dict[ReviewStatus, set[ReviewStatus]] = {
    ReviewStatus.PENDING: {ReviewStatus.APPROVED, ReviewStatus.REJECTED},
    ReviewStatus.APPROVED: {ReviewStatus.REJECTED, ReviewStatus.PENDING},
    ReviewStatus.REJECTED: {ReviewStatus.APPROVED, ReviewStatus.PENDING},
}


def validate_review_transition(
    review_id: str,
    current: ReviewStatus,
    target: ReviewStatus,
) -> None:
    """Validate a review moderation transition.

    Re-applying the current state is a no-op and always allowed.

    Raises:
        InvalidStateTransitionError: If the transition is invalid.
    """
    if current == target:
        return
    if not current.can_transition_to(target):
        raise InvalidStateTransitionError(
            entity_type="Review",
            entity_id=review_id,
            current_state=current.value,
            target_state=target.value,
            allowed_transitions=[s.value for s in current.allowed_transitions()],
        )


# ============================================================================
# Storefront Session State Machine
# ============================================================================


class SessionStatus(str, Enum):
    """Storefront session states.

    State diagram:
        ANONYMOUS ── sign in / restore ──► AUTHENTICATING
            ▲                                  │      │
            │          failure                 │      │ success
            ├──────────────────────────────────┘      ▼
            │                                   AUTHENTICATED
            └──────── sign out / 401 ─────────────────┘
    """

    ANONYMOUS = "anonymous"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"

    def can_transition_to(self, target: "SessionStatus") -> bool:
        """Check if transition to target state is valid."""
        return target in _SESSION_TRANSITIONS.get(self, set())

    def allowed_transitions(self) -> list["SessionStatus"]:
        """Get list of valid target states."""
        return sorted(_SESSION_TRANSITIONS.get(self, set()), key=lambda s: s.value)


_SESSION_TRANSITIONS: dict[SessionStatus, set[SessionStatus]] = {
    SessionStatus.ANONYMOUS: {SessionStatus.AUTHENTICATING},
    SessionStatus.AUTHENTICATING: {SessionStatus.AUTHENTICATED, SessionStatus.ANONYMOUS},
    # Signing in again while signed in re-enters AUTHENTICATING
    SessionStatus.AUTHENTICATED: {SessionStatus.ANONYMOUS, SessionStatus.AUTHENTICATING},
}


def validate_session_transition(
    session_id: str,
    current: SessionStatus,
    target: SessionStatus,
) -> None:
    """Validate a session transition.

    Raises:
        InvalidStateTransitionError: If the transition is invalid.
    """
    if not current.can_transition_to(target):
        raise InvalidStateTransitionError(
            entity_type="Session",
            entity_id=session_id,
            current_state=current.value,
            target_state=target.value,
            allowed_transitions=[s.value for s in current.allowed_transitions()],
        )
