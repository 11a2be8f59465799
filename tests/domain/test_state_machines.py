"""Tests for review moderation and session state machines."""

import pytest

from axgbolt.domain.exceptions import InvalidStateTransitionError
from axgbolt.domain.state_machines import (
    ReviewStatus,
    SessionStatus,
    validate_review_transition,
    validate_session_transition,
)


class TestReviewStatus:
    """Tests for ReviewStatus state machine."""

    def test_pending_transitions(self) -> None:
        """PENDING can be approved or rejected."""
        assert ReviewStatus.PENDING.can_transition_to(ReviewStatus.APPROVED)
        assert ReviewStatus.PENDING.can_transition_to(ReviewStatus.REJECTED)

    def test_decisions_can_be_revised(self) -> None:
        """Moderators can flip a decision and edits reopen it."""
        assert ReviewStatus.APPROVED.can_transition_to(ReviewStatus.REJECTED)
        assert ReviewStatus.REJECTED.can_transition_to(ReviewStatus.APPROVED)
        assert ReviewStatus.APPROVED.can_transition_to(ReviewStatus.PENDING)

    def test_only_approved_is_visible(self) -> None:
        """Only approved reviews are public."""
        assert ReviewStatus.APPROVED.is_visible()
        assert not ReviewStatus.PENDING.is_visible()
        assert not ReviewStatus.REJECTED.is_visible()

    def test_from_approval(self) -> None:
        """Approval flags map onto terminal decisions."""
        assert ReviewStatus.from_approval(True) == ReviewStatus.APPROVED
        assert ReviewStatus.from_approval(False) == ReviewStatus.REJECTED

    def test_reapplying_state_is_noop(self) -> None:
        """Approving an approved review is allowed."""
        validate_review_transition("r-1", ReviewStatus.APPROVED, ReviewStatus.APPROVED)

    def test_allowed_transitions_sorted(self) -> None:
        """Allowed transitions are listed in a stable order."""
        assert ReviewStatus.PENDING.allowed_transitions() == [
            ReviewStatus.APPROVED,
            ReviewStatus.REJECTED,
        ]


class TestSessionStatus:
    """Tests for SessionStatus state machine."""

    def test_sign_in_flow(self) -> None:
        """Anonymous sessions authenticate through AUTHENTICATING."""
        validate_session_transition("s-1", SessionStatus.ANONYMOUS, SessionStatus.AUTHENTICATING)
        validate_session_transition(
            "s-1", SessionStatus.AUTHENTICATING, SessionStatus.AUTHENTICATED
        )
        validate_session_transition("s-1", SessionStatus.AUTHENTICATED, SessionStatus.ANONYMOUS)

    def test_cannot_skip_authenticating(self) -> None:
        """A session cannot jump straight to AUTHENTICATED."""
        with pytest.raises(InvalidStateTransitionError) as exc_info:
            validate_session_transition(
                "s-1", SessionStatus.ANONYMOUS, SessionStatus.AUTHENTICATED
            )

        error = exc_info.value
        assert error.status_code == 409
        assert error.details["current_state"] == "anonymous"
        assert error.details["allowed_transitions"] == ["authenticating"]

    def test_failed_sign_in_returns_to_anonymous(self) -> None:
        """A failed attempt goes back to ANONYMOUS."""
        assert SessionStatus.AUTHENTICATING.can_transition_to(SessionStatus.ANONYMOUS)

    def test_anonymous_cannot_sign_out(self) -> None:
        """ANONYMOUS to ANONYMOUS is not a transition."""
        assert not SessionStatus.ANONYMOUS.can_transition_to(SessionStatus.ANONYMOUS)
