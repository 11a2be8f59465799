"""Review section of the product detail page."""

from dataclasses import dataclass, field
from typing import Any

import structlog

from axgbolt.client.api_client import AXGBoltAPIClient
from axgbolt.storefront.session import AuthSession

logger = structlog.get_logger()

SUBMITTED_MESSAGE = "Review submitted successfully! It will be visible after admin approval."


def _empty_distribution() -> dict[str, int]:
    return {str(star): 0 for star in range(1, 6)}


@dataclass
class ReviewStats:
    """Rating summary shown above the reviews."""

    average_rating: float = 0.0
    total_reviews: int = 0
    rating_distribution: dict[str, int] = field(default_factory=_empty_distribution)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "ReviewStats":
        if not data:
            return cls()
        distribution = _empty_distribution()
        distribution.update(
            {str(k): int(v) for k, v in (data.get("rating_distribution") or {}).items()}
        )
        return cls(
            average_rating=float(data.get("average_rating") or 0.0),
            total_reviews=int(data.get("total_reviews") or 0),
            rating_distribution=distribution,
        )


class ProductReviewsWidget:
    """Approved reviews of one product, plus writing, reporting and voting.

    Newly written reviews wait for moderation, so they do not show up in
    the list after a refresh.
    """

    def __init__(self, api: AXGBoltAPIClient, session: AuthSession, product_id: str) -> None:
        self.api = api
        self.session = session
        self.product_id = product_id
        self.reviews: list[dict[str, Any]] = []
        self.stats = ReviewStats()
        self.loading = False
        self.error: str | None = None
        self.message: str | None = None

    async def refresh(self) -> bool:
        self.loading = True
        self.error = None
        try:
            response = await self.api.get_product_reviews(self.product_id)
        finally:
            self.loading = False

        if not response.success or not isinstance(response.data, dict):
            self.error = response.error.user_message if response.error else "Failed to fetch reviews"
            logger.warning("Review fetch failed", product_id=self.product_id, error=self.error)
            return False

        self.reviews = list(response.data.get("reviews") or [])
        self.stats = ReviewStats.from_dict(response.data.get("stats"))
        return True

    async def submit(self, rating: int, title: str, comment: str) -> bool:
        """Write a review for this product."""
        self.error = None
        self.message = None

        if not self.session.is_authenticated:
            self.error = "Please login to submit a review"
            return False
        if not 1 <= rating <= 5:
            self.error = "Please select a rating"
            return False
        if not title.strip() or not comment.strip():
            self.error = "Please provide a title and a comment"
            return False

        response = await self.api.create_review(self.product_id, rating, title, comment)
        if not response.success:
            self.error = response.error.user_message if response.error else "Failed to submit review"
            return False

        self.message = SUBMITTED_MESSAGE
        await self.refresh()
        return True

    async def mark_helpful(self, review_id: str) -> bool:
        response = await self.api.mark_review_helpful(review_id)
        if not response.success:
            self.error = "Failed to mark review as helpful"
            return False
        await self.refresh()
        return True

    async def report(self, review_id: str, reason: str) -> bool:
        """Report a review. Requires a signed-in user and a reason."""
        self.error = None
        self.message = None

        if not self.session.is_authenticated:
            self.error = "Please login to report a review"
            return False
        if not reason.strip():
            self.error = "Please provide a reason for reporting this review"
            return False

        response = await self.api.report_review(review_id, reason.strip())
        if not response.success:
            self.error = response.error.user_message if response.error else "Failed to report review"
            return False

        self.message = "Review reported successfully. Our team will review it."
        await self.refresh()
        return True
