"""Review application service.

Handles writing, editing, reporting and moderating product reviews, and
the rating statistics shown next to them.
"""

from dataclasses import dataclass
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from axgbolt.catalog.models import Product
from axgbolt.catalog.repository import ProductRepository
from axgbolt.catalog.service import PaginatedResult, PaginationParams
from axgbolt.domain.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationFailedError,
)
from axgbolt.domain.state_machines import ReviewStatus, validate_review_transition
from axgbolt.infrastructure.models import ReviewModel, UserModel
from axgbolt.infrastructure.repositories import (
    ModerationStats,
    RatingStats,
    ReviewQuery,
    ReviewRepository,
    UserRepository,
)

logger = structlog.get_logger()

_EDITABLE_FIELDS = {"rating", "title", "comment"}


# ============================================================================
# Service Result Types
# ============================================================================


@dataclass
class ReviewDetails:
    """A review with its author and product, when they still exist."""

    review: ReviewModel
    author: UserModel | None = None
    product: Product | None = None


# ============================================================================
# Review Service
# ============================================================================


class ReviewService:
    """Service for product reviews and moderation."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize service with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session
        self.reviews = ReviewRepository(session)
        self.users = UserRepository(session)
        self.products = ProductRepository(session)

    # =========================================================================
    # Public
    # =========================================================================

    async def list_product_reviews(
        self,
        product_id: str,
        pagination: PaginationParams,
        rating: int | None = None,
    ) -> tuple[PaginatedResult[ReviewDetails], RatingStats]:
        """List a product's approved reviews with its rating stats.

        Raises:
            NotFoundError: If the product does not exist.
        """
        if await self.products.get_by_id(product_id) is None:
            raise NotFoundError("Product", product_id)

        query = ReviewQuery(product_id=product_id, is_approved=True, rating=rating)
        page = await self._page(query, pagination)
        stats = await self.reviews.rating_stats(product_id)
        return page, stats

    async def create_review(
        self,
        user: UserModel,
        product_id: str,
        rating: int,
        title: str,
        comment: str,
    ) -> ReviewDetails:
        """Write a review. New reviews wait for moderation.

        Raises:
            NotFoundError: If the product does not exist or is inactive.
            ConflictError: If the user already reviewed the product.
        """
        product = await self.products.get_by_id(product_id)
        if product is None or not product.is_active:
            raise NotFoundError("Product", product_id)

        if await self.reviews.get_by_product_and_user(product_id, user.id) is not None:
            raise ConflictError(
                "You have already reviewed this product",
                details={"product_id": product_id},
            )

        review = ReviewModel(
            product_id=product_id,
            user_id=user.id,
            rating=rating,
            title=title.strip(),
            comment=comment.strip(),
            is_approved=False,
            moderation_status=ReviewStatus.PENDING.value,
        )
        await self.reviews.save(review)
        await self.session.commit()

        logger.info("Review created", review_id=review.id, product_id=product_id)
        return ReviewDetails(review=review, author=user, product=product)

    async def list_user_reviews(
        self,
        user: UserModel,
        pagination: PaginationParams,
    ) -> PaginatedResult[ReviewDetails]:
        """List every review the user wrote, in any moderation state."""
        return await self._page(ReviewQuery(user_id=user.id), pagination)

    async def update_review(
        self,
        user: UserModel,
        review_id: str,
        changes: dict[str, Any],
    ) -> ReviewDetails:
        """Edit the user's own review. Edits send it back to moderation.

        Raises:
            NotFoundError: If the review does not exist.
            PermissionDeniedError: If the user is not the author.
        """
        review = await self._get(review_id)
        if review.user_id != user.id:
            raise PermissionDeniedError("You can only edit your own reviews")

        for key, value in changes.items():
            if key in _EDITABLE_FIELDS and value is not None:
                setattr(review, key, value.strip() if isinstance(value, str) else value)

        self._transition(review, ReviewStatus.PENDING)
        await self.session.flush()
        await self.session.commit()

        logger.info("Review updated", review_id=review.id)
        return (await self._details([review]))[0]

    async def delete_review(self, user: UserModel, review_id: str) -> None:
        """Delete the user's own review (admins may delete any).

        Raises:
            NotFoundError: If the review does not exist.
            PermissionDeniedError: If the user is neither author nor admin.
        """
        review = await self._get(review_id)
        if review.user_id != user.id and not user.is_admin:
            raise PermissionDeniedError("You can only delete your own reviews")

        await self.reviews.delete(review)
        await self.session.commit()

        logger.info("Review deleted", review_id=review_id, by=user.id)

    async def report_review(self, review_id: str, reason: str) -> ReviewModel:
        """Flag a review for moderator attention.

        Raises:
            ValidationFailedError: If no reason is given.
            NotFoundError: If the review does not exist.
        """
        reason = (reason or "").strip()
        if not reason:
            raise ValidationFailedError("Report reason is required", field="reason")

        review = await self._get(review_id)
        review.is_reported = True
        review.report_reason = reason
        await self.session.flush()
        await self.session.commit()

        logger.info("Review reported", review_id=review_id)
        return review

    async def mark_helpful(self, review_id: str) -> ReviewModel:
        """Increment a review's helpful counter.

        Raises:
            NotFoundError: If the review does not exist.
        """
        review = await self._get(review_id)
        await self.reviews.increment_helpful(review)
        await self.session.commit()
        return review

    # =========================================================================
    # Admin
    # =========================================================================

    async def admin_list(
        self,
        filters: ReviewQuery,
        pagination: PaginationParams,
    ) -> tuple[PaginatedResult[ReviewDetails], ModerationStats]:
        """List reviews in any state with moderation counts."""
        page = await self._page(filters, pagination)
        stats = await self.reviews.moderation_stats()
        return page, stats

    async def moderate(
        self,
        review_id: str,
        is_approved: bool,
        admin_response: str | None = None,
    ) -> ReviewDetails:
        """Approve or reject a review, optionally with a public response.

        Raises:
            NotFoundError: If the review does not exist.
            InvalidStateTransitionError: If the move is not allowed.
        """
        review = await self._get(review_id)
        self._transition(review, ReviewStatus.from_approval(is_approved))
        if admin_response is not None:
            review.admin_response = admin_response.strip() or None

        await self.session.flush()
        await self.session.commit()

        logger.info(
            "Review moderated",
            review_id=review.id,
            status=review.moderation_status,
            has_response=review.admin_response is not None,
        )
        return (await self._details([review]))[0]

    async def admin_delete(self, review_id: str) -> None:
        """Delete any review.

        Raises:
            NotFoundError: If the review does not exist.
        """
        review = await self._get(review_id)
        await self.reviews.delete(review)
        await self.session.commit()

        logger.info("Review deleted by admin", review_id=review_id)

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _get(self, review_id: str) -> ReviewModel:
        review = await self.reviews.get_by_id(review_id)
        if review is None:
            raise NotFoundError("Review", review_id)
        return review

    def _transition(self, review: ReviewModel, target: ReviewStatus) -> None:
        current = ReviewStatus(review.moderation_status)
        validate_review_transition(review.id, current, target)
        review.moderation_status = target.value
        review.is_approved = target.is_visible()

    async def _page(
        self,
        query: ReviewQuery,
        pagination: PaginationParams,
    ) -> PaginatedResult[ReviewDetails]:
        reviews = await self.reviews.find_all(
            query,
            sort_by=pagination.sort_by,
            sort_order=pagination.sort_order,
            limit=pagination.limit,
            offset=pagination.offset,
        )
        total = await self.reviews.count(query)
        return PaginatedResult(
            items=await self._details(list(reviews)),
            total=total,
            page=pagination.page,
            page_size=pagination.page_size,
        )

    async def _details(self, reviews: list[ReviewModel]) -> list[ReviewDetails]:
        authors = await self.users.find_by_ids(
            sorted({r.user_id for r in reviews if r.user_id})
        )
        products = await self.products.find_by_ids(sorted({r.product_id for r in reviews}))
        return [
            ReviewDetails(
                review=review,
                author=authors.get(review.user_id) if review.user_id else None,
                product=products.get(review.product_id),
            )
            for review in reviews
        ]
