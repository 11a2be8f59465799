"""User and review repositories for database operations.

Provides CRUD operations with filtering, sorting, and pagination for the
``users`` and ``reviews`` tables.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from axgbolt.catalog.repository import like_pattern
from axgbolt.infrastructure.models import ReviewModel, UserModel


# ============================================================================
# User Repository
# ============================================================================


@dataclass
class UserQuery:
    """Filter conditions for user listings.

    Attributes:
        role: Exact role.
        is_active: Filter by active flag.
        search: Case-insensitive substring over first name, last name
            and email.
    """

    role: str | None = None
    is_active: bool | None = None
    search: str | None = None


class UserRepository:
    """Repository for user database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def save(self, user: UserModel) -> UserModel:
        """Save a user to database."""
        self.session.add(user)
        await self.session.flush()
        return user

    async def get_by_id(self, user_id: str) -> UserModel | None:
        """Get user by ID."""
        result = await self.session.execute(
            select(UserModel).where(UserModel.id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> UserModel | None:
        """Get user by email, ignoring case."""
        result = await self.session.execute(
            select(UserModel).where(UserModel.email == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def find_by_ids(self, user_ids: list[str]) -> dict[str, UserModel]:
        """Load users by ID, keyed by ID."""
        if not user_ids:
            return {}
        result = await self.session.execute(
            select(UserModel).where(UserModel.id.in_(user_ids))
        )
        return {user.id: user for user in result.scalars().all()}

    async def find_all(
        self,
        filters: UserQuery | None = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        limit: int = 10,
        offset: int = 0,
    ) -> Sequence[UserModel]:
        """Find users with filtering, sorting, and pagination."""
        query = select(UserModel)

        conditions = self._build_conditions(filters or UserQuery())
        if conditions:
            query = query.where(and_(*conditions))

        sort_column = self._get_sort_column(sort_by)
        if sort_order.lower() == "desc":
            query = query.order_by(sort_column.desc(), UserModel.id)
        else:
            query = query.order_by(sort_column.asc(), UserModel.id)

        query = query.limit(limit).offset(offset)

        result = await self.session.execute(query)
        return result.scalars().all()

    async def count(self, filters: UserQuery | None = None) -> int:
        """Count users matching filters."""
        query = select(func.count(UserModel.id))

        conditions = self._build_conditions(filters or UserQuery())
        if conditions:
            query = query.where(and_(*conditions))

        result = await self.session.execute(query)
        return result.scalar_one()

    async def delete(self, user: UserModel) -> None:
        """Delete a user."""
        await self.session.delete(user)
        await self.session.flush()

    def _build_conditions(self, filters: UserQuery) -> list[Any]:
        conditions: list[Any] = []

        if filters.role is not None:
            conditions.append(UserModel.role == filters.role)

        if filters.is_active is not None:
            conditions.append(UserModel.is_active == filters.is_active)

        if filters.search:
            pattern = like_pattern(filters.search.strip())
            conditions.append(
                or_(
                    UserModel.first_name.ilike(pattern, escape="\\"),
                    UserModel.last_name.ilike(pattern, escape="\\"),
                    UserModel.email.ilike(pattern, escape="\\"),
                )
            )

        return conditions

    def _get_sort_column(self, sort_by: str) -> Any:
        columns = {
            "created_at": UserModel.created_at,
            "first_name": UserModel.first_name,
            "last_name": UserModel.last_name,
            "email": UserModel.email,
            "role": UserModel.role,
            "last_login": UserModel.last_login,
        }
        return columns.get(sort_by, UserModel.created_at)


# ============================================================================
# Review Repository
# ============================================================================


@dataclass
class ReviewQuery:
    """Filter conditions for review listings."""

    product_id: str | None = None
    user_id: str | None = None
    is_approved: bool | None = None
    is_reported: bool | None = None
    moderation_status: str | None = None
    rating: int | None = None


@dataclass
class RatingStats:
    """Aggregate rating over approved reviews.

    Attributes:
        average_rating: Mean rating rounded to one decimal.
        total_reviews: Number of approved reviews.
        rating_distribution: Count per star, keyed "1".."5".
    """

    average_rating: float
    total_reviews: int
    rating_distribution: dict[str, int]

    @classmethod
    def empty(cls) -> "RatingStats":
        """Stats for a product with no approved reviews."""
        return cls(
            average_rating=0.0,
            total_reviews=0,
            rating_distribution={str(star): 0 for star in range(1, 6)},
        )


@dataclass
class ModerationStats:
    """Review counts for the admin dashboard."""

    total: int
    pending: int
    approved: int
    rejected: int
    reported: int


class ReviewRepository:
    """Repository for review database operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def save(self, review: ReviewModel) -> ReviewModel:
        """Save a review to database."""
        self.session.add(review)
        await self.session.flush()
        return review

    async def get_by_id(self, review_id: str) -> ReviewModel | None:
        """Get review by ID."""
        result = await self.session.execute(
            select(ReviewModel).where(ReviewModel.id == review_id)
        )
        return result.scalar_one_or_none()

    async def get_by_product_and_user(
        self,
        product_id: str,
        user_id: str,
    ) -> ReviewModel | None:
        """Get a user's review of a product."""
        result = await self.session.execute(
            select(ReviewModel).where(
                and_(
                    ReviewModel.product_id == product_id,
                    ReviewModel.user_id == user_id,
                )
            )
        )
        return result.scalar_one_or_none()

    async def find_all(
        self,
        filters: ReviewQuery | None = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        limit: int = 10,
        offset: int = 0,
    ) -> Sequence[ReviewModel]:
        """Find reviews with filtering, sorting, and pagination."""
        query = select(ReviewModel)

        conditions = self._build_conditions(filters or ReviewQuery())
        if conditions:
            query = query.where(and_(*conditions))

        sort_column = self._get_sort_column(sort_by)
        if sort_order.lower() == "desc":
            query = query.order_by(sort_column.desc(), ReviewModel.id)
        else:
            query = query.order_by(sort_column.asc(), ReviewModel.id)

        query = query.limit(limit).offset(offset)

        result = await self.session.execute(query)
        return result.scalars().all()

    async def count(self, filters: ReviewQuery | None = None) -> int:
        """Count reviews matching filters."""
        query = select(func.count(ReviewModel.id))

        conditions = self._build_conditions(filters or ReviewQuery())
        if conditions:
            query = query.where(and_(*conditions))

        result = await self.session.execute(query)
        return result.scalar_one()

    async def rating_stats(self, product_id: str) -> RatingStats:
        """Aggregate approved ratings for a product."""
        result = await self.session.execute(
            select(ReviewModel.rating, func.count(ReviewModel.id))
            .where(
                and_(
                    ReviewModel.product_id == product_id,
                    ReviewModel.is_approved.is_(True),
                )
            )
            .group_by(ReviewModel.rating)
        )
        rows = result.all()
        if not rows:
            return RatingStats.empty()

        distribution = {str(star): 0 for star in range(1, 6)}
        total = 0
        rating_sum = 0
        for rating, count in rows:
            distribution[str(rating)] = count
            total += count
            rating_sum += rating * count

        return RatingStats(
            average_rating=round(rating_sum / total, 1),
            total_reviews=total,
            rating_distribution=distribution,
        )

    async def moderation_stats(self) -> ModerationStats:
        """Count reviews by moderation state."""
        return ModerationStats(
            total=await self.count(),
            pending=await self.count(ReviewQuery(moderation_status="pending")),
            approved=await self.count(ReviewQuery(is_approved=True)),
            rejected=await self.count(ReviewQuery(moderation_status="rejected")),
            reported=await self.count(ReviewQuery(is_reported=True)),
        )

    async def increment_helpful(self, review: ReviewModel) -> ReviewModel:
        """Atomically bump the helpful counter."""
        await self.session.execute(
            update(ReviewModel)
            .where(ReviewModel.id == review.id)
            .values(helpful_count=ReviewModel.helpful_count + 1)
            .execution_options(synchronize_session=False)
        )
        await self.session.refresh(review, attribute_names=["helpful_count"])
        return review

    async def detach_user(self, user_id: str) -> int:
        """Clear the author of every review written by a user."""
        result = await self.session.execute(
            update(ReviewModel)
            .where(ReviewModel.user_id == user_id)
            .values(user_id=None)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    async def delete(self, review: ReviewModel) -> None:
        """Delete a review."""
        await self.session.delete(review)
        await self.session.flush()

    def _build_conditions(self, filters: ReviewQuery) -> list[Any]:
        conditions: list[Any] = []

        if filters.product_id is not None:
            conditions.append(ReviewModel.product_id == filters.product_id)
        if filters.user_id is not None:
            conditions.append(ReviewModel.user_id == filters.user_id)
        if filters.is_approved is not None:
            conditions.append(ReviewModel.is_approved == filters.is_approved)
        if filters.is_reported is not None:
            conditions.append(ReviewModel.is_reported == filters.is_reported)
        if filters.moderation_status is not None:
            conditions.append(ReviewModel.moderation_status == filters.moderation_status)
        if filters.rating is not None:
            conditions.append(ReviewModel.rating == filters.rating)

        return conditions

    def _get_sort_column(self, sort_by: str) -> Any:
        columns = {
            "created_at": ReviewModel.created_at,
            "rating": ReviewModel.rating,
            "helpful_count": ReviewModel.helpful_count,
            "updated_at": ReviewModel.updated_at,
        }
        return columns.get(sort_by, ReviewModel.created_at)
