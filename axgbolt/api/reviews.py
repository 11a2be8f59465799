"""Review API endpoints.

Public product reviews, the author's own reviews, and admin moderation.
"""

from typing import Annotated

from fastapi import APIRouter, Query, status

from axgbolt.api.deps import AdminUser, CurrentUser, ReviewServiceDep
from axgbolt.api.schemas import (
    AdminReviewsResponse,
    ErrorResponse,
    MessageResponse,
    ModerationStatsSchema,
    PaginationSchema,
    ProductReviewsResponse,
    RatingStatsSchema,
    ReviewAuthorSchema,
    ReviewCreateRequest,
    ReviewListResponse,
    ReviewProductSchema,
    ReviewReportRequest,
    ReviewResponse,
    ReviewStatusRequest,
    ReviewUpdateRequest,
)
from axgbolt.application.review_service import ReviewDetails
from axgbolt.catalog.service import PaginationParams
from axgbolt.infrastructure.models import ReviewModel
from axgbolt.infrastructure.repositories import ModerationStats, RatingStats, ReviewQuery

router = APIRouter(prefix="/reviews", tags=["Reviews"])


# ============================================================================
# Converters
# ============================================================================


def review_to_response(review: ReviewModel, details: ReviewDetails | None = None) -> ReviewResponse:
    """Convert ReviewModel to response schema.

    Author and product are attached when ``details`` carries them.
    """
    author = details.author if details else None
    product = details.product if details else None
    return ReviewResponse(
        id=review.id,
        product_id=review.product_id,
        user_id=review.user_id,
        rating=review.rating,
        title=review.title,
        comment=review.comment,
        is_approved=review.is_approved,
        moderation_status=review.moderation_status,
        is_reported=review.is_reported,
        report_reason=review.report_reason,
        admin_response=review.admin_response,
        helpful_count=review.helpful_count,
        created_at=review.created_at,
        updated_at=review.updated_at,
        author=ReviewAuthorSchema(
            id=author.id, first_name=author.first_name, last_name=author.last_name
        )
        if author
        else None,
        product=ReviewProductSchema(
            id=product.id, name=product.name, slug=product.slug, image_url=product.image_url
        )
        if product
        else None,
    )


def details_to_response(details: ReviewDetails) -> ReviewResponse:
    return review_to_response(details.review, details)


def rating_stats_to_response(stats: RatingStats) -> RatingStatsSchema:
    return RatingStatsSchema(
        average_rating=stats.average_rating,
        total_reviews=stats.total_reviews,
        rating_distribution=stats.rating_distribution,
    )


def moderation_stats_to_response(stats: ModerationStats) -> ModerationStatsSchema:
    return ModerationStatsSchema(
        total=stats.total,
        pending=stats.pending,
        approved=stats.approved,
        rejected=stats.rejected,
        reported=stats.reported,
    )


# ============================================================================
# Public Endpoints
# ============================================================================


@router.get(
    "/product/{product_id}",
    response_model=ProductReviewsResponse,
    responses={404: {"model": ErrorResponse}},
    summary="List product reviews",
)
async def list_product_reviews(
    product_id: str,
    service: ReviewServiceDep,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=50)] = 10,
    rating: Annotated[int | None, Query(ge=1, le=5)] = None,
    sort_by: str = "created_at",
    sort_order: Annotated[str, Query(pattern="^(asc|desc)$")] = "desc",
) -> ProductReviewsResponse:
    """List approved reviews of a product with its rating breakdown."""
    result, stats = await service.list_product_reviews(
        product_id,
        PaginationParams(page=page, page_size=limit, sort_by=sort_by, sort_order=sort_order),
        rating=rating,
    )
    return ProductReviewsResponse(
        reviews=[details_to_response(d) for d in result.items],
        pagination=PaginationSchema.from_result(result),
        stats=rating_stats_to_response(stats),
    )


@router.post(
    "/{review_id}/report",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    summary="Report review",
)
async def report_review(
    review_id: str,
    request: ReviewReportRequest,
    user: CurrentUser,
    service: ReviewServiceDep,
) -> MessageResponse:
    """Flag a review for moderators. A reason is required."""
    await service.report_review(review_id, request.reason)
    return MessageResponse(message="Review reported successfully")


@router.post(
    "/{review_id}/helpful",
    response_model=ReviewResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Mark review helpful",
)
async def mark_review_helpful(review_id: str, service: ReviewServiceDep) -> ReviewResponse:
    review = await service.mark_helpful(review_id)
    return review_to_response(review)


# ============================================================================
# Author Endpoints
# ============================================================================


@router.post(
    "",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Create review",
)
async def create_review(
    request: ReviewCreateRequest,
    user: CurrentUser,
    service: ReviewServiceDep,
) -> ReviewResponse:
    """Write a review. It is hidden until a moderator approves it."""
    details = await service.create_review(
        user,
        product_id=request.product_id,
        rating=request.rating,
        title=request.title,
        comment=request.comment,
    )
    return details_to_response(details)


@router.get(
    "/user/my-reviews",
    response_model=ReviewListResponse,
    responses={401: {"model": ErrorResponse}},
    summary="List my reviews",
)
async def list_my_reviews(
    user: CurrentUser,
    service: ReviewServiceDep,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=50)] = 10,
) -> ReviewListResponse:
    result = await service.list_user_reviews(
        user, PaginationParams(page=page, page_size=limit, sort_by="created_at")
    )
    return ReviewListResponse(
        reviews=[details_to_response(d) for d in result.items],
        pagination=PaginationSchema.from_result(result),
    )


@router.put(
    "/{review_id}",
    response_model=ReviewResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Update review",
)
async def update_review(
    review_id: str,
    request: ReviewUpdateRequest,
    user: CurrentUser,
    service: ReviewServiceDep,
) -> ReviewResponse:
    """Edit your own review. The edit goes back to moderation."""
    details = await service.update_review(
        user, review_id, request.model_dump(exclude_unset=True)
    )
    return details_to_response(details)


@router.delete(
    "/{review_id}",
    response_model=MessageResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Delete review",
)
async def delete_review(
    review_id: str,
    user: CurrentUser,
    service: ReviewServiceDep,
) -> MessageResponse:
    await service.delete_review(user, review_id)
    return MessageResponse(message="Review deleted successfully")


# ============================================================================
# Admin Endpoints
# ============================================================================


@router.get(
    "/admin",
    response_model=AdminReviewsResponse,
    responses={403: {"model": ErrorResponse}},
    summary="List reviews (admin)",
)
async def admin_list_reviews(
    service: ReviewServiceDep,
    admin: AdminUser,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
    status_filter: Annotated[
        str | None,
        Query(alias="status", pattern="^(pending|approved|rejected)$"),
    ] = None,
    is_approved: bool | None = None,
    is_reported: bool | None = None,
    product_id: str | None = None,
    rating: Annotated[int | None, Query(ge=1, le=5)] = None,
    sort_by: str = "created_at",
    sort_order: Annotated[str, Query(pattern="^(asc|desc)$")] = "desc",
) -> AdminReviewsResponse:
    """List reviews in any moderation state with dashboard counts."""
    result, stats = await service.admin_list(
        ReviewQuery(
            product_id=product_id,
            is_approved=is_approved,
            is_reported=is_reported,
            moderation_status=status_filter,
            rating=rating,
        ),
        PaginationParams(page=page, page_size=limit, sort_by=sort_by, sort_order=sort_order),
    )
    return AdminReviewsResponse(
        reviews=[details_to_response(d) for d in result.items],
        pagination=PaginationSchema.from_result(result),
        stats=moderation_stats_to_response(stats),
    )


@router.put(
    "/admin/{review_id}/status",
    response_model=ReviewResponse,
    responses={
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Moderate review (admin)",
)
async def moderate_review(
    review_id: str,
    request: ReviewStatusRequest,
    service: ReviewServiceDep,
    admin: AdminUser,
) -> ReviewResponse:
    """Approve or reject a review, optionally replying publicly."""
    details = await service.moderate(
        review_id,
        is_approved=request.is_approved,
        admin_response=request.admin_response,
    )
    return details_to_response(details)


@router.delete(
    "/admin/{review_id}",
    response_model=MessageResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Delete review (admin)",
)
async def admin_delete_review(
    review_id: str,
    service: ReviewServiceDep,
    admin: AdminUser,
) -> MessageResponse:
    await service.admin_delete(review_id)
    return MessageResponse(message="Review deleted successfully")
