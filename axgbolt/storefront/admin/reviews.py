"""Admin review moderation panel."""

from typing import Any

from axgbolt.storefront.admin.base import AdminPanel, ConfirmCallback, ListQuery


class ReviewPanel(AdminPanel):
    """Moderate reviews: approve or reject with an optional response.

    ``reported`` is independent of approval; ``show_reported`` narrows the
    list to reported reviews so moderators can handle them first.
    Filters: ``status``, ``is_approved``, ``is_reported``, ``rating``,
    ``product_id``.
    """

    items_key = "reviews"
    default_sort = "created_at"

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.stats: dict[str, int] = {}

    def _fetch(self, query: ListQuery) -> Any:
        return self.api.admin_list_reviews(
            page=query.page,
            limit=query.page_size,
            status=query.filters.get("status"),
            is_approved=query.filters.get("is_approved"),
            is_reported=query.filters.get("is_reported"),
            rating=query.filters.get("rating"),
            product_id=query.filters.get("product_id"),
            sort_by=query.sort_by,
            sort_order=query.sort_order,
        )

    def _extra_results(self, data: dict[str, Any]) -> None:
        self.stats = dict(data.get("stats") or {})

    def show_reported(self, only_reported: bool = True) -> None:
        self.set_filter("is_reported", True if only_reported else None)

    async def approve(self, review_id: str, response: str | None = None) -> bool:
        return await self._moderate(review_id, True, response)

    async def reject(self, review_id: str, response: str | None = None) -> bool:
        return await self._moderate(review_id, False, response)

    async def delete(self, review_id: str, confirm: ConfirmCallback) -> bool:
        return await self._delete(
            lambda: self.api.admin_delete_review(review_id),
            confirm,
            "Are you sure you want to delete this review? This action cannot be undone.",
            "Failed to delete review",
        )

    async def _moderate(self, review_id: str, is_approved: bool, response: str | None) -> bool:
        result = await self._mutate(
            self.api.moderate_review(review_id, is_approved, (response or "").strip() or None),
            "Failed to update review",
        )
        if not result.success:
            return False
        await self.refresh()
        return True
