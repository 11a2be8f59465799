"""Shared list/filter/paginate behaviour of the admin panels."""

import inspect
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

import structlog

from axgbolt.client.api_client import APIError, APIResponse, AXGBoltAPIClient
from axgbolt.client.config import client_settings
from axgbolt.storefront.debounce import Debouncer
from axgbolt.storefront.session import AuthSession

logger = structlog.get_logger()

ACCESS_DENIED_MESSAGE = "Access denied. Admin privileges required."

# Asked before an irreversible action; returns True to go ahead
ConfirmCallback = Callable[[str], bool | Awaitable[bool]]


@dataclass
class ListQuery:
    """List request of an admin panel.

    Attributes:
        page: Page number (1-indexed).
        page_size: Items per page.
        search: Free-text search.
        filters: Categorical filters; None values are not sent.
        sort_by: Sort field.
        sort_order: "asc" or "desc".
    """

    page: int = 1
    page_size: int = 10
    search: str = ""
    filters: dict[str, Any] = field(default_factory=dict)
    sort_by: str = "created_at"
    sort_order: str = "desc"


@dataclass
class ListPage:
    """One page of a panel's list."""

    items: list[dict[str, Any]] = field(default_factory=list)
    page: int = 1
    total_pages: int = 1
    total_items: int = 0

    @classmethod
    def from_response(cls, data: dict[str, Any], items_key: str) -> "ListPage":
        items = list(data.get(items_key) or [])
        pagination = data.get("pagination") or {}
        return cls(
            items=items,
            page=pagination.get("page") or 1,
            total_pages=pagination.get("pages") or 1,
            total_items=pagination.get("total") or len(items),
        )


def describe_error(error: APIError | None, default: str) -> str:
    """One inline message for a failed call, field errors concatenated."""
    if error is None:
        return default
    if error.error_code == "VALIDATION_ERROR" and error.details:
        return f"Validation failed: {error.user_message}"
    return error.user_message or default


class AdminPanel(ABC):
    """Base class for the products, users and reviews panels.

    Search and filter edits return to page 1 and schedule a debounced
    refresh. A failed list fetch empties the list; a failed mutation keeps
    it and only sets ``error``. Nothing is retried.
    """

    items_key = "items"
    default_sort = "created_at"

    def __init__(
        self,
        api: AXGBoltAPIClient,
        session: AuthSession,
        page_size: int | None = None,
        debounce_delay: float | None = None,
    ) -> None:
        self.api = api
        self.session = session
        self.query = ListQuery(
            page_size=page_size or client_settings.admin_page_size,
            sort_by=self.default_sort,
        )
        self.page = ListPage()
        self.loading = False
        self.error: str | None = None
        self.debouncer = Debouncer(debounce_delay)
        self._generation = 0

    @property
    def items(self) -> list[dict[str, Any]]:
        return self.page.items

    @abstractmethod
    def _fetch(self, query: ListQuery) -> Awaitable[APIResponse]:
        """Start the list request for ``query``."""

    def _extra_results(self, data: dict[str, Any]) -> None:
        """Hook for panels that read more than the page from a list response."""

    # =========================================================================
    # Listing
    # =========================================================================

    async def refresh(self) -> bool:
        """Fetch the current page. Superseded responses are dropped."""
        if not self.session.is_admin:
            self.error = ACCESS_DENIED_MESSAGE
            return False

        self._generation += 1
        generation = self._generation
        self.loading = True
        try:
            response = await self._fetch(self.query)
        finally:
            if generation == self._generation:
                self.loading = False

        if generation != self._generation:
            return False

        if not response.success or not isinstance(response.data, dict):
            self.page = ListPage()
            self.error = describe_error(response.error, f"Failed to fetch {self.items_key}")
            logger.warning("Admin list fetch failed", panel=self.items_key, error=self.error)
            return False

        self.error = None
        self.page = ListPage.from_response(response.data, self.items_key)
        self._extra_results(response.data)
        return True

    def set_search(self, text: str) -> None:
        if text == self.query.search:
            return
        self.query.search = text
        self.query.page = 1
        self.debouncer.schedule(self.refresh)

    def set_filter(self, name: str, value: Any) -> None:
        """Set or clear (``None``) a categorical filter."""
        if value is None:
            if name not in self.query.filters:
                return
            self.query.filters.pop(name)
        else:
            if self.query.filters.get(name) == value:
                return
            self.query.filters[name] = value
        self.query.page = 1
        self.debouncer.schedule(self.refresh)

    def set_sort(self, sort_by: str, sort_order: str = "desc") -> None:
        self.query.sort_by = sort_by
        self.query.sort_order = sort_order
        self.query.page = 1
        self.debouncer.schedule(self.refresh)

    async def go_to_page(self, page: int) -> bool:
        self.query.page = min(max(page, 1), max(self.page.total_pages, 1))
        return await self.refresh()

    # =========================================================================
    # Mutations
    # =========================================================================

    async def _mutate(
        self,
        call: Awaitable[APIResponse],
        failure_message: str,
    ) -> APIResponse:
        """Run a mutation; on failure record the inline error and keep the list."""
        response = await call
        if response.success:
            self.error = None
        else:
            self.error = describe_error(response.error, failure_message)
            logger.warning("Admin action failed", panel=self.items_key, error=self.error)
        return response

    async def _delete(
        self,
        call: Callable[[], Awaitable[APIResponse]],
        confirm: ConfirmCallback,
        prompt: str,
        failure_message: str,
    ) -> bool:
        """Delete after confirmation, then re-fetch the list from the server."""
        decision = confirm(prompt)
        if inspect.isawaitable(decision):
            decision = await decision
        if not decision:
            return False

        response = await self._mutate(call(), failure_message)
        if not response.success:
            return False
        await self.refresh()
        return True
