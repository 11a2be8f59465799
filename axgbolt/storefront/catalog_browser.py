"""Catalog filter and pagination flow behind the products page.

Turns the sidebar selection, search box and page number into one product
query and keeps the displayed page consistent with the filters.
"""

from enum import Enum
from typing import Any

import structlog

from axgbolt.catalog.taxonomy import CatalogTaxonomy, CategoryNode, SubmenuEntry
from axgbolt.client.api_client import AXGBoltAPIClient
from axgbolt.client.config import client_settings

logger = structlog.get_logger()


class FetchStatus(str, Enum):
    """What the product grid is showing."""

    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    EMPTY = "empty"
    ERROR = "error"


class CatalogBrowser:
    """Products page state.

    Changing the selected categories or the search query always returns to
    page 1. Every fetch takes a generation number and a response is only
    applied if no newer fetch started while it was in flight.

    Example usage:
        browser = CatalogBrowser(api)
        await browser.load_categories()
        browser.apply_navigation("67mm Filters")
        await browser.fetch()
    """

    def __init__(
        self,
        api: AXGBoltAPIClient,
        page_size: int | None = None,
        taxonomy: CatalogTaxonomy | None = None,
    ) -> None:
        self.api = api
        self.page_size = page_size or client_settings.catalog_page_size
        self.taxonomy = taxonomy or CatalogTaxonomy()

        # Filters
        self.selected_categories: list[str] = []
        self.search_query = ""
        self.subcategory: str | None = None
        self.current_page = 1

        # Results, always replaced together
        self.products: list[dict[str, Any]] = []
        self.total_pages = 1
        self.total_items = 0
        self.status = FetchStatus.IDLE
        self.error: str | None = None

        self._generation = 0

    @property
    def has_active_filters(self) -> bool:
        return bool(self.selected_categories) or self.search_query != ""

    # =========================================================================
    # Filters
    # =========================================================================

    def set_search(self, query: str) -> None:
        if query != self.search_query:
            self.search_query = query
            self.current_page = 1

    def toggle_category(self, name: str) -> None:
        """Check or uncheck a category or subcategory in the sidebar."""
        if name in self.selected_categories:
            self.selected_categories = [c for c in self.selected_categories if c != name]
        else:
            self.selected_categories = [*self.selected_categories, name]
        self.current_page = 1

    def set_categories(self, names: list[str]) -> None:
        """Replace the whole sidebar selection (duplicates dropped)."""
        self.selected_categories = list(dict.fromkeys(names))
        self.current_page = 1

    def set_subcategory(self, subcategory: str | None) -> None:
        self.subcategory = subcategory or None
        self.current_page = 1

    def clear_filters(self) -> None:
        """Reset categories and search."""
        self.set_categories([])
        self.set_search("")

    def apply_navigation(self, label: str) -> bool:
        """Apply a category picked from site navigation.

        Returns:
            False if the label matches no category.
        """
        selection = self.taxonomy.resolve_navigation(label)
        if selection is None:
            logger.info("Navigation category not found", label=label)
            return False
        self.set_categories(selection)
        return True

    def sidebar_subcategories(self, name: str) -> list[SubmenuEntry]:
        return self.taxonomy.sidebar_subcategories(name)

    # =========================================================================
    # Pagination
    # =========================================================================

    def go_to_page(self, page: int) -> None:
        self.current_page = min(max(page, 1), max(self.total_pages, 1))

    def next_page(self) -> None:
        self.go_to_page(self.current_page + 1)

    def previous_page(self) -> None:
        self.go_to_page(self.current_page - 1)

    # =========================================================================
    # Fetching
    # =========================================================================

    def build_query(self) -> dict[str, Any]:
        """Query parameters for the current state."""
        search = self.search_query.strip()
        return {
            "page": self.current_page,
            "limit": self.page_size,
            "categories": list(self.selected_categories) or None,
            "subcategory": self.subcategory,
            "search": search or None,
        }

    async def load_categories(self) -> bool:
        """Replace the taxonomy with the server's active categories."""
        response = await self.api.get_categories()
        if not response.success or not isinstance(response.data, dict):
            logger.warning(
                "Failed to load categories",
                error_code=response.error.error_code if response.error else None,
            )
            return False

        self.taxonomy = CatalogTaxonomy(
            [CategoryNode.from_dict(c) for c in response.data.get("categories", [])]
        )
        return True

    async def fetch(self) -> bool:
        """Fetch the current page.

        Returns:
            False if the request failed or a newer fetch superseded it.
        """
        self._generation += 1
        generation = self._generation
        self.status = FetchStatus.LOADING
        self.error = None

        response = await self.api.list_products(**self.build_query())

        if generation != self._generation:
            logger.debug("Dropping superseded catalog response", generation=generation)
            return False

        if not response.success or not isinstance(response.data, dict):
            self.products = []
            self.total_pages = 1
            self.total_items = 0
            self.status = FetchStatus.ERROR
            self.error = response.error.user_message if response.error else "Failed to load products"
            logger.warning("Catalog fetch failed", error=self.error)
            return False

        products = list(response.data.get("products") or [])
        pagination = response.data.get("pagination") or {}
        self.products = products
        self.total_pages = pagination.get("pages") or 1
        self.total_items = pagination.get("total") or len(products)
        self.status = FetchStatus.LOADED if products else FetchStatus.EMPTY
        return True
