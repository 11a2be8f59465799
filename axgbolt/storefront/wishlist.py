"""Client-side wishlist.

Each user's saved product ids live in client storage under their own key,
so one account never sees another's items on a shared device. There is no
server-side copy.
"""

import json
from dataclasses import dataclass
from typing import Any, Protocol

import structlog

from axgbolt.client.api_client import AXGBoltAPIClient
from axgbolt.storefront.session import AuthSession
from axgbolt.storefront.storage import KeyValueStorage, StorageError

logger = structlog.get_logger()

WISHLIST_KEY_PREFIX = "axg_wishlist_"

WISHLIST_ERROR_MESSAGE = "Failed to update wishlist. Please try again."


def wishlist_key(user_id: str) -> str:
    """Storage key for a user's wishlist."""
    return f"{WISHLIST_KEY_PREFIX}{user_id}"


@dataclass(frozen=True)
class ToggleResult:
    """Outcome of a toggle. Exactly one of ``was_added``/``was_removed`` is set."""

    is_now_in_wishlist: bool
    was_added: bool
    was_removed: bool


class Navigator(Protocol):
    """Page navigation callback."""

    def __call__(self, page: str, data: dict[str, Any] | None = None) -> None: ...


# ============================================================================
# Wishlist Store
# ============================================================================


class WishlistStore:
    """Per-user ordered set of product ids.

    Reads never fail: a missing or corrupted record reads as an empty
    wishlist. Writes raise ``StorageError`` when storage rejects them.
    """

    def __init__(self, storage: KeyValueStorage) -> None:
        self.storage = storage

    def get(self, user_id: str) -> list[str]:
        """Get the saved product ids in insertion order."""
        raw = self.storage.get_item(wishlist_key(user_id))
        if not raw:
            return []

        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Wishlist record corrupted, reading as empty", user_id=user_id)
            return []

        if not isinstance(data, list) or not all(isinstance(item, str) for item in data):
            logger.warning("Wishlist record malformed, reading as empty", user_id=user_id)
            return []
        return list(dict.fromkeys(data))

    def contains(self, user_id: str, product_id: str) -> bool:
        return product_id in self.get(user_id)

    def add(self, user_id: str, product_id: str) -> bool:
        """Append a product id.

        Returns:
            False if it was already saved.
        """
        items = self.get(user_id)
        if product_id in items:
            return False
        self._write(user_id, [*items, product_id])
        return True

    def remove(self, user_id: str, product_id: str) -> bool:
        """Remove a product id. The record is rewritten even when absent.

        Returns:
            True if it was saved before.
        """
        items = self.get(user_id)
        was_present = product_id in items
        self._write(user_id, [item for item in items if item != product_id])
        return was_present

    def toggle(self, user_id: str, product_id: str) -> ToggleResult:
        if self.contains(user_id, product_id):
            was_removed = self.remove(user_id, product_id)
            return ToggleResult(is_now_in_wishlist=False, was_added=False, was_removed=was_removed)
        was_added = self.add(user_id, product_id)
        return ToggleResult(is_now_in_wishlist=True, was_added=was_added, was_removed=False)

    def _write(self, user_id: str, items: list[str]) -> None:
        self.storage.set_item(wishlist_key(user_id), json.dumps(items))


# ============================================================================
# Wishlist Controller
# ============================================================================


class WishlistController:
    """Wishlist actions as the product cards and wishlist page use them.

    Anonymous visitors are sent to the login page. Storage failures become
    an inline error message instead of propagating.
    """

    def __init__(
        self,
        store: WishlistStore,
        session: AuthSession,
        navigate: Navigator,
    ) -> None:
        self.store = store
        self.session = session
        self.navigate = navigate
        self.message: str | None = None
        self.error: str | None = None

    def is_saved(self, product_id: str) -> bool:
        user_id = self.session.user_id
        return user_id is not None and self.store.contains(user_id, product_id)

    def click_heart(self, product_id: str, product_name: str = "Product") -> ToggleResult | None:
        """Toggle a product from its heart icon.

        Returns:
            The toggle result, or None when the visitor was redirected to
            login or the write failed.
        """
        self.message = None
        self.error = None

        user_id = self.session.user_id
        if user_id is None:
            self.navigate("login")
            return None

        try:
            result = self.store.toggle(user_id, product_id)
        except StorageError as e:
            logger.error("Wishlist update failed", user_id=user_id, product_id=product_id, error=str(e))
            self.error = WISHLIST_ERROR_MESSAGE
            return None

        if result.was_added:
            self.message = f'"{product_name}" added to wishlist!'
        elif result.was_removed:
            self.message = f'"{product_name}" removed from wishlist'
        return result

    def remove(self, product_id: str, product_name: str = "Product") -> bool:
        """Remove a product from the wishlist page."""
        self.message = None
        self.error = None

        user_id = self.session.user_id
        if user_id is None:
            self.navigate("login")
            return False

        try:
            was_removed = self.store.remove(user_id, product_id)
        except StorageError as e:
            logger.error("Wishlist update failed", user_id=user_id, product_id=product_id, error=str(e))
            self.error = "Failed to remove item from wishlist. Please try again."
            return False

        if was_removed:
            self.message = f'"{product_name}" removed from wishlist'
        return was_removed

    async def load_products(self, api: AXGBoltAPIClient) -> list[dict[str, Any]]:
        """Resolve saved ids into product records.

        Products the server no longer returns are skipped; one failed
        lookup does not stop the others.
        """
        user_id = self.session.user_id
        if user_id is None:
            self.navigate("login")
            return []

        products = []
        for product_id in self.store.get(user_id):
            response = await api.get_product(product_id)
            if response.success and isinstance(response.data, dict):
                products.append(response.data)
            else:
                logger.warning(
                    "Wishlist product unavailable",
                    product_id=product_id,
                    error_code=response.error.error_code if response.error else None,
                )
        return products
