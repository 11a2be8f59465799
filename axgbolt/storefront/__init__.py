"""Storefront client components.

The state and flows behind the storefront pages, independent of rendering:

- **Session**: auth session and sign-in/sign-up/sign-out flows
- **Wishlist**: per-user saved products in client storage
- **Catalog browser**: category/search filters and pagination
- **Reviews**: product review section
- **Admin**: product, user and review panels
"""

from axgbolt.storefront.catalog_browser import CatalogBrowser, FetchStatus
from axgbolt.storefront.debounce import Debouncer
from axgbolt.storefront.reviews import ProductReviewsWidget, ReviewStats
from axgbolt.storefront.session import AuthContext, AuthOutcome, AuthSession
from axgbolt.storefront.storage import (
    JsonFileStorage,
    KeyValueStorage,
    MemoryStorage,
    StorageError,
)
from axgbolt.storefront.wishlist import ToggleResult, WishlistController, WishlistStore

__all__ = [
    # Session
    "AuthContext",
    "AuthOutcome",
    "AuthSession",
    # Storage
    "JsonFileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "StorageError",
    # Wishlist
    "ToggleResult",
    "WishlistController",
    "WishlistStore",
    # Catalog
    "CatalogBrowser",
    "Debouncer",
    "FetchStatus",
    # Reviews
    "ProductReviewsWidget",
    "ReviewStats",
]
