"""AXG Bolt camera-accessories storefront.

The server half (``axgbolt.main`` and the api/application/catalog/domain/
infrastructure layers) exposes the REST API. The client half
(``axgbolt.client`` and ``axgbolt.storefront``) holds the storefront state:
session, wishlist, catalog browsing and the admin panels.
"""

__version__ = "0.1.0"
