"""API layer module.

Contains FastAPI routers and request/response schemas.
"""

from axgbolt.api.health import router as health_router
from axgbolt.api.products import router as products_router
from axgbolt.api.reviews import router as reviews_router
from axgbolt.api.users import router as users_router

__all__ = [
    "health_router",
    "products_router",
    "reviews_router",
    "users_router",
]
