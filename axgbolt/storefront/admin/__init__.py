"""Admin dashboard panels for products, users and reviews."""

from axgbolt.storefront.admin.base import AdminPanel, ListPage, ListQuery
from axgbolt.storefront.admin.images import ImagePreview, validate_image
from axgbolt.storefront.admin.products import ProductForm, ProductPanel
from axgbolt.storefront.admin.reviews import ReviewPanel
from axgbolt.storefront.admin.users import UserForm, UserPanel

__all__ = [
    "AdminPanel",
    "ImagePreview",
    "ListPage",
    "ListQuery",
    "ProductForm",
    "ProductPanel",
    "ReviewPanel",
    "UserForm",
    "UserPanel",
    "validate_image",
]
