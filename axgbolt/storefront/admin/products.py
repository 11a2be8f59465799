"""Admin product management panel."""

from dataclasses import asdict, dataclass, field
from typing import Any

import structlog

from axgbolt.client.api_client import APIResponse
from axgbolt.storefront.admin.base import AdminPanel, ConfirmCallback, ListQuery, describe_error
from axgbolt.storefront.admin.images import ImagePreview, validate_image

logger = structlog.get_logger()


@dataclass
class ProductForm:
    """Create/edit form of a product. Only name and category are required."""

    name: str = ""
    category: str = ""
    description: str = ""
    features: list[str] = field(default_factory=list)
    image_url: str = ""
    subcategory: str = ""
    price: float | None = None
    stock: int = 0
    sku: str = ""
    tags: list[str] = field(default_factory=list)
    is_active: bool = True
    is_featured: bool = False

    @classmethod
    def from_product(cls, product: dict[str, Any]) -> "ProductForm":
        return cls(
            name=product.get("name") or "",
            category=product.get("category") or "",
            description=product.get("description") or "",
            features=list(product.get("features") or []),
            image_url=product.get("image_url") or "",
            subcategory=product.get("subcategory") or "",
            price=product.get("price"),
            stock=product.get("stock") or 0,
            sku=product.get("sku") or "",
            tags=list(product.get("tags") or []),
            is_active=product.get("is_active", True),
            is_featured=product.get("is_featured", False),
        )

    def validate(self) -> str | None:
        if not self.name.strip():
            return "Product name is required"
        if not self.category.strip():
            return "Category is required"
        return None

    def to_payload(self) -> dict[str, Any]:
        """Body for a create request. Blank optional strings are not sent."""
        payload = asdict(self)
        payload["name"] = self.name.strip()
        payload["category"] = self.category.strip()
        payload["features"] = [f.strip() for f in self.features if f.strip()]
        for key in ("image_url", "subcategory", "sku"):
            if not payload[key].strip():
                payload.pop(key)
        return payload

    def changes_since(self, original: "ProductForm") -> dict[str, Any]:
        """Fields that differ from ``original``.

        A blank image or SKU is left out, so the stored value is kept. A
        blanked subcategory is sent as null.
        """
        current = self.to_payload()
        before = original.to_payload()
        changes = {
            key: value for key, value in current.items() if before.get(key) != value
        }
        if "subcategory" in before and "subcategory" not in current:
            changes["subcategory"] = None
        return changes


class ProductPanel(AdminPanel):
    """List, create, edit and delete products, and upload product images.

    Example usage:
        panel = ProductPanel(api, session)
        await panel.refresh()
        form = panel.open_create()
        form.name, form.category = "ND Filter", "Lens Filters"
        await panel.save()
    """

    items_key = "products"
    default_sort = "created_at"

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.categories: list[dict[str, Any]] = []
        self.form: ProductForm | None = None
        self.editing: dict[str, Any] | None = None
        self.preview: ImagePreview | None = None
        self.uploading = False

    def _fetch(self, query: ListQuery) -> Any:
        return self.api.admin_list_products(
            page=query.page,
            limit=query.page_size,
            search=query.search.strip() or None,
            category=query.filters.get("category"),
            is_active=query.filters.get("is_active"),
            is_featured=query.filters.get("is_featured"),
            sort_by=query.sort_by,
            sort_order=query.sort_order,
        )

    # =========================================================================
    # Categories
    # =========================================================================

    async def load_categories(self) -> bool:
        response = await self.api.get_categories()
        if not response.success or not isinstance(response.data, dict):
            self.error = describe_error(response.error, "Failed to fetch categories")
            return False
        self.categories = list(response.data.get("categories") or [])
        return True

    def subcategories_for(self, category: str) -> list[dict[str, Any]]:
        for entry in self.categories:
            if entry.get("name") == category:
                return list(entry.get("submenu") or [])
        return []

    async def add_category(self, name: str) -> bool:
        """Create a category and select it in the open form."""
        name = name.strip()
        if not name:
            return False
        response = await self._mutate(
            self.api.create_category(name), "Failed to create category"
        )
        if not response.success:
            return False
        await self.load_categories()
        if self.form is not None:
            self.form.category = name
        return True

    # =========================================================================
    # Form
    # =========================================================================

    def open_create(self) -> ProductForm:
        self.close_form()
        self.form = ProductForm()
        return self.form

    def open_edit(self, product: dict[str, Any]) -> ProductForm:
        self.close_form()
        self.editing = product
        self.form = ProductForm.from_product(product)
        return self.form

    def close_form(self) -> None:
        """Close the form and release any local image preview."""
        self._release_preview()
        self.form = None
        self.editing = None

    async def save(self) -> bool:
        """Submit the open form. Edits send only changed fields."""
        if self.form is None:
            return False

        message = self.form.validate()
        if message is not None:
            self.error = message
            return False

        if self.editing is not None:
            changes = self.form.changes_since(ProductForm.from_product(self.editing))
            response: APIResponse
            if changes:
                response = await self._mutate(
                    self.api.update_product(self.editing["id"], changes),
                    "Failed to save product",
                )
                if not response.success:
                    return False
            self.close_form()
            await self.refresh()
            return True

        response = await self._mutate(
            self.api.create_product(self.form.to_payload()), "Failed to save product"
        )
        if not response.success:
            return False
        self.close_form()
        self.query.page = 1
        await self.refresh()
        return True

    async def upload_image(self, filename: str, data: bytes, content_type: str) -> bool:
        """Validate and upload an image for the open form.

        On success the form references the stored image. The local preview
        is kept for display until it is replaced or the form closes.
        """
        if self.form is None:
            return False

        message = validate_image(content_type, len(data))
        if message is not None:
            self.error = message
            return False

        form = self.form
        preview = ImagePreview.create(data, filename)
        self.uploading = True
        try:
            response = await self.api.upload_image(filename, data, content_type)
        except BaseException:
            preview.release()
            raise
        finally:
            self.uploading = False

        # The form was closed or replaced while the upload was in flight
        if self.form is not form:
            preview.release()
            logger.info("Discarded image upload for a closed form", filename=filename)
            return False

        if not response.success or not isinstance(response.data, dict):
            preview.release()
            self.error = f"Image upload failed: {describe_error(response.error, 'Unknown error')}"
            return False

        self._release_preview()
        self.preview = preview
        self.form.image_url = response.data["image_url"]
        self.error = None
        logger.info("Product image uploaded", image_url=self.form.image_url)
        return True

    # =========================================================================
    # Delete
    # =========================================================================

    async def delete(self, product_id: str, confirm: ConfirmCallback) -> bool:
        return await self._delete(
            lambda: self.api.delete_product(product_id),
            confirm,
            "Are you sure you want to delete this product?",
            "Failed to delete product",
        )

    def _release_preview(self) -> None:
        if self.preview is not None:
            self.preview.release()
            self.preview = None
