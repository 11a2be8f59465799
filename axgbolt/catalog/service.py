"""Catalog service for product and category operations.

High-level service that combines repository operations with
business logic for catalog management.
"""

import random
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

import structlog
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from axgbolt.catalog.generator import GeneratorConfig, ProductGenerator
from axgbolt.catalog.identifiers import make_sku, slugify
from axgbolt.catalog.models import Category, Product
from axgbolt.catalog.repository import CategoryRepository, ProductQuery, ProductRepository
from axgbolt.catalog.taxonomy import DEFAULT_CATEGORIES
from axgbolt.domain.exceptions import ConflictError, NotFoundError, ValidationFailedError
from axgbolt.infrastructure.models import ReviewModel

T = TypeVar("T")

logger = structlog.get_logger()


@dataclass
class ProductFilter:
    """Filter parameters for product search.

    Attributes:
        categories: Category or subcategory names (OR).
        category: Exact category.
        subcategory: Exact subcategory.
        search: Text search over name, description and categories.
        is_featured: Filter by featured flag.
        is_active: Filter by visibility (admin listings only).
    """

    categories: list[str] | None = None
    category: str | None = None
    subcategory: str | None = None
    search: str | None = None
    is_featured: bool | None = None
    is_active: bool | None = None


@dataclass
class PaginationParams:
    """Pagination parameters.

    Attributes:
        page: Page number (1-indexed).
        page_size: Items per page.
        sort_by: Sort field.
        sort_order: Sort order (asc/desc).
    """

    page: int = 1
    page_size: int = 12
    sort_by: str = "default"
    sort_order: str = "desc"

    @property
    def offset(self) -> int:
        """Calculate offset from page number."""
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        """Get limit (alias for page_size)."""
        return self.page_size


@dataclass
class PaginatedResult(Generic[T]):
    """Paginated result container.

    Attributes:
        items: List of items.
        total: Total count.
        page: Current page.
        page_size: Items per page.
        total_pages: Total number of pages.
    """

    items: list[T]
    total: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        """Calculate total pages."""
        return (self.total + self.page_size - 1) // self.page_size

    @property
    def has_next(self) -> bool:
        """Check if there's a next page."""
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        """Check if there's a previous page."""
        return self.page > 1


@dataclass
class ProductDraft:
    """Fields for a new product. Only name and category are required."""

    name: str
    category: str
    description: str = ""
    features: list[str] = field(default_factory=list)
    image_url: str | None = None
    subcategory: str | None = None
    price: float | None = None
    stock: int = 0
    sku: str | None = None
    tags: list[str] = field(default_factory=list)
    is_active: bool = True
    is_featured: bool = False


class CatalogService:
    """Service for catalog operations.

    Example usage:
        async with async_session_factory() as session:
            service = CatalogService(session)
            results = await service.search_products(
                ProductFilter(categories=["67mm"]),
                PaginationParams(page=1, page_size=12),
            )
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize service with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session
        self.repository = ProductRepository(session)
        self.categories = CategoryRepository(session)

    # =========================================================================
    # Queries
    # =========================================================================

    async def search_products(
        self,
        filters: ProductFilter,
        pagination: PaginationParams,
        include_inactive: bool = False,
    ) -> PaginatedResult[Product]:
        """Search products with filters and pagination.

        Public listings only see active products. Admin listings
        (``include_inactive``) may filter on ``is_active`` and also search
        the SKU.
        """
        query = ProductQuery(
            categories=filters.categories or None,
            category=filters.category,
            subcategory=filters.subcategory,
            search=(filters.search or "").strip() or None,
            search_sku=include_inactive,
            is_active=filters.is_active if include_inactive else True,
            is_featured=filters.is_featured,
        )

        products = await self.repository.find_all(
            query,
            sort_by=pagination.sort_by,
            sort_order=pagination.sort_order,
            limit=pagination.limit,
            offset=pagination.offset,
        )
        total = await self.repository.count(query)

        return PaginatedResult(
            items=list(products),
            total=total,
            page=pagination.page,
            page_size=pagination.page_size,
        )

    async def get_featured(self, limit: int = 8) -> list[Product]:
        """Get active featured products, newest first."""
        products = await self.repository.find_all(
            ProductQuery(is_active=True, is_featured=True),
            sort_by="created_at",
            sort_order="desc",
            limit=limit,
        )
        return list(products)

    async def get_product(self, identifier: str, count_view: bool = True) -> Product:
        """Get an active product by ID or slug.

        Args:
            identifier: Product ID or slug.
            count_view: Whether to increment the view counter.

        Raises:
            NotFoundError: If no active product matches.
        """
        product = await self.repository.get_by_identifier(identifier)
        if product is None or not product.is_active:
            raise NotFoundError("Product", identifier)

        if count_view:
            await self.repository.increment_view_count(product)
            await self.session.commit()
        return product

    async def get_products_by_ids(self, product_ids: list[str]) -> dict[str, Product]:
        """Load several products by ID."""
        return await self.repository.find_by_ids(product_ids)

    # =========================================================================
    # Product Mutations
    # =========================================================================

    async def create_product(self, draft: ProductDraft) -> Product:
        """Create a product, generating its slug and (if absent) its SKU.

        Raises:
            ValidationFailedError: If name or category is blank.
            ConflictError: If the given SKU is taken.
        """
        name = draft.name.strip()
        category = draft.category.strip()
        if not name:
            raise ValidationFailedError("Product name is required", field="name")
        if not category:
            raise ValidationFailedError("Product category is required", field="category")

        subcategory = (draft.subcategory or "").strip() or None
        await self.ensure_category_exists(category, subcategory)

        if draft.sku:
            sku = draft.sku.strip().upper()
            if await self.repository.sku_exists(sku):
                raise ConflictError(
                    f"Product with SKU {sku} already exists",
                    details={"errors": [{"field": "sku", "message": "SKU already exists"}]},
                )
        else:
            sku = await self._generate_sku(category)

        product = Product(
            name=name,
            slug=await self._unique_slug(name),
            sku=sku,
            description=draft.description,
            features=[f for f in draft.features if f.strip()],
            image_url=(draft.image_url or "").strip() or None,
            category=category,
            subcategory=subcategory,
            price=draft.price,
            stock=draft.stock,
            tags=[t.strip().lower() for t in draft.tags if t.strip()],
            is_active=draft.is_active,
            is_featured=draft.is_featured,
        )
        await self.repository.save(product)
        await self.session.commit()

        logger.info("Product created", product_id=product.id, sku=product.sku)
        return product

    async def update_product(self, product_id: str, changes: dict[str, Any]) -> Product:
        """Apply a partial update to a product.

        An empty ``image_url`` keeps the stored image. Renaming regenerates
        the slug.

        Raises:
            NotFoundError: If the product does not exist.
            ValidationFailedError: If name or category is set blank.
            ConflictError: If a changed SKU is taken.
        """
        product = await self.repository.get_by_id(product_id)
        if product is None:
            raise NotFoundError("Product", product_id)

        changes = dict(changes)

        if "image_url" in changes and not (changes["image_url"] or "").strip():
            changes.pop("image_url")

        if "name" in changes:
            name = (changes["name"] or "").strip()
            if not name:
                raise ValidationFailedError("Product name is required", field="name")
            if name != product.name:
                product.slug = await self._unique_slug(name, exclude_id=product.id)
            changes["name"] = name

        if "category" in changes:
            category = (changes["category"] or "").strip()
            if not category:
                raise ValidationFailedError("Product category is required", field="category")
            changes["category"] = category

        if "subcategory" in changes:
            changes["subcategory"] = (changes["subcategory"] or "").strip() or None

        if "category" in changes or "subcategory" in changes:
            await self.ensure_category_exists(
                changes.get("category", product.category),
                changes.get("subcategory", product.subcategory),
            )

        if "sku" in changes:
            sku = (changes["sku"] or "").strip().upper()
            if not sku:
                changes.pop("sku")
            elif await self.repository.sku_exists(sku, exclude_id=product.id):
                raise ConflictError(
                    f"Product with SKU {sku} already exists",
                    details={"errors": [{"field": "sku", "message": "SKU already exists"}]},
                )
            else:
                changes["sku"] = sku

        if "tags" in changes and changes["tags"] is not None:
            changes["tags"] = [t.strip().lower() for t in changes["tags"] if t.strip()]

        for key, value in changes.items():
            setattr(product, key, value)

        await self.session.flush()
        await self.session.commit()

        logger.info("Product updated", product_id=product.id, fields=sorted(changes))
        return product

    async def delete_product(self, product_id: str) -> None:
        """Delete a product and its reviews.

        Raises:
            NotFoundError: If the product does not exist.
        """
        product = await self.repository.get_by_id(product_id)
        if product is None:
            raise NotFoundError("Product", product_id)

        await self.session.execute(
            delete(ReviewModel).where(ReviewModel.product_id == product_id)
        )
        await self.repository.delete(product)
        await self.session.commit()

        logger.info("Product deleted", product_id=product_id)

    # =========================================================================
    # Categories
    # =========================================================================

    async def list_categories(self) -> list[Category]:
        """Get active categories in navigation order."""
        return list(await self.categories.list_all(active_only=True))

    async def create_category(
        self,
        name: str,
        submenu: list[dict[str, str]] | None = None,
        is_active: bool = True,
    ) -> Category:
        """Create a category.

        Raises:
            ValidationFailedError: If the name is blank.
            ConflictError: If a category with the same name exists.
        """
        name = name.strip()
        if not name:
            raise ValidationFailedError("Category name is required", field="name")
        if await self.categories.get_by_name(name) is not None:
            raise ConflictError(
                f"Category {name} already exists",
                details={"errors": [{"field": "name", "message": "Category already exists"}]},
            )

        entries = [
            {"name": entry["name"], "category": entry.get("category") or entry["name"]}
            for entry in submenu or []
        ]
        category = Category(
            name=name,
            has_submenu=bool(entries),
            submenu=entries,
            is_active=is_active,
            position=len(await self.categories.list_all(active_only=False)),
        )
        await self.categories.save(category)
        await self.session.commit()

        logger.info("Category created", name=name, submenu=len(entries))
        return category

    async def ensure_category_exists(self, name: str, subcategory: str | None = None) -> Category:
        """Create the category, and a submenu entry for the subcategory, if missing."""
        category = await self.categories.get_by_name(name)
        if category is None:
            category = Category(
                name=name,
                has_submenu=False,
                submenu=[],
                is_active=True,
                position=len(await self.categories.list_all(active_only=False)),
            )
            await self.categories.save(category)
            logger.info("Category auto-created", name=name)

        if subcategory and not category.has_submenu_entry(subcategory):
            category.submenu = [
                *(category.submenu or []),
                {"name": subcategory, "category": subcategory},
            ]
            category.has_submenu = True
            await self.session.flush()
            logger.info("Submenu entry added", category=category.name, subcategory=subcategory)

        return category

    # =========================================================================
    # Seeding
    # =========================================================================

    async def seed_catalog(self, mode: str = "small", clear_existing: bool = True) -> dict[str, Any]:
        """Seed default categories and products.

        Args:
            mode: Catalog size ("samples", "small" or "full").
            clear_existing: Whether to delete existing products, their
                reviews and categories first.

        Returns:
            Seeding result with counts.
        """
        if mode == "full":
            config = GeneratorConfig.full()
        elif mode == "samples":
            config = GeneratorConfig.samples_only()
        else:
            config = GeneratorConfig.small()

        deleted = 0
        if clear_existing:
            deleted = await self.repository.count()
            await self.session.execute(delete(ReviewModel))
            await self.session.execute(delete(Product))
            await self.categories.delete_all()

        categories_created = 0
        for position, node in enumerate(DEFAULT_CATEGORIES):
            if await self.categories.get_by_name(node.name) is not None:
                continue
            await self.categories.save(
                Category(
                    name=node.name,
                    has_submenu=node.has_submenu,
                    submenu=[entry.to_dict() for entry in node.submenu],
                    is_active=node.is_active,
                    position=position,
                )
            )
            categories_created += 1

        products = ProductGenerator(config).generate_list()
        for product in products:
            if await self.repository.slug_exists(product.slug):
                product.slug = await self._unique_slug(product.name)
            if await self.repository.sku_exists(product.sku):
                product.sku = await self._generate_sku(product.category)
            await self.ensure_category_exists(product.category, product.subcategory)
            await self.repository.save(product)

        await self.session.commit()

        return {
            "mode": mode,
            "deleted": deleted,
            "categories_created": categories_created,
            "products_created": len(products),
            "featured": sum(1 for p in products if p.is_featured),
        }

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _unique_slug(self, name: str, exclude_id: str | None = None) -> str:
        base = slugify(name)
        slug = base
        suffix = 2
        while await self.repository.slug_exists(slug, exclude_id=exclude_id):
            slug = f"{base}-{suffix}"
            suffix += 1
        return slug

    async def _generate_sku(self, category: str) -> str:
        while True:
            sku = make_sku(category, random.randint(0, 999_999))
            if not await self.repository.sku_exists(sku):
                return sku
