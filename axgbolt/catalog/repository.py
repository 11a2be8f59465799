"""Catalog repositories for database operations.

Provides CRUD operations for products and categories with filtering,
sorting, and pagination.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from axgbolt.catalog.models import Category, Product


def like_pattern(term: str) -> str:
    """Build a substring ``LIKE`` pattern with wildcards escaped."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


@dataclass
class ProductQuery:
    """Filter conditions shared by product listing and counting.

    Attributes:
        categories: Match products whose category OR subcategory is listed.
        category: Exact category.
        subcategory: Exact subcategory.
        search: Case-insensitive substring over name, description,
            category and subcategory.
        search_sku: Also search the SKU.
        is_active: Filter by visibility.
        is_featured: Filter by featured flag.
    """

    categories: list[str] | None = None
    category: str | None = None
    subcategory: str | None = None
    search: str | None = None
    search_sku: bool = False
    is_active: bool | None = None
    is_featured: bool | None = None


class ProductRepository:
    """Repository for Product database operations.

    Example usage:
        async with async_session_factory() as session:
            repo = ProductRepository(session)
            products = await repo.find_all(
                ProductQuery(categories=["Batteries", "67mm"], is_active=True),
                limit=12,
            )
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def save(self, product: Product) -> Product:
        """Save a product to database."""
        self.session.add(product)
        await self.session.flush()
        return product

    async def save_all(self, products: list[Product]) -> list[Product]:
        """Save multiple products to database."""
        self.session.add_all(products)
        await self.session.flush()
        return products

    async def get_by_id(self, product_id: str) -> Product | None:
        """Get product by ID."""
        result = await self.session.execute(
            select(Product).where(Product.id == product_id)
        )
        return result.scalar_one_or_none()

    async def get_by_identifier(self, identifier: str) -> Product | None:
        """Get product by ID or slug."""
        result = await self.session.execute(
            select(Product).where(
                or_(Product.id == identifier, Product.slug == identifier)
            )
        )
        return result.scalars().first()

    async def slug_exists(self, slug: str, exclude_id: str | None = None) -> bool:
        """Check whether a slug is already taken."""
        query = select(func.count(Product.id)).where(Product.slug == slug)
        if exclude_id is not None:
            query = query.where(Product.id != exclude_id)
        result = await self.session.execute(query)
        return result.scalar_one() > 0

    async def sku_exists(self, sku: str, exclude_id: str | None = None) -> bool:
        """Check whether a SKU is already taken."""
        query = select(func.count(Product.id)).where(Product.sku == sku)
        if exclude_id is not None:
            query = query.where(Product.id != exclude_id)
        result = await self.session.execute(query)
        return result.scalar_one() > 0

    async def find_all(
        self,
        filters: ProductQuery | None = None,
        sort_by: str = "default",
        sort_order: str = "desc",
        limit: int = 50,
        offset: int = 0,
    ) -> Sequence[Product]:
        """Find products with filtering, sorting, and pagination.

        Args:
            filters: Filter conditions.
            sort_by: Sort field (default, name, price, created_at,
                view_count, category). ``default`` puts featured products
                first, newest first within each group.
            sort_order: Sort order (asc, desc).
            limit: Maximum results.
            offset: Result offset for pagination.

        Returns:
            Sequence of matching products.
        """
        query = select(Product)

        conditions = self._build_conditions(filters or ProductQuery())
        if conditions:
            query = query.where(and_(*conditions))

        # Sorting
        if sort_by == "default":
            query = query.order_by(
                Product.is_featured.desc(), Product.created_at.desc(), Product.id
            )
        else:
            sort_column = self._get_sort_column(sort_by)
            if sort_order.lower() == "desc":
                query = query.order_by(sort_column.desc(), Product.id)
            else:
                query = query.order_by(sort_column.asc(), Product.id)

        # Pagination
        query = query.limit(limit).offset(offset)

        result = await self.session.execute(query)
        return result.scalars().all()

    async def count(self, filters: ProductQuery | None = None) -> int:
        """Count products matching filters."""
        query = select(func.count(Product.id))

        conditions = self._build_conditions(filters or ProductQuery())
        if conditions:
            query = query.where(and_(*conditions))

        result = await self.session.execute(query)
        return result.scalar_one()

    async def find_by_ids(self, product_ids: list[str]) -> dict[str, Product]:
        """Load products by ID, keyed by ID."""
        if not product_ids:
            return {}
        result = await self.session.execute(
            select(Product).where(Product.id.in_(product_ids))
        )
        return {product.id: product for product in result.scalars().all()}

    async def increment_view_count(self, product: Product) -> Product:
        """Atomically bump the view counter and reflect it on the instance."""
        await self.session.execute(
            update(Product)
            .where(Product.id == product.id)
            .values(view_count=Product.view_count + 1)
            .execution_options(synchronize_session=False)
        )
        set_committed_value(product, "view_count", (product.view_count or 0) + 1)
        return product

    async def delete(self, product: Product) -> None:
        """Delete a product."""
        await self.session.delete(product)
        await self.session.flush()

    def _build_conditions(self, filters: ProductQuery) -> list[Any]:
        conditions: list[Any] = []

        if filters.categories:
            conditions.append(
                or_(
                    Product.category.in_(filters.categories),
                    Product.subcategory.in_(filters.categories),
                )
            )

        if filters.category is not None:
            conditions.append(Product.category == filters.category)

        if filters.subcategory is not None:
            conditions.append(Product.subcategory == filters.subcategory)

        if filters.is_active is not None:
            conditions.append(Product.is_active == filters.is_active)

        if filters.is_featured is not None:
            conditions.append(Product.is_featured == filters.is_featured)

        if filters.search:
            pattern = like_pattern(filters.search)
            searchable = [
                Product.name.ilike(pattern, escape="\\"),
                Product.description.ilike(pattern, escape="\\"),
                Product.category.ilike(pattern, escape="\\"),
                Product.subcategory.ilike(pattern, escape="\\"),
            ]
            if filters.search_sku:
                searchable.append(Product.sku.ilike(pattern, escape="\\"))
            conditions.append(or_(*searchable))

        return conditions

    def _get_sort_column(self, sort_by: str) -> Any:
        """Get SQLAlchemy column for sorting.

        Args:
            sort_by: Sort field name.

        Returns:
            SQLAlchemy column.
        """
        columns = {
            "name": Product.name,
            "price": Product.price,
            "stock": Product.stock,
            "created_at": Product.created_at,
            "updated_at": Product.updated_at,
            "view_count": Product.view_count,
            "category": Product.category,
        }
        return columns.get(sort_by, Product.created_at)


class CategoryRepository:
    """Repository for Category database operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def save(self, category: Category) -> Category:
        """Save a category to database."""
        self.session.add(category)
        await self.session.flush()
        return category

    async def get_by_name(self, name: str) -> Category | None:
        """Get category by name, ignoring case."""
        result = await self.session.execute(
            select(Category).where(func.lower(Category.name) == name.strip().lower())
        )
        return result.scalars().first()

    async def list_all(self, active_only: bool = True) -> Sequence[Category]:
        """List categories in navigation order."""
        query = select(Category)
        if active_only:
            query = query.where(Category.is_active.is_(True))
        query = query.order_by(Category.position, Category.name)
        result = await self.session.execute(query)
        return result.scalars().all()

    async def delete_all(self) -> int:
        """Delete every category."""
        categories = await self.list_all(active_only=False)
        for category in categories:
            await self.session.delete(category)
        await self.session.flush()
        return len(categories)
