"""SQLAlchemy models for the product catalog.

Defines Product and Category tables for persistent storage.
"""

from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from sqlalchemy import JSON, Boolean, DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from axgbolt.infrastructure.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Product(Base):
    """Product entity in the catalog.

    Attributes:
        id: Unique product identifier (UUID).
        name: Product name.
        slug: URL-friendly unique name.
        sku: Stock Keeping Unit, generated from the category when omitted.
        description: Product description.
        features: Ordered list of feature bullet points.
        image_url: Product image URL (remote or uploaded).
        category: Category name.
        subcategory: Optional subcategory name.
        price: Unit price in major currency units.
        stock: Units in stock.
        tags: Lower-cased search tags.
        is_active: Whether the product is shown publicly.
        is_featured: Whether the product is featured on the home page.
        view_count: Number of detail page views.
        created_at: Creation timestamp.
        updated_at: Last update timestamp.
    """

    __tablename__ = "products"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(240), nullable=False, unique=True, index=True)
    sku: Mapped[str] = mapped_column(String(50), nullable=False, unique=True, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    features: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    image_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    category: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    subcategory: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    price: Mapped[float | None] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=True)
    stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    is_featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<Product(id={self.id}, sku={self.sku}, name={self.name[:30]}...)>"

    @property
    def full_category(self) -> str:
        """Category path, e.g. ``"Lens Filters > 67mm"``."""
        if self.subcategory:
            return f"{self.category} > {self.subcategory}"
        return self.category

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary.

        Returns:
            Dictionary representation.
        """
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "sku": self.sku,
            "description": self.description,
            "features": list(self.features or []),
            "image_url": self.image_url,
            "category": self.category,
            "subcategory": self.subcategory,
            "full_category": self.full_category,
            "price": self.price,
            "stock": self.stock,
            "tags": list(self.tags or []),
            "is_active": self.is_active,
            "is_featured": self.is_featured,
            "view_count": self.view_count,
        }


class Category(Base):
    """Catalog category.

    Names are unique case-insensitively. ``submenu`` is an ordered list of
    ``{"name": ..., "category": ...}`` entries shown under the category in
    navigation.
    """

    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    has_submenu: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    submenu: Mapped[list[dict[str, str]]] = mapped_column(JSON, nullable=False, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<Category(name={self.name}, submenu={len(self.submenu or [])})>"

    def has_submenu_entry(self, name: str) -> bool:
        """Check if a submenu entry exists (case-insensitive)."""
        wanted = name.strip().lower()
        return any(entry.get("name", "").lower() == wanted for entry in self.submenu or [])
