"""Product Catalog Service.

Provides the camera-accessory taxonomy, product generation, and catalog
operations (search, featured products, CRUD, categories).
"""

from axgbolt.catalog.generator import GeneratorConfig, ProductGenerator
from axgbolt.catalog.models import Category, Product
from axgbolt.catalog.repository import CategoryRepository, ProductQuery, ProductRepository
from axgbolt.catalog.service import (
    CatalogService,
    PaginatedResult,
    PaginationParams,
    ProductDraft,
    ProductFilter,
)
from axgbolt.catalog.taxonomy import CatalogTaxonomy, CategoryNode, SubmenuEntry

__all__ = [
    # Taxonomy
    "CatalogTaxonomy",
    "CategoryNode",
    "SubmenuEntry",
    # Models
    "Category",
    "Product",
    # Generator
    "GeneratorConfig",
    "ProductGenerator",
    # Repository
    "CategoryRepository",
    "ProductQuery",
    "ProductRepository",
    # Service
    "CatalogService",
    "PaginatedResult",
    "PaginationParams",
    "ProductDraft",
    "ProductFilter",
]
