"""Product and category API endpoints.

Public catalog browsing plus admin product management and image upload.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from fastapi.responses import FileResponse

from axgbolt.api.deps import AdminUser, CatalogServiceDep
from axgbolt.api.rate_limit import catalog_limit
from axgbolt.api.schemas import (
    CategoriesResponse,
    CategoryCreateRequest,
    CategoryResponse,
    ErrorResponse,
    FeaturedProductsResponse,
    ImageUploadResponse,
    MessageResponse,
    PaginationSchema,
    ProductCreateRequest,
    ProductListResponse,
    ProductResponse,
    ProductUpdateRequest,
    SubmenuEntrySchema,
)
from axgbolt.catalog.models import Category, Product
from axgbolt.catalog.service import PaginationParams, ProductDraft, ProductFilter
from axgbolt.infrastructure.image_store import ImageStore

router = APIRouter(prefix="/products", tags=["Products"])

# Fields an update may explicitly clear
_NULLABLE_FIELDS = {"subcategory", "price", "image_url"}


# ============================================================================
# Converters
# ============================================================================


def product_to_response(product: Product) -> ProductResponse:
    """Convert Product model to response schema."""
    return ProductResponse(
        id=product.id,
        name=product.name,
        slug=product.slug,
        sku=product.sku,
        description=product.description or "",
        features=list(product.features or []),
        image_url=product.image_url,
        category=product.category,
        subcategory=product.subcategory,
        full_category=product.full_category,
        price=product.price,
        stock=product.stock,
        tags=list(product.tags or []),
        is_active=product.is_active,
        is_featured=product.is_featured,
        view_count=product.view_count,
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


def category_to_response(category: Category) -> CategoryResponse:
    """Convert Category model to response schema."""
    return CategoryResponse(
        id=category.id,
        name=category.name,
        has_submenu=category.has_submenu,
        submenu=[
            SubmenuEntrySchema(name=entry["name"], category=entry.get("category"))
            for entry in category.submenu or []
        ],
        is_active=category.is_active,
    )


def split_categories(raw: str | None) -> list[str] | None:
    """Parse the comma-separated ``categories`` query parameter."""
    if not raw:
        return None
    names = [name.strip() for name in raw.split(",") if name.strip()]
    return names or None


# ============================================================================
# Public Endpoints
# ============================================================================


@router.get(
    "",
    response_model=ProductListResponse,
    dependencies=[Depends(catalog_limit)],
    summary="List products",
    description="List active products with category, search and featured filters.",
)
async def list_products(
    service: CatalogServiceDep,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 12,
    categories: Annotated[str | None, Query(description="Comma-separated category or subcategory names")] = None,
    category: str | None = None,
    subcategory: str | None = None,
    search: str | None = None,
    is_featured: bool | None = None,
    sort_by: str = "default",
    sort_order: Annotated[str, Query(pattern="^(asc|desc)$")] = "desc",
) -> ProductListResponse:
    """List active products.

    A product matches ``categories`` when its category or its subcategory
    is one of the listed names.
    """
    result = await service.search_products(
        ProductFilter(
            categories=split_categories(categories),
            category=category,
            subcategory=subcategory,
            search=search,
            is_featured=is_featured,
        ),
        PaginationParams(page=page, page_size=limit, sort_by=sort_by, sort_order=sort_order),
    )
    return ProductListResponse(
        products=[product_to_response(p) for p in result.items],
        pagination=PaginationSchema.from_result(result),
    )


@router.get(
    "/featured",
    response_model=FeaturedProductsResponse,
    dependencies=[Depends(catalog_limit)],
    summary="Featured products",
)
async def list_featured_products(
    service: CatalogServiceDep,
    limit: Annotated[int, Query(ge=1, le=50)] = 8,
) -> FeaturedProductsResponse:
    """Get active featured products, newest first."""
    products = await service.get_featured(limit=limit)
    return FeaturedProductsResponse(products=[product_to_response(p) for p in products])


@router.get(
    "/categories",
    response_model=CategoriesResponse,
    dependencies=[Depends(catalog_limit)],
    summary="List categories",
)
async def list_categories(service: CatalogServiceDep) -> CategoriesResponse:
    """Get active categories in navigation order."""
    categories = await service.list_categories()
    return CategoriesResponse(categories=[category_to_response(c) for c in categories])


@router.get(
    "/image/{filename}",
    response_class=FileResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get uploaded image",
)
async def get_product_image(filename: str) -> FileResponse:
    """Serve an uploaded product image."""
    return FileResponse(ImageStore().resolve(filename))


# ============================================================================
# Admin Endpoints
# ============================================================================


@router.post(
    "/categories",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}},
    summary="Create category",
)
async def create_category(
    request: CategoryCreateRequest,
    service: CatalogServiceDep,
    admin: AdminUser,
) -> CategoryResponse:
    """Create a navigation category."""
    category = await service.create_category(
        name=request.name,
        submenu=[entry.model_dump() for entry in request.submenu],
        is_active=request.is_active,
    )
    return category_to_response(category)


@router.get(
    "/admin/all",
    response_model=ProductListResponse,
    summary="List all products (admin)",
)
async def admin_list_products(
    service: CatalogServiceDep,
    admin: AdminUser,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
    search: str | None = None,
    category: str | None = None,
    categories: str | None = None,
    is_active: bool | None = None,
    is_featured: bool | None = None,
    sort_by: str = "created_at",
    sort_order: Annotated[str, Query(pattern="^(asc|desc)$")] = "desc",
) -> ProductListResponse:
    """List products in any state. Search also covers the SKU."""
    result = await service.search_products(
        ProductFilter(
            categories=split_categories(categories),
            category=category,
            search=search,
            is_active=is_active,
            is_featured=is_featured,
        ),
        PaginationParams(page=page, page_size=limit, sort_by=sort_by, sort_order=sort_order),
        include_inactive=True,
    )
    return ProductListResponse(
        products=[product_to_response(p) for p in result.items],
        pagination=PaginationSchema.from_result(result),
    )


@router.post(
    "/upload-image",
    response_model=ImageUploadResponse,
    status_code=status.HTTP_201_CREATED,
    responses={422: {"model": ErrorResponse}},
    summary="Upload product image",
)
async def upload_product_image(
    admin: AdminUser,
    image: Annotated[UploadFile, File(description="JPEG, PNG, WebP or GIF, at most 5MB")],
) -> ImageUploadResponse:
    """Store an image and return the URL products can reference."""
    data = await image.read()
    stored = ImageStore().save(data, image.filename or "", image.content_type)
    return ImageUploadResponse(
        image_url=f"/api/products/image/{stored.filename}",
        filename=stored.filename,
        original_name=stored.original_name,
        size=stored.size,
    )


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    summary="Create product",
)
async def create_product(
    request: ProductCreateRequest,
    service: CatalogServiceDep,
    admin: AdminUser,
) -> ProductResponse:
    """Create a product. Unknown categories are created on the fly."""
    product = await service.create_product(ProductDraft(**request.model_dump()))
    return product_to_response(product)


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Update product",
)
async def update_product(
    product_id: str,
    request: ProductUpdateRequest,
    service: CatalogServiceDep,
    admin: AdminUser,
) -> ProductResponse:
    """Apply a partial update. An empty image URL keeps the stored image."""
    changes = {
        key: value
        for key, value in request.model_dump(exclude_unset=True).items()
        if value is not None or key in _NULLABLE_FIELDS
    }
    product = await service.update_product(product_id, changes)
    return product_to_response(product)


@router.delete(
    "/{product_id}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Delete product",
)
async def delete_product(
    product_id: str,
    service: CatalogServiceDep,
    admin: AdminUser,
) -> MessageResponse:
    """Delete a product and its reviews."""
    await service.delete_product(product_id)
    return MessageResponse(message="Product deleted successfully")


# ============================================================================
# Product Detail (last: catches any single path segment)
# ============================================================================


@router.get(
    "/{identifier}",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponse}},
    dependencies=[Depends(catalog_limit)],
    summary="Get product",
)
async def get_product(identifier: str, service: CatalogServiceDep) -> ProductResponse:
    """Get an active product by ID or slug and count the view."""
    product = await service.get_product(identifier)
    return product_to_response(product)
