"""AXG Bolt API Client.

Thin HTTP client for communicating with the AXG Bolt REST API.
This module handles bearer authentication, session expiry, error handling,
and response parsing.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import httpx
import structlog

from axgbolt.client.config import client_settings

if TYPE_CHECKING:
    from axgbolt.storefront.session import AuthSession

logger = structlog.get_logger()


@dataclass
class APIError:
    """Represents an API error response."""

    error_code: str
    message: str
    status_code: int
    details: list[dict[str, Any]] = field(default_factory=list)

    @property
    def user_message(self) -> str:
        """One human-readable line, with field errors joined together."""
        parts = []
        for detail in self.details:
            text = detail.get("message")
            if not text:
                continue
            name = detail.get("field")
            parts.append(f"{name}: {text}" if name else str(text))
        return ", ".join(parts) if parts else self.message


@dataclass
class APIResponse:
    """Represents an API response."""

    success: bool
    data: dict[str, Any] | list[Any] | None = None
    error: APIError | None = None


class AXGBoltAPIClient:
    """HTTP client for the AXG Bolt REST API.

    Provides methods for the auth, catalog, review and admin endpoints used by
    the storefront. When bound to an ``AuthSession`` it sends the session's
    token and expires the session on any 401 answered to a request that
    carried one.
    """

    def __init__(
        self,
        base_url: str | None = None,
        session: "AuthSession | None" = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the API client.

        Args:
            base_url: API base URL, including the ``/api`` prefix.
            session: Auth session supplying the bearer token.
            timeout: Request timeout in seconds.
            transport: Custom httpx transport (tests, in-process ASGI).
        """
        self.base_url = (base_url or client_settings.api_base_url).rstrip("/")
        self.session = session
        self.timeout = timeout if timeout is not None else client_settings.request_timeout
        self.transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self.transport,
                headers={"Accept": "application/json"},
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        files: dict[str, Any] | None = None,
        authenticated: bool = True,
    ) -> APIResponse:
        """Make an API request.

        Args:
            method: HTTP method.
            path: API endpoint path.
            json: Request body as JSON.
            params: Query parameters.
            files: Multipart files.
            authenticated: Send the session token. Credential exchanges
                do not, so a rejected password never expires the session.

        Returns:
            APIResponse with success status and data or error.
        """
        client = await self._get_client()

        headers = {}
        token = self.session.token if self.session is not None and authenticated else None
        if token:
            headers["Authorization"] = f"Bearer {token}"

        # Filter out None params
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        try:
            logger.debug(
                "Making API request",
                method=method,
                path=path,
                has_body=json is not None or files is not None,
            )

            response = await client.request(
                method=method,
                url=path,
                json=json,
                params=params,
                files=files,
                headers=headers,
            )

            if response.status_code >= 400:
                try:
                    error_data = response.json()
                except ValueError:
                    error_data = {}
                if not isinstance(error_data, dict):
                    error_data = {}

                if response.status_code == 401 and token and self.session is not None:
                    logger.warning("Session rejected by API", path=path)
                    self.session.expire()

                details = error_data.get("details") or []
                return APIResponse(
                    success=False,
                    error=APIError(
                        error_code=error_data.get("error_code", "UNKNOWN_ERROR"),
                        message=error_data.get("message", "Unknown error"),
                        status_code=response.status_code,
                        details=details if isinstance(details, list) else [],
                    ),
                )

            # Handle empty responses (204 No Content)
            if response.status_code == 204:
                return APIResponse(success=True, data=None)

            return APIResponse(success=True, data=response.json())

        except httpx.TimeoutException as e:
            logger.error("API request timeout", path=path, error=str(e))
            return APIResponse(
                success=False,
                error=APIError(
                    error_code="TIMEOUT",
                    message=f"Request timed out: {path}",
                    status_code=504,
                ),
            )
        except httpx.RequestError as e:
            logger.error("API request failed", path=path, error=str(e))
            return APIResponse(
                success=False,
                error=APIError(
                    error_code="REQUEST_ERROR",
                    message=f"Request failed: {str(e)}",
                    status_code=500,
                ),
            )
        except Exception as e:
            logger.exception("Unexpected API error", path=path)
            return APIResponse(
                success=False,
                error=APIError(
                    error_code="INTERNAL_ERROR",
                    message=f"Internal error: {str(e)}",
                    status_code=500,
                ),
            )

    # =========================================================================
    # Auth Endpoints
    # =========================================================================

    async def login(self, email: str, password: str) -> APIResponse:
        """Exchange credentials for ``{user, token}``."""
        return await self._request(
            method="POST",
            path="/users/login",
            json={"email": email, "password": password},
            authenticated=False,
        )

    async def register(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
        phone: str | None = None,
    ) -> APIResponse:
        """Create an account.

        Returns:
            APIResponse with ``{user, token}``.
        """
        return await self._request(
            method="POST",
            path="/users/register",
            json={
                "first_name": first_name,
                "last_name": last_name,
                "email": email,
                "password": password,
                "phone": phone,
            },
            authenticated=False,
        )

    async def logout(self) -> APIResponse:
        return await self._request(method="POST", path="/users/logout")

    async def get_profile(self) -> APIResponse:
        return await self._request(method="GET", path="/users/profile")

    async def update_profile(self, changes: dict[str, Any]) -> APIResponse:
        return await self._request(method="PUT", path="/users/profile", json=changes)

    async def change_password(self, current_password: str, new_password: str) -> APIResponse:
        return await self._request(
            method="PUT",
            path="/users/change-password",
            json={"current_password": current_password, "new_password": new_password},
        )

    # =========================================================================
    # Catalog Endpoints
    # =========================================================================

    async def list_products(
        self,
        page: int = 1,
        limit: int = 12,
        categories: list[str] | None = None,
        category: str | None = None,
        subcategory: str | None = None,
        search: str | None = None,
        is_featured: bool | None = None,
        sort_by: str | None = None,
        sort_order: str | None = None,
    ) -> APIResponse:
        """List active products.

        Args:
            page: Page number.
            limit: Items per page.
            categories: Category or subcategory names, any of which matches.
            category: Exact category.
            subcategory: Exact subcategory.
            search: Case-insensitive text search.
            is_featured: Featured flag filter.
            sort_by: Sort field.
            sort_order: "asc" or "desc".

        Returns:
            APIResponse with ``{products, pagination}``.
        """
        return await self._request(
            method="GET",
            path="/products",
            params={
                "page": page,
                "limit": limit,
                "categories": ",".join(categories) if categories else None,
                "category": category,
                "subcategory": subcategory,
                "search": search,
                "is_featured": is_featured,
                "sort_by": sort_by,
                "sort_order": sort_order,
            },
        )

    async def get_featured_products(self, limit: int = 8) -> APIResponse:
        return await self._request(
            method="GET",
            path="/products/featured",
            params={"limit": limit},
        )

    async def get_product(self, identifier: str) -> APIResponse:
        """Get a product by ID or slug."""
        return await self._request(method="GET", path=f"/products/{identifier}")

    async def get_categories(self) -> APIResponse:
        return await self._request(method="GET", path="/products/categories")

    async def create_category(
        self,
        name: str,
        submenu: list[dict[str, str]] | None = None,
        is_active: bool = True,
    ) -> APIResponse:
        return await self._request(
            method="POST",
            path="/products/categories",
            json={"name": name, "submenu": submenu or [], "is_active": is_active},
        )

    # =========================================================================
    # Admin Product Endpoints
    # =========================================================================

    async def admin_list_products(
        self,
        page: int = 1,
        limit: int = 10,
        search: str | None = None,
        category: str | None = None,
        is_active: bool | None = None,
        is_featured: bool | None = None,
        sort_by: str | None = None,
        sort_order: str | None = None,
    ) -> APIResponse:
        """List products in any state."""
        return await self._request(
            method="GET",
            path="/products/admin/all",
            params={
                "page": page,
                "limit": limit,
                "search": search,
                "category": category,
                "is_active": is_active,
                "is_featured": is_featured,
                "sort_by": sort_by,
                "sort_order": sort_order,
            },
        )

    async def create_product(self, payload: dict[str, Any]) -> APIResponse:
        return await self._request(method="POST", path="/products", json=payload)

    async def update_product(self, product_id: str, changes: dict[str, Any]) -> APIResponse:
        """Send a partial product update."""
        return await self._request(
            method="PUT",
            path=f"/products/{product_id}",
            json=changes,
        )

    async def delete_product(self, product_id: str) -> APIResponse:
        return await self._request(method="DELETE", path=f"/products/{product_id}")

    async def upload_image(
        self,
        filename: str,
        content: bytes,
        content_type: str,
    ) -> APIResponse:
        """Upload a product image as multipart field ``image``.

        Returns:
            APIResponse with ``{image_url, filename, original_name, size}``.
        """
        return await self._request(
            method="POST",
            path="/products/upload-image",
            files={"image": (filename, content, content_type)},
        )

    # =========================================================================
    # Admin User Endpoints
    # =========================================================================

    async def list_users(
        self,
        page: int = 1,
        limit: int = 10,
        search: str | None = None,
        role: str | None = None,
        is_active: bool | None = None,
        sort_by: str | None = None,
        sort_order: str | None = None,
    ) -> APIResponse:
        return await self._request(
            method="GET",
            path="/users",
            params={
                "page": page,
                "limit": limit,
                "search": search,
                "role": role,
                "is_active": is_active,
                "sort_by": sort_by,
                "sort_order": sort_order,
            },
        )

    async def get_user(self, user_id: str) -> APIResponse:
        return await self._request(method="GET", path=f"/users/{user_id}")

    async def create_user(self, payload: dict[str, Any]) -> APIResponse:
        return await self._request(method="POST", path="/users/admin/create", json=payload)

    async def update_user(self, user_id: str, changes: dict[str, Any]) -> APIResponse:
        return await self._request(method="PUT", path=f"/users/{user_id}", json=changes)

    async def delete_user(self, user_id: str) -> APIResponse:
        return await self._request(method="DELETE", path=f"/users/{user_id}")

    # =========================================================================
    # Review Endpoints
    # =========================================================================

    async def get_product_reviews(
        self,
        product_id: str,
        page: int = 1,
        limit: int = 10,
        rating: int | None = None,
    ) -> APIResponse:
        """Get approved reviews of a product.

        Returns:
            APIResponse with ``{reviews, pagination, stats}``.
        """
        return await self._request(
            method="GET",
            path=f"/reviews/product/{product_id}",
            params={"page": page, "limit": limit, "rating": rating},
        )

    async def create_review(
        self,
        product_id: str,
        rating: int,
        title: str,
        comment: str,
    ) -> APIResponse:
        return await self._request(
            method="POST",
            path="/reviews",
            json={
                "product_id": product_id,
                "rating": rating,
                "title": title,
                "comment": comment,
            },
        )

    async def get_my_reviews(self, page: int = 1, limit: int = 10) -> APIResponse:
        return await self._request(
            method="GET",
            path="/reviews/user/my-reviews",
            params={"page": page, "limit": limit},
        )

    async def update_review(self, review_id: str, changes: dict[str, Any]) -> APIResponse:
        return await self._request(method="PUT", path=f"/reviews/{review_id}", json=changes)

    async def delete_review(self, review_id: str) -> APIResponse:
        return await self._request(method="DELETE", path=f"/reviews/{review_id}")

    async def report_review(self, review_id: str, reason: str) -> APIResponse:
        return await self._request(
            method="POST",
            path=f"/reviews/{review_id}/report",
            json={"reason": reason},
        )

    async def mark_review_helpful(self, review_id: str) -> APIResponse:
        return await self._request(method="POST", path=f"/reviews/{review_id}/helpful")

    # =========================================================================
    # Admin Review Endpoints
    # =========================================================================

    async def admin_list_reviews(
        self,
        page: int = 1,
        limit: int = 10,
        status: str | None = None,
        is_approved: bool | None = None,
        is_reported: bool | None = None,
        rating: int | None = None,
        product_id: str | None = None,
        sort_by: str | None = None,
        sort_order: str | None = None,
    ) -> APIResponse:
        """List reviews in any moderation state.

        Returns:
            APIResponse with ``{reviews, pagination, stats}``.
        """
        return await self._request(
            method="GET",
            path="/reviews/admin",
            params={
                "page": page,
                "limit": limit,
                "status": status,
                "is_approved": is_approved,
                "is_reported": is_reported,
                "rating": rating,
                "product_id": product_id,
                "sort_by": sort_by,
                "sort_order": sort_order,
            },
        )

    async def moderate_review(
        self,
        review_id: str,
        is_approved: bool,
        admin_response: str | None = None,
    ) -> APIResponse:
        """Approve or reject a review, optionally with a public response."""
        return await self._request(
            method="PUT",
            path=f"/reviews/admin/{review_id}/status",
            json={"is_approved": is_approved, "admin_response": admin_response},
        )

    async def admin_delete_review(self, review_id: str) -> APIResponse:
        return await self._request(method="DELETE", path=f"/reviews/admin/{review_id}")
