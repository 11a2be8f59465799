"""Tests for product and category API endpoints."""

from fastapi.testclient import TestClient

from tests.conftest import create_product

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


class TestListProducts:
    """Tests for GET /api/products endpoint."""

    def test_empty_catalog(self, client: TestClient) -> None:
        """An empty catalog returns no products."""
        response = client.get("/api/products")
        assert response.status_code == 200
        data = response.json()
        assert data["products"] == []
        assert data["pagination"]["total"] == 0
        assert data["pagination"]["limit"] == 12

    def test_hides_inactive_products(
        self, client: TestClient, admin_headers: dict[str, str]
    ) -> None:
        """Public listings only return active products."""
        create_product(client, admin_headers, name="Visible Battery")
        create_product(client, admin_headers, name="Hidden Battery", is_active=False)

        response = client.get("/api/products")
        names = [p["name"] for p in response.json()["products"]]
        assert names == ["Visible Battery"]

    def test_categories_match_category_or_subcategory(
        self, client: TestClient, admin_headers: dict[str, str]
    ) -> None:
        """A sidebar selection matches either the category or the subcategory."""
        create_product(client, admin_headers, name="ND Filter", category="Lens Filters", subcategory="67mm")
        create_product(client, admin_headers, name="UV Filter", category="Lens Filters", subcategory="58mm")
        create_product(client, admin_headers, name="Card Reader Pro", category="Card Readers")

        response = client.get("/api/products", params={"categories": "67mm,Card Readers"})
        names = sorted(p["name"] for p in response.json()["products"])
        assert names == ["Card Reader Pro", "ND Filter"]

    def test_search_covers_name_and_description(
        self, client: TestClient, admin_headers: dict[str, str]
    ) -> None:
        """Search is a case-insensitive substring match."""
        create_product(client, admin_headers, name="Dual Charger", category="Chargers")
        create_product(
            client,
            admin_headers,
            name="Travel Pack",
            category="Camera Backpacks",
            description="Fits a spare CHARGER",
        )
        create_product(client, admin_headers, name="Grip Battery")

        response = client.get("/api/products", params={"search": "charger"})
        names = sorted(p["name"] for p in response.json()["products"])
        assert names == ["Dual Charger", "Travel Pack"]

    def test_pagination(self, client: TestClient, admin_headers: dict[str, str]) -> None:
        """Pages hold at most ``limit`` items and report the page count."""
        for i in range(5):
            create_product(client, admin_headers, name=f"Battery {i}")

        response = client.get("/api/products", params={"page": 2, "limit": 2})
        data = response.json()
        assert len(data["products"]) == 2
        assert data["pagination"] == {"page": 2, "limit": 2, "total": 5, "pages": 3}

    def test_invalid_page_rejected(self, client: TestClient) -> None:
        """Page numbers start at 1."""
        response = client.get("/api/products", params={"page": 0})
        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"


class TestGetProduct:
    """Tests for GET /api/products/{identifier} endpoint."""

    def test_get_by_id_and_slug(self, client: TestClient, admin_headers: dict[str, str]) -> None:
        """Products resolve by ID or slug and count views."""
        product = create_product(client, admin_headers, name="Circular Polarizer 67mm!")
        assert product["slug"] == "circular-polarizer-67mm"

        by_id = client.get(f"/api/products/{product['id']}")
        assert by_id.status_code == 200
        by_slug = client.get("/api/products/circular-polarizer-67mm")
        assert by_slug.status_code == 200
        assert by_slug.json()["view_count"] == 2

    def test_inactive_product_not_found(
        self, client: TestClient, admin_headers: dict[str, str]
    ) -> None:
        """Inactive products are hidden from the detail page."""
        product = create_product(client, admin_headers, is_active=False)
        response = client.get(f"/api/products/{product['id']}")
        assert response.status_code == 404
        assert response.json()["error_code"] == "NOT_FOUND"

    def test_featured(self, client: TestClient, admin_headers: dict[str, str]) -> None:
        """Featured endpoint only returns featured products."""
        create_product(client, admin_headers, name="Star Battery", is_featured=True)
        create_product(client, admin_headers, name="Plain Battery")

        response = client.get("/api/products/featured")
        assert response.status_code == 200
        assert [p["name"] for p in response.json()["products"]] == ["Star Battery"]


class TestAdminProducts:
    """Tests for admin product management."""

    def test_create_requires_admin(
        self, client: TestClient, user_headers: dict[str, str]
    ) -> None:
        """Regular users cannot create products."""
        response = client.post(
            "/api/products",
            json={"name": "Battery", "category": "Batteries"},
            headers=user_headers,
        )
        assert response.status_code == 403

    def test_create_generates_sku_and_category(
        self, client: TestClient, admin_headers: dict[str, str]
    ) -> None:
        """Only name and category are required; the rest is filled in."""
        product = create_product(client, admin_headers, name="Strap", category="Straps")
        assert product["sku"].startswith("STR")
        assert product["price"] is None
        assert product["stock"] == 0

        names = [c["name"] for c in client.get("/api/products/categories").json()["categories"]]
        assert "Straps" in names

    def test_duplicate_sku_conflicts(
        self, client: TestClient, admin_headers: dict[str, str]
    ) -> None:
        """SKUs are unique."""
        create_product(client, admin_headers, name="First", sku="BAT000001")
        response = client.post(
            "/api/products",
            json={"name": "Second", "category": "Batteries", "sku": "bat000001"},
            headers=admin_headers,
        )
        assert response.status_code == 409
        assert response.json()["details"][0]["field"] == "sku"

    def test_partial_update(self, client: TestClient, admin_headers: dict[str, str]) -> None:
        """Only sent fields change; a blank image keeps the stored one."""
        product = create_product(
            client, admin_headers, name="Old Name", image_url="/img/a.png", price=10.0
        )

        response = client.put(
            f"/api/products/{product['id']}",
            json={"name": "New Name", "image_url": "", "stock": 7},
            headers=admin_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "New Name"
        assert data["slug"] == "new-name"
        assert data["image_url"] == "/img/a.png"
        assert data["stock"] == 7
        assert data["price"] == 10.0

    def test_admin_list_includes_inactive(
        self, client: TestClient, admin_headers: dict[str, str]
    ) -> None:
        """Admin listing sees inactive products and searches SKUs."""
        create_product(client, admin_headers, name="Hidden", is_active=False, sku="HID123")

        response = client.get(
            "/api/products/admin/all", params={"search": "hid123"}, headers=admin_headers
        )
        assert response.status_code == 200
        data = response.json()
        assert [p["name"] for p in data["products"]] == ["Hidden"]
        assert data["pagination"]["limit"] == 10

    def test_delete_removes_reviews(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        user_headers: dict[str, str],
    ) -> None:
        """Deleting a product deletes its reviews."""
        product = create_product(client, admin_headers)
        review = client.post(
            "/api/reviews",
            json={"product_id": product["id"], "rating": 5, "title": "Great", "comment": "Works"},
            headers=user_headers,
        )
        assert review.status_code == 201

        response = client.delete(f"/api/products/{product['id']}", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["message"] == "Product deleted successfully"

        mine = client.get("/api/reviews/user/my-reviews", headers=user_headers).json()
        assert mine["reviews"] == []

    def test_delete_decrements_total(
        self, client: TestClient, admin_headers: dict[str, str]
    ) -> None:
        """The listing total drops by one after a delete."""
        product = create_product(client, admin_headers, name="ND Filter")
        create_product(client, admin_headers, name="Lens Cap")
        before = client.get("/api/products").json()["pagination"]["total"]

        response = client.delete(f"/api/products/{product['id']}", headers=admin_headers)
        assert response.status_code == 200

        after = client.get("/api/products").json()
        assert after["pagination"]["total"] == before - 1
        assert product["id"] not in {p["id"] for p in after["products"]}

    def test_delete_missing_product(
        self, client: TestClient, admin_headers: dict[str, str]
    ) -> None:
        """Deleting an unknown product is a 404."""
        response = client.delete("/api/products/missing", headers=admin_headers)
        assert response.status_code == 404


class TestCategories:
    """Tests for category endpoints."""

    def test_create_category_with_submenu(
        self, client: TestClient, admin_headers: dict[str, str]
    ) -> None:
        """Categories keep their submenu entries."""
        response = client.post(
            "/api/products/categories",
            json={"name": "Lens Filters", "submenu": [{"name": "67mm"}]},
            headers=admin_headers,
        )
        assert response.status_code == 201
        data = response.json()
        assert data["has_submenu"] is True
        assert data["submenu"] == [{"name": "67mm", "category": "67mm"}]

    def test_duplicate_category_conflicts(
        self, client: TestClient, admin_headers: dict[str, str]
    ) -> None:
        """Category names are unique."""
        body = {"name": "Chargers"}
        assert client.post("/api/products/categories", json=body, headers=admin_headers).status_code == 201
        response = client.post("/api/products/categories", json=body, headers=admin_headers)
        assert response.status_code == 409


class TestImageUpload:
    """Tests for product image upload."""

    def test_upload_and_serve(self, client: TestClient, admin_headers: dict[str, str]) -> None:
        """Uploaded images are served back from the returned URL."""
        response = client.post(
            "/api/products/upload-image",
            files={"image": ("lens.png", PNG_BYTES, "image/png")},
            headers=admin_headers,
        )
        assert response.status_code == 201
        data = response.json()
        assert data["image_url"].startswith("/api/products/image/product-")
        assert data["original_name"] == "lens.png"
        assert data["size"] == len(PNG_BYTES)

        served = client.get(data["image_url"])
        assert served.status_code == 200
        assert served.content == PNG_BYTES

    def test_rejects_non_image(self, client: TestClient, admin_headers: dict[str, str]) -> None:
        """Only image types are accepted."""
        response = client.post(
            "/api/products/upload-image",
            files={"image": ("notes.txt", b"hello", "text/plain")},
            headers=admin_headers,
        )
        assert response.status_code == 422
        assert response.json()["details"][0]["field"] == "image"

    def test_path_traversal_not_served(self, client: TestClient) -> None:
        """Only plain file names under the upload directory are served."""
        response = client.get("/api/products/image/..%2Fsecrets.txt")
        assert response.status_code == 404
