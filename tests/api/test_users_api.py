"""Tests for user and authentication API endpoints."""

from fastapi.testclient import TestClient

from tests.conftest import USER_PASSWORD, register_user


class TestRegisterAndLogin:
    """Tests for registration and sign-in."""

    def test_register_returns_token_and_user(self, client: TestClient) -> None:
        """Registration signs the new user in."""
        data = register_user(client, "Jane@Example.com")
        assert data["token"]
        user = data["user"]
        assert user["email"] == "jane@example.com"
        assert user["role"] == "user"
        assert user["full_name"] == "Jane Doe"
        assert "password" not in user
        assert "password_hash" not in user

    def test_duplicate_email_conflicts(self, client: TestClient) -> None:
        """An email can only be registered once."""
        register_user(client, "jane@example.com")
        response = client.post(
            "/api/users/register",
            json={
                "first_name": "Jane",
                "last_name": "Again",
                "email": "JANE@example.com",
                "password": USER_PASSWORD,
            },
        )
        assert response.status_code == 409
        assert response.json()["details"][0]["field"] == "email"

    def test_login(self, client: TestClient) -> None:
        """Correct credentials return a token."""
        register_user(client, "jane@example.com")
        response = client.post(
            "/api/users/login",
            json={"email": "jane@example.com", "password": USER_PASSWORD},
        )
        assert response.status_code == 200
        assert response.json()["user"]["last_login"] is not None

    def test_login_wrong_password(self, client: TestClient) -> None:
        """Wrong credentials are rejected without saying which part was wrong."""
        register_user(client, "jane@example.com")
        response = client.post(
            "/api/users/login",
            json={"email": "jane@example.com", "password": "Wrong123!"},
        )
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid email or password"

    def test_logout(self, client: TestClient, user_headers: dict[str, str]) -> None:
        """Logout acknowledges with no content."""
        response = client.post("/api/users/logout", headers=user_headers)
        assert response.status_code == 204


class TestProfile:
    """Tests for the signed-in user's profile."""

    def test_get_profile(self, client: TestClient, user_headers: dict[str, str]) -> None:
        """Profile returns the token's user."""
        response = client.get("/api/users/profile", headers=user_headers)
        assert response.status_code == 200
        assert response.json()["email"] == "shopper@example.com"

    def test_update_profile(self, client: TestClient, user_headers: dict[str, str]) -> None:
        """Users may change their name, phone and address."""
        response = client.put(
            "/api/users/profile",
            json={
                "first_name": "Janet",
                "phone": "+15551234567",
                "address": {"city": "Portland", "zip_code": "97201"},
            },
            headers=user_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["first_name"] == "Janet"
        assert data["last_name"] == "Doe"
        assert data["phone"] == "+15551234567"
        assert data["address"]["city"] == "Portland"

    def test_update_profile_ignores_role(
        self, client: TestClient, user_headers: dict[str, str]
    ) -> None:
        """Role is not a profile field."""
        response = client.put(
            "/api/users/profile", json={"role": "admin"}, headers=user_headers
        )
        assert response.status_code == 200
        assert response.json()["role"] == "user"

    def test_change_password(self, client: TestClient, user_headers: dict[str, str]) -> None:
        """A changed password works for the next sign-in."""
        response = client.put(
            "/api/users/change-password",
            json={"current_password": USER_PASSWORD, "new_password": "NewPass456!"},
            headers=user_headers,
        )
        assert response.status_code == 200

        login = client.post(
            "/api/users/login",
            json={"email": "shopper@example.com", "password": "NewPass456!"},
        )
        assert login.status_code == 200

    def test_change_password_wrong_current(
        self, client: TestClient, user_headers: dict[str, str]
    ) -> None:
        """The current password must match."""
        response = client.put(
            "/api/users/change-password",
            json={"current_password": "Nope123!", "new_password": "NewPass456!"},
            headers=user_headers,
        )
        assert response.status_code == 422
        assert response.json()["details"][0]["field"] == "current_password"


class TestAdminUsers:
    """Tests for admin user management."""

    def test_list_users(self, client: TestClient, admin_headers: dict[str, str]) -> None:
        """Admins can list and filter users."""
        register_user(client, "jane@example.com")
        register_user(client, "john@example.com", first_name="John")

        response = client.get("/api/users", params={"role": "user"}, headers=admin_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["pagination"]["total"] == 2
        assert {u["email"] for u in data["users"]} == {"jane@example.com", "john@example.com"}

        searched = client.get("/api/users", params={"search": "john"}, headers=admin_headers)
        assert [u["email"] for u in searched.json()["users"]] == ["john@example.com"]

    def test_inactive_moderator_filters(
        self, client: TestClient, admin_headers: dict[str, str]
    ) -> None:
        """An inactive moderator shows up under its role but not among active users."""
        response = client.post(
            "/api/users/admin/create",
            json={
                "first_name": "Mona",
                "last_name": "Reviewer",
                "email": "mona@example.com",
                "role": "moderator",
                "is_active": False,
            },
            headers=admin_headers,
        )
        assert response.status_code == 201

        moderators = client.get(
            "/api/users", params={"role": "moderator"}, headers=admin_headers
        ).json()
        assert [u["email"] for u in moderators["users"]] == ["mona@example.com"]

        active = client.get(
            "/api/users", params={"is_active": "true"}, headers=admin_headers
        ).json()
        assert "mona@example.com" not in {u["email"] for u in active["users"]}

    def test_create_user_with_default_password(
        self, client: TestClient, admin_headers: dict[str, str]
    ) -> None:
        """Accounts created without a password get the temporary one."""
        response = client.post(
            "/api/users/admin/create",
            json={"first_name": "Sam", "last_name": "Smith", "email": "sam@example.com"},
            headers=admin_headers,
        )
        assert response.status_code == 201
        assert response.json()["is_email_verified"] is True

        login = client.post(
            "/api/users/login",
            json={"email": "sam@example.com", "password": "TempPass123!"},
        )
        assert login.status_code == 200

    def test_deactivated_user_cannot_sign_in(
        self, client: TestClient, admin_headers: dict[str, str]
    ) -> None:
        """Deactivation blocks sign-in and existing tokens."""
        data = register_user(client, "jane@example.com")
        user_id = data["user"]["id"]

        response = client.put(
            f"/api/users/{user_id}", json={"is_active": False}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["is_active"] is False

        login = client.post(
            "/api/users/login",
            json={"email": "jane@example.com", "password": USER_PASSWORD},
        )
        assert login.status_code == 401
        profile = client.get(
            "/api/users/profile", headers={"Authorization": f"Bearer {data['token']}"}
        )
        assert profile.status_code == 401

    def test_admin_cannot_demote_self(
        self, client: TestClient, admin_headers: dict[str, str]
    ) -> None:
        """Admins cannot remove their own admin role."""
        me = client.get("/api/users/profile", headers=admin_headers).json()
        response = client.put(
            f"/api/users/{me['id']}", json={"role": "user"}, headers=admin_headers
        )
        assert response.status_code == 403

    def test_admin_cannot_delete_self(
        self, client: TestClient, admin_headers: dict[str, str]
    ) -> None:
        """Admins cannot delete their own account."""
        me = client.get("/api/users/profile", headers=admin_headers).json()
        response = client.delete(f"/api/users/{me['id']}", headers=admin_headers)
        assert response.status_code == 403

    def test_delete_user_keeps_reviews(
        self, client: TestClient, admin_headers: dict[str, str]
    ) -> None:
        """Deleting a user leaves their reviews without an author."""
        product = client.post(
            "/api/products",
            json={"name": "Battery", "category": "Batteries"},
            headers=admin_headers,
        ).json()
        data = register_user(client, "jane@example.com")
        review = client.post(
            "/api/reviews",
            json={"product_id": product["id"], "rating": 4, "title": "Good", "comment": "Fine"},
            headers={"Authorization": f"Bearer {data['token']}"},
        ).json()

        response = client.delete(f"/api/users/{data['user']['id']}", headers=admin_headers)
        assert response.status_code == 200

        reviews = client.get("/api/reviews/admin", headers=admin_headers).json()["reviews"]
        assert [r["id"] for r in reviews] == [review["id"]]
        assert reviews[0]["user_id"] is None
        assert reviews[0]["author"] is None

    def test_get_missing_user(self, client: TestClient, admin_headers: dict[str, str]) -> None:
        """Unknown user IDs are a 404."""
        response = client.get("/api/users/missing", headers=admin_headers)
        assert response.status_code == 404
