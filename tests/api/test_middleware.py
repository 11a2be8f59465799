"""Tests for API middleware and error envelopes."""

from fastapi.testclient import TestClient


class TestRequestIdMiddleware:
    """Tests for request ID correlation middleware."""

    def test_generates_request_id_if_not_provided(self, client: TestClient) -> None:
        """Should generate request ID if not in request headers."""
        response = client.get("/health")
        assert response.status_code == 200
        assert "X-Request-ID" in response.headers
        # UUID format
        assert len(response.headers["X-Request-ID"]) == 36

    def test_uses_provided_request_id(self, client: TestClient) -> None:
        """Should use request ID from request headers."""
        custom_id = "custom-request-id-12345"
        response = client.get("/health", headers={"X-Request-ID": custom_id})
        assert response.status_code == 200
        assert response.headers["X-Request-ID"] == custom_id

    def test_error_envelope_carries_request_id(self, client: TestClient) -> None:
        """Error bodies should echo the correlation ID."""
        response = client.get(
            "/api/products/does-not-exist",
            headers={"X-Request-ID": "trace-me"},
        )
        assert response.status_code == 404
        assert response.json()["request_id"] == "trace-me"


class TestErrorEnvelope:
    """Tests for the uniform error response format."""

    def test_unknown_route_is_not_found(self, client: TestClient) -> None:
        """Unrouted paths use the standard envelope."""
        response = client.get("/api/nothing-here")
        assert response.status_code == 404
        data = response.json()
        assert data["error_code"] == "NOT_FOUND"
        assert data["details"] == []

    def test_validation_errors_are_flattened(self, client: TestClient) -> None:
        """Pydantic errors become field/message pairs."""
        response = client.post(
            "/api/users/register",
            json={
                "first_name": "J",
                "last_name": "Doe",
                "email": "jane@example.com",
                "password": "weak",
            },
        )
        assert response.status_code == 422
        data = response.json()
        assert data["error_code"] == "VALIDATION_ERROR"
        fields = {detail["field"] for detail in data["details"]}
        assert {"first_name", "password"} <= fields
        assert data["message"] == data["details"][0]["message"]
        assert not any(d["message"].startswith("Value error") for d in data["details"])

    def test_missing_token_is_unauthorized(self, client: TestClient) -> None:
        """Protected endpoints require a bearer token."""
        response = client.get("/api/users/profile")
        assert response.status_code == 401
        data = response.json()
        assert data["error_code"] == "UNAUTHORIZED"
        assert data["message"] == "Access denied. No token provided."

    def test_invalid_token_is_unauthorized(self, client: TestClient) -> None:
        """A malformed token is rejected."""
        response = client.get(
            "/api/users/profile",
            headers={"Authorization": "Bearer not-a-jwt"},
        )
        assert response.status_code == 401
        assert response.json()["error_code"] == "UNAUTHORIZED"

    def test_non_admin_is_forbidden(
        self, client: TestClient, user_headers: dict[str, str]
    ) -> None:
        """Admin endpoints reject regular users."""
        response = client.get("/api/users", headers=user_headers)
        assert response.status_code == 403
        assert response.json()["error_code"] == "FORBIDDEN"
