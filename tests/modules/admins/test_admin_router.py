"""
Tests for the admin authentication endpoints.

The app is built with the admin router only; the database session and
the session manager are replaced through dependency overrides.
"""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from academy.core.database import get_db
from academy.core.session import ADMIN_COOKIE_NAME, get_admin_sessions, get_student_sessions
from academy.modules.admins import router
from academy.modules.admins.service import AccountInactiveError, ResetTokenExpiredError
from academy.modules.shared import InvalidCredentialsError

SERVICE = "academy.modules.admins.service"


@pytest.fixture
def app(mock_db, admin_sessions, student_sessions):
    app = FastAPI()
    app.include_router(router, prefix="/api/admin")
    app.dependency_overrides[get_db] = lambda: mock_db
    app.dependency_overrides[get_admin_sessions] = lambda: admin_sessions
    app.dependency_overrides[get_student_sessions] = lambda: student_sessions
    return app


@pytest.fixture
def client(app):
    # https so Secure cookies round-trip through the client cookie jar
    return TestClient(app, base_url="https://testserver")


def _cookie(token: str) -> dict[str, str]:
    return {"Cookie": f"{ADMIN_COOKIE_NAME}={token}"}


class TestLogin:
    """Tests for POST /admin/login."""

    def test_login_sets_session_cookie(self, client, sample_admin, admin_sessions, clock):
        """Successful login returns the session and sets the cookie."""
        with patch(f"{SERVICE}.authenticate_admin", new_callable=AsyncMock) as mock_auth:
            mock_auth.return_value = sample_admin

            response = client.post(
                "/api/admin/login",
                json={"email": "ops@example.com", "password": "secret123"},
            )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["admin"]["admin_id"] == sample_admin.id
        assert body["admin"]["issued_at"] == clock.now

        set_cookie = response.headers["set-cookie"]
        assert set_cookie.startswith(f"{ADMIN_COOKIE_NAME}=")
        assert "HttpOnly" in set_cookie

        token = response.cookies[ADMIN_COOKIE_NAME]
        payload = admin_sessions.verify(token)
        assert payload.subject_id == sample_admin.id
        assert payload.role == "owner"

    def test_invalid_credentials(self, client):
        """Bad credentials give 401 and no cookie."""
        with patch(f"{SERVICE}.authenticate_admin", new_callable=AsyncMock) as mock_auth:
            mock_auth.side_effect = InvalidCredentialsError()

            response = client.post(
                "/api/admin/login",
                json={"email": "ops@example.com", "password": "wrong"},
            )

        assert response.status_code == 401
        assert response.json()["detail"]["error"] == "INVALID_CREDENTIALS"
        assert "set-cookie" not in response.headers

    def test_inactive_account(self, client):
        """Deactivated accounts give 403."""
        with patch(f"{SERVICE}.authenticate_admin", new_callable=AsyncMock) as mock_auth:
            mock_auth.side_effect = AccountInactiveError()

            response = client.post(
                "/api/admin/login",
                json={"email": "ops@example.com", "password": "secret123"},
            )

        assert response.status_code == 403

    def test_existing_session_is_refreshed(self, client, admin_sessions, clock):
        """Logging in with a valid session reuses it without checking credentials."""
        original = admin_sessions.new_payload("admin-1", "ops@example.com", "owner")
        token = admin_sessions.sign(original)
        clock.advance(60_000)

        with patch(f"{SERVICE}.authenticate_admin", new_callable=AsyncMock) as mock_auth:
            response = client.post(
                "/api/admin/login",
                json={"email": "ops@example.com", "password": "anything"},
                headers=_cookie(token),
            )

            mock_auth.assert_not_called()

        assert response.status_code == 200
        assert response.json()["admin"]["issued_at"] == original.issued_at
        assert response.json()["admin"]["last_active"] == clock.now

    def test_invalid_email_rejected(self, client):
        """Request validation rejects malformed emails."""
        response = client.post("/api/admin/login", json={"email": "nope", "password": "x"})
        assert response.status_code == 422


class TestMe:
    """Tests for GET /admin/me."""

    def test_requires_session(self, client):
        """Without a cookie the endpoint is 401."""
        response = client.get("/api/admin/me")

        assert response.status_code == 401
        assert response.json()["detail"] == {
            "error": "UNAUTHENTICATED",
            "message": "Authentication required.",
        }

    def test_returns_session_and_refreshes_cookie(self, client, admin_sessions, clock):
        """A valid session is returned and its cookie re-issued."""
        token = admin_sessions.sign(admin_sessions.new_payload("admin-1", "ops@example.com"))
        clock.advance(10 * 60 * 1000)

        response = client.get("/api/admin/me", headers=_cookie(token))

        assert response.status_code == 200
        assert response.json()["admin"]["last_active"] == clock.now
        refreshed = admin_sessions.verify(response.cookies[ADMIN_COOKIE_NAME])
        assert refreshed.last_active == clock.now

    def test_idle_session_rejected(self, client, admin_sessions, clock):
        """Sessions idle past the timeout are 401."""
        token = admin_sessions.sign(admin_sessions.new_payload("admin-1", "ops@example.com"))
        clock.advance(31 * 60 * 1000)

        assert client.get("/api/admin/me", headers=_cookie(token)).status_code == 401

    def test_student_token_rejected(self, client, student_sessions):
        """A student token in the admin cookie is not accepted."""
        token = student_sessions.sign(student_sessions.new_payload("profile-1", "s@example.com"))

        assert client.get("/api/admin/me", headers=_cookie(token)).status_code == 401


class TestLogout:
    """Tests for POST /admin/logout."""

    def test_logout_clears_cookie(self, client):
        """Logout expires the session cookie."""
        response = client.post("/api/admin/logout")

        assert response.status_code == 200
        set_cookie = response.headers["set-cookie"]
        assert set_cookie.startswith(f"{ADMIN_COOKIE_NAME}=")
        assert "Max-Age=0" in set_cookie


class TestPasswordReset:
    """Tests for the password reset endpoints."""

    def test_request_always_succeeds(self, client, mock_db):
        """The response is the same whether or not the account exists."""
        with patch(f"{SERVICE}.request_password_reset", new_callable=AsyncMock) as mock_request:
            response = client.post(
                "/api/admin/password-reset/request",
                json={"email": "unknown@example.com"},
            )

            mock_request.assert_awaited_once_with(mock_db, "unknown@example.com")

        assert response.status_code == 200
        assert "If an account" in response.json()["message"]

    def test_reset_success(self, client):
        """A valid token resets the password."""
        with patch(f"{SERVICE}.reset_password", new_callable=AsyncMock):
            response = client.post(
                "/api/admin/password-reset/reset",
                json={"email": "ops@example.com", "token": "t", "new_password": "newpass123"},
            )

        assert response.status_code == 200
        assert response.json()["success"] is True

    def test_reset_expired_token(self, client):
        """Expired tokens surface as 400 with their error code."""
        with patch(f"{SERVICE}.reset_password", new_callable=AsyncMock) as mock_reset:
            mock_reset.side_effect = ResetTokenExpiredError()

            response = client.post(
                "/api/admin/password-reset/reset",
                json={"email": "ops@example.com", "token": "t", "new_password": "newpass123"},
            )

        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "RESET_TOKEN_EXPIRED"
