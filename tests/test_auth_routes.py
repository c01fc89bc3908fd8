"""
Tests for authentication endpoints.
"""

import pytest
from datetime import datetime, timedelta, timezone

from local_auth.auth.dependencies import get_auth_service
from local_auth.auth.jwt_handler import ACCESS, REFRESH, TokenSigner


def _bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def signed_up(client, credentials):
    """Sign up the sample account and return its tokens."""
    response = client.post("/auth/local/signup", json=credentials)
    assert response.status_code == 201
    return response.json()


class TestHealthEndpoint:
    """Tests for the root health check endpoint."""

    def test_health_check(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"


class TestSignup:
    """Test signup endpoint"""

    def test_signup_success(self, client, credentials):
        response = client.post("/auth/local/signup", json=credentials)
        assert response.status_code == 201
        data = response.json()
        assert data["access_token"]
        assert data["refresh_token"]
        assert "password" not in data

    def test_signup_duplicate_email(self, client, credentials, signed_up):
        response = client.post("/auth/local/signup", json=credentials)
        assert response.status_code == 403

    def test_signup_missing_fields(self, client):
        response = client.post("/auth/local/signup", json={"email": "a@x.com"})
        assert response.status_code == 422

    def test_signup_empty_password(self, client):
        response = client.post("/auth/local/signup", json={"email": "a@x.com", "password": ""})
        assert response.status_code == 422


class TestSignin:
    """Test signin endpoint"""

    def test_signin_success(self, client, credentials, signed_up):
        response = client.post("/auth/local/signin", json=credentials)
        assert response.status_code == 200
        data = response.json()
        assert data["access_token"] != signed_up["access_token"]
        assert data["refresh_token"] != signed_up["refresh_token"]

    def test_wrong_password_and_unknown_email_identical(self, client, signed_up):
        wrong_password = client.post(
            "/auth/local/signin", json={"email": "a@x.com", "password": "wrong"}
        )
        unknown_email = client.post(
            "/auth/local/signin", json={"email": "nobody@x.com", "password": "pw12345"}
        )
        assert wrong_password.status_code == unknown_email.status_code == 403
        assert wrong_password.json() == unknown_email.json() == {"detail": "Access Denied"}


class TestRefresh:
    """Test token refresh endpoint"""

    def test_refresh_success(self, client, signed_up):
        response = client.post("/auth/refresh", headers=_bearer(signed_up["refresh_token"]))
        assert response.status_code == 200
        data = response.json()
        assert data["refresh_token"] != signed_up["refresh_token"]
        assert data["refresh_token"] != signed_up["access_token"]
        assert data["access_token"] != signed_up["access_token"]

    def test_refresh_token_single_use(self, client, signed_up):
        first = client.post("/auth/refresh", headers=_bearer(signed_up["refresh_token"]))
        assert first.status_code == 200
        second = client.post("/auth/refresh", headers=_bearer(signed_up["refresh_token"]))
        assert second.status_code == 403

    def test_refresh_without_token(self, client):
        response = client.post("/auth/refresh")
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_refresh_with_access_token(self, client, signed_up):
        response = client.post("/auth/refresh", headers=_bearer(signed_up["access_token"]))
        assert response.status_code == 401

    def test_refresh_with_invalid_token(self, client):
        response = client.post("/auth/refresh", headers=_bearer("invalid_token"))
        assert response.status_code == 401

    def test_refresh_with_expired_token(self, client, signed_up):
        signer = get_auth_service().signer
        past = TokenSigner(
            access_key=signer._keys[ACCESS],
            refresh_key=signer._keys[REFRESH],
            clock=lambda: datetime.now(timezone.utc) - timedelta(days=30),
        )
        subject = signer.verify(signed_up["access_token"], ACCESS).subject
        expired = past.issue(subject, "a@x.com", REFRESH)

        response = client.post("/auth/refresh", headers=_bearer(expired))
        assert response.status_code == 401
        assert response.json()["detail"] == "Could not validate credentials"


class TestLogout:
    """Test logout endpoint"""

    def test_logout_success(self, client, signed_up):
        response = client.post("/auth/logout", headers=_bearer(signed_up["access_token"]))
        assert response.status_code == 200
        assert "logged out" in response.json()["message"].lower()

    def test_logout_twice(self, client, signed_up):
        for _ in range(2):
            response = client.post("/auth/logout", headers=_bearer(signed_up["access_token"]))
            assert response.status_code == 200

    def test_logout_requires_access_token(self, client, signed_up):
        assert client.post("/auth/logout").status_code == 401
        response = client.post("/auth/logout", headers=_bearer(signed_up["refresh_token"]))
        assert response.status_code == 401

    def test_refresh_after_logout(self, client, signed_up):
        client.post("/auth/logout", headers=_bearer(signed_up["access_token"]))
        response = client.post("/auth/refresh", headers=_bearer(signed_up["refresh_token"]))
        assert response.status_code == 403


class TestFullFlow:
    """signup → signin → refresh with stale token → refresh → logout → refresh"""

    def test_flow(self, client, credentials):
        t1 = client.post("/auth/local/signup", json=credentials).json()
        t2 = client.post("/auth/local/signin", json=credentials).json()
        assert t2 != t1

        stale = client.post("/auth/refresh", headers=_bearer(t1["refresh_token"]))
        assert stale.status_code == 403

        refreshed = client.post("/auth/refresh", headers=_bearer(t2["refresh_token"]))
        assert refreshed.status_code == 200
        t3 = refreshed.json()

        assert client.post("/auth/logout", headers=_bearer(t3["access_token"])).status_code == 200

        after_logout = client.post("/auth/refresh", headers=_bearer(t3["refresh_token"]))
        assert after_logout.status_code == 403
