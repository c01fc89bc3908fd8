"""Pytest configuration and shared fixtures for testing.

This module provides:
- Test secrets and a low bcrypt cost, set before app modules are imported
- A fresh in-memory AuthService per test
- FastAPI test client configuration
"""

import os
import pytest
from datetime import timedelta
from fastapi.testclient import TestClient

# Must be set before importing app modules: config reads them at import time
os.environ["AT_SECRET"] = "test-at-secret"
os.environ["RT_SECRET"] = "test-rt-secret"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ.pop("SQLITE_PATH", None)
os.environ.pop("REQUEST_LOG_DIR", None)

from local_auth.main import app
from local_auth.auth.dependencies import reset_auth_service
from local_auth.auth.jwt_handler import ACCESS, REFRESH, SigningKey, TokenSigner
from local_auth.auth.password_handler import PasswordHasher
from local_auth.auth.service import AuthService
from local_auth.auth.store import InMemoryCredentialStore


@pytest.fixture(autouse=True)
def reset_service():
    """Each test gets a new AuthService with an empty store."""
    reset_auth_service()
    yield
    reset_auth_service()


@pytest.fixture
def client():
    """FastAPI test client fixture.

    Example:
        def test_health_check(client):
            response = client.get("/")
            assert response.status_code == 200
    """
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def access_key():
    return SigningKey(kind=ACCESS, secret="unit-at-secret", ttl=timedelta(minutes=15))


@pytest.fixture
def refresh_key():
    return SigningKey(kind=REFRESH, secret="unit-rt-secret", ttl=timedelta(days=7))


@pytest.fixture
def signer(access_key, refresh_key):
    return TokenSigner(access_key=access_key, refresh_key=refresh_key)


@pytest.fixture
def hasher():
    """Minimum bcrypt cost keeps the suite fast."""
    return PasswordHasher(rounds=4)


@pytest.fixture
def store():
    return InMemoryCredentialStore()


@pytest.fixture
def service(store, signer, hasher):
    """AuthService wired to an in-memory store, independent of the app singleton."""
    return AuthService(store=store, signer=signer, hasher=hasher)


@pytest.fixture
def credentials():
    """Sample signup/signin body."""
    return {"email": "a@x.com", "password": "pw12345"}
