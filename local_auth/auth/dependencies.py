"""
FastAPI dependencies for authentication.

Guards verify the bearer token before any AuthService operation runs and
attach the verified claims to request.state.claims.
"""

from typing import Optional
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel

from local_auth.auth.jwt_handler import ACCESS, REFRESH, build_token_signer
from local_auth.auth.models import TokenClaims
from local_auth.auth.password_handler import PasswordHasher
from local_auth.auth.service import AuthService
from local_auth.auth.store import CredentialStore, InMemoryCredentialStore, SqliteCredentialStore
from local_auth.core.config import BCRYPT_ROUNDS, SQLITE_PATH
from local_auth.core.exceptions import TokenError
from local_auth.core.logger import api_logger

# Security scheme for JWT tokens
security = HTTPBearer(auto_error=False)


class RefreshCredentials(BaseModel):
    """Verified refresh token claims plus the raw token for hash comparison"""
    claims: TokenClaims
    refresh_token: str


# ============================================================================
# GLOBAL AUTH SERVICE INSTANCE
# ============================================================================

_auth_service: Optional[AuthService] = None


def build_credential_store() -> CredentialStore:
    """SQLite store when SQLITE_PATH is configured, in-memory otherwise."""
    if SQLITE_PATH:
        return SqliteCredentialStore(SQLITE_PATH)
    return InMemoryCredentialStore()


def get_auth_service() -> AuthService:
    """Get or create the global AuthService instance."""
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthService(
            store=build_credential_store(),
            signer=build_token_signer(),
            hasher=PasswordHasher(rounds=BCRYPT_ROUNDS),
        )
    return _auth_service


def reset_auth_service():
    """Drop the global AuthService so the next call rebuilds it (tests)."""
    global _auth_service
    _auth_service = None


def _credentials_exception() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


def _verify_bearer(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials],
    service: AuthService,
    kind: str,
) -> TokenClaims:
    if credentials is None:
        raise _credentials_exception()

    try:
        claims = service.signer.verify(credentials.credentials, kind)
    except TokenError as e:
        api_logger.info(f"Bearer {kind} token rejected: {type(e).__name__}")
        raise _credentials_exception()

    request.state.claims = claims
    return claims


async def get_current_claims(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    service: AuthService = Depends(get_auth_service),
) -> TokenClaims:
    """
    Verify the bearer access token.

    Returns:
        TokenClaims: Claims of the authenticated account

    Raises:
        HTTPException: 401 if the token is missing, invalid or expired
    """
    return _verify_bearer(request, credentials, service, ACCESS)


async def get_refresh_credentials(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    service: AuthService = Depends(get_auth_service),
) -> RefreshCredentials:
    """
    Verify the bearer refresh token and keep the raw token for rotation.

    Raises:
        HTTPException: 401 if the token is missing, invalid or expired
    """
    claims = _verify_bearer(request, credentials, service, REFRESH)
    return RefreshCredentials(claims=claims, refresh_token=credentials.credentials)
