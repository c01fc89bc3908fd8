"""
Authentication routes for signup, signin, token refresh and logout.

AuthError subclasses raised here are turned into responses by the handler
registered in main.py.
"""

from fastapi import APIRouter, Depends, status

from local_auth.auth.dependencies import (
    RefreshCredentials,
    get_auth_service,
    get_current_claims,
    get_refresh_credentials,
)
from local_auth.auth.models import AuthRequest, MessageResponse, TokenClaims, TokenPair
from local_auth.auth.service import AuthService
from local_auth.core.logger import api_logger

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/local/signup", response_model=TokenPair, status_code=status.HTTP_201_CREATED)
async def signup_local(
    auth_data: AuthRequest,
    service: AuthService = Depends(get_auth_service),
):
    """
    Register a new account.

    Returns:
        TokenPair: Access and refresh tokens for the new account
    """
    api_logger.info("Signup requested")
    return await service.signup(auth_data.email, auth_data.password)


@router.post("/local/signin", response_model=TokenPair, status_code=status.HTTP_200_OK)
async def signin_local(
    auth_data: AuthRequest,
    service: AuthService = Depends(get_auth_service),
):
    """
    Sign in with email and password.

    Returns:
        TokenPair: Fresh access and refresh tokens
    """
    api_logger.info("Signin requested")
    return await service.signin(auth_data.email, auth_data.password)


@router.post("/logout", response_model=MessageResponse, status_code=status.HTTP_200_OK)
async def logout(
    claims: TokenClaims = Depends(get_current_claims),
    service: AuthService = Depends(get_auth_service),
):
    """Invalidate the caller's refresh token. Requires a valid access token."""
    await service.logout(claims.subject)
    return MessageResponse(message="Successfully logged out")


@router.post("/refresh", response_model=TokenPair, status_code=status.HTTP_200_OK)
async def refresh_tokens(
    credentials: RefreshCredentials = Depends(get_refresh_credentials),
    service: AuthService = Depends(get_auth_service),
):
    """
    Exchange a refresh token (bearer) for a new token pair.

    The presented refresh token cannot be used again afterwards.
    """
    return await service.refresh_tokens(credentials.claims.subject, credentials.refresh_token)
