"""
Authentication models.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime, timezone


class Account(BaseModel):
    """Stored account record. Only the credential store creates or changes these."""
    id: str
    email: str
    password_hash: str = Field(..., min_length=1)
    refresh_token_hash: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def has_active_refresh(self) -> bool:
        return self.refresh_token_hash is not None


class TokenPair(BaseModel):
    """Access and refresh token issued together"""
    model_config = ConfigDict(frozen=True)

    access_token: str
    refresh_token: str


class TokenClaims(BaseModel):
    """Claims embedded in both access and refresh tokens"""
    model_config = ConfigDict(frozen=True)

    subject: str
    email: str
    issued_at: datetime
    expires_at: datetime


class AuthRequest(BaseModel):
    """Signup / signin request body.

    Email is taken exactly as sent; no case folding or normalization.
    """
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class MessageResponse(BaseModel):
    """Plain acknowledgement response"""
    message: str
