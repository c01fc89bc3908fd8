"""
JWT token creation and verification.

Access and refresh tokens share one claims shape but are signed with
different secrets and carry different lifetimes. The caller always names the
kind it expects; a token signed for one kind never verifies as the other.
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable, Literal, Optional
from jose import JWTError, jwt
from pydantic import BaseModel, ConfigDict

from local_auth.auth.models import TokenClaims, TokenPair
from local_auth.core.config import (
    AT_SECRET,
    RT_SECRET,
    JWT_ALGORITHM,
    ACCESS_TOKEN_EXPIRE_MINUTES,
    REFRESH_TOKEN_EXPIRE_DAYS,
)
from local_auth.core.exceptions import InvalidSignature, TokenExpired
from local_auth.core.logger import auth_logger

ACCESS = "access"
REFRESH = "refresh"
TokenKind = Literal["access", "refresh"]


class SigningKey(BaseModel):
    """Secret and lifetime for one kind of token"""
    model_config = ConfigDict(frozen=True)

    kind: TokenKind
    secret: str
    ttl: timedelta


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenSigner:
    """Issues and verifies HS-signed access and refresh tokens.

    `clock` is the notion of "now" for both issuing (iat, exp) and checking
    expiry on verify.
    """

    def __init__(
        self,
        access_key: SigningKey,
        refresh_key: SigningKey,
        algorithm: str = JWT_ALGORITHM,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if access_key.kind != ACCESS or refresh_key.kind != REFRESH:
            raise ValueError("access_key and refresh_key must be of kind 'access' and 'refresh'")
        if access_key.secret == refresh_key.secret:
            raise ValueError("Access and refresh tokens must use different secrets")

        self._keys = {ACCESS: access_key, REFRESH: refresh_key}
        self.algorithm = algorithm
        self._clock = clock or _utcnow

    def _key(self, kind: str) -> SigningKey:
        try:
            return self._keys[kind]
        except KeyError:
            raise ValueError(f"Unknown token kind: {kind!r}") from None

    def issue(self, subject: str, email: str, kind: TokenKind) -> str:
        """
        Create a signed token.

        Args:
            subject: Account id, stored in the "sub" claim
            email: Account email
            kind: "access" or "refresh"

        Returns:
            str: Encoded JWT
        """
        key = self._key(kind)
        now = self._clock()

        payload = {
            "sub": subject,
            "email": email,
            "type": kind,
            "iat": now,
            "exp": now + key.ttl,
            "jti": secrets.token_urlsafe(16),  # tokens issued in the same second still differ
        }
        return jwt.encode(payload, key.secret, algorithm=self.algorithm)

    def issue_pair(self, subject: str, email: str) -> TokenPair:
        """Create an access and a refresh token for the same subject."""
        return TokenPair(
            access_token=self.issue(subject, email, ACCESS),
            refresh_token=self.issue(subject, email, REFRESH),
        )

    def verify(self, token: str, kind: TokenKind) -> TokenClaims:
        """
        Verify and decode a token of the expected kind.

        Args:
            token: The JWT to verify
            kind: Expected kind ("access" or "refresh")

        Returns:
            TokenClaims: Decoded claims

        Raises:
            TokenExpired: Signature is valid but the token has expired
            InvalidSignature: Token is malformed, signed with another secret,
                or is of the other kind
        """
        key = self._key(kind)

        try:
            # exp is checked below against self._clock
            payload = jwt.decode(
                token, key.secret, algorithms=[self.algorithm], options={"verify_exp": False}
            )
        except JWTError as e:
            auth_logger.info(f"Rejected {kind} token: {e}")
            raise InvalidSignature("Invalid token")

        if payload.get("type") != kind:
            auth_logger.warning(f"Rejected token of type {payload.get('type')!r}, expected {kind!r}")
            raise InvalidSignature("Invalid token")

        try:
            claims = TokenClaims(
                subject=payload["sub"],
                email=payload["email"],
                issued_at=datetime.fromtimestamp(payload["iat"], timezone.utc),
                expires_at=datetime.fromtimestamp(payload["exp"], timezone.utc),
            )
        except (KeyError, TypeError, ValueError):
            auth_logger.warning(f"Rejected {kind} token with incomplete claims")
            raise InvalidSignature("Invalid token payload")

        if self._clock() > claims.expires_at:
            auth_logger.info(f"Rejected expired {kind} token")
            raise TokenExpired("Token has expired")

        return claims


def build_token_signer() -> TokenSigner:
    """Create a TokenSigner from the configured secrets and lifetimes."""
    return TokenSigner(
        access_key=SigningKey(
            kind=ACCESS,
            secret=AT_SECRET,
            ttl=timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
        ),
        refresh_key=SigningKey(
            kind=REFRESH,
            secret=RT_SECRET,
            ttl=timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS),
        ),
    )
