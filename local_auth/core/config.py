"""Configuration settings for the local auth service.

This module centralizes all configurable parameters for:
- Access / refresh token signing secrets and lifetimes
- Password hashing cost
- Credential storage backend
- Logging

Values come from the OS environment. If a .env file exists in the project
root it is loaded first, so either location works.
"""
import os
import secrets
import warnings
from pathlib import Path
from dotenv import load_dotenv

# Load .env from project root if present (OS env vars still win)
env_file = Path(__file__).parent.parent.parent / ".env"
if env_file.exists():
    load_dotenv(env_file)


def _get_secret(name: str) -> str:
    """Get a signing secret from the environment.

    Falls back to a random per-process secret so the service can boot in
    development. Tokens signed with a generated secret do not survive a restart.
    """
    value = os.getenv(name)
    if not value:
        warnings.warn(
            f"{name} not set, using an auto-generated secret. "
            f"Set {name} in .env or the environment for production."
        )
        value = secrets.token_urlsafe(32)
    return value


# ============================================================================
# TOKEN SETTINGS
# ============================================================================
# Access and refresh tokens are signed with different secrets so that
# one can never be accepted in place of the other

AT_SECRET = _get_secret("AT_SECRET")
RT_SECRET = _get_secret("RT_SECRET")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "15"))
REFRESH_TOKEN_EXPIRE_DAYS = int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", "7"))

# ============================================================================
# PASSWORD HASHING
# ============================================================================

BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "10"))  # bcrypt accepts 4..31

# ============================================================================
# STORAGE
# ============================================================================
# Unset → accounts live in process memory and vanish on restart

SQLITE_PATH = os.getenv("SQLITE_PATH") or None

# ============================================================================
# LOGGING
# ============================================================================

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
REQUEST_LOG_DIR = os.getenv("REQUEST_LOG_DIR") or None  # per-request log files


def validate_settings() -> None:
    """Fail fast on settings that would silently weaken the token scheme.

    Raises:
        ValueError: If any setting is out of range or secrets collide
    """
    if AT_SECRET == RT_SECRET:
        raise ValueError("AT_SECRET and RT_SECRET must be different")
    if ACCESS_TOKEN_EXPIRE_MINUTES <= 0:
        raise ValueError("ACCESS_TOKEN_EXPIRE_MINUTES must be positive")
    if REFRESH_TOKEN_EXPIRE_DAYS <= 0:
        raise ValueError("REFRESH_TOKEN_EXPIRE_DAYS must be positive")
    if not 4 <= BCRYPT_ROUNDS <= 31:
        raise ValueError("BCRYPT_ROUNDS must be between 4 and 31")
