"""
Authentication module: password hashing, JWT signing, credential storage
and the signup / signin / refresh / logout service.
"""

from local_auth.auth.jwt_handler import ACCESS, REFRESH, SigningKey, TokenSigner, build_token_signer
from local_auth.auth.password_handler import PasswordHasher
from local_auth.auth.service import AuthService
from local_auth.auth.store import CredentialStore, InMemoryCredentialStore, SqliteCredentialStore

__all__ = [
    "ACCESS",
    "REFRESH",
    "SigningKey",
    "TokenSigner",
    "build_token_signer",
    "PasswordHasher",
    "AuthService",
    "CredentialStore",
    "InMemoryCredentialStore",
    "SqliteCredentialStore",
]
