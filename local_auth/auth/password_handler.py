"""
Password hashing and verification utilities.

Used for passwords and for refresh tokens: both are secrets the server must
never store in recoverable form.
"""

import base64
import hashlib

import bcrypt

from local_auth.core.config import BCRYPT_ROUNDS


def _prehash(secret: str) -> bytes:
    # bcrypt only reads 72 bytes; JWTs are longer and share a common prefix
    digest = hashlib.sha256(secret.encode('utf-8')).digest()
    return base64.b64encode(digest)


class PasswordHasher:
    """Salted bcrypt hashing with a configurable cost factor."""

    def __init__(self, rounds: int = BCRYPT_ROUNDS):
        self.rounds = rounds

    def hash(self, secret: str) -> str:
        """
        Hash a secret using bcrypt.

        Args:
            secret: The plain text secret to hash

        Returns:
            str: The hashed secret (algorithm, cost, salt and digest)
        """
        salt = bcrypt.gensalt(rounds=self.rounds)
        hashed = bcrypt.hashpw(_prehash(secret), salt)
        return hashed.decode('utf-8')

    def verify(self, secret: str, hashed_secret: str) -> bool:
        """
        Verify a plain secret against a stored hash.

        Args:
            secret: The plain text secret
            hashed_secret: The hash to compare against

        Returns:
            bool: True if the secret matches, False otherwise (including
            when the stored hash is malformed)
        """
        try:
            return bcrypt.checkpw(_prehash(secret), hashed_secret.encode('utf-8'))
        except ValueError:
            return False

