"""
Authentication error taxonomy.

The HTTP layer maps these to status codes in one place (see main.py):
- DuplicateAccount, AccessDenied → 403
- TokenExpired, InvalidSignature → 401 with a generic message
"""

ACCESS_DENIED_MESSAGE = "Access Denied"


class AuthError(Exception):
    """Base class for every failure raised by the auth core."""

    def __init__(self, message: str = ACCESS_DENIED_MESSAGE):
        super().__init__(message)
        self.message = message


class DuplicateAccount(AuthError):
    """Signup with an email that is already registered."""

    def __init__(self, message: str = "Credentials taken"):
        super().__init__(message)


class AccessDenied(AuthError):
    """Signin or refresh rejected.

    Raised for unknown account, wrong password, no active refresh session and
    refresh token mismatch alike. The message never says which.
    """

    def __init__(self):
        super().__init__(ACCESS_DENIED_MESSAGE)


class TokenError(AuthError):
    """A presented token failed verification."""


class TokenExpired(TokenError):
    """Token signature is valid but its expiry is in the past."""


class InvalidSignature(TokenError):
    """Token is malformed, signed with another key, or of the wrong kind."""
