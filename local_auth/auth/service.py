"""
Local (email/password) authentication with rotating refresh tokens.

Per-account lifecycle, derived from the stored refresh hash:

    no account ──signup──▶ active refresh ◀──signin / refresh──┐
                              │    ▲                           │
                           logout  └─────────── signin ────────┤
                              ▼                                │
                          no refresh ──────────────────────────┘

At most one refresh token is valid per account. Signin overwrites the stored
hash; refresh swaps it with compare-and-set so a token can be redeemed once.
"""

from fastapi.concurrency import run_in_threadpool

from local_auth.auth.jwt_handler import TokenSigner
from local_auth.auth.models import TokenPair
from local_auth.auth.password_handler import PasswordHasher
from local_auth.auth.store import CredentialStore, new_account_id
from local_auth.core.exceptions import AccessDenied, DuplicateAccount
from local_auth.core.logger import auth_logger


class AuthService:
    """Signup, signin, refresh-token rotation and logout."""

    def __init__(self, store: CredentialStore, signer: TokenSigner, hasher: PasswordHasher):
        self.store = store
        self.signer = signer
        self.hasher = hasher
        # Unknown-email signins verify against this
        self._dummy_hash = hasher.hash("not-a-real-password")

    async def _hash(self, secret: str) -> str:
        return await run_in_threadpool(self.hasher.hash, secret)

    async def _verify(self, secret: str, hashed_secret: str) -> bool:
        return await run_in_threadpool(self.hasher.verify, secret, hashed_secret)

    async def _burn_verify(self, secret: str) -> None:
        await self._verify(secret, self._dummy_hash)

    async def signup(self, email: str, password: str) -> TokenPair:
        """
        Register a new account and sign it in.

        Raises:
            DuplicateAccount: If the email is already registered
        """
        account_id = new_account_id()
        password_hash = await self._hash(password)
        tokens = self.signer.issue_pair(account_id, email)
        refresh_hash = await self._hash(tokens.refresh_token)

        # Single write: a failure leaves no account behind
        try:
            account = await self.store.create_account(
                email, password_hash, account_id=account_id, refresh_hash=refresh_hash
            )
        except DuplicateAccount:
            auth_logger.info("Signup rejected: email already registered")
            raise

        auth_logger.info(f"Account {account.id} signed up")
        return tokens

    async def signin(self, email: str, password: str) -> TokenPair:
        """
        Verify credentials and issue a fresh token pair.

        Any previously issued refresh token for the account stops working.

        Raises:
            AccessDenied: Unknown email or wrong password (indistinguishable)
        """
        account = await self.store.find_by_email(email)
        if account is None:
            await self._burn_verify(password)
            auth_logger.info("Signin rejected")
            raise AccessDenied()

        if not await self._verify(password, account.password_hash):
            auth_logger.info("Signin rejected")
            raise AccessDenied()

        tokens = self.signer.issue_pair(account.id, account.email)
        await self.store.set_refresh_hash(account.id, await self._hash(tokens.refresh_token))

        auth_logger.info(f"Account {account.id} signed in")
        return tokens

    async def refresh_tokens(self, account_id: str, refresh_token: str) -> TokenPair:
        """
        Redeem a refresh token for a new token pair.

        The presented token is single use: once rotation succeeds the stored
        hash belongs to the new refresh token.

        Args:
            account_id: Subject taken from the verified refresh token
            refresh_token: The raw refresh token as presented

        Raises:
            AccessDenied: No such account, logged out, token does not match
                the stored hash, or a concurrent rotation won
        """
        account = await self.store.find_by_id(account_id)
        if account is None or not account.has_active_refresh:
            auth_logger.info(f"Refresh rejected for {account_id}: no active session")
            raise AccessDenied()

        current_hash = account.refresh_token_hash
        if not await self._verify(refresh_token, current_hash):
            auth_logger.warning(f"Refresh rejected for {account_id}: token mismatch")
            raise AccessDenied()

        tokens = self.signer.issue_pair(account.id, account.email)
        new_hash = await self._hash(tokens.refresh_token)

        swapped = await self.store.compare_and_set_refresh_hash(account.id, current_hash, new_hash)
        if not swapped:
            auth_logger.warning(f"Refresh rejected for {account_id}: token already rotated")
            raise AccessDenied()

        auth_logger.info(f"Account {account.id} refreshed tokens")
        return tokens

    async def logout(self, account_id: str) -> None:
        """Drop the account's refresh token. Always succeeds."""
        await self.store.set_refresh_hash(account_id, None)
        auth_logger.info(f"Account {account_id} logged out")
