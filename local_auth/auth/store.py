"""
Credential storage.

Every account holds one password hash and at most one refresh-token hash.
The store is the only shared mutable state in the service, so each write to
the refresh hash is atomic per account:

- set_refresh_hash overwrites unconditionally (signin, logout)
- compare_and_set_refresh_hash only swaps if the stored hash is still the one
  the caller verified (refresh rotation). Of several concurrent rotations
  presenting the same token, at most one wins.

Two implementations:
    InMemoryCredentialStore  - process memory, default and test double
    SqliteCredentialStore    - sqlite file, survives restarts
"""

import sqlite3
import threading
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, Optional

from fastapi.concurrency import run_in_threadpool

from local_auth.auth.models import Account
from local_auth.core.exceptions import DuplicateAccount
from local_auth.core.logger import store_logger


def new_account_id() -> str:
    """Opaque account id. Callers may mint one before the account exists."""
    return uuid.uuid4().hex


class CredentialStore(ABC):
    """Persistence contract consumed by AuthService."""

    @abstractmethod
    async def create_account(
        self,
        email: str,
        password_hash: str,
        account_id: Optional[str] = None,
        refresh_hash: Optional[str] = None,
    ) -> Account:
        """Create an account, with its first refresh hash, in one write.

        Raises DuplicateAccount if the email exists; nothing is written then.
        """

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[Account]:
        """Exact-match lookup by email."""

    @abstractmethod
    async def find_by_id(self, account_id: str) -> Optional[Account]:
        """Lookup by account id."""

    @abstractmethod
    async def set_refresh_hash(self, account_id: str, refresh_hash: Optional[str]) -> None:
        """Overwrite the stored refresh hash; None clears it. Unknown ids are ignored."""

    @abstractmethod
    async def compare_and_set_refresh_hash(
        self, account_id: str, expected_hash: str, new_hash: str
    ) -> bool:
        """Swap the refresh hash only if it still equals expected_hash.

        Returns:
            bool: True if swapped, False if the account is gone or the hash changed
        """

    async def init(self) -> None:
        """Prepare the backing storage. No-op by default."""

    @abstractmethod
    async def clean(self) -> None:
        """Delete every account."""


class InMemoryCredentialStore(CredentialStore):
    """Dict-backed store guarded by a lock.

    The lock is held only for dict operations, never across an await.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._accounts: Dict[str, Account] = {}
        self._ids_by_email: Dict[str, str] = {}

    async def create_account(
        self,
        email: str,
        password_hash: str,
        account_id: Optional[str] = None,
        refresh_hash: Optional[str] = None,
    ) -> Account:
        with self._lock:
            if email in self._ids_by_email:
                raise DuplicateAccount()
            account = Account(
                id=account_id or new_account_id(),
                email=email,
                password_hash=password_hash,
                refresh_token_hash=refresh_hash,
            )
            self._accounts[account.id] = account
            self._ids_by_email[email] = account.id

        store_logger.info(f"Created account {account.id}")
        return account.model_copy()

    async def find_by_email(self, email: str) -> Optional[Account]:
        with self._lock:
            account_id = self._ids_by_email.get(email)
            account = self._accounts.get(account_id) if account_id else None
            return account.model_copy() if account else None

    async def find_by_id(self, account_id: str) -> Optional[Account]:
        with self._lock:
            account = self._accounts.get(account_id)
            return account.model_copy() if account else None

    async def set_refresh_hash(self, account_id: str, refresh_hash: Optional[str]) -> None:
        with self._lock:
            account = self._accounts.get(account_id)
            if account is None:
                return
            self._accounts[account_id] = account.model_copy(
                update={"refresh_token_hash": refresh_hash}
            )

    async def compare_and_set_refresh_hash(
        self, account_id: str, expected_hash: str, new_hash: str
    ) -> bool:
        with self._lock:
            account = self._accounts.get(account_id)
            if account is None or account.refresh_token_hash != expected_hash:
                return False
            self._accounts[account_id] = account.model_copy(
                update={"refresh_token_hash": new_hash}
            )
            return True

    async def clean(self) -> None:
        with self._lock:
            self._accounts.clear()
            self._ids_by_email.clear()


class SqliteCredentialStore(CredentialStore):
    """SQLite-backed store.

    Usage:
        store = SqliteCredentialStore("auth.db")
        await store.init()

    Each call opens its own connection and runs in the threadpool. Atomicity
    comes from single-statement UPDATEs, not from in-process locking.
    """

    def __init__(self, sqlite_path: str):
        self.sqlite_path = sqlite_path

    def _get_conn(self):
        conn = sqlite3.connect(self.sqlite_path, timeout=30)
        conn.row_factory = sqlite3.Row
        return conn

    @staticmethod
    def _to_account(row) -> Optional[Account]:
        if row is None:
            return None
        return Account(
            id=row["id"],
            email=row["email"],
            password_hash=row["password_hash"],
            refresh_token_hash=row["refresh_token_hash"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def _init_db(self) -> None:
        store_logger.info(f"Initializing credential store DB at {self.sqlite_path}")
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS accounts (
                    id TEXT PRIMARY KEY,
                    email TEXT NOT NULL UNIQUE,
                    password_hash TEXT NOT NULL,
                    refresh_token_hash TEXT,
                    created_at TEXT NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    def _insert(
        self,
        email: str,
        password_hash: str,
        account_id: Optional[str],
        refresh_hash: Optional[str],
    ) -> Account:
        account = Account(
            id=account_id or new_account_id(),
            email=email,
            password_hash=password_hash,
            refresh_token_hash=refresh_hash,
            created_at=datetime.now(timezone.utc),
        )
        conn = self._get_conn()
        try:
            conn.execute(
                "INSERT INTO accounts (id, email, password_hash, refresh_token_hash, created_at) "
                "VALUES (?, ?, ?, ?, ?)",
                (
                    account.id,
                    account.email,
                    account.password_hash,
                    account.refresh_token_hash,
                    account.created_at.isoformat(),
                ),
            )
            conn.commit()
        except sqlite3.IntegrityError:
            raise DuplicateAccount()
        finally:
            conn.close()
        store_logger.info(f"Created account {account.id}")
        return account

    def _select_one(self, column: str, value: str) -> Optional[Account]:
        conn = self._get_conn()
        try:
            row = conn.execute(
                f"SELECT * FROM accounts WHERE {column} = ?", (value,)
            ).fetchone()
            return self._to_account(row)
        finally:
            conn.close()

    def _update(self, sql: str, params: tuple) -> int:
        conn = self._get_conn()
        try:
            cur = conn.execute(sql, params)
            conn.commit()
            return cur.rowcount
        finally:
            conn.close()

    async def init(self) -> None:
        await run_in_threadpool(self._init_db)

    async def create_account(
        self,
        email: str,
        password_hash: str,
        account_id: Optional[str] = None,
        refresh_hash: Optional[str] = None,
    ) -> Account:
        return await run_in_threadpool(self._insert, email, password_hash, account_id, refresh_hash)

    async def find_by_email(self, email: str) -> Optional[Account]:
        return await run_in_threadpool(self._select_one, "email", email)

    async def find_by_id(self, account_id: str) -> Optional[Account]:
        return await run_in_threadpool(self._select_one, "id", account_id)

    async def set_refresh_hash(self, account_id: str, refresh_hash: Optional[str]) -> None:
        await run_in_threadpool(
            self._update,
            "UPDATE accounts SET refresh_token_hash = ? WHERE id = ?",
            (refresh_hash, account_id),
        )

    async def compare_and_set_refresh_hash(
        self, account_id: str, expected_hash: str, new_hash: str
    ) -> bool:
        updated = await run_in_threadpool(
            self._update,
            "UPDATE accounts SET refresh_token_hash = ? WHERE id = ? AND refresh_token_hash = ?",
            (new_hash, account_id, expected_hash),
        )
        return updated == 1

    async def clean(self) -> None:
        await run_in_threadpool(self._update, "DELETE FROM accounts", ())
        store_logger.info("Credential store cleaned")
