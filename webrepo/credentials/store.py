"""SQLite credential store."""

import sqlite3
from pathlib import Path
from types import TracebackType
from typing import Any, Self, TypeVar, overload

import structlog
from pydantic import TypeAdapter, ValidationError

from webrepo.credentials.errors import CredentialDecodeError, StoreNotConnectedError


logger = structlog.get_logger()

T = TypeVar("T")

_SCHEMA = """
CREATE TABLE IF NOT EXISTS credentials (
    service TEXT NOT NULL,
    account TEXT NOT NULL,
    secret BLOB NOT NULL,
    updated_at TEXT NOT NULL DEFAULT (datetime('now')),
    PRIMARY KEY (service, account)
)
"""


class CredentialStore:
    """Secrets keyed by service and account.

    Values are stored as bytes: ``bytes`` as-is, ``str`` as UTF-8, anything
    else as JSON through pydantic. The store is an ordinary object with an
    explicit lifecycle; pass it to whoever needs it.
    """

    def __init__(self, db_path: Path | str) -> None:
        """Initialize the store.

        Args:
            db_path: Path to SQLite database file, or ":memory:".
        """
        self._db_path = str(db_path)
        self._conn: sqlite3.Connection | None = None
        self._log = logger.bind(component="credentials", db_path=self._db_path)

    @property
    def is_connected(self) -> bool:
        """Check if connected to database."""
        return self._conn is not None

    def connect(self) -> None:
        """Open the database and create the schema if needed."""
        if self._conn is not None:
            return
        if self._db_path != ":memory:":
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(self._db_path)
        self._conn.execute(_SCHEMA)
        self._conn.commit()
        self._log.debug("credential_store_connected")

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            self._log.debug("credential_store_closed")

    def __enter__(self) -> Self:
        self.connect()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StoreNotConnectedError
        return self._conn

    def save(self, value: Any, service: str, account: str) -> None:
        """Store a secret, replacing any existing one.

        Args:
            value: Secret to store.
            service: Service the secret belongs to.
            account: Account within the service.
        """
        conn = self._connection()
        with conn:
            conn.execute(
                """
                INSERT INTO credentials (service, account, secret)
                VALUES (?, ?, ?)
                ON CONFLICT (service, account)
                DO UPDATE SET secret = excluded.secret, updated_at = datetime('now')
                """,
                (service, account, _encode(value)),
            )
        self._log.info("credential_saved", service=service, account=account)

    @overload
    def read(self, service: str, account: str) -> bytes | None: ...

    @overload
    def read(self, service: str, account: str, value_type: type[T]) -> T | None: ...

    def read(
        self, service: str, account: str, value_type: Any = bytes
    ) -> Any:
        """Read a secret.

        Args:
            service: Service the secret belongs to.
            account: Account within the service.
            value_type: Type to decode into (bytes, str, or a pydantic type).

        Returns:
            The secret, or None if nothing is stored.

        Raises:
            CredentialDecodeError: If the secret does not decode as value_type.
        """
        row = self._connection().execute(
            "SELECT secret FROM credentials WHERE service = ? AND account = ?",
            (service, account),
        ).fetchone()
        if row is None:
            return None
        secret: bytes = row[0]
        try:
            return _decode(secret, value_type)
        except (UnicodeDecodeError, ValidationError) as e:
            raise CredentialDecodeError(service, account, str(e)) from e

    def delete(self, service: str, account: str) -> bool:
        """Delete a secret.

        Returns:
            True if a secret was deleted.
        """
        conn = self._connection()
        with conn:
            cursor = conn.execute(
                "DELETE FROM credentials WHERE service = ? AND account = ?",
                (service, account),
            )
        deleted = cursor.rowcount > 0
        self._log.info(
            "credential_deleted", service=service, account=account, deleted=deleted
        )
        return deleted


def _encode(value: Any) -> bytes:
    if isinstance(value, bytes):
        return value
    if isinstance(value, str):
        return value.encode("utf-8")
    return TypeAdapter(type(value)).dump_json(value)


def _decode(secret: bytes, value_type: Any) -> Any:
    if value_type is bytes:
        return secret
    if value_type is str:
        return secret.decode("utf-8")
    return TypeAdapter(value_type).validate_json(secret)


def bearer_headers(store: CredentialStore, service: str, account: str) -> dict[str, str]:
    """Build an Authorization header from a stored token.

    Returns:
        ``{"Authorization": "Bearer <token>"}``, or an empty dict when no
        token is stored.
    """
    token = store.read(service, account, str)
    if not token:
        return {}
    return {"Authorization": f"Bearer {token}"}
