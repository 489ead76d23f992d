# Vault - Entry Store
#
# SQLite table of credential records with the secret field encrypted
# (AES-256-GCM, base64 in a TEXT column). CRUD + substring search.
# One connection per store; each call commits on its own.

import logging
import sqlite3
from pathlib import Path
from typing import Any, List, Optional, Sequence, Union

from .encryption import AuthenticatedCipher
from .exceptions import NotFoundError, StorageError, ValidationError
from .models import CredentialRecord, utc_now
from ..core import get_audit_logger, EventType, EventSeverity
from ..core.db import connect as db_connect, error_class

logger = logging.getLogger(__name__)

_COLUMNS = "id, service, username, password, url, notes, created_at, updated_at"

_SCHEMA = """
    CREATE TABLE IF NOT EXISTS passwords (
        id INTEGER PRIMARY KEY,
        service TEXT NOT NULL,
        username TEXT NOT NULL,
        password TEXT NOT NULL,
        url TEXT NOT NULL,
        notes TEXT NOT NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
"""


def parse_entry_id(raw: Union[str, int]) -> int:
    """Parse a user-supplied entry id.

    Raises:
        ValidationError: not an integer, or not positive
    """
    if isinstance(raw, bool):
        raise ValidationError(f"Invalid entry id: {raw!r}")
    try:
        entry_id = int(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid entry id: {raw!r}") from None
    if entry_id < 1:
        raise ValidationError(f"Invalid entry id: {raw!r}")
    return entry_id


class EntryStore:
    """
    Persisted collection of credential records.

    Security:
    - ``secret`` is encrypted before it reaches SQLite and decrypted on read
    - Any row that fails to decrypt fails the whole call (no silent skips)
    - Audit logging for every write and every secret access

    Search is a case-sensitive substring match on service and username;
    the secret is never matched, and results come back decrypted.
    """

    def __init__(
        self,
        db_path: Union[str, Path],
        cipher: AuthenticatedCipher,
        database_key: Optional[bytes] = None,
        use_sqlcipher: bool = False,
    ):
        """
        Open (and if needed create) the entry store.

        Args:
            db_path: Database file path, or ":memory:"
            cipher: Cipher for the secret field (from VaultKeys.cipher())
            database_key: Sub-key for PRAGMA key (SQLCipher builds)
            use_sqlcipher: Open through sqlcipher3
        """
        self.db_path = db_path
        self.cipher = cipher
        self.logger = get_audit_logger()
        self._db_error = error_class(use_sqlcipher)

        self.conn = None
        try:
            if str(db_path) != ":memory:":
                Path(db_path).parent.mkdir(parents=True, exist_ok=True)
            self.conn = db_connect(
                db_path, key=database_key, use_sqlcipher=use_sqlcipher
            )
            self.conn.execute(_SCHEMA)
            self.conn.commit()
        except (self._db_error, OSError) as e:
            self.close()
            raise StorageError(f"Failed to open entry store: {e}") from e

        logger.debug("Opened entry store at %s", db_path)

    def __enter__(self) -> "EntryStore":
        return self

    def __exit__(self, *exc_info):
        self.close()

    def close(self):
        """Close the database connection."""
        if self.conn is not None:
            self.conn.close()
            self.conn = None

    def _execute(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Cursor:
        if self.conn is None:
            raise StorageError("Entry store is closed")
        try:
            return self.conn.execute(sql, params)
        except self._db_error as e:
            self.logger.log_event(
                event_type=EventType.VAULT_ERROR,
                severity=EventSeverity.CRITICAL,
                message=f"Entry store query failed: {e}",
            )
            raise StorageError(f"Entry store query failed: {e}") from e

    def _commit(self):
        try:
            self.conn.commit()
        except self._db_error as e:
            raise StorageError(f"Failed to commit: {e}") from e

    def _row_to_record(self, row) -> CredentialRecord:
        # Decryption failure propagates as CryptoError
        return CredentialRecord(
            id=row[0],
            service=row[1],
            username=row[2],
            secret=self.cipher.decrypt_from_text(row[3]),
            url=row[4],
            notes=row[5],
            created_at=row[6],
            updated_at=row[7],
        )

    def create(self, record: CredentialRecord) -> None:
        """
        Encrypt and insert a new record.

        ``created_at``/``updated_at`` are set here; ``record.id`` is ignored
        and assigned by SQLite.
        """
        encoded_secret = self.cipher.encrypt_to_text(record.secret)
        now = utc_now()

        cursor = self._execute(
            "INSERT INTO passwords "
            "(service, username, password, url, notes, created_at, updated_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?)",
            (
                record.service,
                record.username,
                encoded_secret,
                record.url,
                record.notes,
                now,
                now,
            ),
        )
        self._commit()

        self.logger.log_event(
            event_type=EventType.VAULT_PASSWORD_ADDED,
            severity=EventSeverity.INFO,
            message=f"Password added to vault: {record.service}",
            details={"entry_id": cursor.lastrowid},
        )

    def read_all(self) -> List[CredentialRecord]:
        """Every record, secrets decrypted, ordered by id."""
        rows = self._execute(
            f"SELECT {_COLUMNS} FROM passwords ORDER BY id"
        ).fetchall()
        records = [self._row_to_record(row) for row in rows]

        self.logger.log_event(
            event_type=EventType.VAULT_PASSWORD_ACCESSED,
            severity=EventSeverity.INFO,
            message="All passwords read",
            details={"count": len(records)},
        )
        return records

    def read_by_id(self, entry_id: int) -> CredentialRecord:
        """
        Retrieve and decrypt one record.

        Raises:
            NotFoundError: No record has this id
        """
        row = self._execute(
            f"SELECT {_COLUMNS} FROM passwords WHERE id = ?", (entry_id,)
        ).fetchone()
        if row is None:
            raise NotFoundError(entry_id)

        record = self._row_to_record(row)

        self.logger.log_event(
            event_type=EventType.VAULT_PASSWORD_ACCESSED,
            severity=EventSeverity.INFO,
            message=f"Password accessed: {record.service}",
            details={"entry_id": entry_id},
        )
        return record

    def update(self, entry_id: int, record: CredentialRecord) -> None:
        """
        Replace the fields of ``entry_id`` with those of ``record``.

        The secret is re-encrypted under a fresh nonce, ``updated_at`` is
        refreshed and ``created_at`` is left untouched.

        Raises:
            NotFoundError: No record has this id
        """
        encoded_secret = self.cipher.encrypt_to_text(record.secret)

        cursor = self._execute(
            """
            UPDATE passwords
            SET service = ?, username = ?, password = ?, url = ?, notes = ?, updated_at = ?
            WHERE id = ?
            """,
            (
                record.service,
                record.username,
                encoded_secret,
                record.url,
                record.notes,
                utc_now(),
                entry_id,
            ),
        )
        self._commit()

        if cursor.rowcount == 0:
            raise NotFoundError(entry_id)

        self.logger.log_event(
            event_type=EventType.VAULT_PASSWORD_UPDATED,
            severity=EventSeverity.INFO,
            message=f"Password updated: {record.service}",
            details={"entry_id": entry_id},
        )

    def delete(self, entry_id: int) -> None:
        """
        Delete the record with ``entry_id``.

        Raises:
            NotFoundError: No record has this id
        """
        cursor = self._execute("DELETE FROM passwords WHERE id = ?", (entry_id,))
        self._commit()

        if cursor.rowcount == 0:
            raise NotFoundError(entry_id)

        self.logger.log_event(
            event_type=EventType.VAULT_PASSWORD_DELETED,
            severity=EventSeverity.INFO,
            message="Password deleted from vault",
            details={"entry_id": entry_id},
        )

    def search(self, query: str) -> List[CredentialRecord]:
        """Records whose service or username contains ``query`` (case-sensitive)."""
        rows = self._execute(
            f"SELECT {_COLUMNS} FROM passwords "
            "WHERE instr(service, ?) > 0 OR instr(username, ?) > 0 "
            "ORDER BY id",
            (query, query),
        ).fetchall()
        records = [self._row_to_record(row) for row in rows]

        self.logger.log_event(
            event_type=EventType.VAULT_PASSWORD_ACCESSED,
            severity=EventSeverity.INFO,
            message="Passwords read by search",
            details={"count": len(records)},
        )
        return records

    def count(self) -> int:
        """Number of stored records."""
        return self._execute("SELECT COUNT(*) FROM passwords").fetchone()[0]
