# Core - SQLite Connection Helper
#
# The entry store opens its database through `connect()` instead of a raw
# driver call. This ensures:
#
#   - the database key is applied before any other statement
#   - WAL journal mode and busy_timeout on every connection
#   - foreign_keys enforcement
#
# `PRAGMA key` only encrypts the file when the driver is SQLCipher
# (sqlcipher3). The stdlib sqlite3 driver ignores unknown pragmas, so on a
# plain build the per-field AES-GCM encryption is the protection at rest.

import importlib
import sqlite3
from pathlib import Path
from typing import Optional, Union

from .config import ConfigError


def _driver(use_sqlcipher: bool):
    if use_sqlcipher:
        try:
            return importlib.import_module("sqlcipher3.dbapi2")
        except ImportError as e:
            raise ConfigError(
                "use_sqlcipher is set but sqlcipher3 is not installed; "
                "install strongbox[sqlcipher]"
            ) from e
    return sqlite3


def connect(
    db_path: Union[str, Path],
    *,
    key: Optional[bytes] = None,
    use_sqlcipher: bool = False,
) -> sqlite3.Connection:
    """Open a database connection with the key and safe PRAGMAs applied.

    Args:
        db_path: Path to the database file (or ":memory:").
        key: Raw 32-byte database key; passed as a hex blob literal.
        use_sqlcipher: Open through sqlcipher3 instead of sqlite3.

    Returns:
        Connection with WAL mode, busy_timeout, and foreign_keys.
    """
    driver = _driver(use_sqlcipher)
    conn = driver.connect(str(db_path))
    try:
        if key is not None:
            # Hex literal only; no user text is ever interpolated here
            conn.execute(f"PRAGMA key = \"x'{key.hex()}'\"")
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA busy_timeout=5000")
        conn.execute("PRAGMA foreign_keys=ON")
    except driver.Error:
        conn.close()
        raise
    return conn


def error_class(use_sqlcipher: bool = False):
    """Base exception class of the driver ``connect()`` would use."""
    return _driver(use_sqlcipher).Error
