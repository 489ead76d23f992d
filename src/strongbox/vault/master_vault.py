# Vault - Master Password Bootstrap & Unlock
#
# Vault file layout: salt(16) || nonce(12) || ciphertext || tag(16)
# The ciphertext is the master password itself, encrypted under the key
# derived from (master password, salt). Unlock re-derives the key from the
# candidate and requires both a valid tag and an exact plaintext match.

import hmac
import logging
import os
import tempfile
from pathlib import Path
from typing import NoReturn, Tuple, Union

from .encryption import (
    DATABASE_KEY_INFO,
    FIELD_KEY_INFO,
    AuthenticatedCipher,
    EncryptionService,
)
from .exceptions import AuthenticationError, CryptoError, StorageError, ValidationError
from .password_policy import DEFAULT_LENGTH, generate_password
from ..core import get_audit_logger, EventType, EventSeverity

logger = logging.getLogger(__name__)

MIN_VAULT_FILE_SIZE = (
    EncryptionService.SALT_LENGTH
    + EncryptionService.NONCE_LENGTH
    + EncryptionService.TAG_LENGTH
)


class VaultKeys:
    """Key material of an unlocked vault.

    Holds the master key for the life of the process and hands out
    purpose-bound sub-keys. Never persisted.
    """

    def __init__(self, master_key: bytes):
        self._master_key = master_key
        self.field_key = EncryptionService.derive_subkey(master_key, FIELD_KEY_INFO)
        self.database_key = EncryptionService.derive_subkey(master_key, DATABASE_KEY_INFO)

    def __repr__(self) -> str:
        return "VaultKeys(<redacted>)"

    def cipher(self) -> AuthenticatedCipher:
        """Cipher for the secret field of entry-store records."""
        return AuthenticatedCipher(self.field_key)


class MasterVault:
    """
    Owns the vault file: first-run bootstrap and every-run verification.

    Security:
    - Master password never stored in clear (only its own ciphertext)
    - Salt and verification blob written together, atomically
    - Wrong password and corrupted file produce the same error
    - No retry loop; the caller decides what a failed unlock means
    """

    def __init__(self, vault_path: Union[str, Path]):
        self.vault_path = Path(vault_path)
        self.logger = get_audit_logger()

    def exists(self) -> bool:
        """A missing or 0-byte file means no vault."""
        return self.vault_path.exists() and self.vault_path.stat().st_size > 0

    def bootstrap(self, master_password: str) -> VaultKeys:
        """
        Create a new vault protected by ``master_password``.

        Returns:
            Keys of the now-unlocked vault

        Raises:
            ValidationError: A vault already exists at vault_path
            StorageError: The vault file could not be written
        """
        if self.exists():
            raise ValidationError(
                f"Vault already exists at {self.vault_path}; unlock it instead"
            )

        salt = EncryptionService.generate_salt()
        master_key = EncryptionService.derive_key(master_password, salt)
        verification = EncryptionService.encrypt(master_password, master_key)

        self._write_atomic(salt + verification)

        self.logger.log_event(
            event_type=EventType.VAULT_CREATED,
            severity=EventSeverity.INFO,
            message="Vault initialized with master password",
            details={"vault_path": str(self.vault_path)},
        )

        return VaultKeys(master_key)

    def bootstrap_generated(self, length: int = DEFAULT_LENGTH) -> Tuple[str, VaultKeys]:
        """Bootstrap with a generated master password.

        Returns the password so the caller can show it to the user once.
        """
        master_password = generate_password(length)
        return master_password, self.bootstrap(master_password)

    def unlock(self, candidate_password: str) -> VaultKeys:
        """
        Verify ``candidate_password`` against the vault file.

        Raises:
            AuthenticationError: Wrong password or corrupted vault file
            StorageError: The vault file is missing or unreadable
        """
        if not self.exists():
            raise StorageError(f"No vault at {self.vault_path}; bootstrap first")

        try:
            material = self.vault_path.read_bytes()
        except OSError as e:
            raise StorageError(f"Failed to read vault file: {e}") from e

        if len(material) < MIN_VAULT_FILE_SIZE:
            self._reject("vault file truncated")

        salt = material[:EncryptionService.SALT_LENGTH]
        verification = material[EncryptionService.SALT_LENGTH:]
        candidate_key = EncryptionService.derive_key(candidate_password, salt)

        try:
            stored_password = EncryptionService.decrypt(verification, candidate_key)
        except CryptoError:
            self._reject("verification tag mismatch")

        if not hmac.compare_digest(
            stored_password.encode("utf-8"), candidate_password.encode("utf-8")
        ):
            self._reject("verification plaintext mismatch")

        self.logger.log_event(
            event_type=EventType.VAULT_UNLOCKED,
            severity=EventSeverity.INFO,
            message="Vault unlocked successfully",
        )

        return VaultKeys(candidate_key)

    def _reject(self, reason: str) -> NoReturn:
        # Reason stays in the audit trail; the caller only sees one message
        self.logger.log_event(
            event_type=EventType.VAULT_UNLOCK_FAILED,
            severity=EventSeverity.ALERT,
            message="Vault unlock failed",
            details={"reason": reason},
        )
        raise AuthenticationError("Invalid master password")

    def _write_atomic(self, data: bytes):
        """Write via temp file + fsync + rename so salt and blob land together."""
        directory = self.vault_path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=".vault-", suffix=".tmp")
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(data)
                    f.flush()
                    os.fsync(f.fileno())
                # Owner read/write only
                os.chmod(tmp_name, 0o600)
                os.replace(tmp_name, self.vault_path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            self.logger.log_event(
                event_type=EventType.VAULT_ERROR,
                severity=EventSeverity.CRITICAL,
                message=f"Failed to write vault file: {e}",
            )
            raise StorageError(f"Failed to write vault file: {e}") from e

        logger.debug("Vault file written to %s", self.vault_path)
