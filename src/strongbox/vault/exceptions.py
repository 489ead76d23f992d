# Vault - Error Taxonomy
#
# Every failure the vault core can report derives from VaultError so the
# CLI boundary can catch them in one place. Security-relevant failures
# (AuthenticationError, CryptoError) are always raised, never downgraded.


class VaultError(Exception):
    """Base class for all vault errors."""


class AuthenticationError(VaultError):
    """Master password verification failed.

    Raised for a wrong password, a corrupted vault file, or a tag mismatch
    on the verification ciphertext. The message never says which.
    """


class CryptoError(VaultError):
    """Encryption or decryption of a stored value failed."""


class ValidationError(VaultError):
    """Caller supplied an invalid length, complexity request or identifier."""


class NotFoundError(VaultError):
    """No record matches the requested id."""

    def __init__(self, entry_id: int):
        super().__init__(f"No entry with id {entry_id}")
        self.entry_id = entry_id


class StorageError(VaultError):
    """The persistence layer (sqlite or the vault file) failed."""


class PasswordGenerationError(VaultError):
    """The generator could not produce a compliant password within its retry cap."""
