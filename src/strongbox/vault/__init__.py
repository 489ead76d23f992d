# Vault Module - Local Secret Vault
#
# Master password -> PBKDF2 master key -> HKDF sub-keys
# Credential secrets encrypted with AES-256-GCM in a SQLite entry store

from .encryption import AuthenticatedCipher, EncryptionService
from .entry_store import EntryStore, parse_entry_id
from .exceptions import (
    AuthenticationError,
    CryptoError,
    NotFoundError,
    PasswordGenerationError,
    StorageError,
    ValidationError,
    VaultError,
)
from .master_vault import MasterVault, VaultKeys
from .models import CredentialRecord, EntryInput
from .password_policy import (
    check_master_password_strength,
    generate_password,
    validate_complexity,
    validate_length,
)

__all__ = [
    "AuthenticatedCipher",
    "EncryptionService",
    "EntryStore",
    "parse_entry_id",
    "MasterVault",
    "VaultKeys",
    "CredentialRecord",
    "EntryInput",
    "generate_password",
    "validate_complexity",
    "validate_length",
    "check_master_password_strength",
    # Errors
    "VaultError",
    "AuthenticationError",
    "CryptoError",
    "ValidationError",
    "NotFoundError",
    "StorageError",
    "PasswordGenerationError",
]
