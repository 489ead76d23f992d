# Vault - Encryption Service
#
# Master password -> master key (PBKDF2-HMAC-SHA256, per-vault random salt)
# Master key -> purpose-bound sub-keys (HKDF-SHA256 with a context label)
# Secret fields -> AES-256-GCM, blob layout nonce(12) || ciphertext || tag(16)
#
# Nonces are 96-bit random values. The NIST bound for random GCM nonces is
# 2^32 encryptions per key; a single-user vault re-encrypts a secret only on
# create/update, so it stays many orders of magnitude below that.

import os
import base64
import binascii

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from cryptography.hazmat.primitives.kdf.hkdf import HKDF
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .exceptions import CryptoError

# Context labels for HKDF sub-keys (domain separation between uses)
FIELD_KEY_INFO = b"strongbox/v1/field-encryption"
DATABASE_KEY_INFO = b"strongbox/v1/database"


class EncryptionService:
    """
    Key derivation and authenticated encryption for vault secrets.

    Flow:
    1. User enters master password
    2. PBKDF2 derives a 256-bit master key from password + vault salt
    3. HKDF splits the master key into independent sub-keys
    4. AES-256-GCM encrypts/decrypts each secret with a fresh nonce
    """

    # Fixed work factor; changing it would lock out every existing vault
    PBKDF2_ITERATIONS = 100_000
    KEY_LENGTH = 32  # 256 bits for AES-256
    SALT_LENGTH = 16
    NONCE_LENGTH = 12  # 96-bit nonce for GCM
    TAG_LENGTH = 16  # 128-bit GCM tag

    @staticmethod
    def derive_key(
        master_password: str,
        salt: bytes,
        iterations: int = PBKDF2_ITERATIONS,
    ) -> bytes:
        """
        Derive the master key from a password using PBKDF2.

        Deterministic: the same password, salt and iteration count always
        yield the same key.

        Args:
            master_password: User's master password
            salt: Random salt (stored in the vault file)
            iterations: PBKDF2 iteration count

        Returns:
            256-bit key
        """
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=EncryptionService.KEY_LENGTH,
            salt=salt,
            iterations=iterations,
        )

        return kdf.derive(master_password.encode("utf-8"))

    @staticmethod
    def derive_subkey(master_key: bytes, info: bytes) -> bytes:
        """Derive an independent 256-bit sub-key for one purpose.

        The master key already carries the vault's random salt, so HKDF runs
        without its own salt. Separation comes from ``info``.
        """
        return HKDF(
            algorithm=hashes.SHA256(),
            length=EncryptionService.KEY_LENGTH,
            salt=None,
            info=info,
        ).derive(master_key)

    @staticmethod
    def generate_salt() -> bytes:
        """Generate cryptographically random salt."""
        return os.urandom(EncryptionService.SALT_LENGTH)

    @staticmethod
    def encrypt(plaintext: str, key: bytes) -> bytes:
        """
        Encrypt plaintext using AES-256-GCM.

        Args:
            plaintext: Secret to encrypt
            key: 256-bit key

        Returns:
            nonce || ciphertext || tag
        """
        # Must be unique per encryption under the same key
        nonce = os.urandom(EncryptionService.NONCE_LENGTH)

        aesgcm = AESGCM(key)
        ciphertext = aesgcm.encrypt(nonce, plaintext.encode("utf-8"), None)

        return nonce + ciphertext

    @staticmethod
    def decrypt(blob: bytes, key: bytes) -> str:
        """
        Decrypt a blob produced by encrypt().

        Raises:
            CryptoError: On any failure. Wrong key, tampered data and
                truncated input are deliberately indistinguishable.
        """
        if len(blob) < EncryptionService.NONCE_LENGTH + EncryptionService.TAG_LENGTH:
            raise CryptoError("Decryption failed")

        nonce = blob[:EncryptionService.NONCE_LENGTH]
        ciphertext = blob[EncryptionService.NONCE_LENGTH:]

        try:
            plaintext_bytes = AESGCM(key).decrypt(nonce, ciphertext, None)
            return plaintext_bytes.decode("utf-8")
        except (InvalidTag, UnicodeDecodeError) as exc:
            raise CryptoError("Decryption failed") from exc

    @staticmethod
    def encode_for_storage(data: bytes) -> str:
        """
        Encode binary data for database storage (base64).

        The password column is TEXT, so ciphertext is base64-encoded.
        """
        return base64.b64encode(data).decode("ascii")

    @staticmethod
    def decode_from_storage(data: str) -> bytes:
        """Decode base64-encoded data from database."""
        try:
            return base64.b64decode(data.encode("ascii"), validate=True)
        except (binascii.Error, UnicodeEncodeError) as exc:
            raise CryptoError("Stored ciphertext is not valid base64") from exc


class AuthenticatedCipher:
    """AES-256-GCM bound to one key.

    This is the object handed to EntryStore; it never exposes the key in
    its repr.
    """

    def __init__(self, key: bytes):
        if len(key) != EncryptionService.KEY_LENGTH:
            raise CryptoError(
                f"Key must be {EncryptionService.KEY_LENGTH} bytes, got {len(key)}"
            )
        self._key = bytes(key)

    def __repr__(self) -> str:
        return "AuthenticatedCipher(key=<redacted>)"

    def encrypt(self, plaintext: str) -> bytes:
        return EncryptionService.encrypt(plaintext, self._key)

    def decrypt(self, blob: bytes) -> str:
        return EncryptionService.decrypt(blob, self._key)

    def encrypt_to_text(self, plaintext: str) -> str:
        """Encrypt and base64-encode for a TEXT column."""
        return EncryptionService.encode_for_storage(self.encrypt(plaintext))

    def decrypt_from_text(self, encoded: str) -> str:
        return self.decrypt(EncryptionService.decode_from_storage(encoded))
