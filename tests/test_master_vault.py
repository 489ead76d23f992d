"""Tests for MasterVault bootstrap and unlock."""

import json
import os
import stat
import sys

import pytest

from strongbox.vault.encryption import AuthenticatedCipher, EncryptionService
from strongbox.vault.exceptions import AuthenticationError, StorageError, ValidationError
from strongbox.vault.master_vault import MasterVault, VaultKeys
from strongbox.vault.password_policy import validate_complexity


@pytest.fixture
def vault(tmp_path):
    return MasterVault(tmp_path / "master.key")


class TestBootstrap:

    def test_creates_vault_file(self, vault):
        assert not vault.exists()
        vault.bootstrap("Correct-Horse-9")
        assert vault.exists()

    def test_file_layout(self, vault):
        vault.bootstrap("abc")
        data = vault.vault_path.read_bytes()
        # salt(16) + nonce(12) + "abc"(3) + tag(16)
        assert len(data) == 16 + 12 + 3 + 16

    def test_password_not_stored_in_clear(self, vault):
        vault.bootstrap("Very-Distinctive-Password-42")
        assert b"Very-Distinctive-Password-42" not in vault.vault_path.read_bytes()

    def test_verification_blob_decrypts_to_password(self, vault):
        vault.bootstrap("pw-123")
        data = vault.vault_path.read_bytes()
        key = EncryptionService.derive_key("pw-123", data[:16])
        assert EncryptionService.decrypt(data[16:], key) == "pw-123"

    def test_returns_keys(self, vault):
        keys = vault.bootstrap("pw")
        assert isinstance(keys, VaultKeys)
        assert isinstance(keys.cipher(), AuthenticatedCipher)

    def test_refuses_existing_vault(self, vault):
        vault.bootstrap("first")
        original = vault.vault_path.read_bytes()
        with pytest.raises(ValidationError):
            vault.bootstrap("second")
        assert vault.vault_path.read_bytes() == original

    def test_zero_byte_file_is_not_a_vault(self, vault):
        vault.vault_path.write_bytes(b"")
        assert not vault.exists()
        vault.bootstrap("pw")
        assert vault.exists()

    def test_no_temp_files_left_behind(self, vault):
        vault.bootstrap("pw")
        assert [p.name for p in vault.vault_path.parent.iterdir() if p.name.startswith(".vault-")] == []

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    def test_file_is_owner_only(self, vault):
        vault.bootstrap("pw")
        mode = stat.S_IMODE(os.stat(vault.vault_path).st_mode)
        assert mode == 0o600

    def test_salt_is_random_per_vault(self, tmp_path):
        a = MasterVault(tmp_path / "a.key")
        b = MasterVault(tmp_path / "b.key")
        a.bootstrap("same")
        b.bootstrap("same")
        assert a.vault_path.read_bytes()[:16] != b.vault_path.read_bytes()[:16]

    def test_creates_parent_directory(self, tmp_path):
        vault = MasterVault(tmp_path / "nested" / "dir" / "master.key")
        vault.bootstrap("pw")
        assert vault.exists()

    def test_bootstrap_generated(self, vault):
        password, keys = vault.bootstrap_generated(20)
        assert len(password) == 20
        assert validate_complexity(password)
        unlocked = vault.unlock(password)
        assert unlocked.field_key == keys.field_key


class TestUnlock:

    def test_correct_password_unlocks(self, vault):
        keys = vault.bootstrap("Correct-Horse-9")
        unlocked = vault.unlock("Correct-Horse-9")
        assert unlocked.field_key == keys.field_key
        assert unlocked.database_key == keys.database_key

    @pytest.mark.parametrize("candidate", [
        "correct-horse-9", "Correct-Horse-", "Correct-Horse-9 ", "", "x",
    ])
    def test_wrong_password_rejected(self, vault, candidate):
        vault.bootstrap("Correct-Horse-9")
        with pytest.raises(AuthenticationError):
            vault.unlock(candidate)

    def test_rejection_message_is_uniform(self, vault):
        vault.bootstrap("pw")
        with pytest.raises(AuthenticationError, match="^Invalid master password$"):
            vault.unlock("nope")

        vault.vault_path.write_bytes(vault.vault_path.read_bytes()[:20])
        with pytest.raises(AuthenticationError, match="^Invalid master password$"):
            vault.unlock("pw")

    def test_tampered_file_rejected(self, vault):
        vault.bootstrap("pw")
        data = bytearray(vault.vault_path.read_bytes())
        data[-1] ^= 0x01
        vault.vault_path.write_bytes(bytes(data))
        with pytest.raises(AuthenticationError):
            vault.unlock("pw")

    def test_tampered_salt_rejected(self, vault):
        vault.bootstrap("pw")
        data = bytearray(vault.vault_path.read_bytes())
        data[0] ^= 0x01
        vault.vault_path.write_bytes(bytes(data))
        with pytest.raises(AuthenticationError):
            vault.unlock("pw")

    def test_ciphertext_of_other_plaintext_rejected(self, vault):
        # Valid tag but decrypted value differs from the candidate
        salt = os.urandom(16)
        key = EncryptionService.derive_key("pw", salt)
        vault.vault_path.write_bytes(salt + EncryptionService.encrypt("something else", key))
        with pytest.raises(AuthenticationError):
            vault.unlock("pw")

    def test_missing_vault(self, vault):
        with pytest.raises(StorageError):
            vault.unlock("pw")

    def test_failed_unlock_is_audited(self, vault, tmp_path):
        vault.bootstrap("pw")
        with pytest.raises(AuthenticationError):
            vault.unlock("wrong")

        log_text = "".join(p.read_text() for p in (tmp_path / "logs").glob("*.log"))
        events = [json.loads(line) for line in log_text.splitlines() if line.startswith("{")]
        failed = [e for e in events if e.get("event_type") == "vault.unlock.failed"]
        assert failed
        assert "wrong" not in json.dumps(failed)


class TestVaultKeys:

    def test_field_cipher_works_across_unlocks(self, vault):
        keys = vault.bootstrap("pw")
        blob = keys.cipher().encrypt("stored secret")
        assert vault.unlock("pw").cipher().decrypt(blob) == "stored secret"

    def test_repr_redacted(self, vault):
        keys = vault.bootstrap("pw")
        assert keys.field_key.hex() not in repr(keys)
