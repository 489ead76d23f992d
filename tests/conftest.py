"""
Shared pytest fixtures for the Strongbox test suite.

The autouse fixture below isolates tests from the live application data:
  - Audit logger -> temp directory (prevents test events in the real log)
"""

import logging
import os

import pytest


@pytest.fixture(autouse=True)
def _isolate_audit_logs(tmp_path, monkeypatch):
    """Redirect the global AuditLogger to a temp directory for every test.

    Without this, any test that (directly or indirectly) calls
    ``get_audit_logger().log_event(...)`` writes into ``./logs/`` of the
    current working directory.
    """
    import strongbox.core.audit_log as audit_mod

    # Reset the singleton so the next call to get_audit_logger() creates
    # a fresh instance pointing at the temp directory.
    old_logger = audit_mod._audit_logger
    audit_mod._audit_logger = None

    orig_init = audit_mod.AuditLogger.__init__

    def patched_init(self, log_dir=None, level="info"):
        orig_init(self, log_dir=log_dir or tmp_path / "logs", level=level)

    monkeypatch.setattr(audit_mod.AuditLogger, "__init__", patched_init)

    yield

    audit_mod._audit_logger = old_logger

    # Drop file handlers pointing into this test's temp directory
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if isinstance(handler, logging.FileHandler) and handler.baseFilename.startswith(
            os.path.abspath(tmp_path)
        ):
            root_logger.removeHandler(handler)
            handler.close()


@pytest.fixture
def cipher():
    """Cipher over a fixed random test key."""
    from strongbox.vault.encryption import AuthenticatedCipher

    return AuthenticatedCipher(os.urandom(32))


@pytest.fixture
def store(tmp_path, cipher):
    """EntryStore on a temp database file."""
    from strongbox.vault.entry_store import EntryStore

    s = EntryStore(tmp_path / "pass.db", cipher)
    yield s
    s.close()


@pytest.fixture
def sample_record():
    from strongbox.vault.models import CredentialRecord

    return CredentialRecord(
        service="github",
        username="octocat",
        secret="hunter2-Secret!",
        url="https://github.com",
        notes="work account",
    )
