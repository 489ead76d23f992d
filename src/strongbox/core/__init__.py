# Core Module - Shared Utilities
#
# Core module provides shared functionality for the vault and the CLI:
# - Audit logging
# - Configuration
# - SQLite connection helper

from .audit_log import (
    AuditLogger,
    EventSeverity,
    EventType,
    configure_audit_logger,
    get_audit_logger,
)
from .config import Config, ConfigError, load_config

__all__ = [
    # Audit Logging
    "AuditLogger",
    "EventType",
    "EventSeverity",
    "configure_audit_logger",
    "get_audit_logger",
    # Configuration
    "Config",
    "ConfigError",
    "load_config",
]
