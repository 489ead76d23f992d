# Core - Logging & Audit Trail
#
# Append-only audit logging for vault events, plus the daily log file that
# every module logger writes to. Audit events carry ids, service names and
# outcomes; they never carry secrets or master passwords.

import logging
import os
import socket
import sys
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional
from uuid import uuid4

import structlog

LOG_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class EventType(str, Enum):
    """Types of vault events that can be logged."""

    VAULT_CREATED = "vault.created"
    VAULT_UNLOCKED = "vault.unlocked"
    VAULT_UNLOCK_FAILED = "vault.unlock.failed"
    VAULT_PASSWORD_ADDED = "vault.password.added"
    VAULT_PASSWORD_ACCESSED = "vault.password.accessed"
    VAULT_PASSWORD_UPDATED = "vault.password.updated"
    VAULT_PASSWORD_DELETED = "vault.password.deleted"
    VAULT_EXPORTED = "vault.exported"
    VAULT_ERROR = "vault.error"

    SYSTEM_START = "system.start"


class EventSeverity(str, Enum):
    """
    Severity levels for vault events.

    - INFO: Normal activity (logged only)
    - ALERT: Something was rejected (failed unlock)
    - CRITICAL: Data could not be read or written
    """
    INFO = "info"
    ALERT = "alert"
    CRITICAL = "critical"


def parse_log_level(level: str) -> int:
    """Map a config level name to a logging level; unknown names mean INFO."""
    return LOG_LEVELS.get(str(level).lower(), logging.INFO)


class AuditLogger:
    """
    Append-only audit logger for vault events.

    Features:
    - Structured JSON logging (structlog over stdlib logging)
    - Automatic timestamp and event ID
    - OS user / host context capture
    - Daily log file in ``log_dir``
    """

    def __init__(self, log_dir: Optional[Path] = None, level: str = "info"):
        """
        Initialize audit logger.

        Args:
            log_dir: Directory for log files (default: ./logs)
            level: Log level name from config
        """
        self.log_dir = Path(log_dir) if log_dir else Path("./logs")
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.level = parse_log_level(level)

        structlog.configure(
            processors=[
                structlog.stdlib.add_log_level,
                structlog.stdlib.add_logger_name,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer()
            ],
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )

        self._setup_file_handler()

        self.logger = structlog.get_logger("strongbox.audit")

    def _setup_file_handler(self):
        """Attach the daily log file to the root logger (once per file)."""
        today = datetime.now().strftime("%Y-%m-%d")
        self.log_file = self.log_dir / f"strongbox-{today}.log"

        root_logger = logging.getLogger()
        log_file = os.path.abspath(self.log_file)
        for handler in root_logger.handlers:
            if (
                isinstance(handler, logging.FileHandler)
                and handler.baseFilename == log_file
            ):
                break
        else:
            file_handler = logging.FileHandler(self.log_file, mode="a", encoding="utf-8")
            file_handler.setFormatter(logging.Formatter("%(message)s"))
            root_logger.addHandler(file_handler)

        root_logger.setLevel(self.level)

    def log_event(
        self,
        event_type: EventType,
        severity: EventSeverity,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> str:
        """
        Log a vault event (append-only).

        Args:
            event_type: Type of event (from EventType enum)
            severity: Severity level (from EventSeverity enum)
            message: Human-readable event description
            details: Additional event details (never secrets)

        Returns:
            str: Event ID (UUID) for reference
        """
        event_id = str(uuid4())

        event_data = {
            "event_id": event_id,
            "event_type": event_type.value,
            "severity": severity.value,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "details": details or {},
            "user_context": self._get_default_user_context(),
        }

        if severity == EventSeverity.INFO:
            self.logger.info("vault_event", **event_data)
        else:
            self.logger.warning("vault_event", **event_data)

        return event_id

    def _get_default_user_context(self) -> Dict[str, Any]:
        """Get default user context (OS user, hostname, platform)."""
        return {
            "os_user": os.getenv("USERNAME") or os.getenv("USER"),
            "hostname": socket.gethostname(),
            "platform": sys.platform,
        }


# Global logger instance
_audit_logger: Optional[AuditLogger] = None


def get_audit_logger() -> AuditLogger:
    """Get global audit logger (singleton pattern)."""
    global _audit_logger
    if _audit_logger is None:
        _audit_logger = AuditLogger()
    return _audit_logger


def configure_audit_logger(log_dir: Path, level: str = "info") -> AuditLogger:
    """Replace the global audit logger with one built from config."""
    global _audit_logger
    _audit_logger = AuditLogger(log_dir=log_dir, level=level)
    return _audit_logger
