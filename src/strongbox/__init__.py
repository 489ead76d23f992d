# Strongbox - Main Package
#
# Strongbox: local, single-user secret vault
# Master password -> derived key -> encrypted credential store

__version__ = "0.1.0"
__author__ = "Strongbox Team"
__description__ = "Local single-user secret vault"

from .core import (
    EventType,
    EventSeverity,
    get_audit_logger,
)

__all__ = [
    "__version__",
    "EventType",
    "EventSeverity",
    "get_audit_logger",
]
