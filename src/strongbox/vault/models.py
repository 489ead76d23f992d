# Vault - Data Model

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .exceptions import ValidationError

# Fixed-width UTC ISO-8601, so string comparison matches time order
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def utc_now() -> str:
    """Current UTC time in TIMESTAMP_FORMAT."""
    return datetime.now(timezone.utc).strftime(TIMESTAMP_FORMAT)


@dataclass
class CredentialRecord:
    """One credential in the entry store.

    ``secret`` is plaintext while in memory and is kept out of repr() so it
    cannot leak through logging or tracebacks.
    """

    service: str
    username: str
    secret: str = field(repr=False)
    url: str = ""
    notes: str = ""
    id: Optional[int] = None
    created_at: str = ""
    updated_at: str = ""

    def to_dict(self, include_secret: bool = True) -> Dict[str, Any]:
        data = asdict(self)
        if not include_secret:
            data.pop("secret")
        return data


@dataclass
class EntryInput:
    """Entry fields as collected from the command line; any may be missing.

    The prompt layer resolves this into a CredentialRecord before the
    store is called.
    """

    service: Optional[str] = None
    username: Optional[str] = None
    secret: Optional[str] = field(default=None, repr=False)
    url: Optional[str] = None
    notes: Optional[str] = None

    def missing_fields(self) -> List[str]:
        return [name for name, value in (
            ("service", self.service),
            ("username", self.username),
            ("secret", self.secret),
            ("url", self.url),
            ("notes", self.notes),
        ) if value is None]

    def to_record(self) -> CredentialRecord:
        missing = self.missing_fields()
        if missing:
            raise ValidationError(f"Unresolved entry fields: {', '.join(missing)}")
        return CredentialRecord(
            service=self.service,
            username=self.username,
            secret=self.secret,
            url=self.url,
            notes=self.notes,
        )
