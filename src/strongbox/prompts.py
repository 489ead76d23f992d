# Interactive Prompts
#
# Fills in whatever the command line left out. Prompt callables are
# injectable so tests (and non-tty callers) can supply answers.

import getpass
from typing import Callable

from .vault.exceptions import ValidationError
from .vault.models import CredentialRecord, EntryInput
from .vault.password_policy import MAX_LENGTH, MIN_LENGTH, validate_length

Ask = Callable[[str], str]

_FIELD_PROMPTS = {
    "service": "Service: ",
    "username": "Username: ",
    "secret": "Password: ",
    "url": "URL: ",
    "notes": "Notes: ",
}


def resolve_entry(
    entry: EntryInput,
    ask: Ask = input,
    ask_secret: Ask = getpass.getpass,
) -> CredentialRecord:
    """Prompt for every missing field and return a complete record."""
    for name in entry.missing_fields():
        prompt = ask_secret if name == "secret" else ask
        setattr(entry, name, prompt(_FIELD_PROMPTS[name]))
    return entry.to_record()


def merge_update(
    current: CredentialRecord,
    changes: EntryInput,
) -> CredentialRecord:
    """Overlay the fields given in ``changes`` on ``current`` (no prompting)."""
    return CredentialRecord(
        id=current.id,
        service=current.service if changes.service is None else changes.service,
        username=current.username if changes.username is None else changes.username,
        secret=current.secret if changes.secret is None else changes.secret,
        url=current.url if changes.url is None else changes.url,
        notes=current.notes if changes.notes is None else changes.notes,
        created_at=current.created_at,
        updated_at=current.updated_at,
    )


def prompt_length(ask: Ask = input) -> int:
    """Ask for a password length until a valid one is entered."""
    while True:
        raw = ask("Please enter your password length: ")
        if validate_length(raw):
            return int(raw)
        print(f"Password length must be between {MIN_LENGTH} and {MAX_LENGTH}")


def confirm(question: str, default: bool = True, ask: Ask = input) -> bool:
    suffix = " [Y/n] " if default else " [y/N] "
    answer = ask(question + suffix).strip().lower()
    if not answer:
        return default
    return answer in ("y", "yes")


def prompt_master_password(
    confirm_entry: bool = False,
    ask_secret: Ask = getpass.getpass,
) -> str:
    """Read the master password without echo.

    With ``confirm_entry`` the password must be typed twice (bootstrap).
    """
    password = ask_secret("Please enter your master password: ")
    if confirm_entry:
        again = ask_secret("Confirm master password: ")
        if again != password:
            raise ValidationError("Master passwords do not match")
    return password
