# Vault - Password Policy & Generator
#
# Random password generation against a fixed alphabet plus the complexity
# and length checks shared by the CLI and MasterVault bootstrap.

import re
import secrets
import string
from typing import Tuple, Union

from .exceptions import PasswordGenerationError, ValidationError

SYMBOLS = "!@#$%^&*()-_=+"
ALPHABET = string.ascii_lowercase + string.ascii_uppercase + string.digits + SYMBOLS

MIN_LENGTH = 8
MAX_LENGTH = 64
DEFAULT_LENGTH = 16

# ASCII digits only; int() would also take "1_2" or non-ASCII digits
_LENGTH_PATTERN = re.compile(r"^\s*\+?[0-9]+\s*$")

# Practically unreachable at length >= 8 with an unbiased source
MAX_GENERATION_ATTEMPTS = 1000

# Common weak passwords (minimal list)
WEAK_PASSWORDS = frozenset({
    "password123", "Password123", "Password123!", "Admin123456",
    "Welcome12345", "Passw0rd123", "123456789012", "Qwerty123456",
})


def validate_length(raw_length: Union[str, int]) -> bool:
    """True only if ``raw_length`` is an integer (or ASCII digit string) in [8, 64]."""
    if isinstance(raw_length, bool):
        return False
    if isinstance(raw_length, int):
        length = raw_length
    elif isinstance(raw_length, str) and _LENGTH_PATTERN.match(raw_length):
        length = int(raw_length)
    else:
        return False
    return MIN_LENGTH <= length <= MAX_LENGTH


def validate_complexity(password: str) -> bool:
    """
    True if the password has at least one lowercase letter, one uppercase
    letter, one digit and one character outside those three classes.
    """
    has_lower = has_upper = has_digit = has_special = False

    for c in password:
        if c.islower():
            has_lower = True
        elif c.isupper():
            has_upper = True
        elif c in string.digits:
            has_digit = True
        else:
            has_special = True

    return has_lower and has_upper and has_digit and has_special


def generate_password(length: int = DEFAULT_LENGTH) -> str:
    """
    Generate a random password that satisfies validate_complexity().

    Characters are drawn uniformly from ALPHABET (secrets.choice rejects
    out-of-range draws internally, so there is no modulo bias).

    Raises:
        ValidationError: length outside [8, 64]
        PasswordGenerationError: no compliant candidate within the retry cap
    """
    if not validate_length(length):
        raise ValidationError(
            f"Password length must be between {MIN_LENGTH} and {MAX_LENGTH}"
        )
    length = int(length)

    for _ in range(MAX_GENERATION_ATTEMPTS):
        candidate = "".join(secrets.choice(ALPHABET) for _ in range(length))
        if validate_complexity(candidate):
            return candidate

    raise PasswordGenerationError(
        f"No compliant password after {MAX_GENERATION_ATTEMPTS} attempts"
    )


def check_master_password_strength(password: str) -> Tuple[bool, str]:
    """
    Advisory strength check for a user-chosen master password.

    The vault accepts any master password; the CLI uses this to warn.

    Returns:
        (is_strong, message)
    """
    if len(password) < 12:
        return False, "Master password should be at least 12 characters long"

    if not validate_complexity(password):
        return False, (
            "Master password should mix lowercase, uppercase, digits and symbols"
        )

    if password in WEAK_PASSWORDS:
        return False, "This password is too common. Please choose a stronger password."

    return True, ""
