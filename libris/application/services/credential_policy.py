"""Email and password policy applied at signup and password reset.

Rules:
- Email: syntactic format, domain not blocklisted, domain not a disposable
  mailbox provider, local part not ending in a "+digits" alias.
- Password: 8-20 characters with at least one upper-case letter, lower-case
  letter, digit and special character; no single repeated character or
  well-known password.

Failures raise ValidationException with a user-actionable message.
"""

from __future__ import annotations

import re
from functools import lru_cache
from importlib import resources

from libris.domain.exceptions import ValidationException

EMAIL_PATTERN = re.compile(
    r"^(?!.*\btemp\b)"
    r"(([^<>()\[\]\\.,;:\s@\"]+(\.[^<>()\[\]\\.,;:\s@\"]+)*)|(\".+\"))"
    r"@((\[[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}])|(([a-zA-Z\-0-9]+\.)+[a-zA-Z]{2,}))$"
)
PLUS_DIGITS_ALIAS = re.compile(r"\+\d+$")

UPPERCASE = re.compile(r"[A-Z]")
LOWERCASE = re.compile(r"[a-z]")
DIGITS = re.compile(r"\d")
SPECIAL_CHARACTERS = re.compile(r"[\s~`!@#$%^&*+=\-\[\]\\';,/{}|\":<>?()._]")
REPEATED_CHARACTER = re.compile(r"^(.)\1+$")

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 20


@lru_cache
def _load_list(filename: str) -> frozenset[str]:
    """Load a bundled newline-separated list; '#' lines are comments."""
    text = resources.files("libris.resources").joinpath(filename).read_text(encoding="utf-8")
    return frozenset(
        line.strip()
        for line in text.splitlines()
        if line.strip() and not line.lstrip().startswith("#")
    )


def blocked_email_domains() -> frozenset[str]:
    return _load_list("blocked_email_domains.txt")


def temp_email_domains() -> frozenset[str]:
    return _load_list("temp_email_domains.txt")


def common_passwords() -> frozenset[str]:
    return _load_list("common_passwords.txt")


def normalize_email(email: str) -> str:
    """Canonical form used for storage and lookups (trimmed, lower-case)."""
    return email.strip().lower()


def validate_email_address(email: str) -> str:
    """Return the normalized email or raise ValidationException."""
    normalized = normalize_email(email)
    if not EMAIL_PATTERN.match(normalized):
        raise ValidationException("Email must be a valid email", field="email")
    local, _, domain = normalized.rpartition("@")
    if domain in blocked_email_domains():
        raise ValidationException("Email services is not allowed", field="email")
    if domain in temp_email_domains():
        raise ValidationException(
            "Use of temporary email services is not allowed", field="email"
        )
    if PLUS_DIGITS_ALIAS.search(local):
        raise ValidationException(
            'Emails with a "+number" pattern are not allowed', field="email"
        )
    return normalized


def validate_password_strength(password: str, field: str = "password") -> None:
    """Raise ValidationException when password does not meet the complexity policy."""
    if not PASSWORD_MIN_LENGTH <= len(password) <= PASSWORD_MAX_LENGTH:
        raise ValidationException(
            f"Password must be between {PASSWORD_MIN_LENGTH} and {PASSWORD_MAX_LENGTH} characters",
            field=field,
        )
    if not UPPERCASE.search(password):
        raise ValidationException("Password must contain at least 1 uppercase letter", field=field)
    if not LOWERCASE.search(password):
        raise ValidationException("Password must contain at least 1 lowercase letter", field=field)
    if not DIGITS.search(password):
        raise ValidationException("Password must contain at least 1 digit", field=field)
    if not SPECIAL_CHARACTERS.search(password):
        raise ValidationException("Password must contain at least 1 special character", field=field)
    if REPEATED_CHARACTER.match(password) or password.lower() == "password":
        raise ValidationException(
            "Password contains a simple pattern or is a common password", field=field
        )
    if password in common_passwords():
        raise ValidationException("Use of common password is not allowed", field=field)


def validate_password_confirmation(password: str, confirmation: str, field: str = "confirm_password") -> None:
    """Raise ValidationException when the two entries differ."""
    if password != confirmation:
        raise ValidationException("Passwords do not match.", field=field)
