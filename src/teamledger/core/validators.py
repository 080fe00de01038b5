"""Input normalization and validation helpers."""

import re
from uuid import uuid4

MAX_SLUG_BASE_LENGTH = 50
SLUG_SUFFIX_LENGTH = 8

PASSWORD_MIN_LENGTH = 8
PASSWORD_SPECIAL_CHARACTERS = '!@#$%^&*(),.?":{}|<>'

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")
_SPECIAL_CHAR_PATTERN = re.compile(f"[{re.escape(PASSWORD_SPECIAL_CHARACTERS)}]")


def normalize_email(email: str) -> str:
    """Emails are stored and compared lower-cased."""
    return email.strip().lower()


def generate_slug(name: str) -> str:
    """Build a globally unique slug from an organization name.

    "Acme Corp!" -> "acme-corp-1a2b3c4d"
    """
    base = _NON_SLUG_CHARS.sub("-", name.lower())[:MAX_SLUG_BASE_LENGTH].strip("-")
    suffix = uuid4().hex[:SLUG_SUFFIX_LENGTH]
    return f"{base}-{suffix}" if base else suffix


def validate_password_strength(password: str) -> str:
    """Raise ValueError unless the password satisfies the password policy."""
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValueError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
    if not re.search(r"[a-z]", password):
        raise ValueError("Password must contain a lowercase letter")
    if not re.search(r"[A-Z]", password):
        raise ValueError("Password must contain an uppercase letter")
    if not re.search(r"\d", password):
        raise ValueError("Password must contain a number")
    if not _SPECIAL_CHAR_PATTERN.search(password):
        raise ValueError("Password must contain a special character")
    return password
