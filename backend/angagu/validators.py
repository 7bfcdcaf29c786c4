"""
Input shape predicates shared by the customer and company handlers.

Every predicate accepts anything and returns False for non-strings, so a
missing JSON field (None) fails validation instead of raising.
"""

import re
from typing import Any

EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")

# Korean mobile numbers, digits only: 010-XXXX-XXXX, 011-XXX-XXXX, ...
PHONE_PATTERN = re.compile(r"^01[016789]\d{7,8}$")

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 16
_HAS_LETTER = re.compile(r"[A-Za-z]")
_HAS_DIGIT = re.compile(r"\d")
_HAS_SPECIAL = re.compile(r"[^A-Za-z0-9\s]")


def is_email(value: Any) -> bool:
    return isinstance(value, str) and EMAIL_PATTERN.fullmatch(value) is not None


def is_phone(value: Any) -> bool:
    return isinstance(value, str) and PHONE_PATTERN.fullmatch(value) is not None


def is_password(value: Any) -> bool:
    """Password policy: 8-16 characters, no whitespace, with a letter, a digit and a special character."""
    if not isinstance(value, str):
        return False
    if not PASSWORD_MIN_LENGTH <= len(value) <= PASSWORD_MAX_LENGTH:
        return False
    if any(ch.isspace() for ch in value):
        return False
    return all(p.search(value) for p in (_HAS_LETTER, _HAS_DIGIT, _HAS_SPECIAL))


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())
