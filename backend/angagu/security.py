"""
ANGAGU Backend — Credential Utilities
======================================

What:  Password hashing and JWT issuance/verification.
How:   bcrypt with a fresh salt per hash; python-jose for HS256 tokens.
Who:   Login/signup handlers, the password-reset flow, and the
       authorization dependency.

Token kinds:
    access token        {"id", "type", ...user fields, "exp"}
                        issued at login, sent as `Authorization: Bearer`
    verification token  {"data": "<phone number>", "exp"}
                        issued after SMS verification, sent in the
                        `verification` header to signup / password reset

Decoding never raises: a bad signature, an expired token or garbage input
all decode to None.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
from jose import JWTError, jwt

from angagu.config import settings

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    """Hash a password using bcrypt with a per-call salt."""
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash; malformed input is a mismatch."""
    if not isinstance(plain_password, str) or not isinstance(hashed_password, str):
        return False
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"),
            hashed_password.encode("utf-8"),
        )
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def _encode(claims: Dict[str, Any], expires_delta: timedelta) -> str:
    to_encode = dict(claims)
    to_encode["exp"] = datetime.now(timezone.utc) + expires_delta
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(
    claims: Dict[str, Any],
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Sign a principal's claims. `claims` must contain `id` and `type`."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    return _encode(claims, expires_delta)


def create_verification_token(phone_number: str) -> str:
    """Short-lived token proving `phone_number` passed SMS verification."""
    return _encode(
        {"data": phone_number},
        timedelta(minutes=settings.verification_token_expire_minutes),
    )


def decode_token(token: Optional[str]) -> Optional[Dict[str, Any]]:
    """Verify and decode a token. Returns None on any failure."""
    if not token or not isinstance(token, str):
        return None
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.debug("Token rejected: %s", type(e).__name__)
        return None


def verified_phone_number(token: Optional[str]) -> Optional[str]:
    """The phone number carried by a verification token, or None."""
    payload = decode_token(token)
    if payload is None:
        return None
    phone = payload.get("data")
    return phone if isinstance(phone, str) and phone else None
