"""Helpers for validating and deriving user data."""

import hashlib
import re
import secrets
from base64 import b64encode, b64decode
from datetime import datetime

from pytz import UTC

from .exceptions import InvalidEmail, PasswordAuthenticationFailed

EMAIL = re.compile(r'^[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}$')


def is_valid_email(email: str) -> bool:
    """Determine whether ``email`` looks like an e-mail address."""
    return bool(email) and EMAIL.match(email) is not None


def validate_email(email: str) -> None:
    """Raise :class:`.InvalidEmail` unless ``email`` is well-formed."""
    if not is_valid_email(email):
        raise InvalidEmail('invalid email')


def hash_password(password: str) -> str:
    """Generate a secure hash of a password."""
    salt = secrets.token_bytes(8)
    hashed = hashlib.sha256(salt + b'-' + password.encode('utf-8')).digest()
    return b64encode(salt + hashed).decode('ascii')


def check_password(password: str, encrypted: str) -> None:
    """Check a password against an encrypted hash."""
    try:
        decoded = b64decode(encrypted)
    except (TypeError, ValueError) as e:
        raise PasswordAuthenticationFailed('Incorrect password') from e
    salt = decoded[:8]
    enc_hashed = decoded[8:]
    pass_hashed = hashlib.sha256(salt + b'-' + password.encode('utf-8'))
    if not secrets.compare_digest(pass_hashed.digest(), enc_hashed):
        raise PasswordAuthenticationFailed('Incorrect password')


def generate_api_key(email: str) -> str:
    """
    Derive a new opaque API token for a user.

    The token is the SHA-256 of the e-mail address, 32 random bytes and the
    current time. There is no collision check.
    """
    digest = hashlib.sha256()
    digest.update(email.encode('utf-8'))
    digest.update(secrets.token_bytes(32))
    digest.update(datetime.now(tz=UTC).isoformat().encode('ascii'))
    return digest.hexdigest()
