"""Password and reset token hashing."""

import hashlib
import secrets

from werkzeug.security import generate_password_hash, check_password_hash

from .exceptions import PasswordAuthenticationFailed


def hash_password(password: str) -> str:
    """Generate a secure, salted hash of a password."""
    return generate_password_hash(password)


def check_password(password: str, encrypted: str) -> bool:
    """
    Check a password against an encrypted hash.

    Raises
    ------
    :class:`PasswordAuthenticationFailed`
        If the password does not match.

    """
    if not encrypted or not check_password_hash(encrypted, password):
        raise PasswordAuthenticationFailed('Incorrect password')
    return True


def new_reset_token() -> str:
    """Generate a raw password reset token."""
    return secrets.token_hex(20)


def hash_reset_token(token: str) -> str:
    """One-way hash of a reset token, as stored in the database."""
    return hashlib.sha256(token.encode('utf-8')).hexdigest()
