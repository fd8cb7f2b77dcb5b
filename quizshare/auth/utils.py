"""
Credential helpers for teacher accounts.

bcrypt only looks at the first 72 bytes of a password, so passwords are cut
to that many UTF-8 bytes up front. Hashing and verifying then always agree,
whatever the installed bcrypt backend does with longer input.
"""
import re

from flask import current_app
from passlib.context import CryptContext

BCRYPT_MAX_BYTES = 72

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

password_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def _bcrypt_input(password: str) -> str:
    # Dropping a split multi-byte character keeps the result valid UTF-8
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES].decode("utf-8", errors="ignore")


def hash_password(password: str) -> str:
    return password_context.hash(_bcrypt_input(password))


def verify_password(password: str, password_hash: str) -> bool:
    return password_context.verify(_bcrypt_input(password), password_hash)


def normalize_email(raw) -> str:
    """Emails are matched case-insensitively, so they are stored lower-cased."""
    return (raw or "").strip().lower()


def is_valid_email(email: str) -> bool:
    return bool(email) and EMAIL_PATTERN.match(email) is not None


def validate_password(password: str) -> tuple[bool, str | None]:
    """Returns (is_valid, error_message) against ``MIN_PASSWORD_LENGTH``."""
    min_length = current_app.config.get("MIN_PASSWORD_LENGTH", 8)
    if len(password) < min_length:
        return False, f"Password must be at least {min_length} characters long"
    return True, None
