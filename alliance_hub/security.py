"""Security helpers."""

from __future__ import annotations

import secrets

from flask import current_app
from werkzeug.security import check_password_hash, generate_password_hash

PASSWORD_ALPHABET = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789!@#$%^&*"


def hash_secret(raw_value: str) -> str:
    return generate_password_hash(raw_value, method="pbkdf2:sha256", salt_length=16)


def verify_secret(secret_hash: str, raw_value: str) -> bool:
    return check_password_hash(secret_hash, raw_value)


def generate_password(length: int | None = None) -> str:
    """Random password drawn from ``PASSWORD_ALPHABET``.

    Without an explicit length the ``DEFAULT_PASSWORD_LENGTH`` setting is used.
    """
    if length is None:
        length = int(current_app.config.get("DEFAULT_PASSWORD_LENGTH", 16))
    if length < 1:
        raise ValueError("Password length must be positive.")
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))
