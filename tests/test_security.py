from __future__ import annotations

import pytest

from alliance_hub.security import PASSWORD_ALPHABET, generate_password, hash_secret, verify_secret


def test_generated_password_uses_configured_length(app):
    with app.app_context():
        app.config["DEFAULT_PASSWORD_LENGTH"] = 20
        password = generate_password()

    assert len(password) == 20
    assert set(password) <= set(PASSWORD_ALPHABET)


def test_generated_passwords_differ():
    assert generate_password(24) != generate_password(24)


def test_non_positive_length_is_rejected():
    with pytest.raises(ValueError):
        generate_password(0)


def test_hash_round_trip():
    hashed = hash_secret("s3cret!")
    assert verify_secret(hashed, "s3cret!") is True
    assert verify_secret(hashed, "other") is False
