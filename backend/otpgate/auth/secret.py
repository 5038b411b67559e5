"""TOTP shared secret generation."""

import secrets

from otpgate.auth import base32

SECRET_BYTES = 15
SECRET_LENGTH = 24


def generate_secret() -> str:
    """Generate a random 24-character base32 TOTP secret."""
    return base32.encode(secrets.token_bytes(SECRET_BYTES))[:SECRET_LENGTH]
