"""Tests for TOTP secret generation."""

import re

from otpgate.auth import base32
from otpgate.auth.secret import SECRET_BYTES, SECRET_LENGTH, generate_secret

SECRET_PATTERN = re.compile(r"^[A-Z2-7]{24}$")


class TestGenerateSecret:
    """Tests for generate_secret."""

    def test_secret_format(self):
        """generate_secret should return 24 base32 characters."""
        secret = generate_secret()
        assert isinstance(secret, str)
        assert len(secret) == SECRET_LENGTH
        assert SECRET_PATTERN.match(secret)

    def test_secret_decodes_to_fifteen_bytes(self):
        """The secret should decode back to the drawn random bytes."""
        assert len(base32.decode(generate_secret())) == SECRET_BYTES

    def test_secrets_are_unique(self):
        """10,000 secrets should be pairwise distinct and well formed."""
        secrets = [generate_secret() for _ in range(10_000)]
        assert len(set(secrets)) == len(secrets)
        assert all(SECRET_PATTERN.match(s) for s in secrets)

    def test_secret_uses_random_bytes(self, monkeypatch):
        """generate_secret should encode bytes drawn from the secrets module."""
        monkeypatch.setattr(
            "otpgate.auth.secret.secrets.token_bytes", lambda n: b"\x00" * n
        )
        assert generate_secret() == "A" * 24
