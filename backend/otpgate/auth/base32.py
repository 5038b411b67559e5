"""Unpadded RFC 4648 base32, the text form of TOTP secrets."""

import base64
import binascii

from otpgate.auth.exceptions import MalformedSecret

# Unpadded lengths that no whole number of bytes can produce.
_IMPOSSIBLE_REMAINDERS = {1, 3, 6}


def encode(data: bytes) -> str:
    """Encode bytes as base32 without '=' padding."""
    return base64.b32encode(data).decode("ascii").rstrip("=")


def decode(value: str) -> bytes:
    """Decode an unpadded (or padded) base32 string.

    Lowercase input is accepted. Raises MalformedSecret for anything that
    is not a valid base32 encoding.
    """
    stripped = value.rstrip("=")
    if not stripped:
        raise MalformedSecret("Secret is empty")
    if len(stripped) % 8 in _IMPOSSIBLE_REMAINDERS:
        raise MalformedSecret(f"Invalid base32 length: {len(stripped)}")

    padded = stripped + "=" * (-len(stripped) % 8)
    try:
        return base64.b32decode(padded, casefold=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedSecret(f"Secret is not valid base32: {e}") from e
