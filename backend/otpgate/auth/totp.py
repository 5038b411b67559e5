"""TOTP (RFC 6238) code generation and validation.

Codes are derived directly with hmac/hashlib: the time step counter is
packed as a big-endian 64-bit integer, signed with the shared secret, and
reduced to a fixed number of decimal digits by dynamic truncation.
"""

import hashlib
import hmac
import io
import struct
import time
from dataclasses import dataclass
from enum import StrEnum

import qrcode
import qrcode.image.svg

from otpgate.auth import base32

# Prior time steps accepted when confirming a fresh enrollment vs. at login.
ENROLLMENT_WINDOW = 0
LOGIN_WINDOW = 1


class HashAlgorithm(StrEnum):
    SHA1 = "SHA1"
    SHA256 = "SHA256"
    SHA512 = "SHA512"

    @property
    def digest(self):
        """The hashlib constructor for this algorithm."""
        return getattr(hashlib, self.value.lower())


@dataclass(frozen=True, slots=True)
class TotpParameters:
    """Everything besides the secret that determines a code stream."""

    algorithm: HashAlgorithm = HashAlgorithm.SHA1
    digits: int = 6
    period: int = 15
    issuer: str = ""
    label: str = ""

    def __post_init__(self):
        if not 6 <= self.digits <= 10:
            raise ValueError(f"digits must be between 6 and 10, got {self.digits}")
        if self.period < 1:
            raise ValueError(f"period must be at least 1 second, got {self.period}")
        # Accept plain strings such as "sha256" from stored rows.
        if not isinstance(self.algorithm, HashAlgorithm):
            object.__setattr__(self, "algorithm", HashAlgorithm(str(self.algorithm).upper()))


def time_step(timestamp: float, period: int) -> int:
    """Return the TOTP counter for a Unix timestamp."""
    return int(timestamp // period)


def generate_for_step(secret: str, params: TotpParameters, step: int) -> str:
    """Generate the code for an explicit time step counter."""
    key = base32.decode(secret)
    digest = hmac.new(key, struct.pack(">Q", step), params.algorithm.digest).digest()

    offset = digest[-1] & 0x0F
    binary = struct.unpack(">I", digest[offset : offset + 4])[0] & 0x7FFFFFFF
    return str(binary % 10**params.digits).zfill(params.digits)


def generate_at(secret: str, params: TotpParameters, timestamp: float) -> str:
    """Generate the code valid at the given Unix timestamp."""
    return generate_for_step(secret, params, time_step(timestamp, params.period))


def validate(
    secret: str,
    params: TotpParameters,
    code: str,
    timestamp: float | None = None,
    window: int = ENROLLMENT_WINDOW,
) -> bool:
    """Check a submitted code against the current and `window` prior steps.

    Future steps are never accepted. Returns False for codes that are not
    exactly `params.digits` decimal characters.
    """
    if window < 0:
        raise ValueError(f"window must be zero or positive, got {window}")

    # Decode up front so a corrupt secret fails even for a malformed code.
    base32.decode(secret)

    if not isinstance(code, str) or len(code) != params.digits:
        return False
    if not (code.isascii() and code.isdigit()):
        return False

    now = time.time() if timestamp is None else timestamp
    current = time_step(now, params.period)

    submitted = code.encode("ascii")
    for delta in range(window + 1):
        step = current - delta
        if step < 0:
            break
        expected = generate_for_step(secret, params, step).encode("ascii")
        if hmac.compare_digest(expected, submitted):
            return True
    return False


def generate_qr_code_svg(uri: str) -> str:
    """Generate an SVG QR code for the given URI."""
    factory = qrcode.image.svg.SvgPathImage
    img = qrcode.make(uri, image_factory=factory)
    buf = io.BytesIO()
    img.save(buf)
    return buf.getvalue().decode("utf-8")
