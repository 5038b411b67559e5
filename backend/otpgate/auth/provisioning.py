"""otpauth:// provisioning URIs for authenticator apps."""

from urllib.parse import quote

from otpgate.auth.totp import TotpParameters


def build_provisioning_uri(params: TotpParameters, secret: str) -> str:
    """Render a secret and its parameters as an otpauth:// URI.

    The result is what gets turned into a QR code or shown for manual entry.
    """
    return (
        f"otpauth://totp/{quote(params.label, safe='')}"
        f"?issuer={quote(params.issuer, safe='')}"
        f"&secret={secret}"
        f"&algorithm={params.algorithm.value}"
        f"&digits={params.digits}"
        f"&period={params.period}"
    )
