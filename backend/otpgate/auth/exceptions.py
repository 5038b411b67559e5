"""Errors raised by the TOTP enrollment flow."""


class TotpError(Exception):
    """Base class for TOTP enrollment errors."""


class UserNotFound(TotpError):
    """No user exists with the supplied identifier."""

    def __init__(self, user_id: str):
        super().__init__(f"No user with ID {user_id} exists")
        self.user_id = user_id


class MalformedSecret(TotpError):
    """A stored or supplied secret is not valid base32."""


class InvalidCode(TotpError):
    """The submitted code did not match any accepted time step."""

    def __init__(self, message: str = "Invalid OTP token"):
        super().__init__(message)


class NoSecretIssued(TotpError):
    """A code was submitted for a user that has no TOTP secret yet."""

    def __init__(self, user_id: str):
        super().__init__(f"No TOTP secret has been issued for user {user_id}")
        self.user_id = user_id
