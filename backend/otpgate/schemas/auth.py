"""Schemas for authentication and TOTP enrollment."""

from pydantic import BaseModel, Field


class UserInfo(BaseModel):
    """User summary returned by login and enrollment endpoints."""

    id: str
    name: str
    email: str
    otp_enabled: bool = False

    model_config = {"from_attributes": True}


class RegisterRequest(BaseModel):
    """Registration request."""

    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    # bcrypt only considers the first 72 bytes
    password: str = Field(..., min_length=8, max_length=72)


class LoginRequest(BaseModel):
    """Email and password login request."""

    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    """Successful login response."""

    status: str = "success"
    user: UserInfo


class OtpUserRequest(BaseModel):
    """Request identifying the user whose 2FA is being managed."""

    user_id: str = Field(..., min_length=1)


class OtpTokenRequest(OtpUserRequest):
    """Request carrying a one-time code for a user."""

    token: str


class OtpGenerateResponse(BaseModel):
    """Newly issued secret, its provisioning URI and a QR code of that URI."""

    base32: str
    otpauth_url: str
    qr_code_svg: str


class OtpVerifyResponse(BaseModel):
    """Response for a successful enrollment verification."""

    otp_verified: bool = True
    user: UserInfo


class OtpValidateResponse(BaseModel):
    """Response for a successful login code check."""

    otp_valid: bool = True


class OtpDisableResponse(BaseModel):
    """Response for disabling 2FA."""

    otp_disabled: bool = True
    user: UserInfo
