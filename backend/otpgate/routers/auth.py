"""Authentication and TOTP enrollment endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from otpgate.auth.enrollment import TotpEnrollment
from otpgate.auth.exceptions import InvalidCode, MalformedSecret, NoSecretIssued, UserNotFound
from otpgate.auth.password import hash_password, verify_password
from otpgate.auth.totp import generate_qr_code_svg
from otpgate.config import get_settings
from otpgate.database import get_db
from otpgate.models import User
from otpgate.schemas.auth import (
    LoginRequest,
    LoginResponse,
    OtpDisableResponse,
    OtpGenerateResponse,
    OtpTokenRequest,
    OtpUserRequest,
    OtpValidateResponse,
    OtpVerifyResponse,
    RegisterRequest,
    UserInfo,
)
from otpgate.store import SqlUserStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])
settings = get_settings()


def get_user_store(db: AsyncSession = Depends(get_db)) -> SqlUserStore:
    """Dependency that provides the SQL-backed user store."""
    return SqlUserStore(db)


def get_enrollment(store: SqlUserStore = Depends(get_user_store)) -> TotpEnrollment:
    """Dependency that provides the TOTP enrollment state machine."""
    return TotpEnrollment(
        store,
        settings.totp_parameters(),
        enrollment_window=settings.totp_enrollment_window,
        login_window=settings.totp_login_window,
    )


def _user_not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="No user with that ID exists",
    )


def _no_secret() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="No OTP secret has been generated for this user",
    )


def _invalid_token() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid OTP token",
    )


def _corrupt_secret(user_id: str) -> HTTPException:
    logger.exception("Stored TOTP secret for user %s is not valid base32", user_id)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Stored OTP secret is corrupt",
    )


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    registration: RegisterRequest,
    store: SqlUserStore = Depends(get_user_store),
) -> dict:
    """Register a new user."""
    if await store.get_by_email(registration.email):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A user with that email already exists",
        )

    await store.add(
        User(
            name=registration.name,
            email=registration.email,
            password_hash=hash_password(registration.password),
            otp_enabled=False,
            otp_verified=False,
        )
    )

    return {"status": "success", "message": "Registered successfully, please login"}


@router.post("/login")
async def login(
    credentials: LoginRequest,
    store: SqlUserStore = Depends(get_user_store),
) -> LoginResponse:
    """Check email and password.

    The returned otp_enabled flag tells the client whether a TOTP code
    must be validated next.
    """
    user = await store.get_by_email(credentials.email)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No user with that email exists",
        )

    if not verify_password(credentials.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    return LoginResponse(user=UserInfo.model_validate(user))


@router.post("/otp/generate")
async def generate_otp(
    request: OtpUserRequest,
    enrollment: TotpEnrollment = Depends(get_enrollment),
) -> OtpGenerateResponse:
    """Issue a new TOTP secret and return it with its provisioning URI."""
    try:
        issued = await enrollment.issue_secret(request.user_id)
    except UserNotFound:
        raise _user_not_found()

    return OtpGenerateResponse(
        base32=issued.secret,
        otpauth_url=issued.uri,
        qr_code_svg=generate_qr_code_svg(issued.uri),
    )


@router.post("/otp/verify")
async def verify_otp(
    request: OtpTokenRequest,
    enrollment: TotpEnrollment = Depends(get_enrollment),
) -> OtpVerifyResponse:
    """Confirm enrollment with a code from the authenticator app."""
    try:
        user = await enrollment.verify(request.user_id, request.token)
    except UserNotFound:
        raise _user_not_found()
    except NoSecretIssued:
        raise _no_secret()
    except InvalidCode:
        raise _invalid_token()
    except MalformedSecret:
        raise _corrupt_secret(request.user_id)

    return OtpVerifyResponse(user=UserInfo.model_validate(user))


@router.post("/otp/validate")
async def validate_otp(
    request: OtpTokenRequest,
    enrollment: TotpEnrollment = Depends(get_enrollment),
) -> OtpValidateResponse:
    """Check a TOTP code as the second step of login."""
    try:
        valid = await enrollment.validate_login(request.user_id, request.token)
    except UserNotFound:
        raise _user_not_found()
    except NoSecretIssued:
        raise _no_secret()
    except MalformedSecret:
        raise _corrupt_secret(request.user_id)

    if not valid:
        raise _invalid_token()

    return OtpValidateResponse()


@router.post("/otp/disable")
async def disable_otp(
    request: OtpUserRequest,
    enrollment: TotpEnrollment = Depends(get_enrollment),
) -> OtpDisableResponse:
    """Turn off TOTP for a user. The secret is kept."""
    try:
        user = await enrollment.disable(request.user_id)
    except UserNotFound:
        raise _user_not_found()

    return OtpDisableResponse(user=UserInfo.model_validate(user))
