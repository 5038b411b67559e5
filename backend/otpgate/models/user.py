"""User model carrying password credentials and TOTP enrollment state."""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from otpgate.database import Base, utc_now


class User(Base):
    """A user with password login and optional TOTP second factor."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
    )

    # User info
    name: Mapped[str] = mapped_column(String(255))
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255))

    # TOTP enrollment: otp_enabled implies otp_verified implies otp_secret
    otp_secret: Mapped[str | None] = mapped_column(String(64))
    otp_auth_url: Mapped[str | None] = mapped_column(String(1024))
    otp_enabled: Mapped[bool] = mapped_column(Boolean, default=False)
    otp_verified: Mapped[bool] = mapped_column(Boolean, default=False)

    # Parameters the secret was issued with
    otp_algorithm: Mapped[str | None] = mapped_column(String(10))
    otp_digits: Mapped[int | None] = mapped_column(Integer)
    otp_period: Mapped[int | None] = mapped_column(Integer)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
    )

    @property
    def has_otp_secret(self) -> bool:
        """Check if a TOTP secret has been issued."""
        return bool(self.otp_secret)
