"""SQLAlchemy ORM models."""

from otpgate.models.user import User

__all__ = [
    "User",
]
