"""API routers."""

from otpgate.routers.auth import router as auth_router
from otpgate.routers.health import router as health_router

__all__ = [
    "auth_router",
    "health_router",
]
