"""Test doubles and constants shared across test modules."""

from otpgate.models import User

# 2023-11-14T22:13:27Z, partway through a 15 second step
FROZEN_NOW = 1_700_000_007.0


class InMemoryUserStore:
    """UserStore keeping users in a dict."""

    def __init__(self, *users: User):
        self.users = {user.id: user for user in users}
        self.updates: list[tuple[str, dict]] = []

    async def get(self, user_id: str) -> User | None:
        return self.users.get(user_id)

    async def update(self, user_id: str, **fields) -> User | None:
        user = self.users.get(user_id)
        if user is None:
            return None
        self.updates.append((user_id, fields))
        for key, value in fields.items():
            setattr(user, key, value)
        return user


def make_user(user_id: str = "42", name: str = "Alice", **fields) -> User:
    """Build a transient user with 2FA off."""
    values = {
        "id": user_id,
        "name": name,
        "email": f"{name.lower()}@example.com",
        "password_hash": "not-a-real-hash",
        "otp_enabled": False,
        "otp_verified": False,
    }
    values.update(fields)
    return User(**values)
