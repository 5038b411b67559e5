"""Authentication: passwords, TOTP secrets, and 2FA enrollment."""
