"""TOTP enrollment lifecycle for a single user.

States and transitions:

    no secret --issue_secret--> secret issued --verify--> verified + enabled
    enabled --disable--> disabled (secret and otp_verified kept)

``issue_secret`` is allowed from any state and leaves ``otp_verified`` and
``otp_enabled`` untouched, so a user who re-issues a secret keeps their
enabled flag until they verify again or disable. ``validate_login`` never
changes state.

Nothing here limits how often codes may be submitted; callers that need
lockout or rate limiting must add it in front of ``verify`` and
``validate_login``.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, replace

from otpgate.auth.exceptions import InvalidCode, NoSecretIssued, UserNotFound
from otpgate.auth.provisioning import build_provisioning_uri
from otpgate.auth.secret import generate_secret
from otpgate.auth.totp import ENROLLMENT_WINDOW, LOGIN_WINDOW, TotpParameters, validate
from otpgate.models import User
from otpgate.store import UserStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class IssuedSecret:
    """A freshly issued secret and its provisioning URI."""

    secret: str
    uri: str


class TotpEnrollment:
    """Issue, verify, check and disable TOTP for users in a UserStore."""

    def __init__(
        self,
        store: UserStore,
        params: TotpParameters | None = None,
        *,
        enrollment_window: int = ENROLLMENT_WINDOW,
        login_window: int = LOGIN_WINDOW,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.params = params or TotpParameters()
        self.enrollment_window = enrollment_window
        self.login_window = login_window
        self._clock = clock

    async def _require_user(self, user_id: str) -> User:
        user = await self.store.get(user_id)
        if user is None:
            raise UserNotFound(user_id)
        return user

    def parameters_for(self, user: User) -> TotpParameters:
        """Rebuild the parameters the user's current secret was issued with."""
        return TotpParameters(
            algorithm=user.otp_algorithm or self.params.algorithm,
            digits=user.otp_digits or self.params.digits,
            period=user.otp_period or self.params.period,
            issuer=self.params.issuer or user.name,
            label=self.params.label,
        )

    def _matches(self, user: User, code: str, window: int) -> bool:
        if not user.has_otp_secret:
            raise NoSecretIssued(user.id)
        return validate(
            user.otp_secret,
            self.parameters_for(user),
            code,
            timestamp=self._clock(),
            window=window,
        )

    async def issue_secret(self, user_id: str) -> IssuedSecret:
        """Generate and store a new secret for the user."""
        user = await self._require_user(user_id)

        params = replace(self.params, issuer=self.params.issuer or user.name)
        secret = generate_secret()
        uri = build_provisioning_uri(params, secret)

        if user.otp_enabled:
            logger.warning(
                "Re-issuing TOTP secret for user %s while 2FA is enabled", user_id
            )

        updated = await self.store.update(
            user_id,
            otp_secret=secret,
            otp_auth_url=uri,
            otp_algorithm=params.algorithm.value,
            otp_digits=params.digits,
            otp_period=params.period,
        )
        if updated is None:
            raise UserNotFound(user_id)

        logger.info("Issued TOTP secret for user %s", user_id)
        return IssuedSecret(secret=secret, uri=uri)

    async def verify(self, user_id: str, code: str) -> User:
        """Confirm enrollment with a code from the current time step.

        On success the user becomes verified and enabled in one update.
        Raises InvalidCode without touching state when the code is wrong.
        """
        user = await self._require_user(user_id)

        if not self._matches(user, code, self.enrollment_window):
            logger.warning("TOTP enrollment verification failed for user %s", user_id)
            raise InvalidCode()

        updated = await self.store.update(user_id, otp_verified=True, otp_enabled=True)
        if updated is None:
            raise UserNotFound(user_id)

        logger.info("TOTP enabled for user %s", user_id)
        return updated

    async def validate_login(self, user_id: str, code: str) -> bool:
        """Check a login code, tolerating the previous time step."""
        user = await self._require_user(user_id)
        matched = self._matches(user, code, self.login_window)
        if not matched:
            logger.warning("TOTP login validation failed for user %s", user_id)
        return matched

    async def disable(self, user_id: str) -> User:
        """Turn off 2FA for the user. Disabling twice is a no-op."""
        updated = await self.store.update(user_id, otp_enabled=False)
        if updated is None:
            raise UserNotFound(user_id)

        logger.info("TOTP disabled for user %s", user_id)
        return updated
