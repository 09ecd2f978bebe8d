"""Account 2FA lifecycle: setup, enable, disable and login verification.

The account state lives in an external user store; this module reads and
writes it only through the ``UserStore`` accessors.

    disabled --(begin_setup + enable with a valid code)--> enabled
    enabled  --(disable)--> disabled

``verify_login`` is only consulted for enabled accounts.
"""

from __future__ import annotations

import logging
import threading
from typing import Protocol

from cryptography.exceptions import InvalidTag

from shophub_2fa.auth.totp import TotpEngine
from shophub_2fa.config import Settings, settings
from shophub_2fa.crypto import SecretSealer
from shophub_2fa.errors import AlreadyEnabledError, InvalidCodeError, UnknownUserError
from shophub_2fa.models import Enrollment, EnrollmentDescriptor, TwoFactorState, UserTwoFactor

logger = logging.getLogger(__name__)


class UserStore(Protocol):
    def get(self, user_id: str) -> UserTwoFactor | None: ...

    def save(self, record: UserTwoFactor) -> None: ...


class InMemoryUserStore:
    """Process-local UserStore, for tests and the CLI."""

    def __init__(self, records: list[UserTwoFactor] | None = None) -> None:
        self._lock = threading.Lock()
        self._records: dict[str, UserTwoFactor] = {}
        for record in records or []:
            self._records[record.user_id] = record

    def get(self, user_id: str) -> UserTwoFactor | None:
        with self._lock:
            record = self._records.get(user_id)
            return record.model_copy() if record else None

    def save(self, record: UserTwoFactor) -> None:
        with self._lock:
            self._records[record.user_id] = record.model_copy()


class TwoFactorService:
    def __init__(
        self,
        store: UserStore,
        engine: TotpEngine | None = None,
        sealer: SecretSealer | None = None,
    ) -> None:
        self.store = store
        self.engine = engine or TotpEngine()
        self.sealer = sealer

    def _require(self, user_id: str) -> UserTwoFactor:
        record = self.store.get(user_id)
        if record is None:
            raise UnknownUserError(user_id)
        return record

    def begin_setup(self, user_id: str) -> Enrollment:
        """Generate a candidate secret and its QR URL. Nothing is stored yet."""
        record = self._require(user_id)
        if record.state == TwoFactorState.ENABLED:
            raise AlreadyEnabledError(f"2FA already enabled for user {user_id}")

        descriptor = EnrollmentDescriptor(
            secret=self.engine.generate_secret(),
            issuer=self.engine.issuer,
            account_name=record.account_name,
        )
        logger.info("2FA setup started for user %s", user_id)
        return Enrollment(
            secret=descriptor.secret,
            qr_code_url=self.engine.build_enrollment_url(
                descriptor.secret, descriptor.account_name, descriptor.issuer
            ),
            otpauth_uri=self.engine.otpauth_uri(
                descriptor.secret, descriptor.account_name, descriptor.issuer
            ),
        )

    def enable(self, user_id: str, secret: str, code: str) -> UserTwoFactor:
        """Confirm setup with a code from the authenticator app and store the secret."""
        record = self._require(user_id)
        if record.state == TwoFactorState.ENABLED:
            raise AlreadyEnabledError(f"2FA already enabled for user {user_id}")
        if not self.engine.verify(secret, code):
            logger.warning("2FA enable rejected for user %s: invalid code", user_id)
            raise InvalidCodeError("Invalid verification code")

        stored = secret.strip().upper()
        if self.sealer is not None:
            stored = self.sealer.seal(stored)
        record = record.model_copy(update={"two_factor_enabled": True, "two_factor_secret": stored})
        self.store.save(record)
        logger.info("2FA enabled for user %s", user_id)
        return record

    def disable(self, user_id: str) -> UserTwoFactor:
        record = self._require(user_id)
        if record.state == TwoFactorState.DISABLED and record.two_factor_secret is None:
            return record
        record = record.model_copy(update={"two_factor_enabled": False, "two_factor_secret": None})
        self.store.save(record)
        logger.info("2FA disabled for user %s", user_id)
        return record

    def verify_login(self, user_id: str, code: str) -> bool:
        """Check a login code. Every failure cause yields the same False."""
        record = self.store.get(user_id)
        if record is None or record.state != TwoFactorState.ENABLED or not record.two_factor_secret:
            logger.warning("2FA login rejected for user %s", user_id)
            return False

        secret = record.two_factor_secret
        if self.sealer is not None:
            try:
                secret = self.sealer.unseal(secret)
            except (InvalidTag, ValueError):
                logger.error("Stored 2FA secret for user %s could not be unsealed", user_id)
                return False

        if self.engine.verify(secret, code):
            logger.info("2FA login accepted for user %s", user_id)
            return True
        logger.warning("2FA login rejected for user %s", user_id)
        return False


def build_service(store: UserStore, cfg: Settings | None = None, **engine_kwargs) -> TwoFactorService:
    """Wire a TwoFactorService from settings; secrets are sealed when ``master_key`` is set."""
    cfg = cfg or settings
    sealer = SecretSealer.from_settings(cfg) if cfg.master_key else None
    return TwoFactorService(store, TotpEngine.from_settings(cfg, **engine_kwargs), sealer=sealer)
