"""TOTP (Time-based One-Time Password) management for 2FA.

RFC 6238 with the defaults every mainstream authenticator app expects:
HMAC-SHA1, 6 digits, 30-second steps. Secrets travel as Base32 text;
the engine never stores them.
"""

from __future__ import annotations

import logging
import secrets
import time
from collections.abc import Callable
from typing import TYPE_CHECKING
from urllib.parse import quote_plus, urlencode

import pyotp
from pyotp.utils import strings_equal

from shophub_2fa.auth import base32
from shophub_2fa.config import QR_SERVER_ENDPOINT
from shophub_2fa.errors import DecodeError, RandomSourceError

if TYPE_CHECKING:
    from shophub_2fa.config import Settings

logger = logging.getLogger(__name__)

DIGITS = 6
PERIOD = 30  # seconds
DEFAULT_SECRET_BYTES = 32
DEFAULT_TOLERANCE = 1
MAX_TOLERANCE = 10
DEFAULT_ISSUER = "ShopHub"
DEFAULT_QR_SIZE = "300x300"
OTPAUTH_PREFIX = "otpauth://totp/"

_MAX_COUNTER = 2**64 - 1


def time_counter(unix_time: float) -> int:
    """Map a Unix timestamp to its 30-second step number."""
    return int(unix_time // PERIOD)


def compute_code(secret_bytes: bytes, counter: int) -> str:
    """Derive the 6-digit code for a raw secret at a given step (RFC 4226 truncation)."""
    if not 0 <= counter <= _MAX_COUNTER:
        raise ValueError(f"Time counter out of range: {counter}")
    return pyotp.HOTP(base32.encode(secret_bytes), digits=DIGITS).at(counter)


def normalize_code(code: str) -> str | None:
    """Strip whitespace; return the code only if it is exactly 6 ASCII digits."""
    if not isinstance(code, str):
        return None
    code = code.strip()
    if len(code) != DIGITS or not code.isascii() or not code.isdigit():
        return None
    return code


def otpauth_uri(secret: str, account_name: str, issuer: str = DEFAULT_ISSUER) -> str:
    """Build the ``otpauth://totp/`` URI that authenticator apps import."""
    label = quote_plus(f"{issuer}:{account_name}")
    query = urlencode({"secret": secret, "issuer": issuer, "accountname": account_name})
    return f"{OTPAUTH_PREFIX}{label}?{query}"


def build_enrollment_url(
    secret: str,
    account_name: str,
    issuer: str = DEFAULT_ISSUER,
    qr_endpoint: str = QR_SERVER_ENDPOINT,
    size: str = DEFAULT_QR_SIZE,
) -> str:
    """Get the QR-service URL that renders the otpauth URI for scanning."""
    uri = otpauth_uri(secret, account_name, issuer)
    return f"{qr_endpoint}?size={size}&data={quote_plus(uri)}"


class TotpEngine:
    """Stateless TOTP service with an injectable clock and random source.

    Args:
        clock: Returns the current Unix time in seconds.
        random_bytes: Returns ``n`` cryptographically secure random bytes.
        issuer: Default issuer placed in enrollment URLs.
        qr_endpoint: QR rendering endpoint wrapping the otpauth URI.
        qr_size: ``size`` parameter passed to the QR endpoint.
        secret_bytes: Default length of generated secrets.
        tolerance: Default number of adjacent steps accepted by ``verify``,
            at most ``MAX_TOLERANCE``.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        random_bytes: Callable[[int], bytes] = secrets.token_bytes,
        *,
        issuer: str = DEFAULT_ISSUER,
        qr_endpoint: str = QR_SERVER_ENDPOINT,
        qr_size: str = DEFAULT_QR_SIZE,
        secret_bytes: int = DEFAULT_SECRET_BYTES,
        tolerance: int = DEFAULT_TOLERANCE,
    ) -> None:
        self._clock = clock
        self._random_bytes = random_bytes
        self.issuer = issuer
        self.qr_endpoint = qr_endpoint
        self.qr_size = qr_size
        self.secret_bytes = secret_bytes
        self.tolerance = tolerance

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> TotpEngine:
        return cls(
            issuer=settings.app_name,
            qr_endpoint=settings.qr_endpoint,
            qr_size=settings.qr_size,
            secret_bytes=settings.secret_bytes,
            tolerance=settings.time_tolerance,
            **kwargs,
        )

    def generate_secret(self, byte_length: int | None = None) -> str:
        """Generate a new Base32 secret from ``byte_length`` random bytes."""
        length = self.secret_bytes if byte_length is None else byte_length
        if length < 1:
            raise ValueError(f"Secret length must be positive, got {length}")
        try:
            raw = self._random_bytes(length)
        except (OSError, NotImplementedError) as e:
            raise RandomSourceError(f"Secure random source unavailable: {e}") from e
        if len(raw) != length:
            raise RandomSourceError(f"Random source returned {len(raw)} of {length} bytes")
        return base32.encode(raw)

    def build_enrollment_url(self, secret: str, account_name: str, issuer: str | None = None) -> str:
        return build_enrollment_url(
            secret,
            account_name,
            issuer=self.issuer if issuer is None else issuer,
            qr_endpoint=self.qr_endpoint,
            size=self.qr_size,
        )

    def otpauth_uri(self, secret: str, account_name: str, issuer: str | None = None) -> str:
        return otpauth_uri(secret, account_name, self.issuer if issuer is None else issuer)

    def compute_code(self, secret_bytes: bytes, counter: int) -> str:
        return compute_code(secret_bytes, counter)

    def current_counter(self) -> int:
        return time_counter(self._clock())

    def current_code(self, secret: str) -> str:
        """Get the current code for a Base32 secret. Raises ``DecodeError`` on a bad secret."""
        return compute_code(base32.decode(secret), self.current_counter())

    def verify(self, secret: str, code: str, tolerance: int | None = None) -> bool:
        """Verify a submitted code within +-``tolerance`` steps of now.

        The window is capped at ``MAX_TOLERANCE`` steps. Never raises for a
        malformed code or secret; both verify as False.
        """
        submitted = normalize_code(code)
        if submitted is None:
            logger.debug("Rejected TOTP code: malformed")
            return False

        try:
            secret_bytes = base32.decode(secret)
        except (DecodeError, AttributeError, TypeError):
            logger.debug("Rejected TOTP code: stored secret is not valid Base32")
            return False
        if not secret_bytes:
            logger.debug("Rejected TOTP code: empty secret")
            return False

        window = min(max(self.tolerance if tolerance is None else tolerance, 0), MAX_TOLERANCE)
        current = self.current_counter()
        matched = False
        for i in range(-window, window + 1):
            counter = current + i
            if not 0 <= counter <= _MAX_COUNTER:
                continue
            # Full window is always scanned.
            if strings_equal(compute_code(secret_bytes, counter), submitted):
                matched = True

        if not matched:
            logger.debug("Rejected TOTP code: no match within %d step(s)", window)
        return matched
