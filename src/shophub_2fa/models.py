"""Pydantic models for data exchanged with the user store and callers."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel


class TwoFactorState(StrEnum):
    DISABLED = "disabled"
    ENABLED = "enabled"


class EnrollmentDescriptor(BaseModel):
    secret: str
    issuer: str
    account_name: str


class Enrollment(BaseModel):
    """Payload returned when a user starts 2FA setup."""

    secret: str
    qr_code_url: str
    otpauth_uri: str


class UserTwoFactor(BaseModel):
    """The 2FA fields of a user account, as read from the user store."""

    user_id: str
    account_name: str
    two_factor_enabled: bool = False
    two_factor_secret: str | None = None

    @property
    def state(self) -> TwoFactorState:
        return TwoFactorState.ENABLED if self.two_factor_enabled else TwoFactorState.DISABLED
