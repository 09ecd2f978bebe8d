"""Tests for Pydantic data models."""

from __future__ import annotations

from shophub_2fa.models import Enrollment, EnrollmentDescriptor, TwoFactorState, UserTwoFactor


def test_user_defaults_to_disabled():
    user = UserTwoFactor(user_id="7", account_name="erin@example.com")
    assert user.state == TwoFactorState.DISABLED
    assert user.two_factor_secret is None


def test_user_enabled_state():
    user = UserTwoFactor(user_id="7", account_name="erin", two_factor_enabled=True, two_factor_secret="ABC")
    assert user.state == "enabled"


def test_enrollment_payload():
    e = Enrollment(secret="ABC", qr_code_url="https://qr/", otpauth_uri="otpauth://totp/x")
    assert e.model_dump() == {"secret": "ABC", "qr_code_url": "https://qr/", "otpauth_uri": "otpauth://totp/x"}


def test_descriptor_fields():
    d = EnrollmentDescriptor(secret="ABC", issuer="ShopHub", account_name="frank")
    assert d.issuer == "ShopHub"


def test_all_enums_complete():
    assert len(TwoFactorState) == 2
