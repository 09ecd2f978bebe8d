"""Exception types raised by the two-factor core."""

from __future__ import annotations


class TwoFactorError(Exception):
    """Base class for every error raised by shophub_2fa."""


class DecodeError(TwoFactorError, ValueError):
    """Malformed Base32 input."""


class InvalidCharacterError(DecodeError):
    def __init__(self, char: str, index: int) -> None:
        self.char = char
        self.index = index
        super().__init__(f"Invalid Base32 character {char!r} at position {index}")


class RandomSourceError(TwoFactorError):
    """The secure random source is unavailable or returned too few bytes."""


class UnknownUserError(TwoFactorError, LookupError):
    def __init__(self, user_id: str) -> None:
        self.user_id = user_id
        super().__init__(f"Unknown user: {user_id}")


class AlreadyEnabledError(TwoFactorError):
    """Setup was requested for an account that already has 2FA enabled."""


class InvalidCodeError(TwoFactorError):
    """The verification code did not match the candidate secret."""
