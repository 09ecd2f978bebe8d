"""ShopHub two-factor authentication: Base32 secrets and RFC 6238 TOTP codes."""

__version__ = "0.1.0"
