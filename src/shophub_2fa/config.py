"""Central configuration loaded from environment variables and YAML files."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

QR_SERVER_ENDPOINT = "https://api.qrserver.com/v1/create-qr-code/"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SHOPHUB_2FA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Issuer shown in authenticator apps
    app_name: str = "ShopHub"

    # QR rendering service
    qr_endpoint: str = QR_SERVER_ENDPOINT
    qr_size: str = "300x300"

    # TOTP
    secret_bytes: int = Field(default=32, ge=1)
    time_tolerance: int = Field(default=1, ge=0, le=10)

    # Encryption of stored secrets (base64 of 32 bytes)
    master_key: str = ""

    log_level: str = "INFO"


def read_config_file(path: str | Path) -> dict[str, Any]:
    """Load a YAML settings overlay. Returns {} for an empty file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {path}")
    return data


def load_settings(path: str | Path | None = None) -> Settings:
    """Build settings from env/.env, with values from a YAML file taking precedence."""
    if path is None:
        return Settings()
    return Settings(**read_config_file(path))


settings = Settings()
