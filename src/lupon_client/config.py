"""Configuration for the Lupon case-management client."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings loaded from environment."""

    api_base_url: str = "http://localhost:5000"
    api_token: SecretStr = SecretStr("")
    session_cookie: SecretStr = SecretStr("")
    user_cookie: SecretStr = SecretStr("")
    cookie_name: str = "token"
    request_timeout: float = 30.0
    timezone: str = "Asia/Manila"
    max_sessions_per_day: int = Field(default=4, ge=1)
    min_session_gap_minutes: int = Field(default=60, ge=0)
    pdf_output_dir: Path = Path("generated-forms")
    environment: str = "development"

    model_config = SettingsConfigDict(env_prefix="LUPON_", env_file=".env")
