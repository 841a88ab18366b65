# config.py

"""Application configuration utilities.

Values are loaded from an optional ``config.json`` next to this file and may be
overridden by environment variables. The :func:`get_settings` helper merges the
two sources and caches the result.
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings merged from JSON and environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = "sqlite+aiosqlite:///./bar_orders.db"
    redis_url: str = "redis://localhost:6379/0"
    secret_key: str = "change-me"
    table_qr_signing_secret: str | None = None
    public_base_url: str = "http://localhost:8000"
    order_code_prefix: str = "DRK"
    session_code_prefix: str = "BAR"
    order_code_attempts: int = 3
    session_code_attempts: int = 5
    require_session_for_table_orders: bool = True
    orders_list_limit: int = 200
    ticket_paper: str = "58mm"
    ticket_timezone: str = "UTC"
    currency_symbol: str = "$"
    printer_host: str | None = None
    printer_port: int = 9100
    public_menu_cache_secs: int = 60
    auto_create_schema: bool = True
    log_level: str = "INFO"

    @field_validator("table_qr_signing_secret", "printer_host", mode="before")
    @classmethod
    def _blank_is_unset(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("order_code_attempts", "session_code_attempts")
    @classmethod
    def _positive_attempts(cls, value: int) -> int:
        if value < 1:
            raise ValueError("attempt counts must be at least 1")
        return value


# Cached singleton to avoid repeated file reads
@lru_cache
def get_settings() -> Settings:
    """Return merged settings with environment variable precedence.

    ``config.json`` is optional; when present its values act as defaults and
    any environment variable naming a settings field overrides them.
    """

    config_path = Path(__file__).with_name("config.json")
    data = json.loads(config_path.read_text()) if config_path.exists() else {}
    env_override = {
        k.lower(): v
        for k, v in os.environ.items()
        if k.lower() in Settings.model_fields
    }
    merged = {**data, **env_override}
    return Settings(**merged)
