"""
Settings read from PAGEWATCH_* environment variables and an optional .env file.
"""

from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for a pagewatch run."""

    model_config = SettingsConfigDict(
        env_prefix="PAGEWATCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Inputs and state
    targets_file: str = "targets.yaml"
    cache_path: str = ".scraper_target_cache.db"
    metrics_path: Optional[str] = "scraper-metrics.csv"
    metrics_flush_bytes: int = 256

    # Fetching
    # Seconds. requests applies it to connecting and to each read, so a
    # server trickling bytes can hold a fetch longer; curl_cffi applies it
    # to the whole transfer.
    request_timeout: float = 30.0
    # Unset: requests sends pagewatch/0.1, the impersonating fetcher keeps
    # the browser's own User-Agent.
    user_agent: Optional[str] = None
    fetcher: str = "requests"

    # Notifications
    sender: str = "print"
    notify_address: str = "everyone@everyone.com"
    telegram_bot_token: Optional[str] = None
    telegram_chat_id: Optional[str] = None

    # Logging
    log_level: str = "INFO"
    log_format: str = "console"
    log_file: Optional[str] = None

    @field_validator("request_timeout")
    @classmethod
    def validate_timeout(cls, v):
        """Ensure one unreachable target cannot hold a run for long."""
        if v <= 0 or v > 300:
            raise ValueError("request_timeout must be between 0 and 300 seconds")
        return v

    @field_validator("metrics_flush_bytes")
    @classmethod
    def validate_flush_bytes(cls, v):
        if v < 0:
            raise ValueError("metrics_flush_bytes must not be negative")
        return v

    @field_validator("fetcher")
    @classmethod
    def validate_fetcher(cls, v):
        valid = ["requests", "impersonate"]
        if v.lower() not in valid:
            raise ValueError(f"fetcher must be one of: {valid}")
        return v.lower()

    @field_validator("sender")
    @classmethod
    def validate_sender(cls, v):
        valid = ["print", "telegram"]
        if v.lower() not in valid:
            raise ValueError(f"sender must be one of: {valid}")
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v):
        valid_formats = ["json", "console"]
        if v.lower() not in valid_formats:
            raise ValueError(f"log_format must be one of: {valid_formats}")
        return v.lower()
