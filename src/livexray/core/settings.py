"""Centralized configuration for the bridge using Pydantic Settings (v2).

This module exposes a single, cached `settings` instance that reads from:
- Real environment variables (highest precedence)
- `.env` files at the working directory: .env, .env.local, .env.dev/.env.test/.env.prod

Both sides of the bridge read it: the host process (bind address, route
prefix, shared secret, body ceiling) and the client runtime (host URL, push
and poll intervals, collector caps).
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from livexray.core.config import XrayConfig

EnvName = Literal["dev", "test", "prod"]
LogLevelName = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    """Typed bridge configuration loaded from env and `.env` files.

    Attributes
    ----------
    environment : EnvName
        Runtime environment flag; maps from `XRAY_ENV`.
    log_level : LogLevelName
        Global log level string; maps from `LOG_LEVEL`.
    secret : Optional[str]
        Shared secret required on every bridge route when set. Maps from `XRAY_SECRET`.
    url : str
        Base URL of the host routes as seen from the client runtime. Maps from `XRAY_URL`.
    """

    environment: EnvName = Field(default="dev", alias="XRAY_ENV")
    log_level: LogLevelName = Field(default="INFO", alias="LOG_LEVEL")

    # Host process
    host: str = Field(default="127.0.0.1", alias="XRAY_HOST")
    port: int = Field(default=9876, alias="XRAY_PORT")
    prefix: str = Field(default="/xray", alias="XRAY_PREFIX")
    secret: str | None = Field(default=None, alias="XRAY_SECRET")
    command_timeout_ms: int = Field(default=5000, gt=0, alias="XRAY_COMMAND_TIMEOUT_MS")
    screenshot_timeout_ms: int = Field(default=10000, gt=0, alias="XRAY_SCREENSHOT_TIMEOUT_MS")
    max_request_body: int = Field(default=1024 * 1024, gt=0, alias="XRAY_MAX_REQUEST_BODY")

    # Client runtime
    url: str = Field(default="http://127.0.0.1:9876/xray", alias="XRAY_URL")
    push_interval_ms: int = Field(default=500, gt=0, alias="XRAY_PUSH_INTERVAL_MS")
    poll_interval_ms: int = Field(default=100, gt=0, alias="XRAY_POLL_INTERVAL_MS")

    # Collector / interceptors
    max_console_entries: int = Field(default=100, ge=1, alias="XRAY_MAX_CONSOLE_ENTRIES")
    max_network_entries: int = Field(default=50, ge=1, alias="XRAY_MAX_NETWORK_ENTRIES")
    max_errors: int = Field(default=50, ge=1, alias="XRAY_MAX_ERRORS")
    capture_headers: bool = Field(default=True, alias="XRAY_CAPTURE_HEADERS")
    capture_bodies: bool = Field(default=False, alias="XRAY_CAPTURE_BODIES")
    max_body_size: int = Field(default=10240, ge=0, alias="XRAY_MAX_BODY_SIZE")
    warn_on_unknown_network_update: bool = Field(
        default=False, alias="XRAY_WARN_ON_UNKNOWN_NETWORK_UPDATE"
    )

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local", ".env.dev", ".env.test", ".env.prod"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def is_dev(self) -> bool:
        """Return True if running in the development environment."""
        return self.environment == "dev"

    @property
    def is_test(self) -> bool:
        """Return True if running in the test environment."""
        return self.environment == "test"

    @property
    def is_prod(self) -> bool:
        """Return True if running in the production environment."""
        return self.environment == "prod"

    def log_level_numeric(self) -> int:
        """Return the numeric logging level corresponding to `self.log_level`."""
        return getattr(logging, self.log_level, logging.INFO)

    def xray_config(self) -> XrayConfig:
        """Build the collector/interceptor option set from these settings."""
        return XrayConfig(
            max_console_entries=self.max_console_entries,
            max_network_entries=self.max_network_entries,
            max_errors=self.max_errors,
            capture_headers=self.capture_headers,
            capture_bodies=self.capture_bodies,
            max_body_size=self.max_body_size,
            warn_on_unknown_network_update=self.warn_on_unknown_network_update,
        )


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Create and cache a `Settings` instance.

    We keep this behind an LRU cache so tests can force a rebuild via
    `load_settings.cache_clear()` after mutating `os.environ`.
    """
    os.environ.setdefault("XRAY_ENV", "dev")
    return Settings()


# Export a ready-to-use singleton (import-time read of env / .env files).
settings: Settings = load_settings()


def get_logger(name: str = "livexray") -> logging.Logger:
    """Return a process-global logger configured to the current log level.

    The logger does not propagate to the root logger, so bridge diagnostics
    never reach the console interceptor's root handler.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
        )
        logger.addHandler(handler)
    logger.setLevel(load_settings().log_level_numeric())
    logger.propagate = False
    return logger
