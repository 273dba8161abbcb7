"""Typed smoke tests for the settings loader.

These tests verify four guarantees:
1) Importing the module-level `settings` yields a `Settings` instance.
2) Environment variables override defaults after clearing the loader cache.
3) `get_logger()` respects the configured LOG_LEVEL when constructing loggers.
4) `Settings.xray_config()` carries the collector/interceptor options over.
"""

from __future__ import annotations

import logging
from collections.abc import Generator
from typing import Any

import pytest

from livexray.core.settings import (
    Settings,
    get_logger,
    load_settings,
    settings,
)


@pytest.fixture(autouse=True)  # type: ignore[misc]
def fresh_settings() -> Generator[None, None, None]:
    """Rebuild the cached settings after each test's env changes are undone."""
    yield
    load_settings.cache_clear()


def test_settings_instance_type() -> None:
    """`settings` should be an instance of the typed `Settings` model."""
    assert isinstance(settings, Settings)


def test_defaults() -> None:
    s = Settings()
    assert s.port == 9876
    assert s.prefix == "/xray"
    assert s.push_interval_ms == 500
    assert s.poll_interval_ms == 100
    assert s.command_timeout_ms == 5000
    assert s.max_request_body == 1024 * 1024


def test_env_overrides_with_cache_clear(monkeypatch: Any) -> None:
    """Changing env vars should take effect after `load_settings.cache_clear()`."""
    monkeypatch.setenv("XRAY_ENV", "test")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("XRAY_SECRET", "s3cret")
    monkeypatch.setenv("XRAY_MAX_ERRORS", "7")

    load_settings.cache_clear()
    s = load_settings()

    assert s.environment == "test"
    assert s.is_test and not s.is_prod
    assert s.log_level == "DEBUG"
    assert s.secret == "s3cret"
    assert s.max_errors == 7


def test_get_logger_respects_level(monkeypatch: Any) -> None:
    """`get_logger()` should apply the numeric level derived from `LOG_LEVEL`."""
    monkeypatch.setenv("LOG_LEVEL", "ERROR")
    load_settings.cache_clear()
    _ = load_settings()

    logger = get_logger("livexray.tests.settings")

    assert logger.level == logging.ERROR
    assert logger.handlers, "Expected at least one StreamHandler to be attached."
    # Bridge diagnostics must not reach the root logger (and the console capture).
    assert logger.propagate is False


def test_xray_config_mapping() -> None:
    s = Settings(XRAY_MAX_CONSOLE_ENTRIES=10, XRAY_CAPTURE_BODIES=True, XRAY_MAX_BODY_SIZE=99)
    cfg = s.xray_config()
    assert cfg.max_console_entries == 10
    assert cfg.capture_bodies is True
    assert cfg.max_body_size == 99
    assert cfg.warnings_cap == cfg.max_errors
