from __future__ import annotations

import logging
import os
from dataclasses import FrozenInstanceError

import allure
import pytest

from cmdwatch.config import WatchSettings, log_level_from_env

pytestmark = [
    allure.epic("Configuration"),
    allure.feature("Settings & Environment"),
]


def test_settings_defaults() -> None:
    settings = WatchSettings(command_line="date")

    assert settings.interval_ms == 1_000
    assert settings.quiet is False
    assert settings.halt_on_failure is False
    assert settings.shell == "sh"
    assert settings.null_sink_path == os.devnull


def test_settings_are_immutable() -> None:
    settings = WatchSettings(command_line="date")

    with pytest.raises(FrozenInstanceError):
        settings.quiet = True  # type: ignore[misc]


def test_from_env_uses_defaults_without_environment() -> None:
    settings = WatchSettings.from_env(command_line="uptime")

    assert settings == WatchSettings(command_line="uptime")


def test_from_env_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("CMDWATCH_INTERVAL", "250ms")
    monkeypatch.setenv("CMDWATCH_QUIET", "yes")
    monkeypatch.setenv("CMDWATCH_HALT", "1")
    monkeypatch.setenv("CMDWATCH_SHELL", "bash")

    settings = WatchSettings.from_env(command_line="uptime")

    assert settings.interval_ms == 250
    assert settings.quiet is True
    assert settings.halt_on_failure is True
    assert settings.shell == "bash"


def test_from_env_explicit_values_win_over_environment(monkeypatch) -> None:
    monkeypatch.setenv("CMDWATCH_INTERVAL", "9")
    monkeypatch.setenv("CMDWATCH_QUIET", "off")

    settings = WatchSettings.from_env(command_line="uptime", interval_ms=20, quiet=True)

    assert settings.interval_ms == 20
    assert settings.quiet is True


def test_from_env_rejects_invalid_boolean(monkeypatch) -> None:
    monkeypatch.setenv("CMDWATCH_HALT", "maybe")

    with pytest.raises(ValueError, match="Invalid boolean value for CMDWATCH_HALT"):
        WatchSettings.from_env(command_line="uptime")


def test_from_env_rejects_invalid_interval(monkeypatch) -> None:
    monkeypatch.setenv("CMDWATCH_INTERVAL", "soon")

    with pytest.raises(ValueError, match="Invalid interval"):
        WatchSettings.from_env(command_line="uptime")


def test_validate_requires_command_line() -> None:
    with pytest.raises(ValueError, match="<cmd> required"):
        WatchSettings(command_line="   ").validate()


def test_validate_rejects_non_positive_interval() -> None:
    with pytest.raises(ValueError, match="Interval must be positive"):
        WatchSettings(command_line="date", interval_ms=0).validate()


def test_validate_rejects_blank_shell() -> None:
    with pytest.raises(ValueError, match="CMDWATCH_SHELL"):
        WatchSettings(command_line="date", shell=" ").validate()


def test_log_level_defaults_to_warning() -> None:
    assert log_level_from_env() == logging.WARNING


def test_log_level_from_env(monkeypatch) -> None:
    monkeypatch.setenv("CMDWATCH_LOG_LEVEL", "debug")

    assert log_level_from_env() == logging.DEBUG


def test_log_level_rejects_unknown_name(monkeypatch) -> None:
    monkeypatch.setenv("CMDWATCH_LOG_LEVEL", "chatty")

    with pytest.raises(ValueError, match="CMDWATCH_LOG_LEVEL"):
        log_level_from_env()
