"""Runtime configuration for the watch loop."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from cmdwatch.interval import DEFAULT_INTERVAL_MS, parse_interval

DEFAULT_SHELL = "sh"
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass(frozen=True, slots=True)
class WatchSettings:
    """Immutable settings built once before the loop starts."""

    command_line: str
    interval_ms: int = DEFAULT_INTERVAL_MS
    quiet: bool = False
    halt_on_failure: bool = False
    shell: str = DEFAULT_SHELL
    null_sink_path: str = os.devnull

    @classmethod
    def from_env(
        cls,
        *,
        command_line: str,
        interval_ms: int | None = None,
        quiet: bool | None = None,
        halt_on_failure: bool | None = None,
    ) -> WatchSettings:
        """Build settings, filling options not given on the command line from environment."""

        if interval_ms is None:
            raw_interval = os.getenv("CMDWATCH_INTERVAL", "").strip()
            interval_ms = parse_interval(raw_interval) if raw_interval else DEFAULT_INTERVAL_MS
        if quiet is None:
            quiet = _env_bool("CMDWATCH_QUIET", default=False)
        if halt_on_failure is None:
            halt_on_failure = _env_bool("CMDWATCH_HALT", default=False)
        return cls(
            command_line=command_line,
            interval_ms=interval_ms,
            quiet=quiet,
            halt_on_failure=halt_on_failure,
            shell=os.getenv("CMDWATCH_SHELL", DEFAULT_SHELL).strip() or DEFAULT_SHELL,
        )

    def validate(self) -> None:
        """Raise configuration error if the settings cannot drive the loop."""

        if not self.command_line.strip():
            raise ValueError("<cmd> required")
        if self.interval_ms <= 0:
            raise ValueError(f"Interval must be positive, got {self.interval_ms} ms.")
        if not self.shell.strip():
            raise ValueError("CMDWATCH_SHELL must not be empty.")


def log_level_from_env() -> int:
    """Resolve ``CMDWATCH_LOG_LEVEL`` to a :mod:`logging` level number."""

    name = os.getenv("CMDWATCH_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        raise ValueError(f"Invalid log level for CMDWATCH_LOG_LEVEL: {name!r}")
    return level


_BOOL_WORDS = {
    **dict.fromkeys(("1", "true", "yes", "on"), True),
    **dict.fromkeys(("0", "false", "no", "off"), False),
}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return _BOOL_WORDS[raw.strip().lower()]
    except KeyError:
        raise ValueError(f"Invalid boolean value for {name}: {raw!r}") from None
