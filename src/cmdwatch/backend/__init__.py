"""Command spawning backends."""

from cmdwatch.backend.base import (
    SIGNAL_EXIT_BASE,
    CommandBackend,
    OutcomeStatus,
    RunningCommand,
    RunOutcome,
    RunRequest,
)
from cmdwatch.backend.shell_backend import (
    CommandRunError,
    RedirectError,
    ShellCommandBackend,
    SpawnError,
    WaitError,
)

__all__ = [
    "SIGNAL_EXIT_BASE",
    "CommandBackend",
    "CommandRunError",
    "OutcomeStatus",
    "RedirectError",
    "RunOutcome",
    "RunRequest",
    "RunningCommand",
    "ShellCommandBackend",
    "SpawnError",
    "WaitError",
]
