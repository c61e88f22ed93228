"""Backend interface for spawning the watched command."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

SIGNAL_EXIT_BASE = 128


class OutcomeStatus(str, Enum):
    """Classification of one command run."""

    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True, slots=True)
class RunRequest:
    """Inputs required to spawn one command run."""

    command_line: str
    shell: str
    quiet: bool
    null_sink_path: str


@dataclass(frozen=True, slots=True)
class RunOutcome:
    """Exit status observed for one command run."""

    exit_code: int

    @property
    def status(self) -> OutcomeStatus:
        return OutcomeStatus.SUCCESS if self.exit_code == 0 else OutcomeStatus.FAILURE

    @property
    def failed(self) -> bool:
        return self.status is OutcomeStatus.FAILURE


class RunningCommand(Protocol):
    """Handle for a spawned child that has not been waited on yet."""

    pid: int

    def wait(self) -> RunOutcome:
        """Block until the child exits and return its outcome."""

    def send_signal(self, signum: int) -> None:
        """Deliver signal to the child; no-op once it has exited."""


class CommandBackend(Protocol):
    """Protocol implemented by command spawners."""

    def start(self, request: RunRequest) -> RunningCommand:
        """Spawn the command and return a handle to wait on."""
