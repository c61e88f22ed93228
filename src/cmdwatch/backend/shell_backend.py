"""Subprocess-based backend running the command through ``<shell> -c``."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import BinaryIO

from cmdwatch.backend.base import SIGNAL_EXIT_BASE, RunOutcome, RunRequest

logger = logging.getLogger(__name__)


class CommandRunError(RuntimeError):
    """Fatal error while spawning or observing the watched command."""


class RedirectError(CommandRunError):
    """Quiet-mode null sink could not be opened."""


class SpawnError(CommandRunError):
    """Child process could not be created."""


class WaitError(CommandRunError):
    """Child process completion could not be observed."""


class ShellRunningCommand:
    """Spawned shell child, owning its quiet-mode stdout handle."""

    def __init__(
        self,
        process: subprocess.Popen[bytes],
        stdout_handle: BinaryIO | None,
    ) -> None:
        self.pid = process.pid
        self._process = process
        self._stdout_handle = stdout_handle

    def wait(self) -> RunOutcome:
        try:
            returncode = self._process.wait()
        except OSError as error:
            raise WaitError(f"Failed waiting for pid {self.pid}: {error}") from error
        finally:
            if self._stdout_handle is not None:
                self._stdout_handle.close()
        exit_code = exit_code_from_returncode(returncode)
        logger.debug("Child %d exited with %d", self.pid, exit_code)
        return RunOutcome(exit_code=exit_code)

    def send_signal(self, signum: int) -> None:
        # Popen.send_signal skips children that were already reaped.
        try:
            self._process.send_signal(signum)
        except OSError:
            return


class ShellCommandBackend:
    """Spawn the command line with the configured shell, one child at a time."""

    def start(self, request: RunRequest) -> ShellRunningCommand:
        stdout_handle = _open_null_sink(request.null_sink_path) if request.quiet else None
        run_args = [request.shell, "-c", request.command_line]
        try:
            process = subprocess.Popen(  # noqa: S603
                run_args,
                stdout=stdout_handle,
            )
        except FileNotFoundError as error:
            _close_quietly(stdout_handle)
            raise SpawnError(f"Shell not found: {request.shell}") from error
        except OSError as error:
            _close_quietly(stdout_handle)
            raise SpawnError(f"Failed to start {request.shell}: {error}") from error

        logger.debug("Spawned pid %d: %s -c %r", process.pid, request.shell, request.command_line)
        return ShellRunningCommand(process, stdout_handle)


def exit_code_from_returncode(returncode: int) -> int:
    """Map ``Popen.returncode`` to a shell-style exit status.

    Children killed by a signal report ``-signum``; they map to ``128 + signum``.
    """

    if returncode < 0:
        return SIGNAL_EXIT_BASE - returncode
    return returncode


def _open_null_sink(path: str) -> BinaryIO:
    try:
        return Path(path).open("wb")
    except OSError as error:
        raise RedirectError(f"Cannot redirect stdout to {path}: {error}") from error


def _close_quietly(handle: BinaryIO | None) -> None:
    if handle is None:
        return
    try:
        handle.close()
    except OSError:
        return
