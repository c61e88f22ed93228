"""Execution loop: run, wait, report, sleep, repeat."""

from __future__ import annotations

import logging
import signal
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum

from cmdwatch.backend import (
    SIGNAL_EXIT_BASE,
    CommandBackend,
    RunningCommand,
    RunOutcome,
    RunRequest,
)
from cmdwatch.config import WatchSettings

logger = logging.getLogger(__name__)

STOP_POLL_SECONDS = 0.1
STOP_SIGNALS = ("SIGINT", "SIGTERM")


class LoopState(str, Enum):
    """Where the loop currently is within one iteration."""

    IDLE = "idle"
    RUNNING = "running"
    WAITING = "waiting"
    SLEEPING = "sleeping"
    HALTED = "halted"
    STOPPED = "stopped"


class LoopAction(str, Enum):
    """What to do after a run has completed."""

    SLEEP = "sleep"
    HALT = "halt"


@dataclass(frozen=True, slots=True)
class LoopDecision:
    """Next step chosen from one run outcome."""

    action: LoopAction
    exit_code: int | None = None


@dataclass(slots=True)
class WatchRunSummary:
    """Aggregate loop counters for CLI reporting."""

    iterations: int = 0
    succeeded: int = 0
    failed: int = 0
    last_exit_code: int | None = None
    halted: bool = False
    exit_code: int | None = None
    stop_signal: str | None = None


def decide_next(settings: WatchSettings, outcome: RunOutcome) -> LoopDecision:
    """Halt with the child's exit code on failure when halting is enabled, else sleep."""

    if outcome.failed and settings.halt_on_failure:
        return LoopDecision(action=LoopAction.HALT, exit_code=outcome.exit_code)
    return LoopDecision(action=LoopAction.SLEEP)


class WatchLoop:
    """Repeatedly runs the configured command, at most one child at a time."""

    def __init__(
        self,
        settings: WatchSettings,
        backend: CommandBackend,
        *,
        report_failure: Callable[[int], None],
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = settings
        self.backend = backend
        self.report_failure = report_failure
        self.state = LoopState.IDLE
        self._sleep = sleep
        self._clock = clock
        self._request = RunRequest(
            command_line=settings.command_line,
            shell=settings.shell,
            quiet=settings.quiet,
            null_sink_path=settings.null_sink_path,
        )
        self._stop_requested = False
        self._stop_signal_name: str | None = None
        self._stop_signum: int | None = None
        self._running: RunningCommand | None = None

    def run_once(self) -> RunOutcome:
        """Spawn the command, wait for it and report a non-zero exit."""

        self.state = LoopState.RUNNING
        running = self.backend.start(self._request)
        self._running = running
        try:
            self.state = LoopState.WAITING
            if self._stop_requested and self._stop_signum is not None:
                # Stop arrived between spawn and wait.
                running.send_signal(self._stop_signum)
            outcome = running.wait()
        finally:
            self._running = None
        if outcome.failed:
            self.report_failure(outcome.exit_code)
        return outcome

    def run_loop(self, *, max_iterations: int | None = None) -> WatchRunSummary:
        """Run until halted, stopped by a signal, or max_iterations reached.

        Args:
            max_iterations: Stop after this many runs (None = run forever).
        """

        summary = WatchRunSummary()
        with self._signal_handlers():
            while True:
                if self._stop_requested:
                    return self._finish_stopped(summary)
                if max_iterations is not None and summary.iterations >= max_iterations:
                    return summary

                outcome = self.run_once()
                summary.iterations += 1
                summary.last_exit_code = outcome.exit_code
                if outcome.failed:
                    summary.failed += 1
                else:
                    summary.succeeded += 1

                decision = decide_next(self.settings, outcome)
                if decision.action is LoopAction.HALT:
                    self.state = LoopState.HALTED
                    summary.halted = True
                    summary.exit_code = decision.exit_code
                    logger.info(
                        "Halting after iteration %d: exit %d",
                        summary.iterations,
                        outcome.exit_code,
                    )
                    return summary

                if self._stop_requested:
                    return self._finish_stopped(summary)
                if max_iterations is not None and summary.iterations >= max_iterations:
                    return summary
                self._sleep_interval()

    def _sleep_interval(self) -> None:
        self.state = LoopState.SLEEPING
        seconds = self.settings.interval_ms / 1000
        logger.debug("Sleeping %.3fs", seconds)
        deadline = self._clock() + seconds
        while not self._stop_requested:
            remaining = deadline - self._clock()
            if remaining <= 0:
                return
            self._sleep(min(STOP_POLL_SECONDS, remaining))

    def _finish_stopped(self, summary: WatchRunSummary) -> WatchRunSummary:
        self.state = LoopState.STOPPED
        summary.stop_signal = self._stop_signal_name or "unknown"
        if self._stop_signum is not None:
            summary.exit_code = SIGNAL_EXIT_BASE + self._stop_signum
        logger.info("Stopped by %s after %d iterations", summary.stop_signal, summary.iterations)
        return summary

    @contextmanager
    def _signal_handlers(self) -> Iterator[None]:
        stop_signals = [
            getattr(signal, name) for name in STOP_SIGNALS if hasattr(signal, name)
        ]

        def _forward_stop(signum: int, _: object | None) -> None:
            self.request_stop(signal_name=signal.Signals(signum).name, signum=signum)

        previous: dict[int, object] = {}
        try:
            for signum in stop_signals:
                previous[signum] = signal.signal(signum, _forward_stop)
        except ValueError:
            # Signal handlers can only be installed in main thread.
            yield
            return

        try:
            yield
        finally:
            for signum, handler in previous.items():
                if handler is not None:
                    signal.signal(signum, handler)

    def request_stop(self, *, signal_name: str, signum: int | None = None) -> None:
        """Stop the loop; a running child receives the same signal and is waited on."""

        self._stop_requested = True
        self._stop_signal_name = signal_name
        self._stop_signum = signum
        if self._running is not None and signum is not None:
            self._running.send_signal(signum)
