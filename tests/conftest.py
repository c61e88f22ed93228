"""Shared test fixtures."""

from __future__ import annotations

import pytest

from cmdwatch.backend import RunOutcome, RunRequest

_ENV_VARS = (
    "CMDWATCH_INTERVAL",
    "CMDWATCH_QUIET",
    "CMDWATCH_HALT",
    "CMDWATCH_SHELL",
    "CMDWATCH_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep developer CMDWATCH_* variables out of tests."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class ScriptedRun:
    def __init__(self, pid: int, exit_code: int, backend: ScriptedBackend) -> None:
        self.pid = pid
        self._exit_code = exit_code
        self._backend = backend

    def wait(self) -> RunOutcome:
        backend = self._backend
        if backend.clock is not None:
            backend.clock.now += backend.run_seconds
        backend.events.append(f"wait:{self.pid}")
        return RunOutcome(exit_code=self._exit_code)

    def send_signal(self, signum: int) -> None:
        self._backend.events.append(f"signal:{self.pid}:{int(signum)}")


class ScriptedBackend:
    """Fake backend returning scripted exit codes; the last one repeats.

    With a clock, each child runs for ``run_seconds`` of fake time.
    """

    def __init__(
        self,
        exit_codes: list[int],
        *,
        clock: FakeClock | None = None,
        run_seconds: float = 0.0,
    ) -> None:
        self.exit_codes = list(exit_codes)
        self.clock = clock
        self.run_seconds = run_seconds
        self.requests: list[RunRequest] = []
        self.events: list[str] = []
        self.start_times: list[float] = []

    def start(self, request: RunRequest) -> ScriptedRun:
        self.requests.append(request)
        pid = len(self.requests)
        self.events.append(f"start:{pid}")
        if self.clock is not None:
            self.start_times.append(self.clock.now)
        index = min(pid - 1, len(self.exit_codes) - 1)
        return ScriptedRun(pid, self.exit_codes[index], self)


class FakeClock:
    """Monotonic clock advanced by the fake sleep and by scripted children."""

    def __init__(self) -> None:
        self.now = 100.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture()
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def scripted_backend():
    """Factory for fake backends replaying the given exit codes."""
    return ScriptedBackend
