from __future__ import annotations

from typing import Any, Callable, List, Optional, Sequence

import pytest


class FakeRunner:
    """Stand-in process runner: records invocations, replies synchronously."""

    def __init__(self, reply: Optional[Callable[[List[str]], tuple]] = None) -> None:
        self.calls: list[list[str]] = []
        self._reply = reply or (lambda args: (None, None))

    def __call__(self, args: Sequence[str], callback: Callable[..., Any]) -> None:
        args = list(args)
        self.calls.append(args)
        error, stdout = self._reply(args)
        callback(error, stdout)


class LogSpy:
    def __init__(self) -> None:
        self.messages: list[str] = []

    def __call__(self, message: str) -> None:
        self.messages.append(message)


@pytest.fixture
def log_spy() -> LogSpy:
    return LogSpy()


@pytest.fixture
def make_runner() -> Callable[..., FakeRunner]:
    def _make(stdout: Optional[str] = None, error: Any = None, *, reply=None) -> FakeRunner:
        if reply is None:
            return FakeRunner(lambda args: (error, stdout))
        return FakeRunner(reply)

    return _make
