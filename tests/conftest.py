"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

import httpx
import pytest

from upcheck.health.clock import FixedClock
from upcheck.health.engine import HTTPChecker

T0 = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
T0_TEXT = "2025-01-01T12:00:00Z"


class FakeEndpoint:
    """httpx.MockTransport handler that replays scripted outcomes.

    Each outcome is an int (HTTP status) or an exception class to raise.
    The last outcome repeats once the script runs out.
    """

    def __init__(self, *outcomes: int | type[Exception]) -> None:
        self.outcomes = list(outcomes) or [200]
        self.requests: list[httpx.Request] = []

    @property
    def calls(self) -> int:
        return len(self.requests)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self.outcomes[min(len(self.requests), len(self.outcomes)) - 1]
        if isinstance(outcome, int):
            return httpx.Response(outcome)
        raise outcome(f"attempt {len(self.requests)} failed", request=request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(T0)


@pytest.fixture
def sleeps() -> list[float]:
    """Records every back-off pause instead of sleeping."""
    return []


@pytest.fixture
def make_checker(clock: FixedClock, sleeps: list[float]) -> Callable[[FakeEndpoint], HTTPChecker]:
    def _make(endpoint: FakeEndpoint) -> HTTPChecker:
        return HTTPChecker(clock=clock, transport=endpoint.transport, sleep=sleeps.append)

    return _make


@pytest.fixture
def write_monitors(tmp_path: Path) -> Callable[[str], Path]:
    def _write(text: str) -> Path:
        path = tmp_path / "monitors.yaml"
        path.write_text(text, encoding="utf-8")
        return path

    return _write
