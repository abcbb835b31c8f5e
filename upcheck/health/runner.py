"""Run orchestration — one pass over all configured targets.

For each target (in config order) the runner either performs a fresh check
and records it in history, or, when the target is not yet due, carries over
its last known up/down state. After all targets are processed it writes the
status snapshot and then persists the updated history.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from upcheck.targets.registry import MonitorConfig, Target

from .clock import Clock, SystemClock, format_timestamp
from .engine import CheckResult, HTTPChecker
from .history import History, HistoryPoint, HistoryStore, append_and_trim, write_json
from .scheduler import Scheduler

logger = logging.getLogger(__name__)


class StatusWriteError(Exception):
    """Raised when the status snapshot cannot be written."""


@dataclass(frozen=True)
class StatusSnapshot:
    """Latest known state of every target; replaced wholesale each run."""

    generated_at: str
    results: list[CheckResult] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "generated_at": self.generated_at,
            "results": [r.to_dict() for r in self.results],
        }


@dataclass
class RunReport:
    snapshot: StatusSnapshot
    history: History
    checked: list[str] = field(default_factory=list)  # targets probed this run
    history_path: Path | None = None  # None = history could not be saved


def write_status(path: Path | str, snapshot: StatusSnapshot) -> None:
    path = Path(path)
    try:
        write_json(path, snapshot.to_dict())
    except OSError as e:
        raise StatusWriteError(f"failed to write {path}: {e}") from e


class UptimeRunner:
    """Checks due targets, carries over the rest, and writes the outputs."""

    def __init__(
        self,
        config: MonitorConfig,
        store: HistoryStore,
        status_path: Path | str,
        checker: HTTPChecker | None = None,
        scheduler: Scheduler | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.config = config
        self.store = store
        self.status_path = Path(status_path)
        self.clock = clock or SystemClock()
        self.checker = checker or HTTPChecker(clock=self.clock)
        self.scheduler = scheduler or Scheduler(clock=self.clock)

    def run(self) -> RunReport:
        """Full pass: load history, check, write status, save history.

        Raises ``HistoryLoadError`` before any check and ``StatusWriteError``
        after them; a failed history save is logged and reported, not raised.
        """
        history = self.store.load()
        results, history, checked = self.check_targets(history)

        snapshot = StatusSnapshot(generated_at=format_timestamp(self.clock.now()), results=results)
        write_status(self.status_path, snapshot)
        logger.info("Wrote status for %d targets to %s", len(results), self.status_path)

        saved_to = self.store.save(history)
        return RunReport(snapshot=snapshot, history=history, checked=checked, history_path=saved_to)

    def check_targets(
        self, history: History,
    ) -> tuple[list[CheckResult], History, list[str]]:
        """Process every target against ``history``.

        Returns the results in config order, the updated history and the
        names of the targets that were actually probed.
        """
        results: list[CheckResult] = []
        checked: list[str] = []

        for target in self.config.targets:
            interval = self.config.interval_for(target)
            last_points = history.get(target.name, [])

            if self.scheduler.is_due(last_points, interval) or not last_points:
                result, history = self._check_and_record(target, history, interval)
                checked.append(target.name)
            else:
                result = self._carry_over(target, last_points[-1])
                logger.debug("Skipping %s: not due (interval %ds)", target.name, interval)
            results.append(result)

        return results, history, checked

    def _check_and_record(
        self, target: Target, history: History, interval: int,
    ) -> tuple[CheckResult, History]:
        result = self.checker.check(target)
        point = HistoryPoint(timestamp=result.timestamp, up=result.up)
        return result, append_and_trim(history, target.name, point, interval)

    def _carry_over(self, target: Target, latest: HistoryPoint) -> CheckResult:
        return CheckResult(
            name=target.name,
            url=target.url,
            timestamp=format_timestamp(self.clock.now()),
            up=latest.up,
            status=0,
            latency_ms=0,
        )
