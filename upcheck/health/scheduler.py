"""Check scheduler — decides whether a target is due for a new check.

A target is due once its interval has elapsed since the most recent history
point. Targets with no history, or whose last point cannot be parsed, are
always due so a corrupt record never silences a check.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import timedelta

from .clock import Clock, SystemClock, parse_timestamp
from .history import DEFAULT_INTERVAL_SECONDS, HistoryPoint

logger = logging.getLogger(__name__)


class Scheduler:
    """Due-ness decisions against an injectable clock."""

    def __init__(self, clock: Clock | None = None) -> None:
        self.clock = clock or SystemClock()

    def is_due(self, last_points: Sequence[HistoryPoint], interval: int) -> bool:
        if interval <= 0:
            interval = DEFAULT_INTERVAL_SECONDS
        if not last_points:
            return True

        latest = last_points[-1]
        try:
            last_at = parse_timestamp(latest.timestamp)
        except ValueError:
            logger.warning("Unparseable history timestamp %r, treating as due", latest.timestamp)
            return True

        return self.clock.now() >= last_at + timedelta(seconds=interval)
