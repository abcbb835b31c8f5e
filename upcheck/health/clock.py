"""Time source for scheduling and timestamping.

Checks, due-ness decisions and status snapshots all read the current time
through a Clock so they can be driven deterministically in tests.
Timestamps are persisted as RFC3339 text (second precision, UTC ``Z``).
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Protocol

_RFC3339_RE = re.compile(
    r"([0-9]{4})-([0-9]{2})-([0-9]{2})T([0-9]{2}):([0-9]{2}):([0-9]{2})"
    r"(\.[0-9]+)?(Z|[+-][0-9]{2}:[0-9]{2})"
)


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """Clock frozen at a given instant; moves only when told to."""

    def __init__(self, start: datetime) -> None:
        if start.tzinfo is None:
            start = start.replace(tzinfo=timezone.utc)
        self._now = start

    def now(self) -> datetime:
        return self._now

    def advance(self, seconds: float) -> datetime:
        self._now += timedelta(seconds=seconds)
        return self._now


def format_timestamp(when: datetime) -> str:
    """Render ``when`` as RFC3339 in UTC, e.g. ``2025-01-01T00:00:00Z``."""
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return when.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_timestamp(text: str) -> datetime:
    """Parse an RFC3339 date-time with offset.

    Raises ``ValueError`` for anything else: date-only strings, missing
    offsets, space separators and out-of-range fields included.
    """
    m = _RFC3339_RE.fullmatch(text or "")
    if not m:
        raise ValueError(f"not an RFC3339 timestamp: {text!r}")

    year, month, day, hour, minute, second = (int(g) for g in m.groups()[:6])
    fraction, offset = m.group(7), m.group(8)

    micros = int(fraction[1:7].ljust(6, "0")) if fraction else 0
    if offset == "Z":
        tz = timezone.utc
    else:
        sign = -1 if offset[0] == "-" else 1
        hours, minutes = int(offset[1:3]), int(offset[4:6])
        if minutes >= 60:
            raise ValueError(f"bad UTC offset in {text!r}")
        tz = timezone(sign * timedelta(hours=hours, minutes=minutes))

    return datetime(year, month, day, hour, minute, second, micros, tzinfo=tz)
