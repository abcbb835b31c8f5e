"""Rolling up/down history — JSON persistence and per-target trimming.

The history file maps target name to an oldest-first list of
``{"timestamp": ..., "up": ...}`` points. Each series is capped at one day's
worth of checks for its interval, so the file never grows without bound.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Optional

from pydantic import StrictBool, StrictStr, TypeAdapter, ValidationError

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86_400
DEFAULT_INTERVAL_SECONDS = 60


class HistoryLoadError(Exception):
    """Raised when an existing history file cannot be read or decoded."""


@dataclass(frozen=True)
class HistoryPoint:
    """One retained (timestamp, up) observation."""

    timestamp: StrictStr = ""
    up: StrictBool = False


History = dict[str, list[HistoryPoint]]

_HISTORY_ADAPTER: TypeAdapter[Optional[dict[str, Optional[list[HistoryPoint]]]]] = TypeAdapter(
    Optional[dict[str, Optional[list[HistoryPoint]]]]
)


# ── Trimming ─────────────────────────────────────────────────────────────────


def history_cap(interval: int) -> int:
    """Points kept per target: one day of checks at ``interval``, at least 1."""
    if interval <= 0:
        interval = DEFAULT_INTERVAL_SECONDS
    return max(1, SECONDS_PER_DAY // interval)


def append_and_trim(history: History, name: str, point: HistoryPoint, interval: int) -> History:
    """Return a copy of ``history`` with ``point`` appended to ``name``'s series.

    The series keeps only its most recent ``history_cap(interval)`` points.
    Other series are shared with the input, which is left untouched.
    """
    series = [*history.get(name, []), point]
    cap = history_cap(interval)
    if len(series) > cap:
        series = series[-cap:]
    updated = dict(history)
    updated[name] = series
    return updated


# ── JSON persistence ─────────────────────────────────────────────────────────


def load_history(path: Path | str) -> History:
    """Read a history file. Missing or empty files yield an empty history."""
    path = Path(path)
    try:
        raw = path.read_bytes()
    except FileNotFoundError:
        logger.info("No history at %s, starting fresh", path)
        return {}
    except OSError as e:
        raise HistoryLoadError(f"cannot read {path}: {e}") from e

    if not raw.strip():
        return {}

    try:
        parsed = _HISTORY_ADAPTER.validate_json(raw)
    except ValidationError as e:
        raise HistoryLoadError(f"malformed history in {path}: {e}") from e

    history: History = {name: list(points or []) for name, points in (parsed or {}).items()}
    logger.debug("Loaded history for %d targets from %s", len(history), path)
    return history


def history_to_dict(history: History) -> dict[str, list[dict[str, Any]]]:
    return {name: [asdict(p) for p in points] for name, points in history.items()}


def save_history(path: Path | str, history: History) -> None:
    """Write ``history`` as indented JSON with sorted keys. Errors propagate."""
    write_json(Path(path), history_to_dict(history), sort_keys=True)


def write_json(path: Path, data: Any, sort_keys: bool = False) -> None:
    """Write ``data`` to ``path`` via a sibling temp file, creating parent dirs."""
    text = json.dumps(data, ensure_ascii=False, indent=2, sort_keys=sort_keys) + "\n"
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    try:
        tmp.write_text(text, encoding="utf-8")
        tmp.replace(path)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise


# ── Store ────────────────────────────────────────────────────────────────────


class HistoryStore:
    """History file with a fallback location for when the primary is unwritable."""

    def __init__(self, path: Path | str, fallback_path: Path | str | None = None) -> None:
        self.path = Path(path)
        self.fallback_path = Path(fallback_path) if fallback_path else None

    def load(self) -> History:
        return load_history(self.path)

    def save(self, history: History) -> Path | None:
        """Persist ``history``; returns the path written, or None if every write failed."""
        try:
            save_history(self.path, history)
            return self.path
        except OSError as e:
            logger.warning("Failed to write history to %s: %s", self.path, e)

        if self.fallback_path is None or self.fallback_path == self.path:
            logger.error("History not saved: no usable fallback path")
            return None

        try:
            save_history(self.fallback_path, history)
        except OSError as e:
            logger.error("Failed to write fallback history to %s: %s", self.fallback_path, e)
            return None

        logger.info("History written to fallback %s", self.fallback_path)
        return self.fallback_path
