"""Target registry — loads monitors.yaml and provides typed models.

The runner, the checker and the ``validate`` command all consume this.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 60

_INT_FIELDS = ("expect_status", "retries", "timeout_seconds", "interval_seconds")


class ConfigError(Exception):
    """Raised when the monitors file is missing, unreadable or invalid."""


# ── Data models ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Target:
    """One monitored endpoint with its own check policy."""

    name: str
    url: str
    method: str = "GET"
    expect_status: int = 0  # 0 = any received response counts as up
    retries: int = 0
    timeout_seconds: int = 0  # 0 = checker default
    interval_seconds: int = 0  # 0 = global interval


@dataclass
class MonitorConfig:
    """Global interval plus the ordered target list."""

    interval_seconds: int = DEFAULT_INTERVAL_SECONDS
    targets: list[Target] = field(default_factory=list)

    def interval_for(self, target: Target) -> int:
        """Effective polling interval: target override, else the global one."""
        if target.interval_seconds > 0:
            return target.interval_seconds
        return self.interval_seconds

    def get(self, name: str) -> Target | None:
        return next((t for t in self.targets if t.name == name), None)


# ── Loader ───────────────────────────────────────────────────────────────────


def load_config(path: Path | str) -> MonitorConfig:
    """Parse the monitors file. Raises ``ConfigError`` on any problem."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"cannot read {path}: {e}") from e

    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}") from e

    config = parse_config(raw or {})
    logger.info("Loaded %d targets from %s", len(config.targets), path)
    return config


def parse_config(raw: Any) -> MonitorConfig:
    if not isinstance(raw, dict):
        raise ConfigError("top level of the monitors file must be a mapping")

    interval = _int_field(raw, "interval_seconds", "global settings")
    if interval == 0:
        interval = DEFAULT_INTERVAL_SECONDS

    raw_targets = raw.get("targets") or []
    if not isinstance(raw_targets, list):
        raise ConfigError("'targets' must be a list")

    targets: list[Target] = []
    seen: set[str] = set()
    for i, entry in enumerate(raw_targets):
        target = _parse_target(entry, i)
        if target.name in seen:
            raise ConfigError(f"duplicate target name: {target.name!r}")
        seen.add(target.name)
        targets.append(target)

    return MonitorConfig(interval_seconds=interval, targets=targets)


def _parse_target(raw: Any, index: int) -> Target:
    where = f"targets[{index}]"
    if not isinstance(raw, dict):
        raise ConfigError(f"{where} must be a mapping")

    name = str(raw.get("name") or "").strip()
    if not name:
        raise ConfigError(f"{where} is missing 'name'")
    url = str(raw.get("url") or "").strip()
    if not url:
        raise ConfigError(f"target {name!r} is missing 'url'")

    values = {key: _int_field(raw, key, f"target {name!r}") for key in _INT_FIELDS}
    if values["retries"] < 0:
        raise ConfigError(f"target {name!r}: 'retries' must be >= 0")

    method = str(raw.get("method") or "GET").strip().upper() or "GET"

    return Target(name=name, url=url, method=method, **values)


def _int_field(raw: dict[str, Any], key: str, where: str) -> int:
    value = raw.get(key)
    if value is None:
        return 0
    # bool is an int subclass; `retries: yes` is a mistake, not 1
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{where}: '{key}' must be an integer, got {value!r}")
    return value
