from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Central configuration loaded from environment / .env file."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    # Monitors file (targets + global interval)
    monitors_file: str = "monitors.yaml"

    # Output files
    output_dir: str = "gh-pages"
    history_filename: str = "history.json"
    fallback_history_file: str = "history.json"  # used when output_dir is not writable
    status_file: str = "status.json"

    # Checker defaults (per-target settings win)
    default_timeout_seconds: float = 10.0
    retry_delay_seconds: float = 0.2

    # Logging
    log_level: str = "INFO"

    @property
    def history_file(self) -> Path:
        return Path(self.output_dir) / self.history_filename


settings = Settings()
