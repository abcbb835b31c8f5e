from upcheck.targets.registry import (
    ConfigError,
    MonitorConfig,
    Target,
    load_config,
    parse_config,
)

__all__ = [
    "ConfigError",
    "MonitorConfig",
    "Target",
    "load_config",
    "parse_config",
]
