"""Tests for the monitors file loader."""

from __future__ import annotations

from pathlib import Path

import pytest

from upcheck.targets.registry import ConfigError, MonitorConfig, Target, load_config, parse_config

FULL = """\
interval_seconds: 300
targets:
  - name: api
    url: https://api.example.com/health
    method: head
    expect_status: 200
    retries: 2
    timeout_seconds: 5
    interval_seconds: 60
  - name: site
    url: https://example.com
"""


class TestLoadConfig:
    def test_full(self, write_monitors) -> None:
        config = load_config(write_monitors(FULL))
        assert config.interval_seconds == 300
        assert [t.name for t in config.targets] == ["api", "site"]

        api = config.targets[0]
        assert api == Target(
            name="api",
            url="https://api.example.com/health",
            method="HEAD",
            expect_status=200,
            retries=2,
            timeout_seconds=5,
            interval_seconds=60,
        )

    def test_defaults(self, write_monitors) -> None:
        config = load_config(write_monitors(FULL))
        site = config.get("site")
        assert site is not None
        assert site.method == "GET"
        assert site.expect_status == 0
        assert site.retries == 0
        assert site.timeout_seconds == 0
        assert site.interval_seconds == 0

    def test_missing_global_interval(self, write_monitors) -> None:
        config = load_config(write_monitors("targets:\n  - {name: a, url: http://a}\n"))
        assert config.interval_seconds == 60

    def test_zero_global_interval(self, write_monitors) -> None:
        config = load_config(write_monitors("interval_seconds: 0\ntargets: []\n"))
        assert config.interval_seconds == 60

    def test_empty_file(self, write_monitors) -> None:
        config = load_config(write_monitors(""))
        assert config.targets == []
        assert config.interval_seconds == 60

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="cannot read"):
            load_config(tmp_path / "monitors.yaml")

    def test_bad_yaml(self, write_monitors) -> None:
        with pytest.raises(ConfigError, match="invalid YAML"):
            load_config(write_monitors("targets: [\n  - name: a\n"))


class TestValidation:
    def test_top_level_must_be_mapping(self) -> None:
        with pytest.raises(ConfigError):
            parse_config(["a", "b"])

    def test_targets_must_be_list(self) -> None:
        with pytest.raises(ConfigError, match="'targets'"):
            parse_config({"targets": {"name": "a"}})

    def test_target_must_be_mapping(self) -> None:
        with pytest.raises(ConfigError, match=r"targets\[0\]"):
            parse_config({"targets": ["http://a"]})

    def test_missing_name(self) -> None:
        with pytest.raises(ConfigError, match="'name'"):
            parse_config({"targets": [{"url": "http://a"}]})

    def test_missing_url(self) -> None:
        with pytest.raises(ConfigError, match="'url'"):
            parse_config({"targets": [{"name": "a"}]})

    def test_duplicate_names(self) -> None:
        with pytest.raises(ConfigError, match="duplicate"):
            parse_config({"targets": [{"name": "a", "url": "http://a"}, {"name": "a", "url": "http://b"}]})

    def test_negative_retries(self) -> None:
        with pytest.raises(ConfigError, match="retries"):
            parse_config({"targets": [{"name": "a", "url": "http://a", "retries": -1}]})

    @pytest.mark.parametrize("value", ["two", 1.5, True, [1]])
    def test_non_integer_fields(self, value) -> None:
        with pytest.raises(ConfigError, match="must be an integer"):
            parse_config({"targets": [{"name": "a", "url": "http://a", "timeout_seconds": value}]})

    def test_non_positive_target_interval_allowed(self) -> None:
        config = parse_config({"targets": [{"name": "a", "url": "http://a", "interval_seconds": -5}]})
        assert config.targets[0].interval_seconds == -5


class TestIntervalFor:
    def test_target_override(self) -> None:
        config = MonitorConfig(interval_seconds=300)
        assert config.interval_for(Target(name="a", url="http://a", interval_seconds=30)) == 30

    def test_global_fallback(self) -> None:
        config = MonitorConfig(interval_seconds=300)
        assert config.interval_for(Target(name="a", url="http://a")) == 300
        assert config.interval_for(Target(name="a", url="http://a", interval_seconds=-1)) == 300
