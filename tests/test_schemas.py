"""Tests for vcpustat schemas and config loading."""

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from vcpustat.core.config import load_config
from vcpustat.core.constants import MACHINE_PATTERN
from vcpustat.core.schemas import MonitorConfig, ThresholdConfig


class TestThresholdConfig:
    """Tests for ThresholdConfig schema."""

    def test_defaults(self):
        """Test that every tier is disabled by default."""
        config = ThresholdConfig()
        assert config.print_level is None
        assert config.mark_level is None
        assert config.panic_level is None
        assert config.settle_seconds == 120
        assert config.panic_enabled is False

    def test_negative_means_disabled(self):
        """Test that the -1 sentinel disables a tier."""
        config = ThresholdConfig(print_level=-1, mark_level=-5, panic_level=0)
        assert config.print_level is None
        assert config.mark_level is None
        assert config.panic_level == 0
        assert config.panic_enabled is True

    def test_negative_settle_rejected(self):
        """Test that settle time can't be negative."""
        with pytest.raises(ValidationError):
            ThresholdConfig(settle_seconds=-1)


class TestMonitorConfig:
    """Tests for MonitorConfig schema."""

    def test_defaults(self):
        """Test default values."""
        config = MonitorConfig()
        assert config.interval_seconds == 5
        assert config.machine_pattern == MACHINE_PATTERN
        assert config.proc_root == Path("/proc")
        assert config.log_file is None

    def test_interval_must_be_positive(self):
        """Test that a zero interval is rejected."""
        with pytest.raises(ValidationError):
            MonitorConfig(interval_seconds=0)

    @pytest.mark.parametrize("pattern", ["", "   ", "machine-qemu*.scope"])
    def test_bad_machine_pattern(self, pattern):
        """Test that empty and relative discovery patterns are rejected."""
        with pytest.raises(ValidationError):
            MonitorConfig(machine_pattern=pattern)

    def test_log_level_normalized(self):
        """Test that log levels are upper-cased and validated."""
        assert MonitorConfig(log_level="debug").log_level == "DEBUG"
        with pytest.raises(ValidationError):
            MonitorConfig(log_level="chatty")


class TestLoadConfig:
    """Tests for load_config."""

    def test_yaml(self, tmp_path: Path):
        """Test loading a YAML file."""
        path = tmp_path / "vcpustat.yaml"
        path.write_text(
            "interval_seconds: 10\n"
            "thresholds:\n"
            "  mark_level: 1000000\n"
            "  panic_level: -1\n"
            "  settle_seconds: 300\n"
        )
        config = load_config(path)
        assert config.interval_seconds == 10
        assert config.thresholds.mark_level == 1_000_000
        assert config.thresholds.panic_level is None
        assert config.thresholds.settle_seconds == 300

    def test_json(self, tmp_path: Path):
        """Test loading a JSON file."""
        path = tmp_path / "vcpustat.json"
        path.write_text(json.dumps({"thresholds": {"print_level": 500}}))
        assert load_config(path).thresholds.print_level == 500

    def test_empty_yaml_is_defaults(self, tmp_path: Path):
        """Test that an empty YAML file yields the defaults."""
        path = tmp_path / "vcpustat.yml"
        path.write_text("")
        assert load_config(path) == MonitorConfig()

    def test_missing_file(self, tmp_path: Path):
        """Test that a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_unsupported_format(self, tmp_path: Path):
        """Test that unknown suffixes are rejected."""
        path = tmp_path / "vcpustat.toml"
        path.write_text("")
        with pytest.raises(ValueError, match="Unsupported config format"):
            load_config(path)

    def test_invalid_values(self, tmp_path: Path):
        """Test that schema violations surface as ValidationError."""
        path = tmp_path / "vcpustat.yaml"
        path.write_text("interval_seconds: soon\n")
        with pytest.raises(ValidationError):
            load_config(path)
