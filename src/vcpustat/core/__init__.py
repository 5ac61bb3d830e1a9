"""Core module - configuration and schemas."""

from __future__ import annotations

from vcpustat.core.config import load_config
from vcpustat.core.constants import DISABLED_LEVEL, MACHINE_PATTERN
from vcpustat.core.schemas import MonitorConfig, ThresholdConfig

__all__ = [
    "DISABLED_LEVEL",
    "MACHINE_PATTERN",
    "MonitorConfig",
    "ThresholdConfig",
    "load_config",
]
