"""Pydantic schemas for vcpustat.

This module defines the configuration contracts consumed by the sampling
pipeline: the three-tier threshold policy and the monitor settings.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from vcpustat.core.constants import (
    DEFAULT_INTERVAL_SECONDS,
    DEFAULT_SETTLE_SECONDS,
    MACHINE_PATTERN,
    PROC_ROOT,
    SYSRQ_CONTROL_PATH,
    SYSRQ_TRIGGER_PATH,
)


class ThresholdConfig(BaseModel):
    """Usage thresholds applied to per-interval vCPU deltas.

    All levels are nanoseconds of CPU time consumed during one interval.
    ``None`` disables a tier; negative values (the historical ``-1``) are
    normalized to ``None``.

    Attributes:
        print_level: Only report deltas equal or lower than this
        mark_level: Tag deltas equal or lower than this with WARN (settled machines only)
        panic_level: Trigger a host panic for deltas equal or lower than this
            (settled machines only)
        settle_seconds: Machines younger than this never get WARN or PANIC tags
    """

    print_level: int | None = Field(default=None, description="Print threshold (ns)")
    mark_level: int | None = Field(default=None, description="WARN threshold (ns)")
    panic_level: int | None = Field(default=None, description="PANIC threshold (ns)")
    settle_seconds: int = Field(default=DEFAULT_SETTLE_SECONDS, ge=0)

    @field_validator("print_level", "mark_level", "panic_level")
    @classmethod
    def normalize_disabled(cls, v: int | None) -> int | None:
        """Map negative levels to the disabled state."""
        if v is not None and v < 0:
            return None
        return v

    @property
    def panic_enabled(self) -> bool:
        return self.panic_level is not None


class MonitorConfig(BaseModel):
    """Top-level monitor configuration.

    This is the configuration loaded from YAML/JSON files and overridden
    by command-line flags.
    """

    interval_seconds: int = Field(
        default=DEFAULT_INTERVAL_SECONDS, ge=1, description="Sampling interval"
    )
    thresholds: ThresholdConfig = Field(default_factory=ThresholdConfig)
    machine_pattern: str = Field(
        default=MACHINE_PATTERN, description="Glob matching one cgroup scope per machine"
    )
    proc_root: Path = Field(default=Path(PROC_ROOT))
    sysrq_trigger_path: Path = Field(default=Path(SYSRQ_TRIGGER_PATH))
    sysrq_control_path: Path = Field(default=Path(SYSRQ_CONTROL_PATH))
    log_file: Path | None = Field(default=None, description="Log to this file as well")
    log_level: str = Field(default="INFO")

    @field_validator("machine_pattern")
    @classmethod
    def validate_machine_pattern(cls, v: str) -> str:
        """Discovery patterns must be absolute so results don't depend on the CWD."""
        v = v.strip()
        if not v:
            raise ValueError("machine_pattern must not be empty")
        if not v.startswith("/"):
            raise ValueError(f"machine_pattern must be an absolute path pattern, got {v!r}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level
