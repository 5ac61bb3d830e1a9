"""vcpustat - detect stuck vCPUs of QEMU/KVM machines from cgroup accounting."""

from __future__ import annotations

from vcpustat.core.schemas import MonitorConfig, ThresholdConfig
from vcpustat.monitoring.orchestrator import SamplingOrchestrator

__version__ = "0.2.0"

__all__ = [
    "MonitorConfig",
    "SamplingOrchestrator",
    "ThresholdConfig",
    "__version__",
]
