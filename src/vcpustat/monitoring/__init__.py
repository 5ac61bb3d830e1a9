"""Monitoring module - vCPU usage sampling pipeline.

Components, leaves first:
- accounting: integer reads from cpuacct pseudo-files
- discovery: machine scopes and their vCPU cgroups
- collector: per-machine snapshots
- settle: machine age and settle state
- classifier: snapshot differ and threshold classification
- trigger: SysRq crash-dump trigger
- orchestrator: the fixed-interval loop
"""

from __future__ import annotations

from vcpustat.monitoring.accounting import (
    AccountingError,
    ParseError,
    ReadError,
    read_integer_field,
    read_vcpu_sample,
)
from vcpustat.monitoring.base import (
    CycleReport,
    MachineReport,
    MachineSnapshot,
    MachineSnapshotSet,
    OutcomeKind,
    SettleStatus,
    VcpuOutcome,
    VcpuSample,
)
from vcpustat.monitoring.classifier import classify_machine, classify_vcpu, format_outcome
from vcpustat.monitoring.collector import collect_snapshot, collect_snapshot_set
from vcpustat.monitoring.discovery import DiscoveryError, discover_machines, discover_vcpus
from vcpustat.monitoring.orchestrator import SamplingOrchestrator
from vcpustat.monitoring.settle import SettleError, SettleFailure, evaluate_settle
from vcpustat.monitoring.trigger import PreconditionError, SysrqTrigger, check_panic_preconditions

__all__ = [
    "AccountingError",
    "CycleReport",
    "DiscoveryError",
    "MachineReport",
    "MachineSnapshot",
    "MachineSnapshotSet",
    "OutcomeKind",
    "ParseError",
    "PreconditionError",
    "ReadError",
    "SamplingOrchestrator",
    "SettleError",
    "SettleFailure",
    "SettleStatus",
    "SysrqTrigger",
    "VcpuOutcome",
    "VcpuSample",
    "check_panic_preconditions",
    "classify_machine",
    "classify_vcpu",
    "collect_snapshot",
    "collect_snapshot_set",
    "discover_machines",
    "discover_vcpus",
    "evaluate_settle",
    "format_outcome",
    "read_integer_field",
    "read_vcpu_sample",
]
