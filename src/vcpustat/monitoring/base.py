"""Data model shared by the sampling pipeline.

Snapshots are plain values: they are built fresh every cycle, passed by
parameter from the collector to the classifier, and dropped afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class VcpuSample:
    """Accounting state of one vCPU thread at one instant."""

    pid: int
    cpu_usage_ns: int  # Cumulative cpuacct.usage counter


# vCPU name (e.g. "vcpu0") -> sample, for one machine at one instant
MachineSnapshot = dict[str, VcpuSample]

# Machine name -> snapshot, for every machine discovered at one instant
MachineSnapshotSet = dict[str, MachineSnapshot]


@dataclass(frozen=True)
class SettleStatus:
    """How long a machine's emulator process has been running."""

    elapsed_seconds: int
    settled: bool


class OutcomeKind(str, Enum):
    """Classification result for one vCPU over one interval."""

    DISAPPEARED = "disappeared"
    IDENTITY_CHANGED = "identity_changed"
    ROLLED_OVER = "rolled_over"
    PANIC = "panic"
    WARN = "warn"
    PRINT = "print"
    HEALTHY = "healthy"  # Above every enabled threshold, nothing to report


@dataclass(frozen=True)
class VcpuOutcome:
    """Decision produced by the classifier for one vCPU.

    ``delta_ns`` is only set for kinds that compared usage counters
    (PANIC, WARN, PRINT, HEALTHY).
    """

    vcpu: str
    kind: OutcomeKind
    start: VcpuSample
    end: VcpuSample | None = None
    delta_ns: int | None = None

    @property
    def reportable(self) -> bool:
        return self.kind is not OutcomeKind.HEALTHY

    @property
    def triggers_panic(self) -> bool:
        """Whether the diagnostic trigger must fire for this outcome."""
        return self.kind is OutcomeKind.PANIC


@dataclass
class MachineReport:
    """Everything one classification pass produced for one machine."""

    machine: str
    settle: SettleStatus | None = None
    outcomes: list[VcpuOutcome] = field(default_factory=list)
    skipped_reason: str | None = None  # Set when the machine could not be evaluated


@dataclass
class CycleReport:
    """Result of one orchestration cycle."""

    machines: list[MachineReport] = field(default_factory=list)
    triggers_fired: int = 0

    def machine(self, name: str) -> MachineReport | None:
        """Look up the report for a machine by name."""
        for report in self.machines:
            if report.machine == name:
                return report
        return None
