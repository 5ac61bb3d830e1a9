"""Differ and classifier for vCPU usage snapshots.

Given two snapshots of the same machine taken one interval apart, each vCPU
present at the start is classified as follows (first match wins):

1. absent from the end snapshot            -> DISAPPEARED
2. pid differs between start and end       -> IDENTITY_CHANGED
3. usage counter went backwards            -> ROLLED_OVER
4. settled and delta <= panic_level        -> PANIC
5. settled and delta <= mark_level         -> WARN
6. print disabled or delta <= print_level  -> PRINT
7. otherwise                               -> HEALTHY (not reported)

Deciding to trigger a panic is kept here; performing it is the
orchestrator's job, so this module has no side effects.
"""

from __future__ import annotations

from typing import cast

from vcpustat.core.schemas import ThresholdConfig
from vcpustat.monitoring.base import (
    MachineSnapshot,
    OutcomeKind,
    SettleStatus,
    VcpuOutcome,
    VcpuSample,
)
from vcpustat.monitoring.discovery import vcpu_sort_key


def classify_delta(delta_ns: int, thresholds: ThresholdConfig, settled: bool) -> OutcomeKind:
    """Classify a non-negative usage delta against the threshold tiers."""
    if settled and thresholds.panic_level is not None and delta_ns <= thresholds.panic_level:
        return OutcomeKind.PANIC
    if settled and thresholds.mark_level is not None and delta_ns <= thresholds.mark_level:
        return OutcomeKind.WARN
    if thresholds.print_level is None or delta_ns <= thresholds.print_level:
        return OutcomeKind.PRINT
    return OutcomeKind.HEALTHY


def classify_vcpu(
    vcpu: str,
    start: VcpuSample,
    end: VcpuSample | None,
    thresholds: ThresholdConfig,
    settled: bool,
) -> VcpuOutcome:
    """Compare one vCPU's start and end samples."""
    if end is None:
        return VcpuOutcome(vcpu=vcpu, kind=OutcomeKind.DISAPPEARED, start=start)

    if end.pid != start.pid:
        # The new thread's counter has an unrelated baseline
        return VcpuOutcome(vcpu=vcpu, kind=OutcomeKind.IDENTITY_CHANGED, start=start, end=end)

    if end.cpu_usage_ns < start.cpu_usage_ns:
        return VcpuOutcome(vcpu=vcpu, kind=OutcomeKind.ROLLED_OVER, start=start, end=end)

    delta = end.cpu_usage_ns - start.cpu_usage_ns
    return VcpuOutcome(
        vcpu=vcpu,
        kind=classify_delta(delta, thresholds, settled),
        start=start,
        end=end,
        delta_ns=delta,
    )


def classify_machine(
    start: MachineSnapshot,
    end: MachineSnapshot,
    thresholds: ThresholdConfig,
    settled: bool,
) -> list[VcpuOutcome]:
    """Classify every vCPU present in ``start``, in ascending vCPU index order.

    vCPUs that only appear in ``end`` are ignored; they will be compared on
    the next cycle.
    """
    return [
        classify_vcpu(vcpu, start[vcpu], end.get(vcpu), thresholds, settled)
        for vcpu in sorted(start, key=vcpu_sort_key)
    ]


def format_machine_header(machine: str, settle: SettleStatus) -> str:
    """Summary line printed before a machine's vCPU outcomes."""
    settled = "true" if settle.settled else "false"
    return f"{machine} ({settle.elapsed_seconds} seconds, settled={settled}):"


def format_gone_header(machine: str) -> str:
    """Summary line for a machine that shut down during the interval."""
    return f"{machine} (gone):"


def format_outcome(outcome: VcpuOutcome) -> str | None:
    """Render an outcome as a report line, or None if it isn't reported."""
    kind = outcome.kind
    if kind is OutcomeKind.DISAPPEARED:
        return f" {outcome.vcpu} disappeared"
    if kind is OutcomeKind.IDENTITY_CHANGED:
        end = cast(VcpuSample, outcome.end)
        return f" PID for {outcome.vcpu} changed from {outcome.start.pid} to {end.pid}"
    if kind is OutcomeKind.ROLLED_OVER:
        end = cast(VcpuSample, outcome.end)
        return (
            f" {outcome.vcpu} usage rolled over "
            f"(start={outcome.start.cpu_usage_ns} - end={end.cpu_usage_ns}), ignoring"
        )
    if kind is OutcomeKind.HEALTHY:
        return None

    line = f" {outcome.vcpu:>7}: {outcome.delta_ns:>22}"
    if kind is OutcomeKind.PANIC:
        return f"{line} (PANIC)"
    if kind is OutcomeKind.WARN:
        return f"{line} (WARN)"
    return line
