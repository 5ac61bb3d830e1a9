"""Sampling orchestrator.

Each cycle:

    discover -> snapshot(t0) -> sleep(interval) -> per machine:
        settle state -> snapshot(t1) -> classify -> report -> trigger

Nothing survives from one cycle to the next; every machine and vCPU is
re-discovered and re-read, so stale entities correct themselves.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Protocol

from vcpustat.core.schemas import MonitorConfig
from vcpustat.monitoring.base import (
    CycleReport,
    MachineReport,
    MachineSnapshot,
    OutcomeKind,
    VcpuOutcome,
)
from vcpustat.monitoring.classifier import (
    classify_machine,
    format_gone_header,
    format_machine_header,
    format_outcome,
)
from vcpustat.monitoring.collector import collect_snapshot, collect_snapshot_set
from vcpustat.monitoring.discovery import discover_machines
from vcpustat.monitoring.settle import SettleError, SettleFailure, evaluate_settle

logger = logging.getLogger(__name__)

_OUTCOME_LEVELS = {
    OutcomeKind.DISAPPEARED: logging.WARNING,
    OutcomeKind.IDENTITY_CHANGED: logging.WARNING,
    OutcomeKind.ROLLED_OVER: logging.WARNING,
    OutcomeKind.PANIC: logging.CRITICAL,
    OutcomeKind.WARN: logging.WARNING,
    OutcomeKind.PRINT: logging.INFO,
}


class DiagnosticTrigger(Protocol):
    """Anything that can perform the host diagnostic action."""

    def fire(self) -> bool: ...


class SamplingOrchestrator:
    """Drives the fixed-interval sample/compare loop.

    Runs in the calling thread; the only blocking point is the sleep
    between the two snapshots of a cycle.
    """

    def __init__(
        self,
        config: MonitorConfig,
        trigger: DiagnosticTrigger,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            config: Validated monitor configuration
            trigger: Diagnostic action fired for PANIC outcomes
            sleep: Blocking sleep used between snapshots
            clock: Wall-clock source used for settle evaluation
        """
        self._config = config
        self._trigger = trigger
        self._sleep = sleep
        self._clock = clock

    def run(self, max_cycles: int | None = None) -> int:
        """Run cycles until ``max_cycles`` is reached, or forever if None.

        Returns:
            Number of cycles completed

        Raises:
            DiscoveryError: If the machine pattern can't be evaluated
        """
        cycles = 0
        while max_cycles is None or cycles < max_cycles:
            self.run_cycle()
            cycles += 1
        return cycles

    def run_cycle(self) -> CycleReport:
        """Run one discover/sample/sleep/sample/classify cycle."""
        machines = discover_machines(self._config.machine_pattern)
        start_snapshots = collect_snapshot_set(machines)

        self._sleep(self._config.interval_seconds)

        report = CycleReport()
        logger.info(str(datetime.now().astimezone()))
        for machine_path in machines:
            machine_report = self._compare_machine(
                machine_path, start_snapshots.get(machine_path.name, {})
            )
            report.machines.append(machine_report)
            report.triggers_fired += self._act(machine_report)
        logger.info("")
        return report

    def _compare_machine(self, machine_path: Path, start: MachineSnapshot) -> MachineReport:
        """Evaluate settle state, take the end snapshot and classify."""
        name = machine_path.name
        thresholds = self._config.thresholds

        try:
            settle = evaluate_settle(
                machine_path,
                thresholds.settle_seconds,
                proc_root=self._config.proc_root,
                clock=self._clock,
            )
        except SettleError as e:
            logger.warning(f"Can't determine uptime of {name} ({e.reason.value}): {e.detail}")
            if e.reason is not SettleFailure.MACHINE_GONE:
                return MachineReport(machine=name, skipped_reason=e.reason.value)
            # Every vCPU of a machine that shut down since t0 is reported as
            # disappeared; disappearance never triggers anything
            outcomes = classify_machine(start, {}, thresholds, settled=False)
            logger.warning(format_gone_header(name))
            self._log_outcomes(outcomes)
            return MachineReport(machine=name, outcomes=outcomes, skipped_reason=e.reason.value)

        end = collect_snapshot(machine_path)
        outcomes = classify_machine(start, end, thresholds, settle.settled)

        logger.info(format_machine_header(name, settle))
        self._log_outcomes(outcomes)
        return MachineReport(machine=name, settle=settle, outcomes=outcomes)

    def _log_outcomes(self, outcomes: list[VcpuOutcome]) -> None:
        for outcome in outcomes:
            line = format_outcome(outcome)
            if line is not None:
                logger.log(_OUTCOME_LEVELS[outcome.kind], line)

    def _act(self, machine_report: MachineReport) -> int:
        """Fire the trigger once for every PANIC outcome; return how many succeeded."""
        fired = 0
        for outcome in machine_report.outcomes:
            if outcome.triggers_panic and self._trigger.fire():
                fired += 1
        return fired
