"""Snapshot collector.

Reads every vCPU of a machine through the accounting reader and assembles
a MachineSnapshot holding only the vCPUs that could be read.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from vcpustat.monitoring.accounting import AccountingError, read_vcpu_sample
from vcpustat.monitoring.base import MachineSnapshot, MachineSnapshotSet
from vcpustat.monitoring.discovery import discover_vcpus

logger = logging.getLogger(__name__)


def collect_snapshot(machine_path: Path) -> MachineSnapshot:
    """Collect a snapshot of every readable vCPU of one machine.

    Unreadable or malformed vCPUs are logged and left out; a machine with
    no readable vCPU yields an empty snapshot.
    """
    snapshot: MachineSnapshot = {}
    for vcpu_path in discover_vcpus(machine_path):
        try:
            snapshot[vcpu_path.name] = read_vcpu_sample(vcpu_path)
        except AccountingError as e:
            logger.warning(f"Skipping {machine_path.name}/{vcpu_path.name}: {e}")
    return snapshot


def collect_snapshot_set(machine_paths: Iterable[Path]) -> MachineSnapshotSet:
    """Collect snapshots for several machines, keyed by machine name."""
    return {path.name: collect_snapshot(path) for path in machine_paths}
