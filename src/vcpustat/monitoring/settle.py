"""Settle-time evaluation.

A machine is "settled" once its emulator process has been around for at
least ``settle_seconds``. Young machines legitimately show near-zero vCPU
usage while booting, so WARN and PANIC tags are suppressed for them.

The age is taken from the modification time of ``/proc/<emulator pid>``,
which the kernel sets when the process directory is instantiated.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from enum import Enum
from pathlib import Path

from vcpustat.core.constants import EMULATOR_DIR, TASKS_FILE
from vcpustat.monitoring.accounting import AccountingError, read_integer_field
from vcpustat.monitoring.base import SettleStatus


class SettleFailure(str, Enum):
    """Why a machine's settle state could not be determined."""

    MACHINE_GONE = "machine_gone"
    NO_CONTROL_PROCESS = "no_control_process"
    NO_PROCESS_METADATA = "no_process_metadata"


class SettleError(RuntimeError):
    """Settle state is unavailable; the machine is skipped for this pass."""

    def __init__(self, machine: str, reason: SettleFailure, detail: str) -> None:
        super().__init__(f"{machine}: {reason.value}: {detail}")
        self.machine = machine
        self.reason = reason
        self.detail = detail


def find_emulator_pid(machine_path: Path) -> int:
    """Return the pid of the machine's emulator (QEMU main) process.

    Raises:
        SettleError: MACHINE_GONE if the scope vanished, NO_CONTROL_PROCESS
            if emulator/tasks can't be read or parsed
    """
    try:
        return read_integer_field(machine_path / EMULATOR_DIR / TASKS_FILE)
    except AccountingError as e:
        # Distinguish a machine that shut down from one that never had a
        # readable emulator cgroup
        if not machine_path.exists():
            raise SettleError(machine_path.name, SettleFailure.MACHINE_GONE, str(e)) from e
        raise SettleError(machine_path.name, SettleFailure.NO_CONTROL_PROCESS, str(e)) from e


def evaluate_settle(
    machine_path: Path,
    settle_seconds: int,
    proc_root: Path = Path("/proc"),
    clock: Callable[[], float] = time.time,
) -> SettleStatus:
    """Compute how long a machine has been running and whether it is settled.

    Args:
        machine_path: Machine scope cgroup
        settle_seconds: Minimum age for the machine to count as settled
        proc_root: procfs mount point
        clock: Wall-clock source (seconds since the epoch)

    Returns:
        SettleStatus with whole elapsed seconds

    Raises:
        SettleError: If the emulator process or its /proc entry can't be found
    """
    pid = find_emulator_pid(machine_path)
    proc_dir = proc_root / str(pid)

    try:
        mtime = proc_dir.stat().st_mtime
    except OSError as e:
        if not machine_path.exists():
            raise SettleError(machine_path.name, SettleFailure.MACHINE_GONE, str(e)) from e
        raise SettleError(
            machine_path.name, SettleFailure.NO_PROCESS_METADATA, f"can't stat {proc_dir}: {e}"
        ) from e

    elapsed = int(clock() - mtime)
    return SettleStatus(elapsed_seconds=elapsed, settled=elapsed >= settle_seconds)
