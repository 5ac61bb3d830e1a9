"""Diagnostic trigger through the magic SysRq interface.

Writing ``c`` to /proc/sysrq-trigger crashes the host on purpose so kdump
can capture a vmcore while the stuck vCPU is still stuck. This is
irreversible: the host goes down.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from pathlib import Path

from vcpustat.core.constants import (
    SYSRQ_CONTROL_PATH,
    SYSRQ_CRASH_COMMAND,
    SYSRQ_REQUIRED_VALUE,
    SYSRQ_TRIGGER_PATH,
)
from vcpustat.monitoring.accounting import AccountingError, read_integer_field

logger = logging.getLogger(__name__)


class PreconditionError(RuntimeError):
    """Panic mode can't be enabled on this host."""


def check_panic_preconditions(
    control_path: Path = Path(SYSRQ_CONTROL_PATH),
    geteuid: Callable[[], int] = os.geteuid,
) -> None:
    """Verify that a panic can actually be triggered.

    Must be called once, before sampling starts.

    Raises:
        PreconditionError: If not running as root, or if kernel.sysrq isn't 1
    """
    if geteuid() != 0:
        raise PreconditionError("Enabling the panic level requires running as root")

    try:
        value = read_integer_field(control_path)
    except AccountingError as e:
        raise PreconditionError(f"Can't read SysRq control setting: {e}") from e

    if value != SYSRQ_REQUIRED_VALUE:
        raise PreconditionError(
            f"Enabling the panic level requires setting '{control_path}' to "
            f"'{SYSRQ_REQUIRED_VALUE}' (currently {value})"
        )


class SysrqTrigger:
    """Best-effort writer for the SysRq crash command.

    Failures are logged and reported through the return value, never raised:
    a broken trigger must not stop the monitor.
    """

    def __init__(self, trigger_path: Path = Path(SYSRQ_TRIGGER_PATH)) -> None:
        self._trigger_path = trigger_path

    def fire(self) -> bool:
        """Request an immediate host crash dump.

        Returns:
            True if the command was written
        """
        logger.critical(f"Triggering host panic through {self._trigger_path}")
        try:
            with open(self._trigger_path, "w", encoding="ascii") as f:
                f.write(SYSRQ_CRASH_COMMAND)
        except OSError as e:
            logger.error(f"Couldn't trigger a panic: {e}")
            return False
        return True
