"""Entity discovery for running virtual machines.

Machines are found by globbing the cpuacct hierarchy for libvirt QEMU
scopes; vCPUs are the ``vcpuN`` child cgroups of each scope.
"""

from __future__ import annotations

import glob
import logging
import re
from pathlib import Path

from vcpustat.core.constants import VCPU_GLOB, VCPU_PREFIX

logger = logging.getLogger(__name__)


class DiscoveryError(RuntimeError):
    """The discovery pattern could not be evaluated.

    This indicates a configuration or environment defect; retrying won't help.
    """


def check_pattern(pattern: str) -> None:
    """Reject bracket expressions that never close.

    glob treats an unterminated "[" as a literal and silently matches
    nothing, which would make a typo look like "no machines running".

    Raises:
        DiscoveryError: If any path component has an unterminated "["
    """
    for component in pattern.split("/"):
        i, n = 0, len(component)
        while i < n:
            if component[i] != "[":
                i += 1
                continue
            j = i + 1
            if j < n and component[j] == "!":
                j += 1
            # A "]" right after the opening bracket is a literal member
            if j < n and component[j] == "]":
                j += 1
            while j < n and component[j] != "]":
                j += 1
            if j >= n:
                raise DiscoveryError(
                    f"Invalid machine discovery pattern {pattern!r}: "
                    f"unterminated '[' in {component!r}"
                )
            i = j + 1


def discover_machines(pattern: str) -> list[Path]:
    """Return the machine scopes currently matching ``pattern``.

    Zero matches (no machine running) is a normal, empty result.

    Raises:
        DiscoveryError: If the pattern itself is malformed
    """
    check_pattern(pattern)
    try:
        matches = glob.glob(pattern)
    except (OSError, ValueError, re.error) as e:
        raise DiscoveryError(f"Invalid machine discovery pattern {pattern!r}: {e}") from e

    machines = sorted(Path(m) for m in matches)
    logger.debug(f"Discovered {len(machines)} machine(s) matching {pattern}")
    return machines


def discover_vcpus(machine_path: Path) -> list[Path]:
    """Return the vCPU cgroups of one machine, in ascending vCPU order.

    A machine that vanished since discovery simply has no vCPUs.
    """
    try:
        vcpus = [p for p in machine_path.glob(VCPU_GLOB) if p.is_dir()]
    except OSError as e:
        logger.warning(f"Can't list vCPUs of {machine_path.name}: {e}")
        return []
    return sorted(vcpus, key=lambda p: vcpu_sort_key(p.name))


def vcpu_index(name: str) -> int | None:
    """Extract the numeric index from a vCPU name ("vcpu12" -> 12)."""
    if not name.startswith(VCPU_PREFIX):
        return None
    suffix = name[len(VCPU_PREFIX) :]
    if not suffix.isdigit() or not suffix.isascii():
        return None
    return int(suffix)


def vcpu_sort_key(name: str) -> tuple[int, int, str]:
    """Sort key ordering vCPUs by numeric index.

    Names without a numeric suffix sort after every numbered vCPU, by name.
    """
    index = vcpu_index(name)
    if index is None:
        return (1, 0, name)
    return (0, index, name)
