"""Shared constants for vcpustat.

Centralized paths and sentinels so tests can point every component at a fake tree.
"""

from __future__ import annotations

# cgroup v1 cpuacct hierarchy where libvirt places one scope per QEMU machine
MACHINE_PATTERN = "/sys/fs/cgroup/cpuacct/machine.slice/machine-qemu*.scope"

# Per-machine sub-entities
VCPU_GLOB = "vcpu*"
VCPU_PREFIX = "vcpu"
EMULATOR_DIR = "emulator"

# Accounting files inside each vCPU / emulator cgroup
TASKS_FILE = "tasks"
CPU_USAGE_FILE = "cpuacct.usage"

# Magic SysRq interface
PROC_ROOT = "/proc"
SYSRQ_TRIGGER_PATH = "/proc/sysrq-trigger"
SYSRQ_CONTROL_PATH = "/proc/sys/kernel/sysrq"
SYSRQ_CRASH_COMMAND = "c\n"
SYSRQ_REQUIRED_VALUE = 1

# Threshold value accepted on input to mean "no threshold"
DISABLED_LEVEL = -1

DEFAULT_INTERVAL_SECONDS = 5
DEFAULT_SETTLE_SECONDS = 120
