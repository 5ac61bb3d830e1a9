"""Accounting reader for cgroup v1 cpuacct pseudo-files.

Each vCPU cgroup exposes two integer-bearing files:

- tasks: thread id(s) of the vCPU, one per line (the first one is used)
- cpuacct.usage: cumulative CPU time in nanoseconds

Nothing above this module ever deals with raw file contents.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from vcpustat.core.constants import CPU_USAGE_FILE, TASKS_FILE
from vcpustat.monitoring.base import VcpuSample

logger = logging.getLogger(__name__)

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


class AccountingError(Exception):
    """Base class for per-entity accounting failures."""

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path


class ReadError(AccountingError):
    """The accounting file is missing or unreadable."""


class ParseError(AccountingError):
    """The first line of the accounting file is not a base-10 integer."""


def parse_integer(content: str) -> int | None:
    """Parse the first line of ``content`` as a base-10 integer.

    Surrounding whitespace, digit-group underscores and anything after the
    first newline are not accepted as part of the number.

    Returns:
        The parsed integer, or None if the first line is not an integer
    """
    first_line = content.split("\n", 1)[0]
    if not _INTEGER_RE.fullmatch(first_line):
        return None
    return int(first_line)


def read_integer_field(path: Path) -> int:
    """Read an integer-bearing pseudo-file.

    Args:
        path: File to read

    Returns:
        Integer value of the file's first line

    Raises:
        ReadError: If the file can't be opened or read
        ParseError: If the first line is not an integer
    """
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise ReadError(path, e.strerror or str(e)) from e

    try:
        content = raw.decode("ascii")
    except UnicodeDecodeError as e:
        raise ParseError(path, f"non-ASCII content {raw[:32]!r}") from e

    value = parse_integer(content)
    if value is None:
        first_line = content.split("\n", 1)[0]
        raise ParseError(path, f"invalid integer {first_line!r}")
    return value


def read_vcpu_sample(vcpu_path: Path) -> VcpuSample:
    """Read the pid and cumulative usage of one vCPU cgroup.

    Raises:
        AccountingError: If either file can't be read or parsed
    """
    pid = read_integer_field(vcpu_path / TASKS_FILE)
    usage = read_integer_field(vcpu_path / CPU_USAGE_FILE)
    return VcpuSample(pid=pid, cpu_usage_ns=usage)
