"""Shared fixtures: a fake cpuacct hierarchy and procfs under tmp_path."""

import os
from pathlib import Path

import pytest


class FakeHost:
    """Builds machine scopes and /proc entries the way libvirt lays them out."""

    def __init__(self, root: Path) -> None:
        self.cgroup_root = root / "cpuacct" / "machine.slice"
        self.proc_root = root / "proc"
        self.cgroup_root.mkdir(parents=True)
        self.proc_root.mkdir(parents=True)

    @property
    def pattern(self) -> str:
        return str(self.cgroup_root / "machine-qemu*.scope")

    def machine_path(self, name: str) -> Path:
        return self.cgroup_root / f"machine-qemu\\x2d{name}.scope"

    def add_machine(
        self, name: str, emulator_pid: int = 1000, started_at: float | None = None
    ) -> Path:
        machine = self.machine_path(name)
        emulator = machine / "emulator"
        emulator.mkdir(parents=True)
        (emulator / "tasks").write_text(f"{emulator_pid}\n")

        proc_dir = self.proc_root / str(emulator_pid)
        proc_dir.mkdir(exist_ok=True)
        if started_at is not None:
            os.utime(proc_dir, (started_at, started_at))
        return machine

    def set_vcpu(self, machine: Path, vcpu: str, pid: int, usage: int | str) -> Path:
        vcpu_path = machine / vcpu
        vcpu_path.mkdir(exist_ok=True)
        (vcpu_path / "tasks").write_text(f"{pid}\n")
        (vcpu_path / "cpuacct.usage").write_text(f"{usage}\n")
        return vcpu_path


@pytest.fixture
def fake_host(tmp_path: Path) -> FakeHost:
    return FakeHost(tmp_path)
