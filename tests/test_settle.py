"""Tests for settle-time evaluation."""

import os
import shutil

import pytest

from vcpustat.monitoring.settle import SettleError, SettleFailure, evaluate_settle

NOW = 1_700_000_000.0


class TestEvaluateSettle:
    """Tests for evaluate_settle."""

    def test_settled_machine(self, fake_host):
        """Test a machine running longer than the settle time."""
        machine = fake_host.add_machine("1-web", emulator_pid=1234, started_at=NOW - 600)

        status = evaluate_settle(machine, 120, proc_root=fake_host.proc_root, clock=lambda: NOW)

        assert status.elapsed_seconds == 600
        assert status.settled is True

    def test_young_machine(self, fake_host):
        """Test a machine still booting."""
        machine = fake_host.add_machine("1-web", emulator_pid=1234, started_at=NOW - 30.7)

        status = evaluate_settle(machine, 120, proc_root=fake_host.proc_root, clock=lambda: NOW)

        assert status.elapsed_seconds == 30
        assert status.settled is False

    def test_boundary_is_settled(self, fake_host):
        """Test that elapsed == settle time counts as settled."""
        machine = fake_host.add_machine("1-web", emulator_pid=1234, started_at=NOW - 120)
        status = evaluate_settle(machine, 120, proc_root=fake_host.proc_root, clock=lambda: NOW)
        assert status.settled is True

    def test_zero_settle_time(self, fake_host):
        """Test that a zero settle time settles every machine immediately."""
        machine = fake_host.add_machine("1-web", emulator_pid=1234, started_at=NOW)
        status = evaluate_settle(machine, 0, proc_root=fake_host.proc_root, clock=lambda: NOW)
        assert status.settled is True

    def test_missing_emulator_tasks(self, fake_host):
        """Test a machine without a readable emulator cgroup."""
        machine = fake_host.add_machine("1-web", started_at=NOW)
        os.remove(machine / "emulator" / "tasks")

        with pytest.raises(SettleError) as exc_info:
            evaluate_settle(machine, 120, proc_root=fake_host.proc_root, clock=lambda: NOW)

        assert exc_info.value.reason is SettleFailure.NO_CONTROL_PROCESS

    def test_missing_proc_entry(self, fake_host):
        """Test an emulator pid with no /proc entry."""
        machine = fake_host.add_machine("1-web", emulator_pid=1234, started_at=NOW)
        (fake_host.proc_root / "1234").rmdir()

        with pytest.raises(SettleError) as exc_info:
            evaluate_settle(machine, 120, proc_root=fake_host.proc_root, clock=lambda: NOW)

        assert exc_info.value.reason is SettleFailure.NO_PROCESS_METADATA

    def test_machine_gone(self, fake_host):
        """Test a machine that shut down after discovery."""
        machine = fake_host.add_machine("1-web", started_at=NOW)
        shutil.rmtree(machine)

        with pytest.raises(SettleError) as exc_info:
            evaluate_settle(machine, 120, proc_root=fake_host.proc_root, clock=lambda: NOW)

        assert exc_info.value.reason is SettleFailure.MACHINE_GONE
        assert exc_info.value.machine == machine.name
