"""Unit tests for the systemctl control backend."""

from pathlib import Path

import pytest
from fakes import FakeSystemctl

from ser.control.systemctl import SystemctlBackend, parse_show_output
from ser.exceptions import DaemonUnavailableError, PermissionDeniedError
from ser.models.service import ServiceDescriptor, ServiceScope, ServiceState


@pytest.fixture
def backend(fake_systemctl: FakeSystemctl) -> SystemctlBackend:
    """Create a systemctl backend over the fake runner."""
    return SystemctlBackend(fake_systemctl)


@pytest.fixture
def unit(linux_dirs: dict[ServiceScope, list[Path]]) -> ServiceDescriptor:
    """Write a user unit file and return its descriptor."""
    path = linux_dirs[ServiceScope.USER][0] / "demo.service"
    path.write_text("[Service]\nExecStart=/bin/sleep 100\n")
    return ServiceDescriptor(
        name="demo", program="/bin/sleep", arguments=["100"], source_path=path
    )


class TestParseShowOutput:
    """Tests for parse_show_output."""

    def test_running(self) -> None:
        """An active unit should be running with its main pid."""
        status = parse_show_output(
            "LoadState=loaded\nActiveState=active\nSubState=running\nExecMainStatus=0\nMainPID=321\n"
        )
        assert status.state == ServiceState.RUNNING
        assert status.pid == 321
        assert status.detail == "running"

    def test_exited_oneshot_has_no_pid(self) -> None:
        """MainPID=0 should not be reported as a pid."""
        status = parse_show_output("LoadState=loaded\nActiveState=active\nSubState=exited\nMainPID=0\n")
        assert status.is_running
        assert status.pid is None

    def test_inactive(self) -> None:
        """An inactive unit should be stopped."""
        status = parse_show_output("LoadState=loaded\nActiveState=inactive\nSubState=dead\n")
        assert status.state == ServiceState.STOPPED

    def test_failed(self) -> None:
        """A failed unit should carry its exit status."""
        status = parse_show_output(
            "LoadState=loaded\nActiveState=failed\nSubState=failed\nExecMainStatus=203\n"
        )
        assert status.state == ServiceState.ERROR
        assert status.code == 203

    def test_failed_by_signal(self) -> None:
        """A failure without an exit status should still be an error."""
        status = parse_show_output("LoadState=loaded\nActiveState=failed\nExecMainStatus=0\n")
        assert status.code == 1

    @pytest.mark.parametrize("load_state", ["not-found", "masked"])
    def test_not_loaded(self, load_state: str) -> None:
        """Units systemd cannot load should be unknown."""
        status = parse_show_output(f"LoadState={load_state}\nActiveState=inactive\n")
        assert status.state == ServiceState.UNKNOWN
        assert status.detail == load_state


class TestCommands:
    """Tests for the systemctl command lines."""

    def test_user_scope_uses_user_manager(
        self, backend: SystemctlBackend, fake_systemctl: FakeSystemctl, unit: ServiceDescriptor
    ) -> None:
        """User units should be controlled with --user."""
        backend.query_status(unit)
        assert fake_systemctl.calls[0][:4] == ["systemctl", "--user", "show", "demo.service"]

    def test_system_scope(self, backend: SystemctlBackend, fake_systemctl: FakeSystemctl) -> None:
        """System units should be controlled without --user."""
        descriptor = ServiceDescriptor(name="demo", program="/bin/true", scope=ServiceScope.SYSTEM)
        backend.query_status(descriptor)
        assert "--user" not in fake_systemctl.calls[0]

    def test_log_command(self, backend: SystemctlBackend, unit: ServiceDescriptor) -> None:
        """Logs should come from the journal."""
        assert backend.log_command(unit, 10, follow=True) == [
            "journalctl",
            "--user",
            "-u",
            "demo.service",
            "-n",
            "10",
            "-f",
            "--no-pager",
        ]


class TestStartStop:
    """Tests for idempotent start and stop."""

    def test_start(
        self, backend: SystemctlBackend, fake_systemctl: FakeSystemctl, unit: ServiceDescriptor
    ) -> None:
        """Starting a stopped unit should run systemctl start."""
        backend.start(unit)

        assert fake_systemctl.verbs() == ["show", "start"]
        assert backend.query_status(unit).is_running

    def test_start_twice_is_noop(
        self, backend: SystemctlBackend, fake_systemctl: FakeSystemctl, unit: ServiceDescriptor
    ) -> None:
        """Starting a running unit should only query it."""
        backend.start(unit)
        pid = backend.query_status(unit).pid
        fake_systemctl.calls.clear()

        backend.start(unit)

        assert fake_systemctl.verbs() == ["show"]
        assert backend.query_status(unit).pid == pid

    def test_stop_twice_succeeds(self, backend: SystemctlBackend, unit: ServiceDescriptor) -> None:
        """Stopping a stopped unit should succeed."""
        backend.start(unit)
        backend.stop(unit)
        backend.stop(unit)

        assert backend.query_status(unit).state == ServiceState.STOPPED

    def test_stop_unknown_unit_is_noop(
        self, backend: SystemctlBackend, fake_systemctl: FakeSystemctl
    ) -> None:
        """Stopping a unit systemd cannot find should not run stop."""
        descriptor = ServiceDescriptor(name="ghost", program="/bin/true")
        backend.stop(descriptor)
        assert fake_systemctl.verbs() == ["show"]

    def test_start_unloaded_reloads_first(
        self, backend: SystemctlBackend, fake_systemctl: FakeSystemctl, unit: ServiceDescriptor
    ) -> None:
        """A unit systemd does not know yet should trigger a daemon-reload."""
        fake_systemctl.failures["show"] = (0, "")
        backend.start(unit)
        assert fake_systemctl.verbs()[:2] == ["show", "daemon-reload"]

    def test_restart_is_atomic(
        self, backend: SystemctlBackend, fake_systemctl: FakeSystemctl, unit: ServiceDescriptor
    ) -> None:
        """Restarting a running unit should be a single systemctl restart."""
        backend.start(unit)
        pid = backend.query_status(unit).pid
        fake_systemctl.calls.clear()

        backend.restart(unit)

        assert fake_systemctl.verbs() == ["show", "restart"]
        assert "stop" not in fake_systemctl.verbs()
        assert backend.query_status(unit).pid != pid


class TestErrorMapping:
    """Failed commands should map onto typed errors."""

    def test_permission_denied(
        self, backend: SystemctlBackend, fake_systemctl: FakeSystemctl, unit: ServiceDescriptor
    ) -> None:
        """Polkit refusals should raise PermissionDeniedError."""
        fake_systemctl.failures["start"] = (
            4,
            "Failed to start demo.service: Access denied\nSee system logs and 'systemctl status demo.service' for details.",
        )
        with pytest.raises(PermissionDeniedError):
            backend.start(unit)

    def test_no_user_bus(
        self, backend: SystemctlBackend, fake_systemctl: FakeSystemctl, unit: ServiceDescriptor
    ) -> None:
        """A missing user bus should raise DaemonUnavailableError."""
        fake_systemctl.failures["show"] = (
            1,
            "Failed to connect to bus: No medium found",
        )
        with pytest.raises(DaemonUnavailableError):
            backend.query_status(unit)
