"""Pytest fixtures for ser tests."""

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
from fakes import TEST_UID, FakeLaunchctl, FakeSystemctl

from ser.control.launchctl import LaunchctlBackend
from ser.control.systemctl import SystemctlBackend
from ser.models.service import ServiceScope
from ser.platform.linux import LinuxService
from ser.platform.macos import MacService


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point HOME at a temporary directory and clear ser's environment.

    Returns:
        The temporary home directory.
    """
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("SER_CONFIG", raising=False)
    monkeypatch.delenv("SER_SCOPE", raising=False)
    return home


@pytest.fixture(autouse=True)
def restore_logging() -> Iterator[None]:
    """Undo the root logger setup done by each CLI invocation."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def fake_launchctl() -> FakeLaunchctl:
    """Create a fake launchctl."""
    return FakeLaunchctl()


@pytest.fixture
def mac_dirs(tmp_path: Path) -> dict[ServiceScope, Path]:
    """Create empty LaunchAgents and LaunchDaemons directories.

    Returns:
        The directory for each scope.
    """
    dirs = {
        ServiceScope.USER: tmp_path / "LaunchAgents",
        ServiceScope.SYSTEM: tmp_path / "LaunchDaemons",
    }
    for directory in dirs.values():
        directory.mkdir()
    return dirs


@pytest.fixture
def mac_service(fake_launchctl: FakeLaunchctl, mac_dirs: dict[ServiceScope, Path]) -> MacService:
    """Create a MacService over temporary directories and a fake launchctl."""
    return MacService(
        backend=LaunchctlBackend(fake_launchctl, uid=TEST_UID),
        user_dirs=[mac_dirs[ServiceScope.USER]],
        system_dirs=[mac_dirs[ServiceScope.SYSTEM]],
    )


@pytest.fixture
def linux_dirs(tmp_path: Path) -> dict[ServiceScope, list[Path]]:
    """Create empty user and system unit directories, two per scope.

    Returns:
        The directories for each scope, highest precedence first.
    """
    dirs = {
        ServiceScope.USER: [tmp_path / "user" / "config", tmp_path / "user" / "lib"],
        ServiceScope.SYSTEM: [tmp_path / "system" / "etc", tmp_path / "system" / "lib"],
    }
    for directories in dirs.values():
        for directory in directories:
            directory.mkdir(parents=True)
    return dirs


@pytest.fixture
def fake_systemctl(linux_dirs: dict[ServiceScope, list[Path]]) -> FakeSystemctl:
    """Create a fake systemctl that sees the temporary unit directories."""
    return FakeSystemctl(linux_dirs)


@pytest.fixture
def linux_service(
    fake_systemctl: FakeSystemctl, linux_dirs: dict[ServiceScope, list[Path]]
) -> LinuxService:
    """Create a LinuxService over temporary directories and a fake systemctl."""
    return LinuxService(
        backend=SystemctlBackend(fake_systemctl),
        user_dirs=linux_dirs[ServiceScope.USER],
        system_dirs=linux_dirs[ServiceScope.SYSTEM],
    )


@pytest.fixture(params=["macos", "linux"])
def platform_service(
    request: pytest.FixtureRequest,
) -> MacService | LinuxService:
    """Each platform variant in turn."""
    fixture = "mac_service" if request.param == "macos" else "linux_service"
    service: MacService | LinuxService = request.getfixturevalue(fixture)
    return service
