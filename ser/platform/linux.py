"""Linux systemd platform service."""

from pathlib import Path

from ser.codecs.unit import UnitFileCodec
from ser.control.systemctl import SystemctlBackend
from ser.models.service import ServiceDescriptor
from ser.platform.base import PlatformService

# Paths, in systemd's own precedence order
SYSTEMD_USER_DIR = Path(".config") / "systemd" / "user"
USER_DIRS = [
    Path("/etc/systemd/user"),
    Path("/usr/local/lib/systemd/user"),
    Path("/usr/lib/systemd/user"),
]
SYSTEM_DIRS = [
    Path("/etc/systemd/system"),
    Path("/usr/local/lib/systemd/system"),
    Path("/usr/lib/systemd/system"),
    Path("/lib/systemd/system"),
]


class LinuxService(PlatformService):
    """Services described by unit files and run by systemd.

    New user services go to ~/.config/systemd/user and new system services
    to /etc/systemd/system.
    """

    marks_managed = True
    names_from_filename = True

    def _make_codec(self) -> UnitFileCodec:
        return UnitFileCodec()

    def _make_backend(self) -> SystemctlBackend:
        return SystemctlBackend()

    def default_user_dirs(self) -> list[Path]:
        return [Path.home() / SYSTEMD_USER_DIR, *USER_DIRS]

    def default_system_dirs(self) -> list[Path]:
        return list(SYSTEM_DIRS)

    def _is_enabled(self, descriptor: ServiceDescriptor) -> bool:
        """Check for an enable symlink in any ``*.wants``/``*.requires`` directory."""
        unit = self.codec.filename(descriptor.name)
        for directory in self.directories(descriptor.scope):
            for pattern in (f"*.wants/{unit}", f"*.requires/{unit}"):
                if any(directory.glob(pattern)):
                    return True
        return False
