"""macOS launchd platform service."""

from pathlib import Path

from ser.codecs.plist import PlistCodec
from ser.control.launchctl import LaunchctlBackend
from ser.platform.base import PlatformService

# Paths
LAUNCH_AGENTS_DIR = Path("Library") / "LaunchAgents"
SYSTEM_DIRS = [
    Path("/Library/LaunchDaemons"),
    Path("/Library/LaunchAgents"),
    Path("/System/Library/LaunchDaemons"),
    Path("/System/Library/LaunchAgents"),
]


class MacService(PlatformService):
    """Services described by plist files and run by launchd.

    New user services go to ~/Library/LaunchAgents and new system services
    to /Library/LaunchDaemons.
    """

    def _make_codec(self) -> PlistCodec:
        return PlistCodec()

    def _make_backend(self) -> LaunchctlBackend:
        return LaunchctlBackend()

    def default_user_dirs(self) -> list[Path]:
        return [Path.home() / LAUNCH_AGENTS_DIR]

    def default_system_dirs(self) -> list[Path]:
        return list(SYSTEM_DIRS)
