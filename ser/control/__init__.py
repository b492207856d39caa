"""Control backends for the native service daemons.

- launchctl on macOS
- systemctl on Linux
"""

from ser.control.base import CommandRunner, ControlBackend
from ser.control.launchctl import LaunchctlBackend
from ser.control.systemctl import SystemctlBackend

__all__ = ["CommandRunner", "ControlBackend", "LaunchctlBackend", "SystemctlBackend"]
