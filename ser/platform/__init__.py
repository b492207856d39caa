"""Platform service selection.

Provides one service interface over:
- launchd on macOS
- systemd on Linux
"""

from ser.platform.base import PlatformService, get_platform_service

__all__ = ["PlatformService", "get_platform_service"]
