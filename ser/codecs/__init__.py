"""Native descriptor codecs.

- plist files for launchd
- unit files for systemd
"""

from ser.codecs.base import DescriptorCodec
from ser.codecs.plist import PlistCodec
from ser.codecs.unit import MANAGED_BY_COMMENT, UnitFileCodec

__all__ = ["DescriptorCodec", "PlistCodec", "UnitFileCodec", "MANAGED_BY_COMMENT"]
