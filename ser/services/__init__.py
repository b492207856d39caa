"""Application services."""

from ser.services.config import ConfigService

__all__ = ["ConfigService"]
