"""Pydantic data models."""

from ser.models.config import SerConfig
from ser.models.service import (
    ServiceDescriptor,
    ServiceScope,
    ServiceSpec,
    ServiceState,
    ServiceStatus,
    normalize_service_name,
)

__all__ = [
    "SerConfig",
    "ServiceDescriptor",
    "ServiceScope",
    "ServiceSpec",
    "ServiceState",
    "ServiceStatus",
    "normalize_service_name",
]
