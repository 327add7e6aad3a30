"""
DTOs Package - Application Layer

This package contains Data Transfer Objects (DTOs) used for data exchange
between the application layer and the presentation layer.
"""

from .device_dto import (
    CommandResultDTO,
    DeviceSnapshotDTO,
    EntityListDTO,
    EntityStateDTO,
)
from .health_dto import (
    ApplicationInfoDTO,
    DependencyStatusDTO,
    SystemHealthDTO,
    TrackedDevicesDTO,
)

__all__ = [
    "CommandResultDTO",
    "DeviceSnapshotDTO",
    "EntityListDTO",
    "EntityStateDTO",
    "SystemHealthDTO",
    "DependencyStatusDTO",
    "ApplicationInfoDTO",
    "TrackedDevicesDTO",
]
