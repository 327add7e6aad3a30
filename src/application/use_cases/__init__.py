"""
Use Cases Package - Application Layer

This package contains use cases that implement the business logic
of the application. Use cases orchestrate the flow of data to and from
the entities and implement the business rules of the application.
"""

from .circle_proxy_use_cases import CircleProxyUseCase
from .device_use_cases import (
    ExecuteDeviceCommandUseCase,
    GetDeviceStateUseCase,
    ListEntitiesUseCase,
    RefreshDeviceStateUseCase,
)
from .health_use_cases import GetApplicationInfoUseCase, GetHealthStatusUseCase
from .home_assistant_proxy_use_cases import HomeAssistantProxyUseCase

__all__ = [
    "CircleProxyUseCase",
    "ExecuteDeviceCommandUseCase",
    "GetApplicationInfoUseCase",
    "GetDeviceStateUseCase",
    "GetHealthStatusUseCase",
    "HomeAssistantProxyUseCase",
    "ListEntitiesUseCase",
    "RefreshDeviceStateUseCase",
]
