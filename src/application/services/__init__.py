"""Stateful application services."""

from .device_controller_registry import DeviceControllerRegistry
from .device_state_controller import DeviceStateController

__all__ = ["DeviceControllerRegistry", "DeviceStateController"]
