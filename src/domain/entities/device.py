"""Domain entities for devices exposed by the home-automation hub."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from src.domain.entities.errors import InvalidEntityIdError, UnsupportedCommandError

_ENTITY_ID_PATTERN = re.compile(r"^([a-z0-9_]+)\.([A-Za-z0-9_]+)$")


class DeviceDomain(str, Enum):
    """Hub domains the application knows how to display."""

    SWITCH = "switch"
    COVER = "cover"
    LOCK = "lock"
    MOTOR = "motor"
    LIGHT = "light"
    SENSOR = "sensor"
    BINARY_SENSOR = "binary_sensor"

    @classmethod
    def from_value(cls, value: Optional[str]) -> Optional["DeviceDomain"]:
        if not value:
            return None
        try:
            return cls(value.lower())
        except ValueError:
            return None


CONTROLLABLE_DOMAINS = frozenset(
    {
        DeviceDomain.SWITCH,
        DeviceDomain.COVER,
        DeviceDomain.LOCK,
        DeviceDomain.LIGHT,
        DeviceDomain.MOTOR,
    }
)


class DeviceCommand(str, Enum):
    """Commands a controller can issue."""

    LOCK = "lock"
    UNLOCK = "unlock"
    TURN_ON = "turn_on"
    TURN_OFF = "turn_off"
    TOGGLE = "toggle"
    OPEN = "open"
    CLOSE = "close"
    STOP = "stop"


@dataclass(frozen=True, slots=True)
class ServiceCall:
    """A hub service call plus the state it is expected to produce."""

    domain: str
    service: str
    predicted_state: Optional[str] = None


# (command, domain) -> (service domain, service, predicted state)
_SERVICE_TABLE: Dict[Tuple[DeviceCommand, DeviceDomain], ServiceCall] = {
    (DeviceCommand.LOCK, DeviceDomain.LOCK): ServiceCall("lock", "lock", "locked"),
    (DeviceCommand.UNLOCK, DeviceDomain.LOCK): ServiceCall(
        "lock", "unlock", "unlocked"
    ),
    (DeviceCommand.TURN_ON, DeviceDomain.SWITCH): ServiceCall(
        "switch", "turn_on", "on"
    ),
    (DeviceCommand.TURN_OFF, DeviceDomain.SWITCH): ServiceCall(
        "switch", "turn_off", "off"
    ),
    (DeviceCommand.TOGGLE, DeviceDomain.SWITCH): ServiceCall("switch", "toggle"),
    (DeviceCommand.TURN_ON, DeviceDomain.LIGHT): ServiceCall("light", "turn_on", "on"),
    (DeviceCommand.TURN_OFF, DeviceDomain.LIGHT): ServiceCall(
        "light", "turn_off", "off"
    ),
    (DeviceCommand.TOGGLE, DeviceDomain.LIGHT): ServiceCall("light", "toggle"),
    (DeviceCommand.OPEN, DeviceDomain.COVER): ServiceCall(
        "cover", "open_cover", "open"
    ),
    (DeviceCommand.CLOSE, DeviceDomain.COVER): ServiceCall(
        "cover", "close_cover", "closed"
    ),
    (DeviceCommand.STOP, DeviceDomain.COVER): ServiceCall("cover", "stop_cover"),
}


def parse_entity_id(entity_id: str) -> Tuple[str, str]:
    """
    Split a ``domain.object_id`` identifier.

    Raises:
        InvalidEntityIdError: If the identifier does not follow the convention.
    """
    match = _ENTITY_ID_PATTERN.match(entity_id or "")
    if not match:
        raise InvalidEntityIdError(
            f"Invalid entity id '{entity_id}': expected 'domain.object_id'",
            details={"entity_id": entity_id},
        )
    return match.group(1), match.group(2)


def resolve_service(domain: DeviceDomain, command: DeviceCommand) -> ServiceCall:
    """
    Map a command onto the hub service that implements it for ``domain``.

    Motors are driven through the cover services.
    """
    lookup_domain = DeviceDomain.COVER if domain == DeviceDomain.MOTOR else domain
    call = _SERVICE_TABLE.get((command, lookup_domain))
    if call is None:
        raise UnsupportedCommandError(
            f"Domain {domain.value} does not support {command.value}",
            details={"domain": domain.value, "command": command.value},
        )
    return call


def normalize_state(value: Any) -> Optional[str]:
    """Lower-case and strip a hub state; the hub mixes 'locked' and 'LOCKED'."""
    if value is None:
        return None
    text = str(value).strip().lower()
    return text or None


@dataclass(slots=True)
class EntityState:
    """Cached projection of an entity as last reported by the hub."""

    entity_id: str
    state: Optional[str]
    raw_state: Optional[str] = None
    attributes: Dict[str, Any] = field(default_factory=dict)
    last_changed: Optional[str] = None
    last_updated: Optional[str] = None
    observed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_dict(cls, entity_id: str, data: Dict[str, Any]) -> "EntityState":
        raw_state = data.get("state")
        return cls(
            entity_id=data.get("entity_id") or entity_id,
            state=normalize_state(raw_state),
            raw_state=None if raw_state is None else str(raw_state),
            attributes=dict(data.get("attributes") or {}),
            last_changed=data.get("last_changed"),
            last_updated=data.get("last_updated"),
        )


@dataclass(slots=True)
class DeviceSnapshot:
    """What a caller sees for one entity at a point in time."""

    entity_id: Optional[str]
    domain: Optional[DeviceDomain]
    state: Optional[EntityState]
    displayed_state: Optional[str]
    optimistic_state: Optional[str]
    is_loading: bool
    is_connected: bool
    is_controllable: bool
    error: Optional[str] = None

    @property
    def is_locked(self) -> bool:
        return self.displayed_state == "locked"

    @property
    def is_on(self) -> bool:
        return self.displayed_state == "on"

    @property
    def is_open(self) -> bool:
        return self.displayed_state == "open"
