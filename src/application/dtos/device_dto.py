"""
Device DTOs - Application Layer

This module defines Data Transfer Objects (DTOs) for hub entities and the
reconciled state returned by device controllers. These DTOs are used to
transfer data between the application layer and the presentation layer (API).
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from src.domain.entities.device import DeviceSnapshot, EntityState


class EntityStateDTO(BaseModel):
    """DTO for the last state observed from the hub."""

    entity_id: str = Field(description="Entity identifier (domain.object_id)")
    state: Optional[str] = Field(default=None, description="Normalized state")
    raw_state: Optional[str] = Field(
        default=None, description="State exactly as reported by the hub"
    )
    attributes: Dict[str, Any] = Field(
        default_factory=dict, description="Entity attributes"
    )
    last_changed: Optional[str] = Field(
        default=None, description="Hub timestamp of the last state change"
    )
    last_updated: Optional[str] = Field(
        default=None, description="Hub timestamp of the last update"
    )
    observed_at: datetime = Field(description="When the state was fetched")

    @classmethod
    def from_domain(cls, state: EntityState) -> "EntityStateDTO":
        return cls(
            entity_id=state.entity_id,
            state=state.state,
            raw_state=state.raw_state,
            attributes=state.attributes,
            last_changed=state.last_changed,
            last_updated=state.last_updated,
            observed_at=state.observed_at,
        )


class DeviceSnapshotDTO(BaseModel):
    """DTO for the reconciled view of a device."""

    entity_id: Optional[str] = Field(default=None, description="Entity identifier")
    domain: Optional[str] = Field(default=None, description="Hub domain")
    displayed_state: Optional[str] = Field(
        default=None,
        description="Optimistic state when set, otherwise the observed state",
    )
    optimistic_state: Optional[str] = Field(
        default=None, description="Predicted state awaiting hub confirmation"
    )
    is_locked: bool = Field(default=False, description="Displayed state is locked")
    is_on: bool = Field(default=False, description="Displayed state is on")
    is_open: bool = Field(default=False, description="Displayed state is open")
    is_loading: bool = Field(default=False, description="A command is in flight")
    is_connected: bool = Field(
        default=False, description="Last poll succeeded without network failure"
    )
    is_controllable: bool = Field(
        default=False, description="Commands can be issued for this entity"
    )
    error: Optional[str] = Field(default=None, description="Last recorded error")
    state: Optional[EntityStateDTO] = Field(
        default=None, description="Last observed hub state"
    )

    @classmethod
    def from_domain(cls, snapshot: DeviceSnapshot) -> "DeviceSnapshotDTO":
        return cls(
            entity_id=snapshot.entity_id,
            domain=snapshot.domain.value if snapshot.domain else None,
            displayed_state=snapshot.displayed_state,
            optimistic_state=snapshot.optimistic_state,
            is_locked=snapshot.is_locked,
            is_on=snapshot.is_on,
            is_open=snapshot.is_open,
            is_loading=snapshot.is_loading,
            is_connected=snapshot.is_connected,
            is_controllable=snapshot.is_controllable,
            error=snapshot.error,
            state=(
                EntityStateDTO.from_domain(snapshot.state) if snapshot.state else None
            ),
        )

    model_config = {
        "json_schema_extra": {
            "example": {
                "entity_id": "lock.front_door",
                "domain": "lock",
                "displayed_state": "locked",
                "optimistic_state": "locked",
                "is_locked": True,
                "is_on": False,
                "is_open": False,
                "is_loading": False,
                "is_connected": True,
                "is_controllable": True,
                "error": None,
                "state": {
                    "entity_id": "lock.front_door",
                    "state": "unlocked",
                    "raw_state": "UNLOCKED",
                    "attributes": {"friendly_name": "Front door"},
                    "last_changed": "2026-03-02T12:00:00+00:00",
                    "last_updated": "2026-03-02T12:00:00+00:00",
                    "observed_at": "2026-03-02T12:00:01Z",
                },
            }
        }
    }


class CommandResultDTO(BaseModel):
    """DTO returned after issuing a device command."""

    entity_id: str = Field(description="Entity identifier")
    command: str = Field(description="Command that was issued")
    device: DeviceSnapshotDTO = Field(description="Device state after the command")

    model_config = {
        "json_schema_extra": {
            "example": {
                "entity_id": "lock.front_door",
                "command": "lock",
                "device": {
                    "entity_id": "lock.front_door",
                    "domain": "lock",
                    "displayed_state": "locked",
                    "optimistic_state": "locked",
                    "is_locked": True,
                    "is_loading": False,
                    "is_connected": True,
                    "is_controllable": True,
                },
            }
        }
    }


class EntityListDTO(BaseModel):
    """DTO listing the hub entities, optionally filtered by domain."""

    domain: Optional[str] = Field(default=None, description="Domain filter applied")
    count: int = Field(description="Number of entities")
    entities: List[str] = Field(description="Sorted entity identifiers")

    model_config = {
        "json_schema_extra": {
            "example": {
                "domain": "lock",
                "count": 2,
                "entities": ["lock.back_door", "lock.front_door"],
            }
        }
    }
