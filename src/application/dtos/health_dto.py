"""DTOs for the /health and /info responses."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from src.domain.entities.device import DeviceSnapshot
from src.domain.entities.health import (
    CheckFailure,
    DependencyStatus,
    ServiceStatus,
    SystemHealth,
)


class DependencyStatusDTO(BaseModel):
    """Health check result for the hub or the payments provider."""

    name: str = Field(description="home_assistant or circle")
    status: ServiceStatus
    reason: Optional[CheckFailure] = Field(
        default=None, description="Why the dependency is not fully usable"
    )
    message: Optional[str] = None
    checked_at: datetime
    latency_ms: Optional[float] = None
    details: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_domain(cls, status: DependencyStatus) -> "DependencyStatusDTO":
        return cls(
            name=status.name,
            status=status.status,
            reason=status.reason,
            message=status.message,
            checked_at=status.checked_at,
            latency_ms=status.latency_ms,
            details=status.details,
        )


class TrackedDevicesDTO(BaseModel):
    """Entities this process currently polls."""

    tracked: int = 0
    connected: int = 0
    loading: int = 0
    disconnected: List[str] = Field(
        default_factory=list, description="Tracked entities the hub is not answering for"
    )

    @classmethod
    def from_snapshots(cls, snapshots: List[DeviceSnapshot]) -> "TrackedDevicesDTO":
        return cls(
            tracked=len(snapshots),
            connected=sum(1 for snapshot in snapshots if snapshot.is_connected),
            loading=sum(1 for snapshot in snapshots if snapshot.is_loading),
            disconnected=[
                snapshot.entity_id
                for snapshot in snapshots
                if not snapshot.is_connected and snapshot.entity_id
            ],
        )


class SystemHealthDTO(BaseModel):
    """The /health payload."""

    status: ServiceStatus = Field(description="Worst status across dependencies")
    dependencies: List[DependencyStatusDTO] = Field(default_factory=list)
    devices: TrackedDevicesDTO = Field(default_factory=TrackedDevicesDTO)
    public_key_cached: bool = Field(
        default=False,
        description="Whether the provider public key has been fetched by this process",
    )

    @classmethod
    def from_domain(
        cls,
        health: SystemHealth,
        devices: Optional[TrackedDevicesDTO] = None,
        public_key_cached: bool = False,
    ) -> "SystemHealthDTO":
        return cls(
            status=health.status,
            dependencies=[
                DependencyStatusDTO.from_domain(dep) for dep in health.dependencies
            ],
            devices=devices or TrackedDevicesDTO(),
            public_key_cached=public_key_cached,
        )

    model_config = {
        "json_schema_extra": {
            "example": {
                "status": "degraded",
                "dependencies": [
                    {
                        "name": "home_assistant",
                        "status": "up",
                        "reason": None,
                        "message": "HTTP 200",
                        "checked_at": "2026-03-02T12:00:00Z",
                        "latency_ms": 42.5,
                        "details": {"status_code": 200},
                    },
                    {
                        "name": "circle",
                        "status": "degraded",
                        "reason": "credentials_rejected",
                        "message": "HTTP 401",
                        "checked_at": "2026-03-02T12:00:00Z",
                        "latency_ms": 118.3,
                        "details": {"status_code": 401},
                    },
                ],
                "devices": {
                    "tracked": 2,
                    "connected": 1,
                    "loading": 0,
                    "disconnected": ["cover.garage"],
                },
                "public_key_cached": False,
            }
        }
    }


class HomeAssistantInfoDTO(BaseModel):
    host: str = Field(description="Hub origin with any userinfo removed")
    proxy_prefix: str
    token_configured: bool


class CircleInfoDTO(BaseModel):
    base_url: str
    proxy_prefix: str
    api_key_configured: bool
    entity_secret_mode: str = Field(description="hex, legacy or none")


class ApplicationInfoDTO(BaseModel):
    """The /info payload: build metadata and integration configuration."""

    name: str
    description: str
    version: str
    environment: str
    git_commit: str
    build_time: str
    started_at: datetime
    uptime_seconds: float
    home_assistant: HomeAssistantInfoDTO
    circle: CircleInfoDTO
