from __future__ import annotations

from src.application.dtos.health_dto import (
    DependencyStatusDTO,
    SystemHealthDTO,
    TrackedDevicesDTO,
)
from src.domain.entities.device import DeviceDomain, DeviceSnapshot
from src.domain.entities.health import (
    CheckFailure,
    DependencyStatus,
    ServiceStatus,
    SystemHealth,
)


def _snapshot(entity_id: str, connected: bool, loading: bool = False) -> DeviceSnapshot:
    return DeviceSnapshot(
        entity_id=entity_id,
        domain=DeviceDomain.LOCK,
        state=None,
        displayed_state=None,
        optimistic_state=None,
        is_loading=loading,
        is_connected=connected,
        is_controllable=True,
    )


def test_dependency_status_dto_from_domain() -> None:
    domain = DependencyStatus(
        name="circle", status=ServiceStatus.DOWN, reason=CheckFailure.TIMEOUT
    )
    dto = DependencyStatusDTO.from_domain(domain)
    assert dto.name == "circle"
    assert dto.reason is CheckFailure.TIMEOUT


def test_tracked_devices_from_snapshots() -> None:
    dto = TrackedDevicesDTO.from_snapshots(
        [
            _snapshot("lock.front_door", connected=True, loading=True),
            _snapshot("lock.back_door", connected=False),
        ]
    )

    assert dto.tracked == 2
    assert dto.connected == 1
    assert dto.loading == 1
    assert dto.disconnected == ["lock.back_door"]


def test_system_health_dto_defaults_without_devices() -> None:
    dto = SystemHealthDTO.from_domain(SystemHealth(status=ServiceStatus.UP))
    assert dto.devices.tracked == 0
    assert dto.public_key_cached is False


def test_system_health_dto_serializes_enum_values() -> None:
    domain = SystemHealth.aggregate(
        [
            DependencyStatus(
                name="home_assistant",
                status=ServiceStatus.DOWN,
                reason=CheckFailure.TUNNEL_PAGE,
                message="Tunnel returned an HTML page",
                details={"status_code": 200},
            )
        ]
    )

    payload = SystemHealthDTO.from_domain(domain).model_dump(mode="json")

    assert payload["status"] == "down"
    assert payload["dependencies"][0]["reason"] == "tunnel_page"
    assert payload["dependencies"][0]["details"] == {"status_code": 200}
    assert payload["devices"]["disconnected"] == []
