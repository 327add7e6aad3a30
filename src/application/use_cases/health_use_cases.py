"""
Health Use Cases - Application Layer

/health combines the upstream checks with what this process holds: the
device controllers it is polling and whether the payments provider's public
key is already cached (so the next developer write needs no key fetch).
/info never calls an upstream; it reports build metadata and how the two
integrations are configured, without credentials.
"""

from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlsplit, urlunsplit

from src.application.dtos.health_dto import (
    ApplicationInfoDTO,
    CircleInfoDTO,
    HomeAssistantInfoDTO,
    SystemHealthDTO,
    TrackedDevicesDTO,
)
from src.application.models import SystemInfo
from src.application.services.device_controller_registry import (
    DeviceControllerRegistry,
)
from src.domain.entities.health import ServiceStatus
from src.domain.ports.services import IHealthCheckService
from src.shared import get_logger

logger = get_logger(__name__)


def strip_userinfo(url: str) -> str:
    """Drop ``user:password@`` from a URL; tunnels are often configured that way."""
    parts = urlsplit(url or "")
    if not (parts.username or parts.password):
        return url
    return urlunsplit(parts._replace(netloc=parts.netloc.rsplit("@", 1)[1]))


class GetHealthStatusUseCase:
    """Check both upstreams and describe the devices being tracked."""

    def __init__(
        self,
        health_check_service: IHealthCheckService,
        registry: Optional[DeviceControllerRegistry] = None,
        public_key_cached: bool = False,
    ) -> None:
        self._health_check_service = health_check_service
        self._registry = registry
        self._public_key_cached = public_key_cached

    async def execute(self) -> SystemHealthDTO:
        health = await self._health_check_service.evaluate()
        devices = (
            TrackedDevicesDTO.from_snapshots(self._registry.snapshots())
            if self._registry is not None
            else TrackedDevicesDTO()
        )

        hub = health.dependency("home_assistant")
        if hub is not None and hub.status == ServiceStatus.DOWN and devices.tracked:
            # Controllers find out on their next poll; say so now.
            logger.warning(
                "system.health.hub_down",
                reason=hub.reason.value if hub.reason else None,
                tracked=devices.tracked,
            )

        return SystemHealthDTO.from_domain(
            health, devices=devices, public_key_cached=self._public_key_cached
        )


class GetApplicationInfoUseCase:
    """Report build metadata, uptime and integration configuration."""

    def __init__(self, system_info: SystemInfo) -> None:
        self._info = system_info

    async def execute(self, started_at: Optional[datetime]) -> ApplicationInfoDTO:
        now = datetime.now(timezone.utc)
        started = started_at or now
        info = self._info

        return ApplicationInfoDTO(
            name=info.title,
            description=info.description,
            version=info.version,
            environment=info.environment,
            git_commit=info.git_commit,
            build_time=info.build_time,
            started_at=started,
            uptime_seconds=max(0.0, (now - started).total_seconds()),
            home_assistant=HomeAssistantInfoDTO(
                host=strip_userinfo(info.home_assistant_url),
                proxy_prefix=info.home_assistant_proxy_prefix,
                token_configured=info.home_assistant_token_configured,
            ),
            circle=CircleInfoDTO(
                base_url=info.circle_api_url,
                proxy_prefix=info.circle_proxy_prefix,
                api_key_configured=info.circle_api_key_configured,
                entity_secret_mode=info.entity_secret_mode,
            ),
        )
