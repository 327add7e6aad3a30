"""
Device Use Cases - Application Layer

This module defines use cases for device operations. They resolve the
per-entity controller from the registry and map its reconciled snapshot
to DTOs for the presentation layer.
"""

from typing import Optional

from src.application.dtos.device_dto import (
    CommandResultDTO,
    DeviceSnapshotDTO,
    EntityListDTO,
)
from src.application.services.device_controller_registry import (
    DeviceControllerRegistry,
)
from src.domain.entities.device import DeviceCommand
from src.domain.gateways.home_assistant_gateway import IHomeAssistantGateway
from src.shared import get_logger

logger = get_logger(__name__)


class GetDeviceStateUseCase:
    """Use case returning the reconciled state of one entity."""

    def __init__(self, registry: DeviceControllerRegistry):
        self.registry = registry

    async def execute(self, entity_id: str) -> DeviceSnapshotDTO:
        controller = await self.registry.get(entity_id)
        return DeviceSnapshotDTO.from_domain(controller.snapshot())


class RefreshDeviceStateUseCase:
    """Use case forcing a (throttled) poll of one entity."""

    def __init__(self, registry: DeviceControllerRegistry):
        self.registry = registry

    async def execute(self, entity_id: str) -> DeviceSnapshotDTO:
        controller = await self.registry.get(entity_id)
        snapshot = await controller.refresh()
        logger.debug(
            "devices.refresh.completed",
            entity_id=entity_id,
            connected=snapshot.is_connected,
        )
        return DeviceSnapshotDTO.from_domain(snapshot)


class ExecuteDeviceCommandUseCase:
    """Use case issuing a command through the entity's controller."""

    def __init__(self, registry: DeviceControllerRegistry):
        self.registry = registry

    async def execute(self, entity_id: str, command: DeviceCommand) -> CommandResultDTO:
        """
        Issue ``command`` for ``entity_id``.

        Raises:
            ConfigurationError, UnsupportedCommandError, CommandInProgressError,
            CommandError: Propagated from the controller.
        """
        controller = await self.registry.get(entity_id)
        try:
            snapshot = await controller.execute(command)
        except Exception as exc:
            logger.error(
                "devices.command.rejected",
                entity_id=entity_id,
                command=command.value,
                error=str(exc),
            )
            raise

        return CommandResultDTO(
            entity_id=entity_id,
            command=command.value,
            device=DeviceSnapshotDTO.from_domain(snapshot),
        )


class ListEntitiesUseCase:
    """Use case listing the hub's entities, e.g. every ``lock.`` entity."""

    def __init__(self, home_assistant_gateway: IHomeAssistantGateway):
        self.home_assistant_gateway = home_assistant_gateway

    async def execute(self, domain: Optional[str] = None) -> EntityListDTO:
        logger.info("devices.list_started", domain=domain)
        entities = await self.home_assistant_gateway.list_entities(domain)
        logger.info("devices.list_completed", domain=domain, count=len(entities))
        return EntityListDTO(domain=domain, count=len(entities), entities=entities)
