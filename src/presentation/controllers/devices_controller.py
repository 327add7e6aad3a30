"""
Devices Router - Presentation Layer

This module defines the FastAPI router for device endpoints.
"""

from typing import Optional

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from src.application.dtos.device_dto import (
    CommandResultDTO,
    DeviceSnapshotDTO,
    EntityListDTO,
)
from src.application.use_cases.device_use_cases import (
    ExecuteDeviceCommandUseCase,
    GetDeviceStateUseCase,
    ListEntitiesUseCase,
    RefreshDeviceStateUseCase,
)
from src.domain.entities.device import DeviceCommand
from src.domain.entities.errors import (
    AuthError,
    CommandError,
    CommandInProgressError,
    ConfigurationError,
    DomainError,
    HttpError,
    InvalidEntityIdError,
    NetworkError,
    UnsupportedCommandError,
)
from src.shared import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/devices", tags=["Devices"])


def _to_http_exception(exc: DomainError) -> HTTPException:
    """Map a domain error onto the HTTP status reported to the caller."""
    if isinstance(exc, ConfigurationError):
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=exc.message
        )
    if isinstance(exc, (InvalidEntityIdError, UnsupportedCommandError)):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=exc.message
        )
    if isinstance(exc, CommandInProgressError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.message)
    if isinstance(exc, CommandError):
        cause = exc.cause
        return HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={
                "message": exc.message,
                "cause": getattr(cause, "message", str(cause)) if cause else None,
            },
        )
    if isinstance(exc, AuthError):
        return HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail=exc.message
        )
    if isinstance(exc, NetworkError) and exc.timeout:
        return HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT, detail=exc.message
        )
    if isinstance(exc, (NetworkError, HttpError)):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=exc.message)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=exc.message
    )


@router.get("/", response_model=EntityListDTO)
@inject
async def list_devices(
    domain: Optional[str] = Query(
        default=None, description="Only list entities of this domain, e.g. 'lock'"
    ),
    list_entities_use_case: ListEntitiesUseCase = Depends(
        Provide["list_entities_use_case"]
    ),
) -> EntityListDTO:
    """
    List the hub's entities.

    Args:
        domain: Optional domain filter
        list_entities_use_case: Injected use case for entity listing

    Returns:
        EntityListDTO: Sorted entity identifiers

    Raises:
        HTTPException: If the hub is not configured or cannot be reached
    """
    logger.info("devices.list_requested", domain=domain)
    try:
        return await list_entities_use_case.execute(domain)
    except DomainError as exc:
        logger.error("devices.list_failed", domain=domain, error=exc.message)
        raise _to_http_exception(exc) from exc


@router.get("/{entity_id}", response_model=DeviceSnapshotDTO)
@inject
async def get_device(
    entity_id: str = Path(description="Entity identifier, e.g. lock.front_door"),
    get_device_state_use_case: GetDeviceStateUseCase = Depends(
        Provide["get_device_state_use_case"]
    ),
) -> DeviceSnapshotDTO:
    """Return the reconciled state of one entity."""
    try:
        return await get_device_state_use_case.execute(entity_id)
    except DomainError as exc:
        raise _to_http_exception(exc) from exc


@router.post("/{entity_id}/refresh", response_model=DeviceSnapshotDTO)
@inject
async def refresh_device(
    entity_id: str = Path(description="Entity identifier, e.g. lock.front_door"),
    refresh_device_state_use_case: RefreshDeviceStateUseCase = Depends(
        Provide["refresh_device_state_use_case"]
    ),
) -> DeviceSnapshotDTO:
    """Poll the hub for one entity; throttled bursts collapse into one read."""
    try:
        return await refresh_device_state_use_case.execute(entity_id)
    except DomainError as exc:
        raise _to_http_exception(exc) from exc


@router.post("/{entity_id}/{command}", response_model=CommandResultDTO)
@inject
async def execute_command(
    entity_id: str = Path(description="Entity identifier, e.g. lock.front_door"),
    command: DeviceCommand = Path(description="Command to issue"),
    execute_device_command_use_case: ExecuteDeviceCommandUseCase = Depends(
        Provide["execute_device_command_use_case"]
    ),
) -> CommandResultDTO:
    """
    Issue a command with an optimistic state overlay.

    The returned device reflects the predicted state immediately; follow-up
    polls reconcile it with the hub.

    Raises:
        HTTPException: 503 when unconfigured, 422 for unsupported commands,
            409 while another command is in flight, 502 when the hub call failed
    """
    logger.info("devices.command_requested", entity_id=entity_id, command=command.value)
    try:
        return await execute_device_command_use_case.execute(entity_id, command)
    except DomainError as exc:
        raise _to_http_exception(exc) from exc
