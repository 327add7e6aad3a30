"""
System Router - Presentation Layer

Liveness, dependency health and runtime metadata for the Casa Color
backend. /health answers 503 when either upstream is down so load balancers
and the dev tunnel can act on the status code alone.
"""

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from src.application.dtos.health_dto import ApplicationInfoDTO, SystemHealthDTO
from src.application.use_cases.health_use_cases import (
    GetApplicationInfoUseCase,
    GetHealthStatusUseCase,
)
from src.domain.entities.health import ServiceStatus
from src.shared import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["System"])


@router.get("/ping")
async def ping() -> dict:
    """Liveness check that never touches an upstream."""
    return {"status": "ok"}


@router.get(
    "/health",
    response_model=SystemHealthDTO,
    responses={503: {"model": SystemHealthDTO}},
)
@inject
async def health(
    response: Response,
    get_health_status_use_case: GetHealthStatusUseCase = Depends(
        Provide["get_health_status_use_case"]
    ),
) -> SystemHealthDTO:
    """
    Check Home Assistant and Circle.

    Returns:
        SystemHealthDTO: Aggregated status; the HTTP status is 503 when it is down
    """
    try:
        health_status = await get_health_status_use_case.execute()
    except Exception as exc:
        logger.error("system.health.failed", error=str(exc), exc_info=exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="No se pudo evaluar el estado de las dependencias",
        ) from exc

    if health_status.status == ServiceStatus.DOWN:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        logger.warning(
            "system.health.down",
            dependencies=[
                dep.name
                for dep in health_status.dependencies
                if dep.status == ServiceStatus.DOWN
            ],
        )
    else:
        logger.debug("system.health.evaluated", status=health_status.status.value)
    return health_status


@router.get("/info", response_model=ApplicationInfoDTO)
@inject
async def info(
    request: Request,
    get_application_info_use_case: GetApplicationInfoUseCase = Depends(
        Provide["get_application_info_use_case"]
    ),
) -> ApplicationInfoDTO:
    """Return build metadata, uptime and integration configuration."""
    started_at = getattr(request.app.state, "started_at", None)
    try:
        return await get_application_info_use_case.execute(started_at)
    except Exception as exc:
        logger.error("system.info.failed", error=str(exc), exc_info=exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="No se pudo obtener la información de la aplicación",
        ) from exc
