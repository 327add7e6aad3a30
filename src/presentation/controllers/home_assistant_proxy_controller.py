"""
Home Assistant Proxy Router - Presentation Layer

Catch-all router mounted under the configured hub proxy prefix.
"""

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Request, Response

from src.application.use_cases.home_assistant_proxy_use_cases import (
    HomeAssistantProxyUseCase,
)
from src.domain.entities.proxy import ProxyRequest
from src.shared import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["Home Assistant proxy"])


@router.api_route("/{path:path}", methods=["GET", "POST", "PUT", "DELETE"])
@inject
async def proxy_home_assistant(
    path: str,
    request: Request,
    home_assistant_proxy_use_case: HomeAssistantProxyUseCase = Depends(
        Provide["home_assistant_proxy_use_case"]
    ),
) -> Response:
    """Forward a request to the hub REST API with the configured token."""
    proxy_request = ProxyRequest(
        method=request.method,
        path=path,
        query=request.url.query,
        body=await request.body(),
    )
    upstream = await home_assistant_proxy_use_case.execute(proxy_request)
    logger.debug(
        "home_assistant.proxy.responded",
        method=request.method,
        path=proxy_request.normalized_path,
        status_code=upstream.status_code,
    )
    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        media_type=upstream.content_type,
        headers={"Access-Control-Allow-Origin": "*"},
    )
