"""
Circle Proxy Router - Presentation Layer

Catch-all router mounted under the configured payments proxy prefix.
"""

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Request, Response

from src.application.use_cases.circle_proxy_use_cases import CircleProxyUseCase
from src.domain.entities.proxy import ProxyRequest
from src.shared import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["Circle proxy"])

PROXY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]


@router.api_route("/{path:path}", methods=PROXY_METHODS)
@inject
async def proxy_circle(
    path: str,
    request: Request,
    circle_proxy_use_case: CircleProxyUseCase = Depends(
        Provide["circle_proxy_use_case"]
    ),
) -> Response:
    """Forward a request to the payments provider with injected credentials."""
    proxy_request = ProxyRequest(
        method=request.method,
        path=path,
        query=request.url.query,
        body=await request.body(),
    )
    upstream = await circle_proxy_use_case.execute(proxy_request)
    logger.info(
        "circle.proxy.responded",
        method=request.method,
        path=proxy_request.normalized_path,
        status_code=upstream.status_code,
    )
    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        media_type=upstream.content_type,
    )
