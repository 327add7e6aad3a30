"""
Infrastructure Gateway - Circle Implementation

httpx client for the payments provider REST API. Responses are returned
as-is; only transport failures are translated into domain errors.
"""

from typing import Dict, Optional

import httpx

from src.domain.entities.errors import (
    AuthError,
    CiphertextGenerationError,
    ConfigurationError,
    HttpError,
    NetworkError,
)
from src.domain.entities.proxy import JSON_CONTENT_TYPE, UpstreamResponse
from src.domain.gateways.circle_gateway import ICircleGateway
from src.shared import CIRCLE_API_BASE_URL, CIRCLE_PUBLIC_KEY_PATH, get_logger

logger = get_logger(__name__)


class CircleGateway(ICircleGateway):
    """Implementation of the payments provider gateway using httpx."""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = CIRCLE_API_BASE_URL,
        timeout: float = 30.0,
    ):
        """
        Initialize the gateway.

        Args:
            api_key: Operator API key sent as a bearer credential.
            base_url: Provider origin (e.g. "https://api.circle.com").
            timeout: Request timeout in seconds.
        """
        self.api_key = (api_key or "").strip() or None
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return self.api_key is not None

    async def fetch_public_key(self) -> str:
        if not self.configured:
            raise ConfigurationError("Circle API key not set")

        url = f"{self.base_url}{CIRCLE_PUBLIC_KEY_PATH}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url, headers=self._auth_headers())
        except httpx.TimeoutException as exc:
            raise NetworkError(
                "Timeout fetching Circle public key", timeout=True
            ) from exc
        except httpx.RequestError as exc:
            raise NetworkError(f"Failed to fetch Circle public key: {exc}") from exc

        if response.status_code in (httpx.codes.UNAUTHORIZED, httpx.codes.FORBIDDEN):
            raise AuthError(
                "Circle rejected the API key",
                status_code=response.status_code,
                payload=response.text,
            )
        if response.status_code >= 400:
            logger.error(
                "circle.public_key.http_error",
                status_code=response.status_code,
            )
            raise HttpError(
                f"Circle public key request failed with HTTP {response.status_code}",
                status_code=response.status_code,
                payload=response.text,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise CiphertextGenerationError(
                "Circle public key response is not JSON"
            ) from exc

        public_key = ((data or {}).get("data") or {}).get("publicKey")
        if not public_key:
            raise CiphertextGenerationError(
                "La respuesta de Circle no incluye data.publicKey"
            )
        return public_key

    async def forward(
        self,
        method: str,
        path: str,
        *,
        query: str = "",
        body: Optional[bytes] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> UpstreamResponse:
        if not path.startswith("/"):
            path = f"/{path}"
        url = f"{self.base_url}{path}"
        if query:
            url = f"{url}?{query}"

        request_headers = {"Content-Type": JSON_CONTENT_TYPE}
        request_headers.update(headers or {})
        request_headers.update(self._auth_headers())

        logger.debug("circle.forward.started", method=method, path=path)
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(
                    method, url, headers=request_headers, content=body or None
                )
        except httpx.TimeoutException as exc:
            logger.warning("circle.forward.timeout", method=method, path=path)
            raise NetworkError(f"Timeout contacting Circle: {exc}", timeout=True) from exc
        except httpx.RequestError as exc:
            logger.warning(
                "circle.forward.network_error", method=method, path=path, error=str(exc)
            )
            raise NetworkError(f"Circle request failed: {exc}") from exc

        return UpstreamResponse(
            status_code=response.status_code,
            content=response.content,
            content_type=response.headers.get("content-type", JSON_CONTENT_TYPE),
        )

    def _auth_headers(self) -> Dict[str, str]:
        if not self.api_key:
            return {}
        return {"Authorization": f"Bearer {self.api_key}"}
