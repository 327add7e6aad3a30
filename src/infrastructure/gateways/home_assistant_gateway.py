"""Home Assistant REST gateway implementation."""

from __future__ import annotations

from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from src.domain.entities.device import (
    DeviceCommand,
    DeviceDomain,
    EntityState,
    parse_entity_id,
    resolve_service,
)
from src.domain.entities.errors import (
    AuthError,
    ConfigurationError,
    HttpError,
    NetworkError,
    UnsupportedCommandError,
)
from src.domain.entities.proxy import ProxyRequest, UpstreamResponse
from src.domain.gateways.home_assistant_gateway import IHomeAssistantGateway
from src.shared import NGROK_SKIP_BROWSER_WARNING, get_logger

logger = get_logger(__name__)


class HomeAssistantGateway(IHomeAssistantGateway):
    """HTTP-based gateway for the Home Assistant REST API."""

    def __init__(
        self,
        base_url: Optional[str],
        token: Optional[str] = None,
        timeout: float = 30.0,
    ) -> None:
        """
        Args:
            base_url: Hub origin (e.g. ``https://home.example.org``); ``/api`` is appended.
            token: Long-lived access token. When absent requests go out
                unauthenticated and the hub's 401 surfaces as ``AuthError``.
            timeout: Request timeout in seconds.
        """
        self._base_url = (base_url or "").strip().rstrip("/")
        self._token = (token or "").strip() or None
        self._timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self._base_url)

    @property
    def base_url(self) -> str:
        return self._base_url

    async def get_state(self, entity_id: str) -> EntityState:
        self._ensure_entity(entity_id)
        url = self._api_url(f"/states/{quote(entity_id, safe='.')}")

        data = await self._request_json("GET", url, entity_id=entity_id)
        if not isinstance(data, dict):
            raise HttpError(
                f"Unexpected state payload for {entity_id}",
                status_code=None,
                payload=data,
            )
        return EntityState.from_dict(entity_id, data)

    async def send_command(
        self,
        entity_id: str,
        command: DeviceCommand,
        domain: Optional[DeviceDomain] = None,
    ) -> None:
        self._ensure_entity(entity_id)
        if domain is None:
            entity_domain, _ = parse_entity_id(entity_id)
            domain = DeviceDomain.from_value(entity_domain)
            if domain is None:
                raise UnsupportedCommandError(
                    f"Domain {entity_domain} is not controllable",
                    details={"entity_id": entity_id},
                )

        call = resolve_service(domain, command)
        logger.info(
            "home_assistant.command.sending",
            entity_id=entity_id,
            command=command.value,
            service=f"{call.domain}.{call.service}",
        )
        await self.call_service(call.domain, call.service, {"entity_id": entity_id})

    async def call_service(
        self,
        domain: str,
        service: str,
        service_data: Optional[Dict[str, Any]] = None,
    ) -> Any:
        self._ensure_host()
        url = self._api_url(f"/services/{domain}/{service}")
        return await self._request_json(
            "POST",
            url,
            json_body=service_data or {},
            entity_id=(service_data or {}).get("entity_id"),
        )

    async def list_entities(self, domain: Optional[str] = None) -> List[str]:
        self._ensure_host()
        data = await self._request_json("GET", self._api_url("/states"))

        entities = data if isinstance(data, list) else list((data or {}).values())
        prefix = f"{domain}." if domain else ""
        return sorted(
            entity["entity_id"]
            for entity in entities
            if isinstance(entity, dict)
            and isinstance(entity.get("entity_id"), str)
            and entity["entity_id"].startswith(prefix)
        )

    async def check_connection(self) -> bool:
        if not self.configured:
            return False

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(
                    self._api_url("/config"), headers=self._build_headers()
                )
        except httpx.HTTPError as exc:
            logger.warning("home_assistant.connection.failed", error=str(exc))
            return False

        if response.status_code in (httpx.codes.OK, httpx.codes.UNAUTHORIZED):
            return True
        logger.warning(
            "home_assistant.connection.unexpected_status",
            status_code=response.status_code,
        )
        return False

    async def forward(self, request: ProxyRequest) -> UpstreamResponse:
        self._ensure_host()
        url = self._api_url(request.normalized_path)
        if request.query:
            url = f"{url}?{request.query}"

        headers = self._build_headers()
        headers["User-Agent"] = "Mozilla/5.0"

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.request(
                    request.method,
                    url,
                    headers=headers,
                    content=request.body or None,
                )
        except httpx.TimeoutException as exc:
            raise NetworkError(
                f"Timeout contacting Home Assistant: {exc}", timeout=True
            ) from exc
        except httpx.RequestError as exc:
            raise NetworkError(f"Home Assistant request failed: {exc}") from exc

        return UpstreamResponse(
            status_code=response.status_code,
            content=response.content,
            content_type=response.headers.get("content-type", "application/json"),
        )

    async def _request_json(
        self,
        method: str,
        url: str,
        *,
        json_body: Optional[Dict[str, Any]] = None,
        entity_id: Optional[str] = None,
    ) -> Any:
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                if method == "GET":
                    response = await client.get(url, headers=self._build_headers())
                else:
                    response = await client.post(
                        url, headers=self._build_headers(), json=json_body
                    )
        except httpx.TimeoutException as exc:
            logger.warning(
                "home_assistant.request.timeout", url=url, entity_id=entity_id
            )
            raise NetworkError(
                "Tiempo de espera agotado. Intenta nuevamente.",
                timeout=True,
                details={"entity_id": entity_id},
            ) from exc
        except httpx.RequestError as exc:
            logger.warning(
                "home_assistant.request.network_error",
                url=url,
                entity_id=entity_id,
                error=str(exc),
            )
            raise NetworkError(
                f"Network error contacting Home Assistant: {exc}",
                details={"entity_id": entity_id},
            ) from exc

        content_type = response.headers.get("content-type", "")
        if "text/html" in content_type:
            # An ngrok tunnel that is down answers with its own HTML page.
            raise HttpError(
                "El servidor devolvió una página HTML en lugar de JSON. "
                "Verifica que el túnel esté activo.",
                status_code=response.status_code,
                details={"proxy_error": True, "html_response": True},
            )

        if response.status_code >= 400:
            payload = self._safe_json(response)
            self._raise_for_status(response.status_code, payload, url, entity_id)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise HttpError(
                "El servidor no respondió correctamente.",
                status_code=response.status_code,
                details={"proxy_error": True},
            ) from exc

    def _raise_for_status(
        self,
        status_code: int,
        payload: Any,
        url: str,
        entity_id: Optional[str],
    ) -> None:
        logger.warning(
            "home_assistant.request.http_error",
            url=url,
            entity_id=entity_id,
            status_code=status_code,
        )
        if status_code in (httpx.codes.UNAUTHORIZED, httpx.codes.FORBIDDEN):
            raise AuthError(
                "Home Assistant rejected the access token",
                status_code=status_code,
                payload=payload,
            )
        if status_code in (httpx.codes.BAD_GATEWAY, httpx.codes.GATEWAY_TIMEOUT):
            detail = ""
            if isinstance(payload, dict):
                detail = payload.get("message") or payload.get("details") or ""
            raise HttpError(
                f"Túnel no disponible: {detail or 'sin respuesta del hub'}",
                status_code=status_code,
                payload=payload,
                details={"proxy_error": True},
            )
        target = entity_id or url
        raise HttpError(
            f"Home Assistant request for {target} failed with HTTP {status_code}",
            status_code=status_code,
            payload=payload,
        )

    def _ensure_host(self) -> None:
        if not self.configured:
            raise ConfigurationError("Home Assistant host no configurado")

    def _ensure_entity(self, entity_id: str) -> None:
        if not entity_id:
            raise ConfigurationError("Entity ID no configurado")
        self._ensure_host()

    def _api_url(self, path: str) -> str:
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self._base_url}/api{path}"

    def _build_headers(self) -> Dict[str, str]:
        headers: Dict[str, str] = {
            "Content-Type": "application/json",
            NGROK_SKIP_BROWSER_WARNING: "true",
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    @staticmethod
    def _safe_json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return {}
