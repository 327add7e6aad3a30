"""Development proxy to the Home Assistant REST API."""

from typing import Optional

from src.domain.entities.errors import ConfigurationError, NetworkError
from src.domain.entities.proxy import ProxyRequest, UpstreamResponse
from src.domain.gateways.home_assistant_gateway import IHomeAssistantGateway
from src.shared import get_logger

logger = get_logger(__name__)


class HomeAssistantProxyUseCase:
    """Forward ``<prefix>/<path>`` to ``<host>/api/<path>`` with hub credentials."""

    def __init__(
        self,
        home_assistant_gateway: IHomeAssistantGateway,
        host: Optional[str],
    ):
        self.home_assistant_gateway = home_assistant_gateway
        self.host = (host or "").strip() or None

    async def execute(self, request: ProxyRequest) -> UpstreamResponse:
        if not self.host:
            return self._not_configured()

        try:
            response = await self.home_assistant_gateway.forward(request)
        except ConfigurationError:
            return self._not_configured()
        except NetworkError as exc:
            logger.error(
                "home_assistant.proxy.failed",
                path=request.normalized_path,
                timeout=exc.timeout,
                error=exc.message,
            )
            if exc.timeout:
                return UpstreamResponse.json(
                    504,
                    {
                        "error": "Gateway Timeout",
                        "message": "Timeout al conectar con Home Assistant",
                        "details": exc.message,
                        "host": self.host,
                    },
                )
            return UpstreamResponse.json(
                502,
                {
                    "error": "Bad Gateway",
                    "message": "Error de conexión con Home Assistant a través del proxy",
                    "details": exc.message,
                    "host": self.host,
                },
            )

        if "text/html" in response.content_type:
            logger.warning(
                "home_assistant.proxy.html_response", path=request.normalized_path
            )
            return UpstreamResponse.json(
                502,
                {
                    "error": "Tunnel unavailable",
                    "message": "El túnel de ngrok devolvió una página HTML. "
                    "Verifica que esté activo.",
                },
            )
        return response

    @staticmethod
    def _not_configured() -> UpstreamResponse:
        return UpstreamResponse.json(
            503,
            {
                "error": "Service Unavailable",
                "message": "HOME_ASSISTANT_HOST no configurado",
            },
        )
