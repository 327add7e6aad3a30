"""
Circle Proxy Use Cases - Application Layer

Development proxy in front of the payments provider. It attaches the
operator bearer credential to every request and, for developer-controlled
writes, injects an entity secret ciphertext computed fresh for that request.
Configuration and upstream failures are answered with structured JSON bodies
instead of being raised.
"""

import json
from typing import Any, Dict, Optional

from src.domain.entities.errors import (
    CircleApiError,
    CiphertextGenerationError,
    DomainError,
    NetworkError,
)
from src.domain.entities.proxy import ProxyRequest, UpstreamResponse
from src.domain.gateways.circle_gateway import ICircleGateway, IWalletSetClient
from src.domain.ports.services import IEntitySecretCiphertextProvider
from src.shared import CIRCLE_WALLET_SETS_PATH, get_logger

logger = get_logger(__name__)

DEFAULT_WALLET_SET_NAME = "Casa Color"

MISSING_API_KEY_MESSAGE = (
    'Añade CIRCLE_API_KEY o VITE_CIRCLE_API_KEY en .env y reinicia "npm run dev".'
)
UPSTREAM_HINT = (
    "Verifica CIRCLE_API_KEY y CIRCLE_ENTITY_SECRET_HEX (hex 64 caracteres) "
    'en .env. Reinicia "npm run dev".'
)
CIPHERTEXT_FAILURE_MESSAGE = "No se pudo generar entity secret ciphertext"
WALLET_SET_FAILURE_MESSAGE = "Error al crear Wallet Set"


class CircleProxyUseCase:
    """Decide how a proxied payments request is answered."""

    def __init__(
        self,
        circle_gateway: ICircleGateway,
        wallet_set_client: IWalletSetClient,
        ciphertext_provider: IEntitySecretCiphertextProvider,
        api_key: Optional[str],
        entity_secret_hex: Optional[str] = None,
        legacy_entity_secret: Optional[str] = None,
        default_wallet_set_name: str = DEFAULT_WALLET_SET_NAME,
    ):
        """
        Args:
            circle_gateway: Raw provider client used for forwarding.
            wallet_set_client: Managed client used for wallet-set creation.
            ciphertext_provider: Produces one-time entity secret ciphertexts.
            api_key: Operator API key; requests are refused with 401 without it.
            entity_secret_hex: 64-hex entity secret for per-request encryption.
            legacy_entity_secret: Pre-registered static ciphertext, used only
                when no hex secret is configured.
            default_wallet_set_name: Name used when the request omits one.
        """
        self.circle_gateway = circle_gateway
        self.wallet_set_client = wallet_set_client
        self.ciphertext_provider = ciphertext_provider
        self.api_key = (api_key or "").strip() or None
        self.entity_secret_hex = (entity_secret_hex or "").strip() or None
        self.legacy_entity_secret = (legacy_entity_secret or "").strip() or None
        self.default_wallet_set_name = default_wallet_set_name

    @property
    def legacy_mode(self) -> bool:
        return self.legacy_entity_secret is not None and self.entity_secret_hex is None

    async def execute(self, request: ProxyRequest) -> UpstreamResponse:
        if not self.api_key:
            logger.warning("circle.proxy.missing_api_key", path=request.normalized_path)
            return UpstreamResponse.json(
                401,
                {
                    "error": "Circle API key not set",
                    "message": MISSING_API_KEY_MESSAGE,
                },
            )

        path = request.normalized_path
        is_developer_post = request.method.upper() == "POST" and "developer/" in path

        if not is_developer_post:
            return await self._forward(request, request.body)

        if self.legacy_mode:
            data = self._parse_body(request.body)
            if data is None:
                return self._invalid_body_response()
            data.setdefault("entitySecretCiphertext", self.legacy_entity_secret)
            return await self._forward(request, self._encode(data))

        config_error = self.ciphertext_provider.validation_error()
        if config_error is not None:
            logger.warning("circle.proxy.invalid_entity_secret", path=path)
            return UpstreamResponse.json(
                400,
                {
                    "code": "PROXY_CONFIG",
                    "error": "Entity secret hex required",
                    "message": config_error,
                },
            )

        data = self._parse_body(request.body)
        if data is None:
            return self._invalid_body_response()

        if path.split("?", 1)[0] == CIRCLE_WALLET_SETS_PATH:
            return await self._create_wallet_set(data)

        return await self._forward_with_ciphertext(request, data)

    async def _create_wallet_set(self, data: Dict[str, Any]) -> UpstreamResponse:
        name = data.get("name") or self.default_wallet_set_name
        try:
            wallet_set = await self.wallet_set_client.create_wallet_set(name)
        except CircleApiError as exc:
            status = exc.status_code or 502
            return UpstreamResponse.json(
                status,
                {
                    "code": exc.code if exc.code is not None else status,
                    "error": "Circle API error",
                    "message": exc.message or WALLET_SET_FAILURE_MESSAGE,
                },
            )
        except CiphertextGenerationError as exc:
            logger.error("circle.proxy.ciphertext_failed", error=exc.message)
            return UpstreamResponse.json(502, {"error": CIPHERTEXT_FAILURE_MESSAGE})
        except NetworkError as exc:
            status = 504 if exc.timeout else 502
            logger.error(
                "circle.proxy.wallet_set_unreachable",
                status_code=status,
                error=exc.message,
            )
            return UpstreamResponse.json(
                status,
                {"code": status, "error": "Circle API error", "message": exc.message},
            )

        if wallet_set is None:
            return UpstreamResponse.json(201, {"data": None})
        if wallet_set.id is None and wallet_set.name is None:
            return UpstreamResponse.json(201, {"data": {"walletSet": None}})
        return UpstreamResponse.json(
            201, {"data": {"walletSet": wallet_set.to_public_dict()}}
        )

    async def _forward_with_ciphertext(
        self, request: ProxyRequest, data: Dict[str, Any]
    ) -> UpstreamResponse:
        try:
            data["entitySecretCiphertext"] = await self.ciphertext_provider.generate()
        except DomainError as exc:
            logger.error("circle.proxy.ciphertext_failed", error=exc.message)
            return UpstreamResponse.json(502, {"error": CIPHERTEXT_FAILURE_MESSAGE})

        response = await self._forward(request, self._encode(data))
        if response.status_code not in (400, 401):
            return response

        parsed = response.json_body()
        hint = None
        if isinstance(parsed, dict):
            hint = parsed.get("message") or parsed.get("error")
        return UpstreamResponse.json(
            response.status_code,
            {
                "error": "Circle API error",
                "message": hint or response.text,
                "hint": UPSTREAM_HINT,
            },
        )

    async def _forward(self, request: ProxyRequest, body: bytes) -> UpstreamResponse:
        headers: Dict[str, str] = {}
        if self.legacy_mode:
            headers["X-Entity-Secret"] = self.legacy_entity_secret
        try:
            return await self.circle_gateway.forward(
                request.method.upper(),
                request.normalized_path,
                query=request.query,
                body=body,
                headers=headers,
            )
        except NetworkError as exc:
            status = 504 if exc.timeout else 502
            logger.error(
                "circle.proxy.upstream_unreachable",
                path=request.normalized_path,
                status_code=status,
                error=exc.message,
            )
            if exc.timeout:
                return UpstreamResponse.json(
                    504,
                    {"error": "Gateway Timeout", "message": "Timeout al conectar con Circle"},
                )
            return UpstreamResponse.json(502, {"error": exc.message})

    @staticmethod
    def _parse_body(body: bytes) -> Optional[Dict[str, Any]]:
        try:
            data = json.loads(body or b"{}")
        except ValueError:
            return None
        return data if isinstance(data, dict) else None

    @staticmethod
    def _encode(data: Dict[str, Any]) -> bytes:
        return json.dumps(data).encode("utf-8")

    @staticmethod
    def _invalid_body_response() -> UpstreamResponse:
        return UpstreamResponse.json(
            400,
            {
                "error": "Invalid JSON body",
                "message": "El cuerpo de la petición debe ser un objeto JSON válido.",
            },
        )
