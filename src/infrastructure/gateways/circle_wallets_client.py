"""Managed client for developer-controlled wallet sets."""

import json
import uuid
from typing import Any, Dict, Optional

import httpx

from src.domain.entities.errors import CircleApiError, NetworkError
from src.domain.entities.wallet import WalletSet
from src.domain.gateways.circle_gateway import IWalletSetClient
from src.domain.ports.services import IEntitySecretCiphertextProvider
from src.shared import CIRCLE_API_BASE_URL, CIRCLE_WALLET_SETS_PATH, get_logger

logger = get_logger(__name__)


class CircleWalletsClient(IWalletSetClient):
    """
    Wallet-set client that owns ciphertext generation.

    Every request carries a new idempotency key and a freshly generated
    entity secret ciphertext.
    """

    def __init__(
        self,
        api_key: Optional[str],
        ciphertext_factory: IEntitySecretCiphertextProvider,
        base_url: str = CIRCLE_API_BASE_URL,
        timeout: float = 30.0,
    ):
        self.api_key = (api_key or "").strip()
        self.ciphertext_factory = ciphertext_factory
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def create_wallet_set(self, name: str) -> Optional[WalletSet]:
        payload = {
            "idempotencyKey": str(uuid.uuid4()),
            "name": name,
            "entitySecretCiphertext": await self.ciphertext_factory.generate(),
        }
        url = f"{self.base_url}{CIRCLE_WALLET_SETS_PATH}"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(url, headers=headers, json=payload)
        except httpx.TimeoutException as exc:
            raise NetworkError(
                "Timeout creating wallet set", timeout=True
            ) from exc
        except httpx.RequestError as exc:
            raise NetworkError(f"Failed to create wallet set: {exc}") from exc

        body = self._safe_json(response)
        if response.status_code >= 400:
            message = body.get("message") if isinstance(body, dict) else None
            code = body.get("code") if isinstance(body, dict) else None
            logger.error(
                "circle.wallet_set.create_failed",
                status_code=response.status_code,
                code=code,
            )
            raise CircleApiError(
                message if isinstance(message, str) else "Error al crear Wallet Set",
                status_code=response.status_code,
                code=code if isinstance(code, int) else None,
                payload=body,
            )

        data = body.get("data")
        if not isinstance(data, dict) or "walletSet" not in data:
            logger.warning(
                "circle.wallet_set.empty_response", status_code=response.status_code
            )
            return None

        result = WalletSet.from_dict(data.get("walletSet") or {})
        logger.info("circle.wallet_set.created", wallet_set_id=result.id)
        return result

    @staticmethod
    def _safe_json(response: httpx.Response) -> Dict[str, Any]:
        try:
            data = json.loads(response.content or b"{}")
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}
