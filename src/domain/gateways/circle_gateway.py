"""
Circle Gateway Interfaces - Domain Layer

Contracts for the payments provider: raw request forwarding, public key
retrieval and the managed wallet-set client.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional

from src.domain.entities.proxy import UpstreamResponse
from src.domain.entities.wallet import WalletSet


class ICircleGateway(ABC):
    """Interface for the payments provider REST API."""

    @abstractmethod
    async def fetch_public_key(self) -> str:
        """
        Fetch the provider's entity public key (PEM).

        Raises:
            ConfigurationError: If no API key is configured.
            CiphertextGenerationError: If the response carries no key.
            NetworkError, HttpError: On transport or provider failure.
        """
        pass

    @abstractmethod
    async def forward(
        self,
        method: str,
        path: str,
        *,
        query: str = "",
        body: Optional[bytes] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> UpstreamResponse:
        """
        Send a request to the provider with the operator bearer credential.

        Any status code is returned as-is; only transport failures raise
        ``NetworkError`` (``timeout=True`` for timeouts).
        """
        pass


class IWalletSetClient(ABC):
    """Managed client for wallet-set creation."""

    @abstractmethod
    async def create_wallet_set(self, name: str) -> Optional[WalletSet]:
        """
        Create a developer-controlled wallet set.

        Returns:
            The created wallet set, or ``None`` when the provider answered
            without any ``walletSet`` entry.

        Raises:
            CircleApiError: When the provider rejects the request.
            CiphertextGenerationError: When the entity secret cannot be encrypted.
            NetworkError: On transport failure.
        """
        pass
