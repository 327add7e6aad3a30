"""
Home Assistant Gateway Interface - Domain Layer

This module defines the interface for reading and commanding entities on
the home-automation hub.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from src.domain.entities.device import DeviceCommand, DeviceDomain, EntityState
from src.domain.entities.proxy import ProxyRequest, UpstreamResponse


class IHomeAssistantGateway(ABC):
    """Interface for the hub REST API."""

    @abstractmethod
    async def get_state(self, entity_id: str) -> EntityState:
        """
        Fetch the current state of one entity.

        Raises:
            ConfigurationError: If the entity id or hub host is missing (no I/O).
            NetworkError: If the hub cannot be reached.
            HttpError: If the hub answers with a non-2xx status.
        """
        pass

    @abstractmethod
    async def send_command(
        self,
        entity_id: str,
        command: DeviceCommand,
        domain: Optional[DeviceDomain] = None,
    ) -> None:
        """
        Issue a command against one entity. No retries are attempted.

        Raises:
            ConfigurationError: If the entity id or hub host is missing (no I/O).
            UnsupportedCommandError: If the command does not apply to the domain.
            NetworkError, HttpError, AuthError: On transport or hub failure.
        """
        pass

    @abstractmethod
    async def call_service(
        self,
        domain: str,
        service: str,
        service_data: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Call an arbitrary hub service and return its JSON response."""
        pass

    @abstractmethod
    async def list_entities(self, domain: Optional[str] = None) -> List[str]:
        """List entity ids, optionally restricted to one domain, sorted."""
        pass

    @abstractmethod
    async def check_connection(self) -> bool:
        """Return True when the hub answers (an auth rejection still counts)."""
        pass

    @abstractmethod
    async def forward(self, request: ProxyRequest) -> UpstreamResponse:
        """Relay a raw request to the hub API on behalf of the development proxy."""
        pass
