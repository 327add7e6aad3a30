"""
Gateways Package - Infrastructure Layer

This package contains concrete implementations of the gateway
interfaces defined in the domain layer. These implementations
handle the details of external service communications.
"""

from .circle_gateway import CircleGateway
from .circle_wallets_client import CircleWalletsClient
from .home_assistant_gateway import HomeAssistantGateway

__all__ = ["CircleGateway", "CircleWalletsClient", "HomeAssistantGateway"]
