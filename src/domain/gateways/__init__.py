"""
Gateways Package - Domain Layer

This package contains interfaces defining gateway contracts
for external service communications. Specific implementations
are provided by the infrastructure layer.
"""

from .circle_gateway import ICircleGateway, IWalletSetClient
from .home_assistant_gateway import IHomeAssistantGateway

__all__ = ["ICircleGateway", "IHomeAssistantGateway", "IWalletSetClient"]
