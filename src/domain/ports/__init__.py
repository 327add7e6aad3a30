"""Domain ports package."""

from .services import IEntitySecretCiphertextProvider, IHealthCheckService

__all__ = ["IEntitySecretCiphertextProvider", "IHealthCheckService"]
