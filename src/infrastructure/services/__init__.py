"""Infrastructure services package."""

from .entity_secret_cipher import (
    CirclePublicKeyCache,
    EntitySecretCiphertextFactory,
    encrypt_entity_secret,
    generate_entity_secret,
    validate_entity_secret_hex,
)
from .health_check_service import HealthCheckService

__all__ = [
    "CirclePublicKeyCache",
    "EntitySecretCiphertextFactory",
    "HealthCheckService",
    "encrypt_entity_secret",
    "generate_entity_secret",
    "validate_entity_secret_hex",
]
