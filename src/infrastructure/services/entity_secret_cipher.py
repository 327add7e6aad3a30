"""
Entity secret ciphertext generation.

The payments provider requires every developer-controlled write to carry a
fresh RSA-OAEP (SHA-256) encryption of the operator's 32-byte entity secret,
encrypted with the provider's entity public key and base64-encoded.
"""

from __future__ import annotations

import base64
import re
import secrets
from typing import Optional

from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from src.domain.entities.errors import CiphertextGenerationError, EntitySecretError
from src.domain.gateways.circle_gateway import ICircleGateway
from src.shared import get_logger

logger = get_logger(__name__)

ENTITY_SECRET_BYTES = 32
_HEX_SECRET_PATTERN = re.compile(r"^[0-9a-fA-F]{64}$")


def entity_secret_hex_error(value: Optional[str]) -> Optional[str]:
    """Return the operator-facing diagnostic for ``value``, or None when valid."""
    trimmed = (value or "").strip()
    if _HEX_SECRET_PATTERN.match(trimmed):
        return None
    if not trimmed:
        return (
            "Añade CIRCLE_ENTITY_SECRET_HEX en .env (64 caracteres hexadecimales "
            '0-9, a-f). Reinicia "npm run dev" después de guardar.'
        )
    suffix = " pero hay caracteres no válidos" if len(trimmed) == 64 else ""
    return (
        "CIRCLE_ENTITY_SECRET_HEX debe ser exactamente 64 caracteres "
        f"hexadecimales (0-9, a-f). Tienes {len(trimmed)} caracteres{suffix}."
    )


def validate_entity_secret_hex(value: Optional[str]) -> str:
    """
    Validate and return the trimmed 64-character hex entity secret.

    Raises:
        EntitySecretError: With the diagnostic message when invalid.
    """
    message = entity_secret_hex_error(value)
    if message is not None:
        raise EntitySecretError(message, details={"length": len((value or "").strip())})
    return (value or "").strip()


def encrypt_entity_secret(secret_hex: str, public_key_pem: str) -> str:
    """
    Encrypt the entity secret with RSA-OAEP (SHA-256 digest and MGF1).

    OAEP padding is randomized, so two calls never return the same ciphertext.

    Raises:
        EntitySecretError: If ``secret_hex`` is not a valid 64-hex secret.
        CiphertextGenerationError: If the PEM cannot be loaded as an RSA key.
    """
    secret = bytes.fromhex(validate_entity_secret_hex(secret_hex))

    try:
        public_key = serialization.load_pem_public_key(public_key_pem.encode("utf-8"))
    except (ValueError, TypeError) as exc:
        raise CiphertextGenerationError(
            "Invalid entity public key", details={"error": str(exc)}
        ) from exc
    if not isinstance(public_key, rsa.RSAPublicKey):
        raise CiphertextGenerationError("Entity public key is not an RSA key")

    encrypted = public_key.encrypt(
        secret,
        padding.OAEP(
            mgf=padding.MGF1(algorithm=hashes.SHA256()),
            algorithm=hashes.SHA256(),
            label=None,
        ),
    )
    return base64.b64encode(encrypted).decode("ascii")


def generate_entity_secret() -> str:
    """Generate a new random entity secret as 64 lowercase hex characters."""
    return secrets.token_bytes(ENTITY_SECRET_BYTES).hex()


class CirclePublicKeyCache:
    """
    Process-lifetime cache of the provider's entity public key.

    The first successful fetch wins. Concurrent first callers may each fetch;
    the key is identical so the race is harmless.
    """

    def __init__(self, gateway: ICircleGateway):
        self._gateway = gateway
        self._public_key_pem: Optional[str] = None

    @property
    def cached(self) -> Optional[str]:
        return self._public_key_pem

    async def get(self) -> str:
        if self._public_key_pem is None:
            public_key_pem = await self._gateway.fetch_public_key()
            if self._public_key_pem is None:
                self._public_key_pem = public_key_pem
                logger.info("circle.public_key.cached")
        return self._public_key_pem

    def clear(self) -> None:
        self._public_key_pem = None


class EntitySecretCiphertextFactory:
    """Produces a fresh ciphertext for every provider write; never cached."""

    def __init__(self, public_key_cache: CirclePublicKeyCache, secret_hex: Optional[str]):
        self._public_key_cache = public_key_cache
        self._secret_hex = secret_hex

    def validation_error(self) -> Optional[str]:
        return entity_secret_hex_error(self._secret_hex)

    async def generate(self) -> str:
        """
        Raises:
            EntitySecretError: If the configured secret is not valid hex.
            CiphertextGenerationError: If the key cannot be fetched or used.
        """
        secret_hex = validate_entity_secret_hex(self._secret_hex)
        try:
            public_key_pem = await self._public_key_cache.get()
        except CiphertextGenerationError:
            raise
        except Exception as exc:
            logger.error("circle.public_key.fetch_failed", error=str(exc))
            raise CiphertextGenerationError(
                "No se pudo obtener la clave pública de Circle",
                details={"error": str(exc)},
            ) from exc
        return encrypt_entity_secret(secret_hex, public_key_pem)
