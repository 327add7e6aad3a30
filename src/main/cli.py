"""
Offline entity secret bootstrap - Main Layer

Generates a new 32-byte entity secret and its ciphertext so an operator can
register it with the payments provider before the proxy is used.
"""

from typing import Callable, Optional

from src.domain.entities.errors import DomainError
from src.infrastructure.gateways.circle_gateway import CircleGateway
from src.infrastructure.services.entity_secret_cipher import (
    encrypt_entity_secret,
    generate_entity_secret,
)
from src.main.config import AppSettings
from src.shared import get_logger

logger = get_logger(__name__)

Printer = Callable[[str], None]


async def generate_entity_secret_command(
    settings: AppSettings,
    gateway: Optional[CircleGateway] = None,
    out: Printer = print,
    err: Printer = print,
) -> int:
    """
    Fetch the provider public key, create a secret and print both values.

    Returns:
        int: Process exit code (0 on success, 1 on any failure)
    """
    api_key = (settings.circle.api_key or "").strip()
    if not api_key:
        err("Error: Necesitas CIRCLE_API_KEY o VITE_CIRCLE_API_KEY en .env o en el entorno.")
        err(
            "Ejemplo: CIRCLE_API_KEY=tu-api-key "
            "python -m src.main generate-entity-secret"
        )
        return 1

    gateway = gateway or CircleGateway(
        api_key=api_key,
        base_url=settings.circle.base_url,
        timeout=settings.circle.timeout,
    )

    out("Obteniendo clave pública de Circle...")
    try:
        public_key_pem = await gateway.fetch_public_key()
    except DomainError as exc:
        status_code = getattr(exc, "status_code", None)
        logger.error("cli.public_key.fetch_failed", status_code=status_code)
        if status_code is not None:
            err(f"Error al obtener la clave pública: {status_code} {exc.message}")
        else:
            err(f"Error: {exc.message}")
        return 1

    secret_hex = generate_entity_secret()
    try:
        ciphertext = encrypt_entity_secret(secret_hex, public_key_pem)
    except DomainError as exc:
        err(f"Error: {exc.message}")
        return 1

    out("")
    out("--- Entity Secret (hex) - GUÁRDALO EN LUGAR SEGURO; CIRCLE NO LO GUARDA ---")
    out(secret_hex)
    out("")
    out("--- Entity Secret Ciphertext (base64) - REGISTRA ESTE VALOR EN CIRCLE CONSOLE ---")
    out(ciphertext)
    out("")
    out("--- Pasos siguientes ---")
    out(
        "1. Ve a https://console.circle.com/ → Wallets → Dev-Controlled → "
        "Entity Secret"
    )
    out('2. Pega el "Entity Secret Ciphertext" de arriba en el campo y pulsa Register')
    out("3. En .env añade UNA de estas opciones:")
    out(f"   - CIRCLE_ENTITY_SECRET_HEX={secret_hex}")
    out(
        "     (recomendado: el proxy genera un ciphertext nuevo en cada petición; "
        "evita error 156013)"
    )
    out(
        "   - O CIRCLE_ENTITY_SECRET=<ciphertext completo> si prefieres un solo "
        "ciphertext (puede fallar si Circle exige uno nuevo por petición)"
    )
    out(
        "4. Guarda el Entity Secret (hex) y el archivo de recuperación en un "
        "lugar seguro."
    )
    return 0
