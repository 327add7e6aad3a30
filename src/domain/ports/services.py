"""
Domain service abstractions.

Protocols for collaborators the application layer depends on but the
infrastructure layer implements: dependency health checks and one-time
entity secret ciphertext generation.
"""

from __future__ import annotations

from typing import Optional, Protocol

from src.domain.entities.health import SystemHealth


class IHealthCheckService(Protocol):
    """Checks the hub and the payments provider."""

    async def evaluate(self) -> SystemHealth:
        """Check every dependency concurrently and aggregate the result."""
        ...


class IEntitySecretCiphertextProvider(Protocol):
    """Produces one-time ciphertexts of the operator entity secret."""

    def validation_error(self) -> Optional[str]:
        """Return why the configured secret is unusable, or None when it is valid."""
        ...

    async def generate(self) -> str:
        """Return a freshly encrypted, base64-encoded entity secret."""
        ...
