from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from src.domain.entities.device import (  # noqa: E402
    DeviceDomain,
    EntityState,
    resolve_service,
)
from src.domain.entities.errors import ConfigurationError, HttpError  # noqa: E402
from src.domain.entities.proxy import UpstreamResponse  # noqa: E402
from src.domain.entities.wallet import WalletSet  # noqa: E402
from src.domain.gateways.circle_gateway import (  # noqa: E402
    ICircleGateway,
    IWalletSetClient,
)
from src.domain.gateways.home_assistant_gateway import (  # noqa: E402
    IHomeAssistantGateway,
)

VALID_SECRET_HEX = "ab" * 32


class FakeHomeAssistantGateway(IHomeAssistantGateway):
    """In-memory hub: states keyed by entity id, failures injected per call."""

    def __init__(self, states: Optional[Dict[str, str]] = None, configured: bool = True):
        self.states: Dict[str, str] = dict(states or {})
        self.configured = configured
        self.get_calls: List[str] = []
        self.service_calls: List[tuple] = []
        self.forward_calls: List[Any] = []
        self.get_error: Optional[Exception] = None
        self.service_error: Optional[Exception] = None
        self.forward_response = UpstreamResponse.json(200, {"message": "API running."})
        self.forward_error: Optional[Exception] = None
        self.apply_service_calls = False

    def _require_configured(self) -> None:
        if not self.configured:
            raise ConfigurationError("Home Assistant host no configurado")

    async def get_state(self, entity_id: str) -> EntityState:
        self._require_configured()
        self.get_calls.append(entity_id)
        if self.get_error is not None:
            raise self.get_error
        if entity_id not in self.states:
            raise HttpError("Entity not found.", status_code=404)
        return EntityState(entity_id=entity_id, state=self.states[entity_id])

    async def send_command(self, entity_id, command, domain=None):
        self._require_configured()
        if domain is None:
            domain = DeviceDomain.from_value(entity_id.split(".", 1)[0])
        call = resolve_service(domain, command)
        await self.call_service(call.domain, call.service, {"entity_id": entity_id})

    async def call_service(self, domain, service, service_data=None):
        self._require_configured()
        entity_id = (service_data or {}).get("entity_id")
        self.service_calls.append((domain, service, entity_id))
        if self.service_error is not None:
            raise self.service_error
        if self.apply_service_calls:
            self.states[entity_id] = _APPLIED_STATES.get(
                service, self.states.get(entity_id)
            )
        return []

    async def list_entities(self, domain: Optional[str] = None) -> List[str]:
        self._require_configured()
        prefix = f"{domain}." if domain else ""
        return sorted(e for e in self.states if e.startswith(prefix))

    async def check_connection(self) -> bool:
        return self.configured

    async def forward(self, request):
        self._require_configured()
        self.forward_calls.append(request)
        if self.forward_error is not None:
            raise self.forward_error
        return self.forward_response


_APPLIED_STATES = {
    "lock": "locked",
    "unlock": "unlocked",
    "turn_on": "on",
    "turn_off": "off",
    "open_cover": "open",
    "close_cover": "closed",
}


class FakeCircleGateway(ICircleGateway):
    def __init__(self, public_key_pem: str = ""):
        self.public_key_pem = public_key_pem
        self.fetch_calls = 0
        self.fetch_error: Optional[Exception] = None
        self.forwarded: List[Dict[str, Any]] = []
        self.response = UpstreamResponse.json(200, {"data": {}})
        self.forward_error: Optional[Exception] = None

    async def fetch_public_key(self) -> str:
        self.fetch_calls += 1
        if self.fetch_error is not None:
            raise self.fetch_error
        return self.public_key_pem

    async def forward(self, method, path, *, query="", body=b"", headers=None):
        self.forwarded.append(
            {
                "method": method,
                "path": path,
                "query": query,
                "body": body,
                "headers": dict(headers or {}),
            }
        )
        if self.forward_error is not None:
            raise self.forward_error
        return self.response


class FakeWalletSetClient(IWalletSetClient):
    def __init__(self, wallet_set: Optional[WalletSet] = None):
        self.wallet_set = wallet_set or WalletSet(
            id="ws-1",
            name="Casa Color",
            created_at="2026-01-01T00:00:00Z",
            updated_at="2026-01-01T00:00:00Z",
        )
        self.names: List[str] = []
        self.error: Optional[Exception] = None

    async def create_wallet_set(self, name: str) -> Optional[WalletSet]:
        self.names.append(name)
        if self.error is not None:
            raise self.error
        return self.wallet_set


class FakeCiphertextProvider:
    def __init__(self, error_message: Optional[str] = None):
        self.error_message = error_message
        self.generated = 0
        self.generate_error: Optional[Exception] = None

    def validation_error(self) -> Optional[str]:
        return self.error_message

    async def generate(self) -> str:
        if self.generate_error is not None:
            raise self.generate_error
        self.generated += 1
        return f"ciphertext-{self.generated}"


@pytest.fixture(scope="session")
def rsa_private_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def public_key_pem(rsa_private_key: rsa.RSAPrivateKey) -> str:
    return (
        rsa_private_key.public_key()
        .public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        .decode("ascii")
    )


@pytest.fixture()
def fake_home_assistant() -> FakeHomeAssistantGateway:
    return FakeHomeAssistantGateway(
        {
            "lock.front_door": "locked",
            "switch.porch": "off",
            "light.kitchen": "on",
            "cover.garage": "closed",
            "sensor.temperature": "21.5",
        }
    )


@pytest.fixture()
def fake_circle_gateway(public_key_pem: str) -> FakeCircleGateway:
    return FakeCircleGateway(public_key_pem)


@pytest.fixture()
def fake_wallet_set_client() -> FakeWalletSetClient:
    return FakeWalletSetClient()


@pytest.fixture()
def fake_ciphertext_provider() -> FakeCiphertextProvider:
    return FakeCiphertextProvider()

