from __future__ import annotations

import pytest
from dependency_injector import providers
from fastapi.testclient import TestClient

from src.domain.entities.health import DependencyStatus, ServiceStatus, SystemHealth
from src.main.app import create_app
from src.main.container import get_container


class _StubHealthCheckService:
    def __init__(self) -> None:
        self.health = SystemHealth.aggregate(
            [
                DependencyStatus(name="home_assistant", status=ServiceStatus.UP),
                DependencyStatus(name="circle", status=ServiceStatus.UP),
            ]
        )

    async def evaluate(self) -> SystemHealth:
        return self.health


@pytest.fixture()
def health_stub() -> _StubHealthCheckService:
    return _StubHealthCheckService()


@pytest.fixture()
def app(
    health_stub,
    fake_home_assistant,
    fake_circle_gateway,
    fake_wallet_set_client,
    fake_ciphertext_provider,
):
    app = create_app()
    container = get_container()

    container.config.home_assistant.host.from_value("https://home.example.org")
    container.config.home_assistant.follow_up_delays.from_value(())
    container.config.circle.api_key.from_value("circle-key")
    container.config.circle.entity_secret_hex.from_value("ab" * 32)
    container.config.circle.entity_secret.from_value(None)

    container.home_assistant_gateway.override(providers.Object(fake_home_assistant))
    container.circle_gateway.override(providers.Object(fake_circle_gateway))
    container.circle_wallets_client.override(providers.Object(fake_wallet_set_client))
    container.entity_secret_ciphertext_factory.override(
        providers.Object(fake_ciphertext_provider)
    )
    container.health_check_service.override(providers.Object(health_stub))
    return app


@pytest.fixture()
def client(app):
    with TestClient(app) as test_client:
        yield test_client
