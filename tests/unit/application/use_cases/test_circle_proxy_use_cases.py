from __future__ import annotations

import json

import pytest

from src.application.use_cases.circle_proxy_use_cases import (
    CIPHERTEXT_FAILURE_MESSAGE,
    MISSING_API_KEY_MESSAGE,
    UPSTREAM_HINT,
    CircleProxyUseCase,
)
from src.domain.entities.errors import (
    CiphertextGenerationError,
    CircleApiError,
    NetworkError,
)
from src.domain.entities.proxy import ProxyRequest, UpstreamResponse
from src.domain.entities.wallet import WalletSet

SECRET_HEX = "ab" * 32
WALLETS_PATH = "/v1/w3s/developer/wallets"
WALLET_SETS_PATH = "/v1/w3s/developer/walletSets"


@pytest.fixture()
def use_case(fake_circle_gateway, fake_wallet_set_client, fake_ciphertext_provider):
    return CircleProxyUseCase(
        circle_gateway=fake_circle_gateway,
        wallet_set_client=fake_wallet_set_client,
        ciphertext_provider=fake_ciphertext_provider,
        api_key="key",
        entity_secret_hex=SECRET_HEX,
    )


def _post(path: str, payload=None, raw: bytes | None = None) -> ProxyRequest:
    body = raw if raw is not None else json.dumps(payload or {}).encode("utf-8")
    return ProxyRequest("POST", path, body=body)


@pytest.mark.asyncio
async def test_missing_api_key_returns_401(use_case, fake_circle_gateway) -> None:
    use_case.api_key = None

    response = await use_case.execute(ProxyRequest("GET", "/v1/w3s/wallets"))

    assert response.status_code == 401
    assert response.json_body() == {
        "error": "Circle API key not set",
        "message": MISSING_API_KEY_MESSAGE,
    }
    assert fake_circle_gateway.forwarded == []


@pytest.mark.asyncio
async def test_reads_are_forwarded_untouched(use_case, fake_circle_gateway) -> None:
    fake_circle_gateway.response = UpstreamResponse.json(200, {"data": {"wallets": []}})

    response = await use_case.execute(
        ProxyRequest("GET", "v1/w3s/wallets", query="pageSize=5")
    )

    assert response.status_code == 200
    forwarded = fake_circle_gateway.forwarded[0]
    assert forwarded["path"] == "/v1/w3s/wallets"
    assert forwarded["query"] == "pageSize=5"
    assert forwarded["headers"] == {}


@pytest.mark.asyncio
async def test_developer_post_gets_fresh_ciphertext(use_case, fake_circle_gateway) -> None:
    fake_circle_gateway.response = UpstreamResponse.json(201, {"data": {}})

    await use_case.execute(_post(WALLETS_PATH, {"count": 1}))
    await use_case.execute(_post(WALLETS_PATH, {"count": 1}))

    bodies = [json.loads(call["body"]) for call in fake_circle_gateway.forwarded]
    assert bodies[0]["count"] == 1
    assert bodies[0]["entitySecretCiphertext"] == "ciphertext-1"
    assert bodies[1]["entitySecretCiphertext"] == "ciphertext-2"


@pytest.mark.asyncio
async def test_invalid_secret_length_returns_proxy_config_error(
    use_case, fake_ciphertext_provider, fake_circle_gateway
) -> None:
    fake_ciphertext_provider.error_message = (
        "CIRCLE_ENTITY_SECRET_HEX debe ser exactamente 64 caracteres "
        "hexadecimales (0-9, a-f). Tienes 63 caracteres."
    )

    response = await use_case.execute(_post(WALLETS_PATH, {}))

    assert response.status_code == 400
    body = response.json_body()
    assert body["code"] == "PROXY_CONFIG"
    assert "Tienes 63 caracteres" in body["message"]
    assert fake_circle_gateway.forwarded == []


@pytest.mark.asyncio
async def test_invalid_json_body(use_case, fake_circle_gateway) -> None:
    response = await use_case.execute(_post(WALLETS_PATH, raw=b"{not json"))

    assert response.status_code == 400
    assert response.json_body()["error"] == "Invalid JSON body"
    assert fake_circle_gateway.forwarded == []


@pytest.mark.asyncio
async def test_wallet_set_creation_is_narrowed(
    use_case, fake_wallet_set_client, fake_circle_gateway
) -> None:
    response = await use_case.execute(_post(WALLET_SETS_PATH, {"name": "Edificio A"}))

    assert response.status_code == 201
    assert response.json_body() == {
        "data": {
            "walletSet": {
                "id": "ws-1",
                "name": "Casa Color",
                "createdAt": "2026-01-01T00:00:00Z",
                "updatedAt": "2026-01-01T00:00:00Z",
            }
        }
    }
    assert fake_wallet_set_client.names == ["Edificio A"]
    assert fake_circle_gateway.forwarded == []


@pytest.mark.asyncio
async def test_wallet_set_default_name(use_case, fake_wallet_set_client) -> None:
    await use_case.execute(_post(WALLET_SETS_PATH, {}))

    assert fake_wallet_set_client.names == ["Casa Color"]


@pytest.mark.asyncio
async def test_wallet_set_without_identity(use_case, fake_wallet_set_client) -> None:
    fake_wallet_set_client.wallet_set = WalletSet(id=None, name=None)

    response = await use_case.execute(_post(WALLET_SETS_PATH, {}))

    assert response.json_body() == {"data": {"walletSet": None}}


@pytest.mark.asyncio
async def test_wallet_set_absent_from_response(use_case, fake_wallet_set_client) -> None:
    fake_wallet_set_client.wallet_set = None

    response = await use_case.execute(_post(WALLET_SETS_PATH, {}))

    assert response.status_code == 201
    assert response.json_body() == {"data": None}


@pytest.mark.asyncio
async def test_wallet_set_provider_error(use_case, fake_wallet_set_client) -> None:
    fake_wallet_set_client.error = CircleApiError(
        "entity secret ciphertext reused", status_code=400, code=156013
    )

    response = await use_case.execute(_post(WALLET_SETS_PATH, {}))

    assert response.status_code == 400
    assert response.json_body() == {
        "code": 156013,
        "error": "Circle API error",
        "message": "entity secret ciphertext reused",
    }


@pytest.mark.asyncio
async def test_wallet_set_ciphertext_failure(use_case, fake_wallet_set_client) -> None:
    fake_wallet_set_client.error = CiphertextGenerationError("no key")

    response = await use_case.execute(_post(WALLET_SETS_PATH, {}))

    assert response.status_code == 502
    assert response.json_body() == {"error": CIPHERTEXT_FAILURE_MESSAGE}


@pytest.mark.asyncio
async def test_ciphertext_failure_returns_502(
    use_case, fake_ciphertext_provider, fake_circle_gateway
) -> None:
    fake_ciphertext_provider.generate_error = CiphertextGenerationError("no key")

    response = await use_case.execute(_post(WALLETS_PATH, {}))

    assert response.status_code == 502
    assert response.json_body() == {"error": CIPHERTEXT_FAILURE_MESSAGE}
    assert fake_circle_gateway.forwarded == []


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code", [400, 401])
async def test_upstream_rejection_gets_hint(
    use_case, fake_circle_gateway, status_code
) -> None:
    fake_circle_gateway.response = UpstreamResponse.json(
        status_code, {"code": 156013, "message": "invalid ciphertext"}
    )

    response = await use_case.execute(_post(WALLETS_PATH, {}))

    assert response.status_code == status_code
    assert response.json_body() == {
        "error": "Circle API error",
        "message": "invalid ciphertext",
        "hint": UPSTREAM_HINT,
    }


@pytest.mark.asyncio
async def test_other_upstream_errors_pass_through(use_case, fake_circle_gateway) -> None:
    fake_circle_gateway.response = UpstreamResponse.json(409, {"message": "conflict"})

    response = await use_case.execute(_post(WALLETS_PATH, {}))

    assert response.status_code == 409
    assert response.json_body() == {"message": "conflict"}


@pytest.mark.asyncio
async def test_upstream_timeout_returns_504(use_case, fake_circle_gateway) -> None:
    fake_circle_gateway.forward_error = NetworkError("slow", timeout=True)

    response = await use_case.execute(ProxyRequest("GET", "/v1/w3s/wallets"))

    assert response.status_code == 504
    assert response.json_body() == {
        "error": "Gateway Timeout",
        "message": "Timeout al conectar con Circle",
    }


@pytest.mark.asyncio
async def test_upstream_network_error_returns_502(use_case, fake_circle_gateway) -> None:
    fake_circle_gateway.forward_error = NetworkError("Circle request failed: refused")

    response = await use_case.execute(ProxyRequest("GET", "/v1/w3s/wallets"))

    assert response.status_code == 502
    assert response.json_body() == {"error": "Circle request failed: refused"}


@pytest.mark.asyncio
async def test_legacy_mode_injects_static_ciphertext(
    fake_circle_gateway, fake_wallet_set_client, fake_ciphertext_provider
) -> None:
    use_case = CircleProxyUseCase(
        circle_gateway=fake_circle_gateway,
        wallet_set_client=fake_wallet_set_client,
        ciphertext_provider=fake_ciphertext_provider,
        api_key="key",
        legacy_entity_secret="static-ciphertext",
    )

    assert use_case.legacy_mode
    await use_case.execute(_post(WALLET_SETS_PATH, {"name": "x"}))

    forwarded = fake_circle_gateway.forwarded[0]
    assert json.loads(forwarded["body"]) == {
        "name": "x",
        "entitySecretCiphertext": "static-ciphertext",
    }
    assert forwarded["headers"] == {"X-Entity-Secret": "static-ciphertext"}
    assert fake_wallet_set_client.names == []
    assert fake_ciphertext_provider.generated == 0


def test_hex_secret_takes_precedence_over_legacy(
    fake_circle_gateway, fake_wallet_set_client, fake_ciphertext_provider
) -> None:
    use_case = CircleProxyUseCase(
        circle_gateway=fake_circle_gateway,
        wallet_set_client=fake_wallet_set_client,
        ciphertext_provider=fake_ciphertext_provider,
        api_key="key",
        entity_secret_hex=SECRET_HEX,
        legacy_entity_secret="static-ciphertext",
    )

    assert not use_case.legacy_mode
