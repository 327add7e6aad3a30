from __future__ import annotations

import httpx
import pytest

from src.domain.entities.device import DeviceCommand
from src.domain.entities.errors import (
    AuthError,
    ConfigurationError,
    HttpError,
    NetworkError,
    UnsupportedCommandError,
)
from src.domain.entities.proxy import ProxyRequest
from src.infrastructure.gateways.home_assistant_gateway import HomeAssistantGateway


def _gateway(token: str | None = "secret-token") -> HomeAssistantGateway:
    return HomeAssistantGateway("https://home.example.org/", token=token)


@pytest.mark.asyncio
async def test_get_state_parses_payload(stub_http) -> None:
    client = stub_http(
        httpx.Response(
            200,
            json={
                "entity_id": "lock.front_door",
                "state": "LOCKED",
                "attributes": {"friendly_name": "Puerta"},
            },
        )
    )

    state = await _gateway().get_state("lock.front_door")

    assert state.state == "locked"
    assert state.attributes["friendly_name"] == "Puerta"
    call = client.calls[0]
    assert call["url"] == "https://home.example.org/api/states/lock.front_door"
    assert call["headers"]["Authorization"] == "Bearer secret-token"
    assert call["headers"]["ngrok-skip-browser-warning"] == "true"


@pytest.mark.asyncio
async def test_missing_token_omits_authorization(stub_http) -> None:
    client = stub_http(httpx.Response(200, json={"state": "on"}))

    await _gateway(token=None).get_state("switch.porch")

    assert "Authorization" not in client.calls[0]["headers"]


@pytest.mark.asyncio
async def test_unconfigured_host_fails_without_io(stub_http) -> None:
    client = stub_http()
    gateway = HomeAssistantGateway(None)

    with pytest.raises(ConfigurationError, match="host no configurado"):
        await gateway.get_state("lock.front_door")
    with pytest.raises(ConfigurationError, match="Entity ID no configurado"):
        await _gateway().get_state("")
    assert client.calls == []


@pytest.mark.asyncio
async def test_html_response_is_reported_as_tunnel_error(stub_http) -> None:
    stub_http(
        httpx.Response(
            200, content=b"<html>ngrok</html>", headers={"content-type": "text/html"}
        )
    )

    with pytest.raises(HttpError) as exc_info:
        await _gateway().get_state("lock.front_door")
    assert exc_info.value.details["html_response"] is True


@pytest.mark.asyncio
async def test_unauthorized_raises_auth_error(stub_http) -> None:
    stub_http(httpx.Response(401, json={"message": "Unauthorized"}))

    with pytest.raises(AuthError) as exc_info:
        await _gateway().get_state("lock.front_door")
    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_bad_gateway_mentions_tunnel(stub_http) -> None:
    stub_http(httpx.Response(502, json={"message": "ERR_NGROK_3200"}))

    with pytest.raises(HttpError, match="Túnel no disponible: ERR_NGROK_3200"):
        await _gateway().get_state("lock.front_door")


@pytest.mark.asyncio
async def test_not_found_keeps_status(stub_http) -> None:
    stub_http(httpx.Response(404, json={"message": "Entity not found."}))

    with pytest.raises(HttpError) as exc_info:
        await _gateway().get_state("lock.back_door")
    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_timeout_is_network_error(stub_http) -> None:
    stub_http(httpx.ReadTimeout("read timed out"))

    with pytest.raises(NetworkError) as exc_info:
        await _gateway().get_state("lock.front_door")
    assert exc_info.value.timeout is True
    assert exc_info.value.message == "Tiempo de espera agotado. Intenta nuevamente."


@pytest.mark.asyncio
async def test_connect_error_is_network_error(stub_http) -> None:
    stub_http(httpx.ConnectError("connection refused"))

    with pytest.raises(NetworkError) as exc_info:
        await _gateway().get_state("lock.front_door")
    assert exc_info.value.timeout is False


@pytest.mark.asyncio
async def test_send_command_posts_service_call(stub_http) -> None:
    client = stub_http(httpx.Response(200, json=[]))

    await _gateway().send_command("cover.garage", DeviceCommand.CLOSE)

    call = client.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == "https://home.example.org/api/services/cover/close_cover"
    assert call["json"] == {"entity_id": "cover.garage"}


@pytest.mark.asyncio
async def test_send_command_rejects_unknown_domain(stub_http) -> None:
    client = stub_http()

    with pytest.raises(UnsupportedCommandError):
        await _gateway().send_command("climate.living", DeviceCommand.TURN_ON)
    assert client.calls == []


@pytest.mark.asyncio
async def test_list_entities_filters_and_sorts(stub_http) -> None:
    stub_http(
        httpx.Response(
            200,
            json=[
                {"entity_id": "lock.z_gate", "state": "locked"},
                {"entity_id": "switch.porch", "state": "off"},
                {"entity_id": "lock.a_door", "state": "unlocked"},
            ],
        )
    )

    assert await _gateway().list_entities("lock") == ["lock.a_door", "lock.z_gate"]


@pytest.mark.asyncio
async def test_check_connection_accepts_unauthorized(stub_http) -> None:
    stub_http(httpx.Response(401), httpx.Response(500))
    gateway = _gateway()

    assert await gateway.check_connection() is True
    assert await gateway.check_connection() is False
    assert await HomeAssistantGateway("").check_connection() is False


@pytest.mark.asyncio
async def test_forward_relays_request(stub_http) -> None:
    client = stub_http(
        httpx.Response(200, json={"message": "API running."})
    )

    response = await _gateway().forward(
        ProxyRequest("GET", "/states", query="limit=1")
    )

    assert response.status_code == 200
    assert response.json_body() == {"message": "API running."}
    call = client.calls[0]
    assert call["url"] == "https://home.example.org/api/states?limit=1"
    assert call["headers"]["User-Agent"] == "Mozilla/5.0"


@pytest.mark.asyncio
async def test_forward_timeout(stub_http) -> None:
    stub_http(httpx.ConnectTimeout("timed out"))

    with pytest.raises(NetworkError) as exc_info:
        await _gateway().forward(ProxyRequest("GET", "/"))
    assert exc_info.value.timeout is True
