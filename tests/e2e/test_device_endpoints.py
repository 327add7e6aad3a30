from __future__ import annotations


def test_list_devices(client):
    response = client.get("/devices/", params={"domain": "lock"})

    assert response.status_code == 200
    assert response.json() == {
        "domain": "lock",
        "count": 1,
        "entities": ["lock.front_door"],
    }


def test_get_device(client):
    response = client.get("/devices/lock.front_door")

    assert response.status_code == 200
    body = response.json()
    assert body["displayed_state"] == "locked"
    assert body["is_locked"] is True
    assert body["is_connected"] is True


def test_unknown_entity_is_reported_missing(client):
    response = client.get("/devices/lock.back_door")

    assert response.status_code == 200
    body = response.json()
    assert body["is_connected"] is False
    assert body["is_controllable"] is False


def test_invalid_entity_id(client):
    response = client.get("/devices/front_door")

    assert response.status_code == 422


def test_command_applies_optimistic_state(client, fake_home_assistant):
    response = client.post("/devices/lock.front_door/unlock")

    assert response.status_code == 200
    body = response.json()
    assert body["command"] == "unlock"
    assert body["device"]["displayed_state"] == "unlocked"
    assert fake_home_assistant.service_calls == [("lock", "unlock", "lock.front_door")]


def test_unknown_command_is_rejected(client):
    response = client.post("/devices/lock.front_door/explode")

    assert response.status_code == 422


def test_unsupported_command(client):
    response = client.post("/devices/sensor.temperature/turn_on")

    assert response.status_code == 422


def test_failed_command_rolls_back(client, fake_home_assistant):
    from src.domain.entities.errors import HttpError

    fake_home_assistant.service_error = HttpError("Server error", status_code=500)

    response = client.post("/devices/switch.porch/turn_on")

    assert response.status_code == 502
    assert response.json()["detail"]["cause"] == "Server error"

    device = client.get("/devices/switch.porch").json()
    assert device["displayed_state"] == "off"
    assert device["optimistic_state"] is None
    assert device["error"] == "Server error"
