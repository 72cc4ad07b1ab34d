# tests/v1/test_network_api.py
"""Tests for the network settings endpoints."""

from unittest.mock import AsyncMock

from fastapi import status

from netnook.services.remote import MemoryBackend

PRIVATE_TEXT = 'const firebaseConfig = {"databaseURL": "memory://private", "projectId": "private-node"};'


def test_network_status(client) -> None:
    body = client.get("/api/v1/network").json()
    assert body == {
        "online": True,
        "usingCustomConfig": False,
        "state": "connected",
        "databaseURL": "memory://test",
    }


def test_connect_custom_from_pasted_text(client, runtime, private_backend: MemoryBackend) -> None:
    response = client.post("/api/v1/network/custom", json={"configText": PRIVATE_TEXT})

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["usingCustomConfig"] is True
    assert body["databaseURL"] == "memory://private"
    assert runtime.store.load_connection_config().project_id == "private-node"
    assert private_backend.listener_count == 1


def test_connect_custom_from_object(client, private_backend: MemoryBackend) -> None:
    response = client.post(
        "/api/v1/network/custom",
        json={"config": {"databaseURL": "memory://private", "apiKey": "k"}},
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["usingCustomConfig"] is True


def test_invalid_pasted_text(client) -> None:
    response = client.post("/api/v1/network/custom", json={"configText": "const x = {oops};"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"].startswith("Invalid JSON format")


def test_config_without_database_url(client) -> None:
    response = client.post("/api/v1/network/custom", json={"config": {"apiKey": "k"}})
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_missing_config_is_unprocessable(client) -> None:
    response = client.post("/api/v1/network/custom", json={})
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_unreachable_node_keeps_current_connection(client, runtime, mocker) -> None:
    mocker.patch.object(runtime, "connect_custom", AsyncMock(return_value=False))

    response = client.post(
        "/api/v1/network/custom",
        json={"config": {"databaseURL": "https://unreachable.example.com"}},
    )
    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    assert client.get("/api/v1/network").json()["databaseURL"] == "memory://test"


def test_reset_to_public_network(client, runtime, private_backend: MemoryBackend) -> None:
    client.post("/api/v1/network/custom", json={"configText": PRIVATE_TEXT})

    response = client.delete("/api/v1/network/custom")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["usingCustomConfig"] is False
    assert response.json()["databaseURL"] == "memory://test"
    assert runtime.store.load_connection_config() is None
