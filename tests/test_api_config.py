import pytest

from netwatch_manager import crud
from netwatch_manager.core.security import decrypt
from netwatch_manager.services.netwatch.exceptions import GatewayTimeoutError


@pytest.mark.asyncio
async def test_defaults_before_first_save(client):
    body = (await client.get("/api/v1/config/")).json()
    assert body["mikrotik_host"] == ""
    assert body["mikrotik_port"] == 8728
    assert body["polling_interval"] == 30
    assert body["default_netwatch_timeout"] == 1000
    assert body["default_netwatch_interval"] == 5
    assert body["has_password"] is False


@pytest.mark.asyncio
async def test_upsert_and_partial_update(client, db):
    response = await client.put("/api/v1/config/", json={
        "mikrotik_host": "192.168.88.1", "mikrotik_user": "admin", "mikrotik_password": "s3cret",
    })
    assert response.status_code == 200
    body = response.json()
    assert body["has_password"] is True
    assert "mikrotik_password" not in body

    body = (await client.put("/api/v1/config/", json={"polling_interval": 45})).json()
    assert body["mikrotik_host"] == "192.168.88.1"
    assert body["polling_interval"] == 45

    stored = await crud.system_config.get_system_config(db)
    assert stored.mikrotik_password != "s3cret"
    assert decrypt(stored.mikrotik_password) == "s3cret"


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [
    {"mikrotik_port": 0},
    {"mikrotik_port": 70000},
    {"polling_interval": 0},
    {"default_netwatch_timeout": 99},
    {"default_netwatch_interval": 3601},
    {"mikrotik_host": "router.local"},
])
async def test_invalid_config_is_rejected(client, payload):
    response = await client.put("/api/v1/config/", json=payload)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_connection_test_success(client, fake_router):
    response = await client.post("/api/v1/config/test-connection", json={
        "mikrotik_host": "192.168.88.1", "mikrotik_user": "admin", "mikrotik_password": "s3cret",
    })
    body = response.json()
    assert body["success"] is True
    assert body["router"] == {
        "host": "192.168.88.1", "port": 8728, "identity": "core-router", "version": "7.14.2 (stable)",
    }
    assert fake_router.close_calls == 1


@pytest.mark.asyncio
async def test_connection_test_failure_is_classified(client, fake_router):
    fake_router.connect_error = GatewayTimeoutError("Connection timed out after 10s: 192.168.88.1:8728")

    body = (await client.post("/api/v1/config/test-connection", json={
        "mikrotik_host": "192.168.88.1", "mikrotik_user": "admin", "mikrotik_password": "s3cret",
    })).json()

    assert body["success"] is False
    assert body["category"] == "Timeout"
    assert body["error"] == "Connection timeout"
    assert "192.168.88.1:8728" in body["details"]


@pytest.mark.asyncio
async def test_connection_test_requires_ipv4(client):
    response = await client.post("/api/v1/config/test-connection", json={
        "mikrotik_host": "not-an-ip", "mikrotik_user": "admin", "mikrotik_password": "x",
    })
    assert response.status_code == 422
