import pytest

from netwatch_manager.services.netwatch.exceptions import GatewayTimeoutError

CONFIG = {
    "mikrotik_host": "192.168.88.1",
    "mikrotik_user": "admin",
    "mikrotik_password": "s3cret",
    "mikrotik_port": 8728,
}


async def _configure(client):
    response = await client.put("/api/v1/config/", json=CONFIG)
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_create_device_defaults(client):
    response = await client.post("/api/v1/devices/", json={"name": "Core Router", "ip": "10.0.0.1"})
    assert response.status_code == 201
    body = response.json()
    assert body["warning"] is None
    device = body["device"]
    assert device["status"] == "unknown"
    assert device["type"] == "ROUTER"
    assert device["netwatch_timeout"] == 1000
    assert device["netwatch_interval"] == 5
    assert device["needs_sync"] is False


@pytest.mark.asyncio
async def test_create_uses_configured_netwatch_defaults(client):
    await client.put("/api/v1/config/", json={**CONFIG, "default_netwatch_timeout": 3000, "default_netwatch_interval": 60})
    response = await client.post("/api/v1/devices/", json={"name": "Core Router", "ip": "10.0.0.1"})
    device = response.json()["device"]
    assert (device["netwatch_timeout"], device["netwatch_interval"]) == (3000, 60)


@pytest.mark.asyncio
async def test_duplicate_ip_is_rejected(client):
    await client.post("/api/v1/devices/", json={"name": "A", "ip": "10.0.0.1"})
    response = await client.post("/api/v1/devices/", json={"name": "B", "ip": "10.0.0.1"})
    assert response.status_code == 400
    devices = (await client.get("/api/v1/devices/")).json()
    assert [d["name"] for d in devices] == ["A"]


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [
    {"name": "A", "ip": "10.0.0.300"},
    {"name": "", "ip": "10.0.0.1"},
    {"name": "A", "ip": "10.0.0.1", "type": "TOASTER"},
    {"name": "A", "ip": "10.0.0.1", "netwatch_timeout": 50},
    {"name": "A", "ip": "10.0.0.1", "netwatch_interval": 4000},
])
async def test_invalid_device_is_rejected(client, payload):
    response = await client.post("/api/v1/devices/", json=payload)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_push_failure_degrades_to_warning(client, fake_router):
    await _configure(client)
    fake_router.connect_error = GatewayTimeoutError("Connection timed out")

    response = await client.post(
        "/api/v1/devices/", json={"name": "X", "ip": "10.1.1.1", "type": "ROUTER", "sync_to_netwatch": True},
    )

    assert response.status_code == 201
    assert "Timeout" in response.json()["warning"]
    devices = (await client.get("/api/v1/devices/")).json()
    assert [d["ip"] for d in devices] == ["10.1.1.1"]


@pytest.mark.asyncio
async def test_push_without_config_warns(client, fake_router):
    response = await client.post(
        "/api/v1/devices/", json={"name": "X", "ip": "10.1.1.1", "sync_to_netwatch": True},
    )
    assert response.status_code == 201
    assert "NotConfigured" in response.json()["warning"]


@pytest.mark.asyncio
async def test_push_success(client, fake_router):
    await _configure(client)
    response = await client.post(
        "/api/v1/devices/", json={"name": "X", "ip": "10.1.1.1", "sync_to_netwatch": True},
    )
    assert response.json()["warning"] is None
    assert [e["host"] for e in fake_router.entries] == ["10.1.1.1"]


@pytest.mark.asyncio
async def test_read_update_delete(client):
    created = (await client.post("/api/v1/devices/", json={"name": "A", "ip": "10.0.0.1"})).json()["device"]

    response = await client.get(f"/api/v1/devices/{created['id']}")
    assert response.status_code == 200

    response = await client.put(f"/api/v1/devices/{created['id']}", json={"name": "A2", "position_x": 120.5})
    assert response.status_code == 200
    updated = response.json()["device"]
    assert updated["name"] == "A2"
    assert updated["position_x"] == 120.5
    assert updated["needs_sync"] is True

    response = await client.delete(f"/api/v1/devices/{created['id']}")
    assert response.status_code == 200
    assert (await client.get(f"/api/v1/devices/{created['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_position_change_does_not_need_sync(client):
    created = (await client.post("/api/v1/devices/", json={"name": "A", "ip": "10.0.0.1"})).json()["device"]
    response = await client.put(f"/api/v1/devices/{created['id']}", json={"position_x": 10, "position_y": 20})
    assert response.json()["device"]["needs_sync"] is False


@pytest.mark.asyncio
async def test_update_to_taken_ip_is_rejected(client):
    await client.post("/api/v1/devices/", json={"name": "A", "ip": "10.0.0.1"})
    b = (await client.post("/api/v1/devices/", json={"name": "B", "ip": "10.0.0.2"})).json()["device"]
    response = await client.put(f"/api/v1/devices/{b['id']}", json={"ip": "10.0.0.1"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_update_with_sync_moves_netwatch_entry(client, fake_router):
    await _configure(client)
    created = (await client.post(
        "/api/v1/devices/", json={"name": "A", "ip": "10.0.0.1", "sync_to_netwatch": True},
    )).json()["device"]

    response = await client.put(
        f"/api/v1/devices/{created['id']}?sync_to_netwatch=true", json={"ip": "10.0.0.11"},
    )

    body = response.json()
    assert body["warning"] is None
    assert [e["host"] for e in fake_router.entries] == ["10.0.0.11"]
    assert (await client.get(f"/api/v1/devices/{created['id']}")).json()["needs_sync"] is False


@pytest.mark.asyncio
async def test_delete_with_netwatch_removal(client, fake_router):
    await _configure(client)
    created = (await client.post(
        "/api/v1/devices/", json={"name": "A", "ip": "10.0.0.1", "sync_to_netwatch": True},
    )).json()["device"]

    response = await client.delete(f"/api/v1/devices/{created['id']}?remove_from_netwatch=true")

    assert response.status_code == 200
    assert response.json()["warning"] is None
    assert fake_router.entries == []


@pytest.mark.asyncio
async def test_missing_device_404(client):
    assert (await client.get("/api/v1/devices/nope")).status_code == 404
    assert (await client.put("/api/v1/devices/nope", json={"name": "x"})).status_code == 404
    assert (await client.delete("/api/v1/devices/nope")).status_code == 404
    assert (await client.get("/api/v1/devices/nope/history")).status_code == 404


@pytest.mark.asyncio
async def test_sync_to_netwatch_endpoint(client, fake_router):
    await _configure(client)
    a = (await client.post("/api/v1/devices/", json={"name": "A", "ip": "10.0.0.1"})).json()["device"]
    await client.put(f"/api/v1/devices/{a['id']}", json={"name": "A renamed"})

    response = await client.post("/api/v1/devices/sync-to-netwatch", json={"sync_all": True})

    body = response.json()
    assert body["success"] is True
    assert body["synced"] == 1
    assert fake_router.entries[0]["comment"] == "A renamed"


@pytest.mark.asyncio
async def test_history_after_refresh(client, fake_router):
    await _configure(client)
    a = (await client.post("/api/v1/devices/", json={"name": "A", "ip": "10.0.0.1"})).json()["device"]
    fake_router.add({"host": "10.0.0.1", "status": "up"})
    await client.post("/api/v1/netwatch/refresh")

    response = await client.get(f"/api/v1/devices/{a['id']}/history?hours=1")

    assert response.status_code == 200
    body = response.json()
    assert body["device_ip"] == "10.0.0.1"
    assert body["hours"] == 1
    assert [h["status"] for h in body["history"]] == ["up"]


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["name", "ip", "type", "lane_name", "position_x", "netwatch_timeout"])
async def test_update_with_null_required_field_is_rejected(client, field):
    created = (await client.post("/api/v1/devices/", json={"name": "A", "ip": "10.0.0.1"})).json()["device"]
    response = await client.put(f"/api/v1/devices/{created['id']}", json={field: None})
    assert response.status_code == 422
    assert "already exists" not in response.text
    unchanged = (await client.get(f"/api/v1/devices/{created['id']}")).json()
    assert unchanged[field] == created[field]


@pytest.mark.asyncio
async def test_update_can_clear_netwatch_script(client):
    created = (await client.post(
        "/api/v1/devices/", json={"name": "A", "ip": "10.0.0.1", "netwatch_up_script": ":log info up"},
    )).json()["device"]
    response = await client.put(f"/api/v1/devices/{created['id']}", json={"netwatch_up_script": None})
    assert response.status_code == 200
    assert response.json()["device"]["netwatch_up_script"] is None
