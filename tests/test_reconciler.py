from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from netwatch_manager import crud
from netwatch_manager.core.constants import DeviceStatus
from netwatch_manager.schemas import RemoteNetwatchEntry
from netwatch_manager.services.sync.reconciler import ReconcileMode, count_transitions, reconcile
from netwatch_manager.services.sync.transform import map_remote_status, rows_to_entries

NOW = datetime(2024, 5, 1, 12, 0, 0)
T0 = NOW - timedelta(minutes=5)


def _device(ip, status="unknown", last_seen=None, device_id=None):
    return SimpleNamespace(id=device_id or f"id-{ip}", ip=ip, status=status, last_seen=last_seen)


def _entry(host, raw_status="up"):
    return RemoteNetwatchEntry(host=host, raw_status=raw_status)


@pytest.mark.parametrize("raw, expected", [
    ("up", DeviceStatus.UP),
    ("down", DeviceStatus.DOWN),
    ("", DeviceStatus.DOWN),
    ("UP", DeviceStatus.DOWN),
    ("garbage", DeviceStatus.DOWN),
])
def test_map_remote_status(raw, expected):
    assert map_remote_status(raw) is expected


def test_down_device_reported_up_transitions():
    [mutation] = reconcile([_device("10.0.0.5", "down")], [_entry("10.0.0.5", "up")], now=NOW)
    assert mutation.status is DeviceStatus.UP
    assert mutation.status_since == NOW
    assert mutation.last_seen == NOW


def test_up_device_still_up_only_bumps_last_seen():
    [mutation] = reconcile([_device("10.0.0.9", "up", last_seen=T0)], [_entry("10.0.0.9", "up")], now=NOW)
    assert mutation.status is None
    assert mutation.status_since is None
    assert mutation.last_seen == NOW
    assert mutation.last_seen > T0


def test_up_device_reported_down():
    [mutation] = reconcile([_device("10.0.0.7", "up")], [_entry("10.0.0.7", "down")], now=NOW)
    assert mutation.status is DeviceStatus.DOWN
    assert mutation.status_since == NOW
    assert mutation.last_seen is None


def test_down_device_still_down_produces_nothing():
    assert reconcile([_device("10.0.0.7", "down")], [_entry("10.0.0.7", "timeout")], now=NOW) == []


def test_unknown_device_with_malformed_status_goes_down():
    [mutation] = reconcile([_device("10.0.0.8")], [_entry("10.0.0.8", "")], now=NOW)
    assert mutation.status is DeviceStatus.DOWN


def test_missing_device_untouched_in_poll_mode():
    assert reconcile([_device("10.0.0.1", "up")], [], now=NOW, mode=ReconcileMode.POLL) == []


def test_missing_device_downgraded_in_refresh_mode():
    [mutation] = reconcile([_device("10.0.0.1", "up")], [], now=NOW, mode=ReconcileMode.REFRESH)
    assert mutation.status is DeviceStatus.UNKNOWN
    assert mutation.status_since == NOW


def test_missing_unknown_device_not_touched_in_refresh_mode():
    assert reconcile([_device("10.0.0.1", "unknown")], [], now=NOW, mode=ReconcileMode.REFRESH) == []


def test_match_is_exact_string_equality():
    devices = [_device("10.0.0.5", "down")]
    assert reconcile(devices, [_entry("10.0.0.05"), _entry(" 10.0.0.5"), _entry("10.0.0.5/32")], now=NOW) == []


def test_first_entry_wins_for_duplicate_hosts():
    [mutation] = reconcile([_device("10.0.0.5", "down")], [_entry("10.0.0.5", "up"), _entry("10.0.0.5", "down")], now=NOW)
    assert mutation.status is DeviceStatus.UP


def test_count_transitions_splits_found_and_missing():
    devices = [
        _device("10.0.0.1", "down"),
        _device("10.0.0.2", "up"),
        _device("10.0.0.3", "up"),
        _device("10.0.0.4", "unknown"),
    ]
    entries = [_entry("10.0.0.1", "up"), _entry("10.0.0.2", "up")]
    mutations = reconcile(devices, entries, now=NOW, mode=ReconcileMode.REFRESH)

    # 10.0.0.2 only gets last_seen; 10.0.0.4 is already unknown
    assert count_transitions(entries, mutations) == (1, 1)


def test_rows_to_entries_skips_rows_without_host():
    entries = rows_to_entries([
        {".id": "*1", "host": "10.0.0.1", "status": "up", "comment": "Core Router"},
        {".id": "*2", "status": "down"},
        {".id": "*3", "host": "10.0.0.3"},
    ])
    assert [e.host for e in entries] == ["10.0.0.1", "10.0.0.3"]
    assert entries[0].comment == "Core Router"
    assert entries[0].entry_id == "*1"
    assert entries[1].raw_status == ""


@pytest.mark.asyncio
async def test_reconcile_is_idempotent_once_applied(db, make_device):
    down = await make_device(name="Core Router", ip="10.0.0.5", status="down")
    stale = await make_device(name="Switch", ip="10.0.0.6", status="up")
    snapshot = [_entry("10.0.0.5", "up"), _entry("10.0.0.6", "down")]

    devices = await crud.device.get_devices(db)
    first = reconcile(devices, snapshot, now=NOW)
    assert await crud.device.apply_status_mutations(db, devices, first) == 2

    devices = await crud.device.get_devices(db)
    since_before = {d.id: d.status_since for d in devices}
    second = reconcile(devices, snapshot, now=NOW + timedelta(seconds=30))
    assert all(not m.is_transition for m in second)
    assert await crud.device.apply_status_mutations(db, devices, second) == 0

    devices = {d.id: d for d in await crud.device.get_devices(db)}
    assert devices[down.id].status == "up"
    assert devices[stale.id].status == "down"
    assert {d.id: d.status_since for d in devices.values()} == since_before
    assert devices[down.id].last_seen == NOW + timedelta(seconds=30)


@pytest.mark.asyncio
async def test_transitions_are_written_to_history(db, make_device):
    device = await make_device(ip="10.0.0.5", status="down")
    devices = await crud.device.get_devices(db)
    await crud.device.apply_status_mutations(db, devices, reconcile(devices, [_entry("10.0.0.5")], now=NOW))

    history = await crud.status_history.get_device_history(db, device_id=device.id, since=NOW - timedelta(hours=1))
    assert [(h.status, h.device_ip, h.timestamp) for h in history] == [("up", "10.0.0.5", NOW)]
