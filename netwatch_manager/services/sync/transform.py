from typing import Any, Dict, Iterable, List

from netwatch_manager import schemas
from netwatch_manager.core.constants import DeviceStatus
from netwatch_manager.models.device import Device
from netwatch_manager.services.device_classifier import classify_device_type, display_name


def rows_to_entries(rows: Iterable[Dict[str, Any]]) -> List[schemas.RemoteNetwatchEntry]:
    """Converts raw ``/tool/netwatch/print`` rows to entries.

    - Rows without a host are dropped
    - Values are kept verbatim; no case folding or address normalization
    """
    entries = []
    for row in rows:
        host = row.get("host")
        if not host:
            continue
        entries.append(schemas.RemoteNetwatchEntry(
            host=str(host),
            raw_status=str(row.get("status") or ""),
            comment=str(row.get("comment") or ""),
            entry_id=row.get(".id"),
        ))
    return entries


def map_remote_status(raw_status: str) -> DeviceStatus:
    """Only the exact string "up" means up; anything else (empty, malformed) is down."""
    return DeviceStatus.UP if raw_status == "up" else DeviceStatus.DOWN


def entry_to_discovered(entry: schemas.RemoteNetwatchEntry) -> schemas.DiscoveredDevice:
    name = display_name(entry.comment, entry.host)
    return schemas.DiscoveredDevice(
        name=name,
        ip=entry.host,
        type=classify_device_type(name).value,
        status=map_remote_status(entry.raw_status).value,
    )


def device_to_netwatch_params(device: Device) -> Dict[str, str]:
    """Netwatch entry fields mirrored from a device (add/set payload)."""
    params = {
        "host": device.ip,
        "comment": device.name,
        "timeout": f"{device.netwatch_timeout}ms",
        "interval": f"{device.netwatch_interval}s",
    }
    if device.netwatch_up_script:
        params["up-script"] = device.netwatch_up_script
    if device.netwatch_down_script:
        params["down-script"] = device.netwatch_down_script
    return params
