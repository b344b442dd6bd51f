import logging
from typing import Iterable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from netwatch_manager.core.config import get_now
from netwatch_manager.core.constants import (
    DEFAULT_DEVICE_TYPE,
    DEFAULT_NETWATCH_INTERVAL_S,
    DEFAULT_NETWATCH_TIMEOUT_MS,
    DeviceStatus,
    IMPORTED_LANE_NAME,
)
from netwatch_manager.models.device import Device
from netwatch_manager.models.status_history import DeviceStatusHistory
from netwatch_manager.models.system_config import SystemConfig
from netwatch_manager.schemas.device import DeviceCreate, DeviceUpdate

logger = logging.getLogger(__name__)

# Fields mirrored in the router's netwatch entry; changing one marks the device for re-sync
NETWATCH_MIRRORED_FIELDS = {
    "name", "ip", "netwatch_timeout", "netwatch_interval", "netwatch_up_script", "netwatch_down_script",
}


async def get_device(db: AsyncSession, device_id: str):
    result = await db.execute(select(Device).filter(Device.id == device_id))
    return result.scalars().first()


async def get_device_by_ip(db: AsyncSession, ip: str):
    result = await db.execute(select(Device).filter(Device.ip == ip))
    return result.scalars().first()


async def get_devices(db: AsyncSession, skip: int = 0, limit: int | None = None):
    """Device list, newest first (all devices when limit is None)."""
    stmt = select(Device).order_by(Device.created_at.desc()).offset(skip)
    if limit:
        stmt = stmt.limit(limit)
    result = await db.execute(stmt)
    return result.scalars().all()


async def get_devices_by_ids(db: AsyncSession, device_ids: Iterable[str]):
    result = await db.execute(select(Device).filter(Device.id.in_(list(device_ids))))
    return result.scalars().all()


async def get_devices_needing_sync(db: AsyncSession):
    result = await db.execute(select(Device).filter(Device.needs_sync.is_(True)))
    return result.scalars().all()


async def create_device(db: AsyncSession, device: DeviceCreate, config: Optional[SystemConfig] = None):
    create_data = device.model_dump(exclude={"sync_to_netwatch"})
    # Netwatch parameters fall back to the system-wide defaults
    if create_data.get("netwatch_timeout") is None:
        create_data["netwatch_timeout"] = config.default_netwatch_timeout if config else DEFAULT_NETWATCH_TIMEOUT_MS
    if create_data.get("netwatch_interval") is None:
        create_data["netwatch_interval"] = config.default_netwatch_interval if config else DEFAULT_NETWATCH_INTERVAL_S
    now = get_now()
    db_device = Device(
        **create_data,
        status=DeviceStatus.UNKNOWN.value,
        status_since=now,
        position_x=0,
        position_y=0,
    )
    db.add(db_device)
    await db.commit()
    await db.refresh(db_device)
    return db_device


async def create_imported_device(
    db: AsyncSession,
    name: str,
    ip: str,
    type: Optional[str] = None,
    status: Optional[str] = None,
):
    """Create a device discovered on the router. Commits on its own; IntegrityError propagates."""
    db_device = Device(
        name=name,
        ip=ip,
        type=type or DEFAULT_DEVICE_TYPE.value,
        lane_name=IMPORTED_LANE_NAME,
        status=status or DeviceStatus.UNKNOWN.value,
        status_since=get_now(),
        position_x=0,
        position_y=0,
    )
    db.add(db_device)
    await db.commit()
    await db.refresh(db_device)
    return db_device


async def update_device(db: AsyncSession, db_obj: Device, obj_in: DeviceUpdate):
    obj_data = obj_in.model_dump(exclude_unset=True)

    changed = {field for field, value in obj_data.items() if getattr(db_obj, field) != value}
    for field in obj_data:
        setattr(db_obj, field, obj_data[field])
    if changed & NETWATCH_MIRRORED_FIELDS:
        db_obj.needs_sync = True

    db.add(db_obj)
    await db.commit()
    await db.refresh(db_obj)
    return db_obj


async def remove_device(db: AsyncSession, id: str):
    result = await db.execute(select(Device).filter(Device.id == id))
    db_device = result.scalars().first()
    if db_device:
        await db.delete(db_device)
        await db.commit()
    return db_device


async def clear_needs_sync(db: AsyncSession, device: Device) -> Device:
    device.needs_sync = False
    db.add(device)
    await db.commit()
    return device


async def apply_status_mutations(db: AsyncSession, devices: List[Device], mutations) -> int:
    """Write reconciler mutations back to their device rows and log status transitions.

    Devices are matched by id; a mutation for a device deleted meanwhile is dropped.
    Returns the number of status transitions written.
    """
    by_id = {device.id: device for device in devices}
    transitions = 0
    for mutation in mutations:
        device = by_id.get(mutation.device_id)
        if device is None:
            continue
        if mutation.status is not None:
            device.status = mutation.status.value
            device.status_since = mutation.status_since
            db.add(DeviceStatusHistory(
                device_id=device.id,
                device_ip=device.ip,
                status=mutation.status.value,
                timestamp=mutation.status_since,
            ))
            transitions += 1
        if mutation.last_seen is not None:
            device.last_seen = mutation.last_seen
        db.add(device)
    await db.commit()
    return transitions
