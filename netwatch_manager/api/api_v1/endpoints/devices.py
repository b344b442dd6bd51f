from datetime import timedelta
from typing import List
import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from netwatch_manager import crud, schemas
from netwatch_manager.core.config import get_now
from netwatch_manager.db.session import get_db
from netwatch_manager.services.netwatch import GatewayBuilder, get_gateway_factory
from netwatch_manager.services.sync.push import DELETE_WARNING_PREFIX, OutboundPushManager

router = APIRouter()
logger = logging.getLogger(__name__)

DUPLICATE_IP_DETAIL = "A device with this IP address already exists"


def _integrity_error(exc: IntegrityError) -> HTTPException:
    if "devices.ip" in str(exc.orig):
        return HTTPException(status_code=400, detail=DUPLICATE_IP_DETAIL)
    logger.warning(f"Rejected device write: {exc.orig}")
    return HTTPException(status_code=400, detail="Invalid device data")


@router.post("/", response_model=schemas.DeviceWriteResponse, status_code=201)
async def create_device(
    device_in: schemas.DeviceCreate,
    db: AsyncSession = Depends(get_db),
    gateway_builder: GatewayBuilder = Depends(get_gateway_factory),
):
    """Create a device; with sync_to_netwatch the router is updated best-effort afterwards."""
    if await crud.device.get_device_by_ip(db, ip=device_in.ip):
        raise HTTPException(status_code=400, detail=DUPLICATE_IP_DETAIL)
    config = await crud.system_config.get_system_config(db)
    try:
        db_device = await crud.device.create_device(db=db, device=device_in, config=config)
    except IntegrityError as e:
        await db.rollback()
        raise _integrity_error(e)

    outcome = await OutboundPushManager(db, gateway_builder).push_if_requested(db_device, device_in.sync_to_netwatch)
    return schemas.DeviceWriteResponse(device=schemas.Device.model_validate(db_device), warning=outcome.warning)


@router.get("/", response_model=List[schemas.Device])
async def read_devices(
    skip: int = 0,
    limit: int | None = None,
    db: AsyncSession = Depends(get_db)
):
    """Device list, newest first (all devices when limit is None)"""
    return await crud.device.get_devices(db, skip=skip, limit=limit)


@router.post("/sync-to-netwatch", response_model=schemas.DeviceSyncResponse)
async def sync_devices_to_netwatch(
    sync_in: schemas.DeviceSyncRequest,
    db: AsyncSession = Depends(get_db),
    gateway_builder: GatewayBuilder = Depends(get_gateway_factory),
):
    """Push the given devices (or every device pending sync) to the router's netwatch table."""
    return await OutboundPushManager(db, gateway_builder).sync_devices(
        device_ids=sync_in.device_ids, sync_all=sync_in.sync_all,
    )


@router.get("/{device_id}", response_model=schemas.Device)
async def read_device(device_id: str, db: AsyncSession = Depends(get_db)):
    db_device = await crud.device.get_device(db, device_id=device_id)
    if db_device is None:
        raise HTTPException(status_code=404, detail="Device not found")
    return db_device


@router.put("/{device_id}", response_model=schemas.DeviceWriteResponse)
async def update_device(
    device_id: str,
    device_in: schemas.DeviceUpdate,
    sync_to_netwatch: bool = False,
    db: AsyncSession = Depends(get_db),
    gateway_builder: GatewayBuilder = Depends(get_gateway_factory),
):
    db_device = await crud.device.get_device(db, device_id=device_id)
    if db_device is None:
        raise HTTPException(status_code=404, detail="Device not found")
    old_ip = db_device.ip
    if device_in.ip and device_in.ip != old_ip:
        if await crud.device.get_device_by_ip(db, ip=device_in.ip):
            raise HTTPException(status_code=400, detail=DUPLICATE_IP_DETAIL)
    try:
        updated_device = await crud.device.update_device(db=db, db_obj=db_device, obj_in=device_in)
    except IntegrityError as e:
        await db.rollback()
        raise _integrity_error(e)

    warning = None
    if sync_to_netwatch:
        outcome = await OutboundPushManager(db, gateway_builder).sync_after_update(updated_device, old_ip=old_ip)
        warning = outcome.warning
    return schemas.DeviceWriteResponse(device=schemas.Device.model_validate(updated_device), warning=warning)


@router.delete("/{device_id}", response_model=schemas.DeviceWriteResponse)
async def delete_device(
    device_id: str,
    remove_from_netwatch: bool = False,
    db: AsyncSession = Depends(get_db),
    gateway_builder: GatewayBuilder = Depends(get_gateway_factory),
):
    db_device = await crud.device.remove_device(db, id=device_id)
    if db_device is None:
        raise HTTPException(status_code=404, detail="Device not found")

    warning = None
    if remove_from_netwatch:
        result = await OutboundPushManager(db, gateway_builder).remove_device_entry(db_device.ip)
        if not result.success:
            warning = f"{DELETE_WARNING_PREFIX} ({result.category.value}): {result.details}"
    return schemas.DeviceWriteResponse(device=schemas.Device.model_validate(db_device), warning=warning)


@router.get("/{device_id}/history", response_model=schemas.DeviceHistoryResponse)
async def read_device_history(
    device_id: str,
    hours: int = Query(default=24, ge=1, le=24 * 30),
    db: AsyncSession = Depends(get_db),
):
    """Status transitions of a device over the last `hours` hours"""
    db_device = await crud.device.get_device(db, device_id=device_id)
    if db_device is None:
        raise HTTPException(status_code=404, detail="Device not found")
    since = get_now() - timedelta(hours=hours)
    history = await crud.status_history.get_device_history(db, device_id=device_id, since=since)
    return schemas.DeviceHistoryResponse(
        device_id=db_device.id,
        device_ip=db_device.ip,
        device_name=db_device.name,
        since=since,
        hours=hours,
        history=[schemas.DeviceStatusHistory.model_validate(row) for row in history],
    )
