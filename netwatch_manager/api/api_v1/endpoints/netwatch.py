from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from netwatch_manager import schemas
from netwatch_manager.db.session import get_db
from netwatch_manager.services.netwatch import GatewayBuilder, get_gateway_factory
from netwatch_manager.services.sync import importer, tasks

router = APIRouter()


@router.get("/devices", response_model=schemas.DiscoveryResponse)
async def list_netwatch_devices(
    db: AsyncSession = Depends(get_db),
    gateway_builder: GatewayBuilder = Depends(get_gateway_factory),
):
    """Netwatch entries on the router, with inferred device types (import preview)"""
    return await tasks.fetch_netwatch_devices(db, gateway_builder)


@router.post("/refresh", response_model=schemas.RefreshResponse)
async def refresh_statuses(
    db: AsyncSession = Depends(get_db),
    gateway_builder: GatewayBuilder = Depends(get_gateway_factory),
):
    """Reconcile every device against netwatch now; devices missing there become unknown"""
    return await tasks.refresh_device_statuses(db, gateway_builder)


@router.post("/import", response_model=schemas.ImportResponse)
async def import_devices(
    import_in: schemas.ImportRequest,
    db: AsyncSession = Depends(get_db),
):
    """Create devices from discovered netwatch entries, skipping IPs that already exist"""
    return await importer.import_batch(db, import_in.devices)
