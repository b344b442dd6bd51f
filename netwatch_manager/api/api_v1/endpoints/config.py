from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from netwatch_manager import crud, schemas
from netwatch_manager.core.config import settings
from netwatch_manager.core.constants import (
    DEFAULT_NETWATCH_INTERVAL_S,
    DEFAULT_NETWATCH_TIMEOUT_MS,
    DEFAULT_ROUTER_PORT,
)
from netwatch_manager.db.session import get_db
from netwatch_manager.services import device_service
from netwatch_manager.services.netwatch import GatewayBuilder, get_gateway_factory

router = APIRouter()


@router.get("/", response_model=schemas.SystemConfig)
async def read_config(db: AsyncSession = Depends(get_db)):
    """Router connection settings; defaults until the first save. The password is never returned."""
    config = await crud.system_config.get_system_config(db)
    if config is None:
        return schemas.SystemConfig(
            mikrotik_host="",
            mikrotik_user="",
            mikrotik_port=DEFAULT_ROUTER_PORT,
            polling_interval=settings.DEFAULT_POLLING_INTERVAL,
            default_netwatch_timeout=DEFAULT_NETWATCH_TIMEOUT_MS,
            default_netwatch_interval=DEFAULT_NETWATCH_INTERVAL_S,
        )
    return config


@router.put("/", response_model=schemas.SystemConfig)
async def update_config(config_in: schemas.SystemConfigUpdate, db: AsyncSession = Depends(get_db)):
    return await crud.system_config.upsert_system_config(db, obj_in=config_in)


@router.post("/test-connection", response_model=schemas.ConnectionTestResult)
async def test_router_connection(
    test_in: schemas.ConnectionTestRequest,
    gateway_builder: GatewayBuilder = Depends(get_gateway_factory),
):
    """Try the given connection parameters without saving them"""
    return await device_service.run_connection_test(test_in, gateway_builder)
