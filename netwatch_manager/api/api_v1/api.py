from fastapi import APIRouter
from netwatch_manager.api.api_v1.endpoints import devices, netwatch, config, websocket

api_router = APIRouter()
api_router.include_router(devices.router, prefix="/devices", tags=["devices"])
api_router.include_router(netwatch.router, prefix="/netwatch", tags=["netwatch"])
api_router.include_router(config.router, prefix="/config", tags=["config"])
api_router.include_router(websocket.router, tags=["websocket"])
