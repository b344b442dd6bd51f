"""
WebSocket endpoint
Pushes device status transitions to the dashboard in real time.
"""
import logging
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from netwatch_manager.services.websocket_manager import websocket_manager

router = APIRouter()
logger = logging.getLogger(__name__)


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """
    Message format:
    {
        "type": "device_status",
        "device_id": "3f2a...",
        "ip": "10.0.0.5",
        "status": "up" | "down" | "unknown",
        "status_since": "2024-01-01T12:00:00" | null
    }
    """
    await websocket_manager.connect(websocket)
    try:
        # Keep the connection open; client messages are only pings
        while True:
            data = await websocket.receive_text()
            logger.debug(f"WebSocket message received: {data}")
    except WebSocketDisconnect:
        websocket_manager.disconnect(websocket)
        logger.info("WebSocket closed by client")
    except Exception as e:
        logger.error(f"WebSocket error: {e}", exc_info=True)
        websocket_manager.disconnect(websocket)
