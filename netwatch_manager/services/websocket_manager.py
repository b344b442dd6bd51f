"""
WebSocket connection manager.
Broadcasts device status transitions to connected dashboard clients.
"""
import logging
from datetime import datetime
from typing import Optional, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class WebSocketManager:
    """Tracks WebSocket connections and broadcasts to all of them"""

    def __init__(self):
        self.active_connections: Set[WebSocket] = set()

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        self.active_connections.add(websocket)
        logger.info(f"WebSocket connected. Active connections: {len(self.active_connections)}")

    def disconnect(self, websocket: WebSocket):
        self.active_connections.discard(websocket)
        logger.info(f"WebSocket disconnected. Active connections: {len(self.active_connections)}")

    async def broadcast_device_status(self, device_id: str, ip: str, status: str, since: Optional[datetime] = None):
        """Send one device status transition to every connected client"""
        message = {
            "type": "device_status",
            "device_id": device_id,
            "ip": ip,
            "status": status,
            "status_since": since.isoformat() if since else None,
        }

        if not self.active_connections:
            logger.debug(f"No active WebSocket connections; skipping status broadcast for {ip}: {status}")
            return

        disconnected = set()
        success_count = 0
        for connection in list(self.active_connections):
            try:
                await connection.send_json(message)
                success_count += 1
            except Exception as e:
                logger.warning(f"WebSocket send failed: {e}")
                disconnected.add(connection)

        for connection in disconnected:
            self.disconnect(connection)

        logger.debug(f"WebSocket broadcast: device {device_id} ({ip}) -> {status}, delivered={success_count}")


# Global instance
websocket_manager = WebSocketManager()
