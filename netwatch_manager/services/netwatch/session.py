import asyncio
import functools
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from .interface import RemoteDeviceGateway

logger = logging.getLogger(__name__)


class GatewaySession:
    """Async facade over a connected gateway; blocking calls run in the default executor."""

    def __init__(self, gateway: RemoteDeviceGateway):
        self.gateway = gateway

    async def query(self, command: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(self.gateway.query, command, params))


@asynccontextmanager
async def open_session(gateway: RemoteDeviceGateway):
    """Connects the gateway and always closes it on exit, even when connect() fails."""
    loop = asyncio.get_running_loop()
    try:
        await loop.run_in_executor(None, gateway.connect)
        yield GatewaySession(gateway)
    finally:
        try:
            await loop.run_in_executor(None, gateway.close)
        except Exception as e:
            logger.warning(f"Gateway close raised for {gateway.hostname}: {e}")
