from typing import Dict, Optional
import logging

from .interface import RemoteDeviceGateway
from .gateways.routeros import RouterOSGateway
from .gateways.mock import MockGateway
from .exceptions import GatewayUnsupportedError

logger = logging.getLogger(__name__)


class GatewayFactory:
    """Creates netwatch gateway instances.

    Supported backends:
    - routeros: MikroTik RouterOS REST interface
    - mock: in-memory router for development
    """
    BACKENDS: Dict[str, type] = {
        'routeros': RouterOSGateway,
        'mock': MockGateway,
    }

    @staticmethod
    def get_gateway(backend: str, hostname: str, username: str, password: str, port: int,
                    timeout: Optional[float] = None) -> RemoteDeviceGateway:
        """Returns a new, unconnected gateway for one session.

        Raises:
            GatewayUnsupportedError: unknown backend name
        """
        backend = (backend or "").lower()
        gateway_cls = GatewayFactory.BACKENDS.get(backend)
        if gateway_cls is None:
            raise GatewayUnsupportedError(f"Unsupported gateway backend: {backend}")
        kwargs = {} if timeout is None else {'timeout': timeout}
        logger.debug(f"Creating {backend} gateway for {hostname}:{port}")
        return gateway_cls(hostname=hostname, username=username, password=password, port=port, **kwargs)
