from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
import logging


class RemoteDeviceGateway(ABC):
    """Abstract session against the router's netwatch monitor.

    One instance is one session: it is connected, queried and closed once,
    never reused across reconciliation cycles or calls.
    """

    def __init__(self, hostname: str, username: str, password: str, port: int, timeout: float = 10.0):
        self.hostname = hostname
        self.username = username
        self._password = password
        self.port = port
        self.timeout = timeout
        self.logger = logging.getLogger(f"{self.__class__.__module__}.{self.__class__.__name__}")
        self._connected = False

    def is_connected(self) -> bool:
        return self._connected

    @abstractmethod
    def connect(self) -> None:
        """Open the session.

        Raises:
            GatewayTimeoutError, GatewayConnectionError, GatewayAuthenticationError
        """
        pass

    @abstractmethod
    def query(self, command: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Run one RouterOS command (e.g. ``/tool/netwatch/print``) and return its rows.

        Raises:
            GatewayError subclasses on transport or command failure
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """End the session. Never raises; internal errors are logged."""
        pass
