import threading
from itertools import count
from typing import Any, Dict, List, Optional

from ..interface import RemoteDeviceGateway
from ..exceptions import GatewayAPIError, GatewayConnectionError, GatewayUnsupportedError


class MockRouter:
    """In-memory stand-in for one router's netwatch table, shared by all sessions to that host."""

    def __init__(self, hostname: str):
        self.hostname = hostname
        self.identity = f"mock-{hostname}"
        self.version = "7.14 (stable)"
        self.entries: List[Dict[str, Any]] = []
        self._ids = count(1)

    def add(self, params: Dict[str, Any]) -> Dict[str, Any]:
        entry = {".id": f"*{next(self._ids):X}", "status": "unknown", "disabled": "false"}
        entry.update({key: str(value) for key, value in params.items()})
        self.entries.append(entry)
        return dict(entry)

    def find(self, entry_id: str) -> Dict[str, Any]:
        for entry in self.entries:
            if entry[".id"] == entry_id:
                return entry
        raise GatewayAPIError(f"no such item ({entry_id})")


_routers: Dict[str, MockRouter] = {}
_lock = threading.Lock()


def get_mock_router(hostname: str) -> MockRouter:
    with _lock:
        if hostname not in _routers:
            _routers[hostname] = MockRouter(hostname)
        return _routers[hostname]


def seed_mock_entries(hostname: str, entries: List[Dict[str, Any]]) -> MockRouter:
    """Replace the netwatch table of a mock router (development data)."""
    router = get_mock_router(hostname)
    with _lock:
        router.entries = []
        for entry in entries:
            router.add(entry)
    return router


def reset_mock_routers() -> None:
    with _lock:
        _routers.clear()


class MockGateway(RemoteDeviceGateway):
    """Gateway against an in-memory router, for development without hardware."""

    def connect(self) -> None:
        if not self.hostname:
            raise GatewayConnectionError("ENETUNREACH no host configured")
        self._router = get_mock_router(self.hostname)
        self._connected = True

    def query(self, command: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        if not self._connected:
            raise GatewayConnectionError(f"Session to {self.hostname} is not open")
        params = dict(params or {})
        router = self._router

        with _lock:
            if command == "/tool/netwatch/print":
                return [
                    dict(entry) for entry in router.entries
                    if all(entry.get(key) == str(value) for key, value in params.items())
                ]
            if command == "/tool/netwatch/add":
                return [router.add(params)]
            if command == "/tool/netwatch/set":
                entry = router.find(params.pop(".id", ""))
                entry.update({key: str(value) for key, value in params.items()})
                return []
            if command == "/tool/netwatch/remove":
                router.entries.remove(router.find(params.pop(".id", "")))
                return []
            if command == "/system/identity/print":
                return [{"name": router.identity}]
            if command == "/system/resource/print":
                return [{"version": router.version, "board-name": "CHR", "uptime": "1d2h3m"}]
        raise GatewayUnsupportedError(f"Unsupported command: {command}")

    def close(self) -> None:
        self._connected = False
