import errno
import logging
from typing import Any, Dict, List, Optional

import requests

from netwatch_manager.core.config import settings
from ..interface import RemoteDeviceGateway
from ..exceptions import (
    GatewayAPIError,
    GatewayAuthenticationError,
    GatewayConnectionError,
    GatewayTimeoutError,
    GatewayUnsupportedError,
)

requests.packages.urllib3.disable_warnings()

# errno values surfaced with their POSIX names so the text stays classifiable
_ERRNO_NAMES = {
    errno.ECONNREFUSED: "ECONNREFUSED",
    errno.EHOSTUNREACH: "EHOSTUNREACH",
    errno.ENETUNREACH: "ENETUNREACH",
    errno.ETIMEDOUT: "ETIMEDOUT (timed out)",
}

# print/add/set/remove are the action segment of a RouterOS command path
_ACTIONS = {"print", "add", "set", "remove"}


def _find_errno(exc: BaseException) -> Optional[int]:
    """Walks the exception chain (requests -> urllib3 -> socket) for an OSError errno."""
    seen = set()
    stack = [exc]
    while stack:
        current = stack.pop()
        if current is None or id(current) in seen:
            continue
        seen.add(id(current))
        if isinstance(current, OSError) and current.errno:
            return current.errno
        reason = getattr(current, "reason", None)
        stack.extend([current.__cause__, current.__context__])
        if isinstance(reason, BaseException):
            stack.append(reason)
        stack.extend(arg for arg in current.args if isinstance(arg, BaseException))
    return None


class RouterOSGateway(RemoteDeviceGateway):
    """Netwatch session over the RouterOS v7 REST interface (``/rest``)."""

    def __init__(self, hostname: str, username: str, password: str, port: int, timeout: float = 10.0,
                 use_tls: Optional[bool] = None, verify_tls: Optional[bool] = None) -> None:
        super().__init__(hostname, username, password, port, timeout)
        self.use_tls = settings.GATEWAY_USE_TLS if use_tls is None else use_tls
        self.verify_tls = settings.GATEWAY_VERIFY_TLS if verify_tls is None else verify_tls
        scheme = "https" if self.use_tls else "http"
        self.base_url = f"{scheme}://{hostname}:{port}/rest"
        self._session: Optional[requests.Session] = None

    @property
    def target(self) -> str:
        return f"{self.hostname}:{self.port}"

    def connect(self) -> None:
        session = requests.Session()
        session.auth = (self.username, self._password)
        session.verify = self.verify_tls
        self._session = session
        # REST is stateless; reading the identity proves reachability and credentials
        self._request("GET", "/system/identity")
        self._connected = True
        self.logger.debug(f"Connected to RouterOS at {self.target}")

    def query(self, command: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        if self._session is None:
            raise GatewayConnectionError(f"Session to {self.target} is not open")
        params = dict(params or {})
        path, action = self._split_command(command)

        if action == "print":
            data = self._request("GET", path, params=params or None)
        elif action == "add":
            data = self._request("PUT", path, json=params)
        elif action == "set":
            entry_id = params.pop(".id", None)
            if not entry_id:
                raise GatewayAPIError(f"{command} requires .id")
            data = self._request("PATCH", f"{path}/{entry_id}", json=params)
        else:
            entry_id = params.pop(".id", None)
            if not entry_id:
                raise GatewayAPIError(f"{command} requires .id")
            data = self._request("DELETE", f"{path}/{entry_id}")

        if data is None:
            return []
        if isinstance(data, dict):
            return [data]
        return list(data)

    def close(self) -> None:
        session, self._session = self._session, None
        self._connected = False
        if session is None:
            return
        try:
            session.close()
        except Exception as e:
            self.logger.warning(f"Error while closing session to {self.target}: {e}")

    @staticmethod
    def _split_command(command: str):
        parts = [part for part in command.strip().split("/") if part]
        if not parts:
            raise GatewayUnsupportedError(f"Unsupported command: {command!r}")
        if parts[-1] in _ACTIONS:
            action = parts.pop()
        else:
            action = "print"
        if not parts:
            raise GatewayUnsupportedError(f"Unsupported command: {command!r}")
        return "/" + "/".join(parts), action

    def _request(self, method: str, path: str, **kwargs):
        url = f"{self.base_url}{path}"
        try:
            response = self._session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.Timeout:
            raise GatewayTimeoutError(f"Connection timed out after {self.timeout:g}s: {self.target}")
        except requests.exceptions.ConnectionError as e:
            code = _find_errno(e)
            if code in _ERRNO_NAMES:
                raise GatewayConnectionError(f"{_ERRNO_NAMES[code]} {self.target}")
            raise GatewayConnectionError(f"Connection to {self.target} failed: {e}")
        except requests.exceptions.RequestException as e:
            raise GatewayAPIError(f"Request to {self.target} failed: {e}")

        if response.status_code == 401:
            raise GatewayAuthenticationError(
                f"cannot log in to {self.target} as {self.username!r}: authentication failed"
            )
        if response.status_code >= 400:
            raise GatewayAPIError(
                f"{method} {path} failed (status {response.status_code}): {self._error_detail(response)}"
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            raise GatewayAPIError(f"Invalid JSON from {self.target}{path}")

    @staticmethod
    def _error_detail(response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text
        if isinstance(body, dict):
            return body.get("detail") or body.get("message") or str(body)
        return str(body)
