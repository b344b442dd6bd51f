from typing import Callable

from netwatch_manager.core.config import settings
from netwatch_manager.core.security import decrypt_or_raw
from netwatch_manager.models.system_config import SystemConfig
from .factory import GatewayFactory
from .interface import RemoteDeviceGateway

# (host, username, plain password, port) -> new unconnected gateway
GatewayBuilder = Callable[[str, str, str, int], RemoteDeviceGateway]


def build_gateway(host: str, username: str, password: str, port: int) -> RemoteDeviceGateway:
    """Create a gateway for the configured backend from primitive fields."""
    return GatewayFactory.get_gateway(
        backend=settings.GATEWAY_BACKEND,
        hostname=host,
        username=username,
        password=password,
        port=port,
        timeout=settings.GATEWAY_TIMEOUT_SECONDS,
    )


def gateway_for_config(config: SystemConfig, builder: GatewayBuilder = build_gateway) -> RemoteDeviceGateway:
    """Create a gateway from the SystemConfig row, decrypting the stored password."""
    return builder(
        config.mikrotik_host,
        config.mikrotik_user,
        decrypt_or_raw(config.mikrotik_password),
        config.mikrotik_port,
    )


def get_gateway_factory() -> GatewayBuilder:
    """FastAPI dependency; tests override it to inject fake gateways."""
    return build_gateway
