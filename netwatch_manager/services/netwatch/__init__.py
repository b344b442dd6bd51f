from .interface import RemoteDeviceGateway
from .exceptions import (
    GatewayError,
    GatewayConnectionError,
    GatewayAuthenticationError,
    GatewayTimeoutError,
    GatewayAPIError,
    GatewayUnsupportedError,
)
from .factory import GatewayFactory
from .collector import GatewayBuilder, build_gateway, gateway_for_config, get_gateway_factory
from .session import GatewaySession, open_session
