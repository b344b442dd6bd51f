import logging

from netwatch_manager import schemas
from netwatch_manager.core.config import settings
from netwatch_manager.core.constants import IDENTITY_PRINT, RESOURCE_PRINT
from netwatch_manager.services.error_classifier import classify_and_describe
from netwatch_manager.services.netwatch import GatewayBuilder, build_gateway, open_session

logger = logging.getLogger(__name__)


async def run_connection_test(request: schemas.ConnectionTestRequest,
                          gateway_builder: GatewayBuilder = build_gateway) -> schemas.ConnectionTestResult:
    """
    Connects to the router with the given (unsaved) parameters and reads its identity and version.
    Failures are returned as a classified result, never raised.
    """
    host, port = request.mikrotik_host, request.mikrotik_port
    try:
        gateway = gateway_builder(host, request.mikrotik_user, request.mikrotik_password, port)
        async with open_session(gateway) as session:
            identity_rows = await session.query(IDENTITY_PRINT)
            resource_rows = await session.query(RESOURCE_PRINT)
    except Exception as e:
        classified = classify_and_describe(e, host=host, port=port, timeout=settings.GATEWAY_TIMEOUT_SECONDS)
        logger.warning(f"Connection test to {host}:{port} failed ({classified.category.value}): {e}")
        return schemas.ConnectionTestResult(**classified.result_fields())

    identity = (identity_rows[0].get("name") if identity_rows else None) or "Unknown"
    version = (resource_rows[0].get("version") if resource_rows else None) or "Unknown"
    logger.info(f"Connection test to {host}:{port} succeeded: {identity} ({version})")
    return schemas.ConnectionTestResult(
        success=True,
        message="Successfully connected to MikroTik",
        router=schemas.RouterIdentity(host=host, port=port, identity=identity, version=version),
    )
