import logging
from typing import List, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from netwatch_manager import crud, schemas
from netwatch_manager.core.config import get_now, settings
from netwatch_manager.core.constants import NETWATCH_PRINT, ErrorCategory
from netwatch_manager.models.device import Device
from netwatch_manager.models.system_config import SystemConfig
from netwatch_manager.services.error_classifier import classify_and_describe, describe
from netwatch_manager.services.netwatch import GatewayBuilder, build_gateway, gateway_for_config, open_session
from netwatch_manager.services.sync.reconciler import ReconcileMode, StatusMutation, count_transitions, reconcile
from netwatch_manager.services.sync.transform import entry_to_discovered, rows_to_entries
from netwatch_manager.services.websocket_manager import websocket_manager


async def fetch_snapshot(config: SystemConfig, gateway_builder: GatewayBuilder) -> List[schemas.RemoteNetwatchEntry]:
    """One session, one ``/tool/netwatch/print``; the session is closed whatever happens."""
    async with open_session(gateway_for_config(config, gateway_builder)) as session:
        rows = await session.query(NETWATCH_PRINT)
    return rows_to_entries(rows)


async def persist_mutations(db: AsyncSession, devices: Sequence[Device], mutations: List[StatusMutation]) -> int:
    """Write mutations and broadcast each status transition to dashboard clients."""
    transitions = await crud.device.apply_status_mutations(db, devices, mutations)
    for mutation in mutations:
        if mutation.is_transition:
            await websocket_manager.broadcast_device_status(
                mutation.device_id, mutation.ip, mutation.status.value, mutation.status_since,
            )
    return transitions


async def _load_configured(db: AsyncSession):
    config = await crud.system_config.get_system_config(db)
    if config is None or not config.is_configured:
        return None
    return config


def _failure(exc: Exception, config: SystemConfig):
    return classify_and_describe(
        exc, host=config.mikrotik_host, port=config.mikrotik_port, timeout=settings.GATEWAY_TIMEOUT_SECONDS,
    )


async def fetch_netwatch_devices(db: AsyncSession,
                                 gateway_builder: GatewayBuilder = build_gateway) -> schemas.DiscoveryResponse:
    """List the router's netwatch entries as import candidates with inferred types."""
    config = await _load_configured(db)
    if config is None:
        return schemas.DiscoveryResponse(**describe(ErrorCategory.NOT_CONFIGURED).result_fields())

    try:
        entries = await fetch_snapshot(config, gateway_builder)
    except Exception as e:
        classified = _failure(e, config)
        logging.warning(f"[discovery] Failed to read netwatch from {config.mikrotik_host} "
                        f"({classified.category.value}): {e}")
        return schemas.DiscoveryResponse(**classified.result_fields())

    devices = [entry_to_discovered(entry) for entry in entries]
    logging.info(f"[discovery] Found {len(devices)} netwatch entries on {config.mikrotik_host}")
    return schemas.DiscoveryResponse(
        success=True, message=f"Found {len(devices)} devices in netwatch", devices=devices,
    )


async def refresh_device_statuses(db: AsyncSession,
                                  gateway_builder: GatewayBuilder = build_gateway) -> schemas.RefreshResponse:
    """Operator-triggered reconcile; devices missing from netwatch drop to unknown."""
    config = await _load_configured(db)
    if config is None:
        return schemas.RefreshResponse(**describe(ErrorCategory.NOT_CONFIGURED).result_fields())

    try:
        entries = await fetch_snapshot(config, gateway_builder)
    except Exception as e:
        classified = _failure(e, config)
        logging.warning(f"[refresh] Failed to read netwatch from {config.mikrotik_host} "
                        f"({classified.category.value}): {e}")
        return schemas.RefreshResponse(**classified.result_fields())

    devices = await crud.device.get_devices(db)
    mutations = reconcile(devices, entries, now=get_now(), mode=ReconcileMode.REFRESH)
    await persist_mutations(db, devices, mutations)

    updated, not_found = count_transitions(entries, mutations)
    logging.info(f"[refresh] Refreshed statuses: updated={updated}, not_found={not_found}")
    return schemas.RefreshResponse(
        success=True,
        message=f"Refreshed status: {updated} updated, {not_found} not in netwatch",
        updated=updated,
        not_found=not_found,
    )
