"""
Best-effort propagation of local device changes to the router's netwatch table.

The local write has always happened before anything here runs; remote failures
come back as a warning string or a failed result, never as an exception.
"""
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from netwatch_manager import crud, schemas
from netwatch_manager.core.config import settings
from netwatch_manager.core.constants import (
    NETWATCH_ADD,
    NETWATCH_PRINT,
    NETWATCH_REMOVE,
    NETWATCH_SET,
    ErrorCategory,
)
from netwatch_manager.models.device import Device
from netwatch_manager.models.system_config import SystemConfig
from netwatch_manager.services.error_classifier import ClassifiedError, classify_and_describe, describe
from netwatch_manager.services.netwatch import GatewayBuilder, build_gateway, gateway_for_config, open_session
from netwatch_manager.services.sync.transform import device_to_netwatch_params

logger = logging.getLogger(__name__)

CREATE_WARNING_PREFIX = "Device created but not synced to MikroTik"
UPDATE_WARNING_PREFIX = "Device updated but not synced to MikroTik"
DELETE_WARNING_PREFIX = "Device deleted but not removed from MikroTik"


@dataclass
class PushOutcome:
    pushed: bool = False
    warning: Optional[str] = None
    category: Optional[ErrorCategory] = None


class OutboundPushManager:
    def __init__(self, db: AsyncSession, gateway_builder: GatewayBuilder = build_gateway):
        self.db = db
        self.gateway_builder = gateway_builder

    async def _load_config(self) -> Optional[SystemConfig]:
        config = await crud.system_config.get_system_config(self.db)
        if config is None or not config.is_configured:
            return None
        return config

    def _classify(self, exc: Exception, config: SystemConfig) -> ClassifiedError:
        return classify_and_describe(
            exc, host=config.mikrotik_host, port=config.mikrotik_port, timeout=settings.GATEWAY_TIMEOUT_SECONDS,
        )

    async def push_if_requested(self, device: Device, push_requested: bool) -> PushOutcome:
        """Add a freshly created device to netwatch when the caller asked for it."""
        if not push_requested:
            return PushOutcome()

        config = await self._load_config()
        if config is None:
            classified = describe(ErrorCategory.NOT_CONFIGURED)
            return PushOutcome(warning=classified.as_warning(CREATE_WARNING_PREFIX), category=classified.category)

        try:
            async with open_session(gateway_for_config(config, self.gateway_builder)) as session:
                await session.query(NETWATCH_ADD, device_to_netwatch_params(device))
        except Exception as e:
            classified = self._classify(e, config)
            logger.warning(f"[push] Failed to add {device.ip} to netwatch ({classified.category.value}): {e}")
            return PushOutcome(warning=classified.as_warning(CREATE_WARNING_PREFIX), category=classified.category)

        logger.info(f"[push] Added {device.ip} ({device.name}) to netwatch")
        return PushOutcome(pushed=True)

    async def sync_device(self, device: Device, old_ip: Optional[str] = None,
                          config: Optional[SystemConfig] = None) -> str:
        """Update the netwatch entry for the device's old (or current) IP, adding one if none exists.

        Returns "updated" or "added". Raises on any gateway failure; callers turn
        that into a warning or a failed count.
        """
        config = config or await self._load_config()
        if config is None:
            raise LookupError("MikroTik not configured")

        params = device_to_netwatch_params(device)
        lookup_ip = old_ip or device.ip
        async with open_session(gateway_for_config(config, self.gateway_builder)) as session:
            existing = await session.query(NETWATCH_PRINT, {"host": lookup_ip})
            existing = [row for row in existing if row.get("host") == lookup_ip]
            if existing:
                await session.query(NETWATCH_SET, {".id": existing[0][".id"], **params})
                return "updated"
            await session.query(NETWATCH_ADD, params)
            return "added"

    async def sync_after_update(self, device: Device, old_ip: Optional[str]) -> PushOutcome:
        """Best-effort re-sync after an operator edit; clears needs_sync on success."""
        config = await self._load_config()
        if config is None:
            classified = describe(ErrorCategory.NOT_CONFIGURED)
            return PushOutcome(warning=classified.as_warning(UPDATE_WARNING_PREFIX), category=classified.category)
        try:
            action = await self.sync_device(device, old_ip=old_ip, config=config)
        except Exception as e:
            classified = self._classify(e, config)
            logger.warning(f"[push] Failed to sync {device.ip} to netwatch ({classified.category.value}): {e}")
            return PushOutcome(warning=classified.as_warning(UPDATE_WARNING_PREFIX), category=classified.category)
        await crud.device.clear_needs_sync(self.db, device)
        logger.info(f"[push] Netwatch entry for {device.ip} {action}")
        return PushOutcome(pushed=True)

    async def sync_devices(self, device_ids: Optional[Iterable[str]] = None,
                           sync_all: bool = False) -> schemas.DeviceSyncResponse:
        """Sync the given devices (or every device flagged needs_sync) to netwatch."""
        if sync_all:
            devices = await crud.device.get_devices_needing_sync(self.db)
        elif device_ids:
            devices = await crud.device.get_devices_by_ids(self.db, device_ids)
        else:
            return schemas.DeviceSyncResponse(
                success=False, message="No devices specified", category=ErrorCategory.VALIDATION_ERROR,
            )

        if not devices:
            return schemas.DeviceSyncResponse(success=True, message="No devices to sync")

        config = await self._load_config()
        if config is None:
            classified = describe(ErrorCategory.NOT_CONFIGURED)
            return schemas.DeviceSyncResponse(
                success=False, message=classified.details, category=classified.category, failed=len(devices),
            )

        synced, errors = 0, []
        for device in devices:
            try:
                await self.sync_device(device, config=config)
            except Exception as e:
                classified = self._classify(e, config)
                logger.warning(f"[push] Failed to sync {device.ip} ({classified.category.value}): {e}")
                errors.append(f"{device.name} ({device.ip}): {classified.label}: {classified.details}")
                continue
            await crud.device.clear_needs_sync(self.db, device)
            synced += 1

        failed = len(errors)
        logger.info(f"[push] Netwatch sync finished: synced={synced}, failed={failed}")
        return schemas.DeviceSyncResponse(
            success=failed == 0,
            message=f"Synced {synced} device(s), {failed} failed",
            synced=synced,
            failed=failed,
            errors=errors,
        )

    async def remove_device_entry(self, ip: str) -> schemas.OperationResult:
        """Remove every netwatch entry watching ``ip``."""
        config = await self._load_config()
        if config is None:
            return schemas.OperationResult(**describe(ErrorCategory.NOT_CONFIGURED).result_fields())
        try:
            async with open_session(gateway_for_config(config, self.gateway_builder)) as session:
                rows = await session.query(NETWATCH_PRINT, {"host": ip})
                removed = 0
                for row in rows:
                    if row.get("host") != ip:
                        continue
                    await session.query(NETWATCH_REMOVE, {".id": row[".id"]})
                    removed += 1
        except Exception as e:
            classified = self._classify(e, config)
            logger.warning(f"[push] Failed to remove {ip} from netwatch ({classified.category.value}): {e}")
            return schemas.OperationResult(**classified.result_fields())

        logger.info(f"[push] Removed {removed} netwatch entr{'y' if removed == 1 else 'ies'} for {ip}")
        return schemas.OperationResult(success=True, message=f"Removed {removed} netwatch entries for {ip}")
