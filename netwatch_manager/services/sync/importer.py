import logging
from typing import List, Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from netwatch_manager import crud, schemas
from netwatch_manager.core.constants import DEVICE_TYPES, DeviceStatus, ErrorCategory
from netwatch_manager.services.error_classifier import describe

logger = logging.getLogger(__name__)

_KNOWN_STATUSES = {status.value for status in DeviceStatus}


def validate_batch(candidates: Sequence[schemas.ImportCandidate]) -> Optional[str]:
    """Returns the first problem found in the batch, or None when every candidate is valid."""
    if not candidates:
        return "No devices provided"
    for position, candidate in enumerate(candidates, start=1):
        if not (candidate.name or "").strip():
            return f"Device at position {position} has an empty name"
        if not (candidate.ip or "").strip():
            return f"Device at position {position} has an empty IP address"
        if candidate.type is not None and candidate.type not in DEVICE_TYPES:
            return f"Device at position {position} has invalid type '{candidate.type}'"
    return None


async def import_batch(db: AsyncSession, candidates: Sequence[schemas.ImportCandidate]) -> schemas.ImportResponse:
    """Validate the whole batch, then create each candidate whose IP is not taken yet.

    Validation is all-or-nothing: one invalid candidate rejects the batch before
    any write. Duplicate detection is check-then-create; a unique-constraint
    violation from a concurrent import of the same IP counts as a skip.
    """
    problem = validate_batch(candidates)
    if problem:
        logger.warning(f"[import] Batch rejected: {problem}")
        return schemas.ImportResponse(**describe(ErrorCategory.VALIDATION_ERROR, problem).result_fields())

    imported: List[schemas.Device] = []
    skipped_ips: List[str] = []
    for candidate in candidates:
        ip = candidate.ip.strip()
        existing = await crud.device.get_device_by_ip(db, ip=ip)
        if existing:
            skipped_ips.append(ip)
            continue

        status = candidate.status if candidate.status in _KNOWN_STATUSES else None
        try:
            device = await crud.device.create_imported_device(
                db, name=candidate.name.strip(), ip=ip, type=candidate.type, status=status,
            )
        except IntegrityError:
            await db.rollback()
            logger.info(f"[import] {ip} was created concurrently; skipping")
            skipped_ips.append(ip)
            continue
        # Snapshot now; a later rollback expires every instance in the session
        imported.append(schemas.Device.model_validate(device))

    logger.info(f"[import] Imported {len(imported)} device(s), skipped {len(skipped_ips)}")
    return schemas.ImportResponse(
        success=True,
        message=f"Imported {len(imported)} device(s), skipped {len(skipped_ips)} duplicate(s)",
        imported=len(imported),
        skipped=len(skipped_ips),
        skipped_ips=skipped_ips,
        devices=imported,
    )
