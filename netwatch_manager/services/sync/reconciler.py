"""
Status reconciliation: diff one remote netwatch snapshot against local devices.

Pure: no I/O and no clock reads beyond the ``now`` argument's default. The
resulting mutations are persisted by ``crud.device.apply_status_mutations``.
"""
import enum
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from netwatch_manager import schemas
from netwatch_manager.core.config import get_now
from netwatch_manager.core.constants import DeviceStatus
from netwatch_manager.services.sync.transform import map_remote_status

logger = logging.getLogger(__name__)


class ReconcileMode(str, enum.Enum):
    # Background poll: devices missing from the snapshot are left alone
    POLL = "poll"
    # Operator-triggered refresh: devices missing from the snapshot drop to unknown
    REFRESH = "refresh"


@dataclass
class StatusMutation:
    device_id: str
    ip: str
    status: Optional[DeviceStatus] = None  # set only on a transition
    status_since: Optional[datetime] = None
    last_seen: Optional[datetime] = None

    @property
    def is_transition(self) -> bool:
        return self.status is not None


def index_entries(entries: Iterable[schemas.RemoteNetwatchEntry]) -> Dict[str, schemas.RemoteNetwatchEntry]:
    """host -> entry; when several entries share a host, the first one wins."""
    index: Dict[str, schemas.RemoteNetwatchEntry] = {}
    for entry in entries:
        index.setdefault(entry.host, entry)
    return index


def reconcile(
    devices: Sequence,
    entries: Iterable[schemas.RemoteNetwatchEntry],
    now: Optional[datetime] = None,
    mode: ReconcileMode = ReconcileMode.POLL,
) -> List[StatusMutation]:
    """Returns the mutations that align ``devices`` with the snapshot.

    Devices are matched by exact ``entry.host == device.ip``. Devices needing no
    change produce no mutation.
    """
    now = now or get_now()
    by_host = index_entries(entries)
    mutations: List[StatusMutation] = []

    for device in devices:
        entry = by_host.get(device.ip)
        if entry is None:
            logger.info(f"[reconcile] Device {device.ip} not found in netwatch")
            if mode is ReconcileMode.REFRESH and device.status != DeviceStatus.UNKNOWN.value:
                mutations.append(StatusMutation(
                    device_id=device.id, ip=device.ip, status=DeviceStatus.UNKNOWN, status_since=now,
                ))
            continue

        remote_status = map_remote_status(entry.raw_status)
        mutation = StatusMutation(device_id=device.id, ip=device.ip)
        if device.status != remote_status.value:
            mutation.status = remote_status
            mutation.status_since = now
        if remote_status is DeviceStatus.UP:
            mutation.last_seen = now

        if mutation.status is None and mutation.last_seen is None:
            continue
        if mutation.is_transition:
            logger.info(f"[reconcile] {device.ip}: {device.status} -> {remote_status.value}")
        mutations.append(mutation)

    return mutations


def count_transitions(entries: Iterable[schemas.RemoteNetwatchEntry],
                      mutations: Iterable[StatusMutation]) -> Tuple[int, int]:
    """(status changes of devices found in the snapshot, devices downgraded for being missing from it)"""
    by_host = index_entries(entries)
    updated = not_found = 0
    for mutation in mutations:
        if not mutation.is_transition:
            continue
        if mutation.ip in by_host:
            updated += 1
        else:
            not_found += 1
    return updated, not_found
