from typing import Optional, List

from pydantic import BaseModel

from netwatch_manager.core.constants import ErrorCategory
from .device import Device


class RemoteNetwatchEntry(BaseModel):
    """One row of the router's netwatch table, produced fresh each query and never persisted."""
    host: str
    raw_status: str = ""
    comment: str = ""
    entry_id: Optional[str] = None


class OperationResult(BaseModel):
    """Outcome of an on-demand remote operation; failures are values, not exceptions."""
    success: bool
    message: Optional[str] = None
    category: Optional[ErrorCategory] = None
    error: Optional[str] = None
    details: Optional[str] = None


class DiscoveredDevice(BaseModel):
    name: str
    ip: str
    type: str
    status: str


class DiscoveryResponse(OperationResult):
    devices: List[DiscoveredDevice] = []


class RefreshResponse(OperationResult):
    updated: int = 0
    not_found: int = 0


class ImportCandidate(BaseModel):
    # Everything optional: the batch is validated as a whole by the importer
    name: Optional[str] = None
    ip: Optional[str] = None
    type: Optional[str] = None
    status: Optional[str] = None


class ImportRequest(BaseModel):
    devices: List[ImportCandidate]


class ImportResponse(OperationResult):
    imported: int = 0
    skipped: int = 0
    skipped_ips: List[str] = []
    devices: List[Device] = []
