import ipaddress
from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, field_validator

from netwatch_manager.core.constants import (
    DEFAULT_DEVICE_TYPE,
    DEFAULT_LANE_NAME,
    DEVICE_TYPES,
    NETWATCH_INTERVAL_RANGE,
    NETWATCH_TIMEOUT_RANGE,
    ErrorCategory,
)


def _validate_ipv4(v: str) -> str:
    v = (v or "").strip()
    try:
        ipaddress.IPv4Address(v)
    except ValueError:
        raise ValueError("Invalid IP address format")
    return v


def _validate_type(v: str) -> str:
    if v not in DEVICE_TYPES:
        raise ValueError(f"Invalid device type. Must be one of: {', '.join(DEVICE_TYPES)}")
    return v


def _validate_range(v: Optional[int], bounds: tuple[int, int], label: str) -> Optional[int]:
    if v is None:
        return v
    low, high = bounds
    if not low <= v <= high:
        raise ValueError(f"{label} must be between {low} and {high}")
    return v


class DeviceBase(BaseModel):
    name: str
    ip: str
    type: str = DEFAULT_DEVICE_TYPE.value
    lane_name: str = DEFAULT_LANE_NAME
    netwatch_timeout: Optional[int] = None
    netwatch_interval: Optional[int] = None
    netwatch_up_script: Optional[str] = None
    netwatch_down_script: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("name must not be empty")
        return v.strip()

    @field_validator("ip")
    @classmethod
    def validate_ip(cls, v):
        return _validate_ipv4(v)

    @field_validator("type")
    @classmethod
    def validate_type(cls, v):
        return _validate_type(v)

    @field_validator("netwatch_timeout")
    @classmethod
    def validate_netwatch_timeout(cls, v):
        return _validate_range(v, NETWATCH_TIMEOUT_RANGE, "netwatch_timeout (ms)")

    @field_validator("netwatch_interval")
    @classmethod
    def validate_netwatch_interval(cls, v):
        return _validate_range(v, NETWATCH_INTERVAL_RANGE, "netwatch_interval (s)")


class DeviceCreate(DeviceBase):
    # Best-effort push of the new device to the router's netwatch table
    sync_to_netwatch: bool = False


class DeviceUpdate(BaseModel):
    name: Optional[str] = None
    ip: Optional[str] = None
    type: Optional[str] = None
    lane_name: Optional[str] = None
    position_x: Optional[float] = None
    position_y: Optional[float] = None
    netwatch_timeout: Optional[int] = None
    netwatch_interval: Optional[int] = None
    netwatch_up_script: Optional[str] = None
    netwatch_down_script: Optional[str] = None

    # Omitted means unchanged; only the scripts may be cleared with null
    @field_validator(
        "name", "ip", "type", "lane_name", "position_x", "position_y", "netwatch_timeout", "netwatch_interval",
        mode="before",
    )
    @classmethod
    def reject_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} must not be null")
        return v

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if v is not None and not v.strip():
            raise ValueError("name must not be empty")
        return v.strip() if v is not None else v

    @field_validator("ip")
    @classmethod
    def validate_ip(cls, v):
        return _validate_ipv4(v) if v is not None else v

    @field_validator("type")
    @classmethod
    def validate_type(cls, v):
        return _validate_type(v) if v is not None else v

    @field_validator("netwatch_timeout")
    @classmethod
    def validate_netwatch_timeout(cls, v):
        return _validate_range(v, NETWATCH_TIMEOUT_RANGE, "netwatch_timeout (ms)")

    @field_validator("netwatch_interval")
    @classmethod
    def validate_netwatch_interval(cls, v):
        return _validate_range(v, NETWATCH_INTERVAL_RANGE, "netwatch_interval (s)")


# Schema for reading device data (from DB)
class Device(BaseModel):
    id: str
    name: str
    ip: str
    type: str
    lane_name: str
    status: str
    status_since: datetime
    last_seen: Optional[datetime] = None
    position_x: float = 0
    position_y: float = 0
    netwatch_timeout: int
    netwatch_interval: int
    netwatch_up_script: Optional[str] = None
    netwatch_down_script: Optional[str] = None
    needs_sync: bool = False
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class DeviceWriteResponse(BaseModel):
    """Device after a create, update or delete, plus the warning of an optional netwatch sync."""
    device: Device
    warning: Optional[str] = None


class DeviceStatusHistory(BaseModel):
    id: int
    device_id: str
    device_ip: str
    status: str
    timestamp: datetime

    class Config:
        from_attributes = True


class DeviceHistoryResponse(BaseModel):
    device_id: str
    device_ip: str
    device_name: str
    since: datetime
    hours: int
    history: List[DeviceStatusHistory]


class DeviceSyncRequest(BaseModel):
    device_ids: Optional[List[str]] = None
    sync_all: bool = False


class DeviceSyncResponse(BaseModel):
    success: bool
    message: str
    category: Optional[ErrorCategory] = None
    synced: int = 0
    failed: int = 0
    errors: List[str] = []
