import ipaddress
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from netwatch_manager.core.constants import (
    DEFAULT_ROUTER_PORT,
    ErrorCategory,
    NETWATCH_INTERVAL_RANGE,
    NETWATCH_TIMEOUT_RANGE,
)


def _validate_host(v: Optional[str]) -> Optional[str]:
    if v is None or v == "":
        return v
    try:
        ipaddress.IPv4Address(v)
    except ValueError:
        raise ValueError("Please provide a valid IPv4 address (e.g., 192.168.1.1)")
    return v


class SystemConfigUpdate(BaseModel):
    """Partial update; omitted fields keep their stored value (upsert on first write)."""
    mikrotik_host: Optional[str] = None
    mikrotik_user: Optional[str] = None
    mikrotik_password: Optional[str] = None
    mikrotik_port: Optional[int] = Field(default=None, ge=1, le=65535)
    polling_interval: Optional[int] = Field(default=None, gt=0)
    default_netwatch_timeout: Optional[int] = Field(
        default=None, ge=NETWATCH_TIMEOUT_RANGE[0], le=NETWATCH_TIMEOUT_RANGE[1]
    )
    default_netwatch_interval: Optional[int] = Field(
        default=None, ge=NETWATCH_INTERVAL_RANGE[0], le=NETWATCH_INTERVAL_RANGE[1]
    )

    @field_validator("mikrotik_host")
    @classmethod
    def validate_host(cls, v):
        return _validate_host(v)


class SystemConfig(BaseModel):
    mikrotik_host: str
    mikrotik_user: str
    mikrotik_port: int
    polling_interval: int
    default_netwatch_timeout: int
    default_netwatch_interval: int
    has_password: bool = False
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ConnectionTestRequest(BaseModel):
    mikrotik_host: str
    mikrotik_user: str
    mikrotik_password: str
    mikrotik_port: int = Field(default=DEFAULT_ROUTER_PORT, ge=1, le=65535)

    @field_validator("mikrotik_host")
    @classmethod
    def validate_host(cls, v):
        if not v:
            raise ValueError("MikroTik IP address is required")
        return _validate_host(v)


class RouterIdentity(BaseModel):
    host: str
    port: int
    identity: str = "Unknown"
    version: str = "Unknown"


class ConnectionTestResult(BaseModel):
    success: bool
    message: Optional[str] = None
    category: Optional[ErrorCategory] = None
    error: Optional[str] = None
    details: Optional[str] = None
    router: Optional[RouterIdentity] = None
