import uuid

from sqlalchemy import Column, String, DateTime, Boolean, Float, Integer

from netwatch_manager.core.config import get_now
from netwatch_manager.core.constants import (
    DEFAULT_DEVICE_TYPE,
    DEFAULT_LANE_NAME,
    DEFAULT_NETWATCH_INTERVAL_S,
    DEFAULT_NETWATCH_TIMEOUT_MS,
    DeviceStatus,
)
from netwatch_manager.db.session import Base


def _new_device_id() -> str:
    return uuid.uuid4().hex


class Device(Base):
    __tablename__ = "devices"

    id = Column(String, primary_key=True, default=_new_device_id)
    name = Column(String, index=True, nullable=False)
    ip = Column(String, nullable=False, unique=True)
    type = Column(String, nullable=False, default=DEFAULT_DEVICE_TYPE.value)
    lane_name = Column(String, nullable=False, default=DEFAULT_LANE_NAME)

    status = Column(String, nullable=False, default=DeviceStatus.UNKNOWN.value)  # up, down, unknown
    status_since = Column(DateTime, nullable=False, default=get_now)
    last_seen = Column(DateTime, nullable=True)

    # Map position; owned by the UI
    position_x = Column(Float, nullable=False, default=0)
    position_y = Column(Float, nullable=False, default=0)

    # Netwatch entry parameters pushed to the router
    netwatch_timeout = Column(Integer, nullable=False, default=DEFAULT_NETWATCH_TIMEOUT_MS)  # ms
    netwatch_interval = Column(Integer, nullable=False, default=DEFAULT_NETWATCH_INTERVAL_S)  # s
    netwatch_up_script = Column(String, nullable=True)
    netwatch_down_script = Column(String, nullable=True)
    needs_sync = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, nullable=False, default=get_now)
    updated_at = Column(DateTime, nullable=False, default=get_now, onupdate=get_now)
