from sqlalchemy import Column, Integer, String, DateTime

from netwatch_manager.core.config import get_now
from netwatch_manager.db.session import Base


class DeviceStatusHistory(Base):
    __tablename__ = "device_status_history"

    id = Column(Integer, primary_key=True, index=True)
    device_id = Column(String, nullable=False, index=True)
    device_ip = Column(String, nullable=False)  # IP at the time of the transition
    status = Column(String, nullable=False)
    timestamp = Column(DateTime, default=get_now, nullable=False, index=True)
