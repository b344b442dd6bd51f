from sqlalchemy import Column, Integer, String, DateTime

from netwatch_manager.core.config import get_now
from netwatch_manager.core.constants import (
    DEFAULT_NETWATCH_INTERVAL_S,
    DEFAULT_NETWATCH_TIMEOUT_MS,
    DEFAULT_ROUTER_PORT,
    SYSTEM_CONFIG_ID,
)
from netwatch_manager.db.session import Base


class SystemConfig(Base):
    """Singleton row (id=1) holding the router connection and polling parameters."""
    __tablename__ = "system_config"

    id = Column(Integer, primary_key=True, default=SYSTEM_CONFIG_ID)
    mikrotik_host = Column(String, nullable=False, default="")
    mikrotik_user = Column(String, nullable=False, default="")
    mikrotik_password = Column(String, nullable=False, default="")  # Fernet-encrypted
    mikrotik_port = Column(Integer, nullable=False, default=DEFAULT_ROUTER_PORT)
    polling_interval = Column(Integer, nullable=False, default=30)  # seconds
    default_netwatch_timeout = Column(Integer, nullable=False, default=DEFAULT_NETWATCH_TIMEOUT_MS)
    default_netwatch_interval = Column(Integer, nullable=False, default=DEFAULT_NETWATCH_INTERVAL_S)
    updated_at = Column(DateTime, nullable=False, default=get_now, onupdate=get_now)

    @property
    def is_configured(self) -> bool:
        return bool(self.mikrotik_host)

    @property
    def has_password(self) -> bool:
        return bool(self.mikrotik_password)
