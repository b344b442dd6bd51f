from .device import Device
from .system_config import SystemConfig
from .status_history import DeviceStatusHistory
