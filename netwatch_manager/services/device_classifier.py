"""Infer a device category from the free-text name or comment of a netwatch entry."""
from typing import Optional, Tuple

from netwatch_manager.core.constants import DeviceType

# Order matters: ambiguous names ("ap-printer", "srv-tv") resolve to the first matching rule
TYPE_RULES: Tuple[Tuple[Tuple[str, ...], DeviceType], ...] = (
    # Network infrastructure
    (("router", "rb", "mikrotik"), DeviceType.ROUTER),
    (("switch", "sw-"), DeviceType.SWITCH),
    (("ap-", "access point", "wifi"), DeviceType.ACCESS_POINT),
    # Computers
    (("pc-", "desktop", "workstation"), DeviceType.PC),
    (("laptop", "notebook"), DeviceType.LAPTOP),
    (("tablet", "ipad"), DeviceType.TABLET),
    # Peripherals
    (("printer", "print"), DeviceType.PRINTER),
    (("scanner", "scan", "gtex"), DeviceType.SCANNER_GTEX),
    # Media & surveillance
    (("tv", "television", "smart tv"), DeviceType.SMART_TV),
    (("cctv", "camera", "cam-"), DeviceType.CCTV),
    # Servers & phones
    (("server", "srv-"), DeviceType.SERVER),
    (("phone", "smartphone", "mobile"), DeviceType.PHONE),
)

FALLBACK_TYPE = DeviceType.OTHER
UNKNOWN_DEVICE_NAME = "Unknown Device"


def classify_device_type(name: Optional[str]) -> DeviceType:
    text = (name or "").lower()
    for keywords, device_type in TYPE_RULES:
        if any(keyword in text for keyword in keywords):
            return device_type
    return FALLBACK_TYPE


def display_name(comment: Optional[str], host: Optional[str]) -> str:
    """Name shown for a netwatch entry: its comment, else its host."""
    return comment or host or UNKNOWN_DEVICE_NAME
