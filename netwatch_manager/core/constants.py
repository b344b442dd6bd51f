import enum


class DeviceStatus(str, enum.Enum):
    UP = "up"
    DOWN = "down"
    UNKNOWN = "unknown"


class DeviceType(str, enum.Enum):
    ROUTER = "ROUTER"
    SWITCH = "SWITCH"
    ACCESS_POINT = "ACCESS_POINT"
    PC = "PC"
    LAPTOP = "LAPTOP"
    TABLET = "TABLET"
    PRINTER = "PRINTER"
    SCANNER_GTEX = "SCANNER_GTEX"
    SMART_TV = "SMART_TV"
    CCTV = "CCTV"
    SERVER = "SERVER"
    PHONE = "PHONE"
    OTHER = "OTHER"


DEVICE_TYPES = [t.value for t in DeviceType]

# Type assigned when an operator or an import does not specify one
DEFAULT_DEVICE_TYPE = DeviceType.ROUTER

DEFAULT_LANE_NAME = "Default"
IMPORTED_LANE_NAME = "Imported"

SYSTEM_CONFIG_ID = 1
DEFAULT_ROUTER_PORT = 8728
DEFAULT_NETWATCH_TIMEOUT_MS = 1000
DEFAULT_NETWATCH_INTERVAL_S = 5

NETWATCH_TIMEOUT_RANGE = (100, 10000)
NETWATCH_INTERVAL_RANGE = (5, 3600)

# RouterOS commands issued by the core
NETWATCH_PRINT = "/tool/netwatch/print"
NETWATCH_ADD = "/tool/netwatch/add"
NETWATCH_SET = "/tool/netwatch/set"
NETWATCH_REMOVE = "/tool/netwatch/remove"
IDENTITY_PRINT = "/system/identity/print"
RESOURCE_PRINT = "/system/resource/print"


class ErrorCategory(str, enum.Enum):
    NOT_CONFIGURED = "NotConfigured"
    TIMEOUT = "Timeout"
    AUTH_FAILURE = "AuthFailure"
    CONNECTION_REFUSED = "ConnectionRefused"
    NETWORK_UNREACHABLE = "NetworkUnreachable"
    VALIDATION_ERROR = "ValidationError"
    DUPLICATE_KEY = "DuplicateKey"
    NOT_FOUND = "NotFound"
    UNKNOWN = "Unknown"
