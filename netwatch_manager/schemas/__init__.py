from .device import (
    Device, DeviceCreate, DeviceUpdate, DeviceWriteResponse,
    DeviceStatusHistory, DeviceHistoryResponse, DeviceSyncRequest, DeviceSyncResponse,
)
from .system_config import (
    SystemConfig, SystemConfigUpdate, ConnectionTestRequest, ConnectionTestResult, RouterIdentity,
)
from .netwatch import (
    RemoteNetwatchEntry, OperationResult, DiscoveredDevice, DiscoveryResponse,
    RefreshResponse, ImportCandidate, ImportRequest, ImportResponse,
)
