from .routeros import RouterOSGateway
from .mock import MockGateway
