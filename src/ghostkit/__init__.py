"""ghostkit - Async virtual-user provisioning for Matrix application service bridges."""

from ghostkit._version import __version__
from ghostkit.client import HTTPMatrixClient, MatrixClient, MockCall, MockMatrixClient
from ghostkit.core.appservice import AppService, ClientFactory
from ghostkit.core.config import AppServiceConfig
from ghostkit.core.errors import GhostKitError, MatrixError, TransportError, coerce_errcode
from ghostkit.core.intent import IntentAPI
from ghostkit.core.locks import InMemoryProvisioningLocks, ProvisioningLockManager
from ghostkit.models.enums import ErrorCode, EventType, Membership, MessageType
from ghostkit.models.event import Event, EventList
from ghostkit.models.responses import ReqRedact, RespJoinRoom, RespRegister, RespSendEvent
from ghostkit.store.base import StateStore
from ghostkit.store.memory import InMemoryStateStore

__all__ = [
    "__version__",
    # Core
    "AppService",
    "AppServiceConfig",
    "ClientFactory",
    "IntentAPI",
    # Errors
    "ErrorCode",
    "GhostKitError",
    "MatrixError",
    "TransportError",
    "coerce_errcode",
    # Clients
    "HTTPMatrixClient",
    "MatrixClient",
    "MockCall",
    "MockMatrixClient",
    # Locking
    "InMemoryProvisioningLocks",
    "ProvisioningLockManager",
    # Store
    "InMemoryStateStore",
    "StateStore",
    # Models
    "Event",
    "EventList",
    "EventType",
    "Membership",
    "MessageType",
    "ReqRedact",
    "RespJoinRoom",
    "RespRegister",
    "RespSendEvent",
]
