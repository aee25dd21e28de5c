"""
Authware Python SDK

Client for the Authware authentication platform: application
initialization, username/password login with a cached, self-healing auth
token, and user-scoped calls (profile, variables, API execution), with sync
and async clients.
"""

from .client import (
    AuthwareClient,
    AuthwareAsyncClient,
    create_authware_client,
    create_async_authware_client,
)
from .types import (
    AuthwareConfig,
    HardwareIdProvider,
    ResponseStatus,
    Application,
    Api,
    Profile,
    Role,
    Session,
    UserSession,
    ApiRequest,
    Variable,
    UserVariable,
    BaseResponse,
    UpdatedDataResponse,
    ApiResponse,
    ErrorResponse,
)
from .errors import (
    AuthwareClientError,
    AuthwareError,
    InvalidArgumentError,
    NotInitializedError,
    NotAuthenticatedError,
    NetworkError,
    ProtocolError,
    HardwareIdUnavailableError,
    RateLimitError,
    UpdateRequiredError,
    is_authware_error,
    is_retryable_error,
)
from .outcome import Outcome, OutcomeKind
from .storage import TokenFileStorage
from .identifiers import platform_hardware_id

__version__ = "1.0.0"
__all__ = [
    # Clients
    "AuthwareClient",
    "AuthwareAsyncClient",
    "create_authware_client",
    "create_async_authware_client",
    # Types
    "AuthwareConfig",
    "HardwareIdProvider",
    "ResponseStatus",
    "Application",
    "Api",
    "Profile",
    "Role",
    "Session",
    "UserSession",
    "ApiRequest",
    "Variable",
    "UserVariable",
    "BaseResponse",
    "UpdatedDataResponse",
    "ApiResponse",
    "ErrorResponse",
    # Errors
    "AuthwareClientError",
    "AuthwareError",
    "InvalidArgumentError",
    "NotInitializedError",
    "NotAuthenticatedError",
    "NetworkError",
    "ProtocolError",
    "HardwareIdUnavailableError",
    "RateLimitError",
    "UpdateRequiredError",
    "is_authware_error",
    "is_retryable_error",
    # Results
    "Outcome",
    "OutcomeKind",
    # Storage / identifiers
    "TokenFileStorage",
    "platform_hardware_id",
]
