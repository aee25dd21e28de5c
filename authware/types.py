"""
Authware SDK Type Definitions

Configuration, wire models and the response status taxonomy. Field names
on the wire are snake_case and are matched exactly by the ``from_dict``
constructors below.
"""

import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import IntEnum
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Tuple, runtime_checkable


DEFAULT_BASE_URL = "https://api.authware.org"
# Issuers of the certificates served for DEFAULT_BASE_URL
DEFAULT_TRUSTED_ISSUERS = ("Cloudflare Inc ECC CA-3", "R3")

# .NET style timestamps carry up to 7 fractional digits
_FRACTION_REGEX = re.compile(r"\.(\d+)")


class ResponseStatus(IntEnum):
    """Closed status taxonomy used in every Authware response body."""

    SUCCESS = 0
    SESSION_EXPIRED = 1
    SERVER_NOT_FOUND = 2
    AUTHENTICATION_FAILED = 3
    SESSION_NOT_FOUND = 4
    APP_NOT_FOUND = 5
    USER_NOT_FOUND = 6
    VARIABLE_NOT_FOUND = 7
    API_NOT_FOUND = 8
    ROLE_NOT_FOUND = 9
    TOKEN_NOT_FOUND = 10
    RECAPTCHA = 11
    ALREADY_AUTHENTICATED = 12
    MISSING_ROLE_PERMISSIONS = 13
    VALIDATION_ERROR = 14
    INTERNAL_SERVER_ERROR = 15
    API_EXECUTION_FAILED = 16
    APPLICATION_LIMITS = 17
    MISSING_USER_VARIABLE_PERMISSIONS = 18
    FRAUD = 19
    INVALID_HARDWARE_ID = 20
    UPDATE_REQUIRED = 21
    MISSING_VERSION_HEADER = 22
    IDENTIFIER_MISSING = 23
    # Only ever produced locally
    UNIDENTIFIED = 24

    @classmethod
    def parse(cls, value: Any) -> "ResponseStatus":
        """Decode a wire status code, mapping unknown values to UNIDENTIFIED."""
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"status code must be an integer, got {value!r}")
        try:
            return cls(value)
        except ValueError:
            return cls.UNIDENTIFIED


@runtime_checkable
class HardwareIdProvider(Protocol):
    """Strategy returning the device identifier sent to the service."""

    def __call__(self) -> str:
        ...


def is_valid_uuid(value: Any) -> bool:
    """Check whether ``value`` is a string that parses as a UUID."""
    if not isinstance(value, str) or not value:
        return False
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp as emitted by the service."""
    if value is None:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    text = _FRACTION_REGEX.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _default_hardware_id_provider() -> HardwareIdProvider:
    from .identifiers import platform_hardware_id

    return platform_hardware_id


@dataclass
class AuthwareConfig:
    """SDK configuration options."""

    # Service origin (default: https://api.authware.org)
    base_url: str = DEFAULT_BASE_URL
    # Sent as X-Authware-App-Version on every request
    app_version: str = "1.0.0"
    # Request timeout in seconds, applied to every request
    timeout: float = 30.0
    # Base directory for cached auth tokens (default: ~/.authware)
    token_directory: Optional[str] = None
    # Device identifier strategy, used only when the application requires it
    hardware_id_provider: HardwareIdProvider = field(default_factory=_default_hardware_id_provider)
    # Accepted TLS certificate issuer common names (default: DEFAULT_TRUSTED_ISSUERS
    # for DEFAULT_BASE_URL, no pinning for other origins); () disables pinning
    trusted_issuers: Optional[Tuple[str, ...]] = None
    # Honour proxy settings from the environment
    trust_env: bool = False
    # Enable debug logging (default: False)
    debug: bool = False
    # Custom headers to include in requests
    headers: Optional[Dict[str, str]] = None

    def resolve_token_directory(self) -> Path:
        """Base directory under which per-application token slots live."""
        if self.token_directory:
            return Path(self.token_directory)
        return Path.home() / ".authware"

    def resolve_trusted_issuers(self) -> Tuple[str, ...]:
        """Issuer common names the server certificate must come from; empty means unpinned."""
        if self.trusted_issuers is not None:
            return tuple(self.trusted_issuers)
        if self.base_url.rstrip("/") == DEFAULT_BASE_URL:
            return DEFAULT_TRUSTED_ISSUERS
        return ()


@dataclass(frozen=True)
class Api:
    """A remote procedure exposed by an application."""

    id: uuid.UUID
    name: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Api":
        return cls(id=uuid.UUID(data["id"]), name=data["name"])


@dataclass(frozen=True)
class Application:
    """Application metadata returned by the initialization call."""

    id: uuid.UUID
    name: str
    version: str
    date_created: datetime
    requires_hardware_id: bool = False
    apis: Tuple[Api, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Application":
        """Create from dictionary."""
        return cls(
            id=uuid.UUID(data["id"]),
            name=data["name"],
            version=str(data["version"]),
            date_created=parse_datetime(data["date_created"]),
            requires_hardware_id=bool(data.get("is_hwid_checking_enabled", False)),
            apis=tuple(Api.from_dict(a) for a in data.get("apis") or []),
        )

    def __str__(self) -> str:
        return f"{self.name} (v{self.version})"


@dataclass
class Variable:
    """Application variable (key/value pair)."""

    key: str
    value: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Variable":
        return cls(key=data["key"], value=data["value"])

    def __str__(self) -> str:
        return f"{self.key}: {self.value}"


@dataclass
class UserVariable(Variable):
    """Variable stored against a single user."""

    can_user_edit: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserVariable":
        return cls(
            key=data["key"],
            value=data["value"],
            can_user_edit=data.get("can_user_edit", True),
        )


@dataclass
class Role:
    id: uuid.UUID
    name: str
    variables: List[Variable] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Role":
        return cls(
            id=uuid.UUID(data["id"]),
            name=data["name"],
            variables=[Variable.from_dict(v) for v in data.get("variables") or []],
        )


@dataclass
class UserSession:
    """A server-side session belonging to the user."""

    id: uuid.UUID
    date_created: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserSession":
        return cls(
            id=uuid.UUID(data["id"]),
            date_created=parse_datetime(data.get("date_created")),
        )


@dataclass
class ApiRequest:
    """A past remote procedure execution."""

    id: uuid.UUID
    api_id: uuid.UUID
    parameters: Dict[str, str] = field(default_factory=dict)
    date_created: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ApiRequest":
        return cls(
            id=uuid.UUID(data["id"]),
            api_id=uuid.UUID(data["api_id"]),
            parameters=data.get("parameters") or {},
            date_created=parse_datetime(data.get("date_created")),
        )


@dataclass
class Profile:
    """Authenticated user's profile."""

    id: uuid.UUID
    username: str
    email: str
    date_created: Optional[datetime] = None
    expiration: Optional[datetime] = None
    api_key: Optional[str] = None
    role: Optional[Role] = None
    sessions: List[UserSession] = field(default_factory=list)
    requests: List[ApiRequest] = field(default_factory=list)
    user_variables: List[UserVariable] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Profile":
        """Create from dictionary."""
        role_data = data.get("role")
        return cls(
            id=uuid.UUID(data["id"]),
            username=data["username"],
            email=data["email"],
            date_created=parse_datetime(data.get("date_created")),
            expiration=parse_datetime(data.get("expiration")),
            api_key=data.get("api_key"),
            role=Role.from_dict(role_data) if role_data else None,
            sessions=[UserSession.from_dict(s) for s in data.get("sessions") or []],
            requests=[ApiRequest.from_dict(r) for r in data.get("requests") or []],
            user_variables=[UserVariable.from_dict(v) for v in data.get("user_variables") or []],
        )

    def __str__(self) -> str:
        return f"{self.username} ({self.id})"


@dataclass
class Session:
    """Current client-side authentication state."""

    token: Optional[str] = None
    profile: Optional[Profile] = None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def clear(self) -> None:
        self.token = None
        self.profile = None


@dataclass
class AuthResponse:
    auth_token: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuthResponse":
        token = data["auth_token"]
        if not isinstance(token, str) or not token:
            raise ValueError("auth_token must be a non-empty string")
        return cls(auth_token=token)


@dataclass
class BaseResponse:
    """Generic acknowledgement returned by write operations."""

    code: ResponseStatus
    message: str = ""

    @property
    def success(self) -> bool:
        return self.code == ResponseStatus.SUCCESS

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BaseResponse":
        return cls(
            code=ResponseStatus.parse(data["code"]),
            message=data.get("message") or "",
        )

    def __str__(self) -> str:
        return f"{self.message} ({self.code.name})"


@dataclass
class UpdatedDataResponse(BaseResponse):
    """Acknowledgement carrying the updated user variable."""

    new_data: Optional[UserVariable] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UpdatedDataResponse":
        new_data = data.get("new_data")
        return cls(
            code=ResponseStatus.parse(data["code"]),
            message=data.get("message") or "",
            new_data=UserVariable.from_dict(new_data) if new_data else None,
        )


@dataclass
class ApiResponse(BaseResponse):
    """Result of a remote procedure execution."""

    decoded_response: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ApiResponse":
        return cls(
            code=ResponseStatus.parse(data["code"]),
            message=data.get("message") or "",
            decoded_response=data.get("decoded_response"),
        )


@dataclass
class ErrorResponse(BaseResponse):
    """Structured error body: {code, message, errors?, trace?}."""

    errors: Optional[List[str]] = None
    trace: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ErrorResponse":
        if not isinstance(data, dict):
            raise TypeError("error body must be a JSON object")
        errors = data.get("errors")
        if errors is not None and not isinstance(errors, list):
            raise TypeError("errors must be a list")
        return cls(
            code=ResponseStatus.parse(data["code"]),
            message=data.get("message") or "",
            errors=[str(e) for e in errors] if errors is not None else None,
            trace=data.get("trace"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        result: Dict[str, Any] = {"code": int(self.code), "message": self.message}
        if self.errors is not None:
            result["errors"] = list(self.errors)
        if self.trace is not None:
            result["trace"] = self.trace
        return result

    def __str__(self) -> str:
        base = super().__str__()
        if not self.errors:
            return base
        return f"{base} ({', '.join(self.errors)})"
