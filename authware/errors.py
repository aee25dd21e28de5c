"""
Authware SDK Error Classes

Local failures (bad arguments, transport problems, protocol mismatches) and
service failures (structured error bodies, rate limits, update demands) share
one base class so callers can catch everything the SDK raises at once.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from .types import ErrorResponse, ResponseStatus


class AuthwareClientError(Exception):
    """Base error class for Authware SDK.

    ``code`` is None only for service answers that carried no status code,
    such as a rate limit served as an HTML page.
    """

    def __init__(
        self,
        message: str,
        code: Optional[ResponseStatus] = ResponseStatus.UNIDENTIFIED,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")

    @property
    def code_name(self) -> Optional[str]:
        return self.code.name if self.code is not None else None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "name": self.__class__.__name__,
            "code": self.code_name,
            "message": self.message,
            "details": self.details,
            "timestamp": self.timestamp,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code_name}, message={self.message!r})"


class InvalidArgumentError(AuthwareClientError, ValueError):
    """An argument was rejected before any network call was made."""

    def __init__(self, message: str, argument: Optional[str] = None):
        super().__init__(message, details={"argument": argument} if argument else None)
        self.argument = argument


class NotInitializedError(AuthwareClientError):
    """An operation was attempted before ``initialize`` succeeded."""

    def __init__(self, message: str = "Application has not been initialized, call initialize() first"):
        super().__init__(message)


class NotAuthenticatedError(AuthwareClientError):
    """An authenticated operation was attempted without a credential."""

    def __init__(self, message: str = "No user is authenticated, call login() first"):
        super().__init__(message)


class NetworkError(AuthwareClientError):
    """Network error (connection issues, timeouts, TLS rejections)."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details=details)


class ProtocolError(AuthwareClientError):
    """The service answered with a body the client cannot understand.

    Signals version skew between client and service, or an intermediary
    answering in place of the service. Never a user-facing condition.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ):
        details: Dict[str, Any] = {}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, details=details)
        self.status_code = status_code
        self.body = body


class HardwareIdUnavailableError(AuthwareClientError, NotImplementedError):
    """The default device identifier is not supported on this platform."""

    def __init__(self, message: str):
        super().__init__(message, code=ResponseStatus.IDENTIFIER_MISSING)


class AuthwareError(AuthwareClientError):
    """Structured error returned by the Authware API."""

    def __init__(
        self,
        error_response: Optional[ErrorResponse],
        status_code: int = 0,
        message: Optional[str] = None,
    ):
        if error_response is not None:
            code = error_response.code
            text = message or error_response.message
        else:
            # No structured body, so no status code
            code = None
            text = message or f"HTTP {status_code}"
        super().__init__(text, code=code)
        self.error_response = error_response
        self.status_code = status_code

    @property
    def errors(self) -> List[str]:
        """Field level validation errors, if the service sent any."""
        if self.error_response is None or self.error_response.errors is None:
            return []
        return list(self.error_response.errors)

    @property
    def trace(self) -> Optional[str]:
        return self.error_response.trace if self.error_response else None

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result["status_code"] = self.status_code
        result["errors"] = self.errors
        return result

    def __str__(self) -> str:
        if self.error_response is not None:
            return str(self.error_response)
        return self.message


class RateLimitError(AuthwareError):
    """Rate limit error; retry no sooner than ``retry_after``."""

    def __init__(
        self,
        retry_after: timedelta,
        error_response: Optional[ErrorResponse] = None,
    ):
        super().__init__(error_response, 429, None if error_response else "Rate limit exceeded")
        self.retry_after = retry_after
        self.details["retry_after"] = retry_after.total_seconds()


class UpdateRequiredError(AuthwareError):
    """The application version is out of date; download from ``update_url``."""

    def __init__(
        self,
        update_url: Optional[str],
        error_response: ErrorResponse,
        status_code: int = 0,
    ):
        super().__init__(error_response, status_code)
        self.update_url = update_url
        self.details["update_url"] = update_url


def is_authware_error(error: Any) -> bool:
    """Check if error is a structured error from the Authware API."""
    return isinstance(error, AuthwareError)


def is_retryable_error(error: Any) -> bool:
    """Check if error is retryable by the caller."""
    if isinstance(error, (NetworkError, RateLimitError)):
        return True
    if isinstance(error, UpdateRequiredError):
        return False
    if isinstance(error, AuthwareError):
        return error.code == ResponseStatus.INTERNAL_SERVER_ERROR
    return False
