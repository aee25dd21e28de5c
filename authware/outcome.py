"""
Non-raising results.

``Outcome`` folds every failure a call can produce into one value, so
callers preferring explicit results never need a try/except. Local failures
(bad arguments, network errors, undecodable responses) are reported with
``ResponseStatus.UNIDENTIFIED`` and the exception's message. A rate limit
answered without a structured body has no ``code``; ``kind`` still says
what happened.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, List, Optional, TypeVar

from .errors import AuthwareError, RateLimitError, UpdateRequiredError
from .types import ErrorResponse, ResponseStatus


T = TypeVar("T")


class OutcomeKind(str, Enum):
    SUCCESS = "success"
    SERVICE_ERROR = "service_error"
    RATE_LIMITED = "rate_limited"
    UPDATE_REQUIRED = "update_required"


@dataclass
class Outcome(Generic[T]):
    """Result of a call: a value, or the error it ended with."""

    kind: OutcomeKind
    code: Optional[ResponseStatus]
    message: str = ""
    response: Optional[T] = None
    errors: List[str] = field(default_factory=list)
    retry_after: Optional[timedelta] = None
    update_url: Optional[str] = None
    error_response: Optional[ErrorResponse] = None

    @property
    def success(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS

    @classmethod
    def ok(cls, value: T) -> "Outcome[T]":
        return cls(kind=OutcomeKind.SUCCESS, code=ResponseStatus.SUCCESS, response=value)

    @classmethod
    def from_exception(cls, error: BaseException) -> "Outcome[Any]":
        """Normalize any exception into a failed outcome."""
        if isinstance(error, RateLimitError):
            return cls(
                kind=OutcomeKind.RATE_LIMITED,
                code=error.code,
                message=str(error),
                errors=error.errors,
                retry_after=error.retry_after,
                error_response=error.error_response,
            )
        if isinstance(error, UpdateRequiredError):
            return cls(
                kind=OutcomeKind.UPDATE_REQUIRED,
                code=error.code,
                message=str(error),
                errors=error.errors,
                update_url=error.update_url,
                error_response=error.error_response,
            )
        if isinstance(error, AuthwareError):
            return cls(
                kind=OutcomeKind.SERVICE_ERROR,
                code=error.code,
                message=str(error),
                errors=error.errors,
                error_response=error.error_response,
            )
        return cls(
            kind=OutcomeKind.SERVICE_ERROR,
            code=ResponseStatus.UNIDENTIFIED,
            message=str(error) or error.__class__.__name__,
        )

    @classmethod
    def capture(cls, func: Callable[..., T], *args: Any, **kwargs: Any) -> "Outcome[T]":
        """Call ``func`` and wrap its result or exception."""
        try:
            return cls.ok(func(*args, **kwargs))
        except Exception as e:
            return cls.from_exception(e)

    @classmethod
    async def acapture(
        cls, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any
    ) -> "Outcome[T]":
        """Await ``func`` and wrap its result or exception."""
        try:
            return cls.ok(await func(*args, **kwargs))
        except Exception as e:
            return cls.from_exception(e)

    def unwrap(self) -> T:
        """Return the value, or raise if the call failed."""
        if not self.success:
            raise ValueError(f"Outcome is not successful: {self}")
        return self.response

    def __str__(self) -> str:
        if self.success:
            return f"Success ({self.response})"
        label = self.code.name if self.code is not None else self.kind.name
        return f"{self.message} ({label})"
