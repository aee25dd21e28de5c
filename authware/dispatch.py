"""
Request dispatch and response classification.

A dispatched call is one request/response cycle: the payload is serialized,
a fresh timestamp header is attached, and the body is read once as text so
it can serve both decoding and error classification. Non-2xx answers become
exceptions from :mod:`authware.errors`.
"""

import json
import logging
import math
import time
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Callable, Dict, Literal, Optional, TypeVar

import httpx

from .errors import (
    AuthwareError,
    NetworkError,
    ProtocolError,
    RateLimitError,
    UpdateRequiredError,
)
from .transport import REQUEST_DATETIME_HEADER, UPDATE_URL_HEADER
from .types import ErrorResponse, ResponseStatus


logger = logging.getLogger("authware")

T = TypeVar("T")

Method = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]
Decoder = Callable[[Any], T]

# Body excerpt kept on protocol errors
_BODY_EXCERPT = 512


def request_timestamp() -> str:
    """Milliseconds since the epoch, as sent in X-Request-DateTime."""
    return str(int(time.time() * 1000))


def parse_retry_after(value: Optional[str]) -> Optional[timedelta]:
    """Parse a Retry-After header given in seconds or as an HTTP date.

    Returns None for anything that is not a usable delay: negative or
    non-finite numbers, values too large for a ``timedelta``, or text that
    is neither a number nor an HTTP date.
    """
    if value is None or not value.strip():
        return None
    value = value.strip()
    try:
        seconds = float(value)
    except ValueError:
        try:
            when = parsedate_to_datetime(value)
        except (TypeError, ValueError, OverflowError):
            return None
        if when is None:
            return None
        if when.tzinfo is None:
            when = when.replace(tzinfo=timezone.utc)
        return max(when - datetime.now(timezone.utc), timedelta(0))
    if not math.isfinite(seconds) or seconds < 0:
        return None
    try:
        return timedelta(seconds=seconds)
    except OverflowError:
        return None


def parse_error_body(text: str) -> Optional[ErrorResponse]:
    """Parse a structured error body, or None when the body is something else."""
    try:
        return ErrorResponse.from_dict(json.loads(text))
    except (ValueError, KeyError, TypeError):
        return None


def classify_error(response: httpx.Response, text: str) -> AuthwareError:
    """
    Map a non-success response to the error it represents.

    Raises:
        ProtocolError: If the response does not follow the service's
            conventions (no Retry-After on a 429, no structured body, no
            update URL on an update demand).
    """
    status = response.status_code
    error_response = parse_error_body(text)

    if status == 429:
        retry_after = parse_retry_after(response.headers.get("Retry-After"))
        if retry_after is None:
            raise ProtocolError(
                "Rate limited response did not carry a valid Retry-After header",
                status,
                text[:_BODY_EXCERPT],
            )
        return RateLimitError(retry_after, error_response)

    if error_response is None:
        raise ProtocolError(
            "A non success status code was returned and the body is not an Authware error response",
            status,
            text[:_BODY_EXCERPT],
        )

    if error_response.code == ResponseStatus.UPDATE_REQUIRED:
        update_url = response.headers.get(UPDATE_URL_HEADER)
        if not update_url:
            raise ProtocolError(
                f"Update required response did not carry an {UPDATE_URL_HEADER} header",
                status,
                text[:_BODY_EXCERPT],
            )
        return UpdateRequiredError(update_url, error_response, status)

    return AuthwareError(error_response, status)


def handle_response(response: httpx.Response, decoder: Decoder[T]) -> T:
    """Decode a success body or raise the classified error."""
    text = response.text
    if not response.is_success:
        raise classify_error(response, text)

    try:
        payload = json.loads(text) if text else None
        return decoder(payload)
    except (ValueError, KeyError, TypeError) as e:
        raise ProtocolError(
            f"Unable to decode response from {response.request.method} {response.request.url.path}: {e}",
            response.status_code,
            text[:_BODY_EXCERPT],
        ) from e


def _build_request(
    client: Any,
    method: Method,
    path: str,
    body: Optional[Dict[str, Any]],
) -> httpx.Request:
    headers = {REQUEST_DATETIME_HEADER: request_timestamp()}
    if body is None:
        return client.build_request(method, path, headers=headers)
    return client.build_request(method, path, headers=headers, json=body)


class Requester:
    """Synchronous dispatcher over an ``httpx.Client``."""

    def __init__(self, http_client: httpx.Client, debug: bool = False) -> None:
        self.http_client = http_client
        self._debug = debug

    def request(
        self,
        method: Method,
        path: str,
        decoder: Decoder[T],
        body: Optional[Dict[str, Any]] = None,
    ) -> T:
        """Send one request and decode the answer with ``decoder``."""
        request = _build_request(self.http_client, method, path, body)
        try:
            response = self.http_client.send(request)
        except httpx.TimeoutException:
            raise NetworkError("Request timeout", {"path": path})
        except httpx.RequestError as e:
            raise NetworkError(str(e), {"path": path})

        if self._debug:
            logger.debug("[Authware] %s %s -> %d", method, path, response.status_code)
        return handle_response(response, decoder)


class AsyncRequester:
    """Asynchronous dispatcher over an ``httpx.AsyncClient``."""

    def __init__(self, http_client: httpx.AsyncClient, debug: bool = False) -> None:
        self.http_client = http_client
        self._debug = debug

    async def request(
        self,
        method: Method,
        path: str,
        decoder: Decoder[T],
        body: Optional[Dict[str, Any]] = None,
    ) -> T:
        """Send one request and decode the answer with ``decoder``."""
        request = _build_request(self.http_client, method, path, body)
        try:
            response = await self.http_client.send(request)
        except httpx.TimeoutException:
            raise NetworkError("Request timeout", {"path": path})
        except httpx.RequestError as e:
            raise NetworkError(str(e), {"path": path})

        if self._debug:
            logger.debug("[Authware] %s %s -> %d", method, path, response.status_code)
        return handle_response(response, decoder)
