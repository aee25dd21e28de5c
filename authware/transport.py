"""
HTTP transport for the Authware API.

Builds ``httpx`` clients bound to the service origin with the fixed outbound
headers. Apart from those default headers (and the bearer credential the
session manager places among them) the transport holds no state.

Certificate pinning hooks into the connection itself: httpcore reports each
finished TLS handshake through the ``trace`` request extension, and a
certificate from an untrusted issuer aborts the request there, before its
headers or body are written.
"""

import logging
from typing import Any, Callable, Dict, FrozenSet, Optional, Sequence

import httpx

from .errors import NetworkError
from .types import AuthwareConfig


logger = logging.getLogger("authware")

APP_VERSION_HEADER = "X-Authware-App-Version"
HARDWARE_ID_HEADER = "X-Authware-Hardware-ID"
REQUEST_DATETIME_HEADER = "X-Request-DateTime"
UPDATE_URL_HEADER = "X-Update-URL"

# httpcore trace event emitted once a TLS handshake has completed
TLS_ESTABLISHED_EVENT = "connection.start_tls.complete"


def default_headers(config: AuthwareConfig) -> Dict[str, str]:
    """Headers sent with every request."""
    return {
        "Accept": "application/json",
        APP_VERSION_HEADER: config.app_version,
        **(config.headers or {}),
    }


def stream_certificate_issuer(stream: Any) -> Optional[str]:
    """Common name of the issuer of the peer certificate on a TLS stream."""
    ssl_object = stream.get_extra_info("ssl_object")
    if ssl_object is None:
        return None
    certificate = ssl_object.getpeercert() or {}
    for rdn in certificate.get("issuer", ()):
        for key, value in rdn:
            if key == "commonName":
                return value
    return None


def check_certificate_issuer(stream: Any, trusted_issuers: FrozenSet[str]) -> None:
    """
    Reject a TLS stream whose peer certificate was not issued by a trusted issuer.

    Raises:
        NetworkError: If the issuer is missing or not trusted
    """
    issuer = stream_certificate_issuer(stream)
    if issuer not in trusted_issuers:
        logger.warning("Rejected server certificate issued by %r", issuer)
        raise NetworkError("Server certificate issuer is not trusted", {"issuer": issuer})


def make_issuer_trace(trusted_issuers: Sequence[str]) -> Callable[[str, Dict[str, Any]], None]:
    """httpcore ``trace`` callback checking every new TLS connection."""
    trusted = frozenset(trusted_issuers)

    def trace(event_name: str, info: Dict[str, Any]) -> None:
        if event_name == TLS_ESTABLISHED_EVENT:
            check_certificate_issuer(info["return_value"], trusted)

    return trace


class IssuerPinningTransport(httpx.BaseTransport):
    """Sync transport refusing to talk to servers with an untrusted certificate issuer."""

    def __init__(
        self,
        trusted_issuers: Sequence[str],
        transport: Optional[httpx.BaseTransport] = None,
        **transport_options: Any,
    ) -> None:
        self._transport = transport or httpx.HTTPTransport(**transport_options)
        self._trace = make_issuer_trace(trusted_issuers)

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        request.extensions["trace"] = self._trace
        return self._transport.handle_request(request)

    def close(self) -> None:
        self._transport.close()


class AsyncIssuerPinningTransport(httpx.AsyncBaseTransport):
    """Async counterpart of :class:`IssuerPinningTransport`."""

    def __init__(
        self,
        trusted_issuers: Sequence[str],
        transport: Optional[httpx.AsyncBaseTransport] = None,
        **transport_options: Any,
    ) -> None:
        self._transport = transport or httpx.AsyncHTTPTransport(**transport_options)
        check = make_issuer_trace(trusted_issuers)

        # httpcore awaits the callback on async connections
        async def trace(event_name: str, info: Dict[str, Any]) -> None:
            check(event_name, info)

        self._trace = trace

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        request.extensions["trace"] = self._trace
        return await self._transport.handle_async_request(request)

    async def aclose(self) -> None:
        await self._transport.aclose()


def _client_options(config: AuthwareConfig) -> Dict[str, Any]:
    return {
        "base_url": config.base_url.rstrip("/"),
        "headers": default_headers(config),
        "timeout": config.timeout,
        "trust_env": config.trust_env,
    }


def create_http_client(config: AuthwareConfig) -> httpx.Client:
    """Create the synchronous transport."""
    options = _client_options(config)
    trusted_issuers = config.resolve_trusted_issuers()
    if trusted_issuers:
        options["transport"] = IssuerPinningTransport(trusted_issuers, trust_env=config.trust_env)
    return httpx.Client(**options)


def create_async_http_client(config: AuthwareConfig) -> httpx.AsyncClient:
    """Create the asynchronous transport."""
    options = _client_options(config)
    trusted_issuers = config.resolve_trusted_issuers()
    if trusted_issuers:
        options["transport"] = AsyncIssuerPinningTransport(trusted_issuers, trust_env=config.trust_env)
    return httpx.AsyncClient(**options)


def set_bearer(client: Any, token: Optional[str]) -> None:
    """Attach (or with ``None`` detach) the bearer credential."""
    if token:
        client.headers["Authorization"] = f"Bearer {token}"
    else:
        client.headers.pop("Authorization", None)


def set_hardware_id(client: Any, hardware_id: str) -> None:
    client.headers[HARDWARE_ID_HEADER] = hardware_id
