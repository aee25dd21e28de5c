"""
Tests for the transport builders and wire models.
"""

import json
import uuid

import httpx
import pytest

from authware import AuthwareConfig, ResponseStatus
from authware.errors import NetworkError
from authware.transport import (
    TLS_ESTABLISHED_EVENT,
    AsyncIssuerPinningTransport,
    IssuerPinningTransport,
    create_async_http_client,
    create_http_client,
    make_issuer_trace,
    set_bearer,
    stream_certificate_issuer,
)
from authware.types import (
    DEFAULT_TRUSTED_ISSUERS,
    Application,
    ErrorResponse,
    Profile,
    UpdatedDataResponse,
)

from conftest import APP_ID, BASE_URL


# =============================================================================
# Transport Tests
# =============================================================================

class FakeSSLObject:
    def __init__(self, issuer: str) -> None:
        self._issuer = issuer

    def getpeercert(self):
        return {"issuer": ((("countryName", "US"),), (("commonName", self._issuer),))}


class FakeStream:
    def __init__(self, ssl_object) -> None:
        self._ssl_object = ssl_object

    def get_extra_info(self, name):
        return self._ssl_object if name == "ssl_object" else None


def handshake_info(issuer: str):
    return {"return_value": FakeStream(FakeSSLObject(issuer))}


class HandshakeTransport(httpx.BaseTransport):
    """Reports a TLS handshake through the trace extension, then writes the request."""

    def __init__(self, issuer: str) -> None:
        self.issuer = issuer
        self.sent = []

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        trace = request.extensions.get("trace")
        if trace is not None:
            trace(TLS_ESTABLISHED_EVENT, handshake_info(self.issuer))
        self.sent.append(request.read())
        return httpx.Response(200, json={"auth_token": "token"})


class AsyncHandshakeTransport(httpx.AsyncBaseTransport):
    def __init__(self, issuer: str) -> None:
        self.issuer = issuer
        self.sent = []

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        trace = request.extensions.get("trace")
        if trace is not None:
            await trace(TLS_ESTABLISHED_EVENT, handshake_info(self.issuer))
        self.sent.append(await request.aread())
        return httpx.Response(200, json={"auth_token": "token"})


class TestTransport:

    def test_default_headers(self):
        client = create_http_client(AuthwareConfig(app_version="3.0.0", headers={"X-Custom": "1"}))

        assert client.headers["X-Authware-App-Version"] == "3.0.0"
        assert client.headers["X-Custom"] == "1"
        assert str(client.base_url).rstrip("/") == BASE_URL
        client.close()

    def test_bearer_attach_and_detach(self):
        client = create_http_client(AuthwareConfig())

        set_bearer(client, "abc")
        assert client.headers["Authorization"] == "Bearer abc"

        set_bearer(client, None)
        assert "Authorization" not in client.headers
        client.close()

    def test_stream_certificate_issuer(self):
        assert stream_certificate_issuer(FakeStream(FakeSSLObject("R3"))) == "R3"
        assert stream_certificate_issuer(FakeStream(None)) is None

    def test_issuer_trace(self):
        trace = make_issuer_trace(["R3", "Cloudflare Inc ECC CA-3"])

        trace(TLS_ESTABLISHED_EVENT, handshake_info("R3"))
        trace("connection.connect_tcp.complete", {"return_value": object()})

        with pytest.raises(NetworkError) as exc_info:
            trace(TLS_ESTABLISHED_EVENT, handshake_info("Evil CA"))

        assert exc_info.value.details["issuer"] == "Evil CA"

    def test_stream_without_issuer_is_rejected(self):
        trace = make_issuer_trace(["R3"])

        with pytest.raises(NetworkError):
            trace(TLS_ESTABLISHED_EVENT, {"return_value": FakeStream(None)})

    def test_untrusted_issuer_stops_request_before_it_is_sent(self):
        inner = HandshakeTransport("Evil CA")
        client = httpx.Client(base_url=BASE_URL, transport=IssuerPinningTransport(["R3"], transport=inner))

        with pytest.raises(NetworkError):
            client.post("/user/auth", json={"username": "Test", "password": "secret"})

        assert inner.sent == []
        client.close()

    def test_trusted_issuer_sends_request(self):
        inner = HandshakeTransport("R3")
        client = httpx.Client(base_url=BASE_URL, transport=IssuerPinningTransport(["R3"], transport=inner))

        response = client.post("/user/auth", json={"username": "Test", "password": "secret"})

        assert response.status_code == 200
        assert json.loads(inner.sent[0]) == {"username": "Test", "password": "secret"}
        client.close()

    @pytest.mark.asyncio
    async def test_async_untrusted_issuer_stops_request(self):
        inner = AsyncHandshakeTransport("Evil CA")
        transport = AsyncIssuerPinningTransport(["R3"], transport=inner)

        async with httpx.AsyncClient(base_url=BASE_URL, transport=transport) as client:
            with pytest.raises(NetworkError):
                await client.post("/user/auth", json={"username": "Test", "password": "secret"})

        assert inner.sent == []

    def test_default_origin_is_pinned(self):
        assert AuthwareConfig().resolve_trusted_issuers() == DEFAULT_TRUSTED_ISSUERS
        assert AuthwareConfig(base_url="https://auth.example.com").resolve_trusted_issuers() == ()
        assert AuthwareConfig(trusted_issuers=()).resolve_trusted_issuers() == ()
        assert AuthwareConfig(trusted_issuers=("Custom CA",)).resolve_trusted_issuers() == ("Custom CA",)

    @pytest.mark.asyncio
    async def test_clients_use_pinning_transport(self):
        client = create_http_client(AuthwareConfig())
        async_client = create_async_http_client(AuthwareConfig())

        assert isinstance(client._transport, IssuerPinningTransport)
        assert isinstance(async_client._transport, AsyncIssuerPinningTransport)

        client.close()
        await async_client.aclose()


# =============================================================================
# Model Tests
# =============================================================================

class TestModels:

    def test_application_from_dict(self, application_payload):
        application_payload["is_hwid_checking_enabled"] = True

        application = Application.from_dict(application_payload)

        assert application.id == uuid.UUID(APP_ID)
        assert application.requires_hardware_id is True
        assert application.date_created.microsecond == 123456
        assert str(application) == "Example App (v2.1.0)"

    def test_application_is_immutable(self, application_payload):
        application = Application.from_dict(application_payload)

        with pytest.raises(AttributeError):
            application.name = "Other"

    def test_profile_from_dict(self, profile_payload):
        profile = Profile.from_dict(profile_payload)

        assert profile.username == "Test"
        assert profile.role.variables[0].value == "gold"
        assert profile.sessions[0].date_created.month == 2
        assert profile.user_variables[0].can_user_edit is True
        assert str(profile) == f"Test ({profile_payload['id']})"

    def test_error_response_round_trip(self):
        error = ErrorResponse.from_dict({"code": 15, "message": "Oops", "trace": "stack"})

        assert error.code == ResponseStatus.INTERNAL_SERVER_ERROR
        assert error.to_dict() == {"code": 15, "message": "Oops", "trace": "stack"}
        assert str(error) == "Oops (INTERNAL_SERVER_ERROR)"

    def test_updated_data_without_payload(self):
        response = UpdatedDataResponse.from_dict({"code": 0, "message": "Deleted"})

        assert response.success
        assert response.new_data is None

    def test_status_parse(self):
        assert ResponseStatus.parse(5) is ResponseStatus.APP_NOT_FOUND
        assert ResponseStatus.parse(500) is ResponseStatus.UNIDENTIFIED
        with pytest.raises(TypeError):
            ResponseStatus.parse("5")
        with pytest.raises(TypeError):
            ResponseStatus.parse(True)
