"""
Tests for Outcome normalization and the process-wide default client.
"""

from datetime import timedelta

import httpx
import pytest
import respx

from authware import AuthwareConfig, Outcome, OutcomeKind, ResponseStatus
from authware import static
from authware.errors import (
    AuthwareError,
    InvalidArgumentError,
    NetworkError,
    ProtocolError,
    RateLimitError,
    UpdateRequiredError,
)
from authware.types import ErrorResponse

from conftest import APP_ID, BASE_URL


def service_error(code: int, message: str, errors=None) -> ErrorResponse:
    return ErrorResponse.from_dict({"code": code, "message": message, "errors": errors})


class TestOutcome:

    def test_success(self):
        outcome = Outcome.capture(lambda: 42)

        assert outcome.success
        assert outcome.kind is OutcomeKind.SUCCESS
        assert outcome.code == ResponseStatus.SUCCESS
        assert outcome.unwrap() == 42

    def test_service_error(self):
        def fail():
            raise AuthwareError(service_error(6, "User not found", ["username"]), 404)

        outcome = Outcome.capture(fail)

        assert not outcome.success
        assert outcome.kind is OutcomeKind.SERVICE_ERROR
        assert outcome.code == ResponseStatus.USER_NOT_FOUND
        assert outcome.errors == ["username"]
        assert outcome.error_response.message == "User not found"

    def test_rate_limited(self):
        outcome = Outcome.from_exception(RateLimitError(timedelta(seconds=5)))

        assert outcome.kind is OutcomeKind.RATE_LIMITED
        assert outcome.retry_after == timedelta(seconds=5)
        assert outcome.error_response is None
        assert outcome.code is None
        assert str(outcome) == "Rate limit exceeded (RATE_LIMITED)"

    def test_rate_limited_with_body(self):
        error = RateLimitError(timedelta(seconds=2), service_error(17, "Too many requests"))

        outcome = Outcome.from_exception(error)

        assert outcome.kind is OutcomeKind.RATE_LIMITED
        assert outcome.code == ResponseStatus.APPLICATION_LIMITS

    def test_update_required(self):
        error = UpdateRequiredError("https://example/update", service_error(21, "Update required"), 400)

        outcome = Outcome.from_exception(error)

        assert outcome.kind is OutcomeKind.UPDATE_REQUIRED
        assert outcome.code == ResponseStatus.UPDATE_REQUIRED
        assert outcome.update_url == "https://example/update"

    @pytest.mark.parametrize("error", [
        InvalidArgumentError("application_id can not be empty", "application_id"),
        NetworkError("connection refused"),
        ProtocolError("unexpected body", 502),
        RuntimeError("boom"),
    ])
    def test_local_failures_are_unidentified(self, error):
        def fail():
            raise error

        outcome = Outcome.capture(fail)

        assert outcome.kind is OutcomeKind.SERVICE_ERROR
        assert outcome.code == ResponseStatus.UNIDENTIFIED
        assert outcome.message == str(error)

    def test_unwrap_failure(self):
        outcome = Outcome.from_exception(NetworkError("down"))

        with pytest.raises(ValueError):
            outcome.unwrap()

    @pytest.mark.asyncio
    async def test_acapture(self):
        async def value():
            return "ok"

        async def fail():
            raise NetworkError("down")

        assert (await Outcome.acapture(value)).response == "ok"
        assert (await Outcome.acapture(fail)).code == ResponseStatus.UNIDENTIFIED


class TestStatic:
    """Tests for the module-level default client."""

    @pytest.fixture(autouse=True)
    def _default_client(self, valid_config: AuthwareConfig, monkeypatch):
        monkeypatch.setattr(static, "_config", valid_config)
        monkeypatch.setattr(static, "_client", None)

    @pytest.mark.asyncio
    async def test_configure_closes_previous_client(self, valid_config: AuthwareConfig):
        first = static.get_client()

        await static.configure(valid_config)

        assert first._http_client.is_closed
        assert static.get_client() is not first
        await static.reset()

    @pytest.mark.asyncio
    async def test_invalid_application_id(self):
        outcome = await static.initialize_application("nope")

        assert not outcome.success
        assert outcome.code == ResponseStatus.UNIDENTIFIED
        assert "nope" in outcome.message
        await static.reset()

    @pytest.mark.asyncio
    @respx.mock
    async def test_login_flow(self, application_payload, profile_payload):
        respx.post(f"{BASE_URL}/app").mock(
            return_value=httpx.Response(200, json=application_payload)
        )
        respx.post(f"{BASE_URL}/user/auth").mock(
            return_value=httpx.Response(200, json={"auth_token": "fresh_token"})
        )
        respx.get(f"{BASE_URL}/user/profile").mock(
            return_value=httpx.Response(200, json=profile_payload)
        )

        initialized = await static.initialize_application(APP_ID)
        logged_in = await static.login("Test", "password123")
        profile = await static.get_user_profile()

        assert initialized.success
        assert static.application_information().name == "Example App"
        assert logged_in.response.username == "Test"
        assert profile.success
        assert static.logout().success
        assert not static.get_client().is_authenticated()
        await static.reset()

    @pytest.mark.asyncio
    @respx.mock
    async def test_app_not_found(self):
        respx.post(f"{BASE_URL}/app").mock(
            return_value=httpx.Response(404, json={"code": 5, "message": "Application not found"})
        )

        outcome = await static.initialize_application("00000000-0000-0000-0000-000000000000")

        assert outcome.kind is OutcomeKind.SERVICE_ERROR
        assert outcome.code == ResponseStatus.APP_NOT_FOUND
        await static.reset()

    @pytest.mark.asyncio
    async def test_not_initialized(self):
        outcome = await static.change_password("old", "new")

        assert outcome.code == ResponseStatus.UNIDENTIFIED
        assert "initialize" in outcome.message
        await static.reset()

    @pytest.mark.asyncio
    async def test_reset_creates_new_client(self):
        first = static.get_client()
        await static.reset()

        assert static.get_client() is not first
        await static.reset()
