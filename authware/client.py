"""
Authware SDK Client

Main client classes for the Authware API. Provides both synchronous and
asynchronous clients; each instance owns one application context and one
user session. The cached auth token lets a returning user log in again
without a password round trip.
"""

import asyncio
import logging
import threading
from typing import Any, Dict, List, Optional

from .dispatch import AsyncRequester, Requester
from .errors import (
    InvalidArgumentError,
    NotAuthenticatedError,
    NotInitializedError,
)
from .storage import TokenFileStorage
from .transport import (
    create_async_http_client,
    create_http_client,
    set_bearer,
    set_hardware_id,
)
from .types import (
    ApiResponse,
    Application,
    AuthResponse,
    AuthwareConfig,
    BaseResponse,
    Profile,
    Session,
    UpdatedDataResponse,
    Variable,
    is_valid_uuid,
)


logger = logging.getLogger("authware")


def _decode_variables(data: Any) -> List[Variable]:
    return [Variable.from_dict(v) for v in data]


def _require(value: Any, name: str) -> None:
    if value is None or (isinstance(value, str) and not value):
        raise InvalidArgumentError(f"{name} can not be empty", name)


class _ClientBase:
    """State and argument handling shared by the sync and async clients."""

    def __init__(self, config: Optional[AuthwareConfig] = None) -> None:
        self._config = config or AuthwareConfig()
        self._debug = self._config.debug
        self._application: Optional[Application] = None
        self._token_storage: Optional[TokenFileStorage] = None
        self._session = Session()

    def _log(self, message: str, *args: Any) -> None:
        """Log debug message."""
        if self._debug:
            logger.debug(f"[Authware] {message}", *args)

    @property
    def config(self) -> AuthwareConfig:
        return self._config

    @property
    def application(self) -> Optional[Application]:
        """Application metadata, once initialized."""
        return self._application

    @property
    def session(self) -> Session:
        return self._session

    @property
    def token_storage(self) -> Optional[TokenFileStorage]:
        return self._token_storage

    def is_authenticated(self) -> bool:
        """Check whether a validated credential is attached."""
        return self._session.is_authenticated

    # =========================================================================
    # Internal Methods
    # =========================================================================

    def _validate_application_id(self, application_id: Any) -> str:
        if application_id is None or application_id == "":
            raise InvalidArgumentError("application_id can not be empty", "application_id")
        if not is_valid_uuid(application_id):
            raise InvalidArgumentError(f"{application_id} is not a valid application id", "application_id")
        return application_id

    def _require_initialized(self) -> Application:
        if self._application is None:
            raise NotInitializedError()
        return self._application

    def _require_authenticated(self) -> None:
        self._require_initialized()
        if not self._session.is_authenticated:
            raise NotAuthenticatedError()

    def _complete_initialization(self, application_id: str, application: Application) -> Application:
        """Record metadata, prepare the token slot and device header."""
        if application.requires_hardware_id:
            set_hardware_id(self._http_client, self._config.hardware_id_provider())
        storage = TokenFileStorage(self._config.resolve_token_directory(), application_id)
        storage.ensure_directory()
        self._token_storage = storage
        self._application = application
        self._log(f"Initialized application {application}")
        return application

    def _attach_token(self, token: Optional[str]) -> None:
        set_bearer(self._http_client, token)

    def _discard_cached_session(self) -> None:
        """Forget the credential both in memory and on disk."""
        self._attach_token(None)
        self._session.clear()
        if self._token_storage is not None:
            self._token_storage.clear()

    def _auth_body(self, username: str, password: str) -> Dict[str, Any]:
        return {"app_id": str(self._require_initialized().id), "username": username, "password": password}

    def _register_body(self, username: str, password: str, email: str, token: str) -> Dict[str, Any]:
        application = self._require_initialized()
        _require(username, "username")
        _require(password, "password")
        _require(email, "email")
        _require(token, "token")
        if not is_valid_uuid(token):
            raise InvalidArgumentError("token is not a valid license", "token")
        return {
            "app_id": str(application.id),
            "username": username,
            "password": password,
            "email_address": email,
            "token": token,
        }

    def _change_email_body(self, password: str, email: str) -> Dict[str, Any]:
        self._require_authenticated()
        _require(password, "password")
        _require(email, "email")
        return {"password": password, "new_email_address": email}

    def _change_password_body(self, current_password: str, new_password: str) -> Dict[str, Any]:
        self._require_authenticated()
        _require(current_password, "current_password")
        _require(new_password, "new_password")
        return {
            "old_password": current_password,
            "password": new_password,
            "repeat_password": new_password,
        }

    def _execute_api_body(self, api_id: str, parameters: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        self._require_authenticated()
        _require(api_id, "api_id")
        return {"api_id": str(api_id), "parameters": parameters or {}}

    def _variable_body(self, key: str, value: Optional[str] = None, **extra: Any) -> Dict[str, Any]:
        self._require_authenticated()
        _require(key, "key")
        body: Dict[str, Any] = {"key": key}
        if value is not None:
            body["value"] = value
        body.update(extra)
        return body


class AuthwareClient(_ClientBase):
    """
    Authware Client - Synchronous SDK entry point.

    Call :meth:`initialize` once, then :meth:`login`. Service, transport and
    argument failures are raised as
    :class:`~authware.errors.AuthwareClientError` subclasses.
    """

    def __init__(self, config: Optional[AuthwareConfig] = None) -> None:
        """Initialize the Authware client."""
        super().__init__(config)
        self._http_client = create_http_client(self._config)
        self._requester = Requester(self._http_client, self._debug)
        self._init_lock = threading.Lock()

        self._log("AuthwareClient created")

    # =========================================================================
    # Application Methods
    # =========================================================================

    def initialize(self, application_id: str) -> Application:
        """
        Resolve the application id to its metadata.

        Only the first successful call contacts the service; later calls
        return the cached metadata.

        Raises:
            InvalidArgumentError: If the id is empty or not a UUID
            AuthwareError: If the application does not exist or is disabled
        """
        application_id = self._validate_application_id(application_id)
        with self._init_lock:
            if self._application is not None:
                return self._application

            application = self._requester.request(
                "POST", "/app", Application.from_dict, {"app_id": application_id}
            )
            return self._complete_initialization(application_id, application)

    def grab_application_variables(self, authenticated: bool = False) -> List[Variable]:
        """Get the application variables visible to the caller."""
        application = self._require_initialized()
        if authenticated:
            self._require_authenticated()
            return self._requester.request("GET", "/user/variables", _decode_variables)
        return self._requester.request(
            "POST", "/user/variables", _decode_variables, {"app_id": str(application.id)}
        )

    # =========================================================================
    # Authentication Methods
    # =========================================================================

    def login(self, username: str, password: str) -> Profile:
        """
        Login with username and password.

        A token cached by a previous login is tried first; if the service
        still accepts it no password is sent. Otherwise the cached token is
        deleted and the password is used.

        Returns:
            The authenticated user's profile
        """
        self._require_initialized()
        _require(username, "username")
        _require(password, "password")
        self._log(f"Login attempt for: {username}")

        cached_token = self._token_storage.load()
        if cached_token:
            self._attach_token(cached_token)
            try:
                profile = self._fetch_profile()
            except Exception as e:
                # Any failure invalidates the cached token, transient or not
                self._log(f"Cached token rejected ({e!r}), falling back to password")
                self._discard_cached_session()
            else:
                self._session.token = cached_token
                self._session.profile = profile
                self._log("Login successful (cached token)")
                return profile

        auth = self._requester.request(
            "POST", "/user/auth", AuthResponse.from_dict, self._auth_body(username, password)
        )
        profile = self._validate_credential(auth.auth_token)
        self._token_storage.save(auth.auth_token)

        self._log("Login successful")
        return profile

    def authorize_with_api_key(self, api_key: str) -> Profile:
        """
        Use a user API key as the credential instead of logging in.

        The key is checked with a profile call first; a rejected key leaves
        no credential attached. The token cache is not touched.
        """
        self._require_initialized()
        _require(api_key, "api_key")
        return self._validate_credential(api_key)

    def register(self, username: str, password: str, email: str, token: str) -> BaseResponse:
        """Create a user account using a license token."""
        body = self._register_body(username, password, email, token)
        self._log(f"Register attempt for: {username}")
        return self._requester.request("POST", "/user/register", BaseResponse.from_dict, body)

    def logout(self) -> None:
        """Drop the credential and the cached token; a no-op without a session."""
        self._log("Logout")
        self._discard_cached_session()

    # =========================================================================
    # User Methods
    # =========================================================================

    def get_profile(self) -> Profile:
        """Fetch the authenticated user's profile."""
        self._require_authenticated()
        profile = self._fetch_profile()
        self._session.profile = profile
        return profile

    def change_email(self, password: str, email: str) -> BaseResponse:
        """Change the user's email address."""
        body = self._change_email_body(password, email)
        return self._requester.request("PUT", "/user/change-email", BaseResponse.from_dict, body)

    def change_password(self, current_password: str, new_password: str) -> BaseResponse:
        """Change the user's password."""
        body = self._change_password_body(current_password, new_password)
        return self._requester.request("PUT", "/user/change-password", BaseResponse.from_dict, body)

    def execute_api(self, api_id: str, parameters: Optional[Dict[str, Any]] = None) -> ApiResponse:
        """Execute one of the application's APIs as the current user."""
        body = self._execute_api_body(api_id, parameters)
        return self._requester.request("POST", "/api/execute", ApiResponse.from_dict, body)

    def create_user_variable(self, key: str, value: str, can_edit: bool = True) -> UpdatedDataResponse:
        """Create a variable stored against the current user."""
        _require(value, "value")
        body = self._variable_body(key, value, can_user_edit=can_edit)
        return self._requester.request("PUT", "/user/variables", UpdatedDataResponse.from_dict, body)

    def update_user_variable(self, key: str, new_value: str) -> UpdatedDataResponse:
        """Update a user variable by key."""
        _require(new_value, "new_value")
        body = self._variable_body(key, new_value)
        return self._requester.request("PATCH", "/user/variables", UpdatedDataResponse.from_dict, body)

    def delete_user_variable(self, key: str) -> BaseResponse:
        """Delete a user variable by key."""
        body = self._variable_body(key)
        return self._requester.request("DELETE", "/user/variables", BaseResponse.from_dict, body)

    # =========================================================================
    # Internal Methods
    # =========================================================================

    def _fetch_profile(self) -> Profile:
        return self._requester.request("GET", "/user/profile", Profile.from_dict)

    def _validate_credential(self, token: str) -> Profile:
        """Attach ``token`` and keep it only if the profile call accepts it."""
        self._attach_token(token)
        try:
            profile = self._fetch_profile()
        except Exception:
            self._attach_token(None)
            raise
        self._session.token = token
        self._session.profile = profile
        return profile

    def close(self) -> None:
        """Close the HTTP client."""
        self._http_client.close()

    def __enter__(self) -> "AuthwareClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


# =============================================================================
# Async Client
# =============================================================================

class AuthwareAsyncClient(_ClientBase):
    """
    Authware Async Client - Asynchronous SDK entry point.

    Same operations as :class:`AuthwareClient`. Business calls may run
    concurrently once logged in; ``login`` itself must not be raced.
    """

    def __init__(self, config: Optional[AuthwareConfig] = None) -> None:
        """Initialize the async Authware client."""
        super().__init__(config)
        self._http_client = create_async_http_client(self._config)
        self._requester = AsyncRequester(self._http_client, self._debug)
        self._init_lock: Optional[asyncio.Lock] = None

        self._log("AuthwareAsyncClient created")

    def _get_init_lock(self) -> asyncio.Lock:
        # Created lazily so the lock binds to the running event loop
        if self._init_lock is None:
            self._init_lock = asyncio.Lock()
        return self._init_lock

    # =========================================================================
    # Application Methods
    # =========================================================================

    async def initialize(self, application_id: str) -> Application:
        """Resolve the application id to its metadata (idempotent)."""
        application_id = self._validate_application_id(application_id)
        async with self._get_init_lock():
            if self._application is not None:
                return self._application

            application = await self._requester.request(
                "POST", "/app", Application.from_dict, {"app_id": application_id}
            )
            return self._complete_initialization(application_id, application)

    async def grab_application_variables(self, authenticated: bool = False) -> List[Variable]:
        """Get the application variables visible to the caller."""
        application = self._require_initialized()
        if authenticated:
            self._require_authenticated()
            return await self._requester.request("GET", "/user/variables", _decode_variables)
        return await self._requester.request(
            "POST", "/user/variables", _decode_variables, {"app_id": str(application.id)}
        )

    # =========================================================================
    # Authentication Methods
    # =========================================================================

    async def login(self, username: str, password: str) -> Profile:
        """Login with username and password, trying the cached token first."""
        self._require_initialized()
        _require(username, "username")
        _require(password, "password")
        self._log(f"Login attempt for: {username}")

        cached_token = self._token_storage.load()
        if cached_token:
            self._attach_token(cached_token)
            try:
                profile = await self._fetch_profile()
            except Exception as e:
                self._log(f"Cached token rejected ({e!r}), falling back to password")
                self._discard_cached_session()
            else:
                self._session.token = cached_token
                self._session.profile = profile
                self._log("Login successful (cached token)")
                return profile

        auth = await self._requester.request(
            "POST", "/user/auth", AuthResponse.from_dict, self._auth_body(username, password)
        )
        profile = await self._validate_credential(auth.auth_token)
        self._token_storage.save(auth.auth_token)

        self._log("Login successful")
        return profile

    async def authorize_with_api_key(self, api_key: str) -> Profile:
        """Use a user API key as the credential, checked with a profile call."""
        self._require_initialized()
        _require(api_key, "api_key")
        return await self._validate_credential(api_key)

    async def register(self, username: str, password: str, email: str, token: str) -> BaseResponse:
        """Create a user account using a license token."""
        body = self._register_body(username, password, email, token)
        self._log(f"Register attempt for: {username}")
        return await self._requester.request("POST", "/user/register", BaseResponse.from_dict, body)

    def logout(self) -> None:
        """Drop the credential and the cached token; a no-op without a session."""
        self._log("Logout")
        self._discard_cached_session()

    # =========================================================================
    # User Methods
    # =========================================================================

    async def get_profile(self) -> Profile:
        """Fetch the authenticated user's profile."""
        self._require_authenticated()
        profile = await self._fetch_profile()
        self._session.profile = profile
        return profile

    async def change_email(self, password: str, email: str) -> BaseResponse:
        body = self._change_email_body(password, email)
        return await self._requester.request("PUT", "/user/change-email", BaseResponse.from_dict, body)

    async def change_password(self, current_password: str, new_password: str) -> BaseResponse:
        body = self._change_password_body(current_password, new_password)
        return await self._requester.request("PUT", "/user/change-password", BaseResponse.from_dict, body)

    async def execute_api(self, api_id: str, parameters: Optional[Dict[str, Any]] = None) -> ApiResponse:
        body = self._execute_api_body(api_id, parameters)
        return await self._requester.request("POST", "/api/execute", ApiResponse.from_dict, body)

    async def create_user_variable(self, key: str, value: str, can_edit: bool = True) -> UpdatedDataResponse:
        _require(value, "value")
        body = self._variable_body(key, value, can_user_edit=can_edit)
        return await self._requester.request("PUT", "/user/variables", UpdatedDataResponse.from_dict, body)

    async def update_user_variable(self, key: str, new_value: str) -> UpdatedDataResponse:
        _require(new_value, "new_value")
        body = self._variable_body(key, new_value)
        return await self._requester.request("PATCH", "/user/variables", UpdatedDataResponse.from_dict, body)

    async def delete_user_variable(self, key: str) -> BaseResponse:
        body = self._variable_body(key)
        return await self._requester.request("DELETE", "/user/variables", BaseResponse.from_dict, body)

    # =========================================================================
    # Internal Methods
    # =========================================================================

    async def _fetch_profile(self) -> Profile:
        return await self._requester.request("GET", "/user/profile", Profile.from_dict)

    async def _validate_credential(self, token: str) -> Profile:
        self._attach_token(token)
        try:
            profile = await self._fetch_profile()
        except Exception:
            self._attach_token(None)
            raise
        self._session.token = token
        self._session.profile = profile
        return profile

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._http_client.aclose()

    async def __aenter__(self) -> "AuthwareAsyncClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()


# =============================================================================
# Factory Functions
# =============================================================================

def create_authware_client(config: Optional[AuthwareConfig] = None) -> AuthwareClient:
    """Create a new synchronous Authware client."""
    return AuthwareClient(config)


def create_async_authware_client(config: Optional[AuthwareConfig] = None) -> AuthwareAsyncClient:
    """Create a new asynchronous Authware client."""
    return AuthwareAsyncClient(config)
