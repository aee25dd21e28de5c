"""
Process-wide default client with a non-raising interface.

For applications that want a single global Authware client. Every function
returns an :class:`~authware.outcome.Outcome` instead of raising:

    from authware import static as authware

    result = await authware.initialize_application("...")
    if not result.success:
        print(result.message)
"""

from typing import Any, Dict, List, Optional

from .client import AuthwareAsyncClient
from .outcome import Outcome
from .types import (
    ApiResponse,
    Application,
    AuthwareConfig,
    BaseResponse,
    Profile,
    UpdatedDataResponse,
    Variable,
)


_config: Optional[AuthwareConfig] = None
_client: Optional[AuthwareAsyncClient] = None


async def configure(config: AuthwareConfig) -> None:
    """Set the configuration, closing any default client built from the old one."""
    global _config
    await reset()
    _config = config


def get_client() -> AuthwareAsyncClient:
    """Get or create the default client."""
    global _client
    if _client is None:
        _client = AuthwareAsyncClient(_config)
    return _client


async def reset() -> None:
    """Close and drop the default client."""
    global _client
    if _client is not None:
        await _client.close()
        _client = None


def application_information() -> Optional[Application]:
    return get_client().application


async def initialize_application(application_id: str) -> Outcome[Application]:
    return await Outcome.acapture(get_client().initialize, application_id)


async def grab_application_variables(authenticated: bool = False) -> Outcome[List[Variable]]:
    return await Outcome.acapture(get_client().grab_application_variables, authenticated)


async def register(username: str, password: str, email: str, token: str) -> Outcome[BaseResponse]:
    return await Outcome.acapture(get_client().register, username, password, email, token)


async def login(username: str, password: str) -> Outcome[Profile]:
    return await Outcome.acapture(get_client().login, username, password)


async def get_user_profile() -> Outcome[Profile]:
    return await Outcome.acapture(get_client().get_profile)


async def change_email(password: str, email: str) -> Outcome[BaseResponse]:
    return await Outcome.acapture(get_client().change_email, password, email)


async def change_password(current_password: str, new_password: str) -> Outcome[BaseResponse]:
    return await Outcome.acapture(get_client().change_password, current_password, new_password)


async def execute_api(api_id: str, parameters: Optional[Dict[str, Any]] = None) -> Outcome[ApiResponse]:
    return await Outcome.acapture(get_client().execute_api, api_id, parameters)


async def create_user_variable(key: str, value: str, can_edit: bool = True) -> Outcome[UpdatedDataResponse]:
    return await Outcome.acapture(get_client().create_user_variable, key, value, can_edit)


async def update_user_variable(key: str, new_value: str) -> Outcome[UpdatedDataResponse]:
    return await Outcome.acapture(get_client().update_user_variable, key, new_value)


async def delete_user_variable(key: str) -> Outcome[BaseResponse]:
    return await Outcome.acapture(get_client().delete_user_variable, key)


def logout() -> Outcome[None]:
    return Outcome.capture(get_client().logout)
