"""
Authware Python SDK - Basic Usage Example

Demonstrates the raising clients and the non-raising default client.
"""

import asyncio

from authware import (
    AuthwareAsyncClient,
    AuthwareClient,
    AuthwareConfig,
    AuthwareError,
    NetworkError,
    RateLimitError,
    UpdateRequiredError,
)
from authware import static


APPLICATION_ID = "baf3d091-3626-40a0-afb9-2c2eda2c6e45"


def sync_example():
    """Synchronous client example."""
    print("=== Sync Client Example ===\n")

    with AuthwareClient(AuthwareConfig(app_version="1.0.0", debug=True)) as client:
        try:
            application = client.initialize(APPLICATION_ID)
            print(f"Initialized: {application}")

            profile = client.login("username", "password")
            print(f"Logged in as: {profile.username}")

            for variable in client.grab_application_variables(authenticated=True):
                print(f"  {variable}")
        except UpdateRequiredError as e:
            print(f"Update required, download from {e.update_url}")
        except RateLimitError as e:
            print(f"Rate limited, retry in {e.retry_after.total_seconds()}s")
        except AuthwareError as e:
            print(f"Service error: {e}")
        except NetworkError as e:
            print(f"Network error (expected without real API): {e.message}")


async def async_example():
    """Asynchronous client example."""
    print("\n=== Async Client Example ===\n")

    async with AuthwareAsyncClient(AuthwareConfig(debug=True)) as client:
        try:
            await client.initialize(APPLICATION_ID)
            await client.login("username", "password")
            result = await client.execute_api("5f0c3a6e-8d57-4b1f-9b2e-1f7a2a4c9d10", {"name": "value"})
            print(f"API returned: {result.decoded_response}")
        except Exception as e:
            print(f"Error (expected without real API): {type(e).__name__}")


async def static_example():
    """Default client example; nothing raises."""
    print("\n=== Default Client Example ===\n")

    await static.configure(AuthwareConfig())

    outcome = await static.initialize_application(APPLICATION_ID)
    if not outcome.success:
        print(f"Initialization failed: {outcome}")
    else:
        login = await static.login("username", "password")
        print(f"Login: {login}")

    await static.reset()


if __name__ == "__main__":
    sync_example()
    asyncio.run(async_example())
    asyncio.run(static_example())

    print("\nExamples completed!")
