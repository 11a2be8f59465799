"""HTTP client for the AXG Bolt REST API."""

from axgbolt.client.api_client import APIError, APIResponse, AXGBoltAPIClient
from axgbolt.client.config import ClientSettings, client_settings

__all__ = [
    "APIError",
    "APIResponse",
    "AXGBoltAPIClient",
    "ClientSettings",
    "client_settings",
]
