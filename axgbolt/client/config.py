"""Storefront client configuration.

Loads settings from ``AXG_``-prefixed environment variables.
"""

from pydantic_settings import BaseSettings


class ClientSettings(BaseSettings):
    """Settings for the API client and storefront components."""

    # API
    api_base_url: str = "http://localhost:8000/api"
    request_timeout: float = 30.0

    # Local storage (JSON file standing in for browser storage)
    storage_path: str = ".axgbolt/storage.json"

    # Listings
    catalog_page_size: int = 12
    admin_page_size: int = 10
    search_debounce_seconds: float = 0.5

    class Config:
        """Pydantic configuration."""

        env_prefix = "AXG_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


client_settings = ClientSettings()
