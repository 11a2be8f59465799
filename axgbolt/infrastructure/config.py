"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API
    api_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"

    # Database
    database_url: str = "postgresql+asyncpg://axgbolt:axgbolt_dev_password@db:5432/axgbolt"

    # Authentication
    jwt_secret: str = "dev-jwt-secret-change-in-production"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7

    # Uploads
    upload_dir: str = "uploads/products"
    max_upload_bytes: int = 5 * 1024 * 1024

    # Rate limits, per client address ("<count>/<period>")
    rate_limit_enabled: bool = True
    login_rate_limit: str = "5/15 minutes"
    register_rate_limit: str = "3/hour"
    catalog_rate_limit: str = "60/minute"

    # CORS
    cors_origins: list[str] = ["*"]

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    class Config:
        """Pydantic configuration."""

        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
