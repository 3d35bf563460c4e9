"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
The backend base URL is the only business-relevant setting; everything
else is an operational knob with a default matching console behaviour.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, AliasChoices
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings.

    All values loaded from .env file or environment variables.
    Validation happens automatically on startup.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),  # Check current dir, then parent
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra env vars
    )

    # ===================
    # BACKEND API
    # ===================
    api_base_url: str = Field(
        default="http://localhost:8080",
        validation_alias=AliasChoices("api_base_url", "backend_url"),
        description="Base URL of the commerce backend REST API"
    )
    request_timeout_seconds: float = Field(
        default=30,
        gt=0,
        le=300,
        description="Client-side timeout applied to every backend call"
    )
    long_request_timeout_seconds: float = Field(
        default=600,
        gt=0,
        le=3600,
        description="Timeout for the CSV import commit call"
    )

    # ===================
    # IDENTITY PROVIDER
    # ===================
    firebase_api_key: Optional[str] = Field(
        None,
        description="Firebase web API key used for custom-token sign-in"
    )
    identity_toolkit_url: str = Field(
        default="https://identitytoolkit.googleapis.com/v1",
        description="Identity Toolkit REST base URL"
    )
    secure_token_url: str = Field(
        default="https://securetoken.googleapis.com/v1",
        description="Secure Token REST base URL (ID token refresh)"
    )
    session_storage_path: str = Field(
        default=".admin_session.json",
        description="File holding the persisted admin session"
    )

    # ===================
    # QUERY CACHE
    # ===================
    query_stale_seconds: int = Field(
        default=300,
        ge=0,
        description="Seconds a cached read is considered fresh"
    )
    query_gc_seconds: int = Field(
        default=600,
        ge=0,
        description="Seconds an unused cached read is kept before eviction"
    )
    query_retry: int = Field(
        default=2,
        ge=0,
        le=10,
        description="Retries for failed reads"
    )
    query_retry_base_delay_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Base delay for read retry backoff (doubles per attempt)"
    )
    query_retry_max_delay_seconds: float = Field(
        default=30.0,
        ge=0,
        description="Cap for read retry backoff"
    )
    mutation_retry: int = Field(
        default=1,
        ge=0,
        le=5,
        description="Retries for failed mutations"
    )
    mutation_retry_delay_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Fixed delay between mutation retries"
    )

    # ===================
    # SCREENS
    # ===================
    store_list_page_size: int = Field(
        default=20,
        ge=1,
        le=100,
        description="Stores per page in the store directory"
    )
    store_selector_page_size: int = Field(
        default=50,
        ge=1,
        le=200,
        description="Stores per page in the store selector"
    )
    search_debounce_ms: int = Field(
        default=300,
        ge=0,
        le=5000,
        description="Debounce delay before a selector search fires"
    )

    # ===================
    # APP SETTINGS
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Application environment"
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API host"
    )
    api_port: int = Field(
        default=3000,
        ge=1000,
        le=65535,
        description="API port"
    )

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def identity_configured(self) -> bool:
        """Check if the identity provider key is present."""
        return bool(self.firebase_api_key)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If env vars are invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
