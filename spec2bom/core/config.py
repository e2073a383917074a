"""Application configuration."""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings.

    Environment variables will be loaded and validated using Pydantic.
    The upstream credential is only ever read by the proxy service; the
    client side talks to the proxy through ``SPEC2BOM_PROXY_URL``.
    """

    app_name: str = "Spec-to-BOM"
    version: str = "0.1.0"
    api_prefix: str = "/api/vertesia"

    # CORS Settings
    cors_origins: list[str] = ["*"]  # Default to allow all in development
    cors_allow_credentials: bool = False

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    JSON_LOGS: bool = True

    # Upstream (Vertesia) Settings
    VERTESIA_API_BASE: str = "https://api.vertesia.io/api/v1"
    VERTESIA_API_KEY: str | None = None
    VERTESIA_ENV_ID: str | None = None
    VERTESIA_MODEL: str | None = None
    SPEC_TO_BOM_INTERACTION: str = "SpecToBOM@1"

    # Client Settings
    SPEC2BOM_PROXY_URL: str = "http://localhost:8000/api/vertesia"
    CATALOGUE_LIST_LIMIT: int = Field(default=100, gt=0)
    BOM_LIST_LIMIT: int = Field(default=50, gt=0)

    # Reconciliation Settings
    RECONCILE_INTERVAL_SECONDS: float = Field(default=5.0, gt=0)
    RECONCILE_MAX_IDLE_TICKS: int = Field(default=120, ge=1)
    QUEUE_ENTRY_TTL_SECONDS: int = Field(
        default=3600, ge=0
    )  # 0 disables TTL eviction

    # Notification Settings
    NOTIFICATION_TTL_SECONDS: float = Field(default=5.0, gt=0)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="allow",  # Allow extra fields in environment
    )

    @model_validator(mode="after")
    def validate_origins(self) -> "Settings":
        """Validate CORS origins."""
        if self.cors_origins == ["*"]:
            self.cors_origins = [
                "http://localhost",
                "http://localhost:8000",
                "http://localhost:3000",
            ]
        return self

    @model_validator(mode="after")
    def normalize_urls(self) -> "Settings":
        """Strip trailing slashes so paths can be joined with a single '/'."""
        self.VERTESIA_API_BASE = self.VERTESIA_API_BASE.rstrip("/")
        self.SPEC2BOM_PROXY_URL = self.SPEC2BOM_PROXY_URL.rstrip("/")
        return self

    @property
    def has_credential(self) -> bool:
        """Whether an upstream API key is configured."""
        return bool(self.VERTESIA_API_KEY)


# Create settings instance
settings = Settings()
