"""Application configuration."""

from datetime import date
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_parse_none_str="null",
    )

    # Application
    app_name: str = Field(default="Clinic Scheduler API", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")
    api_v1_prefix: str = Field(default="/api/v1", alias="API_V1_PREFIX")

    # Server
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8000, alias="PORT")
    reload: bool = Field(default=False, alias="RELOAD")

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./clinic_scheduler.db",
        alias="DATABASE_URL",
    )

    # Redis (service catalog cache). An empty host disables caching.
    redis_host: str = Field(default="", alias="REDIS_HOST")
    redis_port: int = Field(default=6379, alias="REDIS_PORT")
    redis_username: str = Field(default="default", alias="REDIS_USERNAME")
    redis_password: str = Field(default="", alias="REDIS_PASSWORD")
    redis_decode_responses: bool = Field(default=True, alias="REDIS_DECODE_RESPONSES")
    service_catalog_cache_ttl: int = Field(default=300, alias="SERVICE_CATALOG_CACHE_TTL")

    # CORS
    cors_origins_str: str = Field(
        default="http://localhost:3000",
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")

    @property
    def cors_origins(self) -> list[str]:
        """Get CORS origins as a list."""
        if isinstance(self.cors_origins_str, str):
            return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]
        return [self.cors_origins_str]

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="json", alias="LOG_FORMAT")

    # Scheduling
    default_service_duration_minutes: int = Field(
        default=60,
        alias="DEFAULT_SERVICE_DURATION_MINUTES",
        description="Duration used when an appointment's service type is not in the catalog",
    )
    recurrence_end_date: date | None = Field(
        default=date(2026, 12, 31),
        alias="RECURRENCE_END_DATE",
        description="Last date weekly appointments are expanded to",
    )
    recurrence_min_horizon_days: int = Field(default=7, alias="RECURRENCE_MIN_HORIZON_DAYS")

    # Notifications
    notifications_enabled: bool = Field(
        default=False,
        alias="NOTIFICATIONS_ENABLED",
        description="Send outbound messages; notification records are always stored",
    )
    dispatch_timeout_seconds: float = Field(default=10.0, alias="DISPATCH_TIMEOUT_SECONDS")
    default_country_code: str = Field(default="55", alias="DEFAULT_COUNTRY_CODE")

    # WhatsApp Cloud API
    whatsapp_api_url: str = Field(
        default="https://graph.facebook.com/v19.0",
        alias="WHATSAPP_API_URL",
    )
    whatsapp_phone_number_id: str = Field(default="", alias="WHATSAPP_PHONE_NUMBER_ID")
    whatsapp_access_token: str = Field(default="", alias="WHATSAPP_ACCESS_TOKEN")

    @property
    def whatsapp_configured(self) -> bool:
        """Check if WhatsApp credentials are present."""
        return bool(self.whatsapp_phone_number_id and self.whatsapp_access_token)

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
