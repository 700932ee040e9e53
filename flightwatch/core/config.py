"""
Core Configuration - Environment variables and app settings
Uses Pydantic BaseSettings for type-safe configuration management
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from typing import Optional


AMADEUS_TEST_URL = "https://test.api.amadeus.com"
AMADEUS_PRODUCTION_URL = "https://api.amadeus.com"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables

    Provider participation is driven by credential presence:
    - Amadeus is used only when both client id and secret are set
    - AviationStack is used only when an API key is set
    - OpenSky needs no credentials
    """

    # Application settings
    app_name: str = Field(default="Event Flight Tracker", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(default="development", description="Environment: development, staging, production")
    debug: bool = Field(default=False, description="Debug mode")

    # Amadeus (primary schedule provider, 2,000 calls/month)
    amadeus_client_id: Optional[str] = Field(default=None, description="Amadeus OAuth client ID")
    amadeus_client_secret: Optional[str] = Field(default=None, description="Amadeus OAuth client secret")
    amadeus_env: str = Field(default="test", description="Amadeus environment: test or production")

    # AviationStack (secondary schedule provider, 100 calls/month)
    aviationstack_api_key: Optional[str] = Field(default=None, description="AviationStack access key")
    aviationstack_base_url: str = Field(
        default="http://api.aviationstack.com/v1",
        description="AviationStack API base URL"
    )

    # OpenSky (live tracking, 4,000 calls/day anonymous)
    opensky_base_url: str = Field(
        default="https://opensky-network.org/api",
        description="OpenSky Network REST base URL"
    )

    # API Configuration
    api_timeout: int = Field(default=30, ge=1, description="Outbound HTTP request timeout in seconds")
    token_expiry_buffer: int = Field(
        default=60,
        ge=0,
        description="Refresh the OAuth token this many seconds before it expires"
    )
    snapshot_ttl_seconds: float = Field(
        default=30.0,
        gt=0,
        description="How long one OpenSky all-flights snapshot is reused"
    )

    # Verification settings
    mismatch_threshold_minutes: int = Field(
        default=30,
        ge=0,
        description="Entered vs scheduled time difference tolerated before flagging a mismatch"
    )
    schedule_call_delay: float = Field(
        default=1.0,
        ge=0.0,
        description="Pause in seconds after each schedule-provider verification in a batch"
    )
    realtime_call_delay: float = Field(
        default=0.1,
        ge=0.0,
        description="Pause in seconds after each live-tracking verification in a batch"
    )
    event_airport: Optional[str] = Field(
        default="KUL",
        description="IATA code of the event airport, used to filter arrival legs"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string"
    )

    # CORS Settings (for frontend integration)
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:8000"],
        description="Allowed CORS origins"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment value"""
        allowed = ["development", "staging", "production"]
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v

    @field_validator("amadeus_env")
    @classmethod
    def validate_amadeus_env(cls, v):
        """Validate Amadeus environment value"""
        allowed = ["test", "production"]
        if v.lower() not in allowed:
            raise ValueError(f"amadeus_env must be one of {allowed}")
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level"""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"log_level must be one of {allowed}")
        return v.upper()

    @field_validator("event_airport")
    @classmethod
    def normalize_event_airport(cls, v):
        if not v:
            return None
        return v.strip().upper()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @property
    def amadeus_base_url(self) -> str:
        """Amadeus base URL for the selected environment"""
        if self.amadeus_env == "production":
            return AMADEUS_PRODUCTION_URL
        return AMADEUS_TEST_URL

    def is_amadeus_configured(self) -> bool:
        return bool(self.amadeus_client_id and self.amadeus_client_secret)

    def is_aviationstack_configured(self) -> bool:
        return bool(self.aviationstack_api_key)

    def is_production(self) -> bool:
        """Check if running in production"""
        return self.environment == "production"

    def is_development(self) -> bool:
        """Check if running in development"""
        return self.environment == "development"

    def get_log_config(self) -> dict:
        """Get logging configuration"""
        return {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": self.log_format
                },
                "json": {
                    "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                    "format": "%(asctime)s %(name)s %(levelname)s %(message)s"
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "level": self.log_level,
                    "formatter": "json" if self.is_production() else "default",
                    "stream": "ext://sys.stdout"
                }
            },
            "root": {
                "level": self.log_level,
                "handlers": ["console"]
            }
        }


# Singleton settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get application settings (singleton)

    Returns:
        Settings instance

    Raises:
        ValueError: If environment values fail validation
    """
    global _settings

    if _settings is None:
        try:
            _settings = Settings()
        except Exception as e:
            raise ValueError(
                f"Failed to load settings. Please check your .env file. Error: {str(e)}"
            )

    return _settings


def reload_settings() -> Settings:
    """
    Reload settings (useful for testing)

    Returns:
        New Settings instance
    """
    global _settings
    _settings = None
    return get_settings()
