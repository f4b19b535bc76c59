from pydantic_settings import BaseSettings
from pydantic import field_validator
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Calendar math (start of day, ISO week, quarter) is evaluated in this zone
    default_timezone: str = "UTC"
    log_level: str = "INFO"

    @field_validator('default_timezone')
    @classmethod
    def validate_default_timezone(cls, v: str) -> str:
        """Validate the timezone is a known IANA name."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(
                f"DEFAULT_TIMEZONE must be an IANA timezone name, got {v!r}. "
                "Example: Europe/Berlin"
            )
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize log level names."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"LOG_LEVEL must be a standard logging level, got {v!r}")
        return level

    # Rate limiting
    rate_limit: str = "100/minute"
    redis_url: str = ""  # Optional slowapi storage backend

    # Environment
    environment: str = "development"

    # CORS - comma-separated list of allowed origins
    # In production, set to your actual domains (e.g., "https://compass.app")
    cors_allowed_origins: str = ""

    # Sentry
    sentry_dsn: str = ""

    @property
    def timezone(self) -> ZoneInfo:
        return ZoneInfo(self.default_timezone)

    @property
    def cors_origins(self) -> list[str]:
        """Get list of allowed CORS origins based on environment."""
        if self.environment == "development":
            # Allow localhost in development
            return [
                "http://localhost:3000",
                "http://localhost:8081",
                "http://127.0.0.1:3000",
                "http://127.0.0.1:8081",
            ]
        elif self.cors_allowed_origins:
            # Production: use configured origins
            return [origin.strip() for origin in self.cors_allowed_origins.split(",")]
        else:
            # Production with no config: empty list (no CORS allowed)
            return []

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Module-level settings instance for easy importing
settings = get_settings()
