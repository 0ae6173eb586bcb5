"""Configuration settings loaded from environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: str = "INFO"

    # Application
    app_name: str = "rentalcore"
    environment: str = "development"

    # Locale defaults, used when a store does not configure its own
    default_timezone: str = "UTC"
    default_locale: str = "fr"
    default_currency: str = "EUR"

    # Pickup / return slots
    time_slot_interval_minutes: int = 30
    default_slot_open: str = "07:00"
    default_slot_close: str = "21:00"

    # Business hours
    next_available_search_days: int = 365

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


def load_settings() -> Settings:
    """Load and validate settings from environment."""
    return Settings()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Settings shared by the evaluators, loaded once."""
    return load_settings()
