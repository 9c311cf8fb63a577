from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

OPENWEATHER_CURRENT_WEATHER_URL = "https://api.openweathermap.org/data/2.5/weather"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="WEATHER_",
        case_sensitive=False,
    )

    env: str = Field(default="development")
    debug: bool = Field(default=False)
    docs_enabled: bool = Field(default=True)
    log_level: str = Field(default="INFO", pattern=r"(?i)^(debug|info|warning|error|critical)$")

    cors_origins: list[str] = Field(default_factory=list)
    trusted_hosts: list[str] = Field(default_factory=lambda: ["localhost", "127.0.0.1"])

    openweather_api_key: str = Field(default="", max_length=128)
    openweather_base_url: str = Field(default=OPENWEATHER_CURRENT_WEATHER_URL, min_length=8)
    city_country_suffix: str = Field(default="us", max_length=8)
    request_timeout_seconds: float = Field(default=10.0, ge=1.0, le=60.0)

    location_store_path: Path = Field(default=Path(".weather_app/last_location.json"))
    fetch_on_startup: bool = Field(default=True)

    @property
    def is_production(self) -> bool:
        return self.env.lower() == "production"


def load_settings() -> Settings:
    settings = Settings()
    if not settings.cors_origins:
        settings.cors_origins = ["http://localhost:3000", "http://localhost:8000"]
    return settings
