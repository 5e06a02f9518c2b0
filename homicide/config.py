"""
Configuration settings for the homicide dashboard.

Uses Pydantic Settings to load environment variables for the upstream APIs,
pipeline thresholds and logging.
"""
from __future__ import annotations

from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Upstream APIs
    countries_api_base: str = Field("https://restcountries.com/v3.1", alias="COUNTRIES_API_BASE")
    worldbank_api_base: str = Field("https://api.worldbank.org/v2", alias="WORLDBANK_API_BASE")
    http_timeout: float = Field(15.0, alias="HTTP_TIMEOUT")

    # Pipeline
    population_threshold: int = Field(1_000_000, alias="POPULATION_THRESHOLD")
    detail_max_rate: float = Field(50.0, alias="DETAIL_MAX_RATE")
    default_year: str = Field("2022", alias="DEFAULT_YEAR")

    # Application
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")
    cors_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"],
        alias="CORS_ORIGINS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached settings instance so env parsing happens once per process."""
    return Settings()


__all__ = ["Settings", "get_settings"]
