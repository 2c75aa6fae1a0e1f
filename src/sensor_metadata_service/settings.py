"""Application settings."""
from __future__ import annotations

from functools import lru_cache
from typing import Literal, cast
from urllib.parse import quote

from pydantic import AnyHttpUrl, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Core configuration for the Sensor Metadata Service."""

    model_config = SettingsConfigDict(
        env_file=(".env", "env.example"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    env: Literal["development", "staging", "production"] = "development"
    app_name: str = "sensor-metadata-service"
    host: str = "0.0.0.0"
    port: int = 8080

    log_level: str = "INFO"
    log_json: bool | None = None  # defaults to JSON outside development

    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "sensor_metadata"
    db_user: str = "postgres"
    db_password: SecretStr = Field(default=SecretStr("postgres"))
    db_pool_size: int = 10

    # Mapbox access token
    api_key: SecretStr = Field(default=SecretStr(""))
    geocoding_base_url: AnyHttpUrl = Field(
        default=cast(AnyHttpUrl, "https://api.mapbox.com")
    )

    # Comma-separated; kept as a plain string so pydantic-settings does not JSON-decode it
    cors_allowed_origins: str = "http://localhost:3000,http://localhost:8080"

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_allowed_origins.split(",") if o.strip()]

    @property
    def database_dsn(self) -> str:
        """PostgreSQL DSN assembled from the DB_* variables."""
        user = quote(self.db_user, safe="")
        password = quote(self.db_password.get_secret_value(), safe="")
        return (
            f"postgresql://{user}:{password}@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    @property
    def json_logs(self) -> bool:
        if self.log_json is not None:
            return self.log_json
        return self.env != "development"


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()


settings = get_settings()
