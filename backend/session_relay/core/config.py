from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="RELAY_", env_file=".env", extra="ignore")

    app_name: str = "Session Relay"
    environment: str = "development"
    api_v1_prefix: str = "/api/v1"

    host: str = "0.0.0.0"
    port: int = Field(default=3000, validation_alias=AliasChoices("RELAY_PORT", "PORT", "port"))

    cors_origins: list[str] = ["*"]
    log_level: str = "INFO"

    connection_queue_size: int = Field(default=64, ge=1)


@lru_cache
def get_settings() -> Settings:
    return Settings()
