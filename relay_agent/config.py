"""Configuration for the relay agent."""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from relay_agent.pipeline.catalog import DEFAULT_CATALOG, PromptPatternCatalog, load_catalog


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    service_name: str = Field(default="relay-agent")
    service_version: str = Field(default="0.1.0")
    log_level: str = Field(default="INFO")

    poll_interval_seconds: float = Field(default=0.5, gt=0)
    auto_respond: bool = Field(default=True)
    catalog_file: Optional[str] = Field(default=None)

    decision_log_backend: Literal["memory", "redis"] = Field(default="memory")
    decision_log_key: str = Field(default="relay:decisions")
    decision_log_retries: int = Field(default=2, ge=0)
    allow_memory_decision_log: bool = Field(default=True)

    redis_url: str = Field(default="localhost:6379")
    redis_password: str = Field(default="")
    redis_db: int = Field(default=0)

    def load_catalog(self) -> PromptPatternCatalog:
        if not self.catalog_file:
            return DEFAULT_CATALOG
        return load_catalog(self.catalog_file)


@lru_cache
def get_settings() -> Settings:
    return Settings()
