from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Ignore unrelated env keys so local/dev .env can include the dashboard's settings.
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "ShopOS Analytics Backend"
    environment: str = "development"
    api_prefix: str = "/api/v1"
    cors_allow_origins: str = "http://localhost:3000,http://127.0.0.1:3000"
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    supabase_url: str = Field(..., alias="SUPABASE_URL")
    supabase_service_role_key: Optional[str] = Field(
        default=None, alias="SUPABASE_SERVICE_ROLE_KEY"
    )
    supabase_anon_key: Optional[str] = Field(default=None, alias="SUPABASE_ANON_KEY")
    supabase_page_size: int = Field(default=1000, alias="SUPABASE_PAGE_SIZE")

    redis_url: Optional[str] = Field(default=None, alias="REDIS_URL")
    redis_host: str = Field(default="localhost", alias="REDIS_HOST")
    redis_port: int = Field(default=6379, alias="REDIS_PORT")
    redis_db: int = Field(default=0, alias="REDIS_DB")
    redis_password: Optional[str] = Field(default=None, alias="REDIS_PASSWORD")
    redis_socket_timeout_seconds: float = Field(default=2.0, alias="REDIS_SOCKET_TIMEOUT_SECONDS")

    analytics_cache_enabled: bool = Field(default=True, alias="ANALYTICS_CACHE_ENABLED")
    analytics_cache_ttl_seconds: int = Field(default=300, alias="ANALYTICS_CACHE_TTL_SECONDS")

    kpi_aov_target: float = Field(default=150.0, alias="KPI_AOV_TARGET")
    account_stats_max_workers: int = Field(default=2, alias="ACCOUNT_STATS_MAX_WORKERS")


@lru_cache
def get_settings() -> Settings:
    return Settings()


def get_cors_origins() -> list[str]:
    settings = get_settings()
    return [origin.strip() for origin in settings.cors_allow_origins.split(",") if origin.strip()]
