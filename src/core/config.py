from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Ignore unrelated env keys so local/dev .env can include optional integrations.
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "TicketDesk Backend"
    environment: str = "development"
    api_prefix: str = "/api/v1"
    cors_allow_origins: str = "http://localhost:3000,http://127.0.0.1:3000"
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    supabase_url: str = Field(..., alias="SUPABASE_URL")
    supabase_service_role_key: Optional[str] = Field(
        default=None, alias="SUPABASE_SERVICE_ROLE_KEY"
    )
    supabase_anon_key: Optional[str] = Field(default=None, alias="SUPABASE_ANON_KEY")
    ticket_files_bucket: str = Field(default="app-files", alias="TICKET_FILES_BUCKET")

    openai_api_key: Optional[str] = Field(default=None, alias="OPENAI_API_KEY")
    openai_model_extraction: str = Field(default="gpt-5-mini", alias="OPENAI_MODEL_EXTRACTION")
    openai_max_retries: int = Field(default=2, alias="OPENAI_MAX_RETRIES")
    openai_timeout_seconds: float = Field(default=60.0, alias="OPENAI_TIMEOUT_SECONDS")

    local_timezone: str = Field(default="UTC", alias="LOCAL_TIMEZONE")
    standard_alert_hours: int = Field(default=48, ge=1, alias="STANDARD_ALERT_HOURS")
    urgent_alert_hours: int = Field(default=24, ge=1, alias="URGENT_ALERT_HOURS")
    notification_log_cap: int = Field(default=30, ge=1, alias="NOTIFICATION_LOG_CAP")


@lru_cache
def get_settings() -> Settings:
    return Settings()


def get_cors_origins() -> list[str]:
    settings = get_settings()
    return [origin.strip() for origin in settings.cors_allow_origins.split(",") if origin.strip()]
