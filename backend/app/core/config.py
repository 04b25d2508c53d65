"""Application configuration managed via environment variables."""
from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Todooby Backend"
    debug: bool = False
    log_level: str = "INFO"
    database_url: str = "postgresql+psycopg2://todooby@localhost:5432/todooby"
    cors_origins: List[str] = ["http://localhost:3000"]

    openai_api_key: str | None = None
    openai_model: str = "gpt-4o"
    openai_max_completion_tokens: int = 2000
    openai_image_max_tokens: int = 1300
    llm_warmup_on_startup: bool = False
    # "Today" for analysis requests is derived from this fixed offset.
    local_utc_offset_hours: int = 9

    schedule_default_working_hours: str = "09:00-18:00"
    schedule_default_lunch_break: str = "12:00-13:00"
    schedule_horizon_days: int = 60
    schedule_overrun_tolerance_min: int = 5

    opik_enabled: bool = False
    opik_api_key: str | None = None
    opik_project: str = "todooby"

    summary_job_enabled: bool = False
    summary_job_timezone: str = "Asia/Seoul"
    summary_job_hour: int = 0
    summary_job_minute: int = 10


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()


settings = get_settings()
