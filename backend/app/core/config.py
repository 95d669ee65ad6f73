"""Application configuration managed via environment variables."""
from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Rebooted Backend"
    debug: bool = False
    log_level: str = "INFO"
    database_url: str = "postgresql+psycopg2://rebooted@localhost:5432/rebooted"
    opik_enabled: bool = False
    opik_api_key: str | None = None
    opik_project: str = "rebooted"
    scheduler_enabled: bool = False
    scheduler_timezone: str = "UTC"
    daily_job_hour: int = 5
    daily_job_minute: int = 0
    jobs_run_on_startup: bool = False
    # Calendar used to resolve "today" / "now" when a client does not send them.
    user_timezone: str = "UTC"
    blocked_packages: List[str] = [
        "com.google.android.youtube",
        "com.netflix.mediaclient",
        "com.instagram.android",
        "com.facebook.katana",
        "com.twitter.android",
        "com.snapchat.android",
        "com.tiktok.android",
        "com.reddit.frontpage",
    ]


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()


settings = get_settings()
