from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    project_name: str = "Classroom Hub"
    database_url: str = "sqlite:///./app.db"
    secret_key: str = "change-me"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 30
    refresh_token_expire_days: int = 7
    password_reset_expire_minutes: int = 60
    # no mail transport is wired in, so the reset token goes back in the response
    expose_reset_token: bool = True

    files_dir: str = "uploads"
    max_upload_bytes: int = 10 * 1024 * 1024
    class_code_length: int = 6

    cors_origins: List[str] = ["http://localhost:3000"]
    log_level: str = "INFO"
    create_tables_on_startup: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
