from __future__ import annotations

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL

load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "GradTrack"
    app_env: str = "development"
    app_host: str = "127.0.0.1"
    app_port: int = 3001
    log_level: str = "INFO"

    database_url: str = ""
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "masters_dashboard"
    db_user: str = "postgres"
    db_password: str = "password"
    db_pool_size: int = 20
    db_pool_timeout_sec: int = 2

    llm_api_key: str = ""
    gemini_api_key: str = ""
    llm_base_url: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    llm_model: str = "gemini-2.0-flash"
    llm_timeout_sec: int = 60

    chat_max_tool_rounds: int = 5
    chat_session_max: int = 256
    chat_session_ttl_min: int = 720
    chat_history_max_messages: int = 40
    target_intake: str = "Fall 2027"

    rate_limit_window_sec: int = 900
    rate_limit_max_requests: int = 100

    web_ui_enabled: bool = True
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, value: str) -> str:
        allowed = {"development", "staging", "production", "test"}
        if value not in allowed:
            raise ValueError(f"app_env must be one of {sorted(allowed)}")
        return value

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def model_api_key(self) -> str:
        return self.llm_api_key or self.gemini_api_key

    @property
    def sqlalchemy_database_url(self) -> str:
        if self.database_url:
            return self.database_url
        url = URL.create(
            "postgresql+psycopg",
            username=self.db_user,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
        )
        return url.render_as_string(hide_password=False)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
