"""Configuration management using Pydantic Settings"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Persistence
    database_url: str = "sqlite:///./credimanager.db"
    storage_key: str = "credimanager_v2_persistent_state"

    # Service
    service_name: str = "credimanager"
    log_level: str = "INFO"

    # Risk advisory (optional external lookup)
    advisory_api_base: str = "https://generativelanguage.googleapis.com"
    advisory_model: str = "gemini-3-flash-preview"
    advisory_api_key: Optional[str] = None

    # HTTP Client
    http_timeout_seconds: float = 20.0


settings = Settings()
