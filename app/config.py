"""
Settings loaded from environment variables (and a local .env file).
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Mistral
    mistral_api_key: str = ""
    mistral_model: str = "mistral-small-latest"
    generation_temperature: float = 0.7
    grading_temperature: float = 0.2

    # retry on 429 / capacity
    max_retries: int = 5
    retry_base_delay: float = 0.8
    retry_max_delay: float = 8.0

    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR
    environment: str = "development"


@lru_cache
def get_settings() -> Settings:
    return Settings()
