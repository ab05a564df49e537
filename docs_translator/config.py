"""Application configuration."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Every field can be set as ``DOCS_TRANSLATOR_<FIELD>`` in the environment
    or in a ``.env`` file.
    """

    # Application
    log_level: str = "INFO"
    source_language: str = "en"

    # Batch strategy defaults
    max_concurrency: int = 1
    delay_between_translations: float = 0.5  # Seconds between translator calls
    continue_on_error: bool = True
    use_cache: bool = False

    # LLM
    llm_provider: str = "openai"
    llm_model: str = "gpt-4o-mini"
    llm_api_key: Optional[str] = None  # Falls back to the provider's own env var
    llm_base_url: Optional[str] = None
    llm_temperature: float = 0.3
    llm_max_tokens: int = 8192
    llm_timeout: float = 120.0  # Seconds per request

    # Translation settings
    chunk_size: int = 4500  # Characters per translator request
    max_retries: int = 3
    retry_min_wait: float = 2.0
    retry_max_wait: float = 30.0

    model_config = SettingsConfigDict(
        env_prefix="DOCS_TRANSLATOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
