from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings validated via Pydantic.

    Values are loaded from environment variables and/or a .env file.
    """

    # Generation backend
    ai_provider: str = "ollama"
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    ollama_api_url: str = "http://localhost:11434"
    ollama_model: str = "gemma3:12b"
    ollama_timeout: float = 600.0
    anthropic_api_key: str = ""
    llm_model: str = "claude-sonnet-4-20250514"

    # Rate-limit handling. None retries forever.
    max_rate_limit_retries: int | None = None

    # Pipeline defaults
    chunk_duration: int = 300
    min_clip_duration: int = 60
    output_dir: str = "./output"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Gracefully handles missing .env files (e.g. in CI/testing) by falling
    back to environment variables and defaults.
    """
    try:
        return Settings()
    except Exception:
        # If .env is missing or unreadable, build settings from env vars only.
        return Settings(_env_file=None)  # type: ignore[call-arg]


settings = get_settings()
