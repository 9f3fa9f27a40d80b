"""
Application configuration using Pydantic Settings.
Loads from environment variables with sensible defaults.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "ScriptPolish AI"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"

    # API
    api_v1_prefix: str = ""
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]
    max_request_body_bytes: int = 10 * 1024 * 1024  # 10 MB, scripts run to several KB

    # Database
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_database: str = "scriptpolish"
    postgres_user: str = "postgres"
    postgres_password: str = "postgres"
    database_url_override: str = ""

    database_pool_size: int = 20
    database_max_overflow: int = 10

    @property
    def database_url(self) -> str:
        """Build database URL from individual components."""
        if self.database_url_override:
            return self.database_url_override
        return f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}@{self.postgres_host}:{self.postgres_port}/{self.postgres_database}"

    # LLM Providers
    groq_api_key: str = ""
    openai_api_key: str = ""
    anthropic_api_key: str = ""

    # Default LLM Provider: "groq", "openai" or "anthropic"
    default_llm_provider: str = "groq"

    # LLM Model Configuration
    groq_base_url: str = "https://api.groq.com/openai/v1"
    groq_model_primary: str = "llama-3.3-70b-versatile"
    groq_model_fast: str = "llama-3.1-8b-instant"
    openai_model_primary: str = "gpt-4o"
    openai_model_fast: str = "gpt-4o-mini"
    anthropic_model_primary: str = "claude-3-5-sonnet-20241022"
    anthropic_model_fast: str = "claude-3-haiku-20240307"

    # LLM Settings
    llm_max_tokens: int = 4096
    llm_timeout: int = 60

    # Decoding policy per task
    classifier_temperature: float = 0.0
    extraction_temperature: float = 0.1  # consistency over creativity
    polish_temperature: float = 0.3

    # Rewrite retry policy (transient provider failures only)
    polish_max_attempts: int = 3
    polish_retry_min_wait: float = 1.0
    polish_retry_max_wait: float = 8.0

    # Voice learning
    classifier_max_chars: int = 2000
    max_selected_examples: int = 5
    min_examples_for_analysis: int = 2
    max_examples_for_analysis: int = 20

    # Authentication (Supabase-issued JWTs carry aud="authenticated")
    jwt_secret_key: str = "your-secret-key-change-in-production"
    jwt_algorithm: str = "HS256"
    jwt_audience: str = "authenticated"
    dev_user_id: str = "dev-user-001"

    # Rate Limiting (per authenticated user)
    rate_limit_enabled: bool = True
    rate_limit_max_requests: int = 100
    rate_limit_window_minutes: int = 15

    @property
    def rate_limit(self) -> str:
        """Limit string understood by slowapi, e.g. '100 per 15 minutes'."""
        return f"{self.rate_limit_max_requests} per {self.rate_limit_window_minutes} minutes"

    # Logging
    log_level: str = "INFO"
    log_format: Literal["json", "console"] = "console"

    # Sentry (Error Tracking)
    sentry_dsn: str = ""
    sentry_environment: str = "development"
    sentry_traces_sample_rate: float = 0.1


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
