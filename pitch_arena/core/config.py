"""Application configuration using Pydantic Settings.

Environment variables are loaded with the PITCH_ARENA_ prefix.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Service configuration
    service_name: str = "pitch-arena"
    host: str = "0.0.0.0"
    port: int = 8090
    cors_origins: list[str] = Field(default=["*"], description="Allowed browser origins")
    environment: str = Field(default="development", description="Runtime environment")
    log_level: str = Field(default="INFO", description="Logging level")

    # Hosted model (OpenAI-compatible chat completions gateway)
    llm_gateway_url: str = Field(
        default="http://localhost:8080",
        description="LLM Gateway service URL"
    )
    llm_model: str = Field(
        default="gemini-2.5-flash",
        description="Model used for judges, host, summary and coach"
    )
    llm_temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    llm_max_tokens: int = Field(default=2048, description="Max output tokens per call")
    llm_timeout_seconds: float = Field(default=60.0, description="LLM request timeout")

    # Arena assets
    arena_assets_url: str = Field(
        default="http://localhost:4200/assets",
        description="Static asset base URL; configs live under /arenas/{path}.json"
    )
    arena_assets_dir: str | None = Field(
        default=None,
        description="Local directory with {path}.json configs; takes precedence over the URL"
    )

    # Session defaults
    default_max_rounds: int = Field(default=3, ge=1)
    judges_per_round: int = Field(
        default=0,
        ge=0,
        description="0 means every panel judge speaks each round"
    )
    memory_keep_criteria: int = Field(default=10, ge=0)
    memory_keep_questions: int = Field(default=12, ge=0)
    summary_max_runs: int = Field(default=6, ge=1)
    coach_max_interactions: int = Field(default=20, ge=1)
    auto_rescore: bool = Field(
        default=True,
        description="Rescore as soon as the last answer of a round arrives"
    )

    # Transcripts and retention
    save_transcripts: bool = False
    transcript_dir: str = "data/sessions"
    max_ended_sessions: int = Field(
        default=100,
        ge=0,
        description="Ended sessions kept in memory for export; oldest are dropped first"
    )

    model_config = SettingsConfigDict(
        env_prefix="PITCH_ARENA_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: Application settings singleton
    """
    return Settings()
