"""Configuration settings loaded from .env file."""

from pathlib import Path
from typing import Literal, Optional

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings, loaded from .env file.

    Every field can be overridden through the environment (case-insensitive),
    e.g. ``MAX_QUEUE_SIZE=20`` or ``CHAPTER_BACKEND=template``.
    """

    # Storage
    queue_file_path: Path = Path("./data/offline-requests.json")
    sqlite_db_path: Path = Path("./data/journal.db")

    # Offline queue
    max_queue_size: int = 50
    max_retry_attempts: int = 3
    request_timeout_seconds: float = 120.0

    # Narrative continuity
    recent_arcs_limit: int = 3
    max_themes: int = 5
    arc_summary_chars: int = 100

    # Remote narrative service
    narrative_api_base_url: str = "http://localhost:3000"
    narrative_api_key: Optional[str] = None
    api_timeout_seconds: float = 30.0
    metadata_api_retries: int = 3
    chapter_api_retries: int = 2
    api_cache_ttl_seconds: int = 86400

    # Backends
    metadata_backend: Literal["on_device", "remote"] = "on_device"
    chapter_backend: Literal["remote", "agent", "template"] = "remote"

    # LLM model for AgentChapterGenerator
    llm_model_story: str = "claude-sonnet-4-5"

    # Identity / defaults
    default_user_id: str = "local-user"
    default_genre: str = "Fantasy"

    # Logging
    log_dir: Path = Path("./data/logs")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @field_validator("max_queue_size", "max_retry_attempts", "recent_arcs_limit", "max_themes")
    @classmethod
    def validate_positive_counts(cls, v: int, info) -> int:
        if v < 1:
            raise ValueError(f"{info.field_name} must be >= 1")
        return v

    @field_validator("metadata_api_retries", "chapter_api_retries", "arc_summary_chars")
    @classmethod
    def validate_non_negative(cls, v: int, info) -> int:
        if v < 0:
            raise ValueError(f"{info.field_name} must be non-negative")
        return v

    @field_validator("request_timeout_seconds", "api_timeout_seconds")
    @classmethod
    def validate_timeouts(cls, v: float, info) -> float:
        if v <= 0:
            raise ValueError(f"{info.field_name} must be > 0")
        return v

    @field_validator("narrative_api_base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("narrative_api_base_url must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("queue_file_path", "sqlite_db_path", "log_dir")
    @classmethod
    def ensure_parent_dirs(cls, v: Path) -> Path:
        v.parent.mkdir(parents=True, exist_ok=True)
        return v

    @model_validator(mode="after")
    def validate_default_genre(self) -> "Settings":
        from models.enums import STORY_GENRES

        if self.default_genre not in STORY_GENRES:
            raise ValueError(
                f"default_genre '{self.default_genre}' is not one of "
                f"{', '.join(STORY_GENRES)}"
            )
        return self


_settings_instance: Settings | None = None


def get_settings() -> Settings:
    """Get cached settings instance."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
