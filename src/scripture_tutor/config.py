"""Application settings loaded from environment variables."""
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DB_PATH = str(Path.home() / ".scripture_tutor" / "tutor.db")

DISTRACTOR_WORDS = [
    "faith", "love", "hope", "grace", "truth",
    "peace", "light", "word", "Lord", "life",
]

REFERENCE_BOOKS = [
    "Genesis", "Exodus", "Psalms", "Proverbs", "Isaiah",
    "Matthew", "Luke", "John", "Romans", "Galatians",
]


class Settings(BaseSettings):
    """Engine and CLI settings. Every field can be overridden with SCRIPTURE_TUTOR_<NAME>."""

    model_config = SettingsConfigDict(
        env_prefix="SCRIPTURE_TUTOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    db_path: str = Field(default=DEFAULT_DB_PATH, description="SQLite database file")
    log_level: str = Field(default="WARNING", description="Minimum level written to stderr")

    # Assessment
    max_questions: int = Field(default=5, ge=1)
    recall_threshold: float = Field(default=0.9, ge=0.0, le=1.0)
    distractor_words: list[str] = Field(default_factory=lambda: list(DISTRACTOR_WORDS))
    reference_books: list[str] = Field(default_factory=lambda: list(REFERENCE_BOOKS))

    # Free-tier session quota
    free_session_limit: int = Field(default=5, ge=0)
    session_window_hours: float = Field(default=24.0, gt=0)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
