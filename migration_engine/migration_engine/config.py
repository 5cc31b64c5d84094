"""Migration engine configuration loaded from environment variables."""

from __future__ import annotations

import logging

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Differ settings loaded from environment variables with MIGRATION_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="MIGRATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    debug: bool = False

    # Implicit default sequence
    default_sequence_name: str = "DefaultSequence"
    default_sequence_schema: str | None = None
    default_sequence_start: int = 1
    default_sequence_increment: int = 10

    # Annotations
    annotation_prefix: str = "Npgsql:"

    # Reproduce the index Add path that computes the clustering annotation
    # and then returns an unannotated create-index operation.
    legacy_index_add_annotation: bool = False

    # Logging
    structured_logging: bool = False
    log_level: str = "INFO"

    @field_validator("default_sequence_increment")
    @classmethod
    def reject_zero_increment(cls, v: int) -> int:
        if v == 0:
            raise ValueError("default_sequence_increment must be non-zero")
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return level


def load_settings(**overrides: object) -> Settings:
    """Load settings from environment, with optional overrides for testing."""
    settings = Settings(**overrides)  # type: ignore[arg-type]

    if settings.debug:
        logger.info("Loaded differ settings (default sequence: %s)", settings.default_sequence_name)

    return settings
