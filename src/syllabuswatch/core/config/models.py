"""
Pydantic configuration models for SyllabusWatch.

These models provide type-safe configuration with validation for:
- Application settings
- Snapshot storage backends
- Extraction preferences
- Logging
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, field_validator


# =============================================================================
# Enums
# =============================================================================


class DeadlineType(str, Enum):
    """Semantic deadline categories, in keyword-priority order."""

    ASSIGNMENT = "assignment"
    QUIZ = "quiz"
    EXAM = "exam"


class StorageBackend(str, Enum):
    """Supported snapshot storage backends."""

    MEMORY = "memory"
    JSON = "json"
    SQL = "sql"


# =============================================================================
# Storage Configuration
# =============================================================================


class StorageConfig(BaseModel):
    """Snapshot storage settings."""

    backend: StorageBackend = Field(
        default=StorageBackend.JSON,
        description="Key-value backend holding course snapshots",
    )
    path: Path = Field(
        default=Path("data/snapshots.json"),
        description="Snapshot file for the json backend",
    )
    database_url: str = Field(
        default="sqlite:///data/syllabuswatch.db",
        description="SQLAlchemy database URL for the sql backend",
    )
    echo: bool = Field(
        default=False,
        description="Echo SQL statements (debugging)",
    )
    storage_key: str = Field(
        default="deadlineSnapshots",
        min_length=1,
        description="Namespaced key holding the course -> snapshot map",
    )


# =============================================================================
# Extraction Configuration
# =============================================================================


class ExtractionConfig(BaseModel):
    """Candidate extraction and date resolution settings."""

    detect_html: bool = Field(
        default=True,
        description="Convert input that looks like HTML to plain text first",
    )
    date_fallback: bool = Field(
        default=False,
        description="Fall back to dateparser when no built-in date pattern matches",
    )


# =============================================================================
# Logging Configuration
# =============================================================================


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )
    file: Path | None = Field(
        default=None,
        description="Log file path",
    )
    json_format: bool = Field(
        default=True,
        description="Use JSON format for file logs",
    )
    rich_console: bool = Field(
        default=True,
        description="Use Rich for console output",
    )

    @field_validator("level")
    @classmethod
    def level_is_known(cls, v: str) -> str:
        """Ensure the level is a standard logging level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


# =============================================================================
# Application Configuration
# =============================================================================


class AppConfig(BaseModel):
    """Root application configuration.

    This is the main configuration object loaded from app.yaml.
    """

    storage: StorageConfig = Field(default_factory=StorageConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def ensure_directories(self) -> None:
        """Create directories needed by the configured backends."""
        if self.storage.backend == StorageBackend.JSON:
            self.storage.path.parent.mkdir(parents=True, exist_ok=True)

        if self.logging.file:
            self.logging.file.parent.mkdir(parents=True, exist_ok=True)
