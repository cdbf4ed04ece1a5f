"""Pydantic models for ccmk.

Provides validated data models for file records and configuration.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class FileRecord(BaseModel):
    """One input file as listed in the metainfo.

    ``path`` excludes the root folder name.
    """

    model_config = ConfigDict(frozen=True)

    path: tuple[str, ...] = Field(..., min_length=1, description="Path segments")
    length: int = Field(..., ge=0, description="File size in bytes")

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Reject empty segments and traversal segments."""
        for segment in v:
            if not segment or segment in {".", ".."}:
                msg = f"Invalid path segment: {segment!r}"
                raise ValueError(msg)
        return v


class BuilderConfig(BaseModel):
    """Torrent builder configuration."""

    announce: str = Field(default="", description="Tracker announce URL")
    source: str = Field(default="", description="Source tag written to info.source")
    created_by: str = Field(default="ccmk", description="Created by field")
    piece_length: int | None = Field(
        default=None,
        gt=0,
        description="Piece length in bytes (derived from total size if unset)",
    )
    hash_workers: int = Field(
        default=1,
        ge=1,
        le=64,
        description="Number of piece hashing threads",
    )


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: LogLevel = Field(default=LogLevel.INFO, description="Log level")
    log_file: str | None = Field(None, description="Log file path")
    structured_logging: bool = Field(
        default=False,
        description="Write JSON records to the log file",
    )
    log_correlation_id: bool = Field(
        default=True,
        description="Include correlation IDs",
    )


class Config(BaseModel):
    """Root configuration."""

    builder: BuilderConfig = Field(default_factory=BuilderConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)
