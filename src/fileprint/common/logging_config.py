"""The ``[logging]`` section of the fileprint configuration."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LoggingConfig(BaseModel):
    """Where diagnostics go; fingerprint records themselves always go to stdout."""

    model_config = ConfigDict(extra='forbid')

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Root log level; per-file failures are logged at ERROR"
    )
    format: Literal["simple", "detailed", "json"] = Field(
        default="simple",
        description="Console format on stderr"
    )
    file: Optional[str] = Field(
        default=None,
        description="Optional rotating log file, always written as JSON lines"
    )
    max_file_size_mb: int = Field(
        default=10,
        gt=0,
        description="Size at which the log file is rotated"
    )
    backup_count: int = Field(
        default=5,
        ge=0,
        description="Rotated log files to keep"
    )

    @field_validator('level', mode='before')
    @classmethod
    def normalize_level(cls, v: str) -> str:
        """Accept --log-level style input in any case."""
        if isinstance(v, str):
            return v.upper()
        return v

    @field_validator('format', mode='before')
    @classmethod
    def normalize_format(cls, v: str) -> str:
        if isinstance(v, str):
            return v.lower()
        return v
