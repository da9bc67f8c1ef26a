"""Pydantic models for armprobe configuration."""

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from armprobe.hardware.classifier import DEFAULT_TARGET_TYPES
from armprobe.hardware.models import StorageType


class LoggingConfig(BaseModel):
    """Log output settings."""

    level: str = "INFO"
    file: Path | None = None  # rotating log file; console only when unset

    @field_validator("level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level


class ProbeConfig(BaseModel):
    """Configuration for a detection run."""

    root: Path = Path("/")
    command_timeout_s: float = Field(default=5.0, gt=0)
    parallel: bool = False
    target_types: list[StorageType] = Field(
        default_factory=lambda: sorted(DEFAULT_TARGET_TYPES, key=lambda t: t.value),
        min_length=1,
    )
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
