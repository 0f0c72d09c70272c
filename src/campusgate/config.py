"""Configuration contract for campusgate.

Pydantic-validated settings shared by the permission engine and the
account lifecycle. The host application builds one ``GateConfig`` at
process start (usually via :func:`load_config_from_env`) and injects it
into :class:`campusgate.service.AccessService`.

Direct os.environ/os.getenv usage is confined to
``load_config_from_env``.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class LogLevel(str, Enum):
    """Standard log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class GateConfig(BaseModel):
    """Settings for the access-control and lifecycle engine."""

    # Logging
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level for the engine",
    )
    log_json: bool = Field(
        default=False,
        description="Use JSON log format (default: plain text)",
    )
    service_name: Optional[str] = Field(
        default=None,
        description="Service name used for the engine's logger",
    )

    # Intake
    min_password_length: int = Field(
        default=6,
        ge=1,
        description="Minimum plaintext credential length accepted at intake",
    )
    default_denial_reason: str = Field(
        default="Application denied by administrator",
        description="Recorded when a denial carries no reason",
    )

    # Identifier derivation
    batch_span_years: int = Field(
        default=4,
        ge=1,
        description="Batch label spans admission_year..admission_year+span",
    )
    id_suffix_digits: int = Field(
        default=4,
        ge=3,
        le=8,
        description="Width of the random numeric suffix of generated ids",
    )
    id_max_attempts: int = Field(
        default=50,
        ge=1,
        description="Collision retries before identifier generation gives up",
    )

    # Credential hashing
    hash_iterations: int = Field(
        default=260_000,
        ge=1,
        description="PBKDF2 iterations for newly hashed credentials",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Convert string to LogLevel enum."""
        if isinstance(v, LogLevel):
            return v
        if isinstance(v, str):
            try:
                return LogLevel[v.upper()]
            except KeyError:
                raise ValueError(f"Invalid log level: {v}. Must be one of {[e.value for e in LogLevel]}")
        raise ValueError(f"Log level must be string or LogLevel enum, got {type(v)}")

    model_config = {
        "frozen": True,
        "extra": "forbid",
    }


def load_config_from_env() -> GateConfig:
    """Load configuration from environment variables.

    Environment variables:
    - LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - LOG_JSON: Use JSON log format (true/false, default: false)
    - SERVICE_NAME: Logger name for the host service
    - CAMPUSGATE_MIN_PASSWORD_LENGTH
    - CAMPUSGATE_DEFAULT_DENIAL_REASON
    - CAMPUSGATE_BATCH_SPAN_YEARS
    - CAMPUSGATE_ID_SUFFIX_DIGITS
    - CAMPUSGATE_ID_MAX_ATTEMPTS
    - CAMPUSGATE_HASH_ITERATIONS

    Returns:
        GateConfig instance with values from environment or defaults.
    """
    import os

    defaults = GateConfig()
    return GateConfig(
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_json=os.getenv("LOG_JSON", "false").lower() in ("true", "1", "yes"),
        service_name=os.getenv("SERVICE_NAME"),
        min_password_length=int(os.getenv("CAMPUSGATE_MIN_PASSWORD_LENGTH", defaults.min_password_length)),
        default_denial_reason=os.getenv("CAMPUSGATE_DEFAULT_DENIAL_REASON", defaults.default_denial_reason),
        batch_span_years=int(os.getenv("CAMPUSGATE_BATCH_SPAN_YEARS", defaults.batch_span_years)),
        id_suffix_digits=int(os.getenv("CAMPUSGATE_ID_SUFFIX_DIGITS", defaults.id_suffix_digits)),
        id_max_attempts=int(os.getenv("CAMPUSGATE_ID_MAX_ATTEMPTS", defaults.id_max_attempts)),
        hash_iterations=int(os.getenv("CAMPUSGATE_HASH_ITERATIONS", defaults.hash_iterations)),
    )


__all__ = [
    "GateConfig",
    "LogLevel",
    "load_config_from_env",
]
