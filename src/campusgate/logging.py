"""Centralized logging utilities for campusgate.

This module provides:
- Logging configuration from GateConfig
- Safe preview utilities for sensitive data
- Secret redaction (credentials never reach the log stream)
- Structured audit logging with actor identity propagation
"""

from __future__ import annotations

import json
import logging
import re
from typing import TYPE_CHECKING, Any, Optional

from .config import GateConfig, LogLevel

if TYPE_CHECKING:
    from .permissions.access import Actor


# Patterns for detecting secrets (common patterns to redact)
SECRET_PATTERNS = [
    r'(?i)(?:password|passwd|pwd|secret|token|credential|password_hash)\s*[:=]\s*["\']?([^"\'\s]+)',
    r'(?i)(?:bearer|basic)\s+([a-zA-Z0-9+/=]+)',
    r'(?i)pbkdf2_sha256\$\d+\$[^\s"\']+',
    r'[a-f0-9]{32,}',  # Long hex strings (digests, salts, keys)
]

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RESERVED_RECORD_KEYS = frozenset(
    {
        "name", "msg", "args", "created", "filename", "funcName",
        "levelname", "levelno", "lineno", "module", "msecs",
        "message", "pathname", "process", "processName", "relativeCreated",
        "thread", "threadName", "exc_info", "exc_text", "stack_info",
        "taskName", "actor_id", "actor_role",
    }
)


def safe_preview(value: Any, limit: int = 240) -> str:
    """Create a safe, length-bounded preview of a value for logging.

    Args:
        value: The value to preview (any type)
        limit: Maximum length of the preview (default: 240)

    Returns:
        A single-line, truncated string representation
    """
    if value is None:
        return ""

    if isinstance(value, str):
        s = value
    elif isinstance(value, (dict, list)):
        try:
            s = json.dumps(value, default=str, ensure_ascii=False)
        except (TypeError, ValueError):
            s = str(value)
    else:
        s = str(value)

    s = " ".join(s.split())

    if len(s) > limit:
        return s[: limit - 1] + "…"

    return s


def redact_secrets(text: str, replacement: str = "[REDACTED]") -> str:
    """Redact credential-looking patterns from text.

    Args:
        text: The text to redact
        replacement: String to replace secrets with (default: "[REDACTED]")

    Returns:
        Text with secrets redacted
    """
    if not isinstance(text, str):
        return text

    result = text
    for pattern in SECRET_PATTERNS:
        result = re.sub(pattern, replacement, result, flags=re.IGNORECASE | re.DOTALL)

    return result


def safe_log_value(value: Any, limit: int = 240, redact: bool = True) -> str:
    """Preview + optional redaction. Use for any caller-supplied value."""
    preview = safe_preview(value, limit=limit)
    if redact:
        preview = redact_secrets(preview)
    return preview


class AuditFormatter(logging.Formatter):
    """Formatter that includes actor identity and structured JSON output.

    This formatter:
    - Extracts actor_id / actor_role from log records (if available)
    - Formats logs as JSON for structured logging, or as plain text
    - Includes safe previews of ``extra`` fields
    - Redacts secrets automatically
    """

    def __init__(
        self,
        include_actor: bool = True,
        json_format: bool = True,
        redact_secrets: bool = True,
        *args: Any,
        **kwargs: Any,
    ):
        super().__init__(*args, **kwargs)
        self.include_actor = include_actor
        self.json_format = json_format
        self.redact_secrets = redact_secrets

    def format(self, record: logging.LogRecord) -> str:
        actor_id = getattr(record, "actor_id", None)
        actor_role = getattr(record, "actor_role", None)

        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_actor:
            if actor_id:
                log_data["actor_id"] = str(actor_id)
            if actor_role:
                log_data["actor_role"] = str(actor_role)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_KEYS:
                log_data[key] = safe_log_value(value, redact=self.redact_secrets)

        if self.redact_secrets:
            log_data["message"] = redact_secrets(log_data["message"])

        if self.json_format:
            return json.dumps(log_data, default=str, ensure_ascii=False)

        parts = [
            f"[{log_data['timestamp']}]",
            f"{log_data['level']}",
            f"{log_data['logger']}",
        ]
        if actor_id:
            parts.append(f"actor={log_data.get('actor_id', '')}:{log_data.get('actor_role', '')}")
        parts.append(f": {log_data['message']}")
        return " ".join(parts)


class ActorLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds actor_id and actor_role to log records.

    Usage:
        log = get_actor_logger(__name__, actor)
        log.info("Approved waitlist entry %s", entry.id)
    """

    def __init__(
        self,
        logger: logging.Logger,
        actor_id: Optional[str] = None,
        actor_role: Optional[str] = None,
    ):
        super().__init__(logger, {})
        self.actor_id = actor_id
        self.actor_role = actor_role

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        actor_id = kwargs.pop("actor_id", self.actor_id)
        actor_role = kwargs.pop("actor_role", self.actor_role)

        extra = kwargs.get("extra", {})
        if actor_id:
            extra["actor_id"] = actor_id
        if actor_role:
            extra["actor_role"] = actor_role
        kwargs["extra"] = extra

        return msg, kwargs


def setup_logging(
    config: Optional[GateConfig] = None,
    json_format: Optional[bool] = None,
    redact_secrets: bool = True,
) -> None:
    """Configure the root logger for a host embedding campusgate.

    Args:
        config: GateConfig instance (if None, loads from environment)
        json_format: Override ``config.log_json``
        redact_secrets: Whether to redact secrets (default: True)
    """
    if config is None:
        from .config import load_config_from_env

        config = load_config_from_env()

    level_map = {
        LogLevel.DEBUG: logging.DEBUG,
        LogLevel.INFO: logging.INFO,
        LogLevel.WARNING: logging.WARNING,
        LogLevel.ERROR: logging.ERROR,
        LogLevel.CRITICAL: logging.CRITICAL,
    }
    log_level = level_map.get(config.log_level, logging.INFO)
    use_json = config.log_json if json_format is None else json_format

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(
        AuditFormatter(
            include_actor=True,
            json_format=use_json,
            redact_secrets=redact_secrets,
        )
    )
    root_logger.addHandler(console_handler)

    if config.service_name:
        logging.getLogger(config.service_name).setLevel(log_level)


def get_actor_logger(name: str, actor: Optional[Actor] = None) -> ActorLoggerAdapter:
    """Get a logger adapter bound to the acting identity.

    Args:
        name: Logger name (typically __name__)
        actor: Acting identity; ``None`` for anonymous flows (intake, login)

    Returns:
        ActorLoggerAdapter instance
    """
    logger = logging.getLogger(name)
    if actor is None:
        return ActorLoggerAdapter(logger)
    return ActorLoggerAdapter(logger, actor_id=actor.id, actor_role=actor.role.value)


__all__ = [
    "safe_preview",
    "redact_secrets",
    "safe_log_value",
    "AuditFormatter",
    "ActorLoggerAdapter",
    "setup_logging",
    "get_actor_logger",
]
