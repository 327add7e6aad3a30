"""
Logging Configuration - Shared Layer

Structured logging for the hub service. Application code logs through
structlog with event-style names (``devices.command.failed``) and keyword
context; stdlib records emitted by libraries (uvicorn, httpx) go through the
same renderer so the console shows a single format.

Credentials never reach a handler: any event key that names the hub token,
the payments API key, the entity secret or its ciphertext is masked before
rendering.
"""

import logging
import os
import sys
from typing import Any, List, MutableMapping, Optional

import structlog
from structlog.types import Processor

from src.shared.consts import EnumEnvironment

REDACTED = "***"

# Compared after lower-casing and dropping "_" and "-".
SECRET_KEYS = frozenset(
    {
        "token",
        "authorization",
        "apikey",
        "entitysecret",
        "entitysecrethex",
        "entitysecretciphertext",
        "ciphertext",
        "xentitysecret",
    }
)

# httpx logs every request line at INFO, which drowns the polling loop.
QUIET_LOGGERS = ("httpx", "httpcore")


def _is_secret_key(key: str) -> bool:
    return key.lower().replace("_", "").replace("-", "") in SECRET_KEYS


def _mask(value: Any) -> Any:
    if isinstance(value, dict):
        return {
            key: REDACTED if _is_secret_key(str(key)) else _mask(item)
            for key, item in value.items()
        }
    return value


def redact_secrets(
    _logger: Any, _method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """structlog processor masking credential values, also inside nested dicts."""
    for key in list(event_dict):
        if _is_secret_key(key):
            event_dict[key] = REDACTED
        else:
            event_dict[key] = _mask(event_dict[key])
    return event_dict


def _renderer(environment: str, force_json: Optional[bool]) -> Processor:
    as_json = (
        force_json
        if force_json is not None
        else environment.lower() == EnumEnvironment.PRODUCTION
    )
    if as_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def configure_logging(
    level: Optional[str] = None,
    file_path: Optional[str] = None,
    environment: str = "development",
    force_json: Optional[bool] = None,
) -> None:
    """
    Configure stdlib logging and structlog.

    Runs once at import time with ``LOG_LEVEL`` / ``LOG_FILE_PATH`` from the
    environment, and again through ``update_logging_from_settings`` once the
    settings are loaded.

    Args:
        level: Log level name; falls back to ``LOG_LEVEL`` then INFO.
        file_path: Extra file handler; falls back to ``LOG_FILE_PATH``.
        environment: Application environment; production renders JSON.
        force_json: Render JSON (or console) regardless of the environment.
    """
    log_level = level or os.environ.get("LOG_LEVEL") or "INFO"
    log_file = file_path or os.environ.get("LOG_FILE_PATH")
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    timestamper = structlog.processors.TimeStamper(fmt="iso", utc=True)
    shared: List[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        timestamper,
        redact_secrets,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=_renderer(environment, force_json),
        foreign_pre_chain=[
            *shared,
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
        ],
    )

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    for handler in handlers:
        handler.setFormatter(formatter)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.handlers = handlers
    root_logger.setLevel(numeric_level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    get_logger(__name__).debug(
        "logging.configured", level=log_level, file_path=log_file
    )


def update_logging_from_settings(settings: Any) -> None:
    """Reconfigure logging from the loaded ``AppSettings``."""
    level = getattr(settings.logging.level, "value", settings.logging.level)
    environment = getattr(settings.environment, "value", settings.environment)
    try:
        configure_logging(
            level=level,
            file_path=settings.logging.file_path,
            environment=environment,
            force_json=settings.logging.json_output,
        )
    except OSError as exc:
        # An unwritable LOG_FILE_PATH must not keep the service from starting.
        logging.getLogger(__name__).error(
            "Could not apply logging settings: %s", exc
        )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger configured for the project."""
    return structlog.get_logger(name)
