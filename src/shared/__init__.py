"""
Shared module - Cross-cutting concerns / Shared Layer

This module provides shared utilities, constants, and enums that are used
across multiple layers of the application.

Its primary responsibilities include:
- Defining cross-layer constants (environment names, log levels, provider paths)
- Configuring structured logging
- Resolving Docker-style secret files into environment variables

It must not depend on Infrastructure or Frameworks beyond logging.
"""

from .consts import (
    CIRCLE_API_BASE_URL,
    CIRCLE_PUBLIC_KEY_PATH,
    CIRCLE_WALLET_SETS_PATH,
    NGROK_SKIP_BROWSER_WARNING,
    EnumEnvironment,
    EnumLogLevel,
)
from .logging import configure_logging, get_logger, update_logging_from_settings

__all__ = [
    "CIRCLE_API_BASE_URL",
    "CIRCLE_PUBLIC_KEY_PATH",
    "CIRCLE_WALLET_SETS_PATH",
    "NGROK_SKIP_BROWSER_WARNING",
    "EnumEnvironment",
    "EnumLogLevel",
    "configure_logging",
    "get_logger",
    "update_logging_from_settings",
]
