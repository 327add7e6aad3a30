"""
Domain Entities Package

This package contains the core domain entities and error taxonomy.
"""

from .device import (
    CONTROLLABLE_DOMAINS,
    DeviceCommand,
    DeviceDomain,
    DeviceSnapshot,
    EntityState,
    ServiceCall,
    normalize_state,
    parse_entity_id,
    resolve_service,
)
from .errors import (
    AuthError,
    CiphertextGenerationError,
    CircleApiError,
    CommandError,
    CommandInProgressError,
    ConfigurationError,
    DomainError,
    EntitySecretError,
    HttpError,
    InvalidEntityIdError,
    NetworkError,
    UnsupportedCommandError,
)
from .health import CheckFailure, DependencyStatus, ServiceStatus, SystemHealth
from .proxy import ProxyRequest, UpstreamResponse
from .wallet import WalletSet

__all__ = [
    "CONTROLLABLE_DOMAINS",
    "DeviceCommand",
    "DeviceDomain",
    "DeviceSnapshot",
    "EntityState",
    "ServiceCall",
    "normalize_state",
    "parse_entity_id",
    "resolve_service",
    "AuthError",
    "CiphertextGenerationError",
    "CircleApiError",
    "CommandError",
    "CommandInProgressError",
    "ConfigurationError",
    "DomainError",
    "EntitySecretError",
    "HttpError",
    "InvalidEntityIdError",
    "NetworkError",
    "UnsupportedCommandError",
    "DependencyStatus",
    "CheckFailure",
    "ServiceStatus",
    "SystemHealth",
    "ProxyRequest",
    "UpstreamResponse",
    "WalletSet",
]
