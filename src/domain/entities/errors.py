"""
Domain Errors

Error taxonomy shared by the device-control and payments-proxy paths:

- ``ConfigurationError``: missing or malformed credentials; terminal, never retried.
- ``NetworkError``: connectivity-class failure; degrades connectivity status.
- ``HttpError``: non-2xx application response; surfaced, not retried.
- ``CommandError``: a device command failed; always rolls back the optimistic state.
"""

from typing import Any, Dict, Optional


class DomainError(Exception):
    """Base class for domain errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ConfigurationError(DomainError):
    """Raised when a required setting (host, entity id, credential) is missing."""


class EntitySecretError(ConfigurationError):
    """Raised when the operator entity secret is not a 64-character hex string."""


class NetworkError(DomainError):
    """Raised when the remote service cannot be reached."""

    def __init__(
        self,
        message: str,
        *,
        timeout: bool = False,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.timeout = timeout


class HttpError(DomainError):
    """Raised when the remote service answers with a non-2xx status."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        payload: Any = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.status_code = status_code
        self.payload = payload


class AuthError(HttpError):
    """Raised on 401/403 responses."""


class CircleApiError(HttpError):
    """Raised when the payments provider rejects a request."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[int] = None,
        payload: Any = None,
    ):
        super().__init__(message, status_code=status_code, payload=payload)
        self.code = code


class CommandError(DomainError):
    """Raised when a device command fails; wraps the underlying cause."""

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.cause = cause


class CommandInProgressError(DomainError):
    """Raised when a command is issued while another one is still in flight."""


class UnsupportedCommandError(DomainError):
    """Raised when a command does not apply to the entity domain."""


class CiphertextGenerationError(DomainError):
    """Raised when the entity secret ciphertext cannot be produced."""


class InvalidEntityIdError(DomainError):
    """Raised when an entity id does not follow the ``domain.object_id`` convention."""
