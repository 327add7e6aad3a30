"""
Health domain entities.

Value objects describing whether the home-automation hub and the payments
provider are usable, and why not when they are not.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


class ServiceStatus(str, Enum):
    """High-level availability for a dependency or the system."""

    UP = "up"
    DEGRADED = "degraded"
    DOWN = "down"
    UNKNOWN = "unknown"

    @classmethod
    def from_http_response(
        cls, status_code: int, content_type: str = ""
    ) -> "ServiceStatus":
        """
        Classify a health check response.

        An HTML page means a tunnel answered instead of the service, so it
        counts as down whatever its status code. 4xx (typically a rejected
        credential) means reachable but unusable.
        """
        if status_code >= 500 or "text/html" in (content_type or ""):
            return cls.DOWN
        if status_code >= 400:
            return cls.DEGRADED
        return cls.UP


class CheckFailure(str, Enum):
    """Why a dependency is not fully usable."""

    NOT_CONFIGURED = "not_configured"
    TUNNEL_PAGE = "tunnel_page"
    CREDENTIALS_REJECTED = "credentials_rejected"
    CLIENT_ERROR = "client_error"
    UPSTREAM_ERROR = "upstream_error"
    TIMEOUT = "timeout"
    UNREACHABLE = "unreachable"

    @classmethod
    def from_http_response(
        cls, status_code: int, content_type: str = ""
    ) -> Optional["CheckFailure"]:
        if "text/html" in (content_type or ""):
            return cls.TUNNEL_PAGE
        if status_code in (401, 403):
            return cls.CREDENTIALS_REJECTED
        if status_code >= 500:
            return cls.UPSTREAM_ERROR
        if status_code >= 400:
            return cls.CLIENT_ERROR
        return None


@dataclass(slots=True)
class DependencyStatus:
    """Health status for a single external dependency."""

    name: str
    status: ServiceStatus
    reason: Optional[CheckFailure] = None
    message: Optional[str] = None
    checked_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    latency_ms: Optional[float] = None
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class SystemHealth:
    """Aggregated health for the application."""

    status: ServiceStatus
    dependencies: List[DependencyStatus] = field(default_factory=list)

    @classmethod
    def aggregate(cls, dependencies: List[DependencyStatus]) -> "SystemHealth":
        """Down wins over degraded, degraded over unknown, unknown over up."""
        statuses = {dependency.status for dependency in dependencies}
        for candidate in (
            ServiceStatus.DOWN,
            ServiceStatus.DEGRADED,
            ServiceStatus.UNKNOWN,
        ):
            if candidate in statuses:
                return cls(status=candidate, dependencies=dependencies)
        return cls(status=ServiceStatus.UP, dependencies=dependencies)

    def dependency(self, name: str) -> Optional[DependencyStatus]:
        return next((dep for dep in self.dependencies if dep.name == name), None)
